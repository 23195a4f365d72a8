"""
Category endpoint tests
"""

CATEGORIES_URL = "/api/categories"


class TestReadCategories:
    def test_lists_active_categories_by_name(self, client, db, category):
        from blog_api.models.category import Category

        db.add_all([
            Category(name="Business", slug="business"),
            Category(name="Hidden", slug="hidden", is_active=False),
        ])
        db.commit()

        response = client.get(CATEGORIES_URL)

        assert response.status_code == 200
        names = [item["name"] for item in response.json()["data"]["categories"]]
        assert names == ["Business", "Technology"]

    def test_get_by_slug(self, client, category):
        response = client.get(f"{CATEGORIES_URL}/technology")

        assert response.status_code == 200
        data = response.json()["data"]["category"]
        assert data["id"] == category.id
        assert data["isActive"] is True

    def test_unknown_slug(self, client):
        response = client.get(f"{CATEGORIES_URL}/nothing-here")

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Category not found"


class TestWriteCategories:
    def test_admin_creates_category_with_derived_slug(self, client, admin, headers_for):
        response = client.post(
            CATEGORIES_URL,
            json={"name": "Machine Learning", "description": "Models and data"},
            headers=headers_for(admin),
        )

        assert response.status_code == 201, response.text
        assert response.json()["data"]["category"]["slug"] == "machine-learning"

    def test_duplicate_name(self, client, admin, category, headers_for):
        response = client.post(CATEGORIES_URL, json={"name": "Technology"}, headers=headers_for(admin))

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Name already exists"

    def test_unknown_parent(self, client, admin, headers_for):
        response = client.post(
            CATEGORIES_URL, json={"name": "Orphan", "parentId": 999}, headers=headers_for(admin)
        )

        assert response.status_code == 400
        assert response.json()["error"]["details"][0]["field"] == "parentId"

    def test_nested_category(self, client, admin, category, headers_for):
        response = client.post(
            CATEGORIES_URL,
            json={"name": "Gadgets", "parentId": category.id},
            headers=headers_for(admin),
        )
        assert response.json()["data"]["category"]["parentId"] == category.id

    def test_regular_user_cannot_create(self, client, author, headers_for):
        response = client.post(CATEGORIES_URL, json={"name": "Spam"}, headers=headers_for(author))
        assert response.status_code == 403

    def test_update_keeps_slug(self, client, admin, category, headers_for):
        response = client.put(
            f"{CATEGORIES_URL}/{category.id}",
            json={"name": "Tech", "isActive": False},
            headers=headers_for(admin),
        )

        assert response.status_code == 200
        data = response.json()["data"]["category"]
        assert data["name"] == "Tech"
        assert data["slug"] == "technology"
        assert data["isActive"] is False
        assert client.get(CATEGORIES_URL).json()["data"]["categories"] == []

    def test_category_cannot_be_its_own_parent(self, client, admin, category, headers_for):
        response = client.put(
            f"{CATEGORIES_URL}/{category.id}", json={"parentId": category.id}, headers=headers_for(admin)
        )
        assert response.status_code == 400

    def test_parent_cycle_is_rejected(self, client, admin, category, headers_for):
        headers = headers_for(admin)
        child = client.post(
            CATEGORIES_URL, json={"name": "Gadgets", "parentId": category.id}, headers=headers
        ).json()["data"]["category"]
        grandchild = client.post(
            CATEGORIES_URL, json={"name": "Phones", "parentId": child["id"]}, headers=headers
        ).json()["data"]["category"]

        direct = client.put(
            f"{CATEGORIES_URL}/{category.id}", json={"parentId": child["id"]}, headers=headers
        )
        indirect = client.put(
            f"{CATEGORIES_URL}/{category.id}", json={"parentId": grandchild["id"]}, headers=headers
        )

        for response in (direct, indirect):
            assert response.status_code == 400
            assert response.json()["error"]["details"] == [
                {"field": "parentId", "message": "A category cannot be nested under itself"}
            ]
        unchanged = client.get(f"{CATEGORIES_URL}/technology").json()["data"]["category"]
        assert unchanged["parentId"] is None

    def test_inactive_category_rejects_new_posts(self, client, admin, author, category, headers_for):
        client.put(f"{CATEGORIES_URL}/{category.id}", json={"isActive": False}, headers=headers_for(admin))

        response = client.post(
            "/api/posts",
            json={"title": "Hello there", "content": "Body text that is long enough.", "category": category.id},
            headers=headers_for(author),
        )

        assert response.status_code == 400
        assert response.json()["error"]["details"][0]["field"] == "category"
