"""
Test-environment utility endpoint tests
"""

TEST_URL = "/api/test"


class TestUtilities:
    def test_seed_data_is_idempotent(self, client):
        first = client.post(f"{TEST_URL}/seed-data")
        second = client.post(f"{TEST_URL}/seed-data")

        assert first.status_code == 200
        assert second.status_code == 200
        slugs = [item["slug"] for item in client.get("/api/categories").json()["data"]["categories"]]
        assert slugs == ["business", "health", "lifestyle", "science", "technology"]

    def test_seeded_users_can_log_in(self, client):
        client.post(f"{TEST_URL}/seed-data")

        user = client.post("/api/auth/login", json={"email": "test@example.com", "password": "Test123!"})
        admin = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "Admin123!"})

        assert user.json()["data"]["user"]["role"] == "user"
        assert admin.json()["data"]["user"]["role"] == "admin"

    def test_clear_db_removes_users_and_posts(self, client, author, make_post):
        make_post(author)

        response = client.post(f"{TEST_URL}/clear-db")

        assert response.json()["message"] == "Database cleared successfully"
        login = client.post("/api/auth/login", json={"email": "author@example.com", "password": "Passw0rd!"})
        assert login.status_code == 401

    def test_make_admin(self, client, author, headers_for):
        response = client.post(f"{TEST_URL}/make-admin", json={"email": "author@example.com"})

        assert response.status_code == 200
        assert response.json()["data"]["user"]["role"] == "admin"
        assert client.get("/api/users", headers=headers_for(author)).status_code == 200

    def test_get_token(self, client, author):
        token = client.post(f"{TEST_URL}/get-token", json={"email": "author@example.com"}).json()["data"]["token"]

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

        assert me.json()["data"]["user"]["username"] == "author"

    def test_unknown_email(self, client):
        response = client.post(f"{TEST_URL}/make-admin", json={"email": "ghost@example.com"})
        assert response.status_code == 404
