"""
User administration endpoint tests
"""

from blog_api.models.post import PostStatus

USERS_URL = "/api/users"


class TestListUsers:
    def test_admin_lists_users(self, client, admin, author, other_user, headers_for):
        response = client.get(USERS_URL, headers=headers_for(admin))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["pagination"]["totalItems"] == 3
        assert {user["username"] for user in data["users"]} == {"admin", "author", "other"}

    def test_filters(self, client, admin, author, make_user, headers_for):
        make_user("dormant", is_active=False)

        inactive = client.get(USERS_URL, params={"isActive": "false"}, headers=headers_for(admin))
        admins = client.get(USERS_URL, params={"role": "admin"}, headers=headers_for(admin))
        search = client.get(USERS_URL, params={"search": "AUTH"}, headers=headers_for(admin))

        assert [u["username"] for u in inactive.json()["data"]["users"]] == ["dormant"]
        assert [u["username"] for u in admins.json()["data"]["users"]] == ["admin"]
        assert [u["username"] for u in search.json()["data"]["users"]] == ["author"]

    def test_search_treats_underscore_literally(self, client, admin, make_user, headers_for):
        make_user("jane_doe")
        make_user("janexdoe")

        response = client.get(USERS_URL, params={"search": "e_d"}, headers=headers_for(admin))

        assert [u["username"] for u in response.json()["data"]["users"]] == ["jane_doe"]

    def test_regular_user_is_forbidden(self, client, author, headers_for):
        response = client.get(USERS_URL, headers=headers_for(author))
        assert response.status_code == 403

    def test_stats(self, client, admin, author, other_user, make_user, make_post, headers_for):
        make_user("dormant", is_active=False)
        make_post(author)
        make_post(author)
        make_post(other_user)

        response = client.get(f"{USERS_URL}/stats/overview", headers=headers_for(admin))

        assert response.status_code == 200
        stats = response.json()["data"]
        assert stats["totalUsers"] == 4
        assert stats["activeUsers"] == 3
        assert stats["inactiveUsers"] == 1
        assert stats["newUsers"] == 4
        roles = {item["role"]: item["count"] for item in stats["usersByRole"]}
        assert roles == {"admin": 1, "user": 3}
        assert stats["topUsers"][0] == {"id": author.id, "username": "author", "postCount": 2}
        assert len(stats["topUsers"]) == 2


class TestGetUser:
    def test_user_reads_self(self, client, author, make_post, headers_for):
        make_post(author)

        response = client.get(f"{USERS_URL}/{author.id}", headers=headers_for(author))

        assert response.status_code == 200
        user = response.json()["data"]["user"]
        assert user["username"] == "author"
        assert user["postsCount"] == 1

    def test_user_cannot_read_others(self, client, author, other_user, headers_for):
        response = client.get(f"{USERS_URL}/{other_user.id}", headers=headers_for(author))

        assert response.status_code == 403
        assert response.json()["error"]["message"] == "Access denied. You can only view your own profile."

    def test_admin_reads_anyone(self, client, admin, author, headers_for):
        response = client.get(f"{USERS_URL}/{author.id}", headers=headers_for(admin))
        assert response.status_code == 200

    def test_missing_user(self, client, admin, headers_for):
        response = client.get(f"{USERS_URL}/9999", headers=headers_for(admin))

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "User not found"


class TestUpdateUser:
    def test_user_updates_own_profile(self, client, author, headers_for):
        response = client.put(
            f"{USERS_URL}/{author.id}",
            json={"profile": {"lastName": "Lovelace"}},
            headers=headers_for(author),
        )

        assert response.status_code == 200
        assert response.json()["data"]["user"]["profile"]["lastName"] == "Lovelace"

    def test_user_cannot_change_own_role(self, client, author, headers_for):
        response = client.put(
            f"{USERS_URL}/{author.id}", json={"role": "admin"}, headers=headers_for(author)
        )

        assert response.status_code == 403
        me = client.get("/api/auth/me", headers=headers_for(author)).json()["data"]["user"]
        assert me["role"] == "user", "Role must be unchanged after a denied update"

    def test_user_cannot_change_active_flag(self, client, author, headers_for):
        response = client.put(
            f"{USERS_URL}/{author.id}", json={"isActive": False}, headers=headers_for(author)
        )
        assert response.status_code == 403

    def test_user_cannot_update_others(self, client, author, other_user, headers_for):
        response = client.put(
            f"{USERS_URL}/{other_user.id}",
            json={"profile": {"bio": "hacked"}},
            headers=headers_for(author),
        )
        assert response.status_code == 403

    def test_admin_changes_role(self, client, admin, author, headers_for):
        response = client.put(
            f"{USERS_URL}/{author.id}", json={"role": "moderator"}, headers=headers_for(admin)
        )

        assert response.status_code == 200
        assert response.json()["data"]["user"]["role"] == "moderator"


class TestDeleteUser:
    def test_delete_cascades_posts_and_likes(self, client, admin, author, other_user, make_post, headers_for):
        post_id = make_post(author, PostStatus.PUBLISHED).id
        survivor_id = make_post(other_user, PostStatus.PUBLISHED).id
        author_id = author.id
        client.post(f"/api/posts/{post_id}/like", headers=headers_for(other_user))
        client.post(f"/api/posts/{survivor_id}/like", headers=headers_for(author))

        response = client.delete(f"{USERS_URL}/{author_id}", headers=headers_for(admin))

        assert response.status_code == 200
        assert response.json()["message"] == "User and associated posts deleted successfully"
        assert client.get(f"/api/posts/{post_id}").status_code == 404
        remaining = client.get(f"/api/posts/{survivor_id}").json()["data"]["post"]
        assert remaining["likeCount"] == 0, "Likes by the deleted user are withdrawn"
        assert client.get(f"{USERS_URL}/{author_id}", headers=headers_for(admin)).status_code == 404

    def test_admin_cannot_delete_self(self, client, admin, headers_for):
        response = client.delete(f"{USERS_URL}/{admin.id}", headers=headers_for(admin))

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "You cannot delete your own account"

    def test_regular_user_cannot_delete(self, client, author, other_user, headers_for):
        response = client.delete(f"{USERS_URL}/{other_user.id}", headers=headers_for(author))
        assert response.status_code == 403


class TestActivation:
    def test_deactivate_blocks_existing_tokens(self, client, admin, author, headers_for):
        headers = headers_for(author)

        response = client.post(f"{USERS_URL}/{author.id}/deactivate", headers=headers_for(admin))

        assert response.status_code == 200
        assert response.json()["data"]["user"]["isActive"] is False
        assert client.get("/api/auth/me", headers=headers).status_code == 401

    def test_activate_restores_access(self, client, admin, make_user, headers_for):
        user = make_user("dormant", is_active=False)

        response = client.post(f"{USERS_URL}/{user.id}/activate", headers=headers_for(admin))

        assert response.status_code == 200
        assert response.json()["message"] == "User activated successfully"
        assert client.get("/api/auth/me", headers=headers_for(user)).status_code == 200

    def test_admin_cannot_deactivate_self(self, client, admin, headers_for):
        response = client.post(f"{USERS_URL}/{admin.id}/deactivate", headers=headers_for(admin))
        assert response.status_code == 400

    def test_admin_cannot_deactivate_self_through_update(self, client, admin, headers_for):
        headers = headers_for(admin)

        response = client.put(f"{USERS_URL}/{admin.id}", json={"isActive": False}, headers=headers)

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "You cannot deactivate your own account"
        assert client.get("/api/auth/me", headers=headers).status_code == 200


class TestUserPosts:
    def test_public_list_of_published_posts(self, client, author, make_post):
        published = make_post(author, PostStatus.PUBLISHED)
        make_post(author, PostStatus.DRAFT)

        response = client.get(f"{USERS_URL}/{author.id}/posts")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["author"] == {"id": author.id, "username": "author"}
        assert [post["id"] for post in data["posts"]] == [published.id]

    def test_unknown_user(self, client):
        assert client.get(f"{USERS_URL}/9999/posts").status_code == 404
