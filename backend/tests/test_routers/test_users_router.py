"""Integration tests for /api/users endpoints."""


class TestCurrentUser:
    def test_me(self, client, auth_headers):
        response = client.get("/api/users/me", headers=auth_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["email"] == "maria@civicsync.org"
        assert data["full_name"] == "Maria Lopez"
        assert data["role"] == "user"

    def test_me_requires_token(self, client):
        response = client.get("/api/users/me")
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_update_preferences(self, client, auth_headers):
        response = client.put(
            "/api/users/me",
            json={"phone": "555-0101", "notify_email": False},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["phone"] == "555-0101"
        assert response.json()["notify_email"] is False

    def test_first_session_creates_user(self, client, db_session):
        from authentication.auth import create_access_token

        token = create_access_token(
            data={"sub": "user_newcomer", "email": "lina@civicsync.org"}
        )
        response = client.get(
            "/api/users/me", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 200
        assert response.json()["external_id"] == "user_newcomer"


class TestRewardsEndpoints:
    def test_get_creates_starting_document(self, client, auth_headers):
        response = client.get("/api/users/rewards", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["points"] == 25
        assert data["level"] == 1
        newcomer = next(b for b in data["badges"] if b["id"] == "newcomer")
        assert newcomer["unlocked"] is True

    def test_citizen_cannot_add_points(self, client, auth_headers):
        response = client.patch(
            "/api/users/rewards",
            json={"action": "ADD_POINTS", "value": 500},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert "ADD_POINTS" in response.json()["error"]

    def test_lifecycle_actions_are_not_exposed(self, client, admin_auth_headers):
        response = client.patch(
            "/api/users/rewards",
            json={"action": "SUBMITTED_COMPLAINT"},
            headers=admin_auth_headers,
        )
        assert response.status_code == 400

    def test_citizen_updates_stats(self, client, auth_headers, test_complaint):
        response = client.patch(
            "/api/users/rewards",
            json={"action": "UPDATE_STATS"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["points_added"] == 0
        assert data["rewards"]["stats"]["total_complaints"] == 1

    def test_unknown_badge(self, client, auth_headers):
        response = client.patch(
            "/api/users/rewards",
            json={"action": "UNLOCK_BADGE", "badge_id": "moon-walker"},
            headers=auth_headers,
        )
        assert response.status_code == 404


class TestRoleAndCount:
    def test_role_for_super_admin_email(self, client, auth_headers):
        response = client.get(
            "/api/users/role",
            params={"email": "Chief@CivicSync.org"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["role"] == "super-admin"
        assert data["is_admin"] is True
        assert data["is_super_admin"] is True

    def test_role_for_unknown_email(self, client, auth_headers):
        response = client.get(
            "/api/users/role",
            params={"email": "nobody@civicsync.org"},
            headers=auth_headers,
        )
        assert response.json()["role"] is None
        assert response.json()["is_admin"] is False

    def test_count_requires_admin(self, client, auth_headers):
        assert client.get("/api/users/count", headers=auth_headers).status_code == 403

    def test_count(self, client, admin_auth_headers, test_user):
        response = client.get("/api/users/count", headers=admin_auth_headers)
        assert response.status_code == 200
        assert response.json() == {"count": 2}


class TestUserManagement:
    def test_citizen_cannot_view_others(self, client, auth_headers, other_user):
        response = client.get(f"/api/users/{other_user.id}", headers=auth_headers)
        assert response.status_code == 403

    def test_admin_promotes_user(self, client, admin_auth_headers, other_user):
        response = client.put(
            f"/api/users/{other_user.id}",
            json={"role": "admin"},
            headers=admin_auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["role"] == "admin"

    def test_super_admin_cannot_be_deleted(
        self, client, admin_auth_headers, super_admin_user
    ):
        response = client.delete(
            f"/api/users/{super_admin_user.id}", headers=admin_auth_headers
        )
        assert response.status_code == 403

    def test_admin_deletes_user(self, client, admin_auth_headers, other_user):
        response = client.delete(
            f"/api/users/{other_user.id}", headers=admin_auth_headers
        )
        assert response.status_code == 200
        assert (
            client.get(f"/api/users/{other_user.id}", headers=admin_auth_headers).status_code
            == 404
        )
