"""Tests for API authentication and role gating."""
from datetime import timedelta
import pytest

from almoxarifado.core.security import create_access_token, create_refresh_token


class TestLogin:
    """Tests for /auth endpoints."""

    def test_valid_credentials_return_tokens(self, client, operator_user, test_password):
        response = client.post(
            "/api/v1/auth/login",
            json={"email": operator_user.email, "password": test_password}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["access_token"]
        assert data["refresh_token"]
        assert data["user"]["email"] == operator_user.email
        assert data["user"]["role"] == "OPERATOR"

    def test_email_is_case_insensitive(self, client, operator_user, test_password):
        response = client.post(
            "/api/v1/auth/login",
            json={"email": operator_user.email.upper(), "password": test_password}
        )
        assert response.status_code == 200

    def test_wrong_password_rejected(self, client, operator_user, test_password):
        response = client.post(
            "/api/v1/auth/login",
            json={"email": operator_user.email, "password": "wrong-password"}
        )

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_unknown_email_rejected(self, client, test_password):
        response = client.post(
            "/api/v1/auth/login",
            json={"email": "ninguem@example.com", "password": test_password}
        )
        assert response.status_code == 401

    def test_inactive_user_rejected(self, client, test_db, operator_user, test_password):
        operator_user.is_active = False
        test_db.commit()

        response = client.post(
            "/api/v1/auth/login",
            json={"email": operator_user.email, "password": test_password}
        )
        assert response.status_code == 401

    def test_me(self, client, viewer_user, viewer_headers):
        response = client.get("/api/v1/auth/me", headers=viewer_headers)

        assert response.status_code == 200
        assert response.json()["id"] == str(viewer_user.id)

    def test_refresh_issues_new_pair(self, client, operator_user):
        response = client.post(
            "/api/v1/auth/refresh",
            json={"refresh_token": create_refresh_token(subject=operator_user.id)}
        )

        assert response.status_code == 200
        assert response.json()["access_token"]

    def test_access_token_cannot_refresh(self, client, operator_user):
        response = client.post(
            "/api/v1/auth/refresh",
            json={"refresh_token": create_access_token(subject=operator_user.id)}
        )
        assert response.status_code == 401


class TestTokenChecks:
    """Tests for bearer token validation."""

    @pytest.mark.parametrize("endpoint", [
        "/api/v1/items",
        "/api/v1/movements",
        "/api/v1/maletas",
        "/api/v1/maletas/stats",
        "/api/v1/dashboard/summary",
    ])
    def test_endpoints_require_auth(self, client, endpoint):
        response = client.get(endpoint)
        assert response.status_code == 401, f"Endpoint {endpoint} should require auth"

    def test_malformed_token_rejected(self, client):
        response = client.get("/api/v1/items", headers={"Authorization": "Bearer invalid-token"})
        assert response.status_code == 401

    def test_expired_token_rejected(self, client, operator_user):
        token = create_access_token(subject=operator_user.id, expires_delta=timedelta(minutes=-5))
        response = client.get("/api/v1/items", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_refresh_token_is_not_an_access_token(self, client, operator_user):
        token = create_refresh_token(subject=operator_user.id)
        response = client.get("/api/v1/items", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_deactivated_user_token_rejected(self, client, test_db, operator_user, operator_headers):
        operator_user.is_active = False
        test_db.commit()

        response = client.get("/api/v1/items", headers=operator_headers)
        assert response.status_code == 401

    def test_health_is_public(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] in ("healthy", "degraded")


class TestRoles:
    """Tests for role gating."""

    def test_viewer_cannot_record_movement(self, client, item, viewer_headers):
        response = client.post(
            "/api/v1/movements",
            json={"item_id": str(item.id), "type": "ENTRY", "quantity": 1},
            headers=viewer_headers
        )

        assert response.status_code == 403
        assert response.json()["details"]["role"] == "VIEWER"

    def test_viewer_can_read(self, client, item, viewer_headers):
        response = client.get("/api/v1/items", headers=viewer_headers)
        assert response.status_code == 200

    def test_operator_cannot_manage_users(self, client, operator_headers):
        response = client.get("/api/v1/users", headers=operator_headers)
        assert response.status_code == 403

    def test_operator_cannot_read_audit_logs(self, client, operator_headers):
        response = client.get("/api/v1/audit-logs", headers=operator_headers)
        assert response.status_code == 403

    def test_only_admin_deactivates_items(self, client, item, operator_headers, admin_headers):
        assert client.delete(f"/api/v1/items/{item.id}", headers=operator_headers).status_code == 403
        assert client.delete(f"/api/v1/items/{item.id}", headers=admin_headers).status_code == 200


class TestPublicEndpoints:
    """Tests for endpoints outside /api/v1."""

    def test_root_is_public(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["api_v1"] == "/api/v1"
