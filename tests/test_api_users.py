"""Tests for user administration endpoints."""
import uuid
from sqlalchemy import select

from almoxarifado.core.security import verify_password
from almoxarifado.models import AuditLog, User


class TestUserAdministration:
    """Tests for /api/v1/users."""

    def test_create_defaults_to_operator(self, client, test_db, admin_headers):
        response = client.post(
            "/api/v1/users",
            json={"email": "Nova.Pessoa@example.com", "name": "Nova Pessoa", "password": "abc12345"},
            headers=admin_headers
        )

        assert response.status_code == 201
        data = response.json()
        assert data["role"] == "OPERATOR"
        assert data["email"] == "nova.pessoa@example.com"

        entry = test_db.scalars(select(AuditLog).where(AuditLog.action == "USER_CREATED")).one()
        assert entry.entity_id == data["id"]
        assert entry.ip_address == "testclient"

    def test_duplicate_email_conflict(self, client, operator_user, admin_headers):
        response = client.post(
            "/api/v1/users",
            json={"email": operator_user.email, "name": "Outra", "password": "abc12345"},
            headers=admin_headers
        )
        assert response.status_code == 409

    def test_short_password_rejected(self, client, admin_headers):
        response = client.post(
            "/api/v1/users",
            json={"email": "curta@example.com", "name": "Curta", "password": "123"},
            headers=admin_headers
        )
        assert response.status_code == 422

    def test_update_role_and_deactivate(self, client, test_db, operator_user, admin_headers, test_password):
        response = client.patch(
            f"/api/v1/users/{operator_user.id}",
            json={"role": "VIEWER", "is_active": False},
            headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["role"] == "VIEWER"
        assert response.json()["is_active"] is False

        login = client.post(
            "/api/v1/auth/login", json={"email": operator_user.email, "password": test_password}
        )
        assert login.status_code == 401

    def test_reset_password(self, client, test_db, operator_user, admin_headers):
        response = client.post(
            f"/api/v1/users/{operator_user.id}/reset-password",
            json={"new_password": "trocada123"},
            headers=admin_headers
        )

        assert response.status_code == 204
        test_db.refresh(operator_user)
        assert verify_password("trocada123", operator_user.password_hash)
        assert test_db.scalars(select(AuditLog).where(AuditLog.action == "PASSWORD_RESET")).one()

    def test_unknown_user(self, client, admin_headers):
        response = client.patch(f"/api/v1/users/{uuid.uuid4()}", json={"name": "X"}, headers=admin_headers)
        assert response.status_code == 404

    def test_list_users(self, client, admin_user, viewer_user, admin_headers):
        response = client.get("/api/v1/users", headers=admin_headers)

        assert response.status_code == 200
        assert {u["email"] for u in response.json()} == {admin_user.email, viewer_user.email}
        assert all("password_hash" not in u for u in response.json())
