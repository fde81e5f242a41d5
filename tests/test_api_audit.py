"""Tests for the audit log endpoint."""


class TestAuditLogEndpoint:
    """Tests for /api/v1/audit-logs."""

    def test_newest_first_and_filtered(self, client, item, admin_headers):
        client.post(
            "/api/v1/movements",
            json={"item_id": str(item.id), "type": "ENTRY", "quantity": 1},
            headers=admin_headers
        )
        client.post("/api/v1/categories", json={"name": "Eletrica"}, headers=admin_headers)

        everything = client.get("/api/v1/audit-logs", headers=admin_headers).json()
        movements = client.get("/api/v1/audit-logs?entity=movements", headers=admin_headers).json()

        assert [e["action"] for e in everything] == ["CATEGORY_CREATED", "MOVEMENT_CREATED"]
        assert [e["action"] for e in movements] == ["MOVEMENT_CREATED"]
        assert movements[0]["details"]["quantity"] == 1
