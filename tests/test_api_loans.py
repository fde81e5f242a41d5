"""Tests for loan ("maleta") API endpoints."""
import uuid
from datetime import timedelta

from freezegun import freeze_time

from almoxarifado.core.database import utcnow
from almoxarifado.services import loans


def _due(days=7):
    return (utcnow().date() + timedelta(days=days)).isoformat()


class TestLoanEndpoints:
    """Tests for /api/v1/maletas."""

    def _create(self, client, headers, custodian, lines, due=None):
        return client.post(
            "/api/v1/maletas",
            json={
                "custodian_id": str(custodian.id),
                "due_date": due or _due(),
                "notes": "Instalacao cliente",
                "lines": lines
            },
            headers=headers
        )

    def test_create_returns_id(self, client, test_db, item, custodian, operator_headers):
        response = self._create(
            client, operator_headers, custodian, [{"item_id": str(item.id), "quantity": 3}]
        )

        assert response.status_code == 201
        assert set(response.json()) == {"id"}
        test_db.refresh(item)
        assert item.quantity == 7

    def test_create_insufficient_stock(self, client, test_db, item, make_item, custodian, operator_headers):
        other = make_item(name="Osciloscopio", quantity=1)

        response = self._create(
            client, operator_headers, custodian,
            [
                {"item_id": str(item.id), "quantity": 2},
                {"item_id": str(other.id), "quantity": 2},
            ]
        )

        assert response.status_code == 409
        test_db.refresh(item)
        assert item.quantity == 10
        assert client.get("/api/v1/maletas", headers=operator_headers).json() == []

    def test_create_without_lines_rejected(self, client, custodian, operator_headers):
        response = self._create(client, operator_headers, custodian, [])
        assert response.status_code == 422

    def test_viewer_cannot_create(self, client, item, custodian, viewer_headers):
        response = self._create(
            client, viewer_headers, custodian, [{"item_id": str(item.id), "quantity": 1}]
        )
        assert response.status_code == 403

    def test_detail_and_return(self, client, test_db, item, custodian, operator_headers):
        loan_id = self._create(
            client, operator_headers, custodian,
            [{"item_id": str(item.id), "quantity": 3, "serial_number": "FLK-77"}]
        ).json()["id"]

        detail = client.get(f"/api/v1/maletas/{loan_id}", headers=operator_headers).json()
        assert detail["status"] == "open"
        assert detail["custodian_name"] == custodian.name
        assert detail["lines"][0]["item_name"] == item.name
        assert detail["lines"][0]["serial_number"] == "FLK-77"

        response = client.post(f"/api/v1/maletas/{loan_id}/return", headers=operator_headers)
        assert response.status_code == 204
        test_db.refresh(item)
        assert item.quantity == 10

        detail = client.get(f"/api/v1/maletas/{loan_id}", headers=operator_headers).json()
        assert detail["status"] == "returned"
        assert detail["return_date"] is not None

        again = client.post(f"/api/v1/maletas/{loan_id}/return", headers=operator_headers)
        assert again.status_code == 409
        test_db.refresh(item)
        assert item.quantity == 10

    def test_unknown_loan(self, client, operator_headers):
        response = client.get(f"/api/v1/maletas/{uuid.uuid4()}", headers=operator_headers)
        assert response.status_code == 404

    def test_list_filter_by_status(self, client, item, custodian, operator_headers):
        self._create(client, operator_headers, custodian, [{"item_id": str(item.id), "quantity": 1}])

        open_loans = client.get("/api/v1/maletas?status=open", headers=operator_headers).json()
        returned = client.get("/api/v1/maletas?status=returned", headers=operator_headers).json()

        assert len(open_loans) == 1
        assert open_loans[0]["custodian_email"] == custodian.email
        assert returned == []

    def test_stats_uses_camel_case_key(self, client, item, custodian, operator_headers):
        self._create(client, operator_headers, custodian, [{"item_id": str(item.id), "quantity": 4}])

        response = client.get("/api/v1/maletas/stats", headers=operator_headers)

        assert response.status_code == 200
        assert response.json() == {"abertas": 1, "atrasadas": 0, "itensEmprestados": 4}

    def test_stats_reflect_overdue(self, client, test_db, item, custodian, operator_user, operator_headers):
        """A loan due yesterday counts as overdue, not open."""
        today = utcnow().date()
        with freeze_time(today - timedelta(days=3)):
            loans.create_loan(
                test_db, custodian.id, today - timedelta(days=1), operator_user.id,
                lines=[{"item_id": item.id, "quantity": 2}]
            )

        response = client.get("/api/v1/maletas/stats", headers=operator_headers)

        assert response.json() == {"abertas": 0, "atrasadas": 1, "itensEmprestados": 2}

    def test_sweep_endpoint(self, client, test_db, item, custodian, operator_user, operator_headers):
        today = utcnow().date()
        with freeze_time(today - timedelta(days=5)):
            loans.create_loan(
                test_db, custodian.id, today - timedelta(days=2), operator_user.id,
                lines=[{"item_id": item.id, "quantity": 1}]
            )

        first = client.post("/api/v1/maletas/sweep", headers=operator_headers)
        second = client.post("/api/v1/maletas/sweep", headers=operator_headers)

        assert first.json() == {"updated": 1}
        assert second.json() == {"updated": 0}
