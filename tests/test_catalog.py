"""Tests for categories, items and barcode generation."""
import uuid
import pytest
from freezegun import freeze_time
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from almoxarifado.error_handlers import DuplicateResourceError, ResourceNotFoundError
from almoxarifado.models import AuditLog
from almoxarifado.schemas.item import ItemCreate, ItemUpdate
from almoxarifado.services import catalog


class TestCategories:
    """Tests for category operations."""

    def test_create_and_list_with_counts(self, test_db, admin_user, make_item):
        tools = catalog.create_category(test_db, "Ferramentas", actor=admin_user)
        catalog.create_category(test_db, "Cabos", actor=admin_user)
        make_item(name="Chave de fenda", category=tools)
        make_item(name="Serra", category=tools, active=False)

        listed = {category.name: count for category, count in catalog.list_categories(test_db)}

        assert listed == {"Cabos": 0, "Ferramentas": 1}

    def test_duplicate_name_case_insensitive(self, test_db, admin_user):
        catalog.create_category(test_db, "Ferramentas", actor=admin_user)

        with pytest.raises(DuplicateResourceError):
            catalog.create_category(test_db, "ferramentas", actor=admin_user)

    def test_update_and_hide_inactive(self, test_db, category, admin_user):
        catalog.update_category(test_db, category.id, name="Ferramentas manuais", active=False, actor=admin_user)

        assert catalog.list_categories(test_db, include_inactive=False) == []
        assert catalog.get_category(test_db, category.id).name == "Ferramentas manuais"

    def test_unknown_category(self, test_db):
        with pytest.raises(ResourceNotFoundError):
            catalog.update_category(test_db, uuid.uuid4(), name="X")


class TestItems:
    """Tests for item operations."""

    @freeze_time("2026-05-01")
    def test_barcode_sequence_is_monotonic(self, test_db, operator_user):
        first = catalog.create_item(test_db, ItemCreate(name="Alicate"), actor=operator_user)
        second = catalog.create_item(test_db, ItemCreate(name="Martelo"), actor=operator_user)
        third = catalog.create_item(test_db, ItemCreate(name="Trena"), actor=operator_user)

        assert [first.barcode, second.barcode, third.barcode] == [
            "GCP-2026-00001",
            "GCP-2026-00002",
            "GCP-2026-00003",
        ]

    def test_sequence_restarts_each_year(self, test_db, operator_user):
        with freeze_time("2025-12-31"):
            catalog.create_item(test_db, ItemCreate(name="Alicate"), actor=operator_user)
        with freeze_time("2026-01-02"):
            item = catalog.create_item(test_db, ItemCreate(name="Martelo"), actor=operator_user)

        assert item.barcode == "GCP-2026-00001"

    def test_create_sets_initial_quantity_and_audits(self, test_db, category, operator_user):
        item = catalog.create_item(
            test_db,
            ItemCreate(name="Furadeira", brand="Bosch", quantity=4, min_quantity=2, category_id=category.id),
            actor=operator_user
        )

        assert item.quantity == 4
        assert item.active is True
        entry = test_db.scalars(select(AuditLog).where(AuditLog.action == "ITEM_CREATED")).one()
        assert entry.entity_id == str(item.id)

    def test_create_with_unknown_category(self, test_db, operator_user):
        with pytest.raises(ResourceNotFoundError):
            catalog.create_item(test_db, ItemCreate(name="Furadeira", category_id=uuid.uuid4()), actor=operator_user)

    def test_update_does_not_touch_quantity(self, test_db, item, operator_user):
        updated = catalog.update_item(test_db, item.id, ItemUpdate(location="Prateleira B2"), actor=operator_user)

        assert updated.location == "Prateleira B2"
        assert updated.quantity == 10
        assert "quantity" not in ItemUpdate.model_fields

    def test_update_schema_rejects_null_for_required_columns(self):
        with pytest.raises(PydanticValidationError):
            ItemUpdate(name=None)

        assert ItemUpdate(serial_number=None).model_dump(exclude_unset=True) == {"serial_number": None}

    def test_deactivate_is_soft(self, test_db, item, admin_user):
        catalog.deactivate_item(test_db, item.id, actor=admin_user)

        assert catalog.get_item(test_db, item.id).active is False
        assert catalog.list_items(test_db) == []
        assert len(catalog.list_items(test_db, include_inactive=True)) == 1

    def test_search_and_low_stock(self, test_db, make_item):
        make_item(name="Multimetro Fluke", quantity=2, min_quantity=5, serial_number="FLK-9")
        make_item(name="Cabo de rede", quantity=50, min_quantity=10, brand="Furukawa")

        assert [i.name for i in catalog.list_items(test_db, search="flk")] == ["Multimetro Fluke"]
        assert [i.name for i in catalog.list_items(test_db, search="furukawa")] == ["Cabo de rede"]
        assert [i.name for i in catalog.low_stock_items(test_db)] == ["Multimetro Fluke"]

    def test_unknown_item(self, test_db):
        with pytest.raises(ResourceNotFoundError):
            catalog.get_item(test_db, uuid.uuid4())


class TestCatalogEndpoints:
    """Tests for /api/v1/categories and /api/v1/items."""

    def test_category_crud(self, client, operator_headers, viewer_headers):
        created = client.post("/api/v1/categories", json={"name": "EPI"}, headers=operator_headers)
        assert created.status_code == 201

        duplicate = client.post("/api/v1/categories", json={"name": "epi"}, headers=operator_headers)
        assert duplicate.status_code == 409

        category_id = created.json()["id"]
        renamed = client.patch(
            f"/api/v1/categories/{category_id}", json={"name": "EPIs"}, headers=operator_headers
        )
        assert renamed.json()["name"] == "EPIs"

        listed = client.get("/api/v1/categories", headers=viewer_headers).json()
        assert [c["name"] for c in listed] == ["EPIs"]

    def test_item_lifecycle(self, client, category, operator_headers, admin_headers):
        created = client.post(
            "/api/v1/items",
            json={"name": "Capacete", "quantity": 12, "min_quantity": 12, "category_id": str(category.id)},
            headers=operator_headers
        )
        assert created.status_code == 201
        item = created.json()
        assert item["barcode"].startswith("GCP-")
        assert item["is_low_stock"] is True
        assert item["category"]["name"] == category.name

        patched = client.patch(
            f"/api/v1/items/{item['id']}", json={"min_quantity": 3}, headers=operator_headers
        ).json()
        assert patched["is_low_stock"] is False

        low = client.get("/api/v1/items?low_stock=true", headers=operator_headers).json()
        assert low == []

        deleted = client.delete(f"/api/v1/items/{item['id']}", headers=admin_headers)
        assert deleted.json()["active"] is False
        assert client.get(f"/api/v1/items/{item['id']}", headers=admin_headers).status_code == 200

    @pytest.mark.parametrize("field", ["name", "brand", "model", "location", "min_quantity"])
    def test_required_field_cannot_be_cleared(self, client, test_db, item, operator_headers, field):
        response = client.patch(f"/api/v1/items/{item.id}", json={field: None}, headers=operator_headers)

        assert response.status_code == 422
        test_db.refresh(item)
        assert item.name == "Multimetro Fluke"
        assert item.min_quantity == 5

    def test_optional_fields_can_be_cleared(self, client, test_db, item, operator_headers):
        item.serial_number = "FLK-1"
        item.condition = "good"
        item.photo_url = "https://fotos.example.com/flk.jpg"
        test_db.commit()

        response = client.patch(
            f"/api/v1/items/{item.id}",
            json={"serial_number": None, "category_id": None, "condition": None, "photo_url": None},
            headers=operator_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["serial_number"] is None
        assert data["category"] is None
        assert data["condition"] is None
        assert data["photo_url"] is None

    def test_store_failure_hides_driver_message(self, client, operator_headers, monkeypatch):
        def failing_barcode(db):
            raise OperationalError("SELECT items.barcode FROM items", {"secret": "s3cr3t"}, Exception("disk I/O error"))

        monkeypatch.setattr(catalog, "next_barcode", failing_barcode)

        response = client.post("/api/v1/items", json={"name": "Luva"}, headers=operator_headers)

        assert response.status_code == 500
        assert response.json()["details"] == {"operation": "create_item"}
        assert "SELECT" not in response.text
        assert "s3cr3t" not in response.text

    def test_negative_initial_quantity_rejected(self, client, operator_headers):
        response = client.post("/api/v1/items", json={"name": "Luva", "quantity": -1}, headers=operator_headers)
        assert response.status_code == 422

    def test_unknown_item_not_found(self, client, operator_headers):
        response = client.get(f"/api/v1/items/{uuid.uuid4()}", headers=operator_headers)
        assert response.status_code == 404
