"""Storage contract tests.

Run against both implementations through the parametrised ``storage``
fixture:
- round-trip: a created record reads back unchanged
- delete-once: the second delete reports False
- patches: empty patch is a no-op, untouched fields are preserved
- list membership, find_by and parent filtering of line items
"""
import pytest

from database import schemas

# resource path -> (store name, create schema, patch schema)
ENTITIES = {
    "products": ("products", schemas.ProductCreate, schemas.ProductPatch),
    "patients": ("patients", schemas.PatientCreate, schemas.PatientPatch),
    "appointments": ("appointments", schemas.AppointmentCreate, schemas.AppointmentPatch),
    "sales-orders": ("sales_orders", schemas.SalesOrderCreate, schemas.SalesOrderPatch),
    "sales-order-items": ("sales_order_items", schemas.SalesOrderItemCreate,
                          schemas.SalesOrderItemPatch),
    "purchase-orders": ("purchase_orders", schemas.PurchaseOrderCreate,
                        schemas.PurchaseOrderPatch),
    "purchase-order-items": ("purchase_order_items", schemas.PurchaseOrderItemCreate,
                             schemas.PurchaseOrderItemPatch),
    "consignments": ("consignments", schemas.ConsignmentCreate, schemas.ConsignmentPatch),
    "prescriptions": ("prescriptions", schemas.PrescriptionCreate,
                      schemas.PrescriptionPatch),
    "users": ("users", schemas.UserCreate, schemas.UserPatch),
}


def _create(storage, payloads, path, **overrides):
    store_name, create_model, _ = ENTITIES[path]
    data = create_model.model_validate({**payloads[path], **overrides})
    return storage.store(store_name).create(data)


# ============================================================
# Round trip
# ============================================================
class TestRoundTrip:
    """create() then get() returns the same record."""

    @pytest.mark.parametrize("path", sorted(ENTITIES))
    def test_get_returns_created_record(self, storage, payloads, path):
        store = storage.store(ENTITIES[path][0])
        created = _create(storage, payloads, path)
        assert created.id > 0

        fetched = store.get(created.id)
        assert fetched is not None
        assert fetched.model_dump() == created.model_dump()

    @pytest.mark.parametrize("path", sorted(ENTITIES))
    def test_created_record_keeps_sent_values(self, storage, payloads, path):
        _, create_model, _ = ENTITIES[path]
        sent = create_model.model_validate(payloads[path]).model_dump()
        created = _create(storage, payloads, path)
        for field, value in sent.items():
            assert getattr(created, field) == value

    def test_client_supplied_id_is_ignored(self, storage, payloads):
        data = schemas.PatientCreate.model_validate({**payloads["patients"], "id": 999})
        created = storage.patients.create(data)
        assert created.id != 999
        assert storage.patients.get(999) is None
        assert storage.patients.get(created.id).name == "María González"

    def test_ids_are_distinct(self, storage, payloads):
        first = _create(storage, payloads, "patients")
        second = _create(storage, payloads, "patients", name="Pedro Ruiz")
        assert first.id != second.id

    def test_get_missing_returns_none(self, storage):
        assert storage.products.get(424242) is None

    def test_defaults_applied(self, storage):
        product = storage.products.create(schemas.ProductCreate(
            code="LC-01", name="Acuvue Oasys", category="lentes_contacto", price=450,
        ))
        assert product.stock == 0
        assert product.stock_status == "normal"
        assert product.type == "propio"
        assert product.status == "activo"
        assert product.supplier is None


# ============================================================
# Delete
# ============================================================
class TestDelete:

    def test_delete_once(self, storage, payloads):
        patient = _create(storage, payloads, "patients")
        assert storage.patients.delete(patient.id) is True
        assert storage.patients.delete(patient.id) is False
        assert storage.patients.get(patient.id) is None

    def test_delete_missing(self, storage):
        assert storage.consignments.delete(424242) is False

    def test_delete_leaves_other_records(self, storage, payloads):
        keep = _create(storage, payloads, "products")
        drop = _create(storage, payloads, "products", code="ARM-002")
        storage.products.delete(drop.id)
        assert [p.id for p in storage.products.list()] == [keep.id]

    def test_delete_order_keeps_its_items(self, storage, payloads):
        order = _create(storage, payloads, "sales-orders")
        _create(storage, payloads, "sales-order-items", salesOrderId=order.id)
        storage.sales_orders.delete(order.id)
        # weak reference: items are not cascaded
        assert len(storage.sales_order_items.list_for_parent(order.id)) == 1


# ============================================================
# Update
# ============================================================
class TestUpdate:

    def test_empty_patch_is_noop(self, storage, payloads):
        product = _create(storage, payloads, "products")
        updated = storage.products.update(product.id, schemas.ProductPatch())
        assert updated.model_dump() == product.model_dump()
        assert storage.products.get(product.id).model_dump() == product.model_dump()

    def test_patch_preserves_other_fields(self, storage, payloads):
        product = _create(storage, payloads, "products")
        updated = storage.products.update(
            product.id, schemas.ProductPatch(stock=3, stock_status="bajo")
        )
        assert updated.stock == 3
        assert updated.stock_status == "bajo"
        assert updated.name == product.name
        assert updated.price == product.price
        assert updated.code == product.code

        stored = storage.products.get(product.id)
        assert stored.model_dump() == updated.model_dump()

    def test_patch_can_clear_optional_field(self, storage, payloads):
        patient = _create(storage, payloads, "patients")
        updated = storage.patients.update(
            patient.id, schemas.PatientPatch.model_validate({"email": None})
        )
        assert updated.email is None
        assert updated.phone == patient.phone

    def test_update_missing_returns_none(self, storage):
        assert storage.appointments.update(
            424242, schemas.AppointmentPatch(status="cancelada")
        ) is None

    def test_update_keeps_id(self, storage, payloads):
        order = _create(storage, payloads, "sales-orders")
        updated = storage.sales_orders.update(
            order.id, schemas.SalesOrderPatch(status="entregado")
        )
        assert updated.id == order.id
        assert updated.status == "entregado"


# ============================================================
# Listing and lookups
# ============================================================
class TestListing:

    def test_empty_store(self, storage):
        for name in storage.STORE_NAMES:
            assert storage.store(name).list() == []

    def test_list_contains_created_in_order(self, storage, payloads):
        created = [
            _create(storage, payloads, "products", code=f"ARM-{i:03d}")
            for i in range(1, 4)
        ]
        listed = storage.products.list()
        assert [p.id for p in listed] == [p.id for p in created]

    def test_find_by(self, storage, payloads):
        _create(storage, payloads, "users")
        admin = _create(storage, payloads, "users", username="admin", role="admin")
        found = storage.users.find_by("username", "admin")
        assert found is not None
        assert found.id == admin.id
        assert storage.users.find_by("username", "nadie") is None

    def test_list_for_parent(self, storage, payloads):
        first = _create(storage, payloads, "sales-orders")
        second = _create(storage, payloads, "sales-orders", orderNumber="SO-0002")
        a = _create(storage, payloads, "sales-order-items", salesOrderId=first.id)
        b = _create(storage, payloads, "sales-order-items", salesOrderId=first.id,
                    productId=2)
        _create(storage, payloads, "sales-order-items", salesOrderId=second.id)

        items = storage.sales_order_items.list_for_parent(first.id)
        assert [i.id for i in items] == [a.id, b.id]
        assert all(i.sales_order_id == first.id for i in items)

    def test_list_for_parent_without_items(self, storage):
        assert storage.purchase_order_items.list_for_parent(424242) == []

    def test_unknown_store_name(self, storage):
        with pytest.raises(KeyError):
            storage.store("frames")

    def test_stores_exposes_every_collection(self, storage):
        assert set(storage.stores()) == set(storage.STORE_NAMES)


# ============================================================
# Users
# ============================================================
class TestUsers:

    def test_password_kept_but_not_serialised(self, storage, payloads):
        user = _create(storage, payloads, "users")
        stored = storage.users.get(user.id)
        assert stored.password == "secret"
        assert "password" not in stored.model_dump()
        assert "password" not in stored.model_dump(by_alias=True, mode="json")
