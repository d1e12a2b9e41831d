"""MemoryStorage specifics: shared id counter, copies, isolation."""
import pytest
from pydantic import ValidationError

from database import MemoryStorage
from database.schemas import (
    PatientCreate, ProductCreate, ProductPatch, UserCreate, UserPatch,
)


def _product(code="ARM-001"):
    return ProductCreate(code=code, name="Oakley Holbrook", category="armazones",
                         price=2100)


def test_ids_shared_across_collections(memory_storage):
    product = memory_storage.products.create(_product())
    patient = memory_storage.patients.create(PatientCreate(name="Ana"))
    assert (product.id, patient.id) == (1, 2)


def test_ids_not_reused_after_delete(memory_storage):
    first = memory_storage.products.create(_product())
    memory_storage.products.delete(first.id)
    second = memory_storage.products.create(_product("ARM-002"))
    assert second.id == first.id + 1


def test_instances_are_isolated():
    a, b = MemoryStorage(), MemoryStorage()
    a.products.create(_product())
    assert b.products.list() == []
    assert b.products.create(_product()).id == 1


def test_returned_records_are_copies(memory_storage):
    product = memory_storage.products.create(_product())
    product.stock = 99
    listed = memory_storage.products.list()
    listed[0].name = "changed"

    stored = memory_storage.products.get(product.id)
    assert stored.stock == 0
    assert stored.name == "Oakley Holbrook"


def test_update_does_not_alias_previous_result(memory_storage):
    product = memory_storage.products.create(_product())
    before = memory_storage.products.get(product.id)
    memory_storage.products.update(product.id, ProductPatch(stock=5))
    assert before.stock == 0
    assert memory_storage.products.get(product.id).stock == 5


def test_unique_fields_not_enforced_in_memory(memory_storage):
    memory_storage.products.create(_product())
    memory_storage.products.create(_product())
    assert len(memory_storage.products.list()) == 2


def test_backend_name(memory_storage):
    assert memory_storage.backend == "memory"


def test_update_validates_merged_record(memory_storage):
    product = memory_storage.products.create(_product())
    # bypasses patch validation; the store still refuses the null
    patch = ProductPatch.model_construct(stock_status=None)
    with pytest.raises(ValidationError):
        memory_storage.products.update(product.id, patch)
    assert memory_storage.products.get(product.id) == product


def test_update_keeps_user_password(memory_storage):
    user = memory_storage.users.create(
        UserCreate(username="admin", password="secret", name="Admin")
    )
    memory_storage.users.update(user.id, UserPatch(name="Root"))
    stored = memory_storage.users.get(user.id)
    assert stored.name == "Root"
    assert stored.password == "secret"
