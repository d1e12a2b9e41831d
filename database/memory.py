"""In-memory storage.

Map-backed implementation of the storage contract. Every collection is a
dict keyed by id, so ``list()`` returns records in insertion order.

One counter is shared by all collections: product #1 and patient #2 never
share a number. Ids are never compared across collections, so this is only
observable in the numbering.

Nothing is persisted; a new ``MemoryStorage`` starts empty, which makes it
the store of choice for tests and demos. Unique fields are not enforced
here; the HTTP layer checks them before writing.
"""
import itertools
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Type

from loguru import logger
from pydantic import BaseModel

from .dashboard import summarize
from .interfaces import EntityStore, ItemStore, Storage
from .schemas import (
    PatchModel, DashboardSummary,
    Product, Patient, Appointment, SalesOrder, SalesOrderItem,
    PurchaseOrder, PurchaseOrderItem, Consignment, Prescription, User,
)


class MemoryEntityStore(EntityStore):
    """Dict-backed collection of one entity type.

    Records are copied on the way in and on the way out, so callers can never
    mutate the stored state by holding on to a returned object.
    """

    def __init__(self, entity: str, record_model: Type[BaseModel],
                 next_id: Callable[[], int]) -> None:
        self.entity = entity
        self.record_model = record_model
        self._next_id = next_id
        self._records: Dict[int, BaseModel] = {}

    def list(self) -> List[BaseModel]:
        return [r.model_copy() for r in self._records.values()]

    def get(self, record_id: int) -> Optional[BaseModel]:
        record = self._records.get(record_id)
        return record.model_copy() if record is not None else None

    def create(self, data: BaseModel) -> BaseModel:
        record_id = self._next_id()
        payload = data.model_dump()
        payload.pop("id", None)
        record = self.record_model(id=record_id, **payload)
        self._records[record_id] = record
        logger.debug(f"{self.entity}: created #{record_id}")
        return record.model_copy()

    def update(self, record_id: int, patch: PatchModel) -> Optional[BaseModel]:
        existing = self._records.get(record_id)
        if existing is None:
            return None
        changes = patch.changes()
        changes.pop("id", None)
        # merged record is validated before the stored one is swapped out
        updated = self.record_model.model_validate({**dict(existing), **changes})
        self._records[record_id] = updated
        return updated.model_copy()

    def delete(self, record_id: int) -> bool:
        return self._records.pop(record_id, None) is not None

    def find_by(self, field: str, value: Any) -> Optional[BaseModel]:
        for record in self._records.values():
            if getattr(record, field) == value:
                return record.model_copy()
        return None


class MemoryItemStore(MemoryEntityStore, ItemStore):
    """Line item collection filtered by its parent order id."""

    def __init__(self, entity: str, record_model: Type[BaseModel],
                 next_id: Callable[[], int], parent_field: str) -> None:
        super().__init__(entity, record_model, next_id)
        self.parent_field = parent_field

    def list_for_parent(self, parent_id: int) -> List[BaseModel]:
        return [
            r.model_copy() for r in self._records.values()
            if getattr(r, self.parent_field) == parent_id
        ]


class MemoryStorage(Storage):
    """Process-local storage owning its own collections and id counter.

    Example::

        storage = MemoryStorage()
        product = storage.products.create(ProductCreate(...))
        storage.products.get(product.id) == product  # True
    """

    backend = "memory"

    def __init__(self) -> None:
        next_id = itertools.count(1).__next__

        self.products = MemoryEntityStore("products", Product, next_id)
        self.patients = MemoryEntityStore("patients", Patient, next_id)
        self.appointments = MemoryEntityStore("appointments", Appointment, next_id)
        self.sales_orders = MemoryEntityStore("sales_orders", SalesOrder, next_id)
        self.sales_order_items = MemoryItemStore(
            "sales_order_items", SalesOrderItem, next_id, "sales_order_id"
        )
        self.purchase_orders = MemoryEntityStore(
            "purchase_orders", PurchaseOrder, next_id
        )
        self.purchase_order_items = MemoryItemStore(
            "purchase_order_items", PurchaseOrderItem, next_id, "purchase_order_id"
        )
        self.consignments = MemoryEntityStore("consignments", Consignment, next_id)
        self.prescriptions = MemoryEntityStore("prescriptions", Prescription, next_id)
        self.users = MemoryEntityStore("users", User, next_id)

    def dashboard_summary(self, today: Optional[date] = None) -> DashboardSummary:
        return summarize(
            self.sales_orders.list(),
            self.consignments.list(),
            self.appointments.list(),
            today=today,
        )
