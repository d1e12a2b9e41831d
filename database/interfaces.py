"""Storage contract.

Both storage variants (``MemoryStorage`` and the SQL ``DatabaseManager``)
implement these interfaces, so the HTTP layer and the tests can treat them
interchangeably.
"""
from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel

from .schemas import (
    PatchModel, DashboardSummary,
    Product, Patient, Appointment, SalesOrder, SalesOrderItem,
    PurchaseOrder, PurchaseOrderItem, Consignment, Prescription, User,
)

RecordT = TypeVar("RecordT", bound=BaseModel)


class EntityStore(ABC, Generic[RecordT]):
    """CRUD access to one entity collection.

    Attributes:
        entity: Collection name, e.g. ``"products"``.
        record_model: Pydantic model of the stored record.
    """

    entity: str
    record_model: Type[RecordT]

    @abstractmethod
    def list(self) -> List[RecordT]:
        """Return every record in the collection."""

    @abstractmethod
    def get(self, record_id: int) -> Optional[RecordT]:
        """Return the record or None if it does not exist."""

    @abstractmethod
    def create(self, data: BaseModel) -> RecordT:
        """Store a new record with a freshly assigned id and return it."""

    @abstractmethod
    def update(self, record_id: int, patch: PatchModel) -> Optional[RecordT]:
        """Apply the fields present in ``patch``; None if the record is absent."""

    @abstractmethod
    def delete(self, record_id: int) -> bool:
        """Remove the record; True if it existed."""

    @abstractmethod
    def find_by(self, field: str, value: Any) -> Optional[RecordT]:
        """Return the first record whose ``field`` equals ``value``."""


class ItemStore(EntityStore[RecordT]):
    """Entity store for order line items.

    Attributes:
        parent_field: Attribute holding the parent order id.
    """

    parent_field: str

    @abstractmethod
    def list_for_parent(self, parent_id: int) -> List[RecordT]:
        """Return the items of one parent order (empty if none)."""


class Storage(ABC):
    """The ten entity stores plus the dashboard aggregate."""

    backend: str

    products: EntityStore[Product]
    patients: EntityStore[Patient]
    appointments: EntityStore[Appointment]
    sales_orders: EntityStore[SalesOrder]
    sales_order_items: ItemStore[SalesOrderItem]
    purchase_orders: EntityStore[PurchaseOrder]
    purchase_order_items: ItemStore[PurchaseOrderItem]
    consignments: EntityStore[Consignment]
    prescriptions: EntityStore[Prescription]
    users: EntityStore[User]

    STORE_NAMES = (
        "products", "patients", "appointments",
        "sales_orders", "sales_order_items",
        "purchase_orders", "purchase_order_items",
        "consignments", "prescriptions", "users",
    )

    def store(self, name: str) -> EntityStore:
        """Look up an entity store by collection name.

        Raises:
            KeyError: Unknown collection name.
        """
        if name not in self.STORE_NAMES:
            raise KeyError(name)
        return getattr(self, name)

    def stores(self) -> Dict[str, EntityStore]:
        return {name: getattr(self, name) for name in self.STORE_NAMES}

    @abstractmethod
    def dashboard_summary(self, today: Optional[date] = None) -> DashboardSummary:
        """Compute the dashboard aggregate.

        Args:
            today: Reference date for ``todayAppointments``; defaults to the
                process-local current date.
        """

    def close(self) -> None:
        """Release resources held by the store."""
