"""REST resources.

One ``Resource`` per entity: URL segment, storage collection, schemas and
unique fields. ``interface/web/app.py`` builds the CRUD routes from this
table and ``interface/client.py`` derives its cache keys from it.
"""
from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Type

from pydantic import BaseModel

from database import schemas
from database.schemas import PatchModel


@dataclass(frozen=True)
class Resource:
    """REST view of one entity collection.

    Attributes:
        path: URL segment under ``/api`` (``"sales-orders"``).
        store: Storage collection name (``"sales_orders"``).
        label: Human name used in error messages (``"Sales order"``).
        create_model: Body schema for POST.
        patch_model: Body schema for PUT/PATCH.
        unique_fields: Attributes that must not collide across records.
        parent: Resource path of the parent order, for line items.
        affects_dashboard: Mutations change the dashboard aggregate.
        items: Resource path of the line items, for orders.
    """
    path: str
    store: str
    label: str
    create_model: Type[BaseModel]
    patch_model: Type[PatchModel]
    unique_fields: Tuple[str, ...] = ()
    parent: Optional[str] = None
    affects_dashboard: bool = False
    items: Optional[str] = None

    @property
    def url(self) -> str:
        return f"/api/{self.path}"


RESOURCES: Tuple[Resource, ...] = (
    Resource("products", "products", "Product",
             schemas.ProductCreate, schemas.ProductPatch,
             unique_fields=("code",)),
    Resource("patients", "patients", "Patient",
             schemas.PatientCreate, schemas.PatientPatch),
    Resource("appointments", "appointments", "Appointment",
             schemas.AppointmentCreate, schemas.AppointmentPatch,
             affects_dashboard=True),
    Resource("sales-orders", "sales_orders", "Sales order",
             schemas.SalesOrderCreate, schemas.SalesOrderPatch,
             unique_fields=("order_number",), affects_dashboard=True,
             items="sales-order-items"),
    Resource("sales-order-items", "sales_order_items", "Sales order item",
             schemas.SalesOrderItemCreate, schemas.SalesOrderItemPatch,
             parent="sales-orders"),
    Resource("purchase-orders", "purchase_orders", "Purchase order",
             schemas.PurchaseOrderCreate, schemas.PurchaseOrderPatch,
             unique_fields=("order_number",), items="purchase-order-items"),
    Resource("purchase-order-items", "purchase_order_items", "Purchase order item",
             schemas.PurchaseOrderItemCreate, schemas.PurchaseOrderItemPatch,
             parent="purchase-orders"),
    Resource("consignments", "consignments", "Consignment",
             schemas.ConsignmentCreate, schemas.ConsignmentPatch,
             affects_dashboard=True),
    Resource("prescriptions", "prescriptions", "Prescription",
             schemas.PrescriptionCreate, schemas.PrescriptionPatch),
    Resource("users", "users", "User",
             schemas.UserCreate, schemas.UserPatch,
             unique_fields=("username",)),
)

RESOURCES_BY_PATH: Dict[str, Resource] = {r.path: r for r in RESOURCES}
