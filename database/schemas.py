"""Entity schemas.

Pydantic models describing every record the store keeps. Each entity has
three shapes:

- ``XCreate``: the body accepted on creation. Unknown keys, including a
  client supplied ``id``, are dropped.
- ``XPatch``: the body accepted on update. Every field is optional and only
  the fields actually sent are applied (``model_dump(exclude_unset=True)``).
  Sending ``null`` for a field that cannot be null on creation is rejected.
- ``X``: the stored record, i.e. the creation fields plus ``id``.

JSON uses camelCase keys (``stockStatus``); Python attributes are snake_case.
"""
from datetime import date
from enum import Enum
from typing import Annotated, Any, ClassVar, Optional, Type, get_args

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


def _check_iso_date(value: str) -> str:
    try:
        parsed = date.fromisoformat(value)
    except ValueError:
        raise ValueError("expected an ISO date (YYYY-MM-DD)")
    if parsed.isoformat() != value:
        raise ValueError("expected an ISO date (YYYY-MM-DD)")
    return value


def _check_clock_time(value: str) -> str:
    parts = value.split(":")
    if (len(parts) != 2 or not all(len(p) == 2 and p.isdigit() for p in parts)
            or int(parts[0]) > 23 or int(parts[1]) > 59):
        raise ValueError("expected a time (HH:MM)")
    return value


IsoDate = Annotated[str, AfterValidator(_check_iso_date)]
ClockTime = Annotated[str, AfterValidator(_check_clock_time)]

# integer columns are 32-bit signed
INT_MIN = -2 ** 31
INT_MAX = 2 ** 31 - 1
Int32 = Annotated[int, Field(ge=INT_MIN, le=INT_MAX)]


def _allows_none(annotation: Any) -> bool:
    return annotation is None or type(None) in get_args(annotation)


# ==================== Enums ====================

class StockStatus(str, Enum):
    NORMAL = "normal"
    BAJO = "bajo"
    CRITICO = "critico"


class ProductType(str, Enum):
    PROPIO = "propio"
    CONSIGNACION = "consignacion"


class RecordStatus(str, Enum):
    ACTIVO = "activo"
    INACTIVO = "inactivo"


class AppointmentType(str, Enum):
    CONSULTA = "consulta"
    ENTREGA = "entrega"
    REVISION = "revision"
    ADAPTACION = "adaptacion"


class AppointmentStatus(str, Enum):
    PENDIENTE = "pendiente"
    CONFIRMADA = "confirmada"
    CANCELADA = "cancelada"


class SalesOrderStatus(str, Enum):
    NUEVO = "nuevo"
    EN_PROCESO = "en_proceso"
    ENTREGADO = "entregado"
    CANCELADO = "cancelado"


class PurchaseOrderStatus(str, Enum):
    CREADA = "creada"
    ENVIADA = "enviada"
    RECIBIDA = "recibida"
    PENDIENTE = "pendiente"
    EN_PROCESO = "en_proceso"
    COMPLETADA = "completada"
    CANCELADA = "cancelada"


class ConsignmentStatus(str, Enum):
    ACTIVA = "activa"
    DEVUELTA = "devuelta"
    VENDIDA = "vendida"


class UserRole(str, Enum):
    ADMIN = "admin"
    VENDEDOR = "vendedor"


# ==================== Base classes ====================

class CamelModel(BaseModel):
    """camelCase JSON, snake_case attributes, enum values stored as plain strings."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
        from_attributes=True,
        extra="ignore",
    )


class PatchModel(CamelModel):
    """Base for update bodies.

    Subclasses set ``create_model`` to the matching creation schema. A field
    whose creation type is not Optional (required or defaulted) may be omitted
    from a patch but may not be sent as null.
    """

    create_model: ClassVar[Type[BaseModel]]

    @model_validator(mode="after")
    def _reject_null_non_optional(self):
        non_nullable = {
            name for name, info in self.create_model.model_fields.items()
            if not _allows_none(info.annotation)
        }
        for name in self.model_fields_set & non_nullable:
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        """Fields explicitly present in the patch, keyed by attribute name."""
        return self.model_dump(exclude_unset=True)


# ==================== Product ====================

class ProductCreate(CamelModel):
    code: str = Field(min_length=1)
    name: str = Field(min_length=1)
    category: str
    supplier: Optional[str] = None
    description: Optional[str] = None
    stock: int = Field(default=0, ge=0, le=INT_MAX)
    price: float = Field(ge=0)
    stock_status: StockStatus = StockStatus.NORMAL
    type: ProductType = ProductType.PROPIO
    status: RecordStatus = RecordStatus.ACTIVO


class ProductPatch(PatchModel):
    create_model = ProductCreate

    code: Optional[str] = Field(default=None, min_length=1)
    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = None
    supplier: Optional[str] = None
    description: Optional[str] = None
    stock: Optional[int] = Field(default=None, ge=0, le=INT_MAX)
    price: Optional[float] = Field(default=None, ge=0)
    stock_status: Optional[StockStatus] = None
    type: Optional[ProductType] = None
    status: Optional[RecordStatus] = None


class Product(ProductCreate):
    id: int


# ==================== Patient ====================

class PatientCreate(CamelModel):
    name: str = Field(min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    birth_date: Optional[IsoDate] = None
    status: str = RecordStatus.ACTIVO.value
    notes: Optional[str] = None


class PatientPatch(PatchModel):
    create_model = PatientCreate

    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    birth_date: Optional[IsoDate] = None
    status: Optional[str] = None
    notes: Optional[str] = None


class Patient(PatientCreate):
    id: int


# ==================== Appointment ====================

class AppointmentCreate(CamelModel):
    patient_id: Optional[Int32] = None
    patient_name: str = Field(min_length=1)
    date: IsoDate
    time: ClockTime
    type: AppointmentType = AppointmentType.CONSULTA
    doctor_name: Optional[str] = None
    status: AppointmentStatus = AppointmentStatus.PENDIENTE
    notes: Optional[str] = None


class AppointmentPatch(PatchModel):
    create_model = AppointmentCreate

    patient_id: Optional[Int32] = None
    patient_name: Optional[str] = Field(default=None, min_length=1)
    date: Optional[IsoDate] = None
    time: Optional[ClockTime] = None
    type: Optional[AppointmentType] = None
    doctor_name: Optional[str] = None
    status: Optional[AppointmentStatus] = None
    notes: Optional[str] = None


class Appointment(AppointmentCreate):
    id: int


# ==================== Sales orders ====================

class SalesOrderCreate(CamelModel):
    order_number: str = Field(min_length=1)
    patient_id: Optional[Int32] = None
    customer_name: str = Field(min_length=1)
    date: IsoDate
    status: SalesOrderStatus = SalesOrderStatus.NUEVO
    total: float = Field(ge=0)
    notes: Optional[str] = None


class SalesOrderPatch(PatchModel):
    create_model = SalesOrderCreate

    order_number: Optional[str] = Field(default=None, min_length=1)
    patient_id: Optional[Int32] = None
    customer_name: Optional[str] = Field(default=None, min_length=1)
    date: Optional[IsoDate] = None
    status: Optional[SalesOrderStatus] = None
    total: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None


class SalesOrder(SalesOrderCreate):
    id: int


class SalesOrderItemCreate(CamelModel):
    sales_order_id: Int32
    product_id: Int32
    product_name: Optional[str] = None
    quantity: int = Field(gt=0, le=INT_MAX)
    unit_price: float = Field(ge=0)
    total_price: float = Field(ge=0)


class SalesOrderItemPatch(PatchModel):
    create_model = SalesOrderItemCreate

    sales_order_id: Optional[Int32] = None
    product_id: Optional[Int32] = None
    product_name: Optional[str] = None
    quantity: Optional[int] = Field(default=None, gt=0, le=INT_MAX)
    unit_price: Optional[float] = Field(default=None, ge=0)
    total_price: Optional[float] = Field(default=None, ge=0)


class SalesOrderItem(SalesOrderItemCreate):
    id: int


# ==================== Purchase orders ====================

class PurchaseOrderCreate(CamelModel):
    order_number: str = Field(min_length=1)
    supplier: str = Field(min_length=1)
    date: IsoDate
    status: PurchaseOrderStatus = PurchaseOrderStatus.CREADA
    total: float = Field(ge=0)
    notes: Optional[str] = None


class PurchaseOrderPatch(PatchModel):
    create_model = PurchaseOrderCreate

    order_number: Optional[str] = Field(default=None, min_length=1)
    supplier: Optional[str] = Field(default=None, min_length=1)
    date: Optional[IsoDate] = None
    status: Optional[PurchaseOrderStatus] = None
    total: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None


class PurchaseOrder(PurchaseOrderCreate):
    id: int


class PurchaseOrderItemCreate(CamelModel):
    purchase_order_id: Int32
    product_id: Int32
    product_name: Optional[str] = None
    quantity: int = Field(gt=0, le=INT_MAX)
    unit_price: float = Field(ge=0)
    total_price: float = Field(ge=0)


class PurchaseOrderItemPatch(PatchModel):
    create_model = PurchaseOrderItemCreate

    purchase_order_id: Optional[Int32] = None
    product_id: Optional[Int32] = None
    product_name: Optional[str] = None
    quantity: Optional[int] = Field(default=None, gt=0, le=INT_MAX)
    unit_price: Optional[float] = Field(default=None, ge=0)
    total_price: Optional[float] = Field(default=None, ge=0)


class PurchaseOrderItem(PurchaseOrderItemCreate):
    id: int


# ==================== Consignment ====================

class ConsignmentCreate(CamelModel):
    supplier: str = Field(min_length=1)
    product_name: str = Field(min_length=1)
    category: Optional[str] = None
    quantity: int = Field(ge=0, le=INT_MAX)
    received_date: IsoDate
    return_date: Optional[IsoDate] = None
    expiration_date: Optional[IsoDate] = None
    status: ConsignmentStatus = ConsignmentStatus.ACTIVA
    notes: Optional[str] = None


class ConsignmentPatch(PatchModel):
    create_model = ConsignmentCreate

    supplier: Optional[str] = Field(default=None, min_length=1)
    product_name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = None
    quantity: Optional[int] = Field(default=None, ge=0, le=INT_MAX)
    received_date: Optional[IsoDate] = None
    return_date: Optional[IsoDate] = None
    expiration_date: Optional[IsoDate] = None
    status: Optional[ConsignmentStatus] = None
    notes: Optional[str] = None


class Consignment(ConsignmentCreate):
    id: int


# ==================== Prescription ====================

class PrescriptionCreate(CamelModel):
    patient_id: Optional[Int32] = None
    patient_name: str = Field(min_length=1)
    date: IsoDate
    professional: str = Field(min_length=1)
    right_eye_sphere: Optional[float] = None
    right_eye_cylinder: Optional[float] = None
    right_eye_axis: Optional[int] = Field(default=None, ge=0, le=180)
    left_eye_sphere: Optional[float] = None
    left_eye_cylinder: Optional[float] = None
    left_eye_axis: Optional[int] = Field(default=None, ge=0, le=180)
    observations: Optional[str] = None
    recommended_products: Optional[str] = None


class PrescriptionPatch(PatchModel):
    create_model = PrescriptionCreate

    patient_id: Optional[Int32] = None
    patient_name: Optional[str] = Field(default=None, min_length=1)
    date: Optional[IsoDate] = None
    professional: Optional[str] = Field(default=None, min_length=1)
    right_eye_sphere: Optional[float] = None
    right_eye_cylinder: Optional[float] = None
    right_eye_axis: Optional[int] = Field(default=None, ge=0, le=180)
    left_eye_sphere: Optional[float] = None
    left_eye_cylinder: Optional[float] = None
    left_eye_axis: Optional[int] = Field(default=None, ge=0, le=180)
    observations: Optional[str] = None
    recommended_products: Optional[str] = None


class Prescription(PrescriptionCreate):
    id: int


# ==================== User ====================

class UserCreate(CamelModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    role: UserRole = UserRole.VENDEDOR
    name: str = Field(min_length=1)
    status: RecordStatus = RecordStatus.ACTIVO


class UserPatch(PatchModel):
    create_model = UserCreate

    username: Optional[str] = Field(default=None, min_length=1)
    password: Optional[str] = Field(default=None, min_length=1)
    role: Optional[UserRole] = None
    name: Optional[str] = Field(default=None, min_length=1)
    status: Optional[RecordStatus] = None


class User(UserCreate):
    id: int
    # kept on the record, never serialised
    password: str = Field(min_length=1, exclude=True)


# ==================== Dashboard ====================

class DashboardSummary(CamelModel):
    """The four dashboard numbers, computed fresh on every request."""

    total_sales: float = 0.0
    pending_orders: int = 0
    active_consignments: int = 0
    today_appointments: int = 0
