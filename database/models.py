"""SQLAlchemy ORM models.

One table per entity kept by the relational store:
- catalogue and people: products, patients, users
- clinical records: appointments, prescriptions
- orders and their line items: sales orders, purchase orders
- consignment stock received from suppliers

References between tables (``patient_id``, ``sales_order_id``,
``product_id`` ...) are plain indexed integers without a foreign key
constraint: deleting a record leaves the rows pointing at it untouched.
"""
from typing import Optional
from sqlalchemy import Column, Integer, String, Text, Numeric
from sqlalchemy.orm import declarative_base

# SQLAlchemy declarative base shared by every model
Base = declarative_base()

# Allow legacy-style attribute annotations with SQLAlchemy 2.0
Base.__allow_unmapped__ = True


def _money():
    """DECIMAL(10,2) column read back as float."""
    return Numeric(10, 2, asdecimal=False)


class Product(Base):
    """Product table model.

    Frames, lenses, contact lenses and solutions sold by the store.

    Attributes:
        id: Primary key, auto-increment integer.
        code: Product code, required and unique.
        name: Product name, required.
        category: Catalogue category (montura, cristal, lente_contacto ...).
        supplier: Supplier name, optional.
        description: Free text, optional.
        stock: Units on hand, default 0.
        price: Sale price, DECIMAL(10,2).
        stock_status: normal / bajo / critico, set by the user, not derived.
        type: propio (owned) / consignacion (consigned).
        status: activo / inactivo.
    """
    __tablename__ = "products"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    code: str = Column(String(50), nullable=False, unique=True)
    name: str = Column(String(200), nullable=False)
    category: str = Column(String(50), nullable=False)
    supplier: Optional[str] = Column(String(200))
    description: Optional[str] = Column(Text)
    stock: int = Column(Integer, nullable=False, default=0)
    price: float = Column(_money(), nullable=False)
    stock_status: str = Column(String(20), nullable=False, default="normal")
    type: str = Column(String(20), nullable=False, default="propio")
    status: str = Column(String(20), nullable=False, default="activo")


class Patient(Base):
    """Patient table model.

    Attributes:
        id: Primary key, auto-increment integer.
        name: Full name, required.
        email: Contact e-mail, optional.
        phone: Contact phone, optional.
        address: Postal address, optional.
        birth_date: ISO date string, optional.
        status: Free text status, default activo.
        notes: Free text, optional.
    """
    __tablename__ = "patients"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    name: str = Column(String(200), nullable=False)
    email: Optional[str] = Column(String(200))
    phone: Optional[str] = Column(String(50))
    address: Optional[str] = Column(String(300))
    birth_date: Optional[str] = Column(String(10))
    status: str = Column(String(20), nullable=False, default="activo")
    notes: Optional[str] = Column(Text)


class Appointment(Base):
    """Appointment table model.

    ``patient_name`` is denormalised so the agenda can be shown without a
    join, and so it survives deletion of the patient.
    """
    __tablename__ = "appointments"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    patient_id: Optional[int] = Column(Integer, index=True)
    patient_name: str = Column(String(200), nullable=False)
    date: str = Column(String(10), nullable=False, index=True)
    time: str = Column(String(5), nullable=False)
    type: str = Column(String(20), nullable=False, default="consulta")
    doctor_name: Optional[str] = Column(String(200))
    status: str = Column(String(20), nullable=False, default="pendiente")
    notes: Optional[str] = Column(Text)


class SalesOrder(Base):
    """Sales order table model."""
    __tablename__ = "sales_orders"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    order_number: str = Column(String(50), nullable=False, unique=True)
    patient_id: Optional[int] = Column(Integer, index=True)
    customer_name: str = Column(String(200), nullable=False)
    date: str = Column(String(10), nullable=False)
    status: str = Column(String(20), nullable=False, default="nuevo")
    total: float = Column(_money(), nullable=False)
    notes: Optional[str] = Column(Text)


class SalesOrderItem(Base):
    """Sales order line item.

    ``total_price`` is stored as sent; it is not recomputed from
    quantity and unit price.
    """
    __tablename__ = "sales_order_items"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    sales_order_id: int = Column(Integer, nullable=False, index=True)
    product_id: int = Column(Integer, nullable=False)
    product_name: Optional[str] = Column(String(200))
    quantity: int = Column(Integer, nullable=False)
    unit_price: float = Column(_money(), nullable=False)
    total_price: float = Column(_money(), nullable=False)


class PurchaseOrder(Base):
    """Purchase order table model."""
    __tablename__ = "purchase_orders"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    order_number: str = Column(String(50), nullable=False, unique=True)
    supplier: str = Column(String(200), nullable=False)
    date: str = Column(String(10), nullable=False)
    status: str = Column(String(20), nullable=False, default="creada")
    total: float = Column(_money(), nullable=False)
    notes: Optional[str] = Column(Text)


class PurchaseOrderItem(Base):
    """Purchase order line item."""
    __tablename__ = "purchase_order_items"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    purchase_order_id: int = Column(Integer, nullable=False, index=True)
    product_id: int = Column(Integer, nullable=False)
    product_name: Optional[str] = Column(String(200))
    quantity: int = Column(Integer, nullable=False)
    unit_price: float = Column(_money(), nullable=False)
    total_price: float = Column(_money(), nullable=False)


class Consignment(Base):
    """Consignment table model.

    Stock received from a supplier that is not owned until it is sold or
    returned. Not linked to the products table.
    """
    __tablename__ = "consignments"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    supplier: str = Column(String(200), nullable=False)
    product_name: str = Column(String(200), nullable=False)
    category: Optional[str] = Column(String(50))
    quantity: int = Column(Integer, nullable=False)
    received_date: str = Column(String(10), nullable=False)
    return_date: Optional[str] = Column(String(10))
    expiration_date: Optional[str] = Column(String(10))
    status: str = Column(String(20), nullable=False, default="activa", index=True)
    notes: Optional[str] = Column(Text)


class Prescription(Base):
    """Prescription table model.

    Sphere and cylinder are diopters; axis is degrees (0-180).
    """
    __tablename__ = "prescriptions"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    patient_id: Optional[int] = Column(Integer, index=True)
    patient_name: str = Column(String(200), nullable=False)
    date: str = Column(String(10), nullable=False)
    professional: str = Column(String(200), nullable=False)
    right_eye_sphere: Optional[float] = Column(Numeric(5, 2, asdecimal=False))
    right_eye_cylinder: Optional[float] = Column(Numeric(5, 2, asdecimal=False))
    right_eye_axis: Optional[int] = Column(Integer)
    left_eye_sphere: Optional[float] = Column(Numeric(5, 2, asdecimal=False))
    left_eye_cylinder: Optional[float] = Column(Numeric(5, 2, asdecimal=False))
    left_eye_axis: Optional[int] = Column(Integer)
    observations: Optional[str] = Column(Text)
    recommended_products: Optional[str] = Column(Text)


class User(Base):
    """User table model.

    The password is stored as entered; no login endpoint consumes it.
    """
    __tablename__ = "users"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    username: str = Column(String(50), nullable=False, unique=True)
    password: str = Column(String(200), nullable=False)
    role: str = Column(String(20), nullable=False, default="vendedor")
    name: str = Column(String(200), nullable=False)
    status: str = Column(String(20), nullable=False, default="activo")
