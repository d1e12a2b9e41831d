"""Database manager: relational storage facade.

DatabaseManager is the entry point of the SQL storage variant. It wires
every repository to one shared connection and implements the ``Storage``
contract, so it can be swapped for ``MemoryStorage`` without touching the
HTTP layer.

Two levels of access:

1. **Repositories** (fine grained):
   ``db.products``, ``db.sales_orders`` ... expose the CRUD contract plus
   domain queries and return pydantic records.

2. **Facade methods** (coarse grained):
   ``dashboard_summary()`` and the infrastructure helpers
   (``create_tables()``, ``close()``).
"""
from datetime import date
from typing import Optional, Any
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .connection import DatabaseConnection
from .dashboard import today_iso
from .entity_repos import (
    ProductRepository, PatientRepository, AppointmentRepository,
    ConsignmentRepository, PrescriptionRepository, UserRepository
)
from .business_repos import (
    SalesOrderRepository, SalesOrderItemRepository,
    PurchaseOrderRepository, PurchaseOrderItemRepository
)
from .errors import StorageError
from .interfaces import Storage
from .schemas import DashboardSummary


class DatabaseManager(Storage):
    """Database manager: relational storage facade.

    Attributes:
        conn: Database connection manager.
        products: Product repository.
        patients: Patient repository.
        appointments: Appointment repository.
        sales_orders: Sales order repository.
        sales_order_items: Sales order item repository.
        purchase_orders: Purchase order repository.
        purchase_order_items: Purchase order item repository.
        consignments: Consignment repository.
        prescriptions: Prescription repository.
        users: User repository.

    Example::

        db = DatabaseManager("sqlite:///data/optica.db")
        db.create_tables()

        product = db.products.create(ProductCreate(...))
        summary = db.dashboard_summary()
    """

    backend = "sql"

    def __init__(self, database_url: Optional[str] = None) -> None:
        """Initialise the manager.

        Args:
            database_url: Database URL; ``settings.database_url`` when None.
        """
        # infrastructure
        self.conn = DatabaseConnection(database_url)

        # standalone entities
        self.products = ProductRepository(self.conn)
        self.patients = PatientRepository(self.conn)
        self.appointments = AppointmentRepository(self.conn)
        self.consignments = ConsignmentRepository(self.conn)
        self.prescriptions = PrescriptionRepository(self.conn)
        self.users = UserRepository(self.conn)

        # orders and line items
        self.sales_orders = SalesOrderRepository(self.conn)
        self.sales_order_items = SalesOrderItemRepository(self.conn)
        self.purchase_orders = PurchaseOrderRepository(self.conn)
        self.purchase_order_items = PurchaseOrderItemRepository(self.conn)

    # ================================================================
    # Infrastructure
    # ================================================================

    def create_tables(self) -> None:
        """Create every table (idempotent)."""
        self.conn.create_tables()

    def get_session(self) -> Session:
        """Return a new database session."""
        return self.conn.get_session()

    @property
    def database_url(self) -> str:
        """Database connection URL."""
        return self.conn.database_url

    def execute_raw_sql(self, sql: str,
                        params: Optional[dict] = None) -> Any:
        """Execute a raw SQL statement.

        Args:
            sql: SQL statement.
            params: Bound parameters (optional).

        Returns:
            The SQLAlchemy result.
        """
        return self.conn.execute_raw_sql(sql, params)

    def close(self) -> None:
        """Close the connection and release the pool."""
        self.conn.close()

    # ================================================================
    # Dashboard
    # ================================================================

    def dashboard_summary(self, today: Optional[date] = None) -> DashboardSummary:
        """Compute the dashboard aggregate with four aggregate queries.

        All four run in one session so they see the same snapshot.

        Args:
            today: Reference date for today's appointments (optional).

        Returns:
            DashboardSummary.

        Raises:
            StorageError: The database could not be queried.
        """
        day = today_iso(today)
        try:
            with self.get_session() as session:
                return DashboardSummary(
                    total_sales=self.sales_orders.total_sales(session=session),
                    pending_orders=self.sales_orders.count_pending(session=session),
                    active_consignments=self.consignments.count_active(session=session),
                    today_appointments=self.appointments.count_for_day(
                        day, session=session
                    ),
                )
        except SQLAlchemyError as e:
            logger.error(f"dashboard: aggregate query failed: {e}")
            raise StorageError("dashboard: storage unavailable") from e
