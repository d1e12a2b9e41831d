"""Entity repositories: data access for catalogue, people and clinical records.

Manages the standalone entities of the optical store (products, patients,
appointments, consignments, prescriptions, users). None of them owns child
rows.

Each repository inherits BaseCRUD for the generic CRUD contract and adds
the domain queries the dashboard needs.
"""
from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from .base_crud import BaseCRUD
from .connection import DatabaseConnection
from .dashboard import ACTIVE_CONSIGNMENT_STATUS, CANCELLED_APPOINTMENT_STATUS
from . import models, schemas


class ProductRepository(BaseCRUD):
    """Product repository.

    Frames, lenses, contact lenses and solutions. ``code`` is unique at the
    table level.
    """

    entity = "products"
    model = models.Product
    record_model = schemas.Product

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)


class PatientRepository(BaseCRUD):
    """Patient repository."""

    entity = "patients"
    model = models.Patient
    record_model = schemas.Patient

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)


class AppointmentRepository(BaseCRUD):
    """Appointment repository.

    Appointments keep a denormalised patient name and an optional
    ``patient_id`` that is not checked against the patients table.
    """

    entity = "appointments"
    model = models.Appointment
    record_model = schemas.Appointment

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def count_for_day(self, day: str,
                      session: Optional[Session] = None) -> int:
        """Count the appointments of one day that are not cancelled.

        Args:
            day: ISO date string (``YYYY-MM-DD``).
            session: External session (optional).

        Returns:
            Number of pending or confirmed appointments on ``day``.
        """
        def _query(sess):
            return sess.query(func.count(models.Appointment.id)).filter(
                models.Appointment.date == day,
                models.Appointment.status != CANCELLED_APPOINTMENT_STATUS
            ).scalar()

        if session:
            return _query(session)

        with self._session_scope("count") as sess:
            return _query(sess)


class ConsignmentRepository(BaseCRUD):
    """Consignment repository.

    Supplier stock held on consignment. Not linked to products.
    """

    entity = "consignments"
    model = models.Consignment
    record_model = schemas.Consignment

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def count_active(self, session: Optional[Session] = None) -> int:
        """Count consignments still in the store (status ``activa``)."""
        def _query(sess):
            return sess.query(func.count(models.Consignment.id)).filter(
                models.Consignment.status == ACTIVE_CONSIGNMENT_STATUS
            ).scalar()

        if session:
            return _query(session)

        with self._session_scope("count") as sess:
            return _query(sess)


class PrescriptionRepository(BaseCRUD):
    """Prescription repository."""

    entity = "prescriptions"
    model = models.Prescription
    record_model = schemas.Prescription

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)


class UserRepository(BaseCRUD):
    """User repository.

    ``username`` is unique at the table level. Passwords are stored as
    given.
    """

    entity = "users"
    model = models.User
    record_model = schemas.User

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)
