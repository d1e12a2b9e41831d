"""Shared fixtures.

Every storage test can run against both implementations through the
parametrised ``storage`` fixture: a fresh ``MemoryStorage`` and a fresh
``DatabaseManager`` bound to a temp SQLite file.
"""
import os
import shutil
import tempfile
from datetime import date

import pytest

from database import DatabaseManager, MemoryStorage


@pytest.fixture
def memory_storage():
    """Yield an empty MemoryStorage."""
    yield MemoryStorage()


@pytest.fixture
def temp_db():
    """Yield a fresh DatabaseManager bound to a temp SQLite database."""
    temp_dir = tempfile.mkdtemp(prefix="optica-tests-")
    db_path = os.path.join(temp_dir, "test.db")
    manager = DatabaseManager(database_url=f"sqlite:///{db_path}")
    manager.create_tables()

    try:
        yield manager
    finally:
        manager.close()
        shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture(params=["memory", "sql"])
def storage(request):
    """Yield each storage implementation in turn."""
    return request.getfixturevalue(
        "memory_storage" if request.param == "memory" else "temp_db"
    )


@pytest.fixture
def sample_date():
    """Stable date value for deterministic tests."""
    return date(2024, 3, 15)


@pytest.fixture
def payloads():
    """One valid JSON body (camelCase keys) per resource path."""
    return {
        "products": {
            "code": "ARM-001", "name": "Ray-Ban Aviator", "category": "armazones",
            "supplier": "Luxottica", "stock": 12, "price": 1850.0,
            "stockStatus": "normal", "type": "propio", "status": "activo",
        },
        "patients": {
            "name": "María González", "email": "maria@example.com",
            "phone": "555-0101", "birthDate": "1985-06-20",
        },
        "appointments": {
            "patientName": "María González", "date": "2024-03-15",
            "time": "10:30", "type": "consulta", "doctorName": "Dr. Pérez",
            "status": "confirmada",
        },
        "sales-orders": {
            "orderNumber": "SO-0001", "customerName": "María González",
            "date": "2024-03-15", "status": "nuevo", "total": 2350.5,
        },
        "sales-order-items": {
            "salesOrderId": 1, "productId": 1, "productName": "Ray-Ban Aviator",
            "quantity": 1, "unitPrice": 1850.0, "totalPrice": 1850.0,
        },
        "purchase-orders": {
            "orderNumber": "PO-0001", "supplier": "Luxottica",
            "date": "2024-03-10", "status": "creada", "total": 9000.0,
        },
        "purchase-order-items": {
            "purchaseOrderId": 1, "productId": 1, "quantity": 5,
            "unitPrice": 1800.0, "totalPrice": 9000.0,
        },
        "consignments": {
            "supplier": "Essilor", "productName": "Varilux Comfort",
            "category": "lentes", "quantity": 10, "receivedDate": "2024-03-01",
            "status": "activa",
        },
        "prescriptions": {
            "patientName": "María González", "date": "2024-03-15",
            "professional": "Dr. Pérez",
            "rightEyeSphere": -1.25, "rightEyeCylinder": -0.5, "rightEyeAxis": 90,
            "leftEyeSphere": -1.0, "leftEyeCylinder": -0.75, "leftEyeAxis": 180,
        },
        "users": {
            "username": "vendedor1", "password": "secret", "role": "vendedor",
            "name": "Juan Vendedor",
        },
    }
