"""Dashboard aggregate tests (both storage implementations)."""
from datetime import date

import pytest

from database.dashboard import summarize, today_iso
from database.schemas import (
    AppointmentCreate, AppointmentPatch, ConsignmentCreate, SalesOrderCreate,
)


def _order(storage, number, total, status):
    return storage.sales_orders.create(SalesOrderCreate(
        order_number=number, customer_name="Cliente", date="2024-03-15",
        total=total, status=status,
    ))


def _appointment(storage, day, status="confirmada"):
    return storage.appointments.create(AppointmentCreate(
        patient_name="Ana", date=day, time="09:00", status=status,
    ))


def _consignment(storage, status):
    return storage.consignments.create(ConsignmentCreate(
        supplier="Essilor", product_name="Varilux", quantity=3,
        received_date="2024-03-01", status=status,
    ))


def test_empty_dashboard(storage):
    summary = storage.dashboard_summary()
    assert summary.total_sales == 0
    assert summary.pending_orders == 0
    assert summary.active_consignments == 0
    assert summary.today_appointments == 0


def test_sales_totals_and_pending(storage):
    _order(storage, "SO-1", 100, "nuevo")
    _order(storage, "SO-2", 250.50, "entregado")
    _order(storage, "SO-3", 0, "en_proceso")

    summary = storage.dashboard_summary()
    assert summary.total_sales == pytest.approx(350.5)
    assert summary.pending_orders == 2


def test_cancelled_orders_count_in_total_but_not_pending(storage):
    _order(storage, "SO-1", 80, "cancelado")
    summary = storage.dashboard_summary()
    assert summary.total_sales == pytest.approx(80)
    assert summary.pending_orders == 0


def test_total_rounded_to_cents(storage):
    _order(storage, "SO-1", 0.1, "nuevo")
    _order(storage, "SO-2", 0.2, "nuevo")
    assert storage.dashboard_summary().total_sales == 0.3


def test_active_consignments(storage):
    _consignment(storage, "activa")
    _consignment(storage, "activa")
    _consignment(storage, "devuelta")
    _consignment(storage, "vendida")
    assert storage.dashboard_summary().active_consignments == 2


def test_today_appointments(storage, sample_date):
    day = sample_date.isoformat()
    _appointment(storage, day, "confirmada")
    _appointment(storage, day, "pendiente")
    _appointment(storage, day, "cancelada")
    _appointment(storage, "2024-03-16", "confirmada")

    summary = storage.dashboard_summary(today=sample_date)
    assert summary.today_appointments == 2


def test_today_defaults_to_current_date(storage):
    before = storage.dashboard_summary().today_appointments
    _appointment(storage, date.today().isoformat())
    assert storage.dashboard_summary().today_appointments == before + 1


def test_cancelling_appointment_decrements(storage, sample_date):
    appt = _appointment(storage, sample_date.isoformat())
    assert storage.dashboard_summary(today=sample_date).today_appointments == 1
    storage.appointments.update(appt.id, AppointmentPatch(status="cancelada"))
    assert storage.dashboard_summary(today=sample_date).today_appointments == 0


def test_dashboard_serialises_camel_case(storage):
    _order(storage, "SO-1", 10, "nuevo")
    data = storage.dashboard_summary().model_dump(by_alias=True)
    assert set(data) == {
        "totalSales", "pendingOrders", "activeConsignments", "todayAppointments",
    }


def test_today_iso():
    assert today_iso(date(2024, 1, 5)) == "2024-01-05"
    assert today_iso() == date.today().isoformat()


def test_summarize_without_records():
    summary = summarize([], [], [])
    assert summary.model_dump() == {
        "total_sales": 0.0, "pending_orders": 0,
        "active_consignments": 0, "today_appointments": 0,
    }
