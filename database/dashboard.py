"""Dashboard aggregate rules.

The four dashboard numbers are defined once here. ``MemoryStorage`` feeds
records to ``summarize``; the SQL ``DatabaseManager`` translates the same
constants into aggregate queries.

- totalSales: sum of ``total`` over every sales order (not a count)
- pendingOrders: sales orders whose status is nuevo or en_proceso
- activeConsignments: consignments whose status is activa
- todayAppointments: appointments dated today that are not cancelled
"""
from datetime import date
from typing import Iterable, Optional

from .schemas import (
    Appointment, AppointmentStatus, Consignment, ConsignmentStatus,
    DashboardSummary, SalesOrder, SalesOrderStatus,
)

PENDING_ORDER_STATUSES = (
    SalesOrderStatus.NUEVO.value,
    SalesOrderStatus.EN_PROCESO.value,
)
ACTIVE_CONSIGNMENT_STATUS = ConsignmentStatus.ACTIVA.value
CANCELLED_APPOINTMENT_STATUS = AppointmentStatus.CANCELADA.value


def today_iso(today: Optional[date] = None) -> str:
    """Process-local calendar date as ``YYYY-MM-DD``."""
    return (today or date.today()).isoformat()


def summarize(sales_orders: Iterable[SalesOrder],
              consignments: Iterable[Consignment],
              appointments: Iterable[Appointment],
              today: Optional[date] = None) -> DashboardSummary:
    """Compute the dashboard aggregate from in-memory records."""
    day = today_iso(today)
    total_sales = 0.0
    pending_orders = 0
    for order in sales_orders:
        total_sales += float(order.total)
        if order.status in PENDING_ORDER_STATUSES:
            pending_orders += 1

    return DashboardSummary(
        total_sales=round(total_sales, 2),
        pending_orders=pending_orders,
        active_consignments=sum(
            1 for c in consignments if c.status == ACTIVE_CONSIGNMENT_STATUS
        ),
        today_appointments=sum(
            1 for a in appointments
            if a.date == day and a.status != CANCELLED_APPOINTMENT_STATUS
        ),
    )
