"""Order repositories: sales and purchase orders with their line items.

Orders and their items are written by separate calls; nothing wraps an
order and its items in one transaction, so an order can exist with no
items if an item insert fails.

Totals are stored as sent: an order's ``total`` is not recomputed from its
items and an item's ``total_price`` is not recomputed from quantity and
unit price. Selling does not touch product stock.
"""
from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from .base_crud import BaseCRUD, BaseItemCRUD
from .connection import DatabaseConnection
from .dashboard import PENDING_ORDER_STATUSES
from . import models, schemas


class SalesOrderRepository(BaseCRUD):
    """Sales order repository.

    ``order_number`` is unique at the table level.
    """

    entity = "sales_orders"
    model = models.SalesOrder
    record_model = schemas.SalesOrder

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def total_sales(self, session: Optional[Session] = None) -> float:
        """Sum of ``total`` over every sales order.

        Returns:
            The sum rounded to cents; 0.0 when there are no orders.
        """
        def _query(sess):
            value = sess.query(
                func.coalesce(func.sum(models.SalesOrder.total), 0)
            ).scalar()
            return round(float(value), 2)

        if session:
            return _query(session)

        with self._session_scope("sum") as sess:
            return _query(sess)

    def count_pending(self, session: Optional[Session] = None) -> int:
        """Count orders not yet delivered or cancelled (nuevo, en_proceso)."""
        def _query(sess):
            return sess.query(func.count(models.SalesOrder.id)).filter(
                models.SalesOrder.status.in_(PENDING_ORDER_STATUSES)
            ).scalar()

        if session:
            return _query(session)

        with self._session_scope("count") as sess:
            return _query(sess)


class SalesOrderItemRepository(BaseItemCRUD):
    """Sales order item repository."""

    entity = "sales_order_items"
    model = models.SalesOrderItem
    record_model = schemas.SalesOrderItem
    parent_field = "sales_order_id"

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)


class PurchaseOrderRepository(BaseCRUD):
    """Purchase order repository.

    ``order_number`` is unique at the table level.
    """

    entity = "purchase_orders"
    model = models.PurchaseOrder
    record_model = schemas.PurchaseOrder

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)


class PurchaseOrderItemRepository(BaseItemCRUD):
    """Purchase order item repository."""

    entity = "purchase_order_items"
    model = models.PurchaseOrderItem
    record_model = schemas.PurchaseOrderItem
    parent_field = "purchase_order_id"

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)
