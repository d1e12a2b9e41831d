"""Generic CRUD over one SQLAlchemy model.

``BaseCRUD`` is the relational implementation of ``EntityStore``: each
repository binds it to an ORM model and the matching pydantic record model,
and inherits list/get/create/update/delete/find_by.

ORM rows never leave this module; every method returns pydantic records, so
callers get the same objects from the SQL store as from the in-memory one.

Driver failures are translated:
- unique constraint violations raise ``ConflictError``
- any other SQLAlchemy error raises ``StorageError``
The session is rolled back first, so an update is never partially applied.
"""
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Type

from loguru import logger
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .connection import DatabaseConnection
from .errors import ConflictError, StorageError
from .interfaces import EntityStore, ItemStore
from .schemas import PatchModel


def _is_unique_violation(error: IntegrityError) -> bool:
    """True for duplicate-key errors (SQLite, PostgreSQL, MySQL wording)."""
    if getattr(error.orig, "pgcode", None) == "23505":
        return True
    message = str(error.orig).lower()
    return "unique" in message or "duplicate" in message


class BaseCRUD(EntityStore):
    """CRUD repository bound to one table.

    Subclasses set ``entity``, ``model`` (ORM class) and ``record_model``
    (pydantic class).

    Attributes:
        conn: Shared database connection.
    """

    entity: str = ""
    model: Type[Any]
    record_model: Type[BaseModel]

    def __init__(self, conn: DatabaseConnection) -> None:
        self.conn = conn

    def _get_session(self) -> Session:
        return self.conn.get_session()

    @contextmanager
    def _session_scope(self, action: str) -> Iterator[Session]:
        """Open a session and translate driver errors.

        Args:
            action: Verb used in log messages (``create``, ``update`` ...).
        """
        session = self._get_session()
        try:
            yield session
        except IntegrityError as e:
            session.rollback()
            if not _is_unique_violation(e):
                logger.error(f"{self.entity}: {action} violated a constraint: {e.orig}")
                raise StorageError(f"{self.entity}: constraint violated") from e
            logger.warning(f"{self.entity}: {action} rejected by constraint: {e.orig}")
            raise ConflictError(
                f"{self.entity}: unique value already exists", entity=self.entity
            ) from e
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"{self.entity}: {action} failed: {e}")
            raise StorageError(f"{self.entity}: storage unavailable") from e
        finally:
            session.close()

    def _to_record(self, row: Any) -> BaseModel:
        return self.record_model.model_validate(row)

    # ================================================================
    # EntityStore
    # ================================================================

    def list(self) -> List[BaseModel]:
        """Return every row, ordered by id."""
        with self._session_scope("list") as session:
            rows = session.query(self.model).order_by(self.model.id).all()
            return [self._to_record(row) for row in rows]

    def get(self, record_id: int) -> Optional[BaseModel]:
        with self._session_scope("get") as session:
            row = session.get(self.model, record_id)
            return self._to_record(row) if row is not None else None

    def create(self, data: BaseModel) -> BaseModel:
        """Insert a row; the table's sequence assigns the id."""
        values = data.model_dump()
        values.pop("id", None)
        with self._session_scope("create") as session:
            row = self.model(**values)
            session.add(row)
            session.commit()
            session.refresh(row)
            logger.debug(f"{self.entity}: created #{row.id}")
            return self._to_record(row)

    def update(self, record_id: int, patch: PatchModel) -> Optional[BaseModel]:
        """Apply the fields present in ``patch``; the id is never changed."""
        changes = patch.changes()
        changes.pop("id", None)
        with self._session_scope("update") as session:
            row = session.get(self.model, record_id)
            if row is None:
                return None
            for field, value in changes.items():
                setattr(row, field, value)
            session.commit()
            session.refresh(row)
            return self._to_record(row)

    def delete(self, record_id: int) -> bool:
        with self._session_scope("delete") as session:
            row = session.get(self.model, record_id)
            if row is None:
                return False
            session.delete(row)
            session.commit()
            return True

    def find_by(self, field: str, value: Any) -> Optional[BaseModel]:
        with self._session_scope("find") as session:
            row = session.query(self.model).filter(
                getattr(self.model, field) == value
            ).order_by(self.model.id).first()
            return self._to_record(row) if row is not None else None


class BaseItemCRUD(BaseCRUD, ItemStore):
    """CRUD repository for order line items.

    Subclasses set ``parent_field`` to the column holding the parent order id.
    """

    parent_field: str = ""

    def list_for_parent(self, parent_id: int) -> List[BaseModel]:
        """Return the items of one order, ordered by id (empty if none)."""
        with self._session_scope("list") as session:
            rows = session.query(self.model).filter(
                getattr(self.model, self.parent_field) == parent_id
            ).order_by(self.model.id).all()
            return [self._to_record(row) for row in rows]
