"""
Generic row-oriented access to the dashboard collections.

Panels never touch the ORM directly: they address collections by name and
get back plain dict rows or a DataError carrying a readable message, the
same shape a hosted data store client would hand back.
"""

import logging
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar
from uuid import UUID

from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.models import (
    UserProfile,
    DashboardKPI,
    ProjectActivity,
    ProjectComponent,
    WebsiteStat,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

COLLECTIONS = {
    "user_profiles": UserProfile,
    "dashboard_kpis": DashboardKPI,
    "project_activities": ProjectActivity,
    "project_components": ProjectComponent,
    "website_stats": WebsiteStat,
}

# Error codes
UNKNOWN_COLLECTION = "unknown_collection"
UNKNOWN_COLUMN = "unknown_column"
NOT_FOUND = "not_found"
CONSTRAINT_VIOLATION = "constraint_violation"
DATABASE_ERROR = "database_error"


@dataclass
class DataError:
    message: str
    code: str = DATABASE_ERROR


@dataclass
class DataResult(Generic[T]):
    data: Optional[T] = None
    error: Optional[DataError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def row_to_dict(obj) -> dict:
    """Serialize an ORM instance into a column-keyed dict."""
    return {column.key: getattr(obj, column.key) for column in inspect(obj).mapper.column_attrs}


def _error_message(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


class DataService:
    """Select/insert/update/delete on named collections."""

    def __init__(self, db: Session):
        self.db = db

    def _model(self, collection: str):
        return COLLECTIONS.get(collection)

    @staticmethod
    def _columns(model) -> set[str]:
        return {column.key for column in inspect(model).column_attrs}

    def _check_columns(self, model, keys) -> Optional[DataError]:
        unknown = sorted(set(keys) - self._columns(model))
        if unknown:
            return DataError(
                message=f"Unknown column(s) for {model.__tablename__}: {', '.join(unknown)}",
                code=UNKNOWN_COLUMN,
            )
        return None

    def _failure(self, collection: str, operation: str, exc: SQLAlchemyError) -> DataResult:
        self.db.rollback()
        message = _error_message(exc)
        logger.error(f"{operation} on {collection} failed: {message}")
        code = CONSTRAINT_VIOLATION if isinstance(exc, IntegrityError) else DATABASE_ERROR
        return DataResult(error=DataError(message=message, code=code))

    def select(
        self,
        collection: str,
        filters: Optional[dict[str, Any]] = None,
        order: Optional[str] = None,
        ascending: bool = True,
    ) -> DataResult[list[dict]]:
        """Fetch every row matching the equality filters, sorted by `order`."""
        model = self._model(collection)
        if model is None:
            return DataResult(error=DataError(f"Unknown collection: {collection}", UNKNOWN_COLLECTION))

        filters = filters or {}
        error = self._check_columns(model, list(filters) + ([order] if order else []))
        if error:
            return DataResult(error=error)

        try:
            query = self.db.query(model)
            for column, value in filters.items():
                query = query.filter(getattr(model, column) == value)
            if order:
                sort_column = getattr(model, order)
                query = query.order_by(sort_column.asc() if ascending else sort_column.desc())
            rows = [row_to_dict(obj) for obj in query.all()]
        except SQLAlchemyError as e:
            return self._failure(collection, "select", e)

        return DataResult(data=rows)

    def select_one(self, collection: str, filters: dict[str, Any]) -> DataResult[Optional[dict]]:
        """Fetch at most one row. A missing row is not an error."""
        result = self.select(collection, filters=filters)
        if not result.ok:
            return result
        return DataResult(data=result.data[0] if result.data else None)

    def insert(self, collection: str, row: dict[str, Any]) -> DataResult[dict]:
        model = self._model(collection)
        if model is None:
            return DataResult(error=DataError(f"Unknown collection: {collection}", UNKNOWN_COLLECTION))

        error = self._check_columns(model, row.keys())
        if error:
            return DataResult(error=error)

        try:
            obj = model(**row)
            self.db.add(obj)
            self.db.commit()
            self.db.refresh(obj)
        except SQLAlchemyError as e:
            return self._failure(collection, "insert", e)

        return DataResult(data=row_to_dict(obj))

    def update(self, collection: str, row_id: UUID, patch: dict[str, Any]) -> DataResult[dict]:
        model = self._model(collection)
        if model is None:
            return DataResult(error=DataError(f"Unknown collection: {collection}", UNKNOWN_COLLECTION))

        if "id" in patch:
            return DataResult(error=DataError("Row id cannot be changed", UNKNOWN_COLUMN))
        error = self._check_columns(model, patch.keys())
        if error:
            return DataResult(error=error)

        try:
            obj = self.db.query(model).filter(model.id == row_id).first()
            if obj is None:
                return DataResult(error=DataError(f"No row with id {row_id} in {collection}", NOT_FOUND))
            for column, value in patch.items():
                setattr(obj, column, value)
            self.db.commit()
            self.db.refresh(obj)
        except SQLAlchemyError as e:
            return self._failure(collection, "update", e)

        return DataResult(data=row_to_dict(obj))

    def delete(self, collection: str, row_id: UUID) -> DataResult[None]:
        model = self._model(collection)
        if model is None:
            return DataResult(error=DataError(f"Unknown collection: {collection}", UNKNOWN_COLLECTION))

        try:
            deleted = self.db.query(model).filter(model.id == row_id).delete()
            self.db.commit()
        except SQLAlchemyError as e:
            return self._failure(collection, "delete", e)

        if not deleted:
            return DataResult(error=DataError(f"No row with id {row_id} in {collection}", NOT_FOUND))
        return DataResult()
