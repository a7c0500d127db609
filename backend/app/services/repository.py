"""
repository.py — Generic Document Store Access

Purpose:
- Thin wrapper providing create / find-by-id / find-by-filter /
  update-by-id / delete-by-id / count helpers over one ORM model.
- Translate SQLAlchemy failures into domain errors so services only ever
  see `TaskBoardError` subclasses.

This module does NOT:
- Decide who may do what (see services/membership.py).
- Commit on its own: services call `commit()` once per unit of work.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Generic, Iterator, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.core.errors import Conflict, StoreError, TaskBoardError
from app.core.logging import get_logger
from app.models.base import Base

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


@contextmanager
def store_errors(db: Session) -> Iterator[None]:
    """Roll back and re-raise any store failure as StoreError."""
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Store operation failed: %s", e)
        raise StoreError(f"Storage failure: {e.__class__.__name__}") from e


def commit(db: Session, integrity_error: Type[TaskBoardError] = StoreError) -> None:
    """
    Commit the session's unit of work.

    Raises:
        Conflict: a versioned row changed underneath us (stale revision).
        integrity_error: a unique / foreign-key constraint rejected the write.
        StoreError: any other persistence failure.
    """
    try:
        db.commit()
    except StaleDataError as e:
        db.rollback()
        logger.info("Stale revision on commit: %s", e)
        raise Conflict() from e
    except IntegrityError as e:
        db.rollback()
        logger.warning("Integrity violation on commit: %s", e.orig)
        if integrity_error is StoreError:
            raise StoreError("Storage failure: integrity violation") from e
        raise integrity_error() from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Commit failed: %s", e)
        raise StoreError(f"Storage failure: {e.__class__.__name__}") from e


class Repository(Generic[ModelT]):
    def __init__(self, db: Session, model: Type[ModelT]) -> None:
        self._db = db
        self._model = model

    # ------------------------------------------------------------------ #
    def create(self, **fields: Any) -> ModelT:
        obj = self._model(**fields)
        self._db.add(obj)
        return obj

    def find_by_id(self, obj_id: Any, options: Sequence[Any] = ()) -> Optional[ModelT]:
        if obj_id is None:
            return None
        with store_errors(self._db):
            return self._db.get(self._model, obj_id, options=list(options) or None)

    def find(
        self,
        *criteria: Any,
        order_by: Sequence[Any] = (),
        options: Sequence[Any] = (),
    ) -> List[ModelT]:
        stmt = select(self._model).where(*criteria)
        if order_by:
            stmt = stmt.order_by(*order_by)
        if options:
            stmt = stmt.options(*options)
        with store_errors(self._db):
            return list(self._db.scalars(stmt).unique())

    def find_one(self, *criteria: Any, options: Sequence[Any] = ()) -> Optional[ModelT]:
        stmt = select(self._model).where(*criteria).limit(1)
        if options:
            stmt = stmt.options(*options)
        with store_errors(self._db):
            return self._db.scalars(stmt).first()

    def count(self, *criteria: Any) -> int:
        stmt = select(func.count()).select_from(self._model).where(*criteria)
        with store_errors(self._db):
            return self._db.scalar(stmt) or 0

    def update_by_id(self, obj_id: Any, fields: Dict[str, Any]) -> Optional[ModelT]:
        obj = self.find_by_id(obj_id)
        if obj is None:
            return None
        for key, value in fields.items():
            setattr(obj, key, value)
        return obj

    def delete_by_id(self, obj_id: Any) -> bool:
        obj = self.find_by_id(obj_id)
        if obj is None:
            return False
        with store_errors(self._db):
            self._db.delete(obj)
        return True
