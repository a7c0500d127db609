"""
base.py — Shared Declarative Base

All task board models register on one `Base` so a single
`Base.metadata.create_all()` builds the whole schema and foreign keys
resolve across modules.
"""

import datetime
import uuid

from sqlalchemy import Column, DateTime
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def new_id() -> str:
    """Opaque 32-char hex identifier used as primary key for every collection."""
    return uuid.uuid4().hex


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
