#teamtasks/models/base.py
"""
Declarative base plus the column building blocks shared by all models.

    from teamtasks.models.base import Base, AuditMixin, SoftDeleteMixin
"""
from datetime import datetime, timezone
import enum
from typing import Optional

from sqlalchemy import Column, DateTime, Integer
from sqlalchemy.orm import declarative_base
from sqlalchemy.types import TypeDecorator

from teamtasks.core import clock

Base = declarative_base()


class UTCDateTime(TypeDecorator):
    """
    Stores naive UTC, always hands back timezone-aware UTC datetimes,
    so comparisons with clock.utcnow() work on every backend.
    """
    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def _now() -> datetime:
    return clock.utcnow()


class AuditMixin:
    """
    Creation/update audit fields. Mixed into every model; services stamp them
    with the acting user's id.
    """
    created_at = Column(UTCDateTime, nullable=False, default=_now, doc="Creation time")
    updated_at = Column(UTCDateTime, nullable=False, default=_now, doc="Last update time")
    created_by = Column(Integer, nullable=True, doc="ID of the user who created the row")
    updated_by = Column(Integer, nullable=True, doc="ID of the user who last changed the row")

    def stamp_created(self, actor_id: int, now: Optional[datetime] = None) -> None:
        now = now or clock.utcnow()
        self.created_at = now
        self.updated_at = now
        self.created_by = actor_id
        self.updated_by = actor_id

    def stamp_updated(self, actor_id: int, now: Optional[datetime] = None) -> None:
        self.updated_at = now or clock.utcnow()
        self.updated_by = actor_id


class SoftDeleteMixin:
    """
    Models whose status enum ends in a DELETED tombstone.
    `not_deleted()` is the one filter used by every query that hides tombstones.
    """
    __deleted_status__: enum.Enum

    @property
    def is_deleted(self) -> bool:
        return self.status == self.__deleted_status__

    @classmethod
    def not_deleted(cls):
        return cls.status != cls.__deleted_status__
