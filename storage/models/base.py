"""
Base ORM Model and Mixins.

- Base: SQLAlchemy declarative base for all models
- TimestampMixin: created_at / updated_at columns
"""

from datetime import datetime

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from core.clock import now_utc


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    type_annotation_map = {
        datetime: DateTime(timezone=True),
    }


class TimestampMixin:
    """
    Standard timestamp columns, stamped from the engine clock.

    Usage:
        class MyModel(Base, TimestampMixin):
            __tablename__ = "my_table"
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=now_utc,
        comment="Record creation timestamp (UTC)",
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=now_utc,
        onupdate=now_utc,
        comment="Last update timestamp (UTC)",
    )
