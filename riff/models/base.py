"""Base classes and mixins for Riff models"""
from __future__ import annotations
from typing import Optional, TypeAlias
from datetime import datetime
from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, mapped_column

from riff.utils import utcnow


# Type aliases for better readability
ActorId: TypeAlias = int
PostId: TypeAlias = int


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps"""
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        nullable=False,
        index=True
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime,
        onupdate=utcnow
    )
