"""ActivityPub logging"""
from __future__ import annotations
from typing import Optional
from sqlalchemy import String, Integer, Text, Index
from sqlalchemy.orm import Mapped, mapped_column

from riff import db
from riff.models.base import TimestampMixin


class ActivityPubLog(TimestampMixin, db.Model):
    """ActivityPub activity logging"""
    __tablename__ = 'activity_pub_log'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    # Activity details
    direction: Mapped[str] = mapped_column(String(3), nullable=False)  # 'in' or 'out'
    activity_id: Mapped[Optional[str]] = mapped_column(String(2048), index=True)
    activity_type: Mapped[Optional[str]] = mapped_column(String(50), index=True)
    result: Mapped[Optional[str]] = mapped_column(String(10))  # 'success', 'failure', etc.
    activity_json: Mapped[Optional[str]] = mapped_column(Text)

    # Error tracking
    exception_message: Mapped[Optional[str]] = mapped_column(Text)

    __table_args__ = (
        Index('idx_activitypub_log_lookup', 'activity_id', 'direction'),
        {'extend_existing': True}
    )
