"""Notifications for local actors"""
from __future__ import annotations
from typing import Optional
from datetime import datetime
from sqlalchemy import String, Integer, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from riff import db
from riff.models.base import ActorId, PostId
from riff.utils import utcnow


class Notification(db.Model):
    __tablename__ = 'notification'
    __table_args__ = {'extend_existing': True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    notif_type: Mapped[str] = mapped_column(String(20), nullable=False)  # follow, like, boost, reply
    recipient_id: Mapped[ActorId] = mapped_column(Integer, ForeignKey('actor.id', ondelete='CASCADE'),
                                                  nullable=False, index=True)
    actor_id: Mapped[ActorId] = mapped_column(Integer, ForeignKey('actor.id', ondelete='CASCADE'), nullable=False)
    post_id: Mapped[Optional[PostId]] = mapped_column(Integer, ForeignKey('post.id', ondelete='CASCADE'))
    read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
