"""Actors (people and groups) and the follow graph between them"""
from __future__ import annotations
from typing import Optional
from datetime import datetime
from sqlalchemy import String, Integer, Boolean, Text, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from flask import current_app

from riff import db
from riff.constants import ACTOR_PERSON, ACTOR_GROUP, FOLLOW_ACCEPTED, FOLLOW_PENDING
from riff.models.base import TimestampMixin, ActorId
from riff.utils import host_of, utcnow


class Actor(TimestampMixin, db.Model):
    """A Person or Group, local or remote. The uri never changes once stored."""
    __tablename__ = 'actor'
    __table_args__ = (
        CheckConstraint(f"kind IN ('{ACTOR_PERSON}', '{ACTOR_GROUP}')", name='ck_actor_kind'),
        {'extend_existing': True}
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    uri: Mapped[str] = mapped_column(String(2048), unique=True, nullable=False)
    handle: Mapped[str] = mapped_column(String(512), nullable=False, index=True)
    name: Mapped[Optional[str]] = mapped_column(String(200))
    bio: Mapped[Optional[str]] = mapped_column(Text)
    kind: Mapped[str] = mapped_column(String(10), default=ACTOR_PERSON, nullable=False)

    # Federation
    inbox_url: Mapped[Optional[str]] = mapped_column(String(2048))
    shared_inbox_url: Mapped[Optional[str]] = mapped_column(String(2048))
    featured_url: Mapped[Optional[str]] = mapped_column(String(2048))
    url: Mapped[Optional[str]] = mapped_column(String(2048))
    public_key: Mapped[Optional[str]] = mapped_column(Text)
    private_key: Mapped[Optional[str]] = mapped_column(Text)

    # Local accounts only
    user_name: Mapped[Optional[str]] = mapped_column(String(255), unique=True)
    require_approval: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    posts = relationship('Post', back_populates='author', lazy='dynamic', foreign_keys='Post.actor_id')

    def is_local(self) -> bool:
        return host_of(self.uri) == current_app.config['SERVER_NAME'].lower()

    def public_url(self) -> str:
        return self.uri

    def key_id(self) -> str:
        return f"{self.uri}#main-key"

    def __repr__(self) -> str:
        return f'<Actor {self.handle}>'


class Follow(db.Model):
    """At most one edge per ordered (follower, following) pair"""
    __tablename__ = 'follow'
    __table_args__ = (
        CheckConstraint(f"status IN ('{FOLLOW_PENDING}', '{FOLLOW_ACCEPTED}')", name='ck_follow_status'),
        {'extend_existing': True}
    )

    follower_id: Mapped[ActorId] = mapped_column(Integer, ForeignKey('actor.id', ondelete='CASCADE'), primary_key=True)
    following_id: Mapped[ActorId] = mapped_column(Integer, ForeignKey('actor.id', ondelete='CASCADE'),
                                                  primary_key=True, index=True)
    status: Mapped[str] = mapped_column(String(10), default=FOLLOW_ACCEPTED, nullable=False)
    activity_id: Mapped[Optional[str]] = mapped_column(String(2048))   # id of the Follow, echoed back in the Accept
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    follower = relationship('Actor', foreign_keys=[follower_id])
    following = relationship('Actor', foreign_keys=[following_id])
