"""Posts and the edges other actors hang off them"""
from __future__ import annotations
from typing import Optional
from datetime import datetime
from sqlalchemy import String, Integer, Boolean, Text, DateTime, ForeignKey, JSON, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from riff import db
from riff.constants import POST_NOTE, POST_ARTICLE, POST_PAGE
from riff.models.base import TimestampMixin, ActorId, PostId
from riff.utils import utcnow


class Post(TimestampMixin, db.Model):
    """A Note, Article or Page. Only Article and Page carry a title."""
    __tablename__ = 'post'
    __table_args__ = (
        CheckConstraint(f"kind IN ('{POST_NOTE}', '{POST_ARTICLE}', '{POST_PAGE}')", name='ck_post_kind'),
        {'extend_existing': True}
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    uri: Mapped[str] = mapped_column(String(2048), unique=True, nullable=False)
    actor_id: Mapped[ActorId] = mapped_column(Integer, ForeignKey('actor.id', ondelete='CASCADE'), nullable=False,
                                              index=True)

    # Content
    kind: Mapped[str] = mapped_column(String(10), default=POST_NOTE, nullable=False)
    title: Mapped[Optional[str]] = mapped_column(String(500))
    content: Mapped[str] = mapped_column(Text, default='', nullable=False)  # sanitized html
    sensitive: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    url: Mapped[Optional[str]] = mapped_column(String(2048))

    # Threading
    in_reply_to_id: Mapped[Optional[PostId]] = mapped_column(Integer, ForeignKey('post.id', ondelete='SET NULL'),
                                                             index=True)
    quote_of_id: Mapped[Optional[PostId]] = mapped_column(Integer, ForeignKey('post.id', ondelete='SET NULL'),
                                                          index=True)
    addressed_to: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    # Stats, recomputed from the edge tables
    likes_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    boosts_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    replies_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    published_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False, index=True)
    edited_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    author = relationship('Actor', back_populates='posts', foreign_keys=[actor_id])

    def __repr__(self) -> str:
        return f'<Post {self.uri}>'


class Like(db.Model):
    __tablename__ = 'like'
    __table_args__ = (
        UniqueConstraint('actor_id', 'post_id', name='uq_like_actor_post'),
        {'extend_existing': True}
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    actor_id: Mapped[ActorId] = mapped_column(Integer, ForeignKey('actor.id', ondelete='CASCADE'), nullable=False)
    post_id: Mapped[PostId] = mapped_column(Integer, ForeignKey('post.id', ondelete='CASCADE'), nullable=False,
                                            index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)


class Boost(db.Model):
    __tablename__ = 'boost'
    __table_args__ = (
        UniqueConstraint('actor_id', 'post_id', name='uq_boost_actor_post'),
        {'extend_existing': True}
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    actor_id: Mapped[ActorId] = mapped_column(Integer, ForeignKey('actor.id', ondelete='CASCADE'), nullable=False)
    post_id: Mapped[PostId] = mapped_column(Integer, ForeignKey('post.id', ondelete='CASCADE'), nullable=False,
                                            index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)


class PinnedPost(db.Model):
    """Membership of an actor's featured collection, ordered by pinned_at"""
    __tablename__ = 'pinned_post'
    __table_args__ = {'extend_existing': True}

    actor_id: Mapped[ActorId] = mapped_column(Integer, ForeignKey('actor.id', ondelete='CASCADE'), primary_key=True)
    post_id: Mapped[PostId] = mapped_column(Integer, ForeignKey('post.id', ondelete='CASCADE'), primary_key=True)
    pinned_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)


class Hashtag(db.Model):
    """A hashtag, stored lowercased and without the leading #"""
    __tablename__ = 'hashtag'
    __table_args__ = {'extend_existing': True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(256), unique=True, nullable=False)

    def __repr__(self) -> str:
        return f'<Hashtag #{self.name}>'


class PostHashtag(db.Model):
    __tablename__ = 'post_hashtag'
    __table_args__ = {'extend_existing': True}

    post_id: Mapped[PostId] = mapped_column(Integer, ForeignKey('post.id', ondelete='CASCADE'), primary_key=True)
    hashtag_id: Mapped[int] = mapped_column(Integer, ForeignKey('hashtag.id', ondelete='CASCADE'), primary_key=True,
                                            index=True)
