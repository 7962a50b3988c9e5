from __future__ import annotations

from flask import current_app
from sqlalchemy import delete

from riff.models import Actor, Notification, Post


def notify(session, notif_type: str, recipient: Actor | None, actor: Actor, post: Post | None = None) -> bool:
    """Tell a local actor that someone else did something to them or their post"""
    if recipient is None or not recipient.is_local() or recipient.id == actor.id:
        return False
    session.add(Notification(notif_type=notif_type, recipient_id=recipient.id, actor_id=actor.id,
                             post_id=post.id if post else None))
    session.flush()
    current_app.logger.debug(f'{notif_type} notification for {recipient.handle} from {actor.handle}')
    return True


def withdraw_notification(session, notif_type: str, recipient: Actor | None, actor: Actor, post: Post | None = None):
    if recipient is None:
        return
    query = delete(Notification).where(Notification.notif_type == notif_type, Notification.recipient_id == recipient.id,
                                       Notification.actor_id == actor.id)
    if post is not None:
        query = query.where(Notification.post_id == post.id)
    session.execute(query)
