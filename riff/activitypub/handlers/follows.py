from __future__ import annotations

from flask import current_app

from riff.activitypub.handlers import InboxContext, register_handler, register_undo
from riff.activitypub.outbox import send_accept
from riff.activitypub.types import Activity, ActivityType, uri_of
from riff.activitypub.util import log_incoming_ap
from riff.constants import APLOG_ACCEPT, APLOG_FOLLOW, APLOG_IGNORED, APLOG_REJECT, APLOG_SUCCESS, \
    APLOG_UNDO_FOLLOW, FOLLOW_ACCEPTED, FOLLOW_PENDING, NOTIF_FOLLOW
from riff.models import Actor
from riff.shared.notifications import notify, withdraw_notification


""" JSON format
{
  'id':
  'type': 'Follow'
  'actor':      follower
  'object':     uri of the actor being followed
  '@context':
}
"""


def follow_status_for(target: Actor) -> str:
    if current_app.config['FOLLOW_APPROVAL_POLICY'] == 'actor' and target.is_local() and target.require_approval:
        return FOLLOW_PENDING
    return FOLLOW_ACCEPTED


@register_handler(ActivityType.FOLLOW)
def follow(activity: Activity, ctx: InboxContext, actor: Actor):
    target = ctx.actors.find_by_uri(activity.object_uri)
    if target is None:
        log_incoming_ap(activity.id, APLOG_FOLLOW, APLOG_IGNORED, activity.raw, 'Could not find target of Follow',
                        session=ctx.session)
        return
    if target.id == actor.id:
        log_incoming_ap(activity.id, APLOG_FOLLOW, APLOG_IGNORED, activity.raw, 'Cannot follow yourself',
                        session=ctx.session)
        return

    status = follow_status_for(target)
    if ctx.relationships.add_follow(actor, target, status, activity.id):
        if status == FOLLOW_ACCEPTED:
            notify(ctx.session, NOTIF_FOLLOW, target, actor)
    # the edge is committed before the Accept leaves, and stays if sending fails
    ctx.session.commit()
    log_incoming_ap(activity.id, APLOG_FOLLOW, APLOG_SUCCESS, activity.raw, session=ctx.session)

    edge = ctx.relationships.find_follow(actor, target)
    if edge is not None and edge.status == FOLLOW_ACCEPTED and target.is_local():
        send_accept(target, actor, activity)


@register_undo(ActivityType.FOLLOW)
def undo_follow(inner: Activity, ctx: InboxContext, actor: Actor):
    target = ctx.actors.find_by_uri(inner.object_uri)
    if target is None:
        log_incoming_ap(inner.id, APLOG_UNDO_FOLLOW, APLOG_IGNORED, inner.raw, 'Could not find target of Follow',
                        session=ctx.session)
        return
    if ctx.relationships.remove_follow(actor, target):
        withdraw_notification(ctx.session, NOTIF_FOLLOW, target, actor)
        log_incoming_ap(inner.id, APLOG_UNDO_FOLLOW, APLOG_SUCCESS, inner.raw, session=ctx.session)
    else:
        log_incoming_ap(inner.id, APLOG_UNDO_FOLLOW, APLOG_IGNORED, inner.raw, 'Not following',
                        session=ctx.session)


def _our_follow(activity: Activity, ctx: InboxContext, actor: Actor):
    """The local follower whose Follow of `actor` is being answered, or None"""
    inner = activity.inner()
    if inner is not None:
        if inner.kind != ActivityType.FOLLOW or inner.object_uri != actor.uri:
            return None
        follower = ctx.actors.find_by_uri(uri_of(inner.raw.get('actor')))
    else:
        # some servers only send the id of our Follow
        edge = ctx.relationships.find_follow_by_activity_id(activity.object_uri, actor)
        follower = edge.follower if edge is not None else None
    if follower is None or not follower.is_local():
        return None
    return follower


@register_handler(ActivityType.ACCEPT)
def accept(activity: Activity, ctx: InboxContext, actor: Actor):
    follower = _our_follow(activity, ctx, actor)
    if follower is None or not ctx.relationships.set_follow_status(follower, actor, FOLLOW_ACCEPTED):
        log_incoming_ap(activity.id, APLOG_ACCEPT, APLOG_IGNORED, activity.raw, 'Unknown Follow',
                        session=ctx.session)
        return
    log_incoming_ap(activity.id, APLOG_ACCEPT, APLOG_SUCCESS, activity.raw, session=ctx.session)


@register_handler(ActivityType.REJECT)
def reject(activity: Activity, ctx: InboxContext, actor: Actor):
    follower = _our_follow(activity, ctx, actor)
    if follower is None or not ctx.relationships.remove_follow(follower, actor):
        log_incoming_ap(activity.id, APLOG_REJECT, APLOG_IGNORED, activity.raw, 'Unknown Follow',
                        session=ctx.session)
        return
    log_incoming_ap(activity.id, APLOG_REJECT, APLOG_SUCCESS, activity.raw, session=ctx.session)
