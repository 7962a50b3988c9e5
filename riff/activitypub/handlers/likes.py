from __future__ import annotations

from riff.activitypub.handlers import InboxContext, register_handler, register_undo
from riff.activitypub.types import Activity, ActivityType
from riff.activitypub.util import log_incoming_ap
from riff.constants import APLOG_IGNORED, APLOG_LIKE, APLOG_SUCCESS, APLOG_UNDO_VOTE, NOTIF_LIKE
from riff.models import Actor
from riff.shared.notifications import notify, withdraw_notification


@register_handler(ActivityType.LIKE)
def like(activity: Activity, ctx: InboxContext, actor: Actor):
    post = ctx.posts.find_by_uri(activity.object_uri)
    if post is None:
        log_incoming_ap(activity.id, APLOG_LIKE, APLOG_IGNORED, activity.raw, 'Unfound object', session=ctx.session)
        return
    if ctx.relationships.add_like(actor, post):
        notify(ctx.session, NOTIF_LIKE, post.author, actor, post)
    log_incoming_ap(activity.id, APLOG_LIKE, APLOG_SUCCESS, activity.raw, session=ctx.session)


@register_undo(ActivityType.LIKE)
def undo_like(inner: Activity, ctx: InboxContext, actor: Actor):
    post = ctx.posts.find_by_uri(inner.object_uri)
    if post is None:
        log_incoming_ap(inner.id, APLOG_UNDO_VOTE, APLOG_IGNORED, inner.raw, 'Unfound object', session=ctx.session)
        return
    if ctx.relationships.remove_like(actor, post):
        withdraw_notification(ctx.session, NOTIF_LIKE, post.author, actor, post)
        log_incoming_ap(inner.id, APLOG_UNDO_VOTE, APLOG_SUCCESS, inner.raw, session=ctx.session)
    else:
        log_incoming_ap(inner.id, APLOG_UNDO_VOTE, APLOG_IGNORED, inner.raw, 'No like to undo', session=ctx.session)
