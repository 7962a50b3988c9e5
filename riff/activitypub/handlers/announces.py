from __future__ import annotations

from riff.activitypub.handlers import InboxContext, register_handler, register_undo
from riff.activitypub.handlers.deletes import delete_post
from riff.activitypub.types import Activity, ActivityType
from riff.activitypub.util import log_incoming_ap
from riff.constants import APLOG_ANNOUNCE, APLOG_IGNORED, APLOG_SUCCESS, APLOG_UNDO_ANNOUNCE, NOTIF_BOOST
from riff.models import Actor
from riff.shared.notifications import notify, withdraw_notification


""" JSON format
{
  'id':
  'type': 'Announce'
  'actor':          a person boosting, or a group re-broadcasting to its followers
  'object':         uri of a post, the post itself, or an activity the group relays
  '@context':
}
"""


def announces_an_activity(activity: Activity) -> bool:
    """Groups re-broadcast their members' activities (votes, undos...) with Announce. Those are not boosts."""
    if activity.object_type is not None and ActivityType.from_name(activity.object_type) is not None:
        return True
    object_uri = activity.object_uri or ''
    return any(f'/activities/{kind}/' in object_uri for kind in ('like', 'dislike', 'undo', 'create', 'update',
                                                                 'delete', 'remove'))


@register_handler(ActivityType.ANNOUNCE)
def announce(activity: Activity, ctx: InboxContext, actor: Actor):
    relayed = activity.inner()
    if relayed is not None and relayed.kind == ActivityType.DELETE:
        # moderation published by the community, judged with the group as the deletor
        delete_post(relayed, ctx, actor)
        return
    if relayed is not None and relayed.kind == ActivityType.REMOVE:
        withdraw_boost(relayed, ctx, actor, APLOG_ANNOUNCE)
        return
    if announces_an_activity(activity):
        log_incoming_ap(activity.id, APLOG_ANNOUNCE, APLOG_IGNORED, activity.raw, 'Announced activity, not a post',
                        session=ctx.session)
        return
    post = ctx.posts.find_by_uri(activity.object_uri)
    if post is None:
        log_incoming_ap(activity.id, APLOG_ANNOUNCE, APLOG_IGNORED, activity.raw, 'Unfound object',
                        session=ctx.session)
        return
    # the booster's kind stays on its Actor row, feeds tell group boosts from person boosts by joining to it
    if ctx.relationships.add_boost(actor, post):
        notify(ctx.session, NOTIF_BOOST, post.author, actor, post)
    log_incoming_ap(activity.id, APLOG_ANNOUNCE, APLOG_SUCCESS, activity.raw, session=ctx.session)


@register_undo(ActivityType.ANNOUNCE)
def undo_announce(inner: Activity, ctx: InboxContext, actor: Actor):
    withdraw_boost(inner, ctx, actor, APLOG_UNDO_ANNOUNCE)


def withdraw_boost(activity: Activity, ctx: InboxContext, actor: Actor, aplog_type):
    post = ctx.posts.find_by_uri(activity.object_uri)
    if post is None:
        log_incoming_ap(activity.id, aplog_type, APLOG_IGNORED, activity.raw, 'Unfound object',
                        session=ctx.session)
        return
    if ctx.relationships.remove_boost(actor, post):
        withdraw_notification(ctx.session, NOTIF_BOOST, post.author, actor, post)
        log_incoming_ap(activity.id, aplog_type, APLOG_SUCCESS, activity.raw, session=ctx.session)
    else:
        log_incoming_ap(activity.id, aplog_type, APLOG_IGNORED, activity.raw, 'No boost to undo',
                        session=ctx.session)
