from __future__ import annotations

from riff.activitypub.authorization import can_delete, is_self_deletion
from riff.activitypub.handlers import InboxContext, register_handler
from riff.activitypub.types import Activity, ActivityType
from riff.activitypub.util import log_incoming_ap
from riff.constants import APLOG_DELETE, APLOG_IGNORED, APLOG_SUCCESS
from riff.models import Actor


""" JSON format
{
  'id':
  'type': 'Delete'
  'actor':
  'object':     uri of a post or of the actor itself, or a Tombstone / the original object with that uri as its id
  '@context':
}
"""


@register_handler(ActivityType.DELETE)
def delete(activity: Activity, ctx: InboxContext, actor: Actor):
    object_uri = activity.object_uri
    if is_self_deletion(object_uri, actor.uri):
        if actor.is_local():
            log_incoming_ap(activity.id, APLOG_DELETE, APLOG_IGNORED, activity.raw, 'Local actors are not deleted by federation',
                            session=ctx.session)
            return
        deleted = ctx.actors.delete_actor_and_posts(actor, ctx.posts, ctx.relationships)
        log_incoming_ap(activity.id, APLOG_DELETE, APLOG_SUCCESS, activity.raw, f'Deleted actor and {deleted} posts',
                        session=ctx.session)
        return

    delete_post(activity, ctx, actor)


def delete_post(activity: Activity, ctx: InboxContext, actor: Actor):
    post = ctx.posts.find_by_uri(activity.object_uri)
    if post is None:
        log_incoming_ap(activity.id, APLOG_DELETE, APLOG_IGNORED, activity.raw, 'Unfound object', session=ctx.session)
        return
    if not can_delete(actor, post):
        log_incoming_ap(activity.id, APLOG_DELETE, APLOG_IGNORED, activity.raw, 'Deletor did not have permission',
                        session=ctx.session)
        return
    ctx.posts.delete(post)
    log_incoming_ap(activity.id, APLOG_DELETE, APLOG_SUCCESS, activity.raw, session=ctx.session)
