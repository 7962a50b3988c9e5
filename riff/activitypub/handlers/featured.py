from __future__ import annotations

from riff.activitypub.authorization import owns_featured
from riff.activitypub.handlers import InboxContext, register_handler
from riff.activitypub.types import Activity, ActivityType
from riff.activitypub.util import log_incoming_ap
from riff.constants import APLOG_ADD, APLOG_IGNORED, APLOG_REMOVE, APLOG_SUCCESS
from riff.models import Actor


""" JSON format
{
  'id':
  'type': 'Add' or 'Remove'
  'actor':
  'object':     uri of the post
  'target':     the actor's featured collection
  '@context':
}
"""


@register_handler(ActivityType.ADD)
def add(activity: Activity, ctx: InboxContext, actor: Actor):
    if not owns_featured(actor, activity.target):
        log_incoming_ap(activity.id, APLOG_ADD, APLOG_IGNORED, activity.raw, 'Target is not our featured collection',
                        session=ctx.session)
        return
    post = ctx.posts.find_by_uri(activity.object_uri)
    if post is None:
        log_incoming_ap(activity.id, APLOG_ADD, APLOG_IGNORED, activity.raw, 'Unfound object', session=ctx.session)
        return
    ctx.relationships.pin(actor, post)
    log_incoming_ap(activity.id, APLOG_ADD, APLOG_SUCCESS, activity.raw, session=ctx.session)


@register_handler(ActivityType.REMOVE)
def remove(activity: Activity, ctx: InboxContext, actor: Actor):
    if not owns_featured(actor, activity.target):
        log_incoming_ap(activity.id, APLOG_REMOVE, APLOG_IGNORED, activity.raw, 'Target is not our featured collection',
                        session=ctx.session)
        return
    post = ctx.posts.find_by_uri(activity.object_uri)
    if post is None or not ctx.relationships.unpin(actor, post):
        log_incoming_ap(activity.id, APLOG_REMOVE, APLOG_IGNORED, activity.raw, 'Not pinned', session=ctx.session)
        return
    log_incoming_ap(activity.id, APLOG_REMOVE, APLOG_SUCCESS, activity.raw, session=ctx.session)
