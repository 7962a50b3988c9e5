from __future__ import annotations

from riff.activitypub.handlers import InboxContext, get_undo_registry, register_handler
from riff.activitypub.types import Activity, ActivityType, uri_of
from riff.activitypub.util import log_incoming_ap
from riff.constants import APLOG_IGNORED, APLOG_UNDO
from riff.models import Actor


""" JSON format
{
  'id':
  'type': 'Undo'
  'actor':
  'object': {       the Follow, Like or Announce being reversed
    'id':
    'type':
    'actor':
    'object':
  }
  '@context':
}
"""


@register_handler(ActivityType.UNDO)
def undo(activity: Activity, ctx: InboxContext, actor: Actor):
    inner = activity.inner()
    if inner is None:
        log_incoming_ap(activity.id, APLOG_UNDO, APLOG_IGNORED, activity.raw, 'Nothing to undo', session=ctx.session)
        return
    inner_actor = uri_of(inner.raw.get('actor'))
    if inner_actor is not None and inner_actor != actor.uri:
        log_incoming_ap(activity.id, APLOG_UNDO, APLOG_IGNORED, activity.raw, 'Cannot undo the activity of someone else',
                        session=ctx.session)
        return
    handler = get_undo_registry().get(inner.kind)
    if handler is None:
        log_incoming_ap(activity.id, APLOG_UNDO, APLOG_IGNORED, activity.raw, f'Undo {inner.kind.value} is not supported',
                        session=ctx.session)
        return
    handler(inner, ctx, actor)
