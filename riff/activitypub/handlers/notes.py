from __future__ import annotations

from flask import current_app

from riff.activitypub.actor import same_instance
from riff.activitypub.authorization import can_update, describes_self
from riff.activitypub.handlers import InboxContext, register_handler
from riff.activitypub.types import Activity, ActivityType, ActorDescriptor, ACTOR_DOCUMENT_TYPES, ValidationError, \
    uri_of
from riff.activitypub.util import log_incoming_ap, post_content, content_too_large, post_title, post_url, \
    is_sensitive, parse_published, in_reply_to, quote_uri, addressed_to, edited_at, hashtags
from riff.constants import APLOG_CREATE, APLOG_DUPLICATE, APLOG_FAILURE, APLOG_IGNORED, APLOG_SUCCESS, \
    APLOG_UPDATE, NOTIF_REPLY, POST_KINDS
from riff.models import Actor
from riff.shared.notifications import notify


""" JSON format
{
  'id':
  'type': 'Create' or 'Update'
  'actor':
  'object': {
    'id':
    'type':         Note, Article or Page (or Person / Group for Update)
    'attributedTo':
    'content':
    'name':         title, Article and Page only
    'sensitive':
    'url':
    'inReplyTo':
    'quoteUrl':
    'tag': [{'type': 'Hashtag', 'name': '#tag'}, ...]
    'audience':
    'published':
  }
  '@context':
  'to': []
}
"""


@register_handler(ActivityType.CREATE)
def create(activity: Activity, ctx: InboxContext, actor: Actor):
    note = activity.object_json
    if not note or note.get('type') not in POST_KINDS:
        log_incoming_ap(activity.id, APLOG_CREATE, APLOG_IGNORED, activity.raw, 'Not a post', session=ctx.session)
        return
    uri = note.get('id')
    if not same_instance(uri, actor.uri):
        log_incoming_ap(activity.id, APLOG_CREATE, APLOG_IGNORED, activity.raw, 'Post not hosted by its sender',
                        session=ctx.session)
        return
    if ctx.posts.find_by_uri(uri) is not None:
        log_incoming_ap(activity.id, APLOG_DUPLICATE, APLOG_IGNORED, activity.raw, 'Post already exists',
                        session=ctx.session)
        return
    attributed_to = uri_of(note.get('attributedTo'))
    if attributed_to is not None and attributed_to != actor.uri:
        log_incoming_ap(activity.id, APLOG_CREATE, APLOG_IGNORED, activity.raw, 'Post attributed to someone else',
                        session=ctx.session)
        return

    content = post_content(note)
    if content_too_large(content):
        log_incoming_ap(activity.id, APLOG_CREATE, APLOG_FAILURE, None, 'Content too large', session=ctx.session)
        return

    parent = None
    parent_uri = in_reply_to(note)
    if parent_uri:
        parent = ctx.posts.find_by_uri(parent_uri)
        if parent is None and current_app.config['DISCARD_ORPHAN_REPLIES']:
            log_incoming_ap(activity.id, APLOG_CREATE, APLOG_IGNORED, activity.raw, 'Unknown parent',
                            session=ctx.session)
            return
    quoted = ctx.posts.find_by_uri(quote_uri(note))

    post = ctx.posts.insert(actor, uri, content, note['type'], title=post_title(note), sensitive=is_sensitive(note),
                            url=post_url(note), in_reply_to=parent, quote_of=quoted,
                            addressed_to=addressed_to(activity.raw, note),
                            published_at=parse_published(note.get('published')))
    if post is None:  # another delivery of the same post got there first
        log_incoming_ap(activity.id, APLOG_DUPLICATE, APLOG_IGNORED, activity.raw, 'Post already exists',
                        session=ctx.session)
        return
    ctx.posts.set_hashtags(post, hashtags(note))
    if parent is not None:
        notify(ctx.session, NOTIF_REPLY, parent.author, actor, post)
    log_incoming_ap(activity.id, APLOG_CREATE, APLOG_SUCCESS, activity.raw, session=ctx.session)


@register_handler(ActivityType.UPDATE)
def update(activity: Activity, ctx: InboxContext, actor: Actor):
    if activity.object_type in ACTOR_DOCUMENT_TYPES:
        update_actor(activity, ctx, actor)
    elif activity.object_type in POST_KINDS:
        update_post(activity, ctx, actor)
    else:
        log_incoming_ap(activity.id, APLOG_UPDATE, APLOG_IGNORED, activity.raw, 'Unsupported object',
                        session=ctx.session)


def update_actor(activity: Activity, ctx: InboxContext, actor: Actor):
    if not describes_self(actor, activity.object_uri) or actor.is_local():
        log_incoming_ap(activity.id, APLOG_UPDATE, APLOG_IGNORED, activity.raw, 'Actor can only update itself',
                        session=ctx.session)
        return
    try:
        descriptor = ActorDescriptor.from_json(activity.object_json)
    except ValidationError as e:
        log_incoming_ap(activity.id, APLOG_UPDATE, APLOG_FAILURE, activity.raw, str(e), session=ctx.session)
        return
    ctx.actors.update_profile(actor, descriptor)
    log_incoming_ap(activity.id, APLOG_UPDATE, APLOG_SUCCESS, activity.raw, session=ctx.session)


def update_post(activity: Activity, ctx: InboxContext, actor: Actor):
    note = activity.object_json
    post = ctx.posts.find_by_uri(activity.object_uri)
    if post is None:
        log_incoming_ap(activity.id, APLOG_UPDATE, APLOG_IGNORED, activity.raw, 'Unfound object',
                        session=ctx.session)
        return
    if not can_update(actor, post):
        log_incoming_ap(activity.id, APLOG_UPDATE, APLOG_IGNORED, activity.raw, 'Update from someone other than author',
                        session=ctx.session)
        return
    if not same_instance(post.uri, actor.uri):
        log_incoming_ap(activity.id, APLOG_UPDATE, APLOG_IGNORED, activity.raw, 'Post not hosted by its sender',
                        session=ctx.session)
        return
    content = post_content(note)
    if content_too_large(content):
        log_incoming_ap(activity.id, APLOG_UPDATE, APLOG_FAILURE, None, 'Content too large', session=ctx.session)
        return
    ctx.posts.update_content(post, content, is_sensitive(note), post_url(note), title=post_title(note),
                             edited_at=edited_at(note))
    ctx.posts.set_hashtags(post, hashtags(note))
    log_incoming_ap(activity.id, APLOG_UPDATE, APLOG_SUCCESS, activity.raw, session=ctx.session)
