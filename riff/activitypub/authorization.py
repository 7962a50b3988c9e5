"""
Who may do what to whom. Pure predicates over rows the caller already holds. Nothing here writes.

Three authorities can remove a post: its author, a moderator on the author's own instance, and a moderator on the
instance hosting a community the post was addressed to.
"""
from __future__ import annotations

from riff.activitypub.actor import featured_uri, same_instance
from riff.models import Actor, Post
from riff.utils import host_of


def can_delete(acting_actor: Actor, target_post: Post) -> bool:
    author = target_post.author
    if author is not None and acting_actor.id == author.id:
        return True
    # origin moderation
    if author is not None and same_instance(acting_actor.uri, author.uri):
        return True
    # the post uri is the fallback identity of its origin instance
    if same_instance(acting_actor.uri, target_post.uri):
        return True
    # destination-community moderation
    actor_host = host_of(acting_actor.uri)
    for destination in target_post.addressed_to or []:
        if actor_host != '' and host_of(destination) == actor_host:
            return True
    return False


def can_update(acting_actor: Actor, target_post: Post) -> bool:
    return target_post.author is not None and acting_actor.uri == target_post.author.uri


def owns_featured(acting_actor: Actor, target_uri: str | None) -> bool:
    if not target_uri:
        return False
    return target_uri.lower() == featured_uri(acting_actor).lower()


def is_self_deletion(object_uri: str | None, actor_uri: str) -> bool:
    return object_uri is not None and object_uri == actor_uri


def describes_self(acting_actor: Actor, object_uri: str | None) -> bool:
    return object_uri is not None and object_uri == acting_actor.uri
