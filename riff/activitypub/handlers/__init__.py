"""
Per-activity handlers for the inbox.

Each handler is a plain function taking the decoded activity, an InboxContext and the already-resolved acting
actor. Handlers register themselves against an ActivityType; Undo, Accept and Reject look a second time at the kind
of the activity they wrap.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, TypeAlias

from riff.activitypub.actor import ActorDirectory
from riff.activitypub.types import Activity, ActivityType
from riff.models import Actor
from riff.shared.post import PostStore
from riff.shared.relationships import RelationshipStore

Handler: TypeAlias = Callable[[Activity, 'InboxContext', Actor], None]

# Handler registries
_handler_registry: dict[ActivityType, Handler] = {}
_undo_registry: dict[ActivityType, Handler] = {}


def register_handler(activity_type: ActivityType):
    """Decorator to register handlers"""
    def decorator(handler: Handler) -> Handler:
        _handler_registry[activity_type] = handler
        return handler
    return decorator


def register_undo(activity_type: ActivityType):
    """Decorator to register the handler that reverses an activity type"""
    def decorator(handler: Handler) -> Handler:
        _undo_registry[activity_type] = handler
        return handler
    return decorator


def get_handler_registry() -> dict[ActivityType, Handler]:
    return _handler_registry


def get_undo_registry() -> dict[ActivityType, Handler]:
    return _undo_registry


@dataclass
class InboxContext:
    """The stores a handler works against, all sharing one session"""
    session: Any
    actors: ActorDirectory
    posts: PostStore
    relationships: RelationshipStore

    @classmethod
    def for_session(cls, session) -> InboxContext:
        return cls(session=session, actors=ActorDirectory(session), posts=PostStore(session),
                   relationships=RelationshipStore(session))
