from __future__ import annotations

from flask import current_app

from riff import celery
from riff.activitypub.authorization import is_self_deletion
from riff.activitypub.handlers import InboxContext, get_handler_registry
from riff.activitypub.handlers import announces, deletes, featured, follows, likes, notes, undo  # registers handlers
from riff.activitypub.types import Activity, ActivityType, ActorDescriptor, ValidationError, parse_activity, uri_of
from riff.activitypub.util import log_incoming_ap
from riff.constants import APLOG_FAILURE, APLOG_IGNORED, APLOG_NOTYPE
from riff.models import Actor
from riff.utils import get_task_session


def acting_actor(activity: Activity, ctx: InboxContext) -> Actor | None:
    """
    Resolve the actor once, before any handler runs. An actor announcing its own deletion is only looked up, so that
    an account we never knew is not stored just to be removed again.
    """
    if activity.kind == ActivityType.DELETE and is_self_deletion(activity.object_uri, activity.actor.uri):
        return ctx.actors.find_by_uri(activity.actor.uri)
    return ctx.actors.resolve_and_persist(activity.actor)


def process_activity(activity: Activity, session) -> None:
    ctx = InboxContext.for_session(session)
    actor = acting_actor(activity, ctx)
    if actor is None:
        log_incoming_ap(activity.id, APLOG_NOTYPE, APLOG_IGNORED, activity.raw, 'Actor does not exist here',
                        session=session)
    else:
        handler = get_handler_registry().get(activity.kind)
        if handler is None:
            log_incoming_ap(activity.id, APLOG_NOTYPE, APLOG_IGNORED, activity.raw, 'Unsupported activity',
                            session=session)
        else:
            handler(activity, ctx, actor)
    session.commit()


def process_request_json(request_json: dict, actor_json: dict | None, session) -> None:
    try:
        if actor_json:
            descriptor = ActorDescriptor.from_json(actor_json)
        else:
            actor_uri = uri_of(request_json.get('actor')) if isinstance(request_json, dict) else None
            if not actor_uri:
                raise ValidationError('Activity has no actor')
            descriptor = ActorDescriptor.from_uri(actor_uri)
        activity = parse_activity(request_json, descriptor)
    except ValidationError as e:
        activity_id = request_json.get('id') if isinstance(request_json, dict) else None
        log_incoming_ap(activity_id, APLOG_NOTYPE, APLOG_FAILURE, request_json, str(e), session=session)
        session.commit()
        return
    if activity is None:
        log_incoming_ap(request_json['id'], APLOG_NOTYPE, APLOG_IGNORED, request_json, 'Unsupported activity',
                        session=session)
        session.commit()
        return
    process_activity(activity, session)


@celery.task
def process_inbox_request(request_json: dict, actor_json: dict | None = None):
    session = get_task_session()
    try:
        process_request_json(request_json, actor_json, session)
    except Exception as e:
        session.rollback()
        current_app.logger.exception(f'Error processing {request_json.get("id")}')
        log_incoming_ap(request_json.get('id'), APLOG_NOTYPE, APLOG_FAILURE, request_json, str(e), session=session)
        session.commit()
        raise
    finally:
        session.close()
