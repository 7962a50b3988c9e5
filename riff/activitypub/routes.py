"""
Inbox endpoints for receiving ActivityPub activities

Endpoints:
    - /inbox - Shared inbox for all actors
    - /users/<user_name>/inbox - Actor-specific inbox

Both parse the request, resolve and verify the sender, then hand the activity to process_inbox_request: inline when
debugging or testing, as a celery task otherwise. Anything that gets that far answers 200 with an empty body,
whether or not it changed anything here.
"""
from __future__ import annotations
from typing import Optional, Tuple, TypeAlias

from flask import abort, current_app, request
from werkzeug.exceptions import BadRequest

from riff import db
from riff.activitypub import bp
from riff.activitypub.actor import ActorDirectory, descriptor_from_actor, fetch_actor_json, same_instance
from riff.activitypub.inbox import process_inbox_request
from riff.activitypub.signature import VerificationError, verify_request
from riff.activitypub.types import ActorDescriptor, ActorResolutionError, ValidationError, uri_of
from riff.activitypub.util import log_incoming_ap
from riff.constants import APLOG_DELETE, APLOG_FAILURE, APLOG_IGNORED, APLOG_NOTYPE

InboxResponse: TypeAlias = Tuple[str, int]


@bp.route('/inbox', methods=['POST'])
def shared_inbox() -> InboxResponse:
    return _process_inbox()


@bp.route('/users/<user_name>/inbox', methods=['POST'])
def user_inbox(user_name: str) -> InboxResponse:
    if ActorDirectory(db.session).find_by_user_name(user_name) is None:
        abort(404)
    return _process_inbox()


def _process_inbox() -> InboxResponse:
    try:
        request_json = request.get_json(force=True)
    except BadRequest:
        log_incoming_ap(None, APLOG_NOTYPE, APLOG_FAILURE, None, 'Could not parse json')
        return '', 400

    if not isinstance(request_json, dict) or any(key not in request_json for key in ('id', 'type', 'actor', 'object')):
        log_incoming_ap(request_json.get('id') if isinstance(request_json, dict) else None, APLOG_NOTYPE,
                        APLOG_FAILURE, request_json if isinstance(request_json, dict) else None,
                        'Missing minimum expected fields in JSON')
        return '', 400

    actor_uri = uri_of(request_json['actor'])
    if not actor_uri or uri_of(request_json['object']) is None:
        log_incoming_ap(request_json['id'], APLOG_NOTYPE, APLOG_FAILURE, request_json, 'No actor or object id')
        return '', 400
    if not isinstance(request_json['id'], str) or not same_instance(request_json['id'], actor_uri):
        log_incoming_ap(request_json['id'], APLOG_NOTYPE, APLOG_FAILURE, request_json, 'Activity and actor domains differ')
        return '', 400

    actor_json = None
    actor = ActorDirectory(db.session).find_by_uri(actor_uri)
    if actor is not None:
        descriptor = descriptor_from_actor(actor)
    else:
        if request_json['type'] == 'Delete' and uri_of(request_json['object']) == actor_uri:
            # an account we never knew has been deleted
            log_incoming_ap(request_json['id'], APLOG_DELETE, APLOG_IGNORED, None, 'Does not exist here')
            return '', 200
        try:
            actor_json = fetch_actor_json(actor_uri)
            descriptor = ActorDescriptor.from_json(actor_json)
        except (ActorResolutionError, ValidationError) as e:
            log_incoming_ap(request_json['id'], APLOG_NOTYPE, APLOG_FAILURE, request_json, str(e))
            return '', 401

    if current_app.config['REQUIRE_SIGNATURES']:
        error = verify_signature(descriptor)
        if error:
            log_incoming_ap(request_json['id'], APLOG_NOTYPE, APLOG_FAILURE, request_json,
                            'Could not verify signature: ' + error)
            return '', 401

    if current_app.debug or current_app.testing:
        process_inbox_request(request_json, actor_json)
    else:
        process_inbox_request.delay(request_json, actor_json)
    return '', 200


def verify_signature(descriptor: ActorDescriptor) -> Optional[str]:
    if not descriptor.public_key:
        return 'no public key'
    try:
        verify_request(request, descriptor.public_key)
    except VerificationError as e:
        return str(e)
    return None
