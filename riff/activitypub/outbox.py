"""
Outgoing activities. The inbox only ever answers a Follow with an Accept; delivery is a signed POST, run as its own
celery task in production and inline when debugging or testing. Each attempt is recorded as an outbound
ActivityPubLog row.
"""
from __future__ import annotations
import json

import httpx
from flask import current_app

from riff import celery, httpx_client
from riff.activitypub.signature import signed_headers
from riff.activitypub.types import Activity
from riff.models import Actor, ActivityPubLog
from riff.utils import get_task_session, gibberish

DELIVERED_STATUSES = (200, 201, 202, 204)


def default_context() -> list:
    context = [
        "https://www.w3.org/ns/activitystreams",
        "https://w3id.org/security/v1",
    ]
    if current_app.config['FULL_AP_CONTEXT']:
        context.append({
            "sensitive": "as:sensitive",
            "manuallyApprovesFollowers": "as:manuallyApprovesFollowers",
            "toot": "http://joinmastodon.org/ns#",
            "featured": {
                "@id": "toot:featured",
                "@type": "@id"
            },
            "misskey": "https://misskey-hub.net/ns#",
            "_misskey_quote": "misskey:_misskey_quote",
            "quoteUri": "http://fedibird.com/ns#quoteUri",
        })
    return context


def accept_follow_json(local_actor: Actor, follower: Actor, follow: Activity) -> dict:
    return {
        "@context": default_context(),
        "actor": local_actor.public_url(),
        "to": [follower.public_url()],
        "object": {
            "actor": follower.public_url(),
            "to": None,
            "object": local_actor.public_url(),
            "type": "Follow",
            "id": follow.id
        },
        "type": "Accept",
        "id": f"{current_app.config['HTTP_PROTOCOL']}://{current_app.config['SERVER_NAME']}/activities/accept/" + gibberish(32)
    }


def send_accept(local_actor: Actor, follower: Actor, follow: Activity) -> bool:
    """
    Deliver an Accept for a Follow that has already been committed. Delivery is best effort: failures are logged
    and reported through the return value, never raised.
    """
    inbox = follower.inbox_url or follower.shared_inbox_url
    if not inbox:
        current_app.logger.warning(f'Not accepting follow from {follower.uri}: no inbox')
        return False
    if not local_actor.private_key:
        current_app.logger.warning(f'Not accepting follow of {local_actor.uri}: no private key')
        return False
    body = accept_follow_json(local_actor, follower, follow)
    try:
        sent = send_post_request(inbox, body, local_actor.private_key, local_actor.key_id())
    except Exception as e:
        current_app.logger.exception(f'Could not send Accept to {inbox}: {e}')
        return False
    if not sent:
        current_app.logger.warning(f'Accept to {inbox} was not delivered')
    return bool(sent)


def send_post_request(inbox: str, body: dict, private_key: str, key_id: str) -> bool:
    """Inline when debugging or testing, so the result is known; otherwise queued and assumed delivered"""
    if current_app.debug or current_app.testing:
        return post_request(inbox, body, private_key, key_id)
    post_request.delay(inbox, body, private_key, key_id)
    return True


@celery.task
def post_request(inbox: str, body: dict, private_key: str, key_id: str) -> bool:
    body.setdefault('@context', default_context())
    session = get_task_session()
    log = ActivityPubLog(direction='out', activity_id=body.get('id'), activity_type=body.get('type', ''),
                         activity_json=json.dumps(body), result='failure')
    try:
        payload = json.dumps(body).encode('utf-8')
        headers = signed_headers('post', inbox, payload, private_key, key_id)
        headers['User-Agent'] = f'Riff/{current_app.config["VERSION"]}; +https://{current_app.config["SERVER_NAME"]}'
        response = httpx_client.post(inbox, content=payload, headers=headers, timeout=10)
        if response.status_code in DELIVERED_STATUSES:
            log.result = 'success'
            log.exception_message = f'{inbox} {response.status_code}'
        elif 'DOCTYPE html' in response.text:
            log.result = 'ignored'
            log.exception_message = f'{inbox} {response.status_code}: HTML instead of JSON'
        else:
            log.exception_message = f'{inbox} {response.status_code}: {response.text:.100}'
    except (httpx.HTTPError, ValueError) as e:
        log.exception_message = f'could not send to {inbox}: {e}'
        current_app.logger.warning(f'Exception while sending {log.activity_type} to {inbox}: {e}')
    try:
        session.add(log)
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
    return log.result == 'success'
