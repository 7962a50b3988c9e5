from __future__ import annotations

import json
import re
from datetime import datetime, timedelta

import arrow
from flask import current_app

from riff import db
from riff.activitypub.types import uri_of
from riff.constants import APLOG_IN, EARLIEST_PUBLISHED, PUBLISHED_FUTURE_LEEWAY, PUBLIC_COLLECTION, \
    MAX_HASHTAG_LENGTH, MAX_TITLE_LENGTH, MAX_URL_LENGTH, TITLED_POST_KINDS
from riff.models import ActivityPubLog
from riff.utils import allowlist_html, as_list, utcnow


def log_incoming_ap(id, aplog_type, aplog_result, saved_json, message=None, session=None):
    aplog_in = APLOG_IN

    if aplog_in and aplog_type[0] and aplog_result[0]:
        if current_app.config['LOG_ACTIVITYPUB_TO_DB']:
            activity_log = ActivityPubLog(direction='in', activity_id=id, activity_type=aplog_type[1], result=aplog_result[1])
            if message:
                activity_log.exception_message = message
            if saved_json:
                activity_log.activity_json = json.dumps(saved_json)
            if session:
                # committed or rolled back along with the activity's own writes
                session.add(activity_log)
                session.flush()
            else:
                db.session.add(activity_log)
                db.session.commit()

        if current_app.config['LOG_ACTIVITYPUB_TO_FILE']:
            current_app.logger.info(f'{current_app.config["SERVER_NAME"]} activity: {id} Type: {aplog_type[1]}, Result: {aplog_result[1]}, {message}')


def post_content(object_json: dict) -> str:
    content = object_json.get('content')
    if not isinstance(content, str) and isinstance(object_json.get('contentMap'), dict):
        content = next(iter(object_json['contentMap'].values()), '')
    if not isinstance(content, str):
        return ''
    return allowlist_html(content)


def content_too_large(html: str) -> bool:
    return len(html.encode('utf-8')) > current_app.config['MAX_CONTENT_SIZE']


def post_title(object_json: dict) -> str | None:
    if object_json.get('type') not in TITLED_POST_KINDS:
        return None
    name = object_json.get('name')
    if not isinstance(name, str) or name.strip() == '':
        return None
    return name.strip()[:MAX_TITLE_LENGTH]


def post_url(object_json: dict) -> str | None:
    # 'url' is a string, a Link, or a list of either
    for candidate in as_list(object_json.get('url')):
        if isinstance(candidate, dict):
            candidate = candidate.get('href')
        if isinstance(candidate, str) and candidate.lower().startswith(('http://', 'https://')) \
                and len(candidate) <= MAX_URL_LENGTH:
            return candidate
    return None


def is_sensitive(object_json: dict) -> bool:
    return bool(object_json.get('sensitive', False))


def parse_published(value) -> datetime | None:
    """A naive UTC datetime, or None when missing, unparseable or outside the plausible range"""
    if not isinstance(value, str):
        return None
    try:
        published = arrow.get(value).to('UTC')
    except (ValueError, TypeError):
        return None
    if published < arrow.get(EARLIEST_PUBLISHED) or published > arrow.utcnow() + timedelta(seconds=PUBLISHED_FUTURE_LEEWAY):
        return None
    return published.naive


def in_reply_to(object_json: dict) -> str | None:
    return uri_of(object_json.get('inReplyTo'))


def quote_uri(object_json: dict) -> str | None:
    for key in ('quoteUrl', 'quoteUri', '_misskey_quote', 'quote'):
        value = uri_of(object_json.get(key))
        if value:
            return value
    return None


def addressed_to(activity_json: dict, object_json: dict) -> list[str]:
    """
    Destination uris (communities) the post declares itself delivered to, taken from the audience of the object
    and of the wrapping activity. Order is preserved, duplicates dropped.
    """
    result = []
    for source in (object_json, activity_json):
        for recipient in as_list(source.get('audience')):
            recipient = uri_of(recipient)
            if not recipient or recipient in result:
                continue
            if recipient == PUBLIC_COLLECTION or recipient in ('Public', 'as:Public'):
                continue
            if recipient.endswith('/followers'):
                continue
            result.append(recipient)
    return result


def edited_at(object_json: dict) -> datetime:
    return parse_published(object_json.get('updated')) or utcnow()


def hashtags(object_json: dict) -> list[str]:
    """Names of the Hashtag entries in the object's tag list, lowercased and without the #"""
    result = []
    for tag in as_list(object_json.get('tag')):
        if not isinstance(tag, dict) or tag.get('type') != 'Hashtag' or not isinstance(tag.get('name'), str):
            continue
        name = tag['name'].strip().lstrip('#').lower()
        if name and len(name) <= MAX_HASHTAG_LENGTH and re.fullmatch(r'\w+', name) and name not in result:
            result.append(name)
    return result
