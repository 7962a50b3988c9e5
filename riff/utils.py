from __future__ import annotations

import ipaddress
import random
import re
from datetime import datetime, timezone

from bs4 import BeautifulSoup
from flask import current_app
from furl import furl
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from riff import db
from riff.constants import ALLOWED_HTML_TAGS

random_chars = '0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ'


def utcnow(naive=True):
    if naive:
        return datetime.now(timezone.utc).replace(tzinfo=None)
    return datetime.now(timezone.utc)


def gibberish(length: int = 10) -> str:
    return "".join([random.choice(random_chars) for x in range(length)])


def get_task_session() -> Session:
    # Use the same engine as the main app, but create an independent session
    return Session(bind=db.engine)


def insert_or_ignore(session, model, values: dict, index_elements: list[str]) -> bool:
    """
    INSERT ... ON CONFLICT DO NOTHING keyed on a natural unique key. Returns True when a row was written,
    False when the key already existed.
    """
    dialect = session.get_bind().dialect.name
    if dialect == 'postgresql':
        stmt = postgresql.insert(model).values(**values).on_conflict_do_nothing(index_elements=index_elements)
    elif dialect == 'sqlite':
        stmt = sqlite.insert(model).values(**values).on_conflict_do_nothing(index_elements=index_elements)
    else:
        try:
            with session.begin_nested():
                session.add(model(**values))
            return True
        except IntegrityError:
            return False
    result = session.execute(stmt)
    return result.rowcount > 0


def as_list(value) -> list:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def host_of(uri: str | None) -> str:
    if not uri:
        return ''
    try:
        return (furl(uri).host or '').lower()
    except ValueError:
        return ''


def is_local_uri(uri: str | None) -> bool:
    return host_of(uri) == current_app.config['SERVER_NAME'].lower()


def is_private_url(url: str | None) -> bool:
    # inbox urls that point back into our own network must never be stored
    host = host_of(url)
    if host == '' or host == 'localhost' or host.endswith('.localhost') or host.endswith('.internal') \
            or host.endswith('.local'):
        return True
    try:
        address = ipaddress.ip_address(host.strip('[]'))
    except ValueError:
        return False
    return address.is_private or address.is_loopback or address.is_link_local or address.is_reserved \
        or address.is_unspecified or address.is_multicast


def allowlist_html(html: str) -> str:
    if html is None or html == '':
        return ''

    # Parse the HTML using BeautifulSoup
    soup = BeautifulSoup(html, 'html.parser')

    # Filter tags, leaving only safe ones
    for tag in soup.find_all():
        if tag.decomposed:
            continue
        if tag.name in ('script', 'style', 'iframe', 'object', 'embed', 'template'):
            tag.decompose()
        elif tag.name not in ALLOWED_HTML_TAGS:
            tag.unwrap()    # keep the text of unknown tags such as <h1> or <div>
        else:
            for attr in list(tag.attrs):
                if attr not in ['href', 'class']:
                    del tag[attr]
            # Remove some mastodon guff - spans with class "invisible"
            if tag.name == 'span' and 'class' in tag.attrs and 'invisible' in tag.attrs['class']:
                tag.decompose()
                continue
            if tag.name == 'a':
                href = tag.attrs.get('href', '')
                if not re.match(r'^https?://', href, re.I):
                    del tag['href']
                tag.attrs['rel'] = 'nofollow noopener noreferrer'
                tag.attrs['target'] = '_blank'

    return str(soup)
