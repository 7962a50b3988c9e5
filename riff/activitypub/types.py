"""Typed view of an inbound activity, decoded from its JSON-LD document"""
from __future__ import annotations
from typing import Any, NewType, Optional, Union
from dataclasses import dataclass, field
from enum import Enum

from riff.constants import ACTOR_GROUP, ACTOR_PERSON, MAX_BIO_LENGTH, MAX_NAME_LENGTH
from riff.utils import allowlist_html, host_of

# Type aliases
ActivityId = NewType('ActivityId', str)


class ActivityType(Enum):
    """ActivityPub activity types handled by the inbox"""
    FOLLOW = "Follow"
    UNDO = "Undo"
    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"
    LIKE = "Like"
    ANNOUNCE = "Announce"
    ADD = "Add"
    REMOVE = "Remove"
    ACCEPT = "Accept"
    REJECT = "Reject"

    @classmethod
    def from_name(cls, name: str) -> Optional[ActivityType]:
        for member in cls:
            if member.value == name:
                return member
        return None


class FederationError(Exception):
    """Base exception for federation errors"""
    pass


class ValidationError(FederationError):
    """An inbound document is missing something we cannot do without"""
    pass


class ActorResolutionError(FederationError):
    """The actor document could not be retrieved or understood"""
    pass


ACTOR_DOCUMENT_TYPES = {'Person': ACTOR_PERSON, 'Service': ACTOR_PERSON, 'Application': ACTOR_PERSON,
                        'Organization': ACTOR_PERSON, 'Group': ACTOR_GROUP}


def uri_of(value: Union[str, dict, None]) -> Optional[str]:
    """The id of an embedded object, or the value itself when it is already a link"""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return value.get('id')
    if isinstance(value, list) and len(value) > 0:
        return uri_of(value[0])
    return None


def _text(value) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, dict):  # contentMap / nameMap style
        for v in value.values():
            if isinstance(v, str):
                return v
    return None


@dataclass
class ActorDescriptor:
    """What the sender told us about an actor"""
    uri: str
    handle: str
    kind: str
    inbox: Optional[str] = None
    shared_inbox: Optional[str] = None
    name: Optional[str] = None
    bio: Optional[str] = None
    url: Optional[str] = None
    featured: Optional[str] = None
    public_key: Optional[str] = None
    manually_approves_followers: bool = False

    @classmethod
    def from_json(cls, actor_json: dict) -> ActorDescriptor:
        if not isinstance(actor_json, dict):
            raise ValidationError('Actor document is not an object')
        uri = actor_json.get('id')
        if not isinstance(uri, str) or '://' not in uri:
            raise ValidationError('Actor document has no id')
        host = host_of(uri)
        username = actor_json.get('preferredUsername')
        handle = f"@{username}@{host}" if username else f"@unknown@{host}"
        endpoints = actor_json.get('endpoints') if isinstance(actor_json.get('endpoints'), dict) else {}
        public_key = None
        if isinstance(actor_json.get('publicKey'), dict):
            public_key = actor_json['publicKey'].get('publicKeyPem')
        name = _text(actor_json.get('name'))
        bio = allowlist_html(_text(actor_json.get('summary')))
        url = actor_json.get('url')
        if isinstance(url, (dict, list)):
            url = uri_of(url) if isinstance(url, list) else url.get('href')
        return cls(
            uri=uri,
            handle=handle,
            kind=ACTOR_DOCUMENT_TYPES.get(actor_json.get('type'), ACTOR_PERSON),
            inbox=actor_json.get('inbox') if isinstance(actor_json.get('inbox'), str) else None,
            shared_inbox=endpoints.get('sharedInbox'),
            name=name[:MAX_NAME_LENGTH] if name else None,
            bio=bio[:MAX_BIO_LENGTH] if bio else None,
            url=url,
            featured=uri_of(actor_json.get('featured')),
            public_key=public_key,
            manually_approves_followers=bool(actor_json.get('manuallyApprovesFollowers', False)),
        )

    @classmethod
    def from_uri(cls, uri: str) -> ActorDescriptor:
        """A bare reference, enough to look up an actor we already store"""
        return cls(uri=uri, handle=f"@unknown@{host_of(uri)}", kind=ACTOR_PERSON)


@dataclass
class Activity:
    """A decoded, verified inbound activity"""
    kind: ActivityType
    id: ActivityId
    actor: ActorDescriptor
    object: Union[str, dict]
    target: Optional[str] = None
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def object_uri(self) -> Optional[str]:
        return uri_of(self.object)

    @property
    def object_type(self) -> Optional[str]:
        if isinstance(self.object, dict):
            return self.object.get('type')
        return None

    @property
    def object_json(self) -> dict:
        return self.object if isinstance(self.object, dict) else {}

    def inner(self) -> Optional[Activity]:
        """The activity wrapped by an Undo, Accept or Reject, sharing our actor"""
        if not isinstance(self.object, dict):
            return None
        kind = ActivityType.from_name(self.object.get('type', ''))
        if kind is None or 'object' not in self.object:
            return None
        return Activity(kind=kind, id=self.object.get('id') or self.id, actor=self.actor,
                        object=self.object['object'], target=uri_of(self.object.get('target')), raw=self.object)


def parse_activity(request_json: dict, actor: ActorDescriptor) -> Optional[Activity]:
    """
    Decode an inbound document. Returns None for activity kinds we do not handle, raises ValidationError when the
    document lacks the fields every activity needs.
    """
    if not isinstance(request_json, dict):
        raise ValidationError('Activity is not an object')
    for key in ('id', 'type', 'actor', 'object'):
        if key not in request_json:
            raise ValidationError(f'Activity has no {key}')
    if uri_of(request_json['actor']) != actor.uri:
        raise ValidationError('Activity actor does not match the resolved actor')
    if uri_of(request_json['object']) is None:
        raise ValidationError('Activity object has no id')
    kind = ActivityType.from_name(request_json['type'])
    if kind is None:
        return None
    return Activity(kind=kind, id=request_json['id'], actor=actor, object=request_json['object'],
                    target=uri_of(request_json.get('target')), raw=request_json)
