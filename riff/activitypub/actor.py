from __future__ import annotations

import httpx
from flask import current_app
from sqlalchemy import delete, select

from riff import httpx_client
from riff.activitypub.types import ActorDescriptor, ActorResolutionError
from riff.constants import MAX_BIO_LENGTH, MAX_NAME_LENGTH, REQUEST_TIMEOUT
from riff.models import Actor
from riff.utils import host_of, insert_or_ignore, is_local_uri, is_private_url


def same_instance(uri_a: str | None, uri_b: str | None) -> bool:
    host_a = host_of(uri_a)
    return host_a != '' and host_a == host_of(uri_b)


def is_local(actor: Actor) -> bool:
    return is_local_uri(actor.uri)


def featured_uri(actor: Actor) -> str:
    """The canonical uri of the actor's featured (pinned posts) collection"""
    return actor.featured_url or actor.uri + '/featured'


def fetch_actor_json(uri: str) -> dict:
    if is_private_url(uri):
        raise ActorResolutionError(f'Refusing to fetch {uri}')
    try:
        response = httpx_client.get(uri, headers={'Accept': 'application/activity+json',
                                                  'User-Agent': f'Riff/{current_app.config["VERSION"]}; +https://{current_app.config["SERVER_NAME"]}'},
                                    timeout=REQUEST_TIMEOUT, follow_redirects=True)
    except httpx.HTTPError as e:
        raise ActorResolutionError(f'Could not fetch {uri}: {e}') from e
    if response.status_code != 200:
        raise ActorResolutionError(f'Could not fetch {uri}: {response.status_code}')
    try:
        actor_json = response.json()
    except ValueError as e:
        raise ActorResolutionError(f'{uri} did not return JSON') from e
    if not isinstance(actor_json, dict) or actor_json.get('id') != uri:
        raise ActorResolutionError(f'{uri} returned a document for someone else')
    return actor_json


def descriptor_from_actor(actor: Actor) -> ActorDescriptor:
    return ActorDescriptor(uri=actor.uri, handle=actor.handle, kind=actor.kind, inbox=actor.inbox_url,
                           shared_inbox=actor.shared_inbox_url, name=actor.name, bio=actor.bio, url=actor.url,
                           featured=actor.featured_url, public_key=actor.public_key,
                           manually_approves_followers=actor.require_approval)


class ActorDirectory:
    """Lookup and persistence of actors, keyed on uri"""

    def __init__(self, session):
        self.session = session

    def find_by_uri(self, uri: str | None) -> Actor | None:
        if not uri:
            return None
        return self.session.execute(select(Actor).where(Actor.uri == uri)).scalar_one_or_none()

    def find_by_user_name(self, user_name: str) -> Actor | None:
        return self.session.execute(select(Actor).where(Actor.user_name == user_name)).scalar_one_or_none()

    def resolve_and_persist(self, descriptor: ActorDescriptor) -> Actor | None:
        """
        Ensure a row exists for the actor and return it. An existing row is returned unchanged, refreshing it is
        the job of Update. Local actors are only ever created by registration, never from a descriptor.
        """
        existing = self.find_by_uri(descriptor.uri)
        if existing is not None:
            return existing
        if is_local_uri(descriptor.uri):
            current_app.logger.info(f'Unknown local actor {descriptor.uri}')
            return None
        if not descriptor.inbox or is_private_url(descriptor.inbox):
            current_app.logger.warning(f'Actor {descriptor.uri} has no usable inbox')
            return None
        shared_inbox = descriptor.shared_inbox
        if shared_inbox and is_private_url(shared_inbox):
            shared_inbox = None

        insert_or_ignore(self.session, Actor, {
            'uri': descriptor.uri,
            'handle': descriptor.handle,
            'name': descriptor.name[:MAX_NAME_LENGTH] if descriptor.name else None,
            'bio': descriptor.bio[:MAX_BIO_LENGTH] if descriptor.bio else None,
            'kind': descriptor.kind,
            'inbox_url': descriptor.inbox,
            'shared_inbox_url': shared_inbox,
            'featured_url': descriptor.featured,
            'url': descriptor.url,
            'public_key': descriptor.public_key,
            'require_approval': descriptor.manually_approves_followers,
        }, ['uri'])
        return self.find_by_uri(descriptor.uri)

    def update_profile(self, actor: Actor, descriptor: ActorDescriptor):
        actor.name = descriptor.name[:MAX_NAME_LENGTH] if descriptor.name else None
        actor.bio = descriptor.bio[:MAX_BIO_LENGTH] if descriptor.bio else None
        self.session.flush()

    def delete_actor_and_posts(self, actor: Actor, posts, relationships) -> int:
        """Remove a remote actor, everything it authored and every edge touching either. Returns the post count."""
        if is_local(actor):
            raise ValueError('Local actors cannot be deleted by federation')
        deleted = posts.delete_by_author(actor)
        relationships.forget_actor(actor)
        self.session.execute(delete(Actor).where(Actor.id == actor.id)
                             .execution_options(synchronize_session='fetch'))
        return deleted
