"""
Shared pytest fixtures for all test files
"""
import pytest

import riff  # noqa: F401  -- load the package before config (config imports riff.constants)
from config import Config


class TestConfig(Config):
    """Standard test configuration"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}  # SQLite doesn't support pool settings
    SERVER_NAME = 'riff.test'
    SECRET_KEY = 'test-secret-key'
    HTTP_PROTOCOL = 'https'
    MAIL_SERVER = None
    CELERY_ALWAYS_EAGER = True
    SENTRY_DSN = ''
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_ACTIVITYPUB_TO_DB = False
    LOG_ACTIVITYPUB_TO_FILE = False
    REQUIRE_SIGNATURES = False
    FOLLOW_APPROVAL_POLICY = 'auto'
    DISCARD_ORPHAN_REPLIES = False
    MAX_CONTENT_SIZE = 50 * 1024
    FULL_AP_CONTEXT = False


@pytest.fixture
def test_app():
    """Create and configure a test application instance"""
    from riff import create_app, db

    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def app(test_app):
    """Alias for test_app for compatibility"""
    return test_app


@pytest.fixture
def client(test_app):
    """Create test client"""
    return test_app.test_client()


@pytest.fixture
def make_actor(app):
    """Factory for stored actors. Hosts other than riff.test are remote."""
    from riff import db
    from riff.models import Actor

    def _make_actor(user_name, host='remote.example', kind='Person', **kwargs):
        uri = f'https://{host}/users/{user_name}'
        values = dict(uri=uri, handle=f'@{user_name}@{host}', name=user_name.capitalize(), kind=kind,
                      inbox_url=uri + '/inbox', shared_inbox_url=f'https://{host}/inbox',
                      featured_url=uri + '/featured', public_key='PUBLIC')
        if host == app.config['SERVER_NAME']:
            values.update(user_name=user_name, private_key='PRIVATE')
        values.update(kwargs)
        actor = Actor(**values)
        db.session.add(actor)
        db.session.commit()
        return actor

    return _make_actor


@pytest.fixture
def make_post(app):
    """Factory for stored posts"""
    from riff import db
    from riff.models import Post

    counter = {'n': 0}

    def _make_post(author, content='<p>Hello</p>', **kwargs):
        counter['n'] += 1
        values = dict(uri=f"{author.uri.rsplit('/users/', 1)[0]}/objects/{counter['n']}", actor_id=author.id,
                      kind='Note', content=content, addressed_to=[])
        values.update(kwargs)
        post = Post(**values)
        db.session.add(post)
        db.session.commit()
        return post

    return _make_post


@pytest.fixture
def make_activity():
    """Factory for inbound activity documents"""
    counter = {'n': 0}

    def _make_activity(activity_type, actor, obj, **kwargs):
        counter['n'] += 1
        actor_uri = actor if isinstance(actor, str) else actor.uri
        host = actor_uri.split('/')[2]
        activity = {
            '@context': 'https://www.w3.org/ns/activitystreams',
            'id': f"https://{host}/activities/{activity_type.lower()}/{counter['n']}",
            'type': activity_type,
            'actor': actor_uri,
            'object': obj,
        }
        activity.update(kwargs)
        return activity

    return _make_activity


@pytest.fixture
def deliver(app):
    """Run an activity document through the inbox pipeline on the app session"""
    from riff import db
    from riff.activitypub.inbox import process_request_json

    def _deliver(request_json, actor_json=None):
        process_request_json(request_json, actor_json, db.session)
        db.session.expire_all()

    return _deliver


def remote_actor_json(user_name='alice', host='remote.example', **kwargs):
    uri = f'https://{host}/users/{user_name}'
    actor_json = {
        '@context': ['https://www.w3.org/ns/activitystreams', 'https://w3id.org/security/v1'],
        'id': uri,
        'type': 'Person',
        'preferredUsername': user_name,
        'name': user_name.capitalize(),
        'summary': '<p>Hi there</p>',
        'inbox': uri + '/inbox',
        'endpoints': {'sharedInbox': f'https://{host}/inbox'},
        'featured': uri + '/featured',
        'publicKey': {'id': uri + '#main-key', 'owner': uri, 'publicKeyPem': 'PUBLIC'},
    }
    actor_json.update(kwargs)
    return actor_json


@pytest.fixture
def actor_json():
    """Factory for remote actor documents"""
    return remote_actor_json
