"""
Tests for the inbox endpoints: request validation, sender resolution, signature checks and hand-off to processing.
"""
import base64
import json
from unittest.mock import patch

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding
from sqlalchemy import func, select

from riff import db
from riff.activitypub.signature import SignatureHeader, body_digest, generate_keypair, http_date
from riff.activitypub.types import ActorResolutionError
from riff.models import Actor, Like, Post


def post_json(client, path, document, headers=None):
    return client.post(path, data=json.dumps(document), content_type='application/activity+json',
                       headers=headers or {})


def signed_headers(document, private_key, key_id, path='/inbox', host='riff.test'):
    body = json.dumps(document).encode('utf8')
    headers = {
        '(request-target)': f'post {path}',
        'host': host,
        'date': http_date(),
        'digest': body_digest(body),
        'content-type': 'application/activity+json',
    }
    signed_string = '\n'.join(f'{name}: {value}' for name, value in headers.items())
    key = serialization.load_pem_private_key(private_key.encode('ascii'), password=None)
    signature = key.sign(signed_string.encode('ascii'), padding.PKCS1v15(), hashes.SHA256())
    request_headers = {
        'Host': host,
        'Date': headers['date'],
        'Digest': headers['digest'],
        'Signature': SignatureHeader(key_id=key_id, headers=list(headers.keys()), signature=signature).compile(),
    }
    return body, request_headers


class TestInboxValidation:
    def test_unparseable_json(self, client):
        response = client.post('/inbox', data='{not json', content_type='application/activity+json')
        assert response.status_code == 400

    def test_missing_fields(self, client):
        response = post_json(client, '/inbox', {'id': 'https://remote.example/a/1', 'type': 'Like'})
        assert response.status_code == 400

    def test_not_an_object(self, client):
        response = post_json(client, '/inbox', ['Like'])
        assert response.status_code == 400

    def test_object_without_id(self, client):
        response = post_json(client, '/inbox', {'id': 'https://remote.example/a/1', 'type': 'Create',
                                                'actor': 'https://remote.example/users/alice',
                                                'object': {'type': 'Note'}})
        assert response.status_code == 400

    def test_activity_from_another_domain(self, client, make_actor):
        alice = make_actor('alice')
        response = post_json(client, '/inbox', {'id': 'https://evil.example/a/1', 'type': 'Like',
                                                'actor': alice.uri, 'object': 'https://riff.test/objects/1'})
        assert response.status_code == 400

    def test_unknown_user_inbox(self, client, make_activity):
        response = post_json(client, '/users/nobody/inbox',
                             make_activity('Like', 'https://remote.example/users/alice', 'https://riff.test/x'))
        assert response.status_code == 404


class TestInboxProcessing:
    def test_like_from_known_actor(self, app, client, make_actor, make_post, make_activity):
        carol = make_actor('carol', host='riff.test')
        alice = make_actor('alice')
        post = make_post(carol)
        response = post_json(client, '/users/carol/inbox', make_activity('Like', alice, post.uri))
        assert response.status_code == 200
        assert response.data == b''
        db.session.expire_all()
        assert db.session.get(Post, post.id).likes_count == 1

    def test_ignored_activity_still_200(self, client, make_actor, make_activity):
        alice = make_actor('alice')
        response = post_json(client, '/inbox', make_activity('Like', alice, 'https://riff.test/objects/404'))
        assert response.status_code == 200

    @patch('riff.activitypub.routes.fetch_actor_json')
    def test_unknown_actor_fetched(self, mock_fetch, app, client, make_activity, actor_json):
        mock_fetch.return_value = actor_json()
        document = make_activity('Create', 'https://remote.example/users/alice',
                                 {'id': 'https://remote.example/users/alice/statuses/1', 'type': 'Note',
                                  'attributedTo': 'https://remote.example/users/alice', 'content': '<p>hi</p>'})
        response = post_json(client, '/inbox', document)
        assert response.status_code == 200
        mock_fetch.assert_called_once_with('https://remote.example/users/alice')
        db.session.expire_all()
        assert db.session.scalar(select(func.count(Actor.id))) == 1
        assert db.session.scalar(select(func.count(Post.id))) == 1

    @patch('riff.activitypub.routes.fetch_actor_json')
    def test_actor_fetch_failure(self, mock_fetch, client, make_activity):
        mock_fetch.side_effect = ActorResolutionError('410')
        response = post_json(client, '/inbox', make_activity('Like', 'https://remote.example/users/alice',
                                                             'https://riff.test/objects/1'))
        assert response.status_code == 401

    @patch('riff.activitypub.routes.fetch_actor_json')
    def test_unknown_actor_deleting_itself(self, mock_fetch, client, make_activity):
        uri = 'https://remote.example/users/ghost'
        response = post_json(client, '/inbox', make_activity('Delete', uri, uri))
        assert response.status_code == 200
        mock_fetch.assert_not_called()
        assert db.session.scalar(select(func.count(Actor.id))) == 0

    @patch('riff.activitypub.routes.process_inbox_request')
    def test_queued_outside_testing(self, mock_task, app, client, make_actor, make_activity):
        app.testing = False
        alice = make_actor('alice')
        document = make_activity('Like', alice, 'https://riff.test/objects/1')
        response = post_json(client, '/inbox', document)
        assert response.status_code == 200
        mock_task.delay.assert_called_once_with(document, None)
        mock_task.assert_not_called()


class TestInboxSignatures:
    def test_unsigned_request_rejected(self, app, client, make_actor, make_activity):
        app.config['REQUIRE_SIGNATURES'] = True
        alice = make_actor('alice')
        response = post_json(client, '/inbox', make_activity('Like', alice, 'https://riff.test/objects/1'))
        assert response.status_code == 401

    def test_signed_request_accepted(self, app, client, make_actor, make_post, make_activity):
        app.config['REQUIRE_SIGNATURES'] = True
        private_key, public_key = generate_keypair()
        alice = make_actor('alice', public_key=public_key)
        carol = make_actor('carol', host='riff.test')
        post = make_post(carol)
        document = make_activity('Like', alice, post.uri)
        body, headers = signed_headers(document, private_key, alice.uri + '#main-key')
        response = client.post('/inbox', data=body, content_type='application/activity+json', headers=headers)
        assert response.status_code == 200
        db.session.expire_all()
        assert db.session.scalar(select(func.count(Like.id))) == 1

    def test_signature_from_wrong_key(self, app, client, make_actor, make_post, make_activity):
        app.config['REQUIRE_SIGNATURES'] = True
        _, public_key = generate_keypair()
        other_private_key, _ = generate_keypair()
        alice = make_actor('alice', public_key=public_key)
        document = make_activity('Like', alice, 'https://riff.test/objects/1')
        body, headers = signed_headers(document, other_private_key, alice.uri + '#main-key')
        response = client.post('/inbox', data=body, content_type='application/activity+json', headers=headers)
        assert response.status_code == 401

    def test_tampered_body(self, app, client, make_actor, make_activity):
        app.config['REQUIRE_SIGNATURES'] = True
        private_key, public_key = generate_keypair()
        alice = make_actor('alice', public_key=public_key)
        document = make_activity('Like', alice, 'https://riff.test/objects/1')
        _, headers = signed_headers(document, private_key, alice.uri + '#main-key')
        document['object'] = 'https://riff.test/objects/2'
        response = client.post('/inbox', data=json.dumps(document), content_type='application/activity+json',
                               headers=headers)
        assert response.status_code == 401

    def test_garbage_signature_header(self, app, client, make_actor, make_activity):
        app.config['REQUIRE_SIGNATURES'] = True
        alice = make_actor('alice')
        headers = {'Signature': 'keyId="x",headers="date",signature="' + base64.b64encode(b'nope').decode() +
                                '",algorithm="rsa-sha256"', 'Date': http_date()}
        response = post_json(client, '/inbox', make_activity('Like', alice, 'https://riff.test/objects/1'), headers)
        assert response.status_code == 401
