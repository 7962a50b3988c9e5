import json
from unittest.mock import Mock, patch

import httpx
import pytest
from sqlalchemy import select

from riff import db
from riff.activitypub.outbox import accept_follow_json, default_context, post_request, send_accept
from riff.activitypub.signature import generate_keypair
from riff.activitypub.types import Activity, ActivityType, ActorDescriptor
from riff.models import ActivityPubLog


def follow_of(follower, target):
    return Activity(kind=ActivityType.FOLLOW, id=f'{follower.uri}/follows/1',
                    actor=ActorDescriptor.from_uri(follower.uri), object=target.uri)


class TestAcceptFollow:
    def test_document(self, app, make_actor):
        carol = make_actor('carol', host='riff.test')
        alice = make_actor('alice')
        body = accept_follow_json(carol, alice, follow_of(alice, carol))
        assert body['type'] == 'Accept'
        assert body['actor'] == carol.uri
        assert body['to'] == [alice.uri]
        assert body['object']['type'] == 'Follow'
        assert body['object']['actor'] == alice.uri
        assert body['object']['object'] == carol.uri
        assert body['object']['id'] == alice.uri + '/follows/1'
        assert body['@context'] == default_context()

    @patch('riff.activitypub.outbox.send_post_request')
    def test_no_inbox(self, mock_send, app, make_actor):
        carol = make_actor('carol', host='riff.test')
        alice = make_actor('alice', inbox_url=None, shared_inbox_url=None)
        assert not send_accept(carol, alice, follow_of(alice, carol))
        mock_send.assert_not_called()

    @patch('riff.activitypub.outbox.send_post_request')
    def test_no_private_key(self, mock_send, app, make_actor):
        carol = make_actor('carol', host='riff.test', private_key=None)
        alice = make_actor('alice')
        assert not send_accept(carol, alice, follow_of(alice, carol))
        mock_send.assert_not_called()

    @patch('riff.activitypub.outbox.send_post_request')
    def test_failure_reported_not_raised(self, mock_send, app, make_actor):
        mock_send.side_effect = ConnectionError('refused')
        carol = make_actor('carol', host='riff.test')
        alice = make_actor('alice')
        assert not send_accept(carol, alice, follow_of(alice, carol))

    @patch('riff.activitypub.outbox.send_post_request')
    def test_delivered(self, mock_send, app, make_actor):
        mock_send.return_value = True
        carol = make_actor('carol', host='riff.test')
        alice = make_actor('alice')
        assert send_accept(carol, alice, follow_of(alice, carol))


class TestDefaultContext:
    def test_short_context(self, app):
        assert default_context() == ['https://www.w3.org/ns/activitystreams', 'https://w3id.org/security/v1']

    def test_full_context(self, app):
        app.config['FULL_AP_CONTEXT'] = True
        context = default_context()
        assert context[2]['manuallyApprovesFollowers'] == 'as:manuallyApprovesFollowers'
        assert context[2]['featured']['@id'] == 'toot:featured'


class TestPostRequest:
    @pytest.fixture
    def private_key(self):
        return generate_keypair()[0]

    @patch('riff.activitypub.outbox.httpx_client')
    def test_signed_and_logged(self, mock_client, app, private_key):
        mock_client.post.return_value = Mock(status_code=202, text='')
        body = {'id': 'https://riff.test/activities/accept/1', 'type': 'Accept'}
        assert post_request('https://remote.example/users/alice/inbox', body, private_key,
                            'https://riff.test/users/carol#main-key')

        args, kwargs = mock_client.post.call_args
        assert args[0] == 'https://remote.example/users/alice/inbox'
        assert 'keyId="https://riff.test/users/carol#main-key"' in kwargs['headers']['Signature']
        assert kwargs['headers']['Host'] == 'remote.example'
        assert json.loads(kwargs['content'])['@context'] == default_context()
        log = db.session.execute(select(ActivityPubLog)).scalar_one()
        assert (log.direction, log.activity_type, log.result) == ('out', 'Accept', 'success')

    @patch('riff.activitypub.outbox.httpx_client')
    def test_refused(self, mock_client, app, private_key):
        mock_client.post.return_value = Mock(status_code=401, text='Unauthorized')
        assert not post_request('https://remote.example/inbox', {'id': 'x', 'type': 'Accept'}, private_key, 'k')
        log = db.session.execute(select(ActivityPubLog)).scalar_one()
        assert log.result == 'failure'
        assert '401' in log.exception_message

    @patch('riff.activitypub.outbox.httpx_client')
    def test_unreachable(self, mock_client, app, private_key):
        mock_client.post.side_effect = httpx.ConnectError('refused')
        assert not post_request('https://remote.example/inbox', {'id': 'x', 'type': 'Accept'}, private_key, 'k')
        assert db.session.execute(select(ActivityPubLog)).scalar_one().result == 'failure'
