import pytest

from riff.activitypub.types import Activity, ActivityType, ActorDescriptor, ValidationError, parse_activity, uri_of


ALICE = 'https://remote.example/users/alice'


def alice():
    return ActorDescriptor.from_uri(ALICE)


class TestActorDescriptor:
    def test_from_json(self, app, actor_json):
        descriptor = ActorDescriptor.from_json(actor_json())
        assert descriptor.uri == ALICE
        assert descriptor.handle == '@alice@remote.example'
        assert descriptor.kind == 'Person'
        assert descriptor.inbox == ALICE + '/inbox'
        assert descriptor.shared_inbox == 'https://remote.example/inbox'
        assert descriptor.featured == ALICE + '/featured'
        assert descriptor.public_key == 'PUBLIC'

    def test_groups_and_services(self, app, actor_json):
        assert ActorDescriptor.from_json(actor_json(type='Group')).kind == 'Group'
        assert ActorDescriptor.from_json(actor_json(type='Service')).kind == 'Person'

    def test_missing_username(self, app, actor_json):
        document = actor_json()
        del document['preferredUsername']
        assert ActorDescriptor.from_json(document).handle == '@unknown@remote.example'

    def test_long_fields_truncated(self, app, actor_json):
        descriptor = ActorDescriptor.from_json(actor_json(name='n' * 500, summary='b' * 6000))
        assert len(descriptor.name) == 200
        assert len(descriptor.bio) == 5000

    def test_no_id(self, app, actor_json):
        document = actor_json()
        del document['id']
        with pytest.raises(ValidationError):
            ActorDescriptor.from_json(document)


class TestParseActivity:
    def test_like(self, app):
        activity = parse_activity({'id': 'https://remote.example/a/1', 'type': 'Like', 'actor': ALICE,
                                   'object': 'https://riff.test/objects/1'}, alice())
        assert activity.kind == ActivityType.LIKE
        assert activity.object_uri == 'https://riff.test/objects/1'
        assert activity.object_type is None

    def test_embedded_object(self, app):
        activity = parse_activity({'id': 'https://remote.example/a/2', 'type': 'Create', 'actor': {'id': ALICE},
                                   'object': {'id': 'https://remote.example/n/1', 'type': 'Note'}}, alice())
        assert activity.object_uri == 'https://remote.example/n/1'
        assert activity.object_type == 'Note'
        assert activity.object_json['type'] == 'Note'

    @pytest.mark.parametrize('missing', ['id', 'type', 'actor', 'object'])
    def test_missing_fields(self, app, missing):
        document = {'id': 'https://remote.example/a/3', 'type': 'Like', 'actor': ALICE,
                    'object': 'https://riff.test/objects/1'}
        del document[missing]
        with pytest.raises(ValidationError):
            parse_activity(document, alice())

    def test_actor_must_match(self, app):
        with pytest.raises(ValidationError):
            parse_activity({'id': 'https://remote.example/a/4', 'type': 'Like',
                            'actor': 'https://remote.example/users/mallory', 'object': 'https://riff.test/objects/1'},
                           alice())

    def test_object_without_id(self, app):
        with pytest.raises(ValidationError):
            parse_activity({'id': 'https://remote.example/a/5', 'type': 'Create', 'actor': ALICE,
                            'object': {'type': 'Note'}}, alice())

    def test_unsupported_kind(self, app):
        assert parse_activity({'id': 'https://remote.example/a/6', 'type': 'Block', 'actor': ALICE,
                               'object': 'https://riff.test/users/bob'}, alice()) is None

    def test_inner_activity(self, app):
        activity = parse_activity({'id': 'https://remote.example/a/7', 'type': 'Undo', 'actor': ALICE,
                                   'object': {'id': 'https://remote.example/a/1', 'type': 'Like', 'actor': ALICE,
                                              'object': 'https://riff.test/objects/1'}}, alice())
        inner = activity.inner()
        assert inner.kind == ActivityType.LIKE
        assert inner.id == 'https://remote.example/a/1'
        assert inner.object_uri == 'https://riff.test/objects/1'

    def test_no_inner_for_links(self, app):
        activity = Activity(kind=ActivityType.UNDO, id='https://remote.example/a/8', actor=alice(),
                            object='https://remote.example/a/1')
        assert activity.inner() is None


def test_uri_of():
    assert uri_of('https://a.example/1') == 'https://a.example/1'
    assert uri_of({'id': 'https://a.example/2'}) == 'https://a.example/2'
    assert uri_of([{'id': 'https://a.example/3'}, 'https://a.example/4']) == 'https://a.example/3'
    assert uri_of(None) is None
    assert uri_of([]) is None


def test_activity_type_from_name():
    assert ActivityType.from_name('Announce') == ActivityType.ANNOUNCE
    assert ActivityType.from_name('Note') is None
