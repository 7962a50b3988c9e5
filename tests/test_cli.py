import json

from sqlalchemy import select

from riff import db
from riff.models import Actor, Post


class TestCreateActor:
    def test_create(self, app):
        result = app.test_cli_runner().invoke(args=['create-actor', 'carol', '--name', 'Carol', '--require-approval'])
        assert result.exit_code == 0, result.output
        carol = db.session.execute(select(Actor).where(Actor.user_name == 'carol')).scalar_one()
        assert carol.uri == 'https://riff.test/users/carol'
        assert carol.handle == '@carol@riff.test'
        assert carol.inbox_url == 'https://riff.test/users/carol/inbox'
        assert carol.featured_url == 'https://riff.test/users/carol/featured'
        assert carol.require_approval
        assert carol.is_local()
        assert 'BEGIN PRIVATE KEY' in carol.private_key
        assert 'BEGIN PUBLIC KEY' in carol.public_key

    def test_group(self, app):
        result = app.test_cli_runner().invoke(args=['create-actor', 'music', '--kind', 'Group'])
        assert result.exit_code == 0, result.output
        assert db.session.execute(select(Actor.kind).where(Actor.user_name == 'music')).scalar_one() == 'Group'

    def test_duplicate(self, app, make_actor):
        make_actor('carol', host='riff.test')
        result = app.test_cli_runner().invoke(args=['create-actor', 'carol'])
        assert result.exit_code != 0
        assert 'already exists' in result.output


class TestReplayActivity:
    def test_replay(self, app, make_actor, make_activity, tmp_path, actor_json):
        document = make_activity('Create', 'https://remote.example/users/alice',
                                 {'id': 'https://remote.example/users/alice/statuses/1', 'type': 'Note',
                                  'attributedTo': 'https://remote.example/users/alice', 'content': '<p>hi</p>'})
        activity_file = tmp_path / 'activity.json'
        activity_file.write_text(json.dumps(document))
        actor_file = tmp_path / 'actor.json'
        actor_file.write_text(json.dumps(actor_json()))

        result = app.test_cli_runner().invoke(args=['replay-activity', str(activity_file),
                                                    '--actor-file', str(actor_file)])
        assert result.exit_code == 0, result.output
        db.session.expire_all()
        post = db.session.execute(select(Post)).scalar_one()
        assert post.uri == 'https://remote.example/users/alice/statuses/1'
