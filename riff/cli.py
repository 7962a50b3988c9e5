# if commands in this file are not working (e.g. 'flask init-db') make sure you set the FLASK_APP environment variable.
# e.g. export FLASK_APP=wsgi.py
import json

import click
from flask import current_app

from riff import db
from riff.activitypub.inbox import process_request_json
from riff.activitypub.signature import generate_keypair
from riff.constants import ACTOR_KINDS, ACTOR_PERSON
from riff.models import Actor


def register(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables. Use 'flask db upgrade' on databases managed by migrations."""
        with app.app_context():
            db.create_all()
            print('Done')

    @app.cli.command("keys")
    def keys():
        private_key, public_key = generate_keypair()
        print(private_key)
        print(public_key)

    @app.cli.command("create-actor")
    @click.argument('user_name')
    @click.option('--kind', type=click.Choice(ACTOR_KINDS), default=ACTOR_PERSON)
    @click.option('--name', default=None)
    @click.option('--require-approval', is_flag=True, default=False)
    def create_actor(user_name, kind, name, require_approval):
        """Register a local actor with a fresh keypair."""
        with app.app_context():
            if Actor.query.filter_by(user_name=user_name).first():
                raise click.ClickException(f'{user_name} already exists')
            server = current_app.config['SERVER_NAME']
            uri = f"{current_app.config['HTTP_PROTOCOL']}://{server}/users/{user_name}"
            private_key, public_key = generate_keypair()
            actor = Actor(uri=uri, handle=f'@{user_name}@{server}', name=name or user_name, kind=kind,
                          user_name=user_name, inbox_url=uri + '/inbox',
                          shared_inbox_url=f"{current_app.config['HTTP_PROTOCOL']}://{server}/inbox",
                          featured_url=uri + '/featured',
                          private_key=private_key, public_key=public_key, require_approval=require_approval)
            db.session.add(actor)
            db.session.commit()
            print(f'Created {actor.handle}')

    @app.cli.command("replay-activity")
    @click.argument('activity_file', type=click.File('r'))
    @click.option('--actor-file', type=click.File('r'), default=None,
                  help='Actor document to use when the sender is not stored yet')
    def replay_activity(activity_file, actor_file):
        """Run a stored activity through the inbox again, without signature checks."""
        with app.app_context():
            request_json = json.load(activity_file)
            actor_json = json.load(actor_file) if actor_file else None
            try:
                process_request_json(request_json, actor_json, db.session)
            except Exception:
                db.session.rollback()
                raise
            print('Done')
