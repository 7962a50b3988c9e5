import os

from dotenv import load_dotenv

import riff.constants

basedir = os.path.abspath(os.path.dirname(__file__))
load_dotenv(os.path.join(basedir, '.env'))


class Config(object):
    SERVER_NAME = (os.environ.get('SERVER_NAME') or 'localhost').lower()
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guesss'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
                              'sqlite:///' + os.path.join(basedir, 'riff.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False     # set to true to see SQL in console
    MAIL_SERVER = os.environ.get('MAIL_SERVER') or None
    MAIL_PORT = int(os.environ.get('MAIL_PORT') or 25)
    MAIL_USE_TLS = os.environ.get('MAIL_USE_TLS') is not None
    MAIL_USERNAME = os.environ.get('MAIL_USERNAME') or None
    MAIL_PASSWORD = os.environ.get('MAIL_PASSWORD') or None
    MAIL_FROM = os.environ.get('MAIL_FROM') or 'noreply@' + SERVER_NAME
    ERRORS_TO = os.environ.get('ERRORS_TO') or ''
    FULL_AP_CONTEXT = bool(int(os.environ.get('FULL_AP_CONTEXT', 0)))
    CELERY_BROKER_URL = os.environ.get('CELERY_BROKER_URL') or 'redis://localhost:6379/0'
    RESULT_BACKEND = os.environ.get('RESULT_BACKEND') or 'redis://localhost:6379/0'
    HTTP_PROTOCOL = os.environ.get('HTTP_PROTOCOL') or 'https'  # useful during development

    SENTRY_DSN = os.environ.get('SENTRY_DSN') or None

    LOG_ACTIVITYPUB_TO_DB = os.environ.get('LOG_ACTIVITYPUB_TO_DB') or False
    LOG_ACTIVITYPUB_TO_FILE = os.environ.get('LOG_ACTIVITYPUB_TO_FILE') or False

    # inbox behaviour
    REQUIRE_SIGNATURES = os.environ.get('REQUIRE_SIGNATURES', '1') in ('1', 'true', 'True')
    # 'auto' accepts every Follow; 'actor' honours Actor.require_approval and leaves the follow pending
    FOLLOW_APPROVAL_POLICY = os.environ.get('FOLLOW_APPROVAL_POLICY') or 'auto'
    # drop replies whose parent is unknown here instead of storing them unlinked
    DISCARD_ORPHAN_REPLIES = os.environ.get('DISCARD_ORPHAN_REPLIES', '0') in ('1', 'true', 'True')
    MAX_CONTENT_SIZE = int(os.environ.get('MAX_CONTENT_SIZE') or riff.constants.MAX_CONTENT_SIZE)

    VERSION = riff.constants.VERSION
