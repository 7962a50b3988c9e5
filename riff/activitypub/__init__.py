from flask import Blueprint

bp = Blueprint('activitypub', __name__)

from riff.activitypub import routes
