"""Riff models package

- base.py: mixins and type aliases
- actor.py: actors and the follow graph
- content.py: posts, likes, boosts, pinned posts and hashtags
- notification.py: notifications for local actors
- activitypub.py: activity logging
"""

from riff.models.base import TimestampMixin

from riff.models.actor import Actor, Follow

from riff.models.content import Post, Like, Boost, PinnedPost, Hashtag, PostHashtag

from riff.models.notification import Notification

from riff.models.activitypub import ActivityPubLog

from riff.utils import utcnow

__all__ = [
    'TimestampMixin',
    'Actor', 'Follow',
    'Post', 'Like', 'Boost', 'PinnedPost', 'Hashtag', 'PostHashtag',
    'Notification',
    'ActivityPubLog',
    'utcnow',
]
