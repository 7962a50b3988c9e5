REQUEST_TIMEOUT = 5
VERSION = '0.4.0'

ACTOR_PERSON = 'Person'
ACTOR_GROUP = 'Group'
ACTOR_KINDS = (ACTOR_PERSON, ACTOR_GROUP)

FOLLOW_PENDING = 'pending'
FOLLOW_ACCEPTED = 'accepted'

POST_NOTE = 'Note'
POST_ARTICLE = 'Article'
POST_PAGE = 'Page'
POST_KINDS = (POST_NOTE, POST_ARTICLE, POST_PAGE)
TITLED_POST_KINDS = (POST_ARTICLE, POST_PAGE)

NOTIF_FOLLOW = 'follow'
NOTIF_LIKE = 'like'
NOTIF_BOOST = 'boost'
NOTIF_REPLY = 'reply'

MAX_CONTENT_SIZE = 50 * 1024    # bytes of sanitized html
MAX_NAME_LENGTH = 200
MAX_BIO_LENGTH = 5000
MAX_TITLE_LENGTH = 500
MAX_URL_LENGTH = 2048
MAX_HASHTAG_LENGTH = 256

EARLIEST_PUBLISHED = '2007-01-01T00:00:00Z'
PUBLISHED_FUTURE_LEEWAY = 5 * 60    # seconds

PUBLIC_COLLECTION = 'https://www.w3.org/ns/activitystreams#Public'

ALLOWED_HTML_TAGS = ['p', 'br', 'a', 'span', 'strong', 'b', 'em', 'i', 'u', 's', 'del', 'blockquote', 'pre',
                     'code', 'ul', 'ol', 'li']

APLOG_IN = True

APLOG_SUCCESS = (True, 'success')
APLOG_FAILURE = (True, 'failure')
APLOG_IGNORED = (True, 'ignored')

APLOG_NOTYPE = (True, 'Unknown')
APLOG_DUPLICATE = (True, 'Duplicate')
APLOG_FOLLOW = (True, 'Follow')
APLOG_ACCEPT = (True, 'Accept')
APLOG_REJECT = (True, 'Reject')
APLOG_DELETE = (True, 'Delete')
APLOG_CREATE = (True, 'Create')
APLOG_UPDATE = (True, 'Update')
APLOG_LIKE = (True, 'Like')

APLOG_UNDO = (True, 'Undo')
APLOG_UNDO_FOLLOW = (True, 'Undo Follow')
APLOG_UNDO_VOTE = (True, 'Undo Vote')
APLOG_UNDO_ANNOUNCE = (True, 'Undo Announce')

APLOG_ADD = (True, 'Add')
APLOG_REMOVE = (True, 'Remove')

APLOG_ANNOUNCE = (True, 'Announce')
