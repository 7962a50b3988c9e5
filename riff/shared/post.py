from __future__ import annotations

from sqlalchemy import delete, func, select, update

from riff.models import Actor, Boost, Hashtag, Like, Notification, PinnedPost, Post, PostHashtag
from riff.utils import insert_or_ignore, utcnow


class PostStore:
    """CRUD-by-uri over posts, with reply and quote linkage"""

    def __init__(self, session):
        self.session = session

    def find_by_uri(self, uri: str | None) -> Post | None:
        if not uri:
            return None
        return self.session.execute(select(Post).where(Post.uri == uri)).scalar_one_or_none()

    def find_by_id(self, post_id: int | None) -> Post | None:
        if post_id is None:
            return None
        return self.session.get(Post, post_id)

    def insert(self, author: Actor, uri: str, content: str, kind: str, title: str | None = None,
               sensitive: bool = False, url: str | None = None, in_reply_to: Post | None = None,
               quote_of: Post | None = None, addressed_to: list | None = None, published_at=None) -> Post | None:
        """Insert unless a post with this uri exists. Returns the new post, or None when it was already stored."""
        inserted = insert_or_ignore(self.session, Post, {
            'uri': uri,
            'actor_id': author.id,
            'kind': kind,
            'title': title,
            'content': content,
            'sensitive': sensitive,
            'url': url,
            'in_reply_to_id': in_reply_to.id if in_reply_to else None,
            'quote_of_id': quote_of.id if quote_of else None,
            'addressed_to': addressed_to or [],
            'published_at': published_at or utcnow(),
        }, ['uri'])
        if not inserted:
            return None
        if in_reply_to is not None:
            self.recount_replies(in_reply_to)
        return self.find_by_uri(uri)

    def update_content(self, post: Post, content: str, sensitive: bool, url: str | None, title: str | None = None,
                       edited_at=None):
        post.content = content
        post.sensitive = sensitive
        post.url = url
        if title is not None:
            post.title = title
        post.edited_at = edited_at or utcnow()
        self.session.flush()

    def set_hashtags(self, post: Post, names: list[str]):
        """Replace the hashtags on a post. Names are expected lowercased, without the #."""
        self.session.execute(delete(PostHashtag).where(PostHashtag.post_id == post.id))
        for name in names:
            insert_or_ignore(self.session, Hashtag, {'name': name}, ['name'])
            hashtag_id = self.session.execute(select(Hashtag.id).where(Hashtag.name == name)).scalar_one()
            insert_or_ignore(self.session, PostHashtag, {'post_id': post.id, 'hashtag_id': hashtag_id},
                             ['post_id', 'hashtag_id'])

    def hashtags_of(self, post: Post) -> list[str]:
        return list(self.session.execute(select(Hashtag.name).join(PostHashtag, PostHashtag.hashtag_id == Hashtag.id)
                                         .where(PostHashtag.post_id == post.id).order_by(Hashtag.name)).scalars())

    def recount_replies(self, post: Post):
        post.replies_count = self.session.execute(
            select(func.count(Post.id)).where(Post.in_reply_to_id == post.id)).scalar_one()
        self.session.flush()

    def delete(self, post: Post):
        """Delete a post and the edges hanging off it. Replies and quotes survive, unlinked."""
        parent = self.find_by_id(post.in_reply_to_id)
        self._delete_ids([post.id])
        if parent is not None:
            self.recount_replies(parent)

    def delete_by_author(self, author: Actor) -> int:
        post_ids = list(self.session.execute(select(Post.id).where(Post.actor_id == author.id)).scalars())
        if not post_ids:
            return 0
        parent_ids = set(self.session.execute(
            select(Post.in_reply_to_id).where(Post.id.in_(post_ids), Post.in_reply_to_id.is_not(None))).scalars())
        self._delete_ids(post_ids)
        for parent_id in parent_ids - set(post_ids):
            parent = self.find_by_id(parent_id)
            if parent is not None:
                self.recount_replies(parent)
        return len(post_ids)

    def _delete_ids(self, post_ids: list[int]):
        self.session.execute(delete(Like).where(Like.post_id.in_(post_ids)))
        self.session.execute(delete(Boost).where(Boost.post_id.in_(post_ids)))
        self.session.execute(delete(PinnedPost).where(PinnedPost.post_id.in_(post_ids)))
        self.session.execute(delete(PostHashtag).where(PostHashtag.post_id.in_(post_ids)))
        self.session.execute(delete(Notification).where(Notification.post_id.in_(post_ids)))
        self.session.execute(update(Post).where(Post.in_reply_to_id.in_(post_ids)).values(in_reply_to_id=None)
                             .execution_options(synchronize_session='fetch'))
        self.session.execute(update(Post).where(Post.quote_of_id.in_(post_ids)).values(quote_of_id=None)
                             .execution_options(synchronize_session='fetch'))
        self.session.execute(delete(Post).where(Post.id.in_(post_ids)).execution_options(synchronize_session='fetch'))

    def posts_by(self, author: Actor) -> list[Post]:
        return list(self.session.execute(select(Post).where(Post.actor_id == author.id).order_by(Post.id)).scalars())

    def replies_to(self, post: Post) -> list[Post]:
        return list(self.session.execute(select(Post).where(Post.in_reply_to_id == post.id)
                                         .order_by(Post.published_at)).scalars())
