from __future__ import annotations

from sqlalchemy import delete, func, or_, select, update

from riff.constants import FOLLOW_ACCEPTED
from riff.models import Actor, Boost, Follow, Like, Notification, PinnedPost, Post
from riff.utils import insert_or_ignore, utcnow


class RelationshipStore:
    """
    Follow, like, boost and pin edges. Every write is insert-if-absent or delete-if-present, so each one can be
    repeated safely; the boolean results say whether anything changed.
    """

    def __init__(self, session):
        self.session = session

    # Follows
    def find_follow(self, follower: Actor, following: Actor) -> Follow | None:
        return self.session.get(Follow, (follower.id, following.id))

    def find_follow_by_activity_id(self, activity_id: str | None, following: Actor) -> Follow | None:
        if not activity_id:
            return None
        return self.session.execute(select(Follow).where(Follow.activity_id == activity_id,
                                                         Follow.following_id == following.id)).scalar_one_or_none()

    def add_follow(self, follower: Actor, following: Actor, status: str = FOLLOW_ACCEPTED,
                   activity_id: str | None = None) -> bool:
        return insert_or_ignore(self.session, Follow, {
            'follower_id': follower.id,
            'following_id': following.id,
            'status': status,
            'activity_id': activity_id,
        }, ['follower_id', 'following_id'])

    def set_follow_status(self, follower: Actor, following: Actor, status: str) -> bool:
        result = self.session.execute(update(Follow)
                                      .where(Follow.follower_id == follower.id, Follow.following_id == following.id)
                                      .values(status=status)
                                      .execution_options(synchronize_session='fetch'))
        return result.rowcount > 0

    def remove_follow(self, follower: Actor, following: Actor) -> bool:
        result = self.session.execute(delete(Follow)
                                      .where(Follow.follower_id == follower.id, Follow.following_id == following.id)
                                      .execution_options(synchronize_session='fetch'))
        return result.rowcount > 0

    def followers_of(self, actor: Actor) -> list[Actor]:
        return list(self.session.execute(select(Actor).join(Follow, Follow.follower_id == Actor.id)
                                         .where(Follow.following_id == actor.id)).scalars())

    # Likes
    def has_like(self, actor: Actor, post: Post) -> bool:
        return self.session.execute(select(Like.id).where(Like.actor_id == actor.id,
                                                          Like.post_id == post.id)).first() is not None

    def add_like(self, actor: Actor, post: Post) -> bool:
        added = insert_or_ignore(self.session, Like, {'actor_id': actor.id, 'post_id': post.id},
                                 ['actor_id', 'post_id'])
        if added:
            self.recount_likes(post)
        return added

    def remove_like(self, actor: Actor, post: Post) -> bool:
        result = self.session.execute(delete(Like).where(Like.actor_id == actor.id, Like.post_id == post.id))
        if result.rowcount > 0:
            self.recount_likes(post)
            return True
        return False

    def recount_likes(self, post: Post):
        post.likes_count = self.session.execute(
            select(func.count(Like.id)).where(Like.post_id == post.id)).scalar_one()
        self.session.flush()

    # Boosts
    def has_boost(self, actor: Actor, post: Post) -> bool:
        return self.session.execute(select(Boost.id).where(Boost.actor_id == actor.id,
                                                           Boost.post_id == post.id)).first() is not None

    def add_boost(self, actor: Actor, post: Post) -> bool:
        added = insert_or_ignore(self.session, Boost, {'actor_id': actor.id, 'post_id': post.id},
                                 ['actor_id', 'post_id'])
        if added:
            self.recount_boosts(post)
        return added

    def remove_boost(self, actor: Actor, post: Post) -> bool:
        result = self.session.execute(delete(Boost).where(Boost.actor_id == actor.id, Boost.post_id == post.id))
        if result.rowcount > 0:
            self.recount_boosts(post)
            return True
        return False

    def recount_boosts(self, post: Post):
        post.boosts_count = self.session.execute(
            select(func.count(Boost.id)).where(Boost.post_id == post.id)).scalar_one()
        self.session.flush()

    # Featured collection
    def pin(self, actor: Actor, post: Post) -> bool:
        return insert_or_ignore(self.session, PinnedPost, {'actor_id': actor.id, 'post_id': post.id,
                                                           'pinned_at': utcnow()}, ['actor_id', 'post_id'])

    def unpin(self, actor: Actor, post: Post) -> bool:
        result = self.session.execute(delete(PinnedPost).where(PinnedPost.actor_id == actor.id,
                                                               PinnedPost.post_id == post.id)
                                      .execution_options(synchronize_session='fetch'))
        return result.rowcount > 0

    def pinned_posts(self, actor: Actor) -> list[Post]:
        return list(self.session.execute(select(Post).join(PinnedPost, PinnedPost.post_id == Post.id)
                                         .where(PinnedPost.actor_id == actor.id)
                                         .order_by(PinnedPost.pinned_at, PinnedPost.post_id)).scalars())

    def clear_pins(self, actor: Actor) -> int:
        result = self.session.execute(delete(PinnedPost).where(PinnedPost.actor_id == actor.id)
                                      .execution_options(synchronize_session='fetch'))
        return result.rowcount

    def forget_actor(self, actor: Actor):
        """Remove every edge the actor is on either end of, keeping counters on other posts right"""
        liked = list(self.session.execute(select(Like.post_id).where(Like.actor_id == actor.id)).scalars())
        boosted = list(self.session.execute(select(Boost.post_id).where(Boost.actor_id == actor.id)).scalars())
        self.session.execute(delete(Like).where(Like.actor_id == actor.id))
        self.session.execute(delete(Boost).where(Boost.actor_id == actor.id))
        self.session.execute(delete(PinnedPost).where(PinnedPost.actor_id == actor.id)
                             .execution_options(synchronize_session='fetch'))
        self.session.execute(delete(Follow).where(or_(Follow.follower_id == actor.id, Follow.following_id == actor.id))
                             .execution_options(synchronize_session='fetch'))
        self.session.execute(delete(Notification).where(or_(Notification.actor_id == actor.id,
                                                            Notification.recipient_id == actor.id)))
        for post_id in set(liked):
            post = self.session.get(Post, post_id)
            if post is not None:
                self.recount_likes(post)
        for post_id in set(boosted):
            post = self.session.get(Post, post_id)
            if post is not None:
                self.recount_boosts(post)
