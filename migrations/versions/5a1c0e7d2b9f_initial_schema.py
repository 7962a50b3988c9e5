"""Initial schema: actors, follows, posts, likes, boosts, pinned posts, notifications, activity log

Revision ID: 5a1c0e7d2b9f
Revises:
Create Date: 2026-09-02 10:12:44.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5a1c0e7d2b9f'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('actor',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('uri', sa.String(length=2048), nullable=False),
        sa.Column('handle', sa.String(length=512), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('kind', sa.String(length=10), nullable=False),
        sa.Column('inbox_url', sa.String(length=2048), nullable=True),
        sa.Column('shared_inbox_url', sa.String(length=2048), nullable=True),
        sa.Column('featured_url', sa.String(length=2048), nullable=True),
        sa.Column('url', sa.String(length=2048), nullable=True),
        sa.Column('public_key', sa.Text(), nullable=True),
        sa.Column('private_key', sa.Text(), nullable=True),
        sa.Column('user_name', sa.String(length=255), nullable=True),
        sa.Column('require_approval', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint("kind IN ('Person', 'Group')", name='ck_actor_kind'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('uri'),
        sa.UniqueConstraint('user_name')
    )
    with op.batch_alter_table('actor', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_actor_handle'), ['handle'], unique=False)
        batch_op.create_index(batch_op.f('ix_actor_created_at'), ['created_at'], unique=False)

    op.create_table('follow',
        sa.Column('follower_id', sa.Integer(), nullable=False),
        sa.Column('following_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=10), nullable=False),
        sa.Column('activity_id', sa.String(length=2048), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint("status IN ('pending', 'accepted')", name='ck_follow_status'),
        sa.ForeignKeyConstraint(['follower_id'], ['actor.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['following_id'], ['actor.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('follower_id', 'following_id')
    )
    with op.batch_alter_table('follow', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_follow_following_id'), ['following_id'], unique=False)

    op.create_table('post',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('uri', sa.String(length=2048), nullable=False),
        sa.Column('actor_id', sa.Integer(), nullable=False),
        sa.Column('kind', sa.String(length=10), nullable=False),
        sa.Column('title', sa.String(length=500), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('sensitive', sa.Boolean(), nullable=False),
        sa.Column('url', sa.String(length=2048), nullable=True),
        sa.Column('in_reply_to_id', sa.Integer(), nullable=True),
        sa.Column('quote_of_id', sa.Integer(), nullable=True),
        sa.Column('addressed_to', sa.JSON(), nullable=False),
        sa.Column('likes_count', sa.Integer(), nullable=False),
        sa.Column('boosts_count', sa.Integer(), nullable=False),
        sa.Column('replies_count', sa.Integer(), nullable=False),
        sa.Column('published_at', sa.DateTime(), nullable=False),
        sa.Column('edited_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint("kind IN ('Note', 'Article', 'Page')", name='ck_post_kind'),
        sa.ForeignKeyConstraint(['actor_id'], ['actor.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['in_reply_to_id'], ['post.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['quote_of_id'], ['post.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('uri')
    )
    with op.batch_alter_table('post', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_post_actor_id'), ['actor_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_post_in_reply_to_id'), ['in_reply_to_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_post_quote_of_id'), ['quote_of_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_post_published_at'), ['published_at'], unique=False)
        batch_op.create_index(batch_op.f('ix_post_created_at'), ['created_at'], unique=False)

    op.create_table('like',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('actor_id', sa.Integer(), nullable=False),
        sa.Column('post_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['actor_id'], ['actor.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['post_id'], ['post.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('actor_id', 'post_id', name='uq_like_actor_post')
    )
    with op.batch_alter_table('like', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_like_post_id'), ['post_id'], unique=False)

    op.create_table('boost',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('actor_id', sa.Integer(), nullable=False),
        sa.Column('post_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['actor_id'], ['actor.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['post_id'], ['post.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('actor_id', 'post_id', name='uq_boost_actor_post')
    )
    with op.batch_alter_table('boost', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_boost_post_id'), ['post_id'], unique=False)

    op.create_table('pinned_post',
        sa.Column('actor_id', sa.Integer(), nullable=False),
        sa.Column('post_id', sa.Integer(), nullable=False),
        sa.Column('pinned_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['actor_id'], ['actor.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['post_id'], ['post.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('actor_id', 'post_id')
    )

    op.create_table('notification',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('notif_type', sa.String(length=20), nullable=False),
        sa.Column('recipient_id', sa.Integer(), nullable=False),
        sa.Column('actor_id', sa.Integer(), nullable=False),
        sa.Column('post_id', sa.Integer(), nullable=True),
        sa.Column('read', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['actor_id'], ['actor.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['post_id'], ['post.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['recipient_id'], ['actor.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('notification', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_notification_recipient_id'), ['recipient_id'], unique=False)

    op.create_table('activity_pub_log',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('direction', sa.String(length=3), nullable=False),
        sa.Column('activity_id', sa.String(length=2048), nullable=True),
        sa.Column('activity_type', sa.String(length=50), nullable=True),
        sa.Column('result', sa.String(length=10), nullable=True),
        sa.Column('activity_json', sa.Text(), nullable=True),
        sa.Column('exception_message', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('activity_pub_log', schema=None) as batch_op:
        batch_op.create_index('idx_activitypub_log_lookup', ['activity_id', 'direction'], unique=False)
        batch_op.create_index(batch_op.f('ix_activity_pub_log_activity_id'), ['activity_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_activity_pub_log_activity_type'), ['activity_type'], unique=False)
        batch_op.create_index(batch_op.f('ix_activity_pub_log_created_at'), ['created_at'], unique=False)


def downgrade():
    op.drop_table('activity_pub_log')
    op.drop_table('notification')
    op.drop_table('pinned_post')
    op.drop_table('boost')
    op.drop_table('like')
    op.drop_table('post')
    op.drop_table('follow')
    op.drop_table('actor')
