"""Hashtags and the posts that carry them

Revision ID: 9c3e41b7a2d6
Revises: 5a1c0e7d2b9f
Create Date: 2026-10-18 09:31:07.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '9c3e41b7a2d6'
down_revision = '5a1c0e7d2b9f'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('hashtag',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=256), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )

    op.create_table('post_hashtag',
        sa.Column('post_id', sa.Integer(), nullable=False),
        sa.Column('hashtag_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['hashtag_id'], ['hashtag.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['post_id'], ['post.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('post_id', 'hashtag_id')
    )
    with op.batch_alter_table('post_hashtag', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_post_hashtag_hashtag_id'), ['hashtag_id'], unique=False)


def downgrade():
    with op.batch_alter_table('post_hashtag', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_post_hashtag_hashtag_id'))

    op.drop_table('post_hashtag')
    op.drop_table('hashtag')
