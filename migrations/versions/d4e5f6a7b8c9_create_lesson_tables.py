"""create lessons, vocab_entries, kanji_entries and vocab_reviews tables

Revision ID: d4e5f6a7b8c9
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'd4e5f6a7b8c9'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the lesson tables. Children reference lessons with ON DELETE CASCADE."""
    op.create_table('lessons',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('slug', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('locked', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('number', sa.Integer(), nullable=False, server_default='1'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('slug')
    )

    op.create_table('vocab_entries',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('word', sa.String(), nullable=False),
        sa.Column('reading', sa.String(), nullable=False),
        sa.Column('definition', sa.Text(), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('category', sa.String(), nullable=True),
        sa.Column('order', sa.Integer(), nullable=False),
        sa.Column('lesson_id', sa.String(length=32), nullable=False),
        sa.ForeignKeyConstraint(['lesson_id'], ['lessons.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('lesson_id', 'order', name='uq_vocab_lesson_order')
    )
    op.create_index('ix_vocab_entries_lesson_id', 'vocab_entries', ['lesson_id'])

    op.create_table('kanji_entries',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('kanji', sa.String(), nullable=False),
        sa.Column('definition', sa.Text(), nullable=False),
        sa.Column('onyomi', sa.JSON(), nullable=False),
        sa.Column('kunyomi', sa.JSON(), nullable=False),
        sa.Column('lesson_id', sa.String(length=32), nullable=False),
        sa.ForeignKeyConstraint(['lesson_id'], ['lessons.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_kanji_entries_lesson_id', 'kanji_entries', ['lesson_id'])

    op.create_table('vocab_reviews',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user', sa.String(), nullable=False),
        sa.Column('vocab_id', sa.String(length=32), nullable=False),
        sa.Column('next_review', sa.DateTime(), nullable=True),
        sa.Column('interval', sa.Integer(), nullable=True, server_default='1'),
        sa.Column('ease_factor', sa.Float(), nullable=True, server_default='2.5'),
        sa.Column('repetitions', sa.Integer(), nullable=True, server_default='0'),
        sa.Column('success_count', sa.Integer(), nullable=True, server_default='0'),
        sa.Column('last_reviewed', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['vocab_id'], ['vocab_entries.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user', 'vocab_id', name='uq_review_user_vocab')
    )
    op.create_index('ix_vocab_reviews_vocab_id', 'vocab_reviews', ['vocab_id'])


def downgrade() -> None:
    """Drop the lesson tables, children first."""
    op.drop_index('ix_vocab_reviews_vocab_id', table_name='vocab_reviews')
    op.drop_table('vocab_reviews')
    op.drop_index('ix_kanji_entries_lesson_id', table_name='kanji_entries')
    op.drop_table('kanji_entries')
    op.drop_index('ix_vocab_entries_lesson_id', table_name='vocab_entries')
    op.drop_table('vocab_entries')
    op.drop_table('lessons')
