"""Initial schema: lessons, vocabulary items, lesson progress

Revision ID: 001_initial_schema
Revises:
Create Date: 2025-01-10 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """
    Create the lesson tables.
    """
    op.create_table(
        'lessons',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=False),
        sa.Column('language', sa.String(), nullable=False),
        sa.Column('difficulty', sa.String(), nullable=False, server_default='new'),
        sa.Column('content_type', sa.String(), nullable=False, server_default='word'),
        sa.Column('estimated_minutes', sa.Integer(), nullable=False, server_default='5'),
        sa.Column('vocab_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='lessons_pkey'),
    )

    op.create_table(
        'vocabulary_items',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('lesson_id', sa.String(), nullable=False),
        sa.Column('word', sa.String(), nullable=False),
        sa.Column('translation', sa.String(), nullable=False),
        sa.Column('language', sa.String(), nullable=False),
        sa.Column('content_type', sa.String(), nullable=True, server_default='word'),
        sa.Column('transliteration', sa.String(), nullable=True),
        sa.Column('hebrew_cognate', sa.JSON(), nullable=True),
        sa.Column('letter_breakdown', sa.JSON(), nullable=True),
        sa.Column('speaker', sa.String(), nullable=True),
        sa.Column('context', sa.String(), nullable=True),
        sa.Column('mastery_level', sa.String(), nullable=False, server_default='new'),
        sa.Column('times_practiced', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_reviewed', sa.DateTime(), nullable=True),
        sa.Column('next_review', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['lesson_id'], ['lessons.id'], name='vocabulary_items_lesson_id_fkey', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='vocabulary_items_pkey'),
        sa.CheckConstraint(
            "mastery_level IN ('new', 'learning', 'practiced', 'mastered')",
            name='vocabulary_items_mastery_level_check'
        )
    )
    op.create_index(op.f('ix_vocabulary_items_lesson_id'), 'vocabulary_items', ['lesson_id'], unique=False)

    op.create_table(
        'lesson_progress',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('lesson_id', sa.String(), nullable=False),
        sa.Column('language', sa.String(), nullable=False),
        sa.Column('completed_date', sa.DateTime(), nullable=False),
        sa.Column('score', sa.Integer(), nullable=True),
        sa.Column('items_practiced', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['lesson_id'], ['lessons.id'], name='lesson_progress_lesson_id_fkey', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='lesson_progress_pkey'),
    )
    op.create_index(op.f('ix_lesson_progress_lesson_id'), 'lesson_progress', ['lesson_id'], unique=False)


def downgrade() -> None:
    """
    Drop the lesson tables.
    """
    op.drop_index(op.f('ix_lesson_progress_lesson_id'), table_name='lesson_progress')
    op.drop_table('lesson_progress')
    op.drop_index(op.f('ix_vocabulary_items_lesson_id'), table_name='vocabulary_items')
    op.drop_table('vocabulary_items')
    op.drop_table('lessons')
