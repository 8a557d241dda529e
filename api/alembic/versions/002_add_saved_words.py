"""Add saved_words and word_contexts tables

Revision ID: 002_add_saved_words
Revises: 001_initial_schema
Create Date: 2025-02-03 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '002_add_saved_words'
down_revision = '001_initial_schema'
branch_labels = None
depends_on = None


def upgrade() -> None:
    """
    Create saved_words (Arabic words saved from lookups) and word_contexts
    (where each saved word was encountered).
    """
    op.create_table(
        'saved_words',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('word', sa.String(), nullable=False),
        sa.Column('translation', sa.String(), nullable=False),
        sa.Column('language', sa.String(), nullable=False, server_default='arabic'),
        sa.Column('pronunciation_standard', sa.String(), nullable=True),
        sa.Column('pronunciation_egyptian', sa.String(), nullable=True),
        sa.Column('letter_breakdown', sa.JSON(), nullable=True),
        sa.Column('hebrew_cognate', sa.JSON(), nullable=True),
        sa.Column('example_sentences', sa.JSON(), nullable=True),
        sa.Column('topic', sa.String(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='active'),
        sa.Column('times_practiced', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('times_correct', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_practiced', sa.DateTime(), nullable=True),
        sa.Column('next_review', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='saved_words_pkey'),
        sa.UniqueConstraint('word', 'language', name='saved_words_word_language_key'),
        sa.CheckConstraint(
            "status IN ('active', 'learned', 'retired')",
            name='saved_words_status_check'
        )
    )
    op.create_index(op.f('ix_saved_words_word'), 'saved_words', ['word'], unique=False)
    op.create_index(op.f('ix_saved_words_topic'), 'saved_words', ['topic'], unique=False)
    op.create_index(op.f('ix_saved_words_status'), 'saved_words', ['status'], unique=False)

    op.create_table(
        'word_contexts',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('saved_word_id', sa.String(), nullable=False),
        sa.Column('content_type', sa.String(), nullable=False),
        sa.Column('full_text', sa.String(), nullable=False),
        sa.Column('full_transliteration', sa.String(), nullable=True),
        sa.Column('full_translation', sa.String(), nullable=False),
        sa.Column('speaker', sa.String(), nullable=True),
        sa.Column('dialog_context', sa.String(), nullable=True),
        sa.Column('lesson_id', sa.String(), nullable=True),
        sa.Column('vocabulary_item_id', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['saved_word_id'], ['saved_words.id'], name='word_contexts_saved_word_id_fkey', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['lesson_id'], ['lessons.id'], name='word_contexts_lesson_id_fkey', ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['vocabulary_item_id'], ['vocabulary_items.id'], name='word_contexts_vocabulary_item_id_fkey', ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id', name='word_contexts_pkey'),
    )
    op.create_index(op.f('ix_word_contexts_saved_word_id'), 'word_contexts', ['saved_word_id'], unique=False)


def downgrade() -> None:
    """
    Drop saved_words and word_contexts.
    """
    op.drop_index(op.f('ix_word_contexts_saved_word_id'), table_name='word_contexts')
    op.drop_table('word_contexts')
    op.drop_index(op.f('ix_saved_words_status'), table_name='saved_words')
    op.drop_index(op.f('ix_saved_words_topic'), table_name='saved_words')
    op.drop_index(op.f('ix_saved_words_word'), table_name='saved_words')
    op.drop_table('saved_words')
