"""Add memory aid columns to saved_words

Revision ID: 003_add_memory_aids
Revises: 002_add_saved_words
Create Date: 2025-03-14 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '003_add_memory_aids'
down_revision = '002_add_saved_words'
branch_labels = None
depends_on = None


def upgrade() -> None:
    """
    Add memory_note and memory_image_url to saved_words.
    """
    with op.batch_alter_table('saved_words') as batch_op:
        batch_op.add_column(sa.Column('memory_note', sa.String(), nullable=True))
        batch_op.add_column(sa.Column('memory_image_url', sa.String(), nullable=True))


def downgrade() -> None:
    """
    Remove memory aid columns from saved_words.
    """
    with op.batch_alter_table('saved_words') as batch_op:
        batch_op.drop_column('memory_image_url')
        batch_op.drop_column('memory_note')
