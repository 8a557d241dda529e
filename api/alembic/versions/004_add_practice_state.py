"""Add practice_state table

Revision ID: 004_add_practice_state
Revises: 003_add_memory_aids
Create Date: 2025-04-02 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '004_add_practice_state'
down_revision = '003_add_memory_aids'
branch_labels = None
depends_on = None


def upgrade() -> None:
    """
    Create practice_state, the key-value store holding card stack and
    exercise session snapshots.
    """
    op.create_table(
        'practice_state',
        sa.Column('key', sa.String(), nullable=False),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('key', name='practice_state_pkey'),
    )


def downgrade() -> None:
    """
    Drop practice_state.
    """
    op.drop_table('practice_state')
