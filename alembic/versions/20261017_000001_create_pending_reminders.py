"""create_pending_reminders

Revision ID: 20261017_000001
Revises:
Create Date: 2026-10-17 09:12:44.103921

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261017_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'pending_reminders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('channel_id', sa.BigInteger(), nullable=False),
        sa.Column('author_id', sa.BigInteger(), nullable=False),
        sa.Column('remind_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_pending_reminders_id'), 'pending_reminders', ['id'], unique=False)
    op.create_index(op.f('ix_pending_reminders_remind_at'), 'pending_reminders', ['remind_at'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f('ix_pending_reminders_remind_at'), table_name='pending_reminders')
    op.drop_index(op.f('ix_pending_reminders_id'), table_name='pending_reminders')
    op.drop_table('pending_reminders')
