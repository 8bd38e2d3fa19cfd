"""Ledger records: one key-value row per persisted collection

Revision ID: 20261019_ledger
Revises:
Create Date: 2026-10-19

Creates ledger_records, which holds the settings, documents, inventory and
clients collections as whole JSON snapshots keyed by name.
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261019_ledger'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('ledger_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('key', sa.String(length=64), nullable=False),
        sa.Column('value', sa.JSON(), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('ledger_records', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_ledger_records_key'), ['key'], unique=True)


def downgrade():
    with op.batch_alter_table('ledger_records', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_ledger_records_key'))

    op.drop_table('ledger_records')
