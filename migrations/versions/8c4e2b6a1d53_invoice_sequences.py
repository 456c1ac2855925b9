"""invoice number sequences

Revision ID: 8c4e2b6a1d53
Revises: 3f1a9c2d7b10
Create Date: 2026-10-19 14:30:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '8c4e2b6a1d53'
down_revision = '3f1a9c2d7b10'
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'invoice_sequences',
        sa.Column('stem', sa.String(40), primary_key=True),
        sa.Column('last_value', sa.Integer, nullable=False, server_default='0'),
    )


def downgrade() -> None:
    op.drop_table('invoice_sequences')
