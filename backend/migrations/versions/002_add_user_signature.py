"""Add stored engineer signature to user

Revision ID: 002
Revises: 001
Create Date: 2026-10-26 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '002'
down_revision = '001'
branch_labels = None
depends_on = None


def upgrade():
    op.add_column('user', sa.Column('signature_path', sa.Text(), nullable=True))
    op.add_column('user', sa.Column('signature_mime_type', sa.Text(), nullable=True))


def downgrade():
    op.drop_column('user', 'signature_mime_type')
    op.drop_column('user', 'signature_path')
