"""Create inspex schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('role', sa.Text(), nullable=False),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('status', sa.Text(), server_default=sa.text("'ACTIVE'"), nullable=False),
        sa.Column('last_login_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email', name='uq_user_email'),
        sa.CheckConstraint("role IN ('admin', 'inspector', 'engineer', 'client')", name='ck_user_role'),
        sa.CheckConstraint("status IN ('ACTIVE', 'DISABLED')", name='ck_user_status'),
    )

    op.create_table(
        'audit_log',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('actor_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('action', sa.Text(), nullable=False),
        sa.Column('entity_type', sa.Text(), nullable=True),
        sa.Column('entity_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('metadata_json', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('ip_address', sa.Text(), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['actor_id'], ['user.id'], ondelete='SET NULL'),
    )
    op.create_index('ix_audit_log_entity', 'audit_log', ['entity_type', 'entity_id'])
    op.create_index('ix_audit_log_created_at', 'audit_log', ['created_at'])

    op.create_table(
        'purchase_order',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('po_number', sa.Text(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('po_number', name='uq_purchase_order_po_number'),
    )

    op.create_table(
        'door',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('po_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('door_number', sa.Integer(), nullable=False),
        sa.Column('serial_number', sa.Text(), nullable=False),
        sa.Column('drawing_number', sa.Text(), nullable=False),
        sa.Column('job_number', sa.Text(), nullable=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('pressure', sa.Integer(), nullable=False),
        sa.Column('door_type', sa.Text(), nullable=False),
        sa.Column('size', sa.Text(), nullable=False),
        sa.Column('inspection_status', sa.Text(), server_default=sa.text("'pending'"), nullable=False),
        sa.Column('certification_status', sa.Text(), server_default=sa.text("'pending'"), nullable=False),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('created_by', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['po_id'], ['purchase_order.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['created_by'], ['user.id'], ondelete='SET NULL'),
        sa.UniqueConstraint('serial_number', name='uq_door_serial_number'),
        sa.UniqueConstraint('drawing_number', name='uq_door_drawing_number'),
        sa.CheckConstraint('door_number >= 1', name='ck_door_number_positive'),
        sa.CheckConstraint('pressure IN (140, 400)', name='ck_door_pressure'),
        sa.CheckConstraint(
            "inspection_status IN ('pending', 'in_progress', 'completed')",
            name='ck_door_inspection_status'
        ),
        sa.CheckConstraint(
            "certification_status IN ('pending', 'under_review', 'certified', 'rejected')",
            name='ck_door_certification_status'
        ),
    )
    op.create_index('ix_door_statuses', 'door', ['inspection_status', 'certification_status'])

    op.create_table(
        'serial_counter',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('serial_prefix', sa.Text(), server_default=sa.text("'MF42'"), nullable=False),
        sa.Column('starting_serial', sa.Integer(), server_default=sa.text('200'), nullable=False),
        sa.Column('issued_count', sa.Integer(), server_default=sa.text('0'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'inspection_point',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('order_index', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'inspection',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('door_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('inspector_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('inspection_date', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('completed_date', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('status', sa.Text(), server_default=sa.text("'in_progress'"), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['door_id'], ['door.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['inspector_id'], ['user.id'], ondelete='SET NULL'),
        sa.CheckConstraint(
            "status IN ('in_progress', 'completed', 'superseded')",
            name='ck_inspection_status'
        ),
    )
    op.create_index('ix_inspection_door_id_status', 'inspection', ['door_id', 'status'])
    # One in-progress inspection per door
    op.create_index(
        'uq_inspection_door_in_progress',
        'inspection',
        ['door_id'],
        unique=True,
        postgresql_where=sa.text("status = 'in_progress'"),
    )

    op.create_table(
        'inspection_check',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('inspection_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('inspection_point_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('is_checked', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('photo_path', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('checked_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['inspection_id'], ['inspection.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['inspection_point_id'], ['inspection_point.id'], ondelete='RESTRICT'),
    )
    op.create_index('ix_inspection_check_inspection_id', 'inspection_check', ['inspection_id'])

    op.create_table(
        'certification',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('door_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('inspection_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('engineer_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('certified_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('certificate_pdf_path', sa.Text(), nullable=True),
        sa.Column('signature', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['door_id'], ['door.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['inspection_id'], ['inspection.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['engineer_id'], ['user.id'], ondelete='SET NULL'),
    )
    op.create_index('ix_certification_door_id', 'certification', ['door_id'])


def downgrade():
    op.drop_index('ix_certification_door_id', table_name='certification')
    op.drop_table('certification')
    op.drop_index('ix_inspection_check_inspection_id', table_name='inspection_check')
    op.drop_table('inspection_check')
    op.drop_index('uq_inspection_door_in_progress', table_name='inspection')
    op.drop_index('ix_inspection_door_id_status', table_name='inspection')
    op.drop_table('inspection')
    op.drop_table('inspection_point')
    op.drop_table('serial_counter')
    op.drop_index('ix_door_statuses', table_name='door')
    op.drop_table('door')
    op.drop_table('purchase_order')
    op.drop_index('ix_audit_log_created_at', table_name='audit_log')
    op.drop_index('ix_audit_log_entity', table_name='audit_log')
    op.drop_table('audit_log')
    op.drop_table('user')
