"""Initial schema - create all tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    ]


def upgrade() -> None:
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='OPERATOR'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
        sa.UniqueConstraint('email', name='uq_users_email')
    )
    op.create_index('idx_users_role', 'users', ['role'])

    # Create categories table
    op.create_table(
        'categories',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id', name='pk_categories'),
        sa.UniqueConstraint('name', name='uq_categories_name')
    )

    # Create items table
    op.create_table(
        'items',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('category_id', sa.Uuid(), nullable=True),
        sa.Column('barcode', sa.String(length=50), nullable=False),
        sa.Column('name', sa.String(length=500), nullable=False),
        sa.Column('brand', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('model', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('serial_number', sa.String(length=255), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('min_quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('location', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('condition', sa.String(length=20), nullable=True),
        sa.Column('photo_url', sa.String(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.CheckConstraint('quantity >= 0', name='ck_items_quantity_non_negative'),
        sa.CheckConstraint('min_quantity >= 0', name='ck_items_min_quantity_non_negative'),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id'], name='fk_items_category_id_categories', ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id', name='pk_items'),
        sa.UniqueConstraint('barcode', name='uq_items_barcode')
    )
    op.create_index('idx_items_category', 'items', ['category_id'])
    op.create_index('idx_items_low_stock', 'items', ['active', 'quantity'])

    # Create movements table
    op.create_table(
        'movements',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('item_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('type', sa.String(length=10), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('quantity > 0', name='ck_movements_quantity_positive'),
        sa.CheckConstraint("type IN ('ENTRY', 'EXIT')", name='ck_movements_type_valid'),
        sa.ForeignKeyConstraint(['item_id'], ['items.id'], name='fk_movements_item_id_items', ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_movements_user_id_users', ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id', name='pk_movements')
    )
    op.create_index('idx_movements_item', 'movements', ['item_id'])
    op.create_index('idx_movements_created_at', 'movements', ['created_at'])

    # Create loans table
    op.create_table(
        'loans',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('custodian_id', sa.Uuid(), nullable=False),
        sa.Column('creator_id', sa.Uuid(), nullable=False),
        sa.Column('returned_by', sa.Uuid(), nullable=True),
        sa.Column('loan_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('return_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='open'),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("status IN ('open', 'overdue', 'returned')", name='ck_loans_status_valid'),
        sa.ForeignKeyConstraint(['custodian_id'], ['users.id'], name='fk_loans_custodian_id_users', ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['creator_id'], ['users.id'], name='fk_loans_creator_id_users', ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['returned_by'], ['users.id'], name='fk_loans_returned_by_users', ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id', name='pk_loans')
    )
    op.create_index('idx_loans_status', 'loans', ['status'])
    op.create_index('idx_loans_open_due', 'loans', ['status', 'due_date'])
    op.create_index('idx_loans_custodian', 'loans', ['custodian_id'])

    # Create loan_lines table
    op.create_table(
        'loan_lines',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('loan_id', sa.Uuid(), nullable=False),
        sa.Column('item_id', sa.Uuid(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('serial_number', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('quantity > 0', name='ck_loan_lines_quantity_positive'),
        sa.ForeignKeyConstraint(['loan_id'], ['loans.id'], name='fk_loan_lines_loan_id_loans', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['item_id'], ['items.id'], name='fk_loan_lines_item_id_items', ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id', name='pk_loan_lines')
    )
    op.create_index('idx_loan_lines_loan', 'loan_lines', ['loan_id'])
    op.create_index('idx_loan_lines_item', 'loan_lines', ['item_id'])

    # Create audit_logs table
    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('user_email', sa.String(length=255), nullable=True),
        sa.Column('user_name', sa.String(length=255), nullable=True),
        sa.Column('action', sa.String(length=100), nullable=False),
        sa.Column('entity', sa.String(length=100), nullable=False),
        sa.Column('entity_id', sa.String(length=64), nullable=True),
        sa.Column('details', sa.JSON().with_variant(postgresql.JSONB(), 'postgresql'), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='fk_audit_logs_user_id_users', ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id', name='pk_audit_logs')
    )
    op.create_index('idx_audit_logs_user', 'audit_logs', ['user_id'])
    op.create_index('idx_audit_logs_action', 'audit_logs', ['action'])
    op.create_index('idx_audit_logs_entity', 'audit_logs', ['entity', 'entity_id'])
    op.create_index('idx_audit_logs_created_at', 'audit_logs', ['created_at'])


def downgrade() -> None:
    op.drop_table('audit_logs')
    op.drop_table('loan_lines')
    op.drop_table('loans')
    op.drop_table('movements')
    op.drop_table('items')
    op.drop_table('categories')
    op.drop_table('users')
