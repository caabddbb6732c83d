"""Initial schema - listings pipeline, catalog, admins and auth

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

LISTING_STATUSES = ('cpv', 'assign', 'worklist', 'nr', 'pr', 'np', 'published')
ADMIN_STATUSES = ('active', 'frozen')


def upgrade() -> None:
    listingstatus = sa.Enum(*LISTING_STATUSES, name='listingstatus')
    adminstatus = sa.Enum(*ADMIN_STATUSES, name='adminstatus')

    op.create_table(
        'auth_users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_auth_users_email', 'auth_users', ['email'], unique=True)

    op.create_table(
        'user_roles',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('role', sa.String(length=50), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['auth_users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'role', name='uq_user_roles_user_role'),
    )
    op.create_index('ix_user_roles_user_id', 'user_roles', ['user_id'])

    op.create_table(
        'auth_sessions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['auth_users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_auth_sessions_user_id', 'auth_sessions', ['user_id'])
    op.create_index('ix_auth_sessions_token_hash', 'auth_sessions', ['token_hash'], unique=True)

    op.create_table(
        'admins',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('admin_code', sa.String(length=20), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('status', adminstatus, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('admin_code'),
    )
    op.create_index('ix_admins_email', 'admins', ['email'], unique=True)
    op.create_index('ix_admins_created_at', 'admins', ['created_at'])

    op.create_table(
        'admin_permissions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('admin_id', sa.Uuid(), nullable=False),
        sa.Column('section', sa.String(length=50), nullable=False),
        sa.Column('can_access', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['admin_id'], ['admins.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('admin_id', 'section', name='uq_admin_permissions_admin_section'),
    )
    op.create_index('ix_admin_permissions_admin_id', 'admin_permissions', ['admin_id'])

    op.create_table(
        'admin_activity_log',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('admin_id', sa.Uuid(), nullable=True),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('section', sa.String(length=50), nullable=True),
        sa.Column('details', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['admin_id'], ['admins.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_admin_activity_log_admin_id', 'admin_activity_log', ['admin_id'])
    op.create_index('ix_admin_activity_log_action', 'admin_activity_log', ['action'])
    op.create_index('ix_admin_activity_log_section', 'admin_activity_log', ['section'])
    op.create_index('ix_admin_activity_log_created_at', 'admin_activity_log', ['created_at'])

    for table in ('categories', 'brands'):
        op.create_table(
            table,
            sa.Column('id', sa.Uuid(), nullable=False),
            sa.Column('name', sa.String(length=100), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('name'),
        )

    op.create_table(
        'listings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('product_name', sa.String(length=200), nullable=False),
        sa.Column('title', sa.String(length=300), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category_id', sa.Uuid(), nullable=False),
        sa.Column('brand_id', sa.Uuid(), nullable=True),
        sa.Column('status', listingstatus, nullable=False),
        sa.Column('assigned_to', sa.Uuid(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id']),
        sa.ForeignKeyConstraint(['brand_id'], ['brands.id']),
        sa.ForeignKeyConstraint(['assigned_to'], ['admins.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['created_by'], ['auth_users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    for column in ('category_id', 'brand_id', 'status', 'assigned_to', 'deleted_at', 'created_at'):
        op.create_index(f'ix_listings_{column}', 'listings', [column])


def downgrade() -> None:
    op.drop_table('listings')
    op.drop_table('brands')
    op.drop_table('categories')
    op.drop_table('admin_activity_log')
    op.drop_table('admin_permissions')
    op.drop_table('admins')
    op.drop_table('auth_sessions')
    op.drop_table('user_roles')
    op.drop_table('auth_users')

    sa.Enum(name='listingstatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='adminstatus').drop(op.get_bind(), checkfirst=True)
