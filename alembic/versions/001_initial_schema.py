"""Initial schema for the dashboard console

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


def upgrade() -> None:
    # Identity
    op.create_table(
        'auth_accounts',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('last_sign_in_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_auth_accounts_email', 'auth_accounts', ['email'], unique=True)

    op.create_table(
        'user_profiles',
        sa.Column('id', postgresql.UUID(as_uuid=True), sa.ForeignKey('auth_accounts.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255), nullable=True),
        sa.Column('role', sa.String(20), nullable=False, server_default='user'),
        sa.Column('avatar_url', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("role IN ('user', 'admin')", name='ck_user_profiles_role'),
    )
    op.create_index('ix_user_profiles_created_at', 'user_profiles', ['created_at'])

    op.create_table(
        'token_blacklist',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('jti', sa.String(36), nullable=False),
        sa.Column('token_type', sa.String(20), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('blacklisted_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_token_blacklist_jti', 'token_blacklist', ['jti'], unique=True)
    op.create_index('ix_token_blacklist_expires_at', 'token_blacklist', ['expires_at'])

    # Dashboard content
    op.create_table(
        'dashboard_kpis',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('key', sa.String(100), nullable=False, unique=True),
        sa.Column('label', sa.String(255), nullable=False),
        sa.Column('value', sa.Float(), nullable=False, server_default='0'),
        sa.Column('unit', sa.String(50), nullable=True),
        sa.Column('change', sa.String(50), nullable=True),
        sa.Column('trend', sa.String(20), nullable=True, server_default='neutral'),
        sa.Column('icon', sa.String(100), nullable=True),
        sa.Column('color', sa.String(50), nullable=True),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("trend IS NULL OR trend IN ('up', 'down', 'neutral')", name='ck_dashboard_kpis_trend'),
    )
    op.create_index('ix_dashboard_kpis_order', 'dashboard_kpis', ['order'])

    op.create_table(
        'project_components',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
    )

    op.create_table(
        'project_activities',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('component_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('activity_name', sa.String(500), nullable=False),
        sa.Column('responsible', sa.String(255), nullable=True),
        sa.Column('status', sa.String(50), nullable=False, server_default='Non démarré'),
        sa.Column('priority', sa.String(20), nullable=False, server_default='normal'),
        sa.Column('progress', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('tdr_done', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('marche_done', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('contract_done', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('budget_allocated', sa.Float(), nullable=True),
        sa.Column('budget_spent', sa.Float(), nullable=True),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('progress >= 0 AND progress <= 100', name='ck_project_activities_progress'),
        sa.CheckConstraint("priority IN ('high', 'normal', 'low')", name='ck_project_activities_priority'),
    )
    op.create_index('ix_project_activities_component_id', 'project_activities', ['component_id'])
    op.create_index('ix_project_activities_order', 'project_activities', ['order'])

    op.create_table(
        'website_stats',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('metric_name', sa.String(255), nullable=False),
        sa.Column('metric_value', sa.Float(), nullable=False, server_default='0'),
        sa.Column('metric_type', sa.String(30), nullable=False, server_default='user'),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "metric_type IN ('user', 'project', 'financial', 'activity', 'performance', 'engagement')",
            name='ck_website_stats_metric_type',
        ),
    )
    op.create_index('ix_website_stats_metric_name', 'website_stats', ['metric_name'])


def downgrade() -> None:
    op.drop_table('website_stats')
    op.drop_table('project_activities')
    op.drop_table('project_components')
    op.drop_table('dashboard_kpis')
    op.drop_table('token_blacklist')
    op.drop_table('user_profiles')
    op.drop_table('auth_accounts')
