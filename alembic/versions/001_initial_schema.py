"""Initial schema with users, bins, holidays and verification codes

Revision ID: 001
Revises:
Create Date: 2025-03-02

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('hashed_password', sa.Text(), nullable=True),
        sa.Column('country', sa.String(length=7), nullable=True),
        sa.Column('device_token', sa.String(length=512), nullable=True),
        sa.Column('is_email_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    # Create user_bins table
    op.create_table(
        'user_bins',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('bin_type', sa.String(length=20), nullable=False),
        sa.Column('body_color', sa.String(length=7), nullable=False),
        sa.Column('head_color', sa.String(length=7), nullable=False),
        sa.Column('last_collection_date', sa.Date(), nullable=False),
        sa.Column('collection_interval', sa.Integer(), nullable=False),
        sa.Column('next_collection_date', sa.Date(), nullable=False),
        sa.Column('notification_enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('notify_days_before', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('last_notification_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'bin_type', name='user_bin_type_unique')
    )
    op.create_index(op.f('ix_user_bins_user_id'), 'user_bins', ['user_id'], unique=False)
    op.create_index(op.f('ix_user_bins_next_collection_date'), 'user_bins', ['next_collection_date'], unique=False)

    # Create holidays table
    op.create_table(
        'holidays',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('country_code', sa.String(length=7), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('day', sa.Integer(), nullable=False),
        sa.Column('month', sa.Integer(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=True),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.CheckConstraint('day BETWEEN 1 AND 31', name='holiday_day_range'),
        sa.CheckConstraint('month BETWEEN 1 AND 12', name='holiday_month_range'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('country_code', 'day', 'month', 'year', name='country_holiday_date_unique')
    )
    op.create_index(op.f('ix_holidays_country_code'), 'holidays', ['country_code'], unique=False)

    # Create verification_codes table
    op.create_table(
        'verification_codes',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(length=6), nullable=False),
        sa.Column('type', sa.String(length=30), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_used', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_verification_codes_user_type', 'verification_codes', ['user_id', 'type'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_verification_codes_user_type', table_name='verification_codes')
    op.drop_table('verification_codes')
    op.drop_index(op.f('ix_holidays_country_code'), table_name='holidays')
    op.drop_table('holidays')
    op.drop_index(op.f('ix_user_bins_next_collection_date'), table_name='user_bins')
    op.drop_index(op.f('ix_user_bins_user_id'), table_name='user_bins')
    op.drop_table('user_bins')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_table('users')
