"""baseline schema - users, journal entries, daily quotes and summaries

Revision ID: 001_baseline
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa

revision = '001_baseline'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Users table
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('identity_uid', sa.String(128), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('email_verified', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('first_name', sa.String(100), nullable=True),
        sa.Column('last_name', sa.String(100), nullable=True),
        sa.Column('username', sa.String(100), nullable=True),
        sa.Column('auth_provider', sa.String(50), nullable=False, server_default='email'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('google_id', sa.String(128), nullable=True),
        sa.Column('avatar_url', sa.String(500), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username')
    )
    op.create_index('ix_users_identity_uid', 'users', ['identity_uid'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # Journal entries table
    op.create_table('journal_entries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('emotions', sa.JSON(), nullable=True),
        sa.Column('is_favorite', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_journal_entries_user_id', 'journal_entries', ['user_id'])
    op.create_index('ix_journal_entries_created_at', 'journal_entries', ['created_at'])

    # Daily quotes table: one row per user per server date
    op.create_table('daily_quotes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('quote', sa.Text(), nullable=False),
        sa.Column('author', sa.String(255), nullable=True),
        sa.Column('citation', sa.String(255), nullable=True),
        sa.Column('explanation', sa.Text(), nullable=True),
        sa.Column('quote_date', sa.Date(), nullable=False, server_default=sa.func.current_date()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'quote_date', name='uq_daily_quotes_user_date')
    )
    op.create_index('ix_daily_quotes_user_id', 'daily_quotes', ['user_id'])

    # Daily summaries table: one row per user per summary date
    op.create_table('daily_summaries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('summary', sa.Text(), nullable=False),
        sa.Column('key_themes', sa.JSON(), nullable=True),
        sa.Column('emotional_trends', sa.JSON(), nullable=True),
        sa.Column('entry_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('analysis_period_start', sa.Date(), nullable=False),
        sa.Column('analysis_period_end', sa.Date(), nullable=False),
        sa.Column('summary_date', sa.Date(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'summary_date', name='uq_daily_summaries_user_date')
    )
    op.create_index('ix_daily_summaries_user_id', 'daily_summaries', ['user_id'])
    op.create_index('ix_daily_summaries_summary_date', 'daily_summaries', ['summary_date'])


def downgrade():
    op.drop_table('daily_summaries')
    op.drop_table('daily_quotes')
    op.drop_table('journal_entries')
    op.drop_table('users')
