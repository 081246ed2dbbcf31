"""initial schema: source tables, daily counter, insights events

Revision ID: 3c9e1f0a7b21
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = '3c9e1f0a7b21'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at(name: str = 'created_at') -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def upgrade() -> None:
    op.create_table(
        'customer_support_tickets',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('ticket_id', sa.String(255), nullable=False, unique=True),
        sa.Column('content', sa.Text, nullable=False),
        sa.Column('status', sa.String(50), nullable=False),
        sa.Column('user_id', sa.String(255), nullable=False),
        _created_at(),
    )
    op.create_index('ix_customer_support_tickets_created_at', 'customer_support_tickets', ['created_at'])

    op.create_table(
        'discord_messages',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('message_id', sa.String(255), nullable=False, unique=True),
        sa.Column('channel_id', sa.String(255), nullable=False),
        sa.Column('content', sa.Text, nullable=False),
        sa.Column('author_id', sa.String(255), nullable=False),
        _created_at(),
    )
    op.create_index('ix_discord_messages_channel_id', 'discord_messages', ['channel_id'])
    op.create_index('ix_discord_messages_created_at', 'discord_messages', ['created_at'])

    op.create_table(
        'github_issues',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('issue_id', sa.Integer, nullable=False, unique=True),
        sa.Column('repo', sa.String(255), nullable=False),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('body', sa.Text, nullable=False),
        sa.Column('state', sa.String(50), nullable=False),
        _created_at(),
    )
    op.create_index('ix_github_issues_created_at', 'github_issues', ['created_at'])

    op.create_table(
        'emails',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('email_id', sa.String(255), nullable=False, unique=True),
        sa.Column('subject', sa.String(500), nullable=False),
        sa.Column('body', sa.Text, nullable=False),
        sa.Column('sender', sa.String(255), nullable=False),
        sa.Column('vector_id', sa.String(255), nullable=True),
        _created_at('received_at'),
    )
    op.create_index('ix_emails_received_at', 'emails', ['received_at'])

    op.create_table(
        'twitter_posts',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('tweet_id', sa.String(255), nullable=False, unique=True),
        sa.Column('content', sa.Text, nullable=False),
        sa.Column('author', sa.String(255), nullable=False),
        _created_at(),
    )
    op.create_index('ix_twitter_posts_created_at', 'twitter_posts', ['created_at'])

    op.create_table(
        'forum_posts',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('post_id', sa.String(255), nullable=False, unique=True),
        sa.Column('forum', sa.String(255), nullable=False),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('content', sa.Text, nullable=False),
        sa.Column('author', sa.String(255), nullable=False),
        _created_at(),
    )
    op.create_index('ix_forum_posts_forum', 'forum_posts', ['forum'])
    op.create_index('ix_forum_posts_created_at', 'forum_posts', ['created_at'])

    op.create_table(
        'insights_aggregated',
        sa.Column('date', sa.Date, primary_key=True),
        *[
            sa.Column(name, sa.Integer, nullable=False, server_default='0')
            for name in (
                'total_tickets', 'total_discord', 'total_issues',
                'total_emails', 'total_tweets', 'total_forum',
            )
        ],
    )

    op.create_table(
        'insights_events',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('source', sa.String(20), nullable=False),
        sa.Column('source_id', sa.String(255), nullable=False),
        sa.Column('content', sa.Text, nullable=True),
        sa.Column('status', sa.String(50), nullable=True),
        sa.Column('user_id', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('extras', sa.JSON, nullable=False),
        sa.Column('recorded_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
    )
    op.create_index('ix_insights_events_source', 'insights_events', ['source'])


def downgrade() -> None:
    op.drop_table('insights_events')
    op.drop_table('insights_aggregated')
    for table in (
        'forum_posts', 'twitter_posts', 'emails',
        'github_issues', 'discord_messages', 'customer_support_tickets',
    ):
        op.drop_table(table)
