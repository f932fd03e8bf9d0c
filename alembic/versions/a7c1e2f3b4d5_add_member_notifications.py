"""add member_notification_messages and member_notification_channels

Revision ID: a7c1e2f3b4d5
Revises:
Create Date: 2026-01-15

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = 'a7c1e2f3b4d5'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_MEDIA_SLOTS = ('thumbnail', 'image', 'author_icon', 'footer_icon')


def _text(name: str) -> sa.Column:
    return sa.Column(name, sa.Text(), nullable=False, server_default='')


def upgrade() -> None:
    media_columns = []
    for slot in _MEDIA_SLOTS:
        media_columns.append(
            sa.Column(f'{slot}_is_file', sa.Boolean(), nullable=False, server_default=sa.false())
        )
        media_columns.append(_text(f'{slot}_url'))

    op.create_table(
        'member_notification_messages',
        sa.Column('guild_id', sa.BigInteger(), autoincrement=False, nullable=False),
        sa.Column('event_type', sa.String(length=16), nullable=False),
        _text('content'),
        _text('title'),
        _text('description'),
        _text('author'),
        _text('footer'),
        *media_columns,
        sa.PrimaryKeyConstraint('guild_id', 'event_type'),
    )
    op.create_table(
        'member_notification_channels',
        sa.Column('guild_id', sa.BigInteger(), autoincrement=False, nullable=False),
        sa.Column('event_type', sa.String(length=16), nullable=False),
        sa.Column('channel_id', sa.BigInteger(), nullable=False),
        sa.PrimaryKeyConstraint('guild_id', 'event_type'),
    )


def downgrade() -> None:
    op.drop_table('member_notification_channels')
    op.drop_table('member_notification_messages')
