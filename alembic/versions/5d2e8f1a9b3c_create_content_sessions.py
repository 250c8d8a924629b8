"""create_content_sessions

Revision ID: 5d2e8f1a9b3c
Revises:
Create Date: 2026-10-17 10:12:41.518203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5d2e8f1a9b3c'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'content_sessions',
        sa.Column('id', sa.String(64), primary_key=True),
        sa.Column('title', sa.String(255), nullable=True),
        sa.Column('prompt', sa.Text(), nullable=True),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('formatted_content', sa.JSON(), nullable=True),
        sa.Column('status', sa.String(32), nullable=False, server_default='idle'),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        'charts',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('session_id', sa.String(64), sa.ForeignKey('content_sessions.id'), nullable=False),
        sa.Column('chart_key', sa.String(64), nullable=False),
        sa.Column('chart_type', sa.String(32), nullable=False, server_default='bar'),
        sa.Column('data', sa.JSON(), nullable=True),
        sa.Column('config', sa.JSON(), nullable=True),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_charts_session_id', 'charts', ['session_id'])

    op.create_table(
        'approval_requests',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('session_id', sa.String(64), sa.ForeignKey('content_sessions.id'), nullable=False),
        sa.Column('kind', sa.String(64), nullable=False),
        sa.Column('payload', sa.JSON(), nullable=True),
        sa.Column('status', sa.String(16), nullable=False, server_default='pending'),
        sa.Column('response', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_approval_requests_session_id', 'approval_requests', ['session_id'])


def downgrade() -> None:
    op.drop_index('ix_approval_requests_session_id', table_name='approval_requests')
    op.drop_table('approval_requests')
    op.drop_index('ix_charts_session_id', table_name='charts')
    op.drop_table('charts')
    op.drop_table('content_sessions')
