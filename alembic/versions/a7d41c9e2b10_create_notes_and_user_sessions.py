"""create notes and user_sessions tables

Revision ID: a7d41c9e2b10
Revises:
Create Date: 2025-12-02 10:00:00.000000

This migration creates the two tables of the notes companion:

1. notes: one row per note, owned by the Google subject id of its author
2. user_sessions: server-side record of issued session tokens, keyed by
   the token's jti (only used when SESSION_BACKEND=database)
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a7d41c9e2b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the notes and user_sessions tables."""
    op.create_table(
        'notes',
        sa.Column('id', sa.Uuid(), nullable=False),

        # Google subject id of the author
        sa.Column('owner', sa.String(length=255), nullable=False),

        sa.Column('title', sa.String(length=500), nullable=False, server_default=''),
        sa.Column('body', sa.Text(), nullable=False, server_default=''),

        # Timestamps
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),

        sa.PrimaryKeyConstraint('id'),
    )

    op.create_index(op.f('ix_notes_owner'), 'notes', ['owner'], unique=False)

    # Newest notes of one owner: listing and ask context
    op.create_index(
        'ix_notes_owner_created_at',
        'notes',
        ['owner', 'created_at'],
        unique=False
    )

    op.create_table(
        'user_sessions',
        # Equals the jti claim of the issued token
        sa.Column('id', sa.Uuid(), nullable=False),

        sa.Column('subject', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('display_name', sa.String(length=255), nullable=True),

        sa.Column('issued_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),

        # Logout flags the row instead of deleting it
        sa.Column('revoked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),

        sa.PrimaryKeyConstraint('id'),
    )

    op.create_index(op.f('ix_user_sessions_subject'), 'user_sessions', ['subject'], unique=False)


def downgrade() -> None:
    """Drop the notes and user_sessions tables."""
    op.drop_index(op.f('ix_user_sessions_subject'), table_name='user_sessions')
    op.drop_table('user_sessions')
    op.drop_index('ix_notes_owner_created_at', table_name='notes')
    op.drop_index(op.f('ix_notes_owner'), table_name='notes')
    op.drop_table('notes')
