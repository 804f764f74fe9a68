"""initial_sketch_party_schema

Revision ID: 3f2a9c71b0d4
Revises: 
Create Date: 2026-10-19 10:12:41.208113

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f2a9c71b0d4'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'gamesessions',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('code', sa.String(length=6), nullable=False),
        sa.Column('host_id', sa.String(), nullable=False),
        sa.Column('phase', sa.String(length=16), nullable=False),
        sa.Column('current_round_number', sa.Integer(), nullable=False),
        sa.Column('current_prompt', sa.Text(), nullable=False),
        sa.Column('rounds_completed', sa.Integer(), nullable=False),
        sa.Column('rounds_target', sa.Integer(), nullable=False),
        sa.Column('scored_round_numbers', sa.JSON(), nullable=False),
        sa.Column('players', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_gamesessions_id'), 'gamesessions', ['id'], unique=False)
    op.create_index(op.f('ix_gamesessions_code'), 'gamesessions', ['code'], unique=False)
    op.create_index(op.f('ix_gamesessions_phase'), 'gamesessions', ['phase'], unique=False)
    op.create_index(op.f('ix_gamesessions_expires_at'), 'gamesessions', ['expires_at'], unique=False)

    op.create_table(
        'gamesubmissions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.String(length=32), nullable=False),
        sa.Column('player_id', sa.String(), nullable=False),
        sa.Column('round_number', sa.Integer(), nullable=False),
        sa.Column('first_scene_image', sa.Text(), nullable=False),
        sa.Column('second_scene_image', sa.Text(), nullable=False),
        sa.Column('first_scene_analysis', sa.Text(), nullable=True),
        sa.Column('second_scene_analysis', sa.Text(), nullable=True),
        sa.Column('video_url', sa.String(), nullable=True),
        sa.Column('video_status', sa.String(length=16), nullable=False),
        sa.Column('submitted_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('is_complete', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['session_id'], ['gamesessions.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('session_id', 'player_id', 'round_number', name='_session_player_round_uc'),
    )
    op.create_index(op.f('ix_gamesubmissions_id'), 'gamesubmissions', ['id'], unique=False)
    op.create_index(op.f('ix_gamesubmissions_session_id'), 'gamesubmissions', ['session_id'], unique=False)

    op.create_table(
        'gamevotes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.String(length=32), nullable=False),
        sa.Column('voter_id', sa.String(), nullable=False),
        sa.Column('submission_id', sa.Integer(), nullable=False),
        sa.Column('round_number', sa.Integer(), nullable=False),
        sa.Column('voted_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['session_id'], ['gamesessions.id']),
        sa.ForeignKeyConstraint(['submission_id'], ['gamesubmissions.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('session_id', 'voter_id', 'round_number', name='_session_voter_round_uc'),
    )
    op.create_index(op.f('ix_gamevotes_id'), 'gamevotes', ['id'], unique=False)
    op.create_index('ix_gamevotes_session_round', 'gamevotes', ['session_id', 'round_number'], unique=False)

    op.create_table(
        'drawingprompts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('category', sa.String(), nullable=False),
        sa.Column('difficulty', sa.String(length=8), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('text'),
    )
    op.create_index(op.f('ix_drawingprompts_id'), 'drawingprompts', ['id'], unique=False)

    op.create_table(
        'systemalerts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('level', sa.String(), nullable=True),
        sa.Column('message', sa.String(), nullable=False),
        sa.Column('details', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_systemalerts_id'), 'systemalerts', ['id'], unique=False)
    op.create_index(op.f('ix_systemalerts_timestamp'), 'systemalerts', ['timestamp'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f('ix_systemalerts_timestamp'), table_name='systemalerts')
    op.drop_index(op.f('ix_systemalerts_id'), table_name='systemalerts')
    op.drop_table('systemalerts')
    op.drop_index(op.f('ix_drawingprompts_id'), table_name='drawingprompts')
    op.drop_table('drawingprompts')
    op.drop_index('ix_gamevotes_session_round', table_name='gamevotes')
    op.drop_index(op.f('ix_gamevotes_id'), table_name='gamevotes')
    op.drop_table('gamevotes')
    op.drop_index(op.f('ix_gamesubmissions_session_id'), table_name='gamesubmissions')
    op.drop_index(op.f('ix_gamesubmissions_id'), table_name='gamesubmissions')
    op.drop_table('gamesubmissions')
    op.drop_index(op.f('ix_gamesessions_expires_at'), table_name='gamesessions')
    op.drop_index(op.f('ix_gamesessions_phase'), table_name='gamesessions')
    op.drop_index(op.f('ix_gamesessions_code'), table_name='gamesessions')
    op.drop_index(op.f('ix_gamesessions_id'), table_name='gamesessions')
    op.drop_table('gamesessions')
