"""Initial migration - create all tables

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('username', sa.String(30), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    # Create auth_sessions table
    op.create_table(
        'auth_sessions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('token_hash', sa.String(64), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('revoked', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_auth_sessions_user_id', 'auth_sessions', ['user_id'])
    op.create_index('ix_auth_sessions_token_hash', 'auth_sessions', ['token_hash'], unique=True)

    # Create races table
    op.create_table(
        'races',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('points', sa.JSON(), nullable=False),
        sa.Column('source', sa.String(20), nullable=False),
        sa.Column('filename', sa.String(255), nullable=True),
        sa.Column('file_size', sa.Integer(), nullable=True),
        sa.Column('source_job_id', sa.String(36), nullable=True),
        sa.Column('source_result_id', sa.String(36), nullable=True),
        sa.Column('distance_km', sa.Float(), nullable=False),
        sa.Column('elevation_gain_m', sa.Float(), nullable=False),
        sa.Column('elevation_loss_m', sa.Float(), nullable=False),
        sa.Column('itra_effort_distance', sa.Float(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_races_user_id', 'races', ['user_id'])
    op.create_index('ix_races_created_at', 'races', ['created_at'])

    # Create synthesis_jobs table
    op.create_table(
        'synthesis_jobs',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('reference_race_id', sa.String(36), nullable=False),
        sa.Column('bounding_box', sa.JSON(), nullable=False),
        sa.Column('rolling_window', sa.Integer(), nullable=False),
        sa.Column('max_results', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('candidates_considered', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('started_at', sa.DateTime(), nullable=True),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_synthesis_jobs_user_id', 'synthesis_jobs', ['user_id'])
    op.create_index('ix_synthesis_jobs_status', 'synthesis_jobs', ['status'])
    op.create_index('ix_synthesis_jobs_created_at', 'synthesis_jobs', ['created_at'])

    # Create synthesis_results table
    op.create_table(
        'synthesis_results',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('job_id', sa.String(36), sa.ForeignKey('synthesis_jobs.id', ondelete='CASCADE'), nullable=False),
        sa.Column('rank', sa.Integer(), nullable=False),
        sa.Column('distance_km', sa.Float(), nullable=False),
        sa.Column('elevation_gain_m', sa.Float(), nullable=False),
        sa.Column('elevation_loss_m', sa.Float(), nullable=False),
        sa.Column('itra_effort_distance', sa.Float(), nullable=False),
        sa.Column('similarity_score', sa.Float(), nullable=False),
        sa.Column('points', sa.JSON(), nullable=False),
    )
    op.create_index('ix_synthesis_results_job_id', 'synthesis_results', ['job_id'])


def downgrade() -> None:
    op.drop_table('synthesis_results')
    op.drop_table('synthesis_jobs')
    op.drop_table('races')
    op.drop_table('auth_sessions')
    op.drop_table('users')
