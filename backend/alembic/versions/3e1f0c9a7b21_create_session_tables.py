"""create users, running_sessions and session child tables

Mirrors the hosted schema for local development databases.

Revision ID: 3e1f0c9a7b21
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3e1f0c9a7b21'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    # Skip when pointed at a database that already has the hosted schema
    if 'running_sessions' in inspector.get_table_names():
        return

    op.create_table(
        'users',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('username', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('height_cm', sa.Numeric(5, 1), nullable=True),
        sa.Column('weight_kg', sa.Numeric(5, 1), nullable=True),
        sa.Column('gender', sa.String(), nullable=True),
        sa.Column('pace_band', sa.String(), nullable=True),
        sa.Column('preferred_genres', postgresql.ARRAY(sa.String()), nullable=True),
        sa.Column('survey_completed', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('spotify_user_id', sa.String(), nullable=True),
        sa.Column('spotify_access_token', sa.String(), nullable=True),
        sa.Column('spotify_refresh_token', sa.String(), nullable=True),
        sa.Column('spotify_connected_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('spotify_token_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_email', 'users', ['email'])

    op.create_table(
        'running_sessions',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('session_start_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('session_end_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('session_duration_seconds', sa.Integer(), nullable=True),
        sa.Column('run_type', sa.String(20), nullable=True),
        sa.Column('status', sa.String(20), server_default='active', nullable=False),
        sa.Column('total_distance_km', sa.Float(), nullable=True),
        sa.Column('total_steps', sa.Integer(), nullable=True),
        sa.Column('avg_pace_min_per_km', sa.Float(), nullable=True),
        sa.Column('avg_cadence_spm', sa.Float(), nullable=True),
        sa.Column('avg_heart_rate_bpm', sa.Integer(), nullable=True),
        sa.Column('max_heart_rate_bpm', sa.Integer(), nullable=True),
        sa.Column('min_heart_rate_bpm', sa.Integer(), nullable=True),
        sa.Column('avg_speed_kmh', sa.Float(), nullable=True),
        sa.Column('calories_burned', sa.Integer(), nullable=True),
        sa.Column('current_distance_km', sa.Float(), nullable=True),
        sa.Column('current_pace_min_per_km', sa.Float(), nullable=True),
        sa.Column('elapsed_time_seconds', sa.Integer(), nullable=True),
        sa.Column('last_heartbeat_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('selected_emotion', sa.String(), nullable=True),
        sa.Column('selected_playlist', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_running_sessions_user_id', 'running_sessions', ['user_id'])
    op.create_index('ix_running_sessions_status', 'running_sessions', ['status'])
    op.create_index('ix_running_sessions_last_heartbeat_at', 'running_sessions', ['last_heartbeat_at'])

    op.create_table(
        'session_heart_rate_data',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.String(36), nullable=False),
        sa.Column('timestamp_offset_seconds', sa.Integer(), nullable=False),
        sa.Column('heart_rate_bpm', sa.Integer(), nullable=False),
        sa.Column('is_connected', sa.Boolean(), nullable=True),
        sa.Column('recorded_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['session_id'], ['running_sessions.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_session_heart_rate_data_session_id', 'session_heart_rate_data', ['session_id'])

    op.create_table(
        'session_alerts',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('session_id', sa.String(36), nullable=False),
        sa.Column('alert_type', sa.String(), nullable=False),
        sa.Column('alert_message', sa.String(), nullable=True),
        sa.Column('severity', sa.String(20), nullable=False),
        sa.Column('heart_rate', sa.Integer(), nullable=True),
        sa.Column('triggered_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('resolved', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['session_id'], ['running_sessions.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_session_alerts_session_id', 'session_alerts', ['session_id'])

    op.create_table(
        'session_music_history',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.String(36), nullable=False),
        sa.Column('track_title', sa.String(), nullable=False),
        sa.Column('track_artist', sa.String(), nullable=True),
        sa.Column('track_duration_seconds', sa.Integer(), nullable=True),
        sa.Column('track_bpm', sa.Float(), nullable=True),
        sa.Column('spotify_track_id', sa.String(), nullable=True),
        sa.Column('play_order', sa.Integer(), nullable=False),
        sa.Column('played_at_offset_seconds', sa.Integer(), nullable=False),
        sa.Column('played_duration_seconds', sa.Integer(), nullable=False),
        sa.Column('was_skipped', sa.Boolean(), nullable=False),
        sa.Column('was_liked', sa.Boolean(), nullable=False),
        sa.Column('recommended_by', sa.String(), nullable=True),
        sa.Column('recommendation_trigger', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.ForeignKeyConstraint(['session_id'], ['running_sessions.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_session_music_history_session_id', 'session_music_history', ['session_id'])

    op.create_table(
        'session_gps_points',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.String(36), nullable=False),
        sa.Column('timestamp_offset_seconds', sa.Integer(), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('altitude_m', sa.Float(), nullable=True),
        sa.Column('accuracy_m', sa.Float(), nullable=True),
        sa.Column('speed_mps', sa.Float(), nullable=True),
        sa.Column('distance_from_prev_m', sa.Float(), nullable=True),
        sa.Column('recorded_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['session_id'], ['running_sessions.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_session_gps_points_session_id', 'session_gps_points', ['session_id'])

    op.create_table(
        'session_pace_intervals',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.String(36), nullable=False),
        sa.Column('interval_number', sa.Integer(), nullable=False),
        sa.Column('start_offset_seconds', sa.Integer(), nullable=False),
        sa.Column('end_offset_seconds', sa.Integer(), nullable=False),
        sa.Column('steps', sa.Integer(), nullable=False),
        sa.Column('distance_km', sa.Float(), nullable=True),
        sa.Column('pace_min_per_km', sa.Float(), nullable=True),
        sa.Column('cadence_spm', sa.Float(), nullable=True),
        sa.Column('avg_heart_rate_bpm', sa.Integer(), nullable=True),
        sa.Column('pace_source', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.ForeignKeyConstraint(['session_id'], ['running_sessions.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_session_pace_intervals_session_id', 'session_pace_intervals', ['session_id'])


def downgrade() -> None:
    # Children first; nothing cascades
    for table in (
        'session_pace_intervals',
        'session_gps_points',
        'session_music_history',
        'session_alerts',
        'session_heart_rate_data',
        'running_sessions',
        'users',
    ):
        op.execute(f'DROP TABLE IF EXISTS {table}')
