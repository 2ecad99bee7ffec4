"""create events, tickets and matches tables

Revision ID: create_event_tables
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = 'create_event_tables'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """events / tickets / matches"""
    op.create_table(
        'events',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('organizer_id', sa.String(64), nullable=False, index=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('game', sa.String(100), nullable=False),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('bracket_type', sa.String(32), nullable=False, server_default='single_elimination'),
        sa.Column('organizer_checkout_url', sa.String(2048), nullable=True),
        sa.Column('max_teams', sa.Integer, nullable=True),
        sa.Column('current_teams', sa.Integer, nullable=False, server_default='0'),
        sa.Column('status', sa.String(20), nullable=False, server_default='published', index=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('max_teams IS NULL OR current_teams <= max_teams', name='ck_events_capacity'),
        sa.CheckConstraint('end_time > start_time', name='ck_events_time_window'),
    )

    op.create_table(
        'tickets',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('event_id', sa.String(36), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('participant_id', sa.String(64), nullable=False, index=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('external_payment_ref', sa.String(255), nullable=True, unique=True),
        sa.Column('amount', sa.Numeric(10, 2), nullable=True),
        sa.Column('purchased_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    # One live ticket per participant per event
    op.create_index(
        'uq_tickets_event_participant_active',
        'tickets',
        ['event_id', 'participant_id'],
        unique=True,
        postgresql_where=sa.text("status != 'cancelled'"),
        sqlite_where=sa.text("status != 'cancelled'"),
    )
    op.create_index('ix_tickets_event_status', 'tickets', ['event_id', 'status'])

    op.create_table(
        'matches',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('event_id', sa.String(36), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('round', sa.Integer, nullable=False),
        sa.Column('match_number', sa.Integer, nullable=False),
        sa.Column('bracket_position', sa.Integer, nullable=False),
        sa.Column('player1_id', sa.String(64), nullable=True),
        sa.Column('player2_id', sa.String(64), nullable=True),
        sa.Column('player1_score', sa.Integer, nullable=True),
        sa.Column('player2_score', sa.Integer, nullable=True),
        sa.Column('winner_id', sa.String(64), nullable=True),
        sa.Column('is_bye', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('scheduled_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_matches_event_round', 'matches', ['event_id', 'round', 'bracket_position'])


def downgrade() -> None:
    op.drop_index('ix_matches_event_round', table_name='matches')
    op.drop_table('matches')
    op.drop_index('ix_tickets_event_status', table_name='tickets')
    op.drop_index('uq_tickets_event_participant_active', table_name='tickets')
    op.drop_table('tickets')
    op.drop_table('events')
