"""Initial schema - all CupManager tables

Revision ID: 001
Revises:
Create Date: 2026-10-18

Creates all tables for the tournament engine:
- teams: Registered teams
- players: Roster entries with cumulative counters
- team_stats: One standings row per team
- matches: Group and knockout fixtures and results
- match_player_stats: Per-player, per-match audit rows
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
    # ### Teams table ###
    op.create_table(
        'teams',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(200), nullable=False, unique=True),
        sa.Column('coach', sa.String(200), nullable=False, server_default=''),
        sa.Column('phone', sa.String(50), nullable=False, server_default=''),
        sa.Column('email', sa.String(200), nullable=True),
        sa.Column('category', sa.String(50), nullable=False, server_default='Unica'),
    )

    # ### Players table ###
    op.create_table(
        'players',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('number', sa.Integer(), nullable=False),
        sa.Column('team_id', sa.Integer(), sa.ForeignKey('teams.id'), nullable=False),
        sa.Column('goals', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('fouls', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('yellow_cards', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('red_cards', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('blue_cards', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.UniqueConstraint('team_id', 'number', name='uq_players_team_number'),
        sa.CheckConstraint('number >= 0', name='ck_players_number'),
    )

    # ### Team statistics table ###
    op.create_table(
        'team_stats',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('team_id', sa.Integer(), sa.ForeignKey('teams.id'), nullable=False, unique=True),
        sa.Column('played', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('won', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('drawn', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('lost', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('goals_for', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('goals_against', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('goal_difference', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('points', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
    )

    # ### Matches table ###
    op.create_table(
        'matches',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('home_team_id', sa.Integer(), sa.ForeignKey('teams.id'), nullable=False),
        sa.Column('away_team_id', sa.Integer(), sa.ForeignKey('teams.id'), nullable=False),
        sa.Column('phase', sa.Enum(
            'GROUP', 'QUARTER_FINAL', 'SEMI_FINAL', 'FINAL',
            name='phase'
        ), nullable=False, server_default='GROUP'),
        sa.Column('status', sa.Enum(
            'SCHEDULED', 'PLAYED',
            name='matchstatus'
        ), nullable=False, server_default='SCHEDULED'),
        sa.Column('round_number', sa.Integer(), nullable=True),
        sa.Column('bracket_position', sa.Integer(), nullable=True),
        sa.Column('leg', sa.Integer(), nullable=True),
        sa.Column('date', sa.DateTime(), nullable=True),
        sa.Column('home_score', sa.Integer(), nullable=True),
        sa.Column('away_score', sa.Integer(), nullable=True),
        sa.CheckConstraint('home_team_id <> away_team_id', name='ck_matches_distinct_teams'),
        sa.CheckConstraint(
            "(status = 'SCHEDULED' AND home_score IS NULL AND away_score IS NULL)"
            " OR (status = 'PLAYED' AND home_score >= 0 AND away_score >= 0)",
            name='ck_matches_scores_match_status',
        ),
        sa.CheckConstraint('leg IS NULL OR leg IN (1, 2)', name='ck_matches_leg'),
    )

    # ### Per-match player statistics table ###
    op.create_table(
        'match_player_stats',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('match_id', sa.Integer(), sa.ForeignKey('matches.id'), nullable=False),
        sa.Column('player_id', sa.Integer(), sa.ForeignKey('players.id'), nullable=False),
        sa.Column('goals', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('fouls', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('yellow_cards', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('red_cards', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('blue_cards', sa.Integer(), nullable=False, server_default='0'),
        sa.UniqueConstraint('match_id', 'player_id', name='uq_match_player_stats'),
        sa.CheckConstraint(
            'goals >= 0 AND fouls >= 0 AND yellow_cards >= 0'
            ' AND red_cards >= 0 AND blue_cards >= 0',
            name='ck_match_player_stats_non_negative',
        ),
    )

    # ### Indexes ###
    op.create_index('ix_players_team_id', 'players', ['team_id'])
    op.create_index('ix_matches_phase', 'matches', ['phase'])
    op.create_index('ix_matches_status', 'matches', ['status'])
    op.create_index('ix_match_player_stats_player_id', 'match_player_stats', ['player_id'])


def downgrade() -> None:
    # Drop indexes
    op.drop_index('ix_match_player_stats_player_id', 'match_player_stats')
    op.drop_index('ix_matches_status', 'matches')
    op.drop_index('ix_matches_phase', 'matches')
    op.drop_index('ix_players_team_id', 'players')

    # Drop tables in reverse order of creation
    op.drop_table('match_player_stats')
    op.drop_table('matches')
    op.drop_table('team_stats')
    op.drop_table('players')
    op.drop_table('teams')

    # Drop enums (PostgreSQL only, no-op on SQLite)
    sa.Enum(name='matchstatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='phase').drop(op.get_bind(), checkfirst=True)
