"""create league, match and scoring tables

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "team",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("captain", sa.String(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_table(
        "player",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("team_id", sa.String(), sa.ForeignKey("team.id"), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="active"),
        sa.Column("rating", sa.Integer(), nullable=False, server_default=sa.text("500")),
        sa.Column(
            "previous_rating", sa.Integer(), nullable=False, server_default=sa.text("500")
        ),
        sa.Column(
            "created_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "player_stat",
        sa.Column("player_id", sa.String(), sa.ForeignKey("player.id"), nullable=False),
        sa.Column("discipline", sa.String(), nullable=False),
        sa.Column("matches_played", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("wins", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.PrimaryKeyConstraint("player_id", "discipline"),
        sa.CheckConstraint("wins <= matches_played", name="ck_player_stat_wins"),
    )
    op.create_table(
        "team_stat",
        sa.Column("team_id", sa.String(), sa.ForeignKey("team.id"), nullable=False),
        sa.Column("discipline", sa.String(), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("matches_played", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("wins", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.PrimaryKeyConstraint("team_id", "discipline"),
        sa.CheckConstraint("wins <= matches_played", name="ck_team_stat_wins"),
    )
    op.create_table(
        "match",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("discipline", sa.String(), nullable=False),
        sa.Column("player_a_id", sa.String(), sa.ForeignKey("player.id"), nullable=False),
        sa.Column("player_b_id", sa.String(), sa.ForeignKey("player.id"), nullable=False),
        sa.Column("team_a_id", sa.String(), sa.ForeignKey("team.id"), nullable=True),
        sa.Column("team_b_id", sa.String(), sa.ForeignKey("team.id"), nullable=True),
        sa.Column("target_a", sa.Integer(), nullable=False),
        sa.Column("target_b", sa.Integer(), nullable=False),
        sa.Column("score_a", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("score_b", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("status", sa.String(), nullable=False, server_default="in_progress"),
        sa.Column("winner_id", sa.String(), sa.ForeignKey("player.id"), nullable=True),
        sa.Column("final_score", sa.String(), nullable=True),
        sa.Column("tournament", sa.String(), nullable=True),
        sa.Column("table_name", sa.String(), nullable=True),
        sa.Column("details", sa.JSON(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column("completed_at", sa.DateTime(), nullable=True),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_match_status", "match", ["status"])
    op.create_table(
        "game_log",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("match_id", sa.String(), sa.ForeignKey("match.id"), nullable=False),
        sa.Column("game_number", sa.Integer(), nullable=False),
        sa.Column("winner_id", sa.String(), sa.ForeignKey("player.id"), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "match_id", "game_number", name="uq_game_log_match_id_game_number"
        ),
    )
    op.create_table(
        "score_event",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("match_id", sa.String(), sa.ForeignKey("match.id"), nullable=False),
        sa.Column("seq", sa.Integer(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("match_id", "seq", name="uq_score_event_match_id_seq"),
    )


def downgrade() -> None:
    op.drop_table("score_event")
    op.drop_table("game_log")
    op.drop_index("ix_match_status", table_name="match")
    op.drop_table("match")
    op.drop_table("team_stat")
    op.drop_table("player_stat")
    op.drop_table("player")
    op.drop_table("team")
