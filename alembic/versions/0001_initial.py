"""initial

Revision ID: 0001_initial
Revises: 
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("wallet_address", sa.String(42), nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_active", "users", ["is_active"], unique=False)

    op.create_table(
        "balances",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        # Decimal amounts are stored as base-10 strings.
        sa.Column("amount", sa.String(40), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(16), nullable=False, server_default="USDT"),
        *_timestamps(),
    )
    op.create_index("ix_balances_user_id", "balances", ["user_id"], unique=True)

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("type", sa.Enum("deposit", "bet", "win", name="transactiontype"), nullable=False),
        sa.Column("amount", sa.String(40), nullable=False),
        sa.Column("description", sa.String(255), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_transactions_user_type", "transactions", ["user_id", "type"], unique=False)

    op.create_table(
        "bets",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "game_type",
            sa.Enum("coinflip", "roulette", "dice", "tower", "crash", "mines", name="gametype"),
            nullable=False,
        ),
        sa.Column("bet_amount", sa.String(40), nullable=False),
        sa.Column("bet_choice", sa.String(255), nullable=False),
        sa.Column("result", sa.String(255), nullable=False),
        sa.Column("outcome", sa.Enum("win", "loss", name="betoutcome"), nullable=False),
        sa.Column("payout", sa.String(40), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_bets_user_game", "bets", ["user_id", "game_type"], unique=False)

    op.create_table(
        "deposits",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("amount", sa.String(40), nullable=False),
        sa.Column("currency", sa.String(16), nullable=False, server_default="USDT"),
        sa.Column("wallet_address", sa.String(42), nullable=False),
        sa.Column("transaction_hash", sa.String(66), nullable=True),
        sa.Column(
            "status",
            sa.Enum("pending", "confirmed", "failed", name="depositstatus"),
            nullable=False,
            server_default="pending",
        ),
        *_timestamps(),
    )
    op.create_index("ix_deposits_user_status", "deposits", ["user_id", "status"], unique=False)


def downgrade():
    op.drop_table("deposits")
    op.drop_table("bets")
    op.drop_table("transactions")
    op.drop_table("balances")
    op.drop_table("users")
    op.execute("DROP TYPE IF EXISTS depositstatus")
    op.execute("DROP TYPE IF EXISTS betoutcome")
    op.execute("DROP TYPE IF EXISTS gametype")
    op.execute("DROP TYPE IF EXISTS transactiontype")
