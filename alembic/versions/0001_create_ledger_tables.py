"""create_ledger_tables

Revision ID: 0001_create_ledger_tables
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_create_ledger_tables"
down_revision = None
branch_labels = None
depends_on = None


REFERRAL_STATUS = ("pending", "active", "rewarded")
TRANSACTION_TYPE = ("referral_reward", "withdrawal", "challenge_purchase", "refund")
TRANSACTION_STATUS = ("pending", "completed", "failed", "cancelled")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("username", sa.String(length=30), nullable=False),
        sa.Column("email", sa.String(length=254), nullable=True),
        sa.Column("wallet_address", sa.String(length=64), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=True),
        sa.Column("referral_code", sa.String(length=8), nullable=True),
        sa.Column(
            "wallet_balance",
            sa.Numeric(12, 2),
            server_default=sa.text("0"),
            nullable=False,
        ),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("is_admin", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "wallet_balance >= 0", name="ck_user_wallet_balance_non_negative"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_wallet_address", "users", ["wallet_address"], unique=True)
    op.create_index("ix_users_referral_code", "users", ["referral_code"], unique=True)

    op.create_table(
        "referrals",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("referrer_user_id", sa.Uuid(), nullable=False),
        sa.Column("referred_user_id", sa.Uuid(), nullable=False),
        sa.Column(
            "status",
            sa.Enum(*REFERRAL_STATUS, name="referral_status_enum"),
            nullable=False,
        ),
        sa.Column("referral_code", sa.String(length=8), nullable=False),
        sa.Column("reward_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("challenge_purchased", sa.Boolean(), nullable=False),
        sa.Column("challenge_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "referrer_user_id <> referred_user_id", name="ck_referral_not_self"
        ),
        sa.ForeignKeyConstraint(["referrer_user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["referred_user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("referred_user_id"),
    )
    op.create_index(
        "ix_referrals_referrer_status", "referrals", ["referrer_user_id", "status"]
    )
    op.create_index("ix_referrals_referral_code", "referrals", ["referral_code"])

    op.create_table(
        "transactions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column(
            "transaction_type",
            sa.Enum(*TRANSACTION_TYPE, name="transaction_type_enum"),
            nullable=False,
        ),
        sa.Column(
            "status",
            sa.Enum(*TRANSACTION_STATUS, name="transaction_status_enum"),
            nullable=False,
        ),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("reference_id", sa.Uuid(), nullable=True),
        sa.Column("reference_type", sa.String(length=20), nullable=True),
        sa.Column(
            "txn_metadata",
            sa.JSON().with_variant(postgresql.JSONB(), "postgresql"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("amount <> 0", name="ck_transaction_amount_nonzero"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_transactions_user_type", "transactions", ["user_id", "transaction_type"]
    )
    op.create_index(
        "ix_transactions_user_created", "transactions", ["user_id", "created_at"]
    )
    op.create_index(
        "ix_transactions_type_status", "transactions", ["transaction_type", "status"]
    )


def downgrade() -> None:
    op.drop_index("ix_transactions_type_status", table_name="transactions")
    op.drop_index("ix_transactions_user_created", table_name="transactions")
    op.drop_index("ix_transactions_user_type", table_name="transactions")
    op.drop_table("transactions")

    op.drop_index("ix_referrals_referral_code", table_name="referrals")
    op.drop_index("ix_referrals_referrer_status", table_name="referrals")
    op.drop_table("referrals")

    op.drop_index("ix_users_referral_code", table_name="users")
    op.drop_index("ix_users_wallet_address", table_name="users")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")

    for enum_name in (
        "transaction_status_enum",
        "transaction_type_enum",
        "referral_status_enum",
    ):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
