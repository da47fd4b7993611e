"""004: create transactions table

Revision ID: 004
Revises: 003
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE transactions (
            id                      BIGSERIAL       PRIMARY KEY,
            actor_id                VARCHAR(64)     NOT NULL,
            kind                    VARCHAR(32)     NOT NULL,
            amount                  NUMERIC(20, 8)  NOT NULL,
            counterparty_offer_id   VARCHAR(64),
            reference_id            VARCHAR(64),
            description             VARCHAR(500),
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_transactions_kind CHECK (
                kind IN (
                    'mining', 'escrow_lock', 'escrow_release',
                    'trade_buy', 'trade_sell', 'referral_commission'
                )
            ),
            CONSTRAINT ck_transactions_amount_gt_0 CHECK (amount > 0)
        );
    """)
    op.execute("CREATE INDEX idx_transactions_actor ON transactions (actor_id, id DESC);")
    op.execute("""
        CREATE INDEX idx_transactions_reference
        ON transactions (reference_id)
        WHERE reference_id IS NOT NULL;
    """)
    op.execute("COMMENT ON TABLE transactions IS 'User-visible history; append-only';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS transactions CASCADE;")
