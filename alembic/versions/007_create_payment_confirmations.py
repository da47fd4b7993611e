"""007: create payment_confirmations table

Revision ID: 007
Revises: 006
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE payment_confirmations (
            id              BIGSERIAL       PRIMARY KEY,
            offer_id        VARCHAR(64)     NOT NULL REFERENCES offers (id),
            taker_id        VARCHAR(64)     NOT NULL,
            amount          NUMERIC(20, 8)  NOT NULL,
            external_ref    VARCHAR(128),
            confirmed_at    TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            consumed_at     TIMESTAMPTZ,
            trade_id        VARCHAR(64),
            CONSTRAINT ck_payment_confirmations_amount_gt_0 CHECK (amount > 0),
            CONSTRAINT ck_payment_confirmations_consumed CHECK (
                (consumed_at IS NULL) = (trade_id IS NULL)
            )
        );
    """)
    op.execute("""
        CREATE INDEX idx_payment_confirmations_pending
        ON payment_confirmations (offer_id, taker_id, amount)
        WHERE consumed_at IS NULL;
    """)
    op.execute("COMMENT ON TABLE payment_confirmations IS 'Written by the settlement service; each row authorises one trade';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS payment_confirmations CASCADE;")
