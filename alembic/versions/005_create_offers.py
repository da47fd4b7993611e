"""005: create offers table

Revision ID: 005
Revises: 004
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE offers (
            id                  VARCHAR(64)     PRIMARY KEY,
            owner_id            VARCHAR(64)     NOT NULL,
            side                VARCHAR(4)      NOT NULL,
            total_amount        NUMERIC(20, 8)  NOT NULL,
            remaining_amount    NUMERIC(20, 8)  NOT NULL,
            unit_price          NUMERIC(20, 2)  NOT NULL,
            min_trade_amount    NUMERIC(20, 8)  NOT NULL,
            max_trade_amount    NUMERIC(20, 8)  NOT NULL,
            reference_price     NUMERIC(20, 2)  NOT NULL,
            status              VARCHAR(16)     NOT NULL DEFAULT 'open',
            payment_details     JSONB,
            terms               TEXT,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_offers_side   CHECK (side IN ('buy', 'sell')),
            CONSTRAINT ck_offers_status CHECK (status IN ('open', 'filled', 'cancelled')),
            CONSTRAINT ck_offers_remaining_range CHECK (
                remaining_amount >= 0 AND remaining_amount <= total_amount
            ),
            CONSTRAINT ck_offers_trade_bounds CHECK (
                min_trade_amount > 0 AND min_trade_amount <= max_trade_amount
                AND max_trade_amount <= total_amount
            ),
            CONSTRAINT ck_offers_filled_empty CHECK (
                status <> 'filled' OR remaining_amount = 0
            )
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_offers_updated_at
            BEFORE UPDATE ON offers
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("CREATE INDEX idx_offers_open ON offers (side, (CAST(id AS BIGINT)) DESC) WHERE status = 'open';")
    op.execute("CREATE INDEX idx_offers_owner ON offers (owner_id, (CAST(id AS BIGINT)) DESC);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS offers CASCADE;")
