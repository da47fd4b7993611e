"""006: create referral_edges table

Revision ID: 006
Revises: 005
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE referral_edges (
            referrer_id                 VARCHAR(64)     NOT NULL,
            referred_id                 VARCHAR(64)     NOT NULL,
            referral_code               VARCHAR(32)     NOT NULL,
            accrued_trade_commission    NUMERIC(20, 8)  NOT NULL DEFAULT 0,
            accrued_claim_commission    NUMERIC(20, 8)  NOT NULL DEFAULT 0,
            created_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at                  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT pk_referral_edges PRIMARY KEY (referrer_id, referred_id),
            CONSTRAINT uq_referral_edges_referred UNIQUE (referred_id),
            CONSTRAINT ck_referral_edges_no_self CHECK (referrer_id <> referred_id),
            CONSTRAINT ck_referral_edges_trade_gte_0 CHECK (accrued_trade_commission >= 0),
            CONSTRAINT ck_referral_edges_claim_gte_0 CHECK (accrued_claim_commission >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_referral_edges_updated_at
            BEFORE UPDATE ON referral_edges
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("CREATE INDEX idx_referral_edges_referrer ON referral_edges (referrer_id, created_at DESC);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS referral_edges CASCADE;")
