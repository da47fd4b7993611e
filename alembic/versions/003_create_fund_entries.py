"""003: create fund_entries table

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE fund_entries (
            id              BIGSERIAL       PRIMARY KEY,
            owner_id        VARCHAR(64)     NOT NULL,
            amount          NUMERIC(20, 8)  NOT NULL,
            status          VARCHAR(16)     NOT NULL,
            origin          VARCHAR(32)     NOT NULL,
            escrow_ref      VARCHAR(64),
            parent_id       BIGINT          REFERENCES fund_entries (id),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_fund_entries_amount_gt_0 CHECK (amount > 0),
            CONSTRAINT ck_fund_entries_status CHECK (
                status IN ('available', 'locked', 'spent', 'split')
            ),
            CONSTRAINT ck_fund_entries_origin CHECK (
                origin IN ('mining', 'trade', 'referral_commission')
            )
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_fund_entries_updated_at
            BEFORE UPDATE ON fund_entries
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("""
        CREATE INDEX idx_fund_entries_owner_live
        ON fund_entries (owner_id, status, created_at)
        WHERE status IN ('available', 'locked');
    """)
    op.execute("""
        CREATE INDEX idx_fund_entries_escrow_ref
        ON fund_entries (escrow_ref)
        WHERE escrow_ref IS NOT NULL;
    """)
    op.execute("COMMENT ON TABLE fund_entries IS 'Coin holdings; amount never mutated, rows never deleted';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS fund_entries CASCADE;")
