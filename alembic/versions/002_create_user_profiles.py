"""002: create user_profiles table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE user_profiles (
            user_id         VARCHAR(64)     PRIMARY KEY,
            last_claim_at   TIMESTAMPTZ,
            next_claim_at   TIMESTAMPTZ,
            rating          NUMERIC(3, 2)   NOT NULL DEFAULT 0,
            total_trades    INTEGER         NOT NULL DEFAULT 0,
            referral_code   VARCHAR(32)     NOT NULL,
            referred_by     VARCHAR(64),
            version         BIGINT          NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_user_profiles_referral_code UNIQUE (referral_code),
            CONSTRAINT ck_user_profiles_trades_gte_0  CHECK (total_trades >= 0),
            CONSTRAINT ck_user_profiles_no_self_ref   CHECK (referred_by IS NULL OR referred_by <> user_id)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_user_profiles_updated_at
            BEFORE UPDATE ON user_profiles
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("CREATE INDEX idx_user_profiles_referred_by ON user_profiles (referred_by) WHERE referred_by IS NOT NULL;")
    op.execute("COMMENT ON COLUMN user_profiles.next_claim_at IS 'Sole mining claim gate; never moves backwards';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS user_profiles CASCADE;")
