"""008: create reference_prices table

Revision ID: 008
Revises: 007
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "008"
down_revision: Union[str, None] = "007"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE reference_prices (
            id              BIGSERIAL       PRIMARY KEY,
            price           NUMERIC(20, 2)  NOT NULL,
            source          VARCHAR(64),
            recorded_at     TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_reference_prices_gt_0 CHECK (price > 0)
        );
    """)
    op.execute("CREATE INDEX idx_reference_prices_recent ON reference_prices (recorded_at DESC, id DESC);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS reference_prices CASCADE;")
