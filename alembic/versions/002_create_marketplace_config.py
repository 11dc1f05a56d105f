"""002: create marketplace_config table

Revision ID: 002
Revises: 001
Create Date: 2026-10-16
"""
from typing import Sequence, Union

from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE marketplace_config (
            address          VARCHAR(128)    PRIMARY KEY,
            owner            VARCHAR(128)    NOT NULL,
            fee_bps          SMALLINT        NOT NULL,
            fee_recipient    VARCHAR(128)    NOT NULL,
            next_listing_id  BIGINT          NOT NULL DEFAULT 1,
            updated_at       TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_marketplace_config_fee CHECK (fee_bps >= 0 AND fee_bps <= 1000),
            CONSTRAINT ck_marketplace_config_next_id CHECK (next_listing_id >= 1)
        );
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS marketplace_config CASCADE;")
