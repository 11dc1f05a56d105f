"""001: create listings table

Revision ID: 001
Revises:
Create Date: 2026-10-16
"""
from typing import Sequence, Union

from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE listings (
            id              BIGINT          PRIMARY KEY,
            seller          VARCHAR(128)    NOT NULL,
            contract_id     VARCHAR(128)    NOT NULL,
            token_id        BIGINT          NOT NULL,
            asset_kind      VARCHAR(16)     NOT NULL,
            amount          BIGINT          NOT NULL,
            price           BIGINT          NOT NULL,
            active          BOOLEAN         NOT NULL DEFAULT TRUE,
            closed_reason   VARCHAR(16),
            buyer           VARCHAR(128),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_listings_price_gt_0   CHECK (price > 0),
            CONSTRAINT ck_listings_amount_gt_0  CHECK (amount > 0),
            CONSTRAINT ck_listings_kind CHECK (asset_kind IN ('UNIQUE', 'FUNGIBLE')),
            CONSTRAINT ck_listings_unique_amount CHECK (asset_kind <> 'UNIQUE' OR amount = 1),
            CONSTRAINT ck_listings_closed CHECK (
                (active AND closed_reason IS NULL)
                OR (NOT active AND closed_reason IN ('SOLD', 'CANCELLED'))
            )
        );
    """)
    op.execute("CREATE INDEX idx_listings_active ON listings (active);")
    op.execute("CREATE INDEX idx_listings_seller ON listings (seller);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS listings CASCADE;")
