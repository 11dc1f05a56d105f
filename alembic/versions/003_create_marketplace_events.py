"""003: create marketplace_events journal

Revision ID: 003
Revises: 002
Create Date: 2026-10-16
"""
from typing import Sequence, Union

from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE marketplace_events (
            id           BIGSERIAL       PRIMARY KEY,
            address      VARCHAR(128)    NOT NULL,
            event_type   VARCHAR(32)     NOT NULL,
            listing_id   BIGINT,
            payload      JSONB           NOT NULL,
            created_at   TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_marketplace_events_type CHECK (
                event_type IN ('LISTED', 'CANCELLED', 'BOUGHT', 'BATCH_BOUGHT',
                               'FEE_UPDATED', 'FEE_RECIPIENT_UPDATED')
            )
        );
    """)
    op.execute("CREATE INDEX idx_marketplace_events_listing ON marketplace_events (listing_id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS marketplace_events CASCADE;")
