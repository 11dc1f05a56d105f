"""SQLAlchemy ORM models for the marketplace projection tables.

Column reference for the raw text() SQL in persistence.py (checked by its unit tests).
Alembic migrations (alembic/versions/) are the authoritative DDL source.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import BigInteger, Boolean, SmallInteger, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class ListingORM(Base):
    __tablename__ = "listings"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    seller: Mapped[str] = mapped_column(Text, nullable=False)
    contract_id: Mapped[str] = mapped_column(Text, nullable=False)
    token_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    asset_kind: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    price: Mapped[int] = mapped_column(BigInteger, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False)
    closed_reason: Mapped[str | None] = mapped_column(Text)
    buyer: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(nullable=False)
    updated_at: Mapped[datetime] = mapped_column(nullable=False)


class MarketplaceConfigORM(Base):
    __tablename__ = "marketplace_config"

    address: Mapped[str] = mapped_column(Text, primary_key=True)
    owner: Mapped[str] = mapped_column(Text, nullable=False)
    fee_bps: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    fee_recipient: Mapped[str] = mapped_column(Text, nullable=False)
    next_listing_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(nullable=False)


class MarketplaceEventORM(Base):
    __tablename__ = "marketplace_events"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    event_type: Mapped[str] = mapped_column(Text, nullable=False)
    listing_id: Mapped[int | None] = mapped_column(BigInteger)
    payload: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False)
    created_at: Mapped[datetime] = mapped_column(nullable=False)
