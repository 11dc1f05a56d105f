"""Domain models for em_listing — pure dataclasses, no business logic."""

from dataclasses import dataclass

from src.em_common.enums import AssetKind
from src.em_vault.models import AssetRef


@dataclass(frozen=True)
class Listing:
    id: int
    seller: str
    asset: AssetRef
    kind: AssetKind
    amount: int    # always 1 for UNIQUE
    price: int     # native units, > 0
    active: bool = True
