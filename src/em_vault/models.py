"""Asset reference — which item of which contract."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AssetRef:
    contract_id: str
    token_id: int
