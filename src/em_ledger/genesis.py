"""Ledger seed document for local dev and tests.

Example:
    {
      "balances": {"buyer-1": 2000000},
      "contracts": [
        {
          "contract_id": "punks",
          "kind": "UNIQUE",
          "mints": [{"to": "seller-1", "token_id": 42}],
          "approvals": [{"owner": "seller-1", "operator": "escrow-marketplace"}]
        }
      ]
    }
"""

import json
import logging
from pathlib import Path

from pydantic import BaseModel, Field

from src.em_common.enums import AssetKind
from src.em_ledger.assets import FungibleAssetContract, UniqueAssetContract
from src.em_ledger.ledger import Ledger

logger = logging.getLogger(__name__)


class GenesisMint(BaseModel):
    to: str
    token_id: int = Field(ge=0)
    amount: int = Field(1, gt=0)


class GenesisApproval(BaseModel):
    owner: str
    operator: str


class GenesisContract(BaseModel):
    contract_id: str
    kind: AssetKind
    mints: list[GenesisMint] = []
    approvals: list[GenesisApproval] = []


class Genesis(BaseModel):
    balances: dict[str, int] = {}
    contracts: list[GenesisContract] = []


def apply_genesis(ledger: Ledger, genesis: Genesis) -> None:
    """Seed balances, contracts, mints and approvals outside any transaction."""
    for identity, amount in genesis.balances.items():
        ledger.deposit(identity, amount)

    for entry in genesis.contracts:
        contract: UniqueAssetContract | FungibleAssetContract
        if entry.kind is AssetKind.UNIQUE:
            contract = UniqueAssetContract(ledger, entry.contract_id)
            for mint in entry.mints:
                if mint.amount != 1:
                    raise ValueError(
                        f"{entry.contract_id}: UNIQUE mints carry amount 1, got {mint.amount}"
                    )
                contract.mint(mint.to, mint.token_id)
        else:
            contract = FungibleAssetContract(ledger, entry.contract_id)
            for mint in entry.mints:
                contract.mint(mint.to, mint.token_id, mint.amount)
        for approval in entry.approvals:
            contract.set_approval_for_all(approval.owner, approval.operator, True)
        ledger.register_contract(contract)

    logger.info(
        "Genesis applied: %d balances, %d contracts",
        len(genesis.balances),
        len(genesis.contracts),
    )


def load_genesis(path: str | Path) -> Genesis:
    return Genesis.model_validate(json.loads(Path(path).read_text(encoding="utf-8")))
