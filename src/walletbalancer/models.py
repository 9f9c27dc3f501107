"""Domain models for the wallet balancer."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ActionType(str, Enum):
    TRANSFER = "Transfer"
    SWAP = "Swap"
    ADD_LIQUIDITY = "AddLiquidity"
    REMOVE_LIQUIDITY = "RemoveLiquidity"


class ActionStatus(str, Enum):
    NOT_STARTED = "NotStarted"
    PENDING = "Pending"
    COMPLETED = "Completed"
    FAILED = "Failed"


class TokenBalance(BaseModel):
    """Settled balance of one token, in its smallest denomination."""

    symbol: str
    balance: int


class WalletStatus(BaseModel):
    """Last known settled balances of a wallet."""

    address: str
    token_balances: list[TokenBalance] = Field(default_factory=list)

    def find_balance(self, symbol: str) -> Optional[TokenBalance]:
        return next((b for b in self.token_balances if b.symbol == symbol), None)


class PendingBalanceChange(BaseModel):
    """A queued but not yet settled balance adjustment."""

    address: str
    symbol: str
    balance_change: int


class AssetInfo(BaseModel):
    symbol: str
    decimals: int = Field(ge=0)


class PoolInfo(BaseModel):
    """Liquidity pool descriptor naming its two assets."""

    asset_x: AssetInfo
    asset_y: AssetInfo


class ActionTarget(BaseModel):
    target_address: str
    amount: int = Field(ge=0)
    original_asset_symbol: str
    original_asset_token_decimals: int
    target_asset_symbol: str
    target_asset_token_decimals: int


class Action(BaseModel):
    """A queued instruction issued by one actor wallet."""

    action_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    actor_address: str
    targets: list[ActionTarget] = Field(default_factory=list)
    action_type: ActionType
    action_status: ActionStatus = ActionStatus.NOT_STARTED
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def add_target(self, target: ActionTarget) -> None:
        self.targets.append(target)
        self.updated_at = datetime.now(timezone.utc)


class ScenarioSnapshot(BaseModel):
    """Mutable state for one evaluation cycle.

    Owned by the caller for the duration of a redistribution pass. Nothing
    in here is safe for concurrent mutation.
    """

    wallet_statuses: list[WalletStatus] = Field(default_factory=list)
    pending_balance_changes: list[PendingBalanceChange] = Field(default_factory=list)
    pool_infos: list[PoolInfo] = Field(default_factory=list)
    actions: list[Action] = Field(default_factory=list)

    def find_wallet_status(self, address: str) -> Optional[WalletStatus]:
        return next((w for w in self.wallet_statuses if w.address == address), None)

    def pending_change_total(self, address: str, symbol: str) -> int:
        return sum(
            change.balance_change
            for change in self.pending_balance_changes
            if change.address == address and change.symbol == symbol
        )

    def effective_balance(self, address: str, symbol: str) -> Optional[int]:
        """Settled balance plus all pending changes for (address, symbol).

        Returns None when the wallet has no settled balance entry for the
        symbol, since there is no baseline to adjust.
        """
        wallet_status = self.find_wallet_status(address)
        if wallet_status is None:
            return None
        balance = wallet_status.find_balance(symbol)
        if balance is None:
            return None
        return balance.balance + self.pending_change_total(address, symbol)

    def find_transfer_action(self, actor_address: str) -> Optional[Action]:
        return next(
            (
                action
                for action in self.actions
                if action.actor_address == actor_address
                and action.action_type == ActionType.TRANSFER
            ),
            None,
        )


@dataclass
class RedistributionReference:
    """Signed distance of one wallet from its target for one token.

    Positive means the wallet should receive, negative means it should give.
    """

    address: str
    token_symbol: str
    difference: float
