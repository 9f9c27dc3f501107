"""Redistribution module for weighted cross-wallet token balancing."""

from walletbalancer.redistribution.allocation import (
    AllocationResult,
    TokenAllocation,
    compute_redistribution_references,
)
from walletbalancer.redistribution.base import (
    ActionSink,
    DefaultActionSink,
    InvalidPortionSumError,
    MissingBalanceError,
    MissingPortionError,
    PoolInfoNotFoundError,
    RedistributionError,
    WalletNotFoundError,
)
from walletbalancer.redistribution.engine import (
    RedistributionEngine,
    RedistributionReport,
    redistribute_tokens_across_wallets,
)
from walletbalancer.redistribution.matcher import MatchResult, Transfer, TransferMatcher

__all__ = [
    "ActionSink",
    "AllocationResult",
    "DefaultActionSink",
    "InvalidPortionSumError",
    "MatchResult",
    "MissingBalanceError",
    "MissingPortionError",
    "PoolInfoNotFoundError",
    "RedistributionEngine",
    "RedistributionError",
    "RedistributionReport",
    "TokenAllocation",
    "Transfer",
    "TransferMatcher",
    "WalletNotFoundError",
    "compute_redistribution_references",
    "redistribute_tokens_across_wallets",
]
