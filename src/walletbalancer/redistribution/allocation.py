"""Allocation - derive each wallet's weighted target and its distance from it."""

from dataclasses import dataclass, field

import structlog

from walletbalancer.config import WalletConfig
from walletbalancer.models import RedistributionReference, ScenarioSnapshot
from walletbalancer.redistribution.base import (
    InvalidPortionSumError,
    MissingBalanceError,
    MissingPortionError,
    RedistributionError,
    WalletNotFoundError,
)
from walletbalancer.registry import WalletRegistry

logger = structlog.get_logger(__name__)


@dataclass
class TokenAllocation:
    """Weighted targets computed for one token."""

    symbol: str
    sum_of_tokens: int
    sum_of_portions: float
    target_balances: dict[str, float]  # address -> target balance
    effective_balances: dict[str, int]  # address -> balance incl. pending changes


@dataclass
class AllocationResult:
    references: list[RedistributionReference] = field(default_factory=list)
    allocations: dict[str, TokenAllocation] = field(default_factory=dict)
    errors: list[RedistributionError] = field(default_factory=list)


def _load_wallet_configs(
    snapshot: ScenarioSnapshot,
    registry: WalletRegistry,
    errors: list[RedistributionError],
) -> list[tuple[str, WalletConfig]]:
    """Pair every snapshot wallet with its registered configuration."""
    active: list[tuple[str, WalletConfig]] = []
    for wallet_status in snapshot.wallet_statuses:
        wallet_config = registry.find_config(wallet_status.address)
        if wallet_config is None:
            logger.error("allocation.wallet_not_registered", address=wallet_status.address)
            errors.append(WalletNotFoundError(wallet_status.address))
            continue
        # Not every wallet takes part in cross-wallet allocation
        if wallet_config.balance_config is None:
            continue
        active.append((wallet_status.address, wallet_config))
    return active


def allocate_token(
    symbol: str,
    wallet_configs: list[tuple[str, WalletConfig]],
    snapshot: ScenarioSnapshot,
    errors: list[RedistributionError],
) -> TokenAllocation | None:
    """Compute weighted target balances for a single token.

    A wallet without a portion or without a settled balance for the token
    is reported and left out of the token's allocation. Returns None when
    nothing can be allocated.
    """
    portions: dict[str, float] = {}
    effective_balances: dict[str, int] = {}

    for address, wallet_config in wallet_configs:
        balance_config = wallet_config.find_balance_config(symbol)
        if balance_config is None:
            continue
        if balance_config.portion_in_strategy is None:
            logger.error("allocation.missing_portion", address=address, symbol=symbol)
            errors.append(MissingPortionError(address, symbol))
            continue
        effective_balance = snapshot.effective_balance(address, symbol)
        if effective_balance is None:
            logger.error("allocation.missing_balance", address=address, symbol=symbol)
            errors.append(MissingBalanceError(address, symbol))
            continue
        portions[address] = balance_config.portion_in_strategy
        effective_balances[address] = effective_balance

    if not portions:
        logger.debug("allocation.no_participants", symbol=symbol)
        return None

    sum_of_tokens = sum(effective_balances.values())
    sum_of_portions = sum(portions.values())

    if sum_of_portions <= 0:
        logger.error("allocation.zero_portion_sum", symbol=symbol, wallets=len(portions))
        errors.append(InvalidPortionSumError(symbol))
        return None

    target_balances = {
        address: sum_of_tokens * portion / sum_of_portions
        for address, portion in portions.items()
    }

    logger.debug(
        "allocation.token_allocated",
        symbol=symbol,
        sum_of_tokens=sum_of_tokens,
        sum_of_portions=sum_of_portions,
        wallets=len(portions),
    )

    return TokenAllocation(
        symbol=symbol,
        sum_of_tokens=sum_of_tokens,
        sum_of_portions=sum_of_portions,
        target_balances=target_balances,
        effective_balances=effective_balances,
    )


def compute_redistribution_references(
    token_symbols: list[str],
    snapshot: ScenarioSnapshot,
    registry: WalletRegistry,
) -> AllocationResult:
    """Compute every wallet's signed distance from its weighted target.

    Args:
        token_symbols: Tokens to allocate, processed in order; repeats are ignored
        snapshot: Current scenario state (read only here)
        registry: Wallet configurations keyed by address

    Returns:
        AllocationResult with one reference per (wallet, token) pair whose
        difference is not exactly zero. Positive differences receive,
        negative differences give.
    """
    result = AllocationResult()
    wallet_configs = _load_wallet_configs(snapshot, registry, result.errors)

    # each symbol once, in first-seen order
    for symbol in dict.fromkeys(token_symbols):
        allocation = allocate_token(symbol, wallet_configs, snapshot, result.errors)
        if allocation is None:
            continue
        result.allocations[symbol] = allocation

        for address, target_balance in allocation.target_balances.items():
            difference = target_balance - allocation.effective_balances[address]
            # TODO: apply the matcher tolerance here once it is derived from token decimals
            if difference == 0:
                continue
            result.references.append(
                RedistributionReference(
                    address=address,
                    token_symbol=symbol,
                    difference=difference,
                )
            )

    for reference in result.references:
        logger.debug(
            "allocation.reference",
            symbol=reference.token_symbol,
            address=reference.address,
            difference=reference.difference,
        )

    return result
