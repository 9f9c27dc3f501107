"""Transfer matching - pair surpluses with deficits into transfer actions."""

import math
from dataclasses import dataclass, field
from typing import Optional

import structlog

from walletbalancer.config import RedistributionConfig
from walletbalancer.logging_config import get_action_logger
from walletbalancer.models import (
    ActionStatus,
    ActionTarget,
    ActionType,
    PendingBalanceChange,
    RedistributionReference,
    ScenarioSnapshot,
)
from walletbalancer.pools import PoolMetadata
from walletbalancer.redistribution.base import (
    ActionSink,
    PoolInfoNotFoundError,
    RedistributionError,
)
from walletbalancer.tolerance import compare_with_tolerance, resolve_tolerance

logger = structlog.get_logger(__name__)


@dataclass
class Transfer:
    """A single transfer recorded during matching."""

    giver: str
    receiver: str
    symbol: str
    amount: int
    decimals: int


@dataclass
class MatchResult:
    transfers: list[Transfer] = field(default_factory=list)
    actions_created: int = 0
    actions_updated: int = 0
    errors: list[RedistributionError] = field(default_factory=list)


class TransferMatcher:
    """Greedy largest-surplus to largest-deficit matcher.

    Mutates the snapshot it is given: new or extended Transfer actions and
    two pending balance changes per transfer.
    """

    def __init__(self, action_sink: ActionSink, config: RedistributionConfig):
        self._action_sink = action_sink
        self._config = config
        self._action_log = get_action_logger()

    def match(
        self,
        references: list[RedistributionReference],
        token_symbols: list[str],
        snapshot: ScenarioSnapshot,
    ) -> MatchResult:
        """Generate transfers for each token in turn.

        References whose difference is settled are removed from
        ``references`` as matching proceeds.
        """
        result = MatchResult()
        pools = PoolMetadata(snapshot.pool_infos)
        for symbol in token_symbols:
            self._match_token(symbol, references, snapshot, pools, result)
        return result

    def _is_settled(self, difference: float, symbol: str) -> bool:
        return compare_with_tolerance(
            difference,
            0,
            self._config.relative_tolerance,
            resolve_tolerance(self._config, symbol),
        )

    def _match_token(
        self,
        symbol: str,
        references: list[RedistributionReference],
        snapshot: ScenarioSnapshot,
        pools: PoolMetadata,
        result: MatchResult,
    ) -> None:
        working_set = [ref for ref in references if ref.token_symbol == symbol]
        decimals: Optional[int] = None
        iterations = 0

        while len(working_set) > 1:
            if self._config.max_iterations is not None and iterations >= self._config.max_iterations:
                logger.warning(
                    "matcher.max_iterations_reached",
                    symbol=symbol,
                    iterations=iterations,
                    remaining=len(working_set),
                )
                break
            iterations += 1

            # min()/max() keep the first of equal candidates
            giver = min(working_set, key=lambda ref: ref.difference)
            receiver = max(working_set, key=lambda ref: ref.difference)

            if self._is_settled(giver.difference, symbol) or self._is_settled(
                receiver.difference, symbol
            ):
                break
            if giver.difference >= 0 or receiver.difference <= 0:
                logger.debug("matcher.no_opposing_pair", symbol=symbol, remaining=len(working_set))
                break

            amount = math.floor(min(abs(giver.difference), abs(receiver.difference)))
            if amount == 0:
                logger.debug("matcher.zero_amount", symbol=symbol, remaining=len(working_set))
                break

            if decimals is None:
                decimals = pools.decimals_for(symbol)
                if decimals is None:
                    logger.error("matcher.pool_info_not_found", symbol=symbol)
                    result.errors.append(PoolInfoNotFoundError(symbol))
                    break

            self._record_transfer(snapshot, giver, receiver, symbol, amount, decimals, result)

            giver.difference += amount
            receiver.difference -= amount

            for ref in (giver, receiver):
                if self._is_settled(ref.difference, symbol):
                    _remove_reference(working_set, ref)
                    _remove_reference(references, ref)

        logger.debug(
            "matcher.token_done",
            symbol=symbol,
            iterations=iterations,
            remaining=len(working_set),
        )

    def _record_transfer(
        self,
        snapshot: ScenarioSnapshot,
        giver: RedistributionReference,
        receiver: RedistributionReference,
        symbol: str,
        amount: int,
        decimals: int,
        result: MatchResult,
    ) -> None:
        target = ActionTarget(
            target_address=receiver.address,
            amount=amount,
            original_asset_symbol=symbol,
            original_asset_token_decimals=decimals,
            target_asset_symbol=symbol,
            target_asset_token_decimals=decimals,
        )

        action = snapshot.find_transfer_action(giver.address)
        if action is None:
            action = self._action_sink.create_action(
                actor_address=giver.address,
                targets=[target],
                action_type=ActionType.TRANSFER,
                action_status=ActionStatus.NOT_STARTED,
            )
            snapshot.actions.append(action)
            result.actions_created += 1
            self._action_log.info(
                "matcher.action_created",
                action_id=action.action_id,
                actor=giver.address,
                receiver=receiver.address,
                symbol=symbol,
                amount=amount,
            )
        else:
            action.add_target(target)
            result.actions_updated += 1
            self._action_log.info(
                "matcher.action_updated",
                action_id=action.action_id,
                actor=giver.address,
                receiver=receiver.address,
                symbol=symbol,
                amount=amount,
                targets=len(action.targets),
            )

        snapshot.pending_balance_changes.append(
            PendingBalanceChange(address=giver.address, symbol=symbol, balance_change=-amount)
        )
        snapshot.pending_balance_changes.append(
            PendingBalanceChange(address=receiver.address, symbol=symbol, balance_change=amount)
        )
        result.transfers.append(
            Transfer(
                giver=giver.address,
                receiver=receiver.address,
                symbol=symbol,
                amount=amount,
                decimals=decimals,
            )
        )


def _remove_reference(references: list[RedistributionReference], ref: RedistributionReference) -> None:
    """Remove ref by identity rather than dataclass equality."""
    for index, candidate in enumerate(references):
        if candidate is ref:
            del references[index]
            return
