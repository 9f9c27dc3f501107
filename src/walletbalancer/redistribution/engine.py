"""Redistribution engine - one pass of cross-wallet token redistribution."""

from dataclasses import dataclass, field
from typing import Optional

import structlog

from walletbalancer.config import RedistributionConfig
from walletbalancer.models import RedistributionReference, ScenarioSnapshot
from walletbalancer.redistribution.allocation import compute_redistribution_references
from walletbalancer.redistribution.base import ActionSink, DefaultActionSink, RedistributionError
from walletbalancer.redistribution.matcher import Transfer, TransferMatcher
from walletbalancer.registry import WalletRegistry

logger = structlog.get_logger(__name__)


@dataclass
class RedistributionReport:
    """Outcome of a pass. The snapshot is the same object that was passed in."""

    snapshot: ScenarioSnapshot
    references: list[RedistributionReference] = field(default_factory=list)
    unsettled: list[RedistributionReference] = field(default_factory=list)
    transfers: list[Transfer] = field(default_factory=list)
    errors: list[RedistributionError] = field(default_factory=list)
    actions_created: int = 0
    actions_updated: int = 0


class RedistributionEngine:
    """Spreads token balances across wallets according to their portions.

    Runs allocation for every requested token, then greedy matching, on a
    snapshot exclusively owned by the caller for the duration of the call.
    """

    def __init__(
        self,
        registry: WalletRegistry,
        config: RedistributionConfig,
        action_sink: Optional[ActionSink] = None,
    ):
        self._registry = registry
        self._config = config
        self._matcher = TransferMatcher(action_sink or DefaultActionSink(), config)

    async def redistribute(
        self,
        snapshot: ScenarioSnapshot,
        token_symbols: Optional[list[str]] = None,
    ) -> RedistributionReport:
        """Run one redistribution pass, mutating snapshot in place.

        Args:
            snapshot: Scenario state; gains actions and pending changes
            token_symbols: Tokens to redistribute (default: from config);
                repeated symbols are processed once

        Returns:
            RedistributionReport with the generated transfers and every
            recoverable error met along the way.
        """
        requested = token_symbols if token_symbols is not None else self._config.token_symbols
        symbols = list(dict.fromkeys(requested))

        logger.info(
            "redistribution.starting",
            symbols=symbols,
            wallets=len(snapshot.wallet_statuses),
            existing_actions=len(snapshot.actions),
        )

        allocation = compute_redistribution_references(symbols, snapshot, self._registry)
        references = [
            RedistributionReference(r.address, r.token_symbol, r.difference)
            for r in allocation.references
        ]
        working = list(allocation.references)
        match = self._matcher.match(working, symbols, snapshot)

        report = RedistributionReport(
            snapshot=snapshot,
            references=references,
            unsettled=working,
            transfers=match.transfers,
            errors=allocation.errors + match.errors,
            actions_created=match.actions_created,
            actions_updated=match.actions_updated,
        )

        logger.info(
            "redistribution.completed",
            references=len(references),
            transfers=len(report.transfers),
            actions_created=report.actions_created,
            actions_updated=report.actions_updated,
            errors=len(report.errors),
        )
        return report


async def redistribute_tokens_across_wallets(
    snapshot: ScenarioSnapshot,
    token_symbols: list[str],
    registry: WalletRegistry,
    config: Optional[RedistributionConfig] = None,
    action_sink: Optional[ActionSink] = None,
) -> RedistributionReport:
    """Convenience wrapper running a single pass with a throwaway engine."""
    engine = RedistributionEngine(registry, config or RedistributionConfig(), action_sink)
    return await engine.redistribute(snapshot, token_symbols)
