"""Action sink interface and the redistribution error taxonomy."""

from abc import ABC, abstractmethod
from datetime import datetime, timezone

from walletbalancer.models import Action, ActionStatus, ActionTarget, ActionType


class ActionSink(ABC):
    """Interface for constructing queued actions.

    The sink only builds the Action value. Callers append it to the
    snapshot themselves.
    """

    @abstractmethod
    def create_action(
        self,
        actor_address: str,
        targets: list[ActionTarget],
        action_type: ActionType,
        action_status: ActionStatus,
    ) -> Action:
        """Build a new action. Returns the unsaved Action."""
        ...


class DefaultActionSink(ActionSink):
    """Builds actions stamped with the current UTC time."""

    def create_action(
        self,
        actor_address: str,
        targets: list[ActionTarget],
        action_type: ActionType,
        action_status: ActionStatus,
    ) -> Action:
        now = datetime.now(timezone.utc)
        return Action(
            actor_address=actor_address,
            targets=list(targets),
            action_type=action_type,
            action_status=action_status,
            created_at=now,
            updated_at=now,
        )


class RedistributionError(Exception):
    """Base class for recoverable conditions met during a pass.

    These are logged and collected on the pass report, never raised out
    of a pass.
    """

    pass


class WalletNotFoundError(RedistributionError):
    """A wallet in the snapshot has no registry entry."""

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Wallet {address} not found in wallet registry")


class MissingBalanceError(RedistributionError):
    """A participating wallet has no settled balance for the token."""

    def __init__(self, address: str, symbol: str):
        self.address = address
        self.symbol = symbol
        super().__init__(f"Token {symbol} not found in wallet {address}")


class MissingPortionError(RedistributionError):
    """A wallet declares a token but no portion_in_strategy for it."""

    def __init__(self, address: str, symbol: str):
        self.address = address
        self.symbol = symbol
        super().__init__(
            f"Portion in strategy not defined for token {symbol} in wallet {address}"
        )


class InvalidPortionSumError(RedistributionError):
    """The portions of all participants of a token sum to zero."""

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"Portions for token {symbol} sum to zero")


class PoolInfoNotFoundError(RedistributionError):
    """No pool names the token, so its decimals are unknown."""

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"Pool Info not found for token {symbol}")
