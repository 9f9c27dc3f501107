"""Shared test fixtures."""

import pytest

from walletbalancer.config import (
    AppConfig,
    BalanceConfig,
    RedistributionConfig,
    WalletConfig,
    WalletEntry,
)
from walletbalancer.models import (
    AssetInfo,
    PoolInfo,
    ScenarioSnapshot,
    TokenBalance,
    WalletStatus,
)
from walletbalancer.registry import WalletRegistry


def _make_wallet(address: str, **portions: float | None) -> WalletEntry:
    """Registry entry declaring portion_in_strategy per symbol."""
    return WalletEntry(
        address=address,
        wallet_config=WalletConfig(
            balance_config=[
                BalanceConfig(symbol=symbol, portion_in_strategy=portion)
                for symbol, portion in portions.items()
            ]
        ),
    )


def _make_status(address: str, **balances: int) -> WalletStatus:
    return WalletStatus(
        address=address,
        token_balances=[
            TokenBalance(symbol=symbol, balance=balance)
            for symbol, balance in balances.items()
        ],
    )


def _make_pool(x: str, x_decimals: int, y: str, y_decimals: int) -> PoolInfo:
    return PoolInfo(
        asset_x=AssetInfo(symbol=x, decimals=x_decimals),
        asset_y=AssetInfo(symbol=y, decimals=y_decimals),
    )


@pytest.fixture
def exact_config() -> RedistributionConfig:
    """Zero tolerance, so small example balances still produce transfers."""
    return RedistributionConfig(token_symbols=["T"], absolute_tolerance=0)


@pytest.fixture
def two_wallet_registry() -> WalletRegistry:
    return WalletRegistry([_make_wallet("A", T=1), _make_wallet("B", T=1)])


@pytest.fixture
def two_wallet_snapshot() -> ScenarioSnapshot:
    """A holds everything, B holds nothing, equal weights."""
    return ScenarioSnapshot(
        wallet_statuses=[_make_status("A", T=100), _make_status("B", T=0)],
        pool_infos=[_make_pool("CKB", 8, "T", 8)],
    )


@pytest.fixture
def three_wallet_registry() -> WalletRegistry:
    return WalletRegistry(
        [_make_wallet("W1", T=1), _make_wallet("W2", T=1), _make_wallet("W3", T=2)]
    )


@pytest.fixture
def three_wallet_snapshot() -> ScenarioSnapshot:
    return ScenarioSnapshot(
        wallet_statuses=[
            _make_status("W1", T=0),
            _make_status("W2", T=0),
            _make_status("W3", T=300),
        ],
        pool_infos=[_make_pool("T", 8, "CKB", 8)],
    )


@pytest.fixture
def test_config() -> AppConfig:
    """Provide an application configuration with safe defaults."""
    return AppConfig(
        wallets=[
            {"address": "A", "wallet_config": {"balance_config": [{"symbol": "T", "portion_in_strategy": 1}]}},
            {"address": "B", "wallet_config": {"balance_config": [{"symbol": "T", "portion_in_strategy": 1}]}},
        ],
        redistribution={"token_symbols": ["T"], "absolute_tolerance": 0},
        logging={
            "level": "DEBUG",
            "app_log": "/tmp/test_walletbalancer.log",
            "action_log": "/tmp/test_actions.log",
        },
    )


@pytest.fixture
def make_wallet():
    return _make_wallet


@pytest.fixture
def make_status():
    return _make_status


@pytest.fixture
def make_pool():
    return _make_pool
