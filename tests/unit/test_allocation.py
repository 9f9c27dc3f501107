"""Tests for weighted target allocation."""

import pytest
from structlog.testing import capture_logs

from walletbalancer.config import WalletConfig, WalletEntry
from walletbalancer.models import PendingBalanceChange, ScenarioSnapshot
from walletbalancer.redistribution.allocation import compute_redistribution_references
from walletbalancer.redistribution.base import (
    InvalidPortionSumError,
    MissingBalanceError,
    MissingPortionError,
    WalletNotFoundError,
)
from walletbalancer.registry import WalletRegistry


def _differences(result) -> dict[tuple[str, str], float]:
    return {(r.address, r.token_symbol): r.difference for r in result.references}


class TestTargets:
    def test_two_wallets_equal_weights(self, two_wallet_snapshot, two_wallet_registry):
        result = compute_redistribution_references(["T"], two_wallet_snapshot, two_wallet_registry)

        allocation = result.allocations["T"]
        assert allocation.sum_of_tokens == 100
        assert allocation.target_balances == {"A": 50, "B": 50}
        assert _differences(result) == {("A", "T"): -50, ("B", "T"): 50}
        assert result.errors == []

    def test_three_wallets_weighted(self, three_wallet_snapshot, three_wallet_registry):
        result = compute_redistribution_references(["T"], three_wallet_snapshot, three_wallet_registry)

        assert result.allocations["T"].target_balances == {"W1": 75, "W2": 75, "W3": 150}
        assert _differences(result) == {("W1", "T"): 75, ("W2", "T"): 75, ("W3", "T"): -150}

    def test_targets_sum_to_total(self, make_wallet, make_status):
        registry = WalletRegistry(
            [make_wallet("A", T=0.3), make_wallet("B", T=1.7), make_wallet("C", T=3)]
        )
        snapshot = ScenarioSnapshot(
            wallet_statuses=[
                make_status("A", T=123_456_789),
                make_status("B", T=987_654_321),
                make_status("C", T=5),
            ]
        )
        result = compute_redistribution_references(["T"], snapshot, registry)

        allocation = result.allocations["T"]
        assert sum(allocation.target_balances.values()) == pytest.approx(allocation.sum_of_tokens)
        assert sum(r.difference for r in result.references) == pytest.approx(0, abs=1e-3)

    def test_pending_changes_count_toward_balance(self, two_wallet_snapshot, two_wallet_registry):
        two_wallet_snapshot.pending_balance_changes = [
            PendingBalanceChange(address="A", symbol="T", balance_change=-30),
            PendingBalanceChange(address="B", symbol="T", balance_change=30),
            PendingBalanceChange(address="A", symbol="OTHER", balance_change=-1000),
        ]
        result = compute_redistribution_references(["T"], two_wallet_snapshot, two_wallet_registry)

        assert result.allocations["T"].effective_balances == {"A": 70, "B": 30}
        assert _differences(result) == {("A", "T"): -20, ("B", "T"): 20}

    def test_balanced_wallets_produce_no_references(self, make_wallet, make_status):
        registry = WalletRegistry([make_wallet("A", T=1), make_wallet("B", T=1)])
        snapshot = ScenarioSnapshot(
            wallet_statuses=[make_status("A", T=40), make_status("B", T=40)]
        )
        result = compute_redistribution_references(["T"], snapshot, registry)

        assert result.references == []
        assert "T" in result.allocations

    def test_multiple_tokens(self, make_wallet, make_status):
        registry = WalletRegistry([make_wallet("A", T=1, U=3), make_wallet("B", T=1, U=1)])
        snapshot = ScenarioSnapshot(
            wallet_statuses=[make_status("A", T=10, U=0), make_status("B", T=0, U=400)]
        )
        result = compute_redistribution_references(["T", "U"], snapshot, registry)

        assert _differences(result) == {
            ("A", "T"): -5,
            ("B", "T"): 5,
            ("A", "U"): 300,
            ("B", "U"): -300,
        }

    def test_repeated_symbol_allocated_once(self, two_wallet_snapshot, two_wallet_registry):
        result = compute_redistribution_references(["T", "T"], two_wallet_snapshot, two_wallet_registry)

        assert [(r.address, r.token_symbol) for r in result.references] == [("A", "T"), ("B", "T")]

    def test_token_not_configured_anywhere(self, two_wallet_snapshot, two_wallet_registry):
        result = compute_redistribution_references(["NOPE"], two_wallet_snapshot, two_wallet_registry)
        assert result.references == []
        assert result.allocations == {}

    def test_repeatable_without_new_pending_changes(self, three_wallet_snapshot, three_wallet_registry):
        first = compute_redistribution_references(["T"], three_wallet_snapshot, three_wallet_registry)
        second = compute_redistribution_references(["T"], three_wallet_snapshot, three_wallet_registry)
        assert first.references == second.references


class TestAnomalies:
    def test_unregistered_wallet_reported_and_skipped(self, two_wallet_snapshot, two_wallet_registry, make_status):
        two_wallet_snapshot.wallet_statuses.append(make_status("STRANGER", T=1_000))

        with capture_logs() as logs:
            result = compute_redistribution_references(["T"], two_wallet_snapshot, two_wallet_registry)

        assert result.allocations["T"].sum_of_tokens == 100
        assert [type(e) for e in result.errors] == [WalletNotFoundError]
        assert result.errors[0].address == "STRANGER"
        assert any(
            log["event"] == "allocation.wallet_not_registered" and log["log_level"] == "error"
            for log in logs
        )

    def test_wallet_without_balance_config_silently_skipped(self, two_wallet_snapshot, make_wallet, make_status):
        registry = WalletRegistry(
            [
                make_wallet("A", T=1),
                make_wallet("B", T=1),
                WalletEntry(address="IDLE", wallet_config=WalletConfig()),
            ]
        )
        two_wallet_snapshot.wallet_statuses.append(make_status("IDLE", T=500))

        result = compute_redistribution_references(["T"], two_wallet_snapshot, registry)

        assert result.errors == []
        assert result.allocations["T"].sum_of_tokens == 100

    def test_missing_balance_excludes_wallet_only(self, two_wallet_snapshot, make_wallet, make_status):
        registry = WalletRegistry([make_wallet("A", T=1), make_wallet("B", T=1), make_wallet("C", T=1)])
        two_wallet_snapshot.wallet_statuses.append(make_status("C", OTHER=10))

        result = compute_redistribution_references(["T"], two_wallet_snapshot, registry)

        assert len(result.errors) == 1
        error = result.errors[0]
        assert isinstance(error, MissingBalanceError)
        assert (error.address, error.symbol) == ("C", "T")
        assert result.allocations["T"].target_balances == {"A": 50, "B": 50}

    def test_missing_portion_excludes_wallet(self, two_wallet_snapshot, make_wallet, make_status):
        registry = WalletRegistry([make_wallet("A", T=1), make_wallet("B", T=1), make_wallet("C", T=None)])
        two_wallet_snapshot.wallet_statuses.append(make_status("C", T=900))

        with capture_logs() as logs:
            result = compute_redistribution_references(["T"], two_wallet_snapshot, registry)

        assert [type(e) for e in result.errors] == [MissingPortionError]
        allocation = result.allocations["T"]
        assert allocation.sum_of_tokens == 100
        assert "C" not in allocation.target_balances
        assert all(r.address != "C" for r in result.references)
        assert any(log["event"] == "allocation.missing_portion" for log in logs)

    def test_zero_portion_sum_skips_token(self, make_wallet, make_status):
        registry = WalletRegistry([make_wallet("A", T=0), make_wallet("B", T=0)])
        snapshot = ScenarioSnapshot(
            wallet_statuses=[make_status("A", T=100), make_status("B", T=0)]
        )
        result = compute_redistribution_references(["T"], snapshot, registry)

        assert result.references == []
        assert [type(e) for e in result.errors] == [InvalidPortionSumError]

    def test_zero_weight_wallet_targets_nothing(self, make_wallet, make_status):
        registry = WalletRegistry([make_wallet("A", T=0), make_wallet("B", T=1)])
        snapshot = ScenarioSnapshot(
            wallet_statuses=[make_status("A", T=100), make_status("B", T=0)]
        )
        result = compute_redistribution_references(["T"], snapshot, registry)

        assert _differences(result) == {("A", "T"): -100, ("B", "T"): 100}
