"""Tests for the ledger service."""

import pytest

from carbon_tracker.domain.errors import UnknownUserError, ValidationError
from carbon_tracker.services.ledgers import LedgerService
from tests.conftest import (
    NOW,
    InMemoryEntryRepository,
    InMemoryLedgerRepository,
    make_entry,
)


def test_ensure_ledger_creates_with_defaults(
    ledger_service: LedgerService,
    ledger_repository: InMemoryLedgerRepository,
) -> None:
    ledger = ledger_service.ensure_ledger("user-2")

    assert ledger.green_points == 100
    assert ledger.total_co2_saved == 0
    assert ledger.weekly_target == 20
    assert ledger.monthly_target == 80
    assert ledger.activity_streak == 0
    assert ledger.badges_earned == ("newcomer",)
    assert "user-2" in ledger_repository.ledgers


def test_ensure_ledger_returns_existing(
    ledger_service: LedgerService,
    ledger_repository: InMemoryLedgerRepository,
) -> None:
    existing = ledger_repository.ledgers["user-1"]
    assert ledger_service.ensure_ledger("user-1") is existing


def test_set_targets_persists_values(ledger_service: LedgerService) -> None:
    ledger = ledger_service.set_targets("user-1", 15, 60)

    assert ledger.weekly_target == 15
    assert ledger.monthly_target == 60


@pytest.mark.parametrize(
    ("weekly", "monthly", "field"),
    [
        (0, 60, "weeklyTarget"),
        (15, -1, "monthlyTarget"),
        (float("inf"), 60, "weeklyTarget"),
    ],
)
def test_set_targets_rejects_non_positive(
    ledger_service: LedgerService, weekly: float, monthly: float, field: str
) -> None:
    with pytest.raises(ValidationError) as excinfo:
        ledger_service.set_targets("user-1", weekly, monthly)
    assert excinfo.value.field == field


def test_set_targets_unknown_user(ledger_service: LedgerService) -> None:
    with pytest.raises(UnknownUserError):
        ledger_service.set_targets("ghost", 10, 40)


def test_reconcile_reports_drift(
    ledger_service: LedgerService,
    entry_repository: InMemoryEntryRepository,
) -> None:
    entry_repository.entries = [make_entry(4, NOW), make_entry(1.5, NOW)]

    result = ledger_service.reconcile("user-1")

    assert result.recomputed_total == 5.5
    assert result.ledger_total == 0
    assert result.drift == -5.5
    assert result.in_sync is False
