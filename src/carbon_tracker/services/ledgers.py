"""Ledger lifecycle: creation, targets and reconciliation."""

import logging
import math
from dataclasses import dataclass

from carbon_tracker.domain.errors import UnknownUserError, ValidationError
from carbon_tracker.domain.ledger import LedgerReconciliation, UserLedger
from carbon_tracker.services import accounting
from carbon_tracker.services.carbon import EntryRepository, LedgerRepository

_logger = logging.getLogger(__name__)

NEWCOMER_BADGE = "newcomer"


@dataclass
class LedgerService:
    """Application service for per-user ledgers."""

    ledger_repository: LedgerRepository
    entry_repository: EntryRepository
    welcome_points: int = 100
    default_weekly_target: float = 20.0
    default_monthly_target: float = 80.0

    def ensure_ledger(self, user_id: str) -> UserLedger:
        """Return the user's ledger, creating it with defaults when missing."""
        if not user_id.strip():
            raise ValidationError("userId", "is required")
        existing = self.ledger_repository.read(user_id)
        if existing is not None:
            return existing
        created = self.ledger_repository.create(
            UserLedger(
                user_id=user_id,
                green_points=self.welcome_points,
                total_co2_saved=0.0,
                weekly_target=self.default_weekly_target,
                monthly_target=self.default_monthly_target,
                activity_streak=0,
                last_activity=None,
                badges_earned=(NEWCOMER_BADGE,),
            )
        )
        _logger.info("Created ledger", extra={"user_id": user_id})
        return created

    def get_ledger(self, user_id: str) -> UserLedger | None:
        """Return the user's ledger, if present."""
        return self.ledger_repository.read(user_id)

    def set_targets(
        self, user_id: str, weekly_target: float, monthly_target: float
    ) -> UserLedger:
        """Validate and persist new targets for an existing ledger."""
        _require_positive("weeklyTarget", weekly_target)
        _require_positive("monthlyTarget", monthly_target)
        if self.ledger_repository.read(user_id) is None:
            raise UnknownUserError(user_id)
        self.ledger_repository.set_targets(user_id, weekly_target, monthly_target)
        updated = self.ledger_repository.read(user_id)
        if updated is None:
            raise UnknownUserError(user_id)
        return updated

    def reconcile(self, user_id: str) -> LedgerReconciliation:
        """Compare the cached ledger total with the entry log."""
        ledger = self.ledger_repository.read(user_id)
        if ledger is None:
            raise UnknownUserError(user_id)
        entries = self.entry_repository.list_by_user(user_id)
        result = LedgerReconciliation(
            user_id=user_id,
            ledger_total=ledger.total_co2_saved,
            recomputed_total=accounting.total_emissions(entries),
        )
        if not result.in_sync:
            _logger.warning(
                "Ledger total drifted from entry log",
                extra={"user_id": user_id, "drift": result.drift},
            )
        return result


def _require_positive(field: str, value: float) -> None:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValidationError(field, "must be a number")
    if not math.isfinite(value) or value <= 0:
        raise ValidationError(field, "must be positive")
