"""Carbon entry submission and dashboard statistics."""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol
from zoneinfo import ZoneInfo

from carbon_tracker.domain.entries import (
    CarbonEntry,
    NewCarbonEntry,
    SubmissionResult,
)
from carbon_tracker.domain.errors import (
    StoreError,
    UnknownUserError,
    ValidationError,
)
from carbon_tracker.domain.ledger import LedgerIncrement, UserLedger
from carbon_tracker.domain.stats import CategoryBucket, DashboardStats
from carbon_tracker.services import accounting
from carbon_tracker.services.events import (
    ENTRY_ACCEPTED,
    ENTRY_REJECTED,
    LEDGER_INCREMENT_FAILED,
    STATS_READ_FAILED,
    TARGET_MISCONFIGURED,
    EventSink,
    NullEventSink,
    safe_emit,
)

_logger = logging.getLogger(__name__)


class EntryRepository(Protocol):
    """Append-only persistence for carbon entries."""

    def append(self, entry: NewCarbonEntry) -> str:
        """Persist an entry and return its id. Raises ``StoreError``."""

    def list_by_user(self, user_id: str) -> list[CarbonEntry]:
        """Return a user's entries, newest first. Raises ``StoreError``."""


class LedgerRepository(Protocol):
    """Persistence for per-user ledgers.

    ``increment_fields`` must add the deltas atomically on the store side.
    The stored ``total_co2_saved`` is a cache: the entry log is canonical.
    """

    def read(self, user_id: str) -> UserLedger | None:
        """Return the user's ledger, if present. Raises ``StoreError``."""

    def create(self, ledger: UserLedger) -> UserLedger:
        """Create a ledger row. Raises ``StoreError``."""

    def increment_fields(self, user_id: str, increment: LedgerIncrement) -> None:
        """Apply an increment atomically. Raises ``StoreError``."""

    def set_targets(
        self, user_id: str, weekly_target: float, monthly_target: float
    ) -> None:
        """Update the user's targets. Raises ``StoreError``."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class CarbonService:
    """Orchestrates the entry store, the ledger and the accounting engine."""

    entry_repository: EntryRepository
    ledger_repository: LedgerRepository
    events: EventSink = field(default_factory=NullEventSink)
    timezone_name: str = "UTC"
    weekly_target: float = accounting.DEFAULT_WEEKLY_TARGET
    monthly_bucket_target: float = accounting.DEFAULT_MONTHLY_BUCKET_TARGET
    clock: Callable[[], datetime] = _utc_now

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone_name)

    def submit_entry(self, payload: Mapping[str, object]) -> SubmissionResult:
        """Validate, persist and credit a new entry.

        Raises ``ValidationError`` before any write and ``StoreError`` when the
        entry cannot be stored. A failed ledger update after the entry is stored
        is reported through ``ledger_updated`` instead of raising.
        """
        tz = self.tz
        try:
            entry = accounting.normalize_entry(payload, self.clock(), tz)
        except ValidationError as exc:
            self._emit(ENTRY_REJECTED, {"field": exc.field, "reason": exc.message})
            raise

        ledger = self.ledger_repository.read(entry.user_id)
        if ledger is None:
            error = UnknownUserError(entry.user_id)
            self._emit(
                ENTRY_REJECTED,
                {
                    "field": error.field,
                    "reason": error.message,
                    "user_id": entry.user_id,
                },
            )
            raise error

        increment = accounting.build_increment(entry, ledger, tz)
        entry_id = self.entry_repository.append(entry)
        try:
            self.ledger_repository.increment_fields(entry.user_id, increment)
        except StoreError:
            _logger.exception(
                "Ledger increment failed",
                extra={"user_id": entry.user_id, "entry_id": entry_id},
            )
            self._emit(
                LEDGER_INCREMENT_FAILED,
                {
                    "user_id": entry.user_id,
                    "entry_id": entry_id,
                    "co2_delta": increment.co2_delta,
                    "points_delta": increment.points_delta,
                },
            )
            return SubmissionResult(
                entry_id=entry_id,
                points_awarded=increment.points_delta,
                ledger_updated=False,
            )

        self._emit(
            ENTRY_ACCEPTED,
            {
                "user_id": entry.user_id,
                "entry_id": entry_id,
                "category": entry.category,
                "points_awarded": increment.points_delta,
            },
        )
        return SubmissionResult(
            entry_id=entry_id, points_awarded=increment.points_delta
        )

    def get_dashboard_stats(self, user_id: str) -> DashboardStats:
        """Return dashboard statistics, or zero stats when entries are unreadable."""
        try:
            entries = self.entry_repository.list_by_user(user_id)
        except StoreError as exc:
            _logger.warning("Entry read failed for stats: %s", exc)
            self._emit(STATS_READ_FAILED, {"user_id": user_id, "reason": str(exc)})
            return DashboardStats.empty()

        weekly_target, monthly_target = self._targets(user_id)
        now = self.clock()
        tz = self.tz
        progress = accounting.weekly_progress(entries, now, weekly_target, tz)
        if progress.error is not None:
            self._emit(
                TARGET_MISCONFIGURED,
                {
                    "user_id": user_id,
                    "setting": progress.error.setting,
                    "value": progress.error.value,
                },
            )
        return DashboardStats(
            total_entries=len(entries),
            total_co2_saved=accounting.total_emissions(entries),
            weekly_progress=progress.percent,
            monthly_emissions=accounting.monthly_emissions(
                entries, now, tz, monthly_target
            ),
            category_breakdown=accounting.category_breakdown(entries),
        )

    def get_category_stats_for_current_month(
        self, user_id: str
    ) -> list[CategoryBucket]:
        """Return the category breakdown for entries dated this month."""
        try:
            entries = self.entry_repository.list_by_user(user_id)
        except StoreError as exc:
            _logger.warning("Entry read failed for category stats: %s", exc)
            self._emit(STATS_READ_FAILED, {"user_id": user_id, "reason": str(exc)})
            return []
        current = accounting.entries_in_month(entries, self.clock(), self.tz)
        return accounting.category_breakdown(current)

    def get_recent_activity(self, user_id: str, limit: int = 10) -> list[CarbonEntry]:
        """Return the newest entries for a user."""
        if limit <= 0:
            return []
        entries = self.entry_repository.list_by_user(user_id)
        ordered = sorted(entries, key=lambda entry: entry.created_at, reverse=True)
        return ordered[:limit]

    def _targets(self, user_id: str) -> tuple[float, float]:
        try:
            ledger = self.ledger_repository.read(user_id)
        except StoreError as exc:
            _logger.warning("Ledger read failed, using default targets: %s", exc)
            ledger = None
        if ledger is None:
            return self.weekly_target, self.monthly_bucket_target
        weekly = (
            ledger.weekly_target
            if ledger.weekly_target is not None
            else self.weekly_target
        )
        monthly = (
            ledger.monthly_target
            if ledger.monthly_target is not None
            else self.monthly_bucket_target
        )
        return weekly, monthly

    def _emit(self, event: str, payload: dict[str, object]) -> None:
        safe_emit(self.events, event, payload)
