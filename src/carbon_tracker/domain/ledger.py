"""Domain models for the per-user ledger."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class UserLedger:
    """Mutable accumulator snapshot for a user."""

    user_id: str
    green_points: int
    total_co2_saved: float
    weekly_target: float | None
    monthly_target: float | None
    activity_streak: int
    last_activity: datetime | None
    badges_earned: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, object]:
        """Return the ledger keyed by its public field names."""
        return {
            "userId": self.user_id,
            "greenPoints": self.green_points,
            "totalCO2Saved": self.total_co2_saved,
            "weeklyTarget": self.weekly_target,
            "monthlyTarget": self.monthly_target,
            "activityStreak": self.activity_streak,
            "lastActivity": (
                self.last_activity.isoformat() if self.last_activity else None
            ),
            "badgesEarned": list(self.badges_earned),
        }


@dataclass(frozen=True)
class LedgerIncrement:
    """Changes applied to a ledger when an entry is accepted.

    ``co2_delta`` and ``points_delta`` are added server-side; ``last_activity``
    and ``activity_streak`` overwrite the stored values.
    """

    co2_delta: float
    points_delta: int
    last_activity: datetime
    activity_streak: int


@dataclass(frozen=True)
class LedgerReconciliation:
    """Comparison between the cached ledger total and the entry log."""

    user_id: str
    ledger_total: float
    recomputed_total: float

    @property
    def drift(self) -> float:
        """Return how far the cached total is from the entry log."""
        return round(self.ledger_total - self.recomputed_total, 6)

    @property
    def in_sync(self) -> bool:
        """Return True when the cached total matches the entry log."""
        return self.drift == 0

    def to_dict(self) -> dict[str, object]:
        """Return the reconciliation keyed by its public field names."""
        return {
            "userId": self.user_id,
            "ledgerTotal": self.ledger_total,
            "recomputedTotal": self.recomputed_total,
            "drift": self.drift,
            "inSync": self.in_sync,
        }
