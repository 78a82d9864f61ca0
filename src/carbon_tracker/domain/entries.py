"""Domain models for carbon entries."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class NewCarbonEntry:
    """Validated entry that has not been persisted yet."""

    user_id: str
    category: str
    activity: str
    amount: float
    co2_emission: float
    date: datetime
    created_at: datetime


@dataclass(frozen=True)
class CarbonEntry:
    """Persisted carbon entry."""

    id: str
    user_id: str
    category: str
    activity: str
    amount: float
    co2_emission: float
    date: datetime
    created_at: datetime

    def to_dict(self) -> dict[str, object]:
        """Return the entry keyed by its public field names."""
        return {
            "id": self.id,
            "userId": self.user_id,
            "category": self.category,
            "activity": self.activity,
            "amount": self.amount,
            "co2Emission": self.co2_emission,
            "date": self.date.isoformat(),
            "createdAt": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of an accepted entry submission."""

    entry_id: str
    points_awarded: int
    ledger_updated: bool = True
