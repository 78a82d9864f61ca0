"""Domain models for dashboard statistics."""

from dataclasses import dataclass, field

from carbon_tracker.domain.errors import ConfigurationError


@dataclass(frozen=True)
class MonthlyEmission:
    """Emissions folded into one calendar month."""

    month: str
    year: int
    emissions: float
    target: float

    def to_dict(self) -> dict[str, object]:
        return {
            "month": self.month,
            "year": self.year,
            "emissions": self.emissions,
            "target": self.target,
        }


@dataclass(frozen=True)
class CategoryBucket:
    """Emissions folded into one taxonomy category."""

    name: str
    value: float
    color: str

    def to_dict(self) -> dict[str, object]:
        return {"name": self.name, "value": self.value, "color": self.color}


@dataclass(frozen=True)
class WeeklyProgress:
    """Goal completion over the trailing seven days.

    ``percent`` is not clamped; ``error`` is set when the target is unusable.
    """

    percent: int
    emissions: float
    error: ConfigurationError | None = None


@dataclass(frozen=True)
class DashboardStats:
    """Snapshot of derived statistics for a user."""

    total_entries: int
    total_co2_saved: float
    weekly_progress: int
    monthly_emissions: list[MonthlyEmission] = field(default_factory=list)
    category_breakdown: list[CategoryBucket] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "DashboardStats":
        """Return the zero-valued snapshot."""
        return cls(total_entries=0, total_co2_saved=0, weekly_progress=0)

    def to_dict(self) -> dict[str, object]:
        return {
            "totalEntries": self.total_entries,
            "totalCO2Saved": self.total_co2_saved,
            "weeklyProgress": self.weekly_progress,
            "monthlyEmissions": [item.to_dict() for item in self.monthly_emissions],
            "categoryBreakdown": [
                item.to_dict() for item in self.category_breakdown
            ],
        }
