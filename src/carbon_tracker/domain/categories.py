"""Fixed category taxonomy."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CategoryInfo:
    """Display metadata for a category key."""

    key: str
    name: str
    color: str


CATEGORIES: tuple[CategoryInfo, ...] = (
    CategoryInfo(key="transport", name="Transport", color="#ef4444"),
    CategoryInfo(key="energy", name="Energy", color="#f97316"),
    CategoryInfo(key="food", name="Food", color="#eab308"),
    CategoryInfo(key="waste", name="Waste", color="#22c55e"),
    CategoryInfo(key="water", name="Water", color="#3b82f6"),
    CategoryInfo(key="shopping", name="Shopping", color="#a855f7"),
)
