"""Supabase repository for carbon entries."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from carbon_tracker.domain.entries import CarbonEntry, NewCarbonEntry
from carbon_tracker.domain.errors import StoreError
from carbon_tracker.services.carbon import EntryRepository

_COLUMNS = "id, user_id, category, activity, amount, co2_emission, date, created_at"


@dataclass
class SupabaseEntryRepository(EntryRepository):
    """Supabase implementation for the append-only entry log."""

    client: Client

    def append(self, entry: NewCarbonEntry) -> str:
        """Insert an entry row and return its id."""
        try:
            response = (
                self.client.table("carbon_entries")
                .insert(
                    {
                        "user_id": entry.user_id,
                        "category": entry.category,
                        "activity": entry.activity,
                        "amount": entry.amount,
                        "co2_emission": entry.co2_emission,
                        "date": entry.date.isoformat(),
                        "created_at": entry.created_at.isoformat(),
                    }
                )
                .execute()
            )
        except Exception as exc:
            raise StoreError("Failed to store carbon entry") from exc
        if not response.data:
            raise StoreError("Failed to store carbon entry")
        return str(response.data[0]["id"])

    def list_by_user(self, user_id: str) -> list[CarbonEntry]:
        """Return a user's entries, newest first."""
        try:
            response = (
                self.client.table("carbon_entries")
                .select(_COLUMNS)
                .eq("user_id", user_id)
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as exc:
            raise StoreError("Failed to read carbon entries") from exc
        return [_parse_row(row) for row in response.data or []]


def _parse_row(row: dict[str, object]) -> CarbonEntry:
    created_at = _parse_timestamp(row.get("created_at"))
    return CarbonEntry(
        id=str(row.get("id", "")),
        user_id=str(row.get("user_id", "")),
        category=str(row.get("category", "")).lower(),
        activity=str(row.get("activity") or ""),
        amount=float(row.get("amount") or 0.0),
        co2_emission=float(row.get("co2_emission") or 0.0),
        date=_parse_timestamp(row.get("date"), default=created_at),
        created_at=created_at,
    )


def _parse_timestamp(value: object, default: datetime | None = None) -> datetime:
    if isinstance(value, str) and value:
        parsed = datetime.fromisoformat(value)
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=UTC)
        return parsed
    if default is not None:
        return default
    return datetime.min.replace(tzinfo=UTC)
