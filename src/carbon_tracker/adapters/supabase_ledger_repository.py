"""Supabase repository for user ledgers."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from carbon_tracker.domain.errors import StoreError
from carbon_tracker.domain.ledger import LedgerIncrement, UserLedger
from carbon_tracker.services.carbon import LedgerRepository

_COLUMNS = (
    "user_id, green_points, total_co2_saved, weekly_target, monthly_target, "
    "activity_streak, last_activity, badges_earned"
)
# Postgres function performing ``x = x + delta`` in a single UPDATE.
INCREMENT_FUNCTION = "increment_user_ledger"


@dataclass
class SupabaseLedgerRepository(LedgerRepository):
    """Supabase implementation for ledgers.

    ``total_co2_saved`` is a cache of the entry log and may lag behind it.
    """

    client: Client

    def read(self, user_id: str) -> UserLedger | None:
        """Return the ledger row for a user."""
        try:
            response = (
                self.client.table("user_ledgers")
                .select(_COLUMNS)
                .eq("user_id", user_id)
                .limit(1)
                .execute()
            )
        except Exception as exc:
            raise StoreError("Failed to read ledger") from exc
        if not response.data:
            return None
        return _parse_row(response.data[0])

    def create(self, ledger: UserLedger) -> UserLedger:
        """Insert a ledger row and return it."""
        try:
            response = (
                self.client.table("user_ledgers")
                .insert(
                    {
                        "user_id": ledger.user_id,
                        "green_points": ledger.green_points,
                        "total_co2_saved": ledger.total_co2_saved,
                        "weekly_target": ledger.weekly_target,
                        "monthly_target": ledger.monthly_target,
                        "activity_streak": ledger.activity_streak,
                        "last_activity": (
                            ledger.last_activity.isoformat()
                            if ledger.last_activity
                            else None
                        ),
                        "badges_earned": list(ledger.badges_earned),
                    }
                )
                .execute()
            )
        except Exception as exc:
            raise StoreError("Failed to create ledger") from exc
        if not response.data:
            raise StoreError("Failed to create ledger")
        return _parse_row(response.data[0])

    def increment_fields(self, user_id: str, increment: LedgerIncrement) -> None:
        """Apply deltas through the server-side increment function."""
        try:
            self.client.rpc(
                INCREMENT_FUNCTION,
                {
                    "p_user_id": user_id,
                    "p_co2_delta": increment.co2_delta,
                    "p_points_delta": increment.points_delta,
                    "p_last_activity": increment.last_activity.isoformat(),
                    "p_activity_streak": increment.activity_streak,
                },
            ).execute()
        except Exception as exc:
            raise StoreError("Failed to increment ledger") from exc

    def set_targets(
        self, user_id: str, weekly_target: float, monthly_target: float
    ) -> None:
        """Update the user's weekly and monthly targets."""
        try:
            self.client.table("user_ledgers").update(
                {
                    "weekly_target": weekly_target,
                    "monthly_target": monthly_target,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            ).eq("user_id", user_id).execute()
        except Exception as exc:
            raise StoreError("Failed to update targets") from exc


def _parse_row(row: dict[str, object]) -> UserLedger:
    last_activity_raw = row.get("last_activity")
    last_activity = (
        datetime.fromisoformat(last_activity_raw)
        if isinstance(last_activity_raw, str) and last_activity_raw
        else None
    )
    if last_activity is not None and last_activity.tzinfo is None:
        last_activity = last_activity.replace(tzinfo=UTC)
    return UserLedger(
        user_id=str(row.get("user_id", "")),
        green_points=int(row.get("green_points") or 0),
        total_co2_saved=float(row.get("total_co2_saved") or 0.0),
        weekly_target=_optional_float(row.get("weekly_target")),
        monthly_target=_optional_float(row.get("monthly_target")),
        activity_streak=int(row.get("activity_streak") or 0),
        last_activity=last_activity,
        badges_earned=tuple(str(badge) for badge in row.get("badges_earned") or ()),
    )


def _optional_float(value: object) -> float | None:
    if value is None:
        return None
    return float(value)
