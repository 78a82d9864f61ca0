"""Pure accounting engine for carbon entries.

Every function here is deterministic: callers pass ``now`` and the
timezone used for calendar semantics, and nothing touches storage.
"""

import math
from collections.abc import Iterable, Mapping
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal, localcontext
from zoneinfo import ZoneInfo

from carbon_tracker.domain.categories import CATEGORIES
from carbon_tracker.domain.entries import CarbonEntry, NewCarbonEntry
from carbon_tracker.domain.errors import ConfigurationError, ValidationError
from carbon_tracker.domain.ledger import LedgerIncrement, UserLedger
from carbon_tracker.domain.stats import CategoryBucket, MonthlyEmission, WeeklyProgress

MONTH_NAMES = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)
MONTHS_IN_WINDOW = 6
WEEKLY_WINDOW = timedelta(days=7)
POINTS_PER_KG = 2
DEFAULT_WEEKLY_TARGET = 20.0
DEFAULT_MONTHLY_BUCKET_TARGET = 40.0
UTC_ZONE = ZoneInfo("UTC")


def normalize_entry(
    payload: Mapping[str, object], now: datetime, tz: ZoneInfo
) -> NewCarbonEntry:
    """Validate a raw payload and return a normalized entry.

    Raises ``ValidationError`` for the first invalid field, checked in a fixed
    order so identical payloads always fail the same way.
    """
    user_id = _lookup(payload, "userId", "user_id")
    if not isinstance(user_id, str) or not user_id.strip():
        raise ValidationError("userId", "is required")

    category = _lookup(payload, "category")
    if not isinstance(category, str) or not category.strip():
        raise ValidationError("category", "is required")

    co2_emission = _parse_number(
        _lookup(payload, "co2Emission", "co2_emission"), "co2Emission"
    )
    if co2_emission is None:
        raise ValidationError("co2Emission", "is required")
    if co2_emission < 0:
        raise ValidationError("co2Emission", "must not be negative")

    amount = _parse_number(_lookup(payload, "amount"), "amount")
    if amount is None:
        amount = 0.0
    if amount < 0:
        raise ValidationError("amount", "must not be negative")

    activity = _lookup(payload, "activity")
    if activity is None:
        activity = ""
    if not isinstance(activity, str):
        raise ValidationError("activity", "must be a string")

    entry_date = _parse_date(_lookup(payload, "date"), tz)
    return NewCarbonEntry(
        user_id=user_id.strip(),
        category=category.strip().lower(),
        activity=activity.strip(),
        amount=amount,
        co2_emission=co2_emission,
        date=entry_date or now,
        created_at=now,
    )


def points_for_emission(co2_emission: float) -> int:
    """Return green points for a tracked quantity, rounding down."""
    return math.floor(_to_decimal(co2_emission) * POINTS_PER_KG)


def next_streak(
    last_activity: datetime | None, streak: int, now: datetime, tz: ZoneInfo
) -> int:
    """Return the activity streak after a new entry at ``now``."""
    if last_activity is None:
        return 1
    gap = (_localize(now, tz).date() - _localize(last_activity, tz).date()).days
    if gap <= 0:
        return max(streak, 1)
    if gap == 1:
        return streak + 1
    return 1


def build_increment(
    entry: NewCarbonEntry, ledger: UserLedger, tz: ZoneInfo
) -> LedgerIncrement:
    """Return the ledger changes produced by an accepted entry."""
    return LedgerIncrement(
        co2_delta=entry.co2_emission,
        points_delta=points_for_emission(entry.co2_emission),
        last_activity=entry.created_at,
        activity_streak=next_streak(
            ledger.last_activity, ledger.activity_streak, entry.created_at, tz
        ),
    )


def total_emissions(entries: Iterable[CarbonEntry]) -> float:
    """Return the lifetime sum of emissions."""
    return sum((entry.co2_emission for entry in entries), 0.0)


def weekly_progress(
    entries: Iterable[CarbonEntry],
    now: datetime,
    weekly_target: float = DEFAULT_WEEKLY_TARGET,
    tz: ZoneInfo = UTC_ZONE,
) -> WeeklyProgress:
    """Return goal completion for entries dated in ``[now - 7 days, now)``.

    Sums run in ``Decimal`` so huge emissions never overflow the percentage.
    """
    end = _localize(now, tz)
    start = end - WEEKLY_WINDOW
    total = sum(
        (
            _to_decimal(entry.co2_emission)
            for entry in entries
            if start <= _localize(entry.date, tz) < end
        ),
        Decimal(0),
    )
    emissions = float(total)
    if not math.isfinite(weekly_target) or weekly_target <= 0:
        return WeeklyProgress(
            percent=0,
            emissions=emissions,
            error=ConfigurationError("weeklyTarget", weekly_target),
        )
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, _digits(total) + 8)
        ratio = total * 100 / _to_decimal(weekly_target)
    return WeeklyProgress(percent=int(_quantize(ratio, 0)), emissions=emissions)


def month_window(now: datetime, tz: ZoneInfo) -> list[tuple[int, int]]:
    """Return ``(year, month)`` keys for the last six months, oldest first."""
    local_now = _localize(now, tz)
    keys: list[tuple[int, int]] = []
    for offset in range(MONTHS_IN_WINDOW - 1, -1, -1):
        index = local_now.year * 12 + (local_now.month - 1) - offset
        keys.append((index // 12, index % 12 + 1))
    return keys


def monthly_emissions(
    entries: Iterable[CarbonEntry],
    now: datetime,
    tz: ZoneInfo,
    target: float = DEFAULT_MONTHLY_BUCKET_TARGET,
) -> list[MonthlyEmission]:
    """Fold entries into six calendar-month buckets, oldest first."""
    keys = month_window(now, tz)
    totals = dict.fromkeys(keys, Decimal(0))
    for entry in entries:
        local_date = _localize(entry.date, tz)
        key = (local_date.year, local_date.month)
        if key in totals:
            totals[key] += _to_decimal(entry.co2_emission)
    return [
        MonthlyEmission(
            month=MONTH_NAMES[month - 1],
            year=year,
            emissions=round_half_up(totals[(year, month)]),
            target=target,
        )
        for year, month in keys
    ]


def category_breakdown(entries: Iterable[CarbonEntry]) -> list[CategoryBucket]:
    """Fold entries into taxonomy buckets, dropping empty ones.

    Unknown categories are skipped. Buckets are sorted by value, largest
    first, keeping taxonomy order for ties.
    """
    totals = {category.key: Decimal(0) for category in CATEGORIES}
    for entry in entries:
        key = entry.category.lower()
        if key in totals:
            totals[key] += _to_decimal(entry.co2_emission)

    buckets = []
    for category in CATEGORIES:
        value = round_half_up(totals[category.key])
        if value == 0:
            continue
        buckets.append(
            CategoryBucket(name=category.name, value=value, color=category.color)
        )
    return sorted(buckets, key=lambda bucket: bucket.value, reverse=True)


def entries_in_month(
    entries: Iterable[CarbonEntry], now: datetime, tz: ZoneInfo
) -> list[CarbonEntry]:
    """Return entries dated in the calendar month containing ``now``."""
    local_now = _localize(now, tz)
    selected = []
    for entry in entries:
        local_date = _localize(entry.date, tz)
        if (local_date.year, local_date.month) == (local_now.year, local_now.month):
            selected.append(entry)
    return selected


def round_half_up(value: float | Decimal, places: int = 2) -> float:
    """Round with halves going away from zero, as users expect.

    Non-finite values are returned unchanged.
    """
    number = value if isinstance(value, Decimal) else _to_decimal(value)
    if not number.is_finite():
        return float(value)
    return float(_quantize(number, places))


def _to_decimal(value: float) -> Decimal:
    return Decimal(repr(float(value)))


def _digits(number: Decimal) -> int:
    if not number.is_finite() or number.is_zero():
        return 1
    return max(number.adjusted() + 1, 1)


def _quantize(number: Decimal, places: int) -> Decimal:
    # The context must hold every integer digit plus the kept decimals.
    with localcontext() as ctx:
        ctx.prec = _digits(number) + places + 1
        return number.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def _lookup(payload: Mapping[str, object], *keys: str) -> object | None:
    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return None


def _parse_number(value: object, field: str) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(field, "must be a number")
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value)
        except ValueError as exc:
            raise ValidationError(field, "must be a number") from exc
    else:
        raise ValidationError(field, "must be a number")
    if not math.isfinite(number):
        raise ValidationError(field, "must be finite")
    return number


def _parse_date(value: object, tz: ZoneInfo) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return _attach_zone(value, tz)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=tz)
    if isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError as exc:
            raise ValidationError("date", "must be an ISO-8601 date") from exc
        return _attach_zone(parsed, tz)
    raise ValidationError("date", "must be an ISO-8601 date")


def _attach_zone(value: datetime, tz: ZoneInfo) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value


def _localize(value: datetime, tz: ZoneInfo) -> datetime:
    return _attach_zone(value, tz).astimezone(tz)
