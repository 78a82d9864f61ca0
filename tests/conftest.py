"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import uuid4

import pytest

from carbon_tracker.config import Settings
from carbon_tracker.containers import AppContainer
from carbon_tracker.domain.entries import CarbonEntry, NewCarbonEntry
from carbon_tracker.domain.errors import StoreError
from carbon_tracker.domain.ledger import LedgerIncrement, UserLedger
from carbon_tracker.services.carbon import (
    CarbonService,
    EntryRepository,
    LedgerRepository,
)
from carbon_tracker.services.events import EventSink
from carbon_tracker.services.ledgers import LedgerService

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=UTC)


@dataclass
class InMemoryEntryRepository(EntryRepository):
    """In-memory entry log for tests."""

    entries: list[CarbonEntry] = field(default_factory=list)
    fail_append: bool = False
    fail_list: bool = False

    def append(self, entry: NewCarbonEntry) -> str:
        if self.fail_append:
            raise StoreError("entry store unavailable")
        entry_id = str(uuid4())
        self.entries.append(
            CarbonEntry(
                id=entry_id,
                user_id=entry.user_id,
                category=entry.category,
                activity=entry.activity,
                amount=entry.amount,
                co2_emission=entry.co2_emission,
                date=entry.date,
                created_at=entry.created_at,
            )
        )
        return entry_id

    def list_by_user(self, user_id: str) -> list[CarbonEntry]:
        if self.fail_list:
            raise StoreError("entry store unavailable")
        owned = [entry for entry in self.entries if entry.user_id == user_id]
        return sorted(owned, key=lambda entry: entry.created_at, reverse=True)


@dataclass
class InMemoryLedgerRepository(LedgerRepository):
    """In-memory ledger store for tests."""

    ledgers: dict[str, UserLedger] = field(default_factory=dict)
    increments: list[tuple[str, LedgerIncrement]] = field(default_factory=list)
    fail_read: bool = False
    fail_increment: bool = False

    def read(self, user_id: str) -> UserLedger | None:
        if self.fail_read:
            raise StoreError("ledger store unavailable")
        return self.ledgers.get(user_id)

    def create(self, ledger: UserLedger) -> UserLedger:
        self.ledgers[ledger.user_id] = ledger
        return ledger

    def increment_fields(self, user_id: str, increment: LedgerIncrement) -> None:
        if self.fail_increment:
            raise StoreError("ledger store unavailable")
        current = self.ledgers[user_id]
        self.ledgers[user_id] = replace(
            current,
            green_points=current.green_points + increment.points_delta,
            total_co2_saved=current.total_co2_saved + increment.co2_delta,
            last_activity=increment.last_activity,
            activity_streak=increment.activity_streak,
        )
        self.increments.append((user_id, increment))

    def set_targets(
        self, user_id: str, weekly_target: float, monthly_target: float
    ) -> None:
        self.ledgers[user_id] = replace(
            self.ledgers[user_id],
            weekly_target=weekly_target,
            monthly_target=monthly_target,
        )


@dataclass
class RecordingEventSink(EventSink):
    """Event sink that keeps emitted events."""

    events: list[tuple[str, dict[str, object]]] = field(default_factory=list)

    def emit(self, event: str, payload: dict[str, object]) -> None:
        self.events.append((event, payload))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]


def make_ledger(user_id: str = "user-1", **overrides: object) -> UserLedger:
    values: dict[str, object] = {
        "user_id": user_id,
        "green_points": 100,
        "total_co2_saved": 0.0,
        "weekly_target": 20.0,
        "monthly_target": None,
        "activity_streak": 0,
        "last_activity": None,
    }
    values.update(overrides)
    return UserLedger(**values)


def make_entry(
    co2_emission: float,
    date: datetime,
    category: str = "transport",
    user_id: str = "user-1",
) -> CarbonEntry:
    return CarbonEntry(
        id=str(uuid4()),
        user_id=user_id,
        category=category,
        activity="activity",
        amount=1.0,
        co2_emission=co2_emission,
        date=date,
        created_at=date,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service.key.signature",
        api_token="api-token",
    )


@pytest.fixture
def entry_repository() -> InMemoryEntryRepository:
    return InMemoryEntryRepository()


@pytest.fixture
def ledger_repository() -> InMemoryLedgerRepository:
    repository = InMemoryLedgerRepository()
    repository.create(make_ledger())
    return repository


@pytest.fixture
def event_sink() -> RecordingEventSink:
    return RecordingEventSink()


@pytest.fixture
def carbon_service(
    entry_repository: InMemoryEntryRepository,
    ledger_repository: InMemoryLedgerRepository,
    event_sink: RecordingEventSink,
) -> CarbonService:
    return CarbonService(
        entry_repository=entry_repository,
        ledger_repository=ledger_repository,
        events=event_sink,
        clock=lambda: NOW,
    )


@pytest.fixture
def ledger_service(
    entry_repository: InMemoryEntryRepository,
    ledger_repository: InMemoryLedgerRepository,
) -> LedgerService:
    return LedgerService(
        ledger_repository=ledger_repository,
        entry_repository=entry_repository,
    )


@pytest.fixture
def container(
    settings: Settings,
    carbon_service: CarbonService,
    ledger_service: LedgerService,
    event_sink: RecordingEventSink,
) -> AppContainer:
    return AppContainer(
        settings=settings,
        carbon_service=carbon_service,
        ledger_service=ledger_service,
        events=event_sink,
    )
