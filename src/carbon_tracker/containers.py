"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from carbon_tracker.adapters.supabase_entry_repository import SupabaseEntryRepository
from carbon_tracker.adapters.supabase_ledger_repository import (
    SupabaseLedgerRepository,
)
from carbon_tracker.config import Settings
from carbon_tracker.services.carbon import CarbonService
from carbon_tracker.services.events import EventSink, LoggingEventSink
from carbon_tracker.services.ledgers import LedgerService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    carbon_service: CarbonService
    ledger_service: LedgerService
    events: EventSink


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    entry_repository = SupabaseEntryRepository(supabase_client)
    ledger_repository = SupabaseLedgerRepository(supabase_client)
    events = LoggingEventSink()
    carbon_service = CarbonService(
        entry_repository=entry_repository,
        ledger_repository=ledger_repository,
        events=events,
        timezone_name=resolved_settings.timezone,
        weekly_target=resolved_settings.default_weekly_target,
        monthly_bucket_target=resolved_settings.monthly_bucket_target,
    )
    ledger_service = LedgerService(
        ledger_repository=ledger_repository,
        entry_repository=entry_repository,
        welcome_points=resolved_settings.welcome_points,
        default_weekly_target=resolved_settings.default_weekly_target,
        default_monthly_target=resolved_settings.default_monthly_target,
    )
    return AppContainer(
        settings=resolved_settings,
        carbon_service=carbon_service,
        ledger_service=ledger_service,
        events=events,
    )
