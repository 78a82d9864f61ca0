"""Carbon tracker API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from carbon_tracker.api.models import EntryPayload, TargetsPayload

if TYPE_CHECKING:
    from carbon_tracker.containers import AppContainer


def _get_api_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.api_token


async def require_token(
    x_api_token: str | None = Header(default=None),
    api_token: str = Depends(_get_api_token),
) -> None:
    """Ensure requests include a valid API token."""
    if not x_api_token or x_api_token != api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


router = APIRouter(tags=["carbon"], dependencies=[Depends(require_token)])


@router.post("/entries", status_code=status.HTTP_201_CREATED)
async def submit_entry(payload: EntryPayload, request: Request) -> dict[str, object]:
    """Record a carbon entry and award green points."""
    container: AppContainer = request.app.state.container
    result = container.carbon_service.submit_entry(payload.to_payload())
    return {
        "entryId": result.entry_id,
        "pointsAwarded": result.points_awarded,
        "ledgerUpdated": result.ledger_updated,
    }


@router.get("/users/{user_id}/stats")
async def dashboard_stats(user_id: str, request: Request) -> dict[str, object]:
    """Return the dashboard statistics snapshot."""
    container: AppContainer = request.app.state.container
    return container.carbon_service.get_dashboard_stats(user_id).to_dict()


@router.get("/users/{user_id}/stats/categories/current-month")
async def current_month_categories(
    user_id: str, request: Request
) -> dict[str, object]:
    """Return this month's category breakdown."""
    container: AppContainer = request.app.state.container
    buckets = container.carbon_service.get_category_stats_for_current_month(user_id)
    return {"categories": [bucket.to_dict() for bucket in buckets]}


@router.get("/users/{user_id}/entries/recent")
async def recent_entries(
    user_id: str, request: Request, limit: int | None = None
) -> dict[str, object]:
    """Return the newest entries for a user."""
    container: AppContainer = request.app.state.container
    resolved_limit = (
        limit if limit is not None else container.settings.recent_activity_limit
    )
    entries = container.carbon_service.get_recent_activity(user_id, resolved_limit)
    return {"entries": [entry.to_dict() for entry in entries]}


@router.post("/users/{user_id}/ledger")
async def ensure_ledger(user_id: str, request: Request) -> dict[str, object]:
    """Create the user's ledger if needed and return it."""
    container: AppContainer = request.app.state.container
    return container.ledger_service.ensure_ledger(user_id).to_dict()


@router.get("/users/{user_id}/ledger")
async def get_ledger(user_id: str, request: Request) -> dict[str, object]:
    """Return the user's ledger."""
    container: AppContainer = request.app.state.container
    ledger = container.ledger_service.get_ledger(user_id)
    if ledger is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return ledger.to_dict()


@router.put("/users/{user_id}/targets")
async def update_targets(
    user_id: str, payload: TargetsPayload, request: Request
) -> dict[str, object]:
    """Update the user's weekly and monthly targets."""
    container: AppContainer = request.app.state.container
    ledger = container.ledger_service.set_targets(
        user_id, payload.weekly_target, payload.monthly_target
    )
    return ledger.to_dict()


@router.get("/users/{user_id}/ledger/reconcile")
async def reconcile_ledger(user_id: str, request: Request) -> dict[str, object]:
    """Compare the ledger total against the entry log."""
    container: AppContainer = request.app.state.container
    return container.ledger_service.reconcile(user_id).to_dict()
