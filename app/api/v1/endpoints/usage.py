"""Usage tracking endpoints."""

from fastapi import APIRouter, status

from app.dependencies import ProfileStoreDep, UsageServiceDep
from app.schemas.usage import ClearUsageRequest, EmailResponse, WeeklyReportRequest, WeeklyUsage

router = APIRouter(prefix="/users/{email}/usage", tags=["usage"])


@router.post("/heartbeat", status_code=status.HTTP_204_NO_CONTENT)
async def record_heartbeat(email: str, store: ProfileStoreDep) -> None:
    """Count one minute of active use for today."""
    await store.update_usage_time(email)


@router.get("/weekly", response_model=WeeklyUsage)
async def get_weekly_usage(email: str, store: ProfileStoreDep) -> WeeklyUsage:
    """Get minutes per day for the last seven days."""
    return await store.get_weekly_usage(email)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def clear_usage_dates(email: str, request: ClearUsageRequest, store: ProfileStoreDep) -> None:
    """Remove the given dates from the usage stats."""
    await store.clear_usage_dates(email, request.dates)


@router.post("/report", response_model=EmailResponse)
async def send_weekly_report(
    email: str,
    usage_service: UsageServiceDep,
    request: WeeklyReportRequest | None = None,
) -> EmailResponse:
    """
    Email the weekly usage report.

    Reported dates are cleared afterwards.
    """
    usage = request.usage_data if request else None
    return await usage_service.send_weekly_report(email, usage)
