"""Usage tracking and email schemas."""

from pydantic import BaseModel, Field


class WeeklyUsage(BaseModel):
    """Minutes per day for the trailing seven days, oldest first."""

    labels: list[str] = Field(default_factory=list)
    data: list[int] = Field(default_factory=list)
    dates: list[str] = Field(default_factory=list)


class ClearUsageRequest(BaseModel):
    """Dates (YYYY-MM-DD) to remove from usage stats."""

    dates: list[str]


class WeeklyReportRequest(BaseModel):
    """Optional client-supplied usage for the weekly report."""

    usage_data: WeeklyUsage | None = None


class WelcomeEmailRequest(BaseModel):
    """Direct welcome email send."""

    email: str = Field(..., min_length=1)
    name: str | None = None


class EmailResponse(BaseModel):
    """Mail endpoint response."""

    success: bool
    simulated: bool = False
    message: str | None = None
