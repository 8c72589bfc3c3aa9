"""Weekly usage report composition and delivery."""

import json
import random
from urllib.parse import quote

import structlog

from app.schemas.usage import EmailResponse, WeeklyUsage
from app.services.email_service import EmailService
from app.services.profile_store import ProfileStore, normalize_email

logger = structlog.get_logger(__name__)

QUICKCHART_URL = "https://quickchart.io/chart"

DEFAULT_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

FUNNY_MESSAGES = [
    "Why did the marketer break up with the calendar? Because their dates were always expiring! 😂",
    "I told my computer I needed a break, and now it won't stop sending me Kit-Kat ads. 🍫",
    "SEO is like a gym membership: you have to keep going to see results! 💪",
    "Why don't marketers like trampolines? They're afraid of high bounce rates! 📉",
    "What is a social media manager's favorite snack? Insta-graham crackers! 🍪",
]


def build_chart_url(usage: WeeklyUsage) -> str:
    """Build a QuickChart bar chart URL for a week of usage."""
    chart_config = {
        "type": "bar",
        "data": {
            "labels": usage.labels,
            "datasets": [
                {
                    "label": "Minutes Spent on Site",
                    "data": usage.data,
                    "backgroundColor": "rgba(59, 130, 246, 0.5)",
                    "borderColor": "rgb(59, 130, 246)",
                    "borderWidth": 1,
                }
            ],
        },
        "options": {
            "title": {"display": True, "text": "Your Weekly Activity (Minutes)"},
            "scales": {"yAxes": [{"ticks": {"beginAtZero": True}}]},
        },
    }
    encoded = quote(json.dumps(chart_config, separators=(",", ":")), safe="")
    return f"{QUICKCHART_URL}?c={encoded}"


class UsageService:
    """Sends the weekly activity report."""

    def __init__(self, store: ProfileStore, email_service: EmailService):
        self.store = store
        self.email = email_service

    async def send_weekly_report(self, email: str, usage: WeeklyUsage | None = None) -> EmailResponse:
        """
        Email a week of usage and clear the reported dates.

        Args:
            email: Recipient and account email
            usage: Client-supplied usage; read from the store when omitted

        Returns:
            Delivery result
        """
        if usage is None:
            usage = await self.store.get_weekly_usage(email)
        if not usage.labels:
            usage = WeeklyUsage(labels=DEFAULT_LABELS, data=[0] * len(DEFAULT_LABELS))

        result = await self.email.send_weekly_report(
            email, build_chart_url(usage), random.choice(FUNNY_MESSAGES)
        )

        if usage.dates:
            await self.store.clear_usage_dates(email, usage.dates)
        logger.info("weekly_report_sent", email=normalize_email(email), days=len(usage.dates))
        return result
