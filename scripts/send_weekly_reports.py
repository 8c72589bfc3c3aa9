#!/usr/bin/env python3
"""
Send the weekly usage report to every user with recorded activity.

Usage:
    python scripts/send_weekly_reports.py
    python scripts/send_weekly_reports.py --email ada@example.com
    python scripts/send_weekly_reports.py --dry-run

Meant to run from cron once a week. Reads the same key-value store as the API,
so STORAGE_BACKEND and REDIS_* must match the server's environment.
"""

import argparse
import asyncio
import sys

import structlog

from app.core.exceptions import AppException
from app.core.kv_store import close_kv_store, get_kv_store
from app.middleware.logging import configure_logging
from app.services.email_service import EmailService
from app.services.profile_store import USAGE_PREFIX, ProfileStore
from app.services.usage_service import UsageService

logger = structlog.get_logger("send_weekly_reports")


async def collect_emails() -> list[str]:
    """List every email that has usage stats."""
    kv = get_kv_store()
    return [key[len(USAGE_PREFIX) :] async for key, _ in kv.iterate(USAGE_PREFIX)]


async def send_reports(emails: list[str], dry_run: bool = False) -> int:
    """
    Send a report to each email.

    Returns:
        Number of failed sends
    """
    store = ProfileStore(get_kv_store())
    service = UsageService(store, EmailService())
    failures = 0

    for email in emails:
        if dry_run:
            usage = await store.get_weekly_usage(email)
            if not usage.dates:
                print(f"{email}: no usage")
                continue
            print(f"{email}: {sum(usage.data)} minutes over {usage.dates[0]}..{usage.dates[-1]}")
            continue
        try:
            await service.send_weekly_report(email)
        except AppException as e:
            failures += 1
            logger.error("weekly_report_failed", email=email, error=e.message)

    return failures


async def run(args: argparse.Namespace) -> int:
    try:
        emails = [args.email] if args.email else await collect_emails()
        logger.info("weekly_reports_started", recipients=len(emails), dry_run=args.dry_run)
        failures = await send_reports(emails, dry_run=args.dry_run)
    finally:
        await close_kv_store()

    logger.info("weekly_reports_finished", recipients=len(emails), failures=failures)
    return 1 if failures else 0


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Send weekly usage reports")
    parser.add_argument("--email", help="Only report for this email")
    parser.add_argument("--dry-run", action="store_true", help="Print usage instead of sending")
    args = parser.parse_args()

    configure_logging()
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
