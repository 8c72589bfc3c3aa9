"""Tests for the weekly report cron script."""

import argparse
from unittest.mock import AsyncMock, patch

import pytest

from app.core.exceptions import EmailDeliveryException
from app.core.kv_store import InMemoryKeyValueStore
from app.schemas.usage import EmailResponse
from app.services.profile_store import ProfileStore
from scripts import send_weekly_reports


@pytest.fixture
def script_store(kv_store: InMemoryKeyValueStore):
    """Point the script at the in-memory store."""
    with (
        patch.object(send_weekly_reports, "get_kv_store", return_value=kv_store),
        patch.object(send_weekly_reports, "close_kv_store", new=AsyncMock()),
    ):
        yield kv_store


@pytest.mark.asyncio
async def test_collect_emails(script_store: InMemoryKeyValueStore):
    """Only accounts with usage stats are collected."""
    await script_store.set_json("usage_stats_a@x.com", {"2026-10-19": 3})
    await script_store.set_json("user_profile_b@x.com", {"name": "B"})
    await script_store.set_json("usage_stats_c@x.com", {})

    assert await send_weekly_reports.collect_emails() == ["a@x.com", "c@x.com"]


@pytest.mark.asyncio
async def test_dry_run_prints_totals(script_store: InMemoryKeyValueStore, profile_store: ProfileStore, capsys):
    """Dry runs print the week's minutes and leave the counters alone."""
    await profile_store.update_usage_time("a@x.com")
    await profile_store.update_usage_time("a@x.com")

    failures = await send_weekly_reports.send_reports(["a@x.com"], dry_run=True)

    assert failures == 0
    out = capsys.readouterr().out
    assert "a@x.com: 2 minutes over " in out
    assert await script_store.get_json("usage_stats_a@x.com") != {}


@pytest.mark.asyncio
async def test_dry_run_blank_email(script_store: InMemoryKeyValueStore, capsys):
    """A blank --email prints no usage instead of crashing."""
    code = await send_weekly_reports.run(argparse.Namespace(email=" ", dry_run=True))

    assert code == 0
    assert " : no usage\n" in capsys.readouterr().out
    send_weekly_reports.close_kv_store.assert_awaited_once()


@pytest.mark.asyncio
async def test_send_reports_counts_failures(script_store: InMemoryKeyValueStore):
    """Failed sends are counted and do not stop the run."""
    send = AsyncMock(side_effect=[EmailDeliveryException(), EmailResponse(success=True)])
    with patch.object(send_weekly_reports.UsageService, "send_weekly_report", new=send):
        failures = await send_weekly_reports.send_reports(["a@x.com", "b@x.com"])

    assert failures == 1
    assert send.await_count == 2
