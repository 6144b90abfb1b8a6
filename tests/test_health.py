"""Tests for source health tracking."""

from datetime import datetime, timezone

import pytest

from feedpulse.ingestion import FetchError, SourceHealthTracker
from feedpulse.models import FetchStatus

from .conftest import FakeSourceRegistry, make_source

NOW = datetime(2025, 1, 6, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def registry():
    return FakeSourceRegistry([make_source(1, "Un"), make_source(2, "Deux"), make_source(3, "Trois")])


@pytest.fixture
def tracker(registry):
    return SourceHealthTracker(registry, clock=lambda: NOW)


@pytest.mark.asyncio
async def test_success_is_recorded(tracker, registry):
    status = await tracker.record_success(registry.sources[1], 12)
    assert status == FetchStatus(success=True, message="12 articles récupérés", timestamp=NOW)
    assert registry.sources[1].last_fetched_at == NOW
    assert registry.sources[1].is_healthy


@pytest.mark.asyncio
async def test_failure_keeps_error_message(tracker, registry):
    await tracker.record_failure(registry.sources[2], FetchError("https://x", "Status code 500", status_code=500))
    source = registry.sources[2]
    assert source.fetch_status.success is False
    assert source.fetch_status.message == "Status code 500"
    assert source.last_fetched_at == NOW


@pytest.mark.asyncio
async def test_failure_without_message_uses_error_name(tracker, registry):
    await tracker.record_failure(registry.sources[2], TimeoutError())
    assert registry.sources[2].fetch_status.message == "TimeoutError"


@pytest.mark.asyncio
async def test_empty_feed_is_still_healthy(tracker, registry):
    await tracker.record_success(registry.sources[1], 0)
    assert registry.sources[1].fetch_status.message == "0 articles récupérés"
    assert registry.sources[1].fetch_status.success


@pytest.mark.asyncio
async def test_report_counts(tracker, registry):
    await tracker.record_success(registry.sources[1], 3)
    await tracker.record_failure(registry.sources[2], FetchError("https://x", "Status code 404", status_code=404))

    report = await tracker.report()
    assert report.healthy == 1
    assert report.failing == 1
    assert report.never_fetched == 1
    assert report.total == 3
    assert [s.name for s in report.failing_sources] == ["Deux"]


@pytest.mark.asyncio
async def test_report_is_read_only(tracker, registry):
    await tracker.report()
    assert registry.health_updates == []
