import asyncio
import pytest
from datetime import datetime, timedelta, timezone
from kpi_dashboard.services.report_store import ReportStore, sweep_periodically

NOW = datetime(2025, 1, 20, 12, 0, tzinfo=timezone.utc)


def test_save_and_get():
    store = ReportStore(ttl=timedelta(hours=1))
    report = store.save(1, "Sourcers", "# Body", now=NOW)

    assert report.id.startswith("report_")
    assert report.expires_at == NOW + timedelta(hours=1)
    assert store.get(report.id, now=NOW + timedelta(minutes=59)) is report
    assert report.remaining_minutes(NOW + timedelta(minutes=30)) == 30


def test_expired_report_is_gone_on_read():
    store = ReportStore(ttl=timedelta(hours=1))
    report = store.save(1, "Old", "x", now=NOW)

    assert store.get(report.id, now=NOW + timedelta(hours=1)) is None
    assert len(store) == 0


def test_ids_are_unique():
    store = ReportStore()
    ids = {store.save(1, "t", "c", now=NOW).id for _ in range(50)}
    assert len(ids) == 50


def test_list_for_user_newest_first_and_scoped():
    store = ReportStore(ttl=timedelta(hours=1))
    old = store.save(1, "old", "c", now=NOW)
    new = store.save(1, "new", "c", now=NOW + timedelta(minutes=10))
    store.save(2, "someone else", "c", now=NOW)
    store.save(1, "expired", "c", now=NOW - timedelta(hours=2))

    listed = store.list_for_user(1, now=NOW + timedelta(minutes=15))

    assert [r.id for r in listed] == [new.id, old.id]


def test_delete():
    store = ReportStore()
    report = store.save(1, "t", "c")
    assert store.delete(report.id) is True
    assert store.delete(report.id) is False


def test_purge_expired():
    store = ReportStore(ttl=timedelta(minutes=5))
    store.save(1, "a", "c", now=NOW)
    store.save(1, "b", "c", now=NOW)
    fresh = store.save(1, "c", "c", now=NOW + timedelta(minutes=4))

    assert store.purge_expired(now=NOW + timedelta(minutes=6)) == 2
    assert len(store) == 1
    assert store.get(fresh.id, now=NOW + timedelta(minutes=6)) is fresh


def test_sweeper_purges_until_cancelled():
    store = ReportStore(ttl=timedelta(seconds=0))
    store.save(1, "instantly stale", "c")

    async def run():
        task = asyncio.create_task(sweep_periodically(store, 0.01))
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(run())
    assert len(store) == 0
