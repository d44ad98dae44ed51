from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import cast

import pytest
from apscheduler.triggers.cron import CronTrigger

from scheduler import build_scheduler, cadence_trigger, run_scheduled_update
from services.tvl_service import TvlService


class _StubService:
    def __init__(self, *, fleet_error: Exception | None = None) -> None:
        self.fleet_error = fleet_error
        self.is_running = False
        self.calls: list[str] = []

    def recompute_fleet(self) -> Decimal:
        self.calls.append("fleet")
        if self.fleet_error is not None:
            raise self.fleet_error
        return Decimal("1")

    def update_each_organization(self) -> None:
        self.calls.append("organizations")


def _fields(trigger: CronTrigger) -> dict[str, str]:
    return {field.name: str(field) for field in trigger.fields}


def test_daily_trigger_fires_at_midnight_utc() -> None:
    trigger = cadence_trigger("daily")

    assert _fields(trigger)["hour"] == "0"
    assert _fields(trigger)["minute"] == "0"
    assert _fields(trigger)["day"] == "*"
    now = datetime(2024, 3, 15, 13, 45, tzinfo=timezone.utc)
    assert trigger.get_next_fire_time(None, now) == datetime(2024, 3, 16, tzinfo=timezone.utc)


def test_monthly_trigger_fires_on_first_of_next_month() -> None:
    trigger = cadence_trigger("monthly")

    assert _fields(trigger)["day"] == "1"
    assert _fields(trigger)["hour"] == "0"
    assert trigger.get_next_fire_time(None, datetime(2024, 1, 31, 23, 59, tzinfo=timezone.utc)) == datetime(
        2024, 2, 1, tzinfo=timezone.utc
    )
    assert trigger.get_next_fire_time(None, datetime(2024, 12, 15, 12, 0, tzinfo=timezone.utc)) == datetime(
        2025, 1, 1, tzinfo=timezone.utc
    )


def test_unknown_cadence_is_rejected() -> None:
    with pytest.raises(ValueError):
        cadence_trigger("hourly")  # type: ignore[arg-type]


def test_scheduler_runs_single_instance_of_update_job() -> None:
    service = _StubService()

    scheduler = build_scheduler(cast(TvlService, service), "monthly")

    jobs = scheduler.get_jobs()
    assert len(jobs) == 1
    job = jobs[0]
    assert job.func is run_scheduled_update
    assert job.args == (service,)
    assert job.max_instances == 1
    assert _fields(job.trigger)["day"] == "1"


def test_scheduled_update_logs_and_continues_after_fleet_failure(caplog: pytest.LogCaptureFixture) -> None:
    service = _StubService(fleet_error=RuntimeError("rpc down"))

    run_scheduled_update(cast(TvlService, service))

    assert service.calls == ["fleet", "organizations"]
    assert "Error updating total TVL" in caplog.text


def test_scheduled_update_skips_while_another_run_is_active(caplog: pytest.LogCaptureFixture) -> None:
    service = _StubService()
    service.is_running = True

    with caplog.at_level("INFO"):
        run_scheduled_update(cast(TvlService, service))

    assert service.calls == []
    assert "Skipping scheduled TVL update" in caplog.text
