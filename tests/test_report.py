from datetime import date, datetime, timezone

import pytest
from unittest.mock import AsyncMock, MagicMock

from core.exceptions import ReportError
from services.report_service import ReportService, format_long_date
from services.scheduler import DailyScheduler, seconds_until


@pytest.fixture
def feedback_repo():
    repo = MagicMock()
    repo.count_between = AsyncMock(return_value=2)
    repo.list_between = AsyncMock(return_value=[
        {
            "id": "a", "name": "Asha", "membership_number": "123", "category": "Others",
            "suggestion": "leaky <tap>", "created_at": datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc),
        },
        {
            "id": "b", "name": "Ravi", "membership_number": "77", "category": "Upkeep & Maintenance",
            "suggestion": "broken chair", "created_at": datetime(2026, 10, 19, 4, 30),
        },
    ])
    return repo


@pytest.fixture
def mailer():
    m = MagicMock()
    m.send = AsyncMock(return_value="<msg-1@example>")
    return m


@pytest.fixture
def report(feedback_repo, mailer):
    return ReportService(feedback_repo, mailer, ["ops@club.example", "gm@club.example"])


def test_format_long_date():
    assert format_long_date(date(2026, 10, 9)) == "9 October 2026"


def test_day_window_is_local_day_in_utc(report):
    start, end = report.day_window(date(2026, 10, 19))

    assert start == datetime(2026, 10, 18, 18, 30, tzinfo=timezone.utc)
    assert end == datetime(2026, 10, 19, 18, 30, tzinfo=timezone.utc)


def test_render_lists_feedback_in_local_time(report):
    html = report.render(2, [
        {"name": "Asha", "membership_number": "123", "category": "Others",
         "suggestion": "leaky <tap>", "created_at": datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)},
    ], date(2026, 10, 19))

    assert "Benares Club - 19 October 2026" in html
    assert "05:30 PM" in html
    assert "leaky &lt;tap&gt;" in html
    assert "No feedback received today." not in html


def test_render_without_feedback(report):
    html = report.render(0, [], date(2026, 10, 19))

    assert "No feedback received today." in html


async def test_send_daily_report(report, feedback_repo, mailer):
    result = await report.send_daily_report(date(2026, 10, 19))

    start, end = report.day_window(date(2026, 10, 19))
    feedback_repo.count_between.assert_awaited_once_with(start, end)
    to, subject, html = mailer.send.await_args.args
    assert to == ["ops@club.example", "gm@club.example"]
    assert subject == "Daily Feedback Report - 19 October 2026 (2 feedbacks)"
    assert "Ravi" in html
    assert result == {
        "success": True,
        "message_id": "<msg-1@example>",
        "feedback_count": 2,
        "date": "2026-10-19",
    }


async def test_missing_recipients_is_an_error(feedback_repo, mailer):
    report = ReportService(feedback_repo, mailer, [])

    with pytest.raises(ReportError):
        await report.send_daily_report(date(2026, 10, 19))
    mailer.send.assert_not_awaited()


async def test_scheduled_failure_notifies_first_recipient(report, feedback_repo, mailer):
    feedback_repo.count_between.side_effect = RuntimeError("mongo down")

    await report.run_scheduled()

    to, subject, html = mailer.send.await_args.args
    assert to == ["ops@club.example"]
    assert subject == "Daily Report Generation Failed"
    assert "mongo down" in html


async def test_error_notification_failure_is_only_logged(report, feedback_repo, mailer):
    feedback_repo.count_between.side_effect = RuntimeError("mongo down")
    mailer.send.side_effect = OSError("smtp down")

    await report.run_scheduled()

    mailer.send.assert_awaited_once()


# ------------------------
# Scheduler
# ------------------------
def test_seconds_until_later_today():
    now = datetime(2026, 10, 19, 22, 0)

    assert seconds_until(now, 23, 0) == 3600


def test_seconds_until_rolls_to_tomorrow():
    now = datetime(2026, 10, 19, 23, 0, 30)

    assert seconds_until(now, 23, 0) == 24 * 3600 - 30


async def test_scheduler_job_failure_is_logged():
    job = AsyncMock(side_effect=RuntimeError("boom"))
    scheduler = DailyScheduler(job, hour=23, minute=0, timezone_name="Asia/Kolkata")

    await scheduler.run_once()

    job.assert_awaited_once()


async def test_scheduler_start_and_stop():
    scheduler = DailyScheduler(AsyncMock(), hour=23, minute=0, timezone_name="Asia/Kolkata")

    scheduler.start()
    assert scheduler.running

    await scheduler.stop()
    assert not scheduler.running
