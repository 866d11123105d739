"""
Tests for calendar-day bucketing
================================
"""

from datetime import date, datetime
from types import SimpleNamespace

import pytest

from legal_diary.db.models import SyncStatus
from legal_diary.services.day_aggregator import aggregate_by_date, build_calendar_days
from legal_diary.utils.exceptions import ValidationError
from legal_diary.utils.helpers import month_range


def hearing(hid, day, time=None, synced=False):
    sync = SimpleNamespace(sync_status=SyncStatus.SYNCED) if synced else None
    return SimpleNamespace(id=hid, case_id="c", hearing_date=day, hearing_time=time, calendar_sync=sync)


class TestAggregateByDate:
    def test_buckets_by_calendar_day(self):
        hearings = [
            hearing("h1", datetime(2026, 1, 5, 0, 0)),
            hearing("h2", datetime(2026, 1, 5, 23, 59)),
            hearing("h3", datetime(2026, 1, 6)),
        ]

        buckets = aggregate_by_date(hearings)

        assert list(buckets) == [date(2026, 1, 5), date(2026, 1, 6)]
        assert {h.id for h in buckets[date(2026, 1, 5)]} == {"h1", "h2"}

    def test_range_fills_empty_days(self):
        buckets = aggregate_by_date([hearing("h1", datetime(2026, 1, 6))], date(2026, 1, 5), date(2026, 1, 7))

        assert list(buckets) == [date(2026, 1, 5), date(2026, 1, 6), date(2026, 1, 7)]
        assert buckets[date(2026, 1, 5)] == []

    def test_ordered_by_time_untimed_last(self):
        day = datetime(2026, 1, 5)
        hearings = [
            hearing("untimed-1", day),
            hearing("afternoon", day, "2:30 PM"),
            hearing("untimed-2", day, ""),
            hearing("morning", day, "10:15"),
        ]

        bucket = aggregate_by_date(hearings)[date(2026, 1, 5)]

        assert [h.id for h in bucket] == ["morning", "afternoon", "untimed-1", "untimed-2"]

    def test_nothing_lost_or_duplicated(self):
        hearings = [hearing(f"h{i}", datetime(2026, 1, 1 + i % 5), f"{9 + i % 4}:00") for i in range(20)]

        buckets = aggregate_by_date(hearings)

        assert sum(len(b) for b in buckets.values()) == len(hearings)
        assert sorted(h.id for b in buckets.values() for h in b) == sorted(h.id for h in hearings)

    def test_duplicate_hearing_rejected(self):
        h = hearing("h1", datetime(2026, 1, 5))
        with pytest.raises(ValidationError):
            aggregate_by_date([h, h])

    def test_missing_date_rejected(self):
        with pytest.raises(ValidationError):
            aggregate_by_date([hearing("h1", None)])

    def test_bad_time_rejected(self):
        with pytest.raises(ValidationError):
            aggregate_by_date([hearing("h1", datetime(2026, 1, 5), "25:99")])

    def test_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            aggregate_by_date([hearing("h1", datetime(2026, 2, 1))], date(2026, 1, 1), date(2026, 1, 31))

    def test_half_open_range_rejected(self):
        with pytest.raises(ValidationError):
            aggregate_by_date([], date(2026, 1, 1), None)


class TestBuildCalendarDays:
    def test_month_grid(self):
        date_from, date_to = month_range(2026, 1)
        hearings = [
            hearing("h1", datetime(2026, 1, 5), "10:00", synced=True),
            hearing("h2", datetime(2026, 1, 5), "11:00"),
            hearing("h3", datetime(2026, 1, 1)),
        ]

        days = build_calendar_days(hearings, date_from, date_to)

        assert len(days) == 31
        jan1, jan5 = days[0], days[4]
        assert jan1.day_status.label == "New Year's Day"
        assert jan1.hearing_count == 1
        assert jan5.synced_count == 1
        assert jan5.unsynced_count == 1
        assert days[1].hearing_count == 0

    def test_custom_sync_predicate(self):
        day = date(2026, 1, 5)
        days = build_calendar_days([hearing("h1", datetime(2026, 1, 5))], day, day, is_synced=lambda h: True)

        assert days[0].synced_count == 1
        assert days[0].unsynced_count == 0

    def test_requires_range(self):
        with pytest.raises(ValidationError):
            build_calendar_days([], None, None)
