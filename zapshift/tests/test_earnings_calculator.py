"""
Unit tests for the earnings calculator.

Pure functions only: parcels are plain namespaces, no database.
"""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from zapshift.app.domain.earnings.calculator import (
    CROSS_DISTRICT_EARNING,
    SAME_DISTRICT_EARNING,
    EarningWindows,
    earning_value,
    parcel_earning,
    parse_delivered_time,
    summarize_earnings,
    total_earning,
)
from zapshift.app.models.enums import DeliveryStatus

DHAKA = timezone(timedelta(hours=6))

# Wednesday 2026-10-21, 16:00 in Dhaka
NOW = datetime(2026, 10, 21, 10, 0, tzinfo=timezone.utc)


def make_parcel(sender="Dhaka", receiver="Dhaka", status=DeliveryStatus.DELIVERED, delivered_time=None):
    return SimpleNamespace(
        sender_district=sender,
        receiver_district=receiver,
        delivery_status=status,
        delivered_time=delivered_time,
    )


def test_same_district_delivery_earns_80():
    parcel = make_parcel("Dhaka", "Dhaka")
    assert parcel_earning(parcel) == 80
    assert SAME_DISTRICT_EARNING == 80


def test_cross_district_delivery_earns_150():
    parcel = make_parcel("Dhaka", "Khulna")
    assert parcel_earning(parcel) == 150
    assert CROSS_DISTRICT_EARNING == 150


def test_earning_value_compares_districts_exactly():
    assert earning_value("Dhaka", "dhaka") == CROSS_DISTRICT_EARNING
    assert earning_value(None, None) == SAME_DISTRICT_EARNING


def test_total_earning_ignores_incomplete_parcels():
    parcels = [
        make_parcel("Dhaka", "Dhaka"),
        make_parcel("Dhaka", "Khulna", status=DeliveryStatus.SERVICE_CENTER_DELIVERED),
        make_parcel("Dhaka", "Khulna", status=DeliveryStatus.IN_TRANSIT),
        make_parcel("Dhaka", "Dhaka", status=DeliveryStatus.RIDER_ASSIGNED),
    ]
    assert total_earning(parcels) == 230


def test_total_earning_of_nothing_is_zero():
    assert total_earning([]) == 0


class TestParseDeliveredTime:

    def test_iso_string_with_z_suffix(self):
        parsed = parse_delivered_time("2026-10-21T08:00:00Z")
        assert parsed == datetime(2026, 10, 21, 8, 0, tzinfo=timezone.utc)

    def test_naive_datetime_is_read_as_utc(self):
        parsed = parse_delivered_time(datetime(2026, 10, 21, 8, 0))
        assert parsed.tzinfo is not None
        assert parsed == datetime(2026, 10, 21, 8, 0, tzinfo=timezone.utc)

    def test_aware_datetime_is_kept(self):
        value = datetime(2026, 10, 21, 14, 0, tzinfo=DHAKA)
        assert parse_delivered_time(value) == value

    @pytest.mark.parametrize("value", [None, "", "not-a-date", 12345])
    def test_invalid_values_are_none(self, value):
        assert parse_delivered_time(value) is None


class TestEarningWindows:

    def test_windows_follow_local_calendar(self):
        windows = EarningWindows.at(NOW, DHAKA)

        assert windows.today_start == datetime(2026, 10, 21, tzinfo=DHAKA)
        assert windows.week_start == datetime(2026, 10, 18, tzinfo=DHAKA)
        assert windows.month_start == datetime(2026, 10, 1, tzinfo=DHAKA)

    def test_week_starts_today_on_sunday(self):
        sunday_noon = datetime(2026, 10, 18, 6, 0, tzinfo=timezone.utc)
        windows = EarningWindows.at(sunday_noon, DHAKA)

        assert windows.week_start == windows.today_start

    def test_saturday_belongs_to_week_started_previous_sunday(self):
        saturday = datetime(2026, 10, 24, 6, 0, tzinfo=timezone.utc)
        windows = EarningWindows.at(saturday, DHAKA)

        assert windows.week_start == datetime(2026, 10, 18, tzinfo=DHAKA)


class TestSummarizeEarnings:

    def test_summary_splits_windows(self):
        parcels = [
            # today (Dhaka)
            make_parcel("Dhaka", "Khulna", delivered_time=datetime(2026, 10, 21, 8, 0, tzinfo=timezone.utc)),
            # Monday this week
            make_parcel("Dhaka", "Dhaka", delivered_time=datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)),
            # earlier this month
            make_parcel("Dhaka", "Dhaka", delivered_time=datetime(2026, 10, 5, 12, 0, tzinfo=timezone.utc)),
            # last month
            make_parcel("Dhaka", "Khulna", delivered_time=datetime(2026, 9, 28, 12, 0, tzinfo=timezone.utc)),
            # completed, time unknown
            make_parcel("Dhaka", "Dhaka", delivered_time=None),
            # not completed
            make_parcel("Dhaka", "Khulna", status=DeliveryStatus.IN_TRANSIT),
        ]

        summary = summarize_earnings(parcels, total_cashed_out=150, now=NOW, tz=DHAKA)

        assert summary.total_earning == 540
        assert summary.total_cashed_out == 150
        assert summary.pending_amount == 390
        assert summary.today_earning == 150
        assert summary.weekly_earning == 230
        assert summary.monthly_earning == 310
        assert summary.completed_count == 5

    def test_delivery_before_local_midnight_is_not_today(self):
        # 01:00 on the 21st in Dhaka; the delivery was 23:00 on the 20th local time
        now = datetime(2026, 10, 20, 19, 0, tzinfo=timezone.utc)
        parcel = make_parcel(delivered_time=datetime(2026, 10, 20, 17, 0, tzinfo=timezone.utc))

        summary = summarize_earnings([parcel], total_cashed_out=0, now=now, tz=DHAKA)

        assert summary.today_earning == 0
        assert summary.weekly_earning == 80

    def test_delivery_at_week_start_counts_for_week(self):
        week_start_utc = datetime(2026, 10, 17, 18, 0, tzinfo=timezone.utc)
        parcel = make_parcel(delivered_time=week_start_utc)

        summary = summarize_earnings([parcel], total_cashed_out=0, now=NOW, tz=DHAKA)

        assert summary.weekly_earning == 80
        assert summary.today_earning == 0

    def test_string_delivered_times_are_accepted(self):
        parcel = make_parcel(delivered_time="2026-10-21T05:00:00+00:00")

        summary = summarize_earnings([parcel], total_cashed_out=0, now=NOW, tz=DHAKA)

        assert summary.today_earning == 80

    def test_no_parcels(self):
        summary = summarize_earnings([], total_cashed_out=0, now=NOW, tz=DHAKA)

        assert summary.total_earning == 0
        assert summary.pending_amount == 0
        assert summary.completed_count == 0
