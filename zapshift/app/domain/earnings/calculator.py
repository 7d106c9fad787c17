"""
Earnings Calculator (Domain Logic).

Pure functions over parcel records: no database access, no side effects.

Rules:
- A completed parcel earns 80 when picked up and dropped in the same
  district, 150 across districts.
- Windowed subtotals use the parcel's delivered time in the local calendar:
  today starts at midnight, the week on the most recent Sunday, the month
  on its first day.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any, Iterable, Optional

from zapshift.app.models.enums import COMPLETED_STATUSES

SAME_DISTRICT_EARNING = 80
CROSS_DISTRICT_EARNING = 150


def earning_value(sender_district: Optional[str], receiver_district: Optional[str]) -> int:
    """Earning of a single delivery, from its district pair."""
    if sender_district == receiver_district:
        return SAME_DISTRICT_EARNING
    return CROSS_DISTRICT_EARNING


def parcel_earning(parcel: Any) -> int:
    return earning_value(parcel.sender_district, parcel.receiver_district)


def is_completed(parcel: Any) -> bool:
    return parcel.delivery_status in COMPLETED_STATUSES


def total_earning(parcels: Iterable[Any]) -> int:
    """Lifetime earning over the completed parcels in `parcels`."""
    return sum(parcel_earning(p) for p in parcels if is_completed(p))


def parse_delivered_time(value: Any) -> Optional[datetime]:
    """
    Normalize a delivered timestamp to an aware datetime.

    Naive datetimes are read as UTC. Returns None for missing or
    unparseable values.
    """
    if value is None:
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class EarningWindows:
    """Start instants of the local today / week / month windows."""
    today_start: datetime
    week_start: datetime
    month_start: datetime

    @classmethod
    def at(cls, now: datetime, tz: tzinfo) -> "EarningWindows":
        local_now = now.astimezone(tz)
        today_start = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
        # Python weekday(): Monday=0 ... Sunday=6
        days_since_sunday = (today_start.weekday() + 1) % 7
        week_start = today_start - timedelta(days=days_since_sunday)
        month_start = today_start.replace(day=1)
        return cls(today_start=today_start, week_start=week_start, month_start=month_start)


@dataclass(frozen=True)
class EarningsSummary:
    total_earning: float
    total_cashed_out: float
    pending_amount: float
    today_earning: float
    weekly_earning: float
    monthly_earning: float
    completed_count: int


def summarize_earnings(
    parcels: Iterable[Any],
    total_cashed_out: float,
    now: datetime,
    tz: tzinfo,
) -> EarningsSummary:
    """
    Compute a rider's earnings summary.

    Args:
        parcels: Parcels assigned to the rider; non-completed ones are ignored
        total_cashed_out: Amount the rider has already withdrawn
        now: Current instant (aware)
        tz: Local timezone defining the calendar windows

    Returns:
        EarningsSummary with pending = total - cashed out
    """
    windows = EarningWindows.at(now, tz)

    total = today = weekly = monthly = 0
    count = 0
    for parcel in parcels:
        if not is_completed(parcel):
            continue
        amount = parcel_earning(parcel)
        total += amount
        count += 1

        delivered = parse_delivered_time(parcel.delivered_time)
        if delivered is None:
            continue
        if delivered >= windows.today_start:
            today += amount
        if delivered >= windows.week_start:
            weekly += amount
        if delivered >= windows.month_start:
            monthly += amount

    return EarningsSummary(
        total_earning=total,
        total_cashed_out=total_cashed_out,
        pending_amount=total - total_cashed_out,
        today_earning=today,
        weekly_earning=weekly,
        monthly_earning=monthly,
        completed_count=count,
    )
