"""Derived metrics for the dashboard cards.

Every function here is a pure function of its arguments: no I/O, no shared
state, and the same input always gives the same output. Bad or missing input
never raises; it yields an empty list, None, or a documented default.
"""

import math
import re
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone, tzinfo
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

from logger import get_logger
from schemas import (
    BookingCapacity,
    CoverData,
    CoverTracker,
    FinancialMetrics,
    FinancialOverview,
    OccupancyData,
    PeakTimeData,
    RevenueBreakdown,
    StaffingForecast,
    StaffSchedule,
    StockItem,
    StockStatus,
)
from utils import round_half_up

logger = get_logger(__name__)

DEFAULT_PEAK_HOUR = 12
# Relative hour offset from the peak -> share of traffic. Approximation only:
# the cover tracker records a daily total and a peak time, not hourly counts.
COVER_DISTRIBUTION = [
    (-3, 0.2),
    (-2, 0.4),
    (-1, 0.7),
    (0, 1.0),
    (1, 0.8),
    (2, 0.5),
    (3, 0.3),
]
COVERS_PER_STAFF = 20

PEAK_TIME_PATTERN = re.compile(r"(\d+):(\d+)\s*(AM|PM)", re.IGNORECASE)
# Tried in this order; the first match wins.
BREAKDOWN_PATTERNS = [
    (re.compile(r"(\d+(?:\.\d+)?)%\s+(.*)"), "pct_first"),   # "60% dinner"
    (re.compile(r"(.*?):\s*(\d+(?:\.\d+)?)%"), "category_first"),  # "Dinner: 60%"
    (re.compile(r"(\d+(?:\.\d+)?)%\s*-\s*(.*)"), "pct_first"),    # "60%-Dinner"
]


# ===== OCCUPANCY =====

def calculate_occupancy_rate(seats_available: Optional[float], seats_booked: Optional[float]) -> int:
    if seats_available is None or seats_booked is None:
        return 0
    total = seats_available + seats_booked
    return round_half_up(seats_booked / total * 100) if total > 0 else 0


def calculate_occupancy(booking: BookingCapacity) -> OccupancyData:
    """Occupancy snapshot for one time slot: booked / (booked + available)."""
    total_seats = None
    if booking.seats_available is not None and booking.seats_booked is not None:
        total_seats = booking.seats_available + booking.seats_booked
    return OccupancyData(
        total_seats=total_seats,
        booked_seats=booking.seats_booked,
        occupancy_rate=calculate_occupancy_rate(booking.seats_available, booking.seats_booked),
        average_lead_time=booking.average_lead_time,
    )


# ===== COVERS / PEAK TIME =====

def peak_time_to_hour(peak_time: Optional[str]) -> int:
    """Turn "H:MM AM/PM" into a 0-23 hour. Unreadable text means noon."""
    match = PEAK_TIME_PATTERN.search(peak_time) if isinstance(peak_time, str) else None
    if not match:
        logger.debug(f"Could not parse peak time {peak_time!r}, defaulting to {DEFAULT_PEAK_HOUR}:00")
        return DEFAULT_PEAK_HOUR

    hour = int(match.group(1))
    is_pm = match.group(3).upper() == "PM"
    if is_pm and hour != 12:
        hour += 12
    if not is_pm and hour == 12:
        hour = 0
    return hour


def normalize_hour(hour: int) -> int:
    return ((hour % 24) + 24) % 24


def generate_cover_data(tracker: CoverTracker) -> List[CoverData]:
    """Spread a day's total covers over the seven hours around its peak.

    Hours near midnight wrap and may repeat; entries are not merged. Rounded
    bucket counts only approximately add up to the total.
    """
    if tracker.total_covers is None:
        logger.warning(f"Cover tracker {tracker.id} has no usable Total Covers, skipping distribution")
        return []

    peak_hour = peak_time_to_hour(tracker.peak_time)
    weight_sum = sum(weight for _, weight in COVER_DISTRIBUTION)
    return [
        CoverData(
            hour=normalize_hour(peak_hour + offset),
            covers=round_half_up(tracker.total_covers * weight / weight_sum),
        )
        for offset, weight in COVER_DISTRIBUTION
    ]


def create_peak_time_data(tracker: CoverTracker, cover_data: List[CoverData]) -> PeakTimeData:
    return PeakTimeData(
        day=tracker.day_of_week,
        covers=cover_data,
        peak_time=tracker.peak_time,
        total_covers=tracker.total_covers,
    )


# ===== FINANCIALS =====

def calculate_financial_metrics(overview: FinancialOverview) -> FinancialMetrics:
    return FinancialMetrics(
        total_revenue=overview.total_revenue,
        cost_of_goods_sold=overview.cost_of_goods_sold,
        operating_expenses=overview.operating_expenses,
        net_profit=overview.net_profit,
    )


def parse_revenue_breakdown(breakdown: Optional[str]) -> List[RevenueBreakdown]:
    """Parse comma-separated revenue shares into (category, percentage) items.

    Accepts "60% dinner", "Dinner: 60%" and "60%-Dinner". A spaced dash
    ("60% - Dinner") is taken by the first shape, so the category keeps its
    leading "- ". Parts matching none of these are dropped with a warning.
    Amounts are left at 0; see calculate_revenue_breakdown.
    """
    if not breakdown or not isinstance(breakdown, str):
        logger.warning(f"Invalid revenue breakdown string: {breakdown!r}")
        return []

    result = []
    for part in (p.strip() for p in breakdown.split(",")):
        for pattern, order in BREAKDOWN_PATTERNS:
            match = pattern.search(part)
            if match:
                break
        else:
            logger.warning(f"Could not parse revenue breakdown part: {part!r}")
            continue

        if order == "pct_first":
            percentage, category = match.group(1), match.group(2)
        else:
            category, percentage = match.group(1), match.group(2)
        result.append(RevenueBreakdown(
            category=category.strip(),
            percentage=float(percentage),
            amount=0,
        ))

    return result


def calculate_revenue_breakdown(overview: Optional[FinancialOverview]) -> List[RevenueBreakdown]:
    """Revenue split by category, with amount = total revenue * percentage / 100.

    If nothing in the breakdown text parses but revenue is positive, the whole
    revenue is reported as a single "Total Revenue" entry.
    """
    if overview is None:
        logger.warning("Missing financial overview data")
        return []
    if not overview.revenue_breakdown:
        logger.warning(f"Financial overview {overview.id} has no revenue breakdown")
        return []
    if overview.total_revenue is None:
        logger.warning(f"Financial overview {overview.id} has invalid total revenue")
        return []

    total = overview.total_revenue
    breakdown = parse_revenue_breakdown(overview.revenue_breakdown)
    if not breakdown:
        if total > 0:
            return [RevenueBreakdown(category="Total Revenue", percentage=100, amount=total)]
        return []

    return [
        RevenueBreakdown(
            category=item.category,
            percentage=item.percentage,
            amount=total * item.percentage / 100,
        )
        for item in breakdown
    ]


class PeriodView(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


def filter_financials_by_view(overviews: Iterable[FinancialOverview], day: date,
                              view: PeriodView = PeriodView.DAY) -> List[FinancialOverview]:
    """Overviews in the day, Monday-to-Sunday week, or calendar month of `day`, newest first."""
    if view == PeriodView.WEEK:
        start = day - timedelta(days=day.weekday())
        end = start + timedelta(days=6)
        selected = [o for o in overviews if o.date and start <= o.date <= end]
    elif view == PeriodView.MONTH:
        selected = [o for o in overviews if o.date and (o.date.year, o.date.month) == (day.year, day.month)]
    else:
        selected = [o for o in overviews if o.date == day]

    selected.sort(key=lambda o: o.date, reverse=True)
    return selected


def aggregate_financial_metrics(overviews: Iterable[FinancialOverview]) -> FinancialMetrics:
    """Sum the headline numbers across several days. Missing values count as 0."""
    totals = {"total_revenue": 0.0, "cost_of_goods_sold": 0.0, "operating_expenses": 0.0, "net_profit": 0.0}
    for overview in overviews:
        for key in totals:
            totals[key] += getattr(overview, key) or 0
    return FinancialMetrics(**totals)


# ===== STAFFING =====

def wall_clock(moment: datetime, tz: Optional[tzinfo] = None) -> datetime:
    if tz is not None and moment.tzinfo is not None:
        return moment.astimezone(tz)
    return moment


def shift_hours(start: datetime, end: datetime, tz: Optional[tzinfo] = None) -> List[int]:
    """Clock hours a shift touches, both ends inclusive. Shifts past midnight wrap."""
    start_hour = wall_clock(start, tz).hour
    end_hour = wall_clock(end, tz).hour
    if end_hour >= start_hour:
        return list(range(start_hour, end_hour + 1))
    return list(range(start_hour, 24)) + list(range(0, end_hour + 1))


def generate_staffing_forecast(schedules: Iterable[StaffSchedule],
                               tz: Optional[tzinfo] = None) -> List[StaffingForecast]:
    """Hourly staff on shift versus staff needed for the forecast covers.

    Each shift counts one person in every hour it touches, and its forecast
    covers are split evenly across those hours. One staff member is
    recommended per 20 covers, rounded up. Only hours with someone on shift
    are returned, sorted by hour.
    """
    staff_by_hour: Dict[int, int] = defaultdict(int)
    covers_by_hour: Dict[int, float] = defaultdict(float)

    for schedule in schedules:
        if schedule.shift_start is None or schedule.shift_end is None:
            logger.warning(f"Skipping staff schedule {schedule.id}: unparseable shift start/end")
            continue

        hours = shift_hours(schedule.shift_start, schedule.shift_end, tz)
        covers_per_hour = (schedule.forecasted_covers or 0) / len(hours)
        for hour in hours:
            staff_by_hour[hour] += 1
            covers_by_hour[hour] += covers_per_hour

    forecast = []
    for hour in sorted(staff_by_hour):
        forecasted_covers = round_half_up(covers_by_hour[hour])
        forecast.append(StaffingForecast(
            hour=hour,
            forecasted_covers=forecasted_covers,
            scheduled_staff=staff_by_hour[hour],
            recommended_staff=math.ceil(forecasted_covers / COVERS_PER_STAFF),
        ))
    return forecast


def calculate_total_scheduled_hours(schedules: Iterable[StaffSchedule]) -> float:
    return sum(s.scheduled_hours for s in schedules if s.scheduled_hours is not None)


def schedules_for_date(schedules: Iterable[StaffSchedule], day: date,
                       tz: Optional[tzinfo] = None) -> List[StaffSchedule]:
    return [
        s for s in schedules
        if s.shift_start is not None and wall_clock(s.shift_start, tz).date() == day
    ]


# ===== STOCK =====

def determine_stock_status(current_stock: Optional[float], reorder_level: Optional[float]) -> StockStatus:
    """Out of stock at or below zero, low at or below the reorder level, otherwise in stock.

    A missing stock count is treated as zero; a missing reorder level as zero.
    Upstream compares the missing count as-is and reports such items In Stock.
    """
    current = current_stock if current_stock is not None else 0
    reorder = reorder_level if reorder_level is not None else 0
    if current <= 0:
        return StockStatus.OUT_OF_STOCK
    if current <= reorder:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


def _instant(moment: datetime) -> datetime:
    """Naive UTC for aware datetimes so mixed naive/aware values compare."""
    if moment.tzinfo is not None:
        return moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


def select_current_snapshot(items: Iterable[StockItem]) -> List[StockItem]:
    """Latest snapshot per item name.

    Ties on last_updated keep the first one seen; a dated snapshot always
    beats an undated one.
    """
    latest: Dict[Optional[str], StockItem] = {}
    for item in items:
        existing = latest.get(item.name)
        if existing is None:
            latest[item.name] = item
        elif item.last_updated is not None and (
            existing.last_updated is None
            or _instant(item.last_updated) > _instant(existing.last_updated)
        ):
            latest[item.name] = item
    return list(latest.values())


def select_low_stock(items: Iterable[StockItem]) -> List[StockItem]:
    return [i for i in items if i.status in (StockStatus.LOW_STOCK, StockStatus.OUT_OF_STOCK)]


def get_low_stock_items(items: Iterable[StockItem]) -> List[StockItem]:
    return select_low_stock(select_current_snapshot(items))


def stock_as_of(items: Iterable[StockItem], moment: datetime) -> List[StockItem]:
    """Drop snapshots taken after `moment` (and ones with no readable timestamp)."""
    cutoff = _instant(moment)
    return [i for i in items if i.last_updated is not None and _instant(i.last_updated) <= cutoff]


def filter_stock_items(items: Iterable[StockItem], search: Optional[str] = None,
                       category: Optional[str] = None,
                       status: Optional[StockStatus] = None) -> List[StockItem]:
    result = list(items)
    if search:
        needle = search.lower()
        result = [
            i for i in result
            if needle in (i.name or "").lower() or needle in (i.category or "").lower()
        ]
    if category:
        result = [i for i in result if i.category == category]
    if status:
        result = [i for i in result if i.status == status]
    return result


# ===== DATE SCOPING =====

def latest_by_date(records: Sequence):
    """Record with the most recent date; the first one wins ties. None if empty."""
    latest = None
    for record in records:
        if latest is None:
            latest = record
        elif record.date is not None and (latest.date is None or record.date > latest.date):
            latest = record
    return latest


def find_for_date(records: Iterable, day: date):
    return next((r for r in records if r.date == day), None)
