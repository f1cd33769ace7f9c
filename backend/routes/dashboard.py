from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from datetime import date, datetime, time
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from airtable import (
    RecordSource,
    get_record_source,
    fetch_booking_capacity,
    fetch_cover_tracker,
    fetch_financial_overview,
    fetch_staff_scheduling,
    fetch_stock_insight,
)
from config import config
from logger import get_logger
from mappers import (
    map_booking_capacity,
    map_cover_tracker,
    map_financial_overview,
    map_staff_scheduling,
    map_stock_insight,
)
from metrics import (
    PeriodView,
    aggregate_financial_metrics,
    calculate_financial_metrics,
    calculate_occupancy,
    calculate_revenue_breakdown,
    calculate_total_scheduled_hours,
    create_peak_time_data,
    filter_financials_by_view,
    filter_stock_items,
    find_for_date,
    generate_cover_data,
    generate_staffing_forecast,
    latest_by_date,
    schedules_for_date,
    select_current_snapshot,
    select_low_stock,
    stock_as_of,
)
from schemas import StockStatus
from sessions import require_user
from utils import parse_date

logger = get_logger(__name__)

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"], dependencies=[Depends(require_user)])


def dashboard_timezone():
    """Zone used to read shift hours, or None to take them as written."""
    if not config.DASHBOARD_TIMEZONE:
        return None
    try:
        return ZoneInfo(config.DASHBOARD_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown DASHBOARD_TIMEZONE {config.DASHBOARD_TIMEZONE!r}, using shift times as written")
        return None


def parse_query_date(value: Optional[str]) -> Optional[date]:
    if value is None:
        return None
    day = parse_date(value)
    if day is None:
        raise HTTPException(400, f"Invalid date: {value!r} (expected YYYY-MM-DD)")
    return day


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, time.max)


def cover_views(trackers):
    """(peak_time_data, flat cover_data) for a list of cover trackers."""
    peak_time_data = []
    cover_data = []
    for tracker in trackers:
        covers = generate_cover_data(tracker)
        cover_data.extend(covers)
        peak_time_data.append(create_peak_time_data(tracker, covers))
    return peak_time_data, cover_data


def current_stock(items, day: Optional[date] = None):
    """Latest snapshot per item, ignoring snapshots dated after `day` (or after now)."""
    cutoff = end_of_day(day) if day else datetime.utcnow()
    return select_current_snapshot(stock_as_of(items, cutoff))


def build_dashboard_data(source: RecordSource, day: Optional[date] = None) -> dict:
    """All dashboard view-models.

    Without a day, the latest booking and financial records drive occupancy
    and metrics, and every tracker and schedule contributes. With a day, each
    table is narrowed to that date first.
    """
    tz = dashboard_timezone()
    bookings = map_booking_capacity(fetch_booking_capacity(source))
    trackers = map_cover_tracker(fetch_cover_tracker(source))
    overviews = map_financial_overview(fetch_financial_overview(source))
    stock_items = map_stock_insight(fetch_stock_insight(source))
    schedules = map_staff_scheduling(fetch_staff_scheduling(source))

    if day is None:
        booking = latest_by_date(bookings)
        overview = latest_by_date(overviews)
    else:
        bookings = [b for b in bookings if b.date == day]
        trackers = [t for t in trackers if t.date == day][:1]
        overviews = [o for o in overviews if o.date == day]
        schedules = schedules_for_date(schedules, day, tz)
        booking = find_for_date(bookings, day)
        overview = find_for_date(overviews, day)

    peak_time_data, cover_data = cover_views(trackers)
    stock = current_stock(stock_items, day)

    return {
        "booking_capacities": bookings,
        "occupancy": calculate_occupancy(booking) if booking else None,
        "cover_trackers": trackers,
        "peak_time_data": peak_time_data,
        "cover_data": cover_data,
        "financial_overviews": overviews,
        "financial_metrics": calculate_financial_metrics(overview) if overview else None,
        "revenue_breakdown": calculate_revenue_breakdown(overview) if overview else [],
        "stock_items": stock,
        "low_stock_items": select_low_stock(stock),
        "staff_schedules": schedules,
        "total_scheduled_hours": calculate_total_scheduled_hours(schedules),
        "staffing_forecast": generate_staffing_forecast(schedules, tz),
        "last_updated": datetime.utcnow().isoformat(),
    }


@router.get("")
def get_dashboard(
    day: Optional[str] = Query(None, alias="date"),
    source: RecordSource = Depends(get_record_source),
):
    """Every dashboard card in one response, optionally for a single date."""
    selected = parse_query_date(day)
    try:
        data = build_dashboard_data(source, selected)
    except Exception:
        logger.exception("Failed to build dashboard data")
        return JSONResponse(status_code=500, content={"success": False, "error": "Failed to fetch dashboard data"})
    return {"success": True, "data": data}


@router.get("/booking-capacity")
def booking_capacity(source: RecordSource = Depends(get_record_source)):
    """Booking capacity records plus occupancy for the most recent date."""
    bookings = map_booking_capacity(fetch_booking_capacity(source))
    latest = latest_by_date(bookings)
    return {
        "booking_capacities": bookings,
        "occupancy_data": calculate_occupancy(latest) if latest else None,
    }


@router.get("/cover-tracker")
def cover_tracker(source: RecordSource = Depends(get_record_source)):
    trackers = map_cover_tracker(fetch_cover_tracker(source))
    peak_time_data, cover_data = cover_views(trackers)
    return {
        "cover_trackers": trackers,
        "peak_time_data": peak_time_data,
        "cover_data": cover_data,
    }


@router.get("/financial-overview")
def financial_overview(
    day: Optional[str] = Query(None, alias="date"),
    view: str = Query("day"),
    source: RecordSource = Depends(get_record_source),
):
    """Financial records, headline metrics and revenue split for the latest day.

    With a date, also the records and summed metrics for the day, week
    (Monday to Sunday) or month around it.
    """
    selected = parse_query_date(day)
    try:
        period_view = PeriodView(view)
    except ValueError:
        raise HTTPException(400, f"Invalid view: {view!r} (expected day, week or month)")

    overviews = map_financial_overview(fetch_financial_overview(source))
    latest = latest_by_date(overviews)
    result = {
        "financial_overviews": overviews,
        "financial_metrics": calculate_financial_metrics(latest) if latest else None,
        "revenue_breakdown": calculate_revenue_breakdown(latest) if latest else [],
    }
    if selected:
        period = filter_financials_by_view(overviews, selected, period_view)
        result["period_overviews"] = period
        result["period_metrics"] = aggregate_financial_metrics(period)
    return result


@router.get("/staff-scheduling")
def staff_scheduling(source: RecordSource = Depends(get_record_source)):
    schedules = map_staff_scheduling(fetch_staff_scheduling(source))
    return {
        "staff_schedules": schedules,
        "total_scheduled_hours": calculate_total_scheduled_hours(schedules),
        "staffing_forecast": generate_staffing_forecast(schedules, dashboard_timezone()),
    }


@router.get("/stock-insight")
def stock_insight(
    search: Optional[str] = None,
    category: Optional[str] = None,
    status: Optional[StockStatus] = None,
    source: RecordSource = Depends(get_record_source),
):
    """Current stock (one snapshot per item, none from the future) and low-stock alerts."""
    stock = current_stock(map_stock_insight(fetch_stock_insight(source)))
    return {
        "stock_items": filter_stock_items(stock, search=search, category=category, status=status),
        "low_stock_alerts": select_low_stock(stock),
    }
