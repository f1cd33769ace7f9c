"""Map raw Airtable records ({"id", "fields"}) to typed records, one function per table.

Each mapper returns one record per input record, in the same order. Fields
that are missing or the wrong shape come through as None; nothing here raises
on bad data.
"""

from typing import Any, Dict, List

from metrics import calculate_occupancy_rate, determine_stock_status
from schemas import BookingCapacity, CoverTracker, FinancialOverview, StaffSchedule, StockItem
from utils import parse_date, parse_datetime, to_number, to_text

RawRecord = Dict[str, Any]


def _fields(record: RawRecord) -> Dict[str, Any]:
    fields = record.get("fields")
    return fields if isinstance(fields, dict) else {}


def _id(record: RawRecord) -> str:
    return str(record.get("id", ""))


def map_booking_capacity(records: List[RawRecord]) -> List[BookingCapacity]:
    result = []
    for record in records:
        f = _fields(record)
        seats_available = to_number(f.get("Seats Available"))
        seats_booked = to_number(f.get("Seats Booked"))
        result.append(BookingCapacity(
            id=_id(record),
            date=parse_date(f.get("Date")),
            time_slot=to_text(f.get("Time Slot")),
            seats_available=seats_available,
            seats_booked=seats_booked,
            # upstream "Occupancy Rate" is ignored
            occupancy_rate=calculate_occupancy_rate(seats_available, seats_booked),
            average_lead_time=to_number(f.get("Average Booking Lead Time")),
            notes=to_text(f.get("Booking Notes")),
        ))
    return result


def map_cover_tracker(records: List[RawRecord]) -> List[CoverTracker]:
    result = []
    for record in records:
        f = _fields(record)
        result.append(CoverTracker(
            id=_id(record),
            date=parse_date(f.get("Date")),
            day_of_week=to_text(f.get("Day of Week")),
            total_covers=to_number(f.get("Total Covers")),
            peak_time=to_text(f.get("Peak Time")),
            dining_trend_notes=to_text(f.get("Dining Trend Notes")),
            notes=to_text(f.get("Notes")),
        ))
    return result


def map_financial_overview(records: List[RawRecord]) -> List[FinancialOverview]:
    result = []
    for record in records:
        f = _fields(record)
        result.append(FinancialOverview(
            id=_id(record),
            date=parse_date(f.get("Date")),
            total_revenue=to_number(f.get("Total Revenue")),
            cost_of_goods_sold=to_number(f.get("Cost of Goods Sold (COGS)")),
            operating_expenses=to_number(f.get("Operating Expenses")),
            net_profit=to_number(f.get("Net Profit")),
            revenue_breakdown=to_text(f.get("Revenue Breakdown")),
        ))
    return result


def map_staff_scheduling(records: List[RawRecord]) -> List[StaffSchedule]:
    result = []
    for record in records:
        f = _fields(record)
        result.append(StaffSchedule(
            id=_id(record),
            staff_name=to_text(f.get("Staff Name")),
            role=to_text(f.get("Role")),
            shift_start=parse_datetime(f.get("Shift Start")),
            shift_end=parse_datetime(f.get("Shift End")),
            forecasted_covers=to_number(f.get("Forecasted Covers")),
            scheduled_hours=to_number(f.get("Scheduled Hours")),
            notes=to_text(f.get("Notes")),
        ))
    return result


def map_stock_insight(records: List[RawRecord]) -> List[StockItem]:
    result = []
    for record in records:
        f = _fields(record)
        current_stock = to_number(f.get("Current Stock"))
        reorder_level = to_number(f.get("Reorder Level"))
        notes = to_text(f.get("Notes"))
        result.append(StockItem(
            id=_id(record),
            name=to_text(f.get("Item Name")),
            # The base keeps the display category in Notes; Category is the fallback
            category=notes or to_text(f.get("Category")),
            current_stock=current_stock,
            reorder_level=reorder_level,
            usage_rate=to_number(f.get("Usage Rate (per day)")),
            low_stock_alert=to_text(f.get("Low Stock Alert")),
            last_updated=parse_datetime(f.get("Last Updated")),
            status=determine_stock_status(current_stock, reorder_level),
            notes=notes,
        ))
    return result
