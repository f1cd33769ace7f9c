"""Typed records for the five Airtable tables and the view-models derived from them.

Every model is frozen: a fetch cycle produces fresh records and nothing mutates them.
Fields the upstream row lacks (or carries in an unusable shape) are None.
"""

import datetime as dt
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class Record(BaseModel):
    model_config = ConfigDict(frozen=True)


class StockStatus(str, Enum):
    IN_STOCK = "In Stock"
    LOW_STOCK = "Low Stock"
    OUT_OF_STOCK = "Out of Stock"


# ===== BOOKINGS =====

class BookingCapacity(Record):
    id: str
    date: Optional[dt.date] = None
    time_slot: Optional[str] = None
    seats_available: Optional[float] = None
    seats_booked: Optional[float] = None
    occupancy_rate: int = 0  # recomputed from seat counts, never read from upstream
    average_lead_time: Optional[float] = None
    notes: Optional[str] = None


class OccupancyData(Record):
    total_seats: Optional[float] = None
    booked_seats: Optional[float] = None
    occupancy_rate: int = 0
    average_lead_time: Optional[float] = None


# ===== COVERS =====

class CoverTracker(Record):
    id: str
    date: Optional[dt.date] = None
    day_of_week: Optional[str] = None
    total_covers: Optional[float] = None
    peak_time: Optional[str] = None  # free text, "H:MM AM/PM"
    dining_trend_notes: Optional[str] = None
    notes: Optional[str] = None


class CoverData(Record):
    hour: int
    covers: int


class PeakTimeData(Record):
    day: Optional[str] = None
    covers: List[CoverData]
    peak_time: Optional[str] = None
    total_covers: Optional[float] = None


# ===== FINANCIALS =====

class FinancialOverview(Record):
    id: str
    date: Optional[dt.date] = None
    total_revenue: Optional[float] = None
    cost_of_goods_sold: Optional[float] = None
    operating_expenses: Optional[float] = None
    net_profit: Optional[float] = None
    revenue_breakdown: Optional[str] = None


class FinancialMetrics(Record):
    total_revenue: Optional[float] = None
    cost_of_goods_sold: Optional[float] = None
    operating_expenses: Optional[float] = None
    net_profit: Optional[float] = None


class RevenueBreakdown(Record):
    category: str
    percentage: float
    amount: float


# ===== STAFF =====

class StaffSchedule(Record):
    id: str
    staff_name: Optional[str] = None
    role: Optional[str] = None
    shift_start: Optional[dt.datetime] = None
    shift_end: Optional[dt.datetime] = None
    forecasted_covers: Optional[float] = None
    scheduled_hours: Optional[float] = None
    notes: Optional[str] = None


class StaffingForecast(Record):
    hour: int
    forecasted_covers: int
    scheduled_staff: int
    recommended_staff: int


# ===== STOCK =====

class StockItem(Record):
    id: str
    name: Optional[str] = None
    category: Optional[str] = None
    current_stock: Optional[float] = None
    reorder_level: Optional[float] = None
    usage_rate: Optional[float] = None  # units per day
    low_stock_alert: Optional[str] = None
    last_updated: Optional[dt.datetime] = None
    status: StockStatus
    notes: Optional[str] = None
