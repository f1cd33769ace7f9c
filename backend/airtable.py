"""Record source: fetch every record of an Airtable table as {"id", "fields"} dicts.

Without credentials the built-in mock records are served instead. Failures are
logged and turned into an empty list so the dashboard degrades to empty cards
rather than erroring.
"""

import copy
from typing import Any, Dict, List, Optional, Protocol

import requests

from config import (
    BOOKING_CAPACITY_TABLE,
    COVER_TRACKER_TABLE,
    FINANCIAL_OVERVIEW_TABLE,
    STAFF_SCHEDULING_TABLE,
    STOCK_INSIGHT_TABLE,
    config,
)
from logger import get_logger

logger = get_logger(__name__)

PAGE_SIZE = 100  # Airtable maximum
RawRecord = Dict[str, Any]


MOCK_DATA: Dict[str, List[RawRecord]] = {
    BOOKING_CAPACITY_TABLE: [
        {"id": "mock1", "fields": {"Date": "2024-06-01", "Time Slot": "12:00 PM", "Seats Available": 40,
                                   "Seats Booked": 80, "Occupancy Rate": 67, "Average Booking Lead Time": 3,
                                   "Booking Notes": "Birthday party of 12"}},
        {"id": "mock2", "fields": {"Date": "2024-06-01", "Time Slot": "7:00 PM", "Seats Available": 10,
                                   "Seats Booked": 110, "Occupancy Rate": 92, "Average Booking Lead Time": 6}},
        {"id": "mock3", "fields": {"Date": "2024-06-02", "Time Slot": "12:00 PM", "Seats Available": 60,
                                   "Seats Booked": 60, "Occupancy Rate": 50, "Average Booking Lead Time": 2}},
    ],
    COVER_TRACKER_TABLE: [
        {"id": "mock1", "fields": {"Date": "2024-06-01", "Day of Week": "Saturday", "Total Covers": 190,
                                   "Peak Time": "7:30 PM", "Dining Trend Notes": "Terrace full from 6pm"}},
        {"id": "mock2", "fields": {"Date": "2024-06-02", "Day of Week": "Sunday", "Total Covers": 175,
                                   "Peak Time": "1:00 PM", "Notes": "Sunday roast sold out"}},
    ],
    FINANCIAL_OVERVIEW_TABLE: [
        {"id": "mock1", "fields": {"Date": "2024-06-01", "Total Revenue": 8500, "Cost of Goods Sold (COGS)": 2800,
                                   "Operating Expenses": 3100, "Net Profit": 2600,
                                   "Revenue Breakdown": "60% dinner, 25% lunch, 15% bar"}},
        {"id": "mock2", "fields": {"Date": "2024-06-02", "Total Revenue": 7800, "Cost of Goods Sold (COGS)": 2550,
                                   "Operating Expenses": 2900, "Net Profit": 2350,
                                   "Revenue Breakdown": "Dinner: 55%, Lunch: 30%, Bar: 15%"}},
    ],
    STAFF_SCHEDULING_TABLE: [
        {"id": "mock1", "fields": {"Staff Name": "Sam Carter", "Role": "Chef", "Shift Start": "2024-06-01T10:00:00",
                                   "Shift End": "2024-06-01T18:00:00", "Forecasted Covers": 90,
                                   "Scheduled Hours": 8}},
        {"id": "mock2", "fields": {"Staff Name": "Priya Shah", "Role": "Server", "Shift Start": "2024-06-01T16:00:00",
                                   "Shift End": "2024-06-01T23:00:00", "Forecasted Covers": 120,
                                   "Scheduled Hours": 7}},
        {"id": "mock3", "fields": {"Staff Name": "Leo Martin", "Role": "Bartender", "Shift Start": "2024-06-01T20:00:00",
                                   "Shift End": "2024-06-02T01:00:00", "Forecasted Covers": 40,
                                   "Scheduled Hours": 5, "Notes": "Closing shift"}},
    ],
    STOCK_INSIGHT_TABLE: [
        {"id": "mock1", "fields": {"Item Name": "Ribeye Steak", "Category": "Meat", "Current Stock": 45,
                                   "Reorder Level": 20, "Usage Rate (per day)": 12,
                                   "Last Updated": "2024-06-01T08:00:00.000Z"}},
        {"id": "mock2", "fields": {"Item Name": "House Red Wine", "Category": "Beverage", "Current Stock": 18,
                                   "Reorder Level": 15, "Usage Rate (per day)": 6,
                                   "Last Updated": "2024-05-31T08:00:00.000Z"}},
        {"id": "mock3", "fields": {"Item Name": "House Red Wine", "Category": "Beverage", "Current Stock": 12,
                                   "Reorder Level": 15, "Usage Rate (per day)": 6, "Low Stock Alert": "Reorder",
                                   "Last Updated": "2024-06-01T08:00:00.000Z"}},
        {"id": "mock4", "fields": {"Item Name": "Arborio Rice", "Category": "Dry Goods", "Current Stock": 0,
                                   "Reorder Level": 5, "Usage Rate (per day)": 2, "Low Stock Alert": "Reorder",
                                   "Last Updated": "2024-06-01T08:00:00.000Z"}},
    ],
}


class RecordSource(Protocol):
    def fetch(self, table_name: str) -> List[RawRecord]:
        ...


class MockSource:
    """Serves MOCK_DATA; used when Airtable credentials are not configured."""

    def __init__(self, data: Optional[Dict[str, List[RawRecord]]] = None):
        self.data = MOCK_DATA if data is None else data

    def fetch(self, table_name: str) -> List[RawRecord]:
        logger.info(f"Using mock data for {table_name} (Airtable credentials not provided)")
        return copy.deepcopy(self.data.get(table_name, []))


class AirtableSource:
    def __init__(self, token: str, base_id: str, api_url: str = "https://api.airtable.com/v0",
                 timeout: int = 15, session: Optional[requests.Session] = None):
        self.base_id = base_id
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {token}"})

    def _table_url(self, table_name: str) -> str:
        # requests quotes the spaces in table names
        return f"{self.api_url}/{self.base_id}/{table_name}"

    def fetch(self, table_name: str) -> List[RawRecord]:
        """All records of a table, following Airtable's offset pagination. [] on any failure."""
        records: List[RawRecord] = []
        params: Dict[str, Any] = {"pageSize": PAGE_SIZE}
        try:
            while True:
                response = self.session.get(self._table_url(table_name), params=params, timeout=self.timeout)
                response.raise_for_status()
                payload = response.json()
                for record in payload.get("records", []):
                    records.append({"id": record.get("id", ""), "fields": record.get("fields") or {}})
                offset = payload.get("offset")
                if not offset:
                    break
                params["offset"] = offset
        except (requests.RequestException, ValueError, AttributeError) as e:
            logger.error(f"Error fetching records from {table_name}: {e}")
            return []

        logger.info(f"Fetched {len(records)} records from {table_name}")
        return records


_source: Optional[RecordSource] = None


def get_record_source() -> RecordSource:
    """Process-wide default source, built from config on first use."""
    global _source
    if _source is None:
        if config.use_mock_data:
            _source = MockSource()
        else:
            _source = AirtableSource(
                token=config.AIRTABLE_PERSONAL_ACCESS_TOKEN,
                base_id=config.AIRTABLE_BASE_ID,
                api_url=config.AIRTABLE_API_URL,
                timeout=config.AIRTABLE_TIMEOUT,
            )
    return _source


def fetch_records(table_name: str, source: Optional[RecordSource] = None) -> List[RawRecord]:
    return (source or get_record_source()).fetch(table_name)


def fetch_booking_capacity(source: Optional[RecordSource] = None) -> List[RawRecord]:
    return fetch_records(BOOKING_CAPACITY_TABLE, source)


def fetch_cover_tracker(source: Optional[RecordSource] = None) -> List[RawRecord]:
    return fetch_records(COVER_TRACKER_TABLE, source)


def fetch_financial_overview(source: Optional[RecordSource] = None) -> List[RawRecord]:
    records = fetch_records(FINANCIAL_OVERVIEW_TABLE, source)
    if not records:
        logger.warning("No financial overview records found")
    return records


def fetch_staff_scheduling(source: Optional[RecordSource] = None) -> List[RawRecord]:
    return fetch_records(STAFF_SCHEDULING_TABLE, source)


def fetch_stock_insight(source: Optional[RecordSource] = None) -> List[RawRecord]:
    return fetch_records(STOCK_INSIGHT_TABLE, source)
