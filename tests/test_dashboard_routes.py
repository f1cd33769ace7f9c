from config import BOOKING_CAPACITY_TABLE, COVER_TRACKER_TABLE, STOCK_INSIGHT_TABLE
from conftest import FakeSource, raw

DASHBOARD_KEYS = {
    "booking_capacities",
    "occupancy",
    "cover_trackers",
    "peak_time_data",
    "cover_data",
    "financial_overviews",
    "financial_metrics",
    "revenue_breakdown",
    "stock_items",
    "low_stock_items",
    "staff_schedules",
    "total_scheduled_hours",
    "staffing_forecast",
    "last_updated",
}


class BrokenSource:
    def fetch(self, table_name):
        raise RuntimeError("boom")


def test_dashboard_requires_login(client, mock_source):
    assert client.get("/api/dashboard").status_code == 401
    assert client.get("/api/dashboard/stock-insight").status_code == 401
    resp = client.get("/api/dashboard", headers={"Authorization": "Bearer nope"})
    assert resp.status_code == 401


def test_dashboard_latest(client, mock_source, staff_headers):
    resp = client.get("/api/dashboard", headers=staff_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    data = body["data"]
    assert set(data) == DASHBOARD_KEYS

    # Latest booking and financial rows are from 2024-06-02
    assert data["occupancy"]["occupancy_rate"] == 50
    assert data["financial_metrics"]["total_revenue"] == 7800
    assert [r["category"] for r in data["revenue_breakdown"]] == ["Dinner", "Lunch", "Bar"]
    assert data["revenue_breakdown"][0]["amount"] == 4290

    assert len(data["cover_trackers"]) == 2
    assert len(data["cover_data"]) == 14
    assert [p["day"] for p in data["peak_time_data"]] == ["Saturday", "Sunday"]

    assert len(data["stock_items"]) == 3
    assert [i["name"] for i in data["low_stock_items"]] == ["House Red Wine", "Arborio Rice"]
    assert {i["status"] for i in data["low_stock_items"]} == {"Low Stock", "Out of Stock"}

    assert data["total_scheduled_hours"] == 20
    hours = [f["hour"] for f in data["staffing_forecast"]]
    assert hours == sorted(hours)
    assert hours == [0, 1] + list(range(10, 24))


def test_dashboard_for_date(client, mock_source, staff_headers):
    data = client.get("/api/dashboard?date=2024-06-01", headers=staff_headers).json()["data"]
    assert len(data["booking_capacities"]) == 2
    assert data["occupancy"]["occupancy_rate"] == 67
    assert [t["day_of_week"] for t in data["cover_trackers"]] == ["Saturday"]
    assert len(data["cover_data"]) == 7
    assert data["financial_metrics"]["total_revenue"] == 8500
    assert [r["amount"] for r in data["revenue_breakdown"]] == [5100, 2125, 1275]
    assert len(data["staff_schedules"]) == 3

    wine = [i for i in data["stock_items"] if i["name"] == "House Red Wine"]
    assert [w["id"] for w in wine] == ["mock3"]


def test_dashboard_for_date_ignores_later_stock(client, mock_source, staff_headers):
    data = client.get("/api/dashboard?date=2024-05-31", headers=staff_headers).json()["data"]
    assert data["occupancy"] is None
    assert data["financial_metrics"] is None
    assert data["revenue_breakdown"] == []
    assert data["staffing_forecast"] == []
    assert [(i["name"], i["current_stock"]) for i in data["stock_items"]] == [("House Red Wine", 18)]
    assert data["low_stock_items"] == []


def test_dashboard_bad_date(client, mock_source, staff_headers):
    resp = client.get("/api/dashboard?date=31/05/2024", headers=staff_headers)
    assert resp.status_code == 400
    assert "Invalid date" in resp.json()["detail"]


def test_dashboard_failure_envelope(client, use_source, staff_headers):
    use_source(BrokenSource())
    resp = client.get("/api/dashboard", headers=staff_headers)
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "Failed to fetch dashboard data"}


def test_dashboard_with_empty_source(client, use_source, staff_headers):
    use_source(FakeSource())
    data = client.get("/api/dashboard", headers=staff_headers).json()["data"]
    assert data["occupancy"] is None
    assert data["cover_data"] == []
    assert data["stock_items"] == []
    assert data["total_scheduled_hours"] == 0


def test_dashboard_tolerates_messy_rows(client, use_source, staff_headers):
    use_source(FakeSource({
        BOOKING_CAPACITY_TABLE: [raw("b1", {"Date": "2024-06-01", "Seats Available": "n/a", "Seats Booked": 30})],
        COVER_TRACKER_TABLE: [raw("c1", {"Total Covers": "many", "Peak Time": "evening"})],
        STOCK_INSIGHT_TABLE: [raw("s1", {"Item Name": "Salt", "Last Updated": "2024-06-01"})],
    }))
    resp = client.get("/api/dashboard", headers=staff_headers)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["occupancy"]["occupancy_rate"] == 0
    assert data["cover_data"] == []
    assert data["peak_time_data"][0]["covers"] == []
    assert data["low_stock_items"][0]["status"] == "Out of Stock"


def test_booking_capacity_endpoint(client, mock_source, staff_headers):
    body = client.get("/api/dashboard/booking-capacity", headers=staff_headers).json()
    assert [b["occupancy_rate"] for b in body["booking_capacities"]] == [67, 92, 50]
    assert body["occupancy_data"] == {
        "total_seats": 120,
        "booked_seats": 60,
        "occupancy_rate": 50,
        "average_lead_time": 2,
    }


def test_cover_tracker_endpoint(client, mock_source, staff_headers):
    body = client.get("/api/dashboard/cover-tracker", headers=staff_headers).json()
    saturday = body["peak_time_data"][0]
    assert saturday["peak_time"] == "7:30 PM"
    assert [c["hour"] for c in saturday["covers"]] == [16, 17, 18, 19, 20, 21, 22]


def test_financial_overview_endpoint(client, mock_source, staff_headers):
    body = client.get("/api/dashboard/financial-overview", headers=staff_headers).json()
    assert len(body["financial_overviews"]) == 2
    assert body["financial_metrics"]["net_profit"] == 2350
    assert "period_metrics" not in body


def test_financial_overview_week_view(client, mock_source, staff_headers):
    body = client.get("/api/dashboard/financial-overview?date=2024-06-01&view=week", headers=staff_headers).json()
    assert [o["date"] for o in body["period_overviews"]] == ["2024-06-02", "2024-06-01"]
    assert body["period_metrics"]["total_revenue"] == 16300
    assert body["period_metrics"]["net_profit"] == 4950


def test_financial_overview_day_view(client, mock_source, staff_headers):
    body = client.get("/api/dashboard/financial-overview?date=2024-06-01", headers=staff_headers).json()
    assert [o["id"] for o in body["period_overviews"]] == ["mock1"]
    assert body["period_metrics"]["total_revenue"] == 8500


def test_financial_overview_bad_view(client, mock_source, staff_headers):
    resp = client.get("/api/dashboard/financial-overview?date=2024-06-01&view=year", headers=staff_headers)
    assert resp.status_code == 400


def test_staff_scheduling_endpoint(client, mock_source, staff_headers):
    body = client.get("/api/dashboard/staff-scheduling", headers=staff_headers).json()
    assert body["total_scheduled_hours"] == 20
    by_hour = {f["hour"]: f for f in body["staffing_forecast"]}
    # Sam (10-18) and Priya (16-23) overlap
    assert by_hour[17]["scheduled_staff"] == 2
    assert by_hour[17]["forecasted_covers"] == 25
    assert by_hour[17]["recommended_staff"] == 2
    assert by_hour[0]["scheduled_staff"] == 1


def test_stock_insight_endpoint(client, mock_source, staff_headers):
    body = client.get("/api/dashboard/stock-insight", headers=staff_headers).json()
    assert [i["name"] for i in body["stock_items"]] == ["Ribeye Steak", "House Red Wine", "Arborio Rice"]
    assert [i["name"] for i in body["low_stock_alerts"]] == ["House Red Wine", "Arborio Rice"]


def test_stock_insight_filters(client, mock_source, staff_headers):
    url = "/api/dashboard/stock-insight"
    by_search = client.get(url, params={"search": "wine"}, headers=staff_headers).json()
    assert [i["name"] for i in by_search["stock_items"]] == ["House Red Wine"]
    assert len(by_search["low_stock_alerts"]) == 2

    by_category = client.get(url, params={"category": "Meat"}, headers=staff_headers).json()
    assert [i["name"] for i in by_category["stock_items"]] == ["Ribeye Steak"]

    by_status = client.get(url, params={"status": "Out of Stock"}, headers=staff_headers).json()
    assert [i["name"] for i in by_status["stock_items"]] == ["Arborio Rice"]

    assert client.get(url, params={"status": "Plenty"}, headers=staff_headers).status_code == 422
