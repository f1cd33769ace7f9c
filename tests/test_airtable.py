import pytest
import requests

from airtable import (
    MOCK_DATA,
    AirtableSource,
    MockSource,
    fetch_financial_overview,
    fetch_records,
    fetch_stock_insight,
)
from config import BOOKING_CAPACITY_TABLE, STOCK_INSIGHT_TABLE
from conftest import FakeSource


class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} Error")

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeSession:
    """Stands in for requests.Session, replaying canned responses in order."""

    def __init__(self, responses):
        self.headers = {}
        self.responses = list(responses)
        self.requests = []

    def get(self, url, params=None, timeout=None):
        self.requests.append((url, dict(params or {}), timeout))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def make_source(responses):
    session = FakeSession(responses)
    return AirtableSource("secret", "appBASE", api_url="https://airtable.test/v0/", timeout=5,
                          session=session), session


def test_fetch_follows_offset_pagination():
    source, session = make_source([
        FakeResponse({"records": [{"id": "rec1", "fields": {"Item Name": "Salt"}}], "offset": "page2"}),
        FakeResponse({"records": [{"id": "rec2", "fields": {"Item Name": "Pepper"}}, {"id": "rec3"}]}),
    ])
    records = source.fetch(STOCK_INSIGHT_TABLE)

    assert records == [
        {"id": "rec1", "fields": {"Item Name": "Salt"}},
        {"id": "rec2", "fields": {"Item Name": "Pepper"}},
        {"id": "rec3", "fields": {}},
    ]
    assert session.headers["Authorization"] == "Bearer secret"
    assert [r[1] for r in session.requests] == [{"pageSize": 100}, {"pageSize": 100, "offset": "page2"}]
    assert session.requests[0][0] == "https://airtable.test/v0/appBASE/Stock Insights"
    assert session.requests[0][2] == 5


@pytest.mark.parametrize("responses", [
    [requests.ConnectionError("down")],
    [FakeResponse({"error": "NOT_FOUND"}, status=404)],
    [FakeResponse(ValueError("not json"))],
    [FakeResponse({"records": [{"id": "rec1", "fields": {}}], "offset": "page2"}), requests.Timeout("slow")],
])
def test_fetch_failure_returns_empty(responses, caplog):
    source, _ = make_source(responses)
    assert source.fetch(BOOKING_CAPACITY_TABLE) == []
    assert "Error fetching records" in caplog.text


def test_mock_source_returns_copies():
    source = MockSource()
    records = source.fetch(STOCK_INSIGHT_TABLE)
    assert len(records) == len(MOCK_DATA[STOCK_INSIGHT_TABLE])

    records[0]["fields"]["Current Stock"] = -1
    assert source.fetch(STOCK_INSIGHT_TABLE)[0]["fields"]["Current Stock"] == 45


def test_mock_source_unknown_table_is_empty():
    assert MockSource().fetch("Nope") == []


def test_mock_data_covers_every_status():
    stock = MockSource().fetch(STOCK_INSIGHT_TABLE)
    names = [r["fields"]["Item Name"] for r in stock]
    assert names.count("House Red Wine") == 2
    assert any(r["fields"]["Current Stock"] == 0 for r in stock)


def test_fetch_helpers_use_given_source():
    source = FakeSource({STOCK_INSIGHT_TABLE: [{"id": "rec1", "fields": {}}]})
    assert fetch_stock_insight(source) == [{"id": "rec1", "fields": {}}]
    assert fetch_records(BOOKING_CAPACITY_TABLE, source) == []
    assert source.calls == [STOCK_INSIGHT_TABLE, BOOKING_CAPACITY_TABLE]


def test_empty_financial_overview_warns(caplog):
    assert fetch_financial_overview(FakeSource()) == []
    assert "No financial overview records" in caplog.text
