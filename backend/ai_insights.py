import json
from anthropic import Anthropic
from config import config
from logger import get_logger
from utils import format_currency, format_date, format_percentage

logger = get_logger(__name__)

client = None

MODEL = "claude-sonnet-4-5-20250929"


def get_client():
    global client
    if client is None:
        if not config.ANTHROPIC_API_KEY:
            return None
        client = Anthropic(api_key=config.ANTHROPIC_API_KEY)
    return client


def empty_insights(summary: str) -> dict:
    return {
        "summary": summary,
        "highlights": [],
        "staffing": [],
        "inventory_actions": [],
    }


def _metrics_lines(data: dict) -> list:
    lines = []
    occupancy = data.get("occupancy")
    if occupancy:
        lines.append(
            f"Occupancy: {format_percentage(occupancy.occupancy_rate)} "
            f"({occupancy.booked_seats} of {occupancy.total_seats} seats), "
            f"average booking lead time {occupancy.average_lead_time} days"
        )
    metrics = data.get("financial_metrics")
    if metrics:
        lines.append(
            f"Revenue {format_currency(metrics.total_revenue)}, COGS {format_currency(metrics.cost_of_goods_sold)}, "
            f"operating expenses {format_currency(metrics.operating_expenses)}, "
            f"net profit {format_currency(metrics.net_profit)}"
        )
    for item in data.get("revenue_breakdown", []):
        lines.append(f"  {item.category}: {format_percentage(item.percentage)} = {format_currency(item.amount)}")
    for peak in data.get("peak_time_data", []):
        lines.append(f"{peak.day}: {peak.total_covers} covers, peak at {peak.peak_time}")
    return lines


def build_context(data: dict) -> str:
    """Plain-text summary of the dashboard view-models for the prompt."""
    staffing = [
        {"hour": f.hour, "forecasted_covers": f.forecasted_covers,
         "scheduled_staff": f.scheduled_staff, "recommended_staff": f.recommended_staff}
        for f in data.get("staffing_forecast", [])
    ]
    low_stock = [
        {"item": i.name, "category": i.category, "current_stock": i.current_stock,
         "reorder_level": i.reorder_level, "usage_per_day": i.usage_rate, "status": i.status.value,
         "last_updated": format_date(i.last_updated)}
        for i in data.get("low_stock_items", [])
    ]
    return f"""Here is the current data for a restaurant:

## Headline numbers
{chr(10).join(_metrics_lines(data)) or "No booking or financial data for this day."}

## Staffing forecast by hour (total scheduled hours: {data.get("total_scheduled_hours", 0)})
{json.dumps(staffing, indent=2)}

## Low stock
{json.dumps(low_stock, indent=2, default=str)}
"""


def generate_insights(data: dict) -> dict:
    """Ask Claude for a short operational read-out of the dashboard data."""
    c = get_client()
    if not c:
        return empty_insights("Set ANTHROPIC_API_KEY to enable AI insights.")

    prompt = """Analyze this restaurant dashboard data and provide:

1. **Summary**: 2-3 sentence plain English overview of today's trading
2. **Highlights**: Up to 5 notable points about occupancy, covers and revenue mix
3. **Staffing**: Hours that look over- or under-staffed against the forecast, and what to change
4. **Inventory Actions**: What to reorder or use up, most urgent first

Respond in this exact JSON format:
{
  "summary": "...",
  "highlights": ["...", "..."],
  "staffing": ["Add one server 18:00-20:00", "..."],
  "inventory_actions": ["Reorder Arborio Rice today (out of stock)", "..."]
}

Be specific with numbers. If data is limited, say so. Keep it practical for a shift manager."""

    try:
        response = c.messages.create(
            model=MODEL,
            max_tokens=1024,
            messages=[
                {"role": "user", "content": build_context(data) + "\n\n" + prompt}
            ],
        )
        text = response.content[0].text
        # Extract JSON from response
        start = text.find("{")
        end = text.rfind("}") + 1
        if start >= 0 and end > start:
            return {**empty_insights(""), **json.loads(text[start:end])}
        return empty_insights(text)
    except Exception as e:
        logger.error(f"AI insights request failed: {e}")
        return empty_insights(f"AI insights temporarily unavailable: {str(e)}")
