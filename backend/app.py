import sys
import os

# Ensure backend/ is on the path for imports
sys.path.insert(0, os.path.dirname(__file__))

from datetime import datetime
from typing import Optional
from fastapi import FastAPI, Depends, Query
from fastapi.middleware.cors import CORSMiddleware
from airtable import RecordSource, get_record_source
from config import config
from database import init_db
from logger import get_logger
from seed import seed_default_users
from sessions import require_role
from routes import auth, dashboard, settings, users

logger = get_logger(__name__)

app = FastAPI(title="Restaurant Operations Dashboard")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register route modules
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(settings.router)
app.include_router(dashboard.router)


@app.on_event("startup")
def on_startup():
    init_db()
    seed_default_users()
    if config.use_mock_data:
        logger.warning("Airtable credentials not set, serving mock data")


@app.get("/health")
def health_check():
    """Health check endpoint for monitoring services like UptimeRobot"""
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat()
    }


@app.get("/api/insights", dependencies=[Depends(require_role("manager"))])
def get_insights(
    day: Optional[str] = Query(None, alias="date"),
    source: RecordSource = Depends(get_record_source),
):
    # Lazy load AI insights to speed up app startup
    from ai_insights import generate_insights
    data = dashboard.build_dashboard_data(source, dashboard.parse_query_date(day))
    return generate_insights(data)


if __name__ == "__main__":
    import uvicorn
    backend_dir = os.path.dirname(os.path.abspath(__file__))
    uvicorn.run("app:app", host="0.0.0.0", port=8000, reload=True, reload_dirs=[backend_dir])
