from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field
from typing import Literal
from database import get_db
from models import DashboardSettings, User
from sessions import require_user

router = APIRouter(prefix="/api/settings", tags=["settings"])


class Notifications(BaseModel):
    low_inventory: bool = True
    bookings: bool = True
    financial_reports: bool = False
    staff_schedule: bool = True


class SettingsBody(BaseModel):
    refresh_interval: int = Field(15, ge=1, le=120)  # minutes
    default_view: str = "overview"
    color_theme: Literal["light", "dark"] = "light"
    notifications: Notifications = Notifications()


def settings_payload(row: DashboardSettings) -> SettingsBody:
    return SettingsBody(
        refresh_interval=row.refresh_interval,
        default_view=row.default_view,
        color_theme=row.color_theme,
        notifications=Notifications(
            low_inventory=row.notify_low_inventory,
            bookings=row.notify_bookings,
            financial_reports=row.notify_financial_reports,
            staff_schedule=row.notify_staff_schedule,
        ),
    )


@router.get("", response_model=SettingsBody)
def get_settings(user: User = Depends(require_user), db: Session = Depends(get_db)):
    """Saved settings for the current user, or the defaults if none are saved."""
    row = db.query(DashboardSettings).filter(DashboardSettings.user_id == user.id).first()
    return settings_payload(row) if row else SettingsBody()


@router.put("", response_model=SettingsBody)
def save_settings(body: SettingsBody, user: User = Depends(require_user), db: Session = Depends(get_db)):
    row = db.query(DashboardSettings).filter(DashboardSettings.user_id == user.id).first()
    if row is None:
        row = DashboardSettings(user_id=user.id)
        db.add(row)

    row.refresh_interval = body.refresh_interval
    row.default_view = body.default_view
    row.color_theme = body.color_theme
    row.notify_low_inventory = body.notifications.low_inventory
    row.notify_bookings = body.notifications.bookings
    row.notify_financial_reports = body.notifications.financial_reports
    row.notify_staff_schedule = body.notifications.staff_schedule
    db.commit()
    db.refresh(row)
    return settings_payload(row)
