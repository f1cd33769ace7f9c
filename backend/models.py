from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, func
from database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, nullable=False, unique=True, index=True)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False, default="staff")  # admin, manager, staff
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class UserSession(Base):
    __tablename__ = "user_sessions"

    token = Column(String, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False)


class DashboardSettings(Base):
    __tablename__ = "dashboard_settings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    refresh_interval = Column(Integer, nullable=False, default=15)       # minutes
    default_view = Column(String, nullable=False, default="overview")
    color_theme = Column(String, nullable=False, default="light")        # light, dark
    notify_low_inventory = Column(Boolean, nullable=False, default=True)
    notify_bookings = Column(Boolean, nullable=False, default=True)
    notify_financial_reports = Column(Boolean, nullable=False, default=False)
    notify_staff_schedule = Column(Boolean, nullable=False, default=True)
