# playtime_monitor/models/children.py

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship

from playtime_monitor.database import Base
from playtime_monitor.utils.constants import DEFAULT_PLAYTIME_LIMIT_HOURS


class Child(Base):
    __tablename__ = "children"

    child_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    parent_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)

    child_name = Column(String(255), nullable=False)
    # One Steam account maps to at most one monitored child
    steam_id = Column(String(255), unique=True, nullable=False)
    playtime_limit_hours = Column(Integer, nullable=False, default=DEFAULT_PLAYTIME_LIMIT_HOURS)

    # Written only by the playtime evaluator
    last_notified_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())

    parent = relationship("User", back_populates="children")
