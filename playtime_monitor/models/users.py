# playtime_monitor/models/users.py

from sqlalchemy import Column, Integer, String, Text, DateTime, Enum, ForeignKey, func
from sqlalchemy.orm import relationship

from playtime_monitor.database import Base


class User(Base):
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    username = Column(String(255), unique=True, nullable=False)
    password_hash = Column(Text, nullable=False)
    role = Column(Enum("parent", "admin", name="user_role_enum"), nullable=False, default="parent")

    email = Column(String(255), nullable=True)
    discord_webhook_url = Column(Text, nullable=True)

    # Not used by the playtime checks
    steam_id = Column(String(255), nullable=True)
    parent_id = Column(Integer, ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, server_default=func.now())

    children = relationship(
        "Child",
        back_populates="parent",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    activity_logs = relationship(
        "ActivityLog",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
