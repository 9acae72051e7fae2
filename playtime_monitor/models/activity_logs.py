from sqlalchemy import Column, Integer, BigInteger, String, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship

from playtime_monitor.database import Base


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    log_id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)

    checked_steam_id = Column(String(255), nullable=False)
    timestamp = Column(DateTime, nullable=False, server_default=func.now())

    user = relationship("User", back_populates="activity_logs")
