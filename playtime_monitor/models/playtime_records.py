from sqlalchemy import Column, Integer, BigInteger, String, DateTime, func

from playtime_monitor.database import Base


class PlaytimeRecord(Base):
    __tablename__ = "playtime_records"

    record_id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, index=True, autoincrement=True)

    steam_id = Column(String(255), nullable=False, index=True)
    total_playtime_minutes = Column(Integer, nullable=False)
    timestamp = Column(DateTime, nullable=False, server_default=func.now())
