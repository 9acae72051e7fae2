# playtime_monitor/services/roster_store.py

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from playtime_monitor.models.activity_logs import ActivityLog
from playtime_monitor.models.children import Child
from playtime_monitor.models.playtime_records import PlaytimeRecord
from playtime_monitor.models.users import User
from playtime_monitor.services.exceptions import ChildNotFoundError


@dataclass(frozen=True)
class ParentContact:
    user_id: Optional[int]
    email: Optional[str] = None
    discord_webhook_url: Optional[str] = None

    @property
    def has_channels(self) -> bool:
        return bool(self.email or self.discord_webhook_url)


class RosterStore:
    """Children, parent contacts, playtime history and the activity log behind one session."""

    def __init__(self, db: Session):
        self.db = db

    def list_children(self, parent_id: Optional[int] = None) -> List[Child]:
        query = self.db.query(Child)
        if parent_id is not None:
            query = query.filter(Child.parent_id == parent_id)
        return query.order_by(Child.child_id.asc()).all()

    def get_child_for_parent(self, child_id: int, parent_id: int) -> Child:
        child = (
            self.db.query(Child)
            .filter(Child.child_id == child_id, Child.parent_id == parent_id)
            .first()
        )
        if not child:
            raise ChildNotFoundError(f"Child {child_id} not found")
        return child

    def get_contact(self, parent_id: int) -> Optional[ParentContact]:
        user = self.db.query(User).filter(User.user_id == parent_id).first()
        if not user:
            return None
        return ParentContact(
            user_id=user.user_id,
            email=user.email or None,
            discord_webhook_url=user.discord_webhook_url or None,
        )

    def claim_notification(self, child_id: int, expected: Optional[datetime], now: datetime) -> bool:
        # Compare-and-swap on last_notified_at: only one caller wins a given window
        if expected is None:
            condition = Child.last_notified_at.is_(None)
        else:
            condition = Child.last_notified_at == expected

        result = self.db.execute(
            update(Child)
            .where(Child.child_id == child_id, condition)
            .values(last_notified_at=now)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()

        return result.rowcount == 1

    def record_activity(self, user_id: int, steam_id: str, at: datetime) -> ActivityLog:
        log = ActivityLog(
            user_id=user_id,
            checked_steam_id=steam_id,
            timestamp=at,
        )
        self.db.add(log)
        self.db.commit()
        self.db.refresh(log)
        return log

    def record_playtime(self, steam_id: str, total_minutes: int, at: datetime) -> PlaytimeRecord:
        record = PlaytimeRecord(
            steam_id=steam_id,
            total_playtime_minutes=total_minutes,
            timestamp=at,
        )
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        return record
