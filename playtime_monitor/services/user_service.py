# playtime_monitor/services/user_service.py

import logging

from sqlalchemy.orm import Session

from playtime_monitor import config
from playtime_monitor.models.activity_logs import ActivityLog
from playtime_monitor.models.users import User
from playtime_monitor.utils.constants import ACTIVITY_LOG_LIMIT, ROLE_ADMIN
from playtime_monitor.utils.security import hash_password

logger = logging.getLogger(__name__)


def get_admin(db: Session):
    return db.query(User).filter(User.role == ROLE_ADMIN).first()


def ensure_admin(db: Session) -> bool:
    """Create the first-run admin account. Returns True when one was created."""
    if get_admin(db):
        logger.info("Admin user already exists.")
        return False

    admin = User(
        username=config.ADMIN_USERNAME,
        password_hash=hash_password(config.ADMIN_PASSWORD),
        role=ROLE_ADMIN,
    )
    db.add(admin)
    db.commit()

    logger.warning(
        f"No admin user found. Default admin '{config.ADMIN_USERNAME}' created. "
        "Set ADMIN_PASSWORD or change the password after the first login."
    )
    return True


def get_recent_activity(db: Session, limit: int = ACTIVITY_LOG_LIMIT):
    rows = (
        db.query(ActivityLog, User.username)
        .outerjoin(User, ActivityLog.user_id == User.user_id)
        .order_by(ActivityLog.timestamp.desc(), ActivityLog.log_id.desc())
        .limit(limit)
        .all()
    )

    return [
        {
            "log_id": log.log_id,
            "parent_username": username or "Unknown",
            "checked_steam_id": log.checked_steam_id,
            "timestamp": log.timestamp,
        }
        for log, username in rows
    ]
