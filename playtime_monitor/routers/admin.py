from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from playtime_monitor.database import get_db
from playtime_monitor.models.users import User
from playtime_monitor.schemas.playtime import SweepReportResponse
from playtime_monitor.schemas.users import (
    ActivityItem,
    AdminUserCreate,
    AdminUserUpdate,
    MessageResponse,
    UserResponse,
)
from playtime_monitor.services.scheduler_service import SchedulerService
from playtime_monitor.services.user_service import get_admin, get_recent_activity
from playtime_monitor.utils.constants import ROLE_ADMIN
from playtime_monitor.utils.security import hash_password, require_admin

router = APIRouter()


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found.")
    return user


@router.get("/users", response_model=List[UserResponse])
def list_users(
    db: Session = Depends(get_db),
    admin = Depends(require_admin)
):
    return db.query(User).order_by(User.user_id.asc()).all()


@router.post("/users", response_model=UserResponse, status_code=201)
def create_user(
    payload: AdminUserCreate,
    db: Session = Depends(get_db),
    admin = Depends(require_admin)
):
    # Exactly one admin account exists at any time
    if payload.role == ROLE_ADMIN:
        raise HTTPException(status_code=409, detail="An admin account already exists.")

    user = User(
        username=payload.username.strip(),
        password_hash=hash_password(payload.password),
        role=payload.role,
        email=payload.email,
        discord_webhook_url=payload.discord_webhook_url,
        steam_id=payload.steam_id,
    )
    db.add(user)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Username already exists.")

    db.refresh(user)
    return user


@router.put("/users/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    payload: AdminUserUpdate,
    db: Session = Depends(get_db),
    admin = Depends(require_admin)
):
    user = _get_user_or_404(db, user_id)

    if user.role == ROLE_ADMIN and payload.role != ROLE_ADMIN:
        raise HTTPException(status_code=409, detail="The admin account cannot be demoted.")
    if user.role != ROLE_ADMIN and payload.role == ROLE_ADMIN and get_admin(db):
        raise HTTPException(status_code=409, detail="An admin account already exists.")

    user.username = payload.username.strip()
    user.role = payload.role
    user.email = payload.email
    user.discord_webhook_url = payload.discord_webhook_url
    user.steam_id = payload.steam_id

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Username already exists.")

    db.refresh(user)
    return user


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    admin = Depends(require_admin)
):
    user = _get_user_or_404(db, user_id)

    if user.role == ROLE_ADMIN:
        raise HTTPException(status_code=409, detail="The admin account cannot be deleted.")

    # Children and activity logs go with the parent
    db.delete(user)
    db.commit()

    return MessageResponse(message="User deleted successfully!")


@router.get("/activity", response_model=List[ActivityItem])
def list_activity(
    db: Session = Depends(get_db),
    admin = Depends(require_admin)
):
    return get_recent_activity(db)


@router.post("/sweep", response_model=SweepReportResponse)
def run_sweep_now(admin = Depends(require_admin)):
    report = SchedulerService.trigger_now()

    if report is None:
        return SweepReportResponse(started=False, message="A playtime sweep is already running.")

    return SweepReportResponse(
        started=True,
        message="Playtime sweep finished.",
        total=report.total,
        evaluated=report.evaluated,
        notified=report.notified,
        suppressed=report.suppressed,
        no_data=report.no_data,
        skipped=report.skipped,
        failed=report.failed,
    )
