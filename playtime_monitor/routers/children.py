import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from playtime_monitor.database import get_db
from playtime_monitor.dependencies import get_message_manager, get_steam_client
from playtime_monitor.models.children import Child
from playtime_monitor.schemas.children import ChildCreate, ChildResponse, ChildUpdate
from playtime_monitor.schemas.playtime import PlaytimeCheckResponse
from playtime_monitor.schemas.users import MessageResponse
from playtime_monitor.services.exceptions import ChildNotFoundError, PlaytimeSourceError, SteamAuthError
from playtime_monitor.services.playtime_service import OutcomeStatus, check_now, limit_minutes_for
from playtime_monitor.services.roster_store import RosterStore
from playtime_monitor.utils.security import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()

CHILD_NOT_FOUND = "Child not found or you do not have permission."


def _get_own_child(db: Session, child_id: int, parent_id: int) -> Child:
    try:
        return RosterStore(db).get_child_for_parent(child_id, parent_id)
    except ChildNotFoundError:
        raise HTTPException(status_code=404, detail=CHILD_NOT_FOUND)


@router.get("", response_model=List[ChildResponse])
def list_children(
    db: Session = Depends(get_db),
    user = Depends(get_current_user)
):
    return RosterStore(db).list_children(parent_id=user.user_id)


@router.post("", response_model=ChildResponse, status_code=201)
def add_child(
    payload: ChildCreate,
    db: Session = Depends(get_db),
    user = Depends(get_current_user)
):
    child = Child(
        parent_id=user.user_id,
        child_name=payload.child_name,
        steam_id=payload.steam_id,
        playtime_limit_hours=payload.playtime_limit_hours,
    )
    db.add(child)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="This Steam ID is already registered.")

    db.refresh(child)
    return child


@router.put("/{child_id}", response_model=ChildResponse)
def update_child(
    child_id: int,
    payload: ChildUpdate,
    db: Session = Depends(get_db),
    user = Depends(get_current_user)
):
    child = _get_own_child(db, child_id, user.user_id)

    child.child_name = payload.child_name
    child.steam_id = payload.steam_id
    child.playtime_limit_hours = payload.playtime_limit_hours

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="This Steam ID is already registered to another child.")

    db.refresh(child)
    return child


@router.delete("/{child_id}", response_model=MessageResponse)
def delete_child(
    child_id: int,
    db: Session = Depends(get_db),
    user = Depends(get_current_user)
):
    child = _get_own_child(db, child_id, user.user_id)

    db.delete(child)
    db.commit()

    return MessageResponse(message="Child deleted successfully!")


@router.post("/{child_id}/check", response_model=PlaytimeCheckResponse)
def check_child_playtime(
    child_id: int,
    db: Session = Depends(get_db),
    user = Depends(get_current_user),
    steam_client = Depends(get_steam_client),
    messenger = Depends(get_message_manager)
):
    store = RosterStore(db)

    try:
        outcome = check_now(store, child_id, user.user_id, steam_client, messenger)
    except ChildNotFoundError:
        raise HTTPException(status_code=404, detail=CHILD_NOT_FOUND)
    except SteamAuthError:
        raise HTTPException(status_code=401, detail="Steam API key is invalid or has no access. Check the server configuration.")
    except PlaytimeSourceError as e:
        logger.warning(f"On-demand check failed for child {child_id}: {e}")
        raise HTTPException(
            status_code=502,
            detail="Could not read playtime from Steam. The Steam ID may be wrong or the profile may be private.",
        )

    if outcome.status is OutcomeStatus.NO_DATA:
        limit_hours = store.get_child_for_parent(child_id, user.user_id).playtime_limit_hours
        return PlaytimeCheckResponse(
            child_id=child_id,
            steam_id=outcome.steam_id,
            status=outcome.status.value,
            message="No recent game data found for this child. The profile may be private.",
            limit_hours=limit_hours,
            limit_minutes=limit_minutes_for(limit_hours),
        )

    snapshot = outcome.snapshot
    return PlaytimeCheckResponse(
        child_id=child_id,
        steam_id=snapshot.steam_id,
        status=outcome.status.value,
        total_playtime_minutes=snapshot.total_minutes,
        total_playtime_hours=snapshot.total_hours,
        limit_hours=snapshot.limit_hours,
        limit_minutes=snapshot.limit_minutes,
        is_over_limit=snapshot.over_limit,
        notification_sent=outcome.notified,
        games=[g.to_dict() for g in snapshot.games],
    )
