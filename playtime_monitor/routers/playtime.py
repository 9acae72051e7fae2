import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from playtime_monitor.database import get_db
from playtime_monitor.dependencies import get_message_manager, get_steam_client
from playtime_monitor.schemas.playtime import QuickCheckRequest, QuickCheckResponse
from playtime_monitor.services.exceptions import PlaytimeSourceError, SteamAuthError
from playtime_monitor.services.playtime_service import quick_check
from playtime_monitor.services.roster_store import ParentContact, RosterStore
from playtime_monitor.utils.constants import QUICK_CHECK_LIMIT_HOURS
from playtime_monitor.utils.security import get_optional_user

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/check-playtime", response_model=QuickCheckResponse)
def check_playtime(
    payload: QuickCheckRequest,
    db: Session = Depends(get_db),
    user = Depends(get_optional_user),
    steam_client = Depends(get_steam_client),
    messenger = Depends(get_message_manager)
):
    if not payload.steam_id:
        raise HTTPException(status_code=400, detail="Please enter a Steam ID.")

    user_id = user.user_id if user else None
    contact = ParentContact(
        user_id=user_id,
        email=payload.parent_email,
        discord_webhook_url=payload.discord_webhook_url,
    )

    try:
        result = quick_check(RosterStore(db), payload.steam_id, contact, steam_client, messenger, user_id=user_id)
    except SteamAuthError:
        raise HTTPException(status_code=401, detail="Steam API key is invalid or has no access. Check the server configuration.")
    except PlaytimeSourceError as e:
        logger.warning(f"Free-form check failed for Steam ID {payload.steam_id}: {e}")
        raise HTTPException(
            status_code=502,
            detail="Could not read playtime from Steam. The Steam ID may be wrong or the profile may be private.",
        )

    snapshot = result.snapshot
    if snapshot is None:
        return QuickCheckResponse(
            steam_id=payload.steam_id,
            message="No recent game data found. The profile may be private.",
            limit_hours=QUICK_CHECK_LIMIT_HOURS,
        )

    return QuickCheckResponse(
        steam_id=payload.steam_id,
        total_playtime_minutes=snapshot.total_minutes,
        total_playtime_hours=snapshot.total_hours,
        limit_hours=snapshot.limit_hours,
        game_count=result.game_count,
        is_over_limit=snapshot.over_limit,
        notification_sent=result.notified,
        games=[g.to_dict() for g in snapshot.games],
    )
