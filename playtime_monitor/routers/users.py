from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from playtime_monitor.database import get_db
from playtime_monitor.schemas.users import MessageResponse, UserSettingsResponse, UserSettingsUpdate
from playtime_monitor.utils.security import get_current_user

router = APIRouter()


@router.get("/settings", response_model=UserSettingsResponse)
def get_settings(user = Depends(get_current_user)):
    return user


@router.put("/settings", response_model=MessageResponse)
def update_settings(
    payload: UserSettingsUpdate,
    db: Session = Depends(get_db),
    user = Depends(get_current_user)
):
    # Only fields sent in the request are changed
    changes = payload.model_dump(exclude_unset=True)
    for key, value in changes.items():
        setattr(user, key, value)

    db.commit()

    return MessageResponse(message="Settings updated successfully!")
