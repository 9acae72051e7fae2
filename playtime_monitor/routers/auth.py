from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from playtime_monitor.database import get_db
from playtime_monitor.models.users import User
from playtime_monitor.schemas.auth import LoginRequest, MeResponse, RegisterRequest, TokenResponse
from playtime_monitor.schemas.users import MessageResponse
from playtime_monitor.utils.constants import ROLE_PARENT
from playtime_monitor.utils.jwt import create_access_token
from playtime_monitor.utils.security import get_current_user, hash_password, verify_password

router = APIRouter()


@router.post("/register", response_model=MessageResponse, status_code=201)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    # Self-registration only creates parent accounts
    user = User(
        username=payload.username.strip(),
        password_hash=hash_password(payload.password),
        role=ROLE_PARENT,
    )
    db.add(user)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Username already exists.")

    return MessageResponse(message="User registered successfully!")


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.username == payload.username.strip()).first()

    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials.")

    access_token = create_access_token(
        data={"sub": str(user.user_id), "role": user.role}
    )

    return TokenResponse(
        access_token=access_token,
        user_id=user.user_id,
        username=user.username,
        role=user.role,
    )


@router.get("/me", response_model=MeResponse)
def me(user = Depends(get_current_user)):
    return user
