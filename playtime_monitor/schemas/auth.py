from pydantic import BaseModel, Field
from typing import Optional


class RegisterRequest(BaseModel):
    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1)


class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    username: str
    role: str


class MeResponse(BaseModel):
    user_id: int
    username: str
    role: str
    email: Optional[str] = None
    discord_webhook_url: Optional[str] = None

    class Config:
        from_attributes = True
