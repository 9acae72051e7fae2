from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from playtime_monitor.schemas.validators import DiscordWebhookUrl, OptionalEmail, OptionalText


class UserSettingsResponse(BaseModel):
    email: Optional[str] = None
    discord_webhook_url: Optional[str] = None

    class Config:
        from_attributes = True


class UserSettingsUpdate(BaseModel):
    email: OptionalEmail = None
    discord_webhook_url: DiscordWebhookUrl = None


class AdminUserCreate(BaseModel):
    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1)
    role: Literal["parent", "admin"] = "parent"
    email: OptionalEmail = None
    discord_webhook_url: DiscordWebhookUrl = None
    steam_id: OptionalText = None


class AdminUserUpdate(BaseModel):
    username: str = Field(min_length=1, max_length=255)
    role: Literal["parent", "admin"]
    email: OptionalEmail = None
    discord_webhook_url: DiscordWebhookUrl = None
    steam_id: OptionalText = None


class UserResponse(BaseModel):
    user_id: int
    username: str
    role: str
    steam_id: Optional[str] = None
    email: Optional[str] = None
    discord_webhook_url: Optional[str] = None

    class Config:
        from_attributes = True


class ActivityItem(BaseModel):
    log_id: int
    parent_username: str
    checked_steam_id: str
    timestamp: datetime


class MessageResponse(BaseModel):
    message: str
