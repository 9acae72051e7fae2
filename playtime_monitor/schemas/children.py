from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from playtime_monitor.utils.constants import DEFAULT_PLAYTIME_LIMIT_HOURS


class ChildBase(BaseModel):
    child_name: str = Field(min_length=1, max_length=255)
    steam_id: str = Field(min_length=1, max_length=255)
    playtime_limit_hours: int = Field(default=DEFAULT_PLAYTIME_LIMIT_HOURS, gt=0)  # hours per week

    @field_validator("child_name", "steam_id")
    @classmethod
    def strip_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class ChildCreate(ChildBase):
    pass


class ChildUpdate(ChildBase):
    pass


class ChildResponse(BaseModel):
    child_id: int
    parent_id: int
    child_name: str
    steam_id: str
    playtime_limit_hours: int
    last_notified_at: Optional[datetime] = None

    class Config:
        from_attributes = True
