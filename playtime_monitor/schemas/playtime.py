from pydantic import BaseModel
from typing import List, Optional

from playtime_monitor.schemas.validators import DiscordWebhookUrl, OptionalEmail, OptionalText


class GamePlaytimeItem(BaseModel):
    appid: Optional[int] = None
    name: str
    playtime_2weeks: int      # minutes in the last 14 days
    playtime_forever: int     # lifetime minutes
    img_icon_url: str = ""


class PlaytimeCheckResponse(BaseModel):
    child_id: int
    steam_id: str
    status: str               # 'evaluated' | 'suppressed' | 'no_data'
    message: Optional[str] = None

    total_playtime_minutes: int = 0
    total_playtime_hours: float = 0.0
    limit_hours: int
    limit_minutes: int
    is_over_limit: bool = False
    notification_sent: bool = False

    games: List[GamePlaytimeItem] = []


class SweepReportResponse(BaseModel):
    started: bool
    message: str
    total: int = 0
    evaluated: int = 0
    notified: int = 0
    suppressed: int = 0
    no_data: int = 0
    skipped: int = 0
    failed: int = 0


class QuickCheckRequest(BaseModel):
    steam_id: OptionalText = None
    parent_email: OptionalEmail = None
    discord_webhook_url: DiscordWebhookUrl = None


class QuickCheckResponse(BaseModel):
    steam_id: str
    message: Optional[str] = None

    total_playtime_minutes: int = 0
    total_playtime_hours: float = 0.0
    limit_hours: int
    game_count: int = 0
    is_over_limit: bool = False
    notification_sent: bool = False

    games: List[GamePlaytimeItem] = []
