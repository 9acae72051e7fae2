# playtime_monitor/services/steam_client.py

import logging
from dataclasses import dataclass, asdict
from typing import List, Optional

import requests

from playtime_monitor import config
from playtime_monitor.services.exceptions import PlaytimeSourceError, SteamAuthError
from playtime_monitor.utils.constants import UNKNOWN_GAME_NAME

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GamePlaytime:
    appid: Optional[int]
    name: str
    playtime_2weeks: int
    playtime_forever: int
    img_icon_url: str = ""

    def to_dict(self):
        return asdict(self)


class SteamClient:
    """Thin client for IPlayerService/GetRecentlyPlayedGames."""

    def __init__(self, api_key: Optional[str] = None, api_url: Optional[str] = None, timeout: Optional[float] = None):
        self.api_key = config.STEAM_API_KEY if api_key is None else api_key
        self.api_url = api_url or config.STEAM_API_URL
        self.timeout = config.HTTP_TIMEOUT_SECONDS if timeout is None else timeout

    def get_recently_played(self, steam_id: str) -> List[GamePlaytime]:
        # An empty list means the profile is private or had no activity in the last 14 days
        params = {
            "key": self.api_key,
            "steamid": steam_id,
            "format": "json",
        }

        try:
            response = requests.get(self.api_url, params=params, timeout=self.timeout)
        except requests.Timeout as e:
            raise PlaytimeSourceError(f"Steam API timed out for {steam_id}") from e
        except requests.RequestException as e:
            raise PlaytimeSourceError(f"Steam API request failed for {steam_id}: {e}") from e

        if response.status_code in (401, 403):
            raise SteamAuthError("Steam API key is invalid or has no access")

        if response.status_code != 200:
            raise PlaytimeSourceError(
                f"Steam API returned HTTP {response.status_code} for {steam_id}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise PlaytimeSourceError("Steam API returned a non-JSON body") from e

        data = payload.get("response") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            raise PlaytimeSourceError("Steam API response is missing the 'response' object")

        games = data.get("games") or []
        logger.debug(f"Steam returned {len(games)} recent games for {steam_id}")

        return [self._parse_game(g) for g in games]

    @staticmethod
    def _parse_game(game: dict) -> GamePlaytime:
        return GamePlaytime(
            appid=game.get("appid"),
            name=game.get("name") or UNKNOWN_GAME_NAME,
            playtime_2weeks=int(game.get("playtime_2weeks") or 0),
            playtime_forever=int(game.get("playtime_forever") or 0),
            img_icon_url=game.get("img_icon_url") or "",
        )
