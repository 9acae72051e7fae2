"""Exception hierarchy shared by the playtime services."""


class PlaytimeMonitorError(Exception):
    """Base class for all service level errors."""


class PlaytimeSourceError(PlaytimeMonitorError):
    """Raised when the Steam API cannot be reached or returns an unusable response."""


class SteamAuthError(PlaytimeSourceError):
    """Raised when the Steam API rejects the configured API key."""


class ChildNotFoundError(PlaytimeMonitorError):
    """Raised when a child does not exist or belongs to another parent."""


class DispatchError(PlaytimeMonitorError):
    """Raised when a single notification channel fails to deliver."""

    def __init__(self, channel: str, message: str):
        super().__init__(f"[{channel}] {message}")
        self.channel = channel
