from playtime_monitor.services.message_manager import MessageManager
from playtime_monitor.services.steam_client import SteamClient


# Overridden in tests through app.dependency_overrides
def get_steam_client() -> SteamClient:
    return SteamClient()


def get_message_manager() -> MessageManager:
    return MessageManager()
