from typing import Annotated, Optional

from pydantic import AfterValidator, BeforeValidator, EmailStr

from playtime_monitor.utils.constants import DISCORD_WEBHOOK_PREFIX


def clean_optional(value: Optional[str]) -> Optional[str]:
    # Empty strings from forms clear the setting
    if not isinstance(value, str):
        return value
    value = value.strip()
    return value or None


def validate_discord_webhook(value: Optional[str]) -> Optional[str]:
    value = clean_optional(value)
    if value and not value.startswith(DISCORD_WEBHOOK_PREFIX):
        raise ValueError("Invalid Discord webhook URL format.")
    return value


OptionalText = Annotated[Optional[str], AfterValidator(clean_optional)]
OptionalEmail = Annotated[Optional[EmailStr], BeforeValidator(clean_optional)]
DiscordWebhookUrl = Annotated[Optional[str], AfterValidator(validate_discord_webhook)]
