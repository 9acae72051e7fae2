# Steam reports playtime for the trailing 14 days, limits are stored per week
LIMIT_WINDOW_WEEKS = 2

# Minimum gap between two limit notifications for the same child
NOTIFICATION_SUPPRESSION_HOURS = 24

DEFAULT_PLAYTIME_LIMIT_HOURS = 20

DISCORD_WEBHOOK_PREFIX = "https://discord.com/api/webhooks/"

ROLE_PARENT = "parent"
ROLE_ADMIN = "admin"

UNKNOWN_GAME_NAME = "Unknown Game"

ACTIVITY_LOG_LIMIT = 50

# Free-form checks have no child record to read a limit from
QUICK_CHECK_LIMIT_HOURS = 40
