# playtime_monitor/models/__init__.py
from playtime_monitor.models.users import User
from playtime_monitor.models.children import Child
from playtime_monitor.models.activity_logs import ActivityLog
from playtime_monitor.models.playtime_records import PlaytimeRecord
