"""Steam playtime monitoring service."""
