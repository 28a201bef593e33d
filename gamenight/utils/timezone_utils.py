"""
Timezone utility functions for the Game Night application
"""

from datetime import timezone

import pytz
from flask import current_app


def get_app_timezone():
    """Get the application's configured timezone"""
    try:
        timezone_name = current_app.config.get("TIMEZONE", "UTC")
        return pytz.timezone(timezone_name)
    except pytz.UnknownTimeZoneError:
        # Fallback to UTC if timezone is invalid
        return pytz.UTC


def convert_to_app_timezone(dt):
    """Convert a datetime to the application's timezone"""
    if dt is None:
        return None

    app_tz = get_app_timezone()

    # If datetime is naive, assume it's UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(app_tz)


def format_played_at(dt, format_str="%a %b %d, %Y %I:%M %p"):
    """Format a match time in the application's timezone"""
    if dt is None:
        return "-"

    app_time = convert_to_app_timezone(dt)
    return app_time.strftime(format_str)
