"""Convert UTC timestamps to the site's display time (UTC+8, no DST)."""

from datetime import datetime, timedelta, timezone

DISPLAY_OFFSET = timedelta(hours=8)
DISPLAY_TZ = timezone(DISPLAY_OFFSET)

WEEKDAYS = ["周一", "周二", "周三", "周四", "周五", "周六", "周日"]

WINDOWS = {
    "daily": timedelta(days=1),
    "weekly": timedelta(days=7),
}


def parse_utc(value: str | None) -> datetime | None:
    """Parse an RFC 3339 timestamp, returning None when it is not one."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    # RFC 3339 always carries an offset
    if parsed.tzinfo is None:
        return None
    return parsed.astimezone(timezone.utc)


def to_display(instant: datetime) -> datetime:
    """Shift an aware instant to display time."""
    return instant.astimezone(DISPLAY_TZ)


def utc_to_bjt(value: str) -> str:
    """Format a UTC timestamp in display time, passing bad input through."""
    parsed = parse_utc(value)
    if parsed is None:
        return value
    return to_display(parsed).strftime("%Y-%m-%d %H:%M:%S")


def weekday_label(instant: datetime) -> str:
    return WEEKDAYS[instant.weekday()]


def window_start(news_type: str, now: datetime) -> tuple[datetime, datetime]:
    """
    Return (since_utc, display_start) for a report window ending at now.

    Daily windows cover exactly the last 24 hours. Weekly windows start at
    display-time midnight seven days ago.
    """
    if news_type not in WINDOWS:
        raise ValueError(f"Unknown news type: {news_type!r}")
    start = to_display(now) - WINDOWS[news_type]
    if news_type == "weekly":
        start = start.replace(hour=0, minute=0, second=0, microsecond=0)
    return start.astimezone(timezone.utc), start
