"""
Timecode helpers for transcript offsets.
"""


def parse_timestamp(ts: str) -> float:
    """Convert a timestamp string to seconds.

    Handles "HH:MM:SS.mmm", "MM:SS.mmm" and plain seconds ("135.4").
    Raises ValueError for anything else.
    """
    parts = ts.strip().split(':')
    if len(parts) == 3:
        h, m, s = parts
        return int(h) * 3600 + int(m) * 60 + float(s)
    elif len(parts) == 2:
        m, s = parts
        return int(m) * 60 + float(s)
    elif len(parts) == 1:
        return float(parts[0])
    raise ValueError(f"Unrecognized timestamp: {ts!r}")


def format_minutes_seconds(seconds: int) -> str:
    """Format whole seconds as "m:ss" (minutes are not capped at 59)."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"
