"""Event logging as key=value lines on standard error."""

import sys
from datetime import datetime, timezone

LEVELS = {
    "debug": 10,
    "info": 20,
    "error": 40,
    "off": 100,
}

_threshold = LEVELS["info"]


def set_level(name: str):
    """Set the minimum level that gets printed."""
    global _threshold
    try:
        _threshold = LEVELS[name.lower()]
    except KeyError:
        raise ValueError(f"unknown log level: {name}")


def log_event(event: str, level: str = "info", **fields):
    """Print one event line, e.g. ``ts=... level=info event=key_saved path=/tmp/id_ecdsa``.

    Standard output is reserved for the signed record.
    """
    if LEVELS[level] < _threshold:
        return

    timestamp = datetime.now(timezone.utc).isoformat()
    parts = [f"ts={timestamp}", f"level={level}", f"event={event}"]
    parts.extend(f"{key}={value}" for key, value in fields.items())
    print(" ".join(parts), file=sys.stderr)
