"""
Shared column helpers
"""
from datetime import datetime, timezone


def utcnow():
    """Naive UTC timestamp, matching what DateTime columns hand back"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def iso(value):
    return value.isoformat() if value else None
