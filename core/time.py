# PATH: core/time.py
"""
Time utilities for HAWK.
"""

from datetime import datetime, timezone


def now_utc() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def now_iso() -> str:
    """Get current UTC datetime as ISO string."""
    return now_utc().isoformat()


def format_uptime(seconds: float) -> str:
    """
    Format an uptime duration as "Xh Ym".

    Args:
        seconds: Elapsed seconds (negative values clamp to zero)

    Returns:
        Human-readable duration
    """
    total = max(0, int(seconds))
    hours = total // 3600
    minutes = (total % 3600) // 60
    return f"{hours}h {minutes}m"
