"""Timestamp formatting shared by survey and response writes."""

from __future__ import annotations

from datetime import datetime, timezone


def format_created_at(dt: datetime | None = None) -> str:
    """Format an RFC3339 UTC timestamp with trailing 'Z'.

    Microseconds are kept so lexical order matches creation order for rows
    written within the same second.
    """
    base = (dt or datetime.now(timezone.utc)).astimezone(timezone.utc).isoformat(timespec="microseconds")
    return base.replace("+00:00", "Z")


__all__ = ["format_created_at"]
