# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Timezone-aware timestamp helpers.

Rows, run results and report banners all use UTC. SQLite returns naive
datetimes for timezone-aware columns, so values read back from the store
go through ensure_utc before they are compared or formatted.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current time as an aware UTC datetime. Used as the column default."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Attach UTC to a naive datetime, or convert an aware one to UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_iso(dt: datetime | None) -> str | None:
    """Render a datetime as ISO 8601 in UTC, to whole seconds."""
    dt = ensure_utc(dt)
    if dt is None:
        return None
    return dt.isoformat(timespec="seconds")


def elapsed_seconds(start: datetime | None, end: datetime | None) -> float | None:
    """Seconds between two timestamps, or None if either is missing."""
    start, end = ensure_utc(start), ensure_utc(end)
    if start is None or end is None:
        return None
    return (end - start).total_seconds()
