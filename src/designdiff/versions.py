"""Version selection -- pick the snapshot pair to compare from version history."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from .models import VersionInfo


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _as_utc(moment: datetime) -> datetime:
    return moment if moment.tzinfo is not None else moment.replace(tzinfo=timezone.utc)


def filter_versions_by_date_range(
    versions: list[VersionInfo],
    start: datetime,
    end: datetime,
) -> list[VersionInfo]:
    start, end = _as_utc(start), _as_utc(end)
    return [v for v in versions if start <= parse_timestamp(v.created_at) <= end]


def find_closest_version(
    versions: list[VersionInfo],
    target: datetime,
    direction: Literal["before", "after", "nearest"] = "nearest",
) -> VersionInfo | None:
    """Version closest to *target*.

    ``before`` picks the latest version at or before the target (falling back
    to the oldest), ``after`` the earliest at or after it (falling back to the
    newest), ``nearest`` the smallest absolute distance.
    """
    if not versions:
        return None

    target = _as_utc(target)
    ordered = sorted(versions, key=lambda v: parse_timestamp(v.created_at))

    if direction == "before":
        earlier = [v for v in ordered if parse_timestamp(v.created_at) <= target]
        return earlier[-1] if earlier else ordered[0]

    if direction == "after":
        later = [v for v in ordered if parse_timestamp(v.created_at) >= target]
        return later[0] if later else ordered[-1]

    return min(ordered, key=lambda v: abs(parse_timestamp(v.created_at) - target))


def versions_for_comparison(
    versions: list[VersionInfo],
    start: datetime,
    end: datetime,
) -> tuple[VersionInfo | None, VersionInfo | None]:
    """Return ``(older, newer)`` bracketing the *start*..*end* window."""
    return (
        find_closest_version(versions, start, "before"),
        find_closest_version(versions, end, "after"),
    )
