"""Shared helpers for Supabase-backed repositories."""

from datetime import datetime
from typing import Any

import httpx
from supabase import PostgrestAPIError

from focus_timer.domain.errors import PersistenceError


def execute(query: Any, action: str) -> Any:
    """Execute a PostgREST query, wrapping transport and API failures."""
    try:
        return query.execute()
    except (PostgrestAPIError, httpx.HTTPError) as exc:
        raise PersistenceError(f"Failed to {action}") from exc


def parse_timestamp(raw: object) -> datetime | None:
    """Parse an ISO timestamp column, returning None for empty values."""
    if isinstance(raw, str) and raw:
        return datetime.fromisoformat(raw)
    return None
