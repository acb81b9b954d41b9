"""Horizon policy: resolves the query window for availability and analytics.

``today`` is computed once per request through ``get_today`` so that the
interval engine never reads the clock and tests can pin the date.
"""

from datetime import date
from typing import Optional

from fastapi import Depends, HTTPException, Query, status

from channel_manager.availability import Horizon, InvalidDateError, parse_iso_date
from channel_manager.availability.dates import DateOutOfRangeError, add_days
from channel_manager.core.config import get_settings


def get_today() -> date:
    """Reference calendar date for default horizons."""
    return date.today()


def parse_query_date(name: str, value: Optional[str]) -> Optional[date]:
    if value is None:
        return None
    try:
        return parse_iso_date(value)
    except InvalidDateError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"{name}: {e}",
        )


def resolve_horizon(
    start: Optional[str] = Query(None, description="First night of the window (YYYY-MM-DD), default today"),
    end: Optional[str] = Query(None, description="Exclusive end of the window (YYYY-MM-DD)"),
    days: Optional[int] = Query(None, ge=1, description="Window length in nights when end is omitted"),
    today: date = Depends(get_today),
) -> Horizon:
    """Build ``[start, end)`` from query parameters.

    ``end`` wins over ``days``; with neither, the configured default length is used.
    """
    settings = get_settings()
    window_start = parse_query_date("start", start) or today
    window_end = parse_query_date("end", end)
    if window_end is None:
        length = days or settings.default_horizon_days
        if length > settings.max_horizon_days:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Horizon may span at most {settings.max_horizon_days} nights",
            )
        try:
            window_end = add_days(window_start, length)
        except DateOutOfRangeError as e:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"end: {e}",
            )

    if window_end <= window_start:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="end must be after start",
        )
    if (window_end - window_start).days > settings.max_horizon_days:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Horizon may span at most {settings.max_horizon_days} nights",
        )
    return Horizon(window_start, window_end)
