"""
API routes - combined router from all domain modules.

Shared infrastructure (limiter, query filters) lives here; every sub-router
imports what it needs from this package.
"""

import os
from datetime import date, datetime
from typing import Optional, Tuple

from fastapi import APIRouter, HTTPException, Query
from slowapi import Limiter
from slowapi.util import get_remote_address

from tennis_backend.models.entities import MatchFilters, MatchStatus, ScheduleFilters, ScheduleStatus
from tennis_backend.services.filter_service import end_of_day
from tennis_backend.utils.datetime_utils import to_naive_utc

# ---------------------------------------------------------------------------
# Shared rate limiter
# ---------------------------------------------------------------------------
IS_TEST_ENV = os.getenv("ENV", "").lower() == "test"
if IS_TEST_ENV:
    limiter = Limiter(key_func=get_remote_address)

    def no_op_limit(*args, **kwargs):
        """No-op decorator for test mode - doesn't apply any rate limiting."""
        def decorator(func):
            return func
        return decorator

    limiter.limit = lambda *args, **kwargs: no_op_limit()
else:
    limiter = Limiter(key_func=get_remote_address)

WRITE_RATE_LIMIT = os.getenv("WRITE_RATE_LIMIT", "60/minute")

# ---------------------------------------------------------------------------
# Shared query filters
# ---------------------------------------------------------------------------


def parse_query_datetime(value: Optional[str], name: str) -> Tuple[Optional[datetime], bool]:
    """
    Parse an ISO date or datetime query parameter.

    Returns:
        (naive UTC datetime or None, True if the value was a bare calendar day)

    Raises:
        HTTPException: 400 if the value is not ISO formatted
    """
    if not value:
        return None, False
    try:
        if len(value) == 10:
            return datetime.combine(date.fromisoformat(value), datetime.min.time()), True
        return to_naive_utc(datetime.fromisoformat(value.replace("Z", "+00:00"))), False
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {name}: {value}")


def match_filters(
    date_from: Optional[str] = Query(None, description="Earliest match date (ISO date or datetime)"),
    date_to: Optional[str] = Query(None, description="Latest match date; a bare day includes the whole day"),
    player_id: Optional[str] = None,
    court_id: Optional[str] = None,
    status: Optional[MatchStatus] = None,
) -> MatchFilters:
    """Build MatchFilters from query parameters (FastAPI dependency)."""
    start, _ = parse_query_datetime(date_from, "date_from")
    end, is_day = parse_query_datetime(date_to, "date_to")
    if end is not None and is_day:
        end = end_of_day(end)
    return MatchFilters(
        date_from=start,
        date_to=end,
        player_id=player_id,
        court_id=court_id,
        status=status,
    )


def parse_query_date(value: Optional[str], name: str) -> Optional[date]:
    """
    Parse the calendar day of an ISO date or datetime query parameter.

    The day is taken as written; an offset on a datetime value does not
    move it to another day.

    Raises:
        HTTPException: 400 if the value is not ISO formatted
    """
    if not value:
        return None
    try:
        if len(value) > 10:
            # reject a malformed time part
            datetime.fromisoformat(value.replace("Z", "+00:00"))
        return date.fromisoformat(value[:10])
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {name}: {value}")


def schedule_filters(
    date_from: Optional[str] = Query(None, description="Earliest schedule day (ISO date or datetime)"),
    date_to: Optional[str] = Query(None, description="Latest schedule day (ISO date or datetime)"),
    player_id: Optional[str] = None,
    status: Optional[ScheduleStatus] = None,
) -> ScheduleFilters:
    """Build ScheduleFilters from query parameters (FastAPI dependency)."""
    return ScheduleFilters(
        date_from=parse_query_date(date_from, "date_from"),
        date_to=parse_query_date(date_to, "date_to"),
        player_id=player_id,
        status=status,
    )


# ---------------------------------------------------------------------------
# Import sub-routers and combine
# ---------------------------------------------------------------------------
from tennis_backend.api.routes.players import router as players_router  # noqa: E402
from tennis_backend.api.routes.courts import router as courts_router  # noqa: E402
from tennis_backend.api.routes.schedules import router as schedules_router  # noqa: E402
from tennis_backend.api.routes.matches import router as matches_router  # noqa: E402
from tennis_backend.api.routes.stats import router as stats_router  # noqa: E402

router = APIRouter()
router.include_router(players_router)
router.include_router(courts_router)
router.include_router(schedules_router)
router.include_router(matches_router)
router.include_router(stats_router)
