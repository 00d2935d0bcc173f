"""Statistics, share summary and health check route handlers."""

import logging
from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from tennis_backend.api.routes import match_filters
from tennis_backend.database.db import get_db_session
from tennis_backend.models.entities import MatchFilters
from tennis_backend.models.schemas import (
    CourtUsageResponse,
    HealthResponse,
    MatchStatsResponse,
    PlayerStandingResponse,
    ShareResponse,
)
from tennis_backend.services import calculation_service, data_service, export_service, filter_service
from tennis_backend.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/health", response_model=HealthResponse)
async def health_check(session: AsyncSession = Depends(get_db_session)):
    """
    Health check endpoint.

    Returns:
        dict: Service status and whether the database answered
    """
    try:
        await data_service.check_connection(session)
        return {"status": "healthy", "database": True, "message": "API is running"}
    except Exception as e:
        logger.warning(f"Health check failed: {e}")
        return {"status": "unhealthy", "database": False, "message": f"Error: {str(e)}"}


@router.get("/api/stats", response_model=MatchStatsResponse)
async def get_stats(
    filters: MatchFilters = Depends(match_filters),
    session: AsyncSession = Depends(get_db_session),
):
    """Summary statistics over the (optionally filtered) matches."""
    try:
        matches = filter_service.filter_matches(await data_service.list_matches(session), filters)
        return data_service.stats_to_dict(calculation_service.compute_stats(matches))
    except Exception as e:
        logger.error(f"Error computing stats: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error computing stats: {str(e)}")


@router.get("/api/stats/players", response_model=List[PlayerStandingResponse])
async def get_player_standings(
    filters: MatchFilters = Depends(match_filters),
    session: AsyncSession = Depends(get_db_session),
):
    """Per-player matches, wins and win rate, best win rate first."""
    try:
        players, _, _, matches = await data_service.load_snapshot(session)
        matches = filter_service.filter_matches(matches, filters)
        return calculation_service.player_standings(players, matches)
    except Exception as e:
        logger.error(f"Error computing player standings: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error computing player standings: {str(e)}")


@router.get("/api/stats/courts", response_model=List[CourtUsageResponse])
async def get_court_usage(
    filters: MatchFilters = Depends(match_filters),
    session: AsyncSession = Depends(get_db_session),
):
    """Match count and durations per court."""
    try:
        _, courts, _, matches = await data_service.load_snapshot(session)
        matches = filter_service.filter_matches(matches, filters)
        return calculation_service.court_usage(courts, matches)
    except Exception as e:
        logger.error(f"Error computing court usage: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error computing court usage: {str(e)}")


@router.get("/api/stats/monthly", response_model=Dict[str, int])
async def get_monthly_counts(
    filters: MatchFilters = Depends(match_filters),
    session: AsyncSession = Depends(get_db_session),
):
    """Number of matches per month, keyed ``YYYY-M``."""
    try:
        matches = filter_service.filter_matches(await data_service.list_matches(session), filters)
        return calculation_service.monthly_match_counts(matches)
    except Exception as e:
        logger.error(f"Error computing monthly counts: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error computing monthly counts: {str(e)}")


@router.get("/api/share", response_model=ShareResponse)
async def share_summary(
    filters: MatchFilters = Depends(match_filters),
    session: AsyncSession = Depends(get_db_session),
):
    """Plain-text summary of the filtered matches, ready to paste into a message."""
    try:
        matches = filter_service.filter_matches(await data_service.list_matches(session), filters)
        stats = calculation_service.compute_stats(matches)
        return {
            "text": export_service.build_share_text(matches, stats),
            "match_count": len(matches),
            "generated_at": utcnow().isoformat(),
        }
    except Exception as e:
        logger.error(f"Error building share summary: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error building share summary: {str(e)}")
