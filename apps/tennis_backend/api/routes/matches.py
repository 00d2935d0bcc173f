"""Match CRUD, result recording and export route handlers."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from tennis_backend.api.routes import limiter, match_filters, WRITE_RATE_LIMIT
from tennis_backend.database.db import get_db_session
from tennis_backend.models.entities import MatchFilters
from tennis_backend.models.schemas import (
    CreateMatchRequest,
    MatchResponse,
    RecordMatchResultRequest,
    UpdateMatchRequest,
)
from tennis_backend.services import data_service, export_service, filter_service
from tennis_backend.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/matches", response_model=List[MatchResponse])
async def list_matches(
    filters: MatchFilters = Depends(match_filters),
    session: AsyncSession = Depends(get_db_session),
):
    """
    List matches, most recent first.

    Query params:
        date_from, date_to: ISO date or datetime (a bare ``date_to`` day is inclusive)
        player_id: Matches where the player filled any of the four slots
        court_id: Matches on this court
        status: completed | cancelled
    """
    try:
        matches = await data_service.list_matches(session)
        return [
            data_service.match_to_dict(m)
            for m in filter_service.filter_matches(matches, filters)
        ]
    except Exception as e:
        logger.error(f"Error listing matches: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error listing matches: {str(e)}")


@router.post("/api/matches", response_model=MatchResponse, status_code=201)
@limiter.limit(WRITE_RATE_LIMIT)
async def create_match(
    request: Request,
    match_request: CreateMatchRequest,
    session: AsyncSession = Depends(get_db_session),
):
    """
    Create a match from entered set scores.

    Request body:
        {
            "date": "2024-05-01T18:00:00",
            "court_id": "...",
            "player_a1_id": "...", "player_a2_id": "...",
            "player_b1_id": "...", "player_b2_id": "...",
            "sets": [{"set_number": 1, "team_a_score": 6, "team_b_score": 4}],
            "result": "teamA",    // Optional - derived from the sets when omitted
            "duration": 90,
            "schedule_id": "...", // Optional
            "notes": "..."        // Optional
        }
    """
    try:
        match = await data_service.create_match(session, match_request)
        logger.info(f"Created match {match.id} ({match.result.value})")
        return data_service.match_to_dict(match)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating match: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error creating match: {str(e)}")


@router.post("/api/matches/results", response_model=MatchResponse, status_code=201)
@limiter.limit(WRITE_RATE_LIMIT)
async def record_match_result(
    request: Request,
    result_request: RecordMatchResultRequest,
    session: AsyncSession = Depends(get_db_session),
):
    """
    Record the result of a doubles match played from a schedule.

    All four players must belong to the schedule; the match is dated on the
    schedule's day.
    """
    try:
        match = await data_service.record_match_result(session, result_request)
        logger.info(f"Recorded result {match.result.value} for schedule {match.schedule_id}")
        return data_service.match_to_dict(match)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error recording match result: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error recording match result: {str(e)}")


@router.get("/api/matches/export")
async def export_matches(
    filters: MatchFilters = Depends(match_filters),
    session: AsyncSession = Depends(get_db_session),
):
    """Download the filtered matches as CSV, most recent first."""
    try:
        matches = filter_service.filter_matches(await data_service.list_matches(session), filters)
        filename = f"tennis-matches-{utcnow().strftime('%Y-%m-%d')}.csv"
        return Response(
            content=export_service.export_matches_to_csv(matches),
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
    except Exception as e:
        logger.error(f"Error exporting matches: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error exporting matches: {str(e)}")


@router.get("/api/matches/{match_id}", response_model=MatchResponse)
async def get_match(match_id: str, session: AsyncSession = Depends(get_db_session)):
    """Get a match with its sets."""
    try:
        match = await data_service.get_match(session, match_id)
        if not match:
            raise HTTPException(status_code=404, detail="Match not found")
        return data_service.match_to_dict(match)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting match {match_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error getting match: {str(e)}")


@router.put("/api/matches/{match_id}", response_model=MatchResponse)
async def update_match(
    match_id: str,
    match_request: UpdateMatchRequest,
    session: AsyncSession = Depends(get_db_session),
):
    """Update a match. Supplied sets replace the stored ones."""
    try:
        match = await data_service.update_match(session, match_id, match_request)
        if not match:
            raise HTTPException(status_code=404, detail="Match not found")
        return data_service.match_to_dict(match)
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating match {match_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error updating match: {str(e)}")


@router.delete("/api/matches/{match_id}")
async def delete_match(match_id: str, session: AsyncSession = Depends(get_db_session)):
    """Delete a match and its sets."""
    try:
        success = await data_service.delete_match(session, match_id)
        if not success:
            raise HTTPException(status_code=404, detail="Match not found")
        return {"success": True}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting match {match_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error deleting match: {str(e)}")
