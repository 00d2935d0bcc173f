"""Court CRUD route handlers."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tennis_backend.api.routes import limiter, WRITE_RATE_LIMIT
from tennis_backend.database.db import get_db_session
from tennis_backend.services import data_service, filter_service
from tennis_backend.models.schemas import CourtCreate, CourtResponse, CourtUpdate

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/courts", response_model=List[CourtResponse])
async def list_courts(active_only: bool = False, session: AsyncSession = Depends(get_db_session)):
    """List courts, optionally only the active ones."""
    try:
        courts = await data_service.list_courts(session)
        if active_only:
            courts = filter_service.active_courts(courts)
        return [data_service.court_to_dict(c) for c in courts]
    except Exception as e:
        logger.error(f"Error listing courts: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error listing courts: {str(e)}")


@router.post("/api/courts", response_model=CourtResponse, status_code=201)
@limiter.limit(WRITE_RATE_LIMIT)
async def create_court(
    request: Request,
    payload: CourtCreate,
    session: AsyncSession = Depends(get_db_session),
):
    """Create a court."""
    try:
        court = await data_service.create_court(
            session,
            name=payload.name,
            location=payload.location,
            surface=payload.surface,
            is_indoor=payload.is_indoor,
            is_active=payload.is_active,
        )
        return data_service.court_to_dict(court)
    except Exception as e:
        logger.error(f"Error creating court: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error creating court: {str(e)}")


@router.get("/api/courts/{court_id}", response_model=CourtResponse)
async def get_court(court_id: str, session: AsyncSession = Depends(get_db_session)):
    """Get a court by id."""
    try:
        court = await data_service.get_court(session, court_id)
        if not court:
            raise HTTPException(status_code=404, detail="Court not found")
        return data_service.court_to_dict(court)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting court {court_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error getting court: {str(e)}")


@router.put("/api/courts/{court_id}", response_model=CourtResponse)
async def update_court(
    court_id: str,
    payload: CourtUpdate,
    session: AsyncSession = Depends(get_db_session),
):
    """Update a court."""
    try:
        court = await data_service.update_court(
            session,
            court_id,
            name=payload.name,
            location=payload.location,
            surface=payload.surface,
            is_indoor=payload.is_indoor,
            is_active=payload.is_active,
        )
        if not court:
            raise HTTPException(status_code=404, detail="Court not found")
        return data_service.court_to_dict(court)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating court {court_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error updating court: {str(e)}")


@router.delete("/api/courts/{court_id}")
async def delete_court(court_id: str, session: AsyncSession = Depends(get_db_session)):
    """Delete a court."""
    try:
        success = await data_service.delete_court(session, court_id)
        if not success:
            raise HTTPException(status_code=404, detail="Court not found")
        return {"success": True}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting court {court_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error deleting court: {str(e)}")
