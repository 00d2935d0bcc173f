"""Schedule CRUD route handlers."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tennis_backend.api.routes import limiter, schedule_filters, WRITE_RATE_LIMIT
from tennis_backend.database.db import get_db_session
from tennis_backend.models.entities import ScheduleFilters
from tennis_backend.models.schemas import ScheduleCreate, ScheduleResponse, ScheduleUpdate
from tennis_backend.services import data_service, filter_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/schedules", response_model=List[ScheduleResponse])
async def list_schedules(
    filters: ScheduleFilters = Depends(schedule_filters),
    session: AsyncSession = Depends(get_db_session),
):
    """
    List schedules, newest first.

    Query params:
        date_from, date_to: ISO days, inclusive (a datetime counts as the day written)
        player_id: Only schedules that include this player
        status: scheduled | cancelled
    """
    try:
        schedules = await data_service.list_schedules(session)
        return [
            data_service.schedule_to_dict(s)
            for s in filter_service.filter_schedules(schedules, filters)
        ]
    except Exception as e:
        logger.error(f"Error listing schedules: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error listing schedules: {str(e)}")


@router.post("/api/schedules", response_model=ScheduleResponse, status_code=201)
@limiter.limit(WRITE_RATE_LIMIT)
async def create_schedule(
    request: Request,
    payload: ScheduleCreate,
    session: AsyncSession = Depends(get_db_session),
):
    """Create a schedule for a day with at least two players."""
    try:
        schedule = await data_service.create_schedule(
            session,
            date=payload.date,
            player_ids=payload.player_ids,
            status=payload.status,
            notes=payload.notes,
        )
        return data_service.schedule_to_dict(schedule)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating schedule: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error creating schedule: {str(e)}")


@router.get("/api/schedules/{schedule_id}", response_model=ScheduleResponse)
async def get_schedule(schedule_id: str, session: AsyncSession = Depends(get_db_session)):
    """Get a schedule with its players."""
    try:
        schedule = await data_service.get_schedule(session, schedule_id)
        if not schedule:
            raise HTTPException(status_code=404, detail="Schedule not found")
        return data_service.schedule_to_dict(schedule)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting schedule {schedule_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error getting schedule: {str(e)}")


@router.put("/api/schedules/{schedule_id}", response_model=ScheduleResponse)
async def update_schedule(
    schedule_id: str,
    payload: ScheduleUpdate,
    session: AsyncSession = Depends(get_db_session),
):
    """Update a schedule. ``player_ids`` replaces the whole player list."""
    try:
        schedule = await data_service.update_schedule(
            session,
            schedule_id,
            date=payload.date,
            player_ids=payload.player_ids,
            status=payload.status,
            notes=payload.notes,
        )
        if not schedule:
            raise HTTPException(status_code=404, detail="Schedule not found")
        return data_service.schedule_to_dict(schedule)
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating schedule {schedule_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error updating schedule: {str(e)}")


@router.delete("/api/schedules/{schedule_id}")
async def delete_schedule(schedule_id: str, session: AsyncSession = Depends(get_db_session)):
    """Delete a schedule. Matches recorded from it are kept."""
    try:
        success = await data_service.delete_schedule(session, schedule_id)
        if not success:
            raise HTTPException(status_code=404, detail="Schedule not found")
        return {"success": True}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting schedule {schedule_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error deleting schedule: {str(e)}")
