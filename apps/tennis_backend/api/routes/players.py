"""Player CRUD route handlers."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tennis_backend.api.routes import limiter, WRITE_RATE_LIMIT
from tennis_backend.database.db import get_db_session
from tennis_backend.services import data_service, filter_service
from tennis_backend.models.entities import SkillLevel
from tennis_backend.models.schemas import PlayerCreate, PlayerResponse, PlayerUpdate

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/players", response_model=List[PlayerResponse])
async def list_players(
    skill_level: Optional[SkillLevel] = None,
    session: AsyncSession = Depends(get_db_session),
):
    """List players, optionally restricted to one skill level."""
    try:
        players = await data_service.list_players(session)
        if skill_level is not None:
            players = filter_service.players_by_skill_level(players, skill_level)
        return [data_service.player_to_dict(p) for p in players]
    except Exception as e:
        logger.error(f"Error listing players: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error listing players: {str(e)}")


@router.post("/api/players", response_model=PlayerResponse, status_code=201)
@limiter.limit(WRITE_RATE_LIMIT)
async def create_player(
    request: Request,
    payload: PlayerCreate,
    session: AsyncSession = Depends(get_db_session),
):
    """Create a player."""
    try:
        player = await data_service.create_player(
            session,
            name=payload.name,
            skill_level=payload.skill_level,
            email=payload.email,
            phone=payload.phone,
        )
        logger.info(f"Created player {player.id} ({player.name})")
        return data_service.player_to_dict(player)
    except Exception as e:
        logger.error(f"Error creating player: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error creating player: {str(e)}")


@router.get("/api/players/{player_id}", response_model=PlayerResponse)
async def get_player(player_id: str, session: AsyncSession = Depends(get_db_session)):
    """Get a player by id."""
    try:
        player = await data_service.get_player(session, player_id)
        if not player:
            raise HTTPException(status_code=404, detail="Player not found")
        return data_service.player_to_dict(player)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting player {player_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error getting player: {str(e)}")


@router.put("/api/players/{player_id}", response_model=PlayerResponse)
async def update_player(
    player_id: str,
    payload: PlayerUpdate,
    session: AsyncSession = Depends(get_db_session),
):
    """Update a player. Recorded matches keep the details they were played with."""
    try:
        player = await data_service.update_player(
            session,
            player_id,
            name=payload.name,
            skill_level=payload.skill_level,
            email=payload.email,
            phone=payload.phone,
        )
        if not player:
            raise HTTPException(status_code=404, detail="Player not found")
        return data_service.player_to_dict(player)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating player {player_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error updating player: {str(e)}")


@router.delete("/api/players/{player_id}")
async def delete_player(player_id: str, session: AsyncSession = Depends(get_db_session)):
    """Delete a player."""
    try:
        success = await data_service.delete_player(session, player_id)
        if not success:
            raise HTTPException(status_code=404, detail="Player not found")
        return {"success": True}
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error deleting player {player_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error deleting player: {str(e)}")
