"""
Pydantic models for API request/response validation.
"""

from datetime import date as date_type, datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator

from tennis_backend.models.entities import (
    CourtSurface,
    MatchResult,
    MatchStatus,
    ScheduleStatus,
    SkillLevel,
)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    database: bool
    message: str


# --- Players ---


class PlayerBase(BaseModel):
    """Base player model."""

    name: str = Field(min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    skill_level: SkillLevel = SkillLevel.BEGINNER


class PlayerCreate(PlayerBase):
    """Request to create a player."""

    pass


class PlayerUpdate(BaseModel):
    """Request to update a player. Only the supplied fields change."""

    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    skill_level: Optional[SkillLevel] = None


class PlayerResponse(PlayerBase):
    """Player response."""

    id: str
    created_at: Optional[str] = None


# --- Courts ---


class CourtBase(BaseModel):
    """Base court model."""

    name: str = Field(min_length=1)
    location: str = ""
    surface: CourtSurface = CourtSurface.HARD
    is_indoor: bool = False
    is_active: bool = True


class CourtCreate(CourtBase):
    """Request to create a court."""

    pass


class CourtUpdate(BaseModel):
    """Request to update a court. Only the supplied fields change."""

    name: Optional[str] = Field(default=None, min_length=1)
    location: Optional[str] = None
    surface: Optional[CourtSurface] = None
    is_indoor: Optional[bool] = None
    is_active: Optional[bool] = None


class CourtResponse(CourtBase):
    """Court response."""

    id: str
    created_at: Optional[str] = None


# --- Schedules ---


class ScheduleCreate(BaseModel):
    """Request to create a schedule."""

    date: date_type
    player_ids: List[str] = Field(min_length=2)
    status: ScheduleStatus = ScheduleStatus.SCHEDULED
    notes: Optional[str] = None


class ScheduleUpdate(BaseModel):
    """Request to update a schedule. Only the supplied fields change."""

    date: Optional[date_type] = None
    player_ids: Optional[List[str]] = Field(default=None, min_length=2)
    status: Optional[ScheduleStatus] = None
    notes: Optional[str] = None


class ScheduleResponse(BaseModel):
    """Schedule response."""

    id: str
    date: str
    players: List[PlayerResponse]
    status: ScheduleStatus
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# --- Matches ---


class MatchSetRequest(BaseModel):
    """Scores of a single set. The set result is derived from the scores."""

    set_number: int = Field(ge=1)
    team_a_score: int = Field(ge=0)
    team_b_score: int = Field(ge=0)
    duration: Optional[int] = Field(default=None, gt=0)


class CreateMatchRequest(BaseModel):
    """Request to create a match by entering set scores."""

    date: datetime
    court_id: str
    player_a1_id: str
    player_a2_id: str
    player_b1_id: str
    player_b2_id: str
    sets: List[MatchSetRequest] = Field(min_length=1)
    result: Optional[MatchResult] = None  # derived from the sets when omitted
    duration: int = Field(gt=0)
    schedule_id: Optional[str] = None
    notes: Optional[str] = None


class RecordMatchResultRequest(BaseModel):
    """Request to record the outcome of a scheduled doubles match."""

    schedule_id: str
    court_id: str
    player_a1_id: str
    player_a2_id: str
    player_b1_id: str
    player_b2_id: str
    result: MatchResult
    duration: int = Field(gt=0)
    notes: Optional[str] = None


class UpdateMatchRequest(BaseModel):
    """Request to update a match. Only the supplied fields change."""

    date: Optional[datetime] = None
    court_id: Optional[str] = None
    player_a1_id: Optional[str] = None
    player_a2_id: Optional[str] = None
    player_b1_id: Optional[str] = None
    player_b2_id: Optional[str] = None
    sets: Optional[List[MatchSetRequest]] = Field(default=None, min_length=1)
    result: Optional[MatchResult] = None
    duration: Optional[int] = Field(default=None, gt=0)
    status: Optional[MatchStatus] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_not_empty(self):
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        return self


class MatchPlayerResponse(BaseModel):
    """Player as recorded on a match."""

    id: str
    name: str
    skill_level: Optional[SkillLevel] = None


class MatchSetResponse(BaseModel):
    """Set score."""

    set_number: int
    team_a_score: int
    team_b_score: int
    result: MatchResult
    duration: Optional[int] = None


class MatchResponse(BaseModel):
    """Match result data with display labels."""

    id: str
    schedule_id: Optional[str] = None
    date: str
    player_a1: Optional[MatchPlayerResponse] = None
    player_a2: Optional[MatchPlayerResponse] = None
    player_b1: Optional[MatchPlayerResponse] = None
    player_b2: Optional[MatchPlayerResponse] = None
    team_a: str
    team_b: str
    sets: List[MatchSetResponse]
    result: MatchResult
    winner: str
    score: str
    duration: int
    duration_label: str
    status: MatchStatus
    court_id: str
    court_name: str
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# --- Stats ---


class MatchStatsResponse(BaseModel):
    """Summary statistics over matches."""

    total_matches: int
    completed_matches: int
    cancelled_matches: int
    average_duration: float
    most_active_player: str
    most_active_court: str
    win_rate: Dict[str, float]


class PlayerStandingResponse(BaseModel):
    """Per-player results."""

    model_config = ConfigDict(use_enum_values=True)
    player_id: str
    name: str
    skill_level: SkillLevel
    total_matches: int
    wins: int
    win_rate: float
    total_duration: int


class CourtUsageResponse(BaseModel):
    """Per-court usage."""

    court_id: str
    name: str
    match_count: int
    total_duration: int
    average_duration: float


class ShareResponse(BaseModel):
    """Plain-text summary for sharing."""

    text: str
    match_count: int
    generated_at: str
