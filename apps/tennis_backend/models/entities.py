"""
Plain value types shared by the stats, filter and display helpers.

These are immutable snapshots built by the data service from database rows.
None of them carry behavior; the pure helpers in ``services`` and ``utils``
operate on them directly.
"""

import enum
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Optional, Tuple


class SkillLevel(str, enum.Enum):
    """Player skill tier."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class CourtSurface(str, enum.Enum):
    """Court surface type."""

    HARD = "hard"
    CLAY = "clay"
    GRASS = "grass"
    SYNTHETIC = "synthetic"


class ScheduleStatus(str, enum.Enum):
    """Schedule status."""

    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"


class MatchStatus(str, enum.Enum):
    """Match status. Matches are recorded as completed; cancelled is counted when present."""

    COMPLETED = "completed"
    CANCELLED = "cancelled"


class MatchResult(str, enum.Enum):
    """Which side won a match or a set."""

    TEAM_A = "teamA"
    TEAM_B = "teamB"
    DRAW = "draw"


@dataclass(frozen=True)
class Player:
    id: str
    name: str
    skill_level: SkillLevel = SkillLevel.BEGINNER
    email: Optional[str] = None
    phone: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Court:
    id: str
    name: str
    location: str = ""
    surface: CourtSurface = CourtSurface.HARD
    is_indoor: bool = False
    is_active: bool = True
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Schedule:
    id: str
    date: date
    players: Tuple[Player, ...] = ()
    status: ScheduleStatus = ScheduleStatus.SCHEDULED
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class MatchSet:
    set_number: int
    team_a_score: int
    team_b_score: int
    result: MatchResult
    duration: Optional[int] = None  # minutes


@dataclass(frozen=True)
class Match:
    id: str
    date: datetime
    player_a1: Optional[Player]
    player_a2: Optional[Player]
    player_b1: Optional[Player]
    player_b2: Optional[Player]
    result: MatchResult
    duration: int  # minutes
    court_id: str
    court_name: str = ""
    sets: Tuple[MatchSet, ...] = ()
    status: MatchStatus = MatchStatus.COMPLETED
    schedule_id: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def team_a(self) -> Tuple[Optional[Player], Optional[Player]]:
        return (self.player_a1, self.player_a2)

    @property
    def team_b(self) -> Tuple[Optional[Player], Optional[Player]]:
        return (self.player_b1, self.player_b2)

    @property
    def players(self) -> Tuple[Optional[Player], ...]:
        """All four slots in a1, a2, b1, b2 order."""
        return (self.player_a1, self.player_a2, self.player_b1, self.player_b2)


@dataclass(frozen=True)
class MatchFilters:
    """
    Optional match criteria. Every field left as None imposes no constraint.

    ``date_from`` and ``date_to`` are naive UTC, like stored match dates
    (see ``to_naive_utc``).
    """

    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    player_id: Optional[str] = None
    court_id: Optional[str] = None
    status: Optional[MatchStatus] = None


@dataclass(frozen=True)
class ScheduleFilters:
    """Optional schedule criteria. Every field left as None imposes no constraint."""

    date_from: Optional[date] = None
    date_to: Optional[date] = None
    player_id: Optional[str] = None
    status: Optional[ScheduleStatus] = None


@dataclass(frozen=True)
class MatchStats:
    total_matches: int = 0
    completed_matches: int = 0
    cancelled_matches: int = 0
    average_duration: float = 0.0
    most_active_player: str = ""
    most_active_court: str = ""
    win_rate: Dict[str, float] = field(default_factory=dict)
