"""
SQLAlchemy ORM models for the doubles tennis log.
"""

import uuid
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    UniqueConstraint,
    Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from tennis_backend.database.db import Base
from tennis_backend.models.entities import (
    CourtSurface,
    MatchResult,
    MatchStatus,
    ScheduleStatus,
    SkillLevel,
)


def _new_id() -> str:
    return str(uuid.uuid4())


class Player(Base):
    """Registered players."""

    __tablename__ = "players"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    skill_level = Column(Enum(SkillLevel), default=SkillLevel.BEGINNER, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    schedule_entries = relationship(
        "SchedulePlayer", back_populates="player", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("idx_players_name", "name"),
        Index("idx_players_skill_level", "skill_level"),
    )


class Court(Base):
    """Courts where matches are played."""

    __tablename__ = "courts"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String, nullable=False)
    location = Column(String, nullable=False, default="")
    surface = Column(Enum(CourtSurface), default=CourtSurface.HARD, nullable=False)
    is_indoor = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (Index("idx_courts_is_active", "is_active"),)


class Schedule(Base):
    """Planned gatherings of players on a given day."""

    __tablename__ = "schedules"

    id = Column(String(36), primary_key=True, default=_new_id)
    date = Column(Date, nullable=False)
    status = Column(Enum(ScheduleStatus), default=ScheduleStatus.SCHEDULED, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    entries = relationship(
        "SchedulePlayer",
        back_populates="schedule",
        cascade="all, delete-orphan",
        order_by="SchedulePlayer.id",
    )
    matches = relationship("Match", back_populates="schedule")

    __table_args__ = (
        Index("idx_schedules_date", "date"),
        Index("idx_schedules_status", "status"),
    )


class SchedulePlayer(Base):
    """Join table (Schedule ↔ Player)."""

    __tablename__ = "schedule_players"

    id = Column(Integer, primary_key=True, autoincrement=True)
    schedule_id = Column(String(36), ForeignKey("schedules.id", ondelete="CASCADE"), nullable=False)
    player_id = Column(String(36), ForeignKey("players.id", ondelete="CASCADE"), nullable=False)

    schedule = relationship("Schedule", back_populates="entries")
    player = relationship("Player", back_populates="schedule_entries", lazy="joined")

    __table_args__ = (
        UniqueConstraint("schedule_id", "player_id", name="uq_schedule_players_schedule_player"),
        Index("idx_schedule_players_schedule_id", "schedule_id"),
        Index("idx_schedule_players_player_id", "player_id"),
    )


class Match(Base):
    """
    Completed match results.

    Player and court columns hold a snapshot taken when the match was
    written, not foreign keys: deleting a player or court leaves the
    historical match readable.
    """

    __tablename__ = "matches"

    id = Column(String(36), primary_key=True, default=_new_id)
    schedule_id = Column(
        String(36), ForeignKey("schedules.id", ondelete="SET NULL"), nullable=True
    )
    date = Column(DateTime, nullable=False)
    player_a1_id = Column(String(36), nullable=False)
    player_a1_name = Column(String, nullable=False, default="")
    player_a1_skill_level = Column(Enum(SkillLevel), nullable=True)
    player_a2_id = Column(String(36), nullable=False)
    player_a2_name = Column(String, nullable=False, default="")
    player_a2_skill_level = Column(Enum(SkillLevel), nullable=True)
    player_b1_id = Column(String(36), nullable=False)
    player_b1_name = Column(String, nullable=False, default="")
    player_b1_skill_level = Column(Enum(SkillLevel), nullable=True)
    player_b2_id = Column(String(36), nullable=False)
    player_b2_name = Column(String, nullable=False, default="")
    player_b2_skill_level = Column(Enum(SkillLevel), nullable=True)
    result = Column(Enum(MatchResult), nullable=False)
    duration = Column(Integer, nullable=False)  # minutes
    status = Column(Enum(MatchStatus), default=MatchStatus.COMPLETED, nullable=False)
    notes = Column(Text, nullable=True)
    court_id = Column(String(36), nullable=False)
    court_name = Column(String, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    schedule = relationship("Schedule", back_populates="matches")
    sets = relationship(
        "MatchSet",
        back_populates="match",
        cascade="all, delete-orphan",
        order_by="MatchSet.id",
        lazy="selectin",
    )

    __table_args__ = (
        Index("idx_matches_date", "date"),
        Index("idx_matches_court", "court_id"),
        Index("idx_matches_schedule", "schedule_id"),
        Index("idx_matches_status", "status"),
    )


class MatchSet(Base):
    """Per-set scores of a match, kept in the order they were written."""

    __tablename__ = "match_sets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    match_id = Column(String(36), ForeignKey("matches.id", ondelete="CASCADE"), nullable=False)
    set_number = Column(Integer, nullable=False)
    team_a_score = Column(Integer, nullable=False)
    team_b_score = Column(Integer, nullable=False)
    result = Column(Enum(MatchResult), nullable=False)
    duration = Column(Integer, nullable=True)  # minutes

    match = relationship("Match", back_populates="sets")

    __table_args__ = (Index("idx_match_sets_match", "match_id"),)
