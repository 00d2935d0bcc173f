"""
Data service layer for database operations.
Handles all CRUD operations for players, courts, schedules and matches.

Store functions return the immutable snapshots from ``models.entities`` so
the pure stats, filter and export helpers can consume them directly; the
``*_to_dict`` serializers at the bottom turn those into API payloads.
"""

from datetime import datetime, time
from typing import Dict, List, Optional, Sequence, Tuple, TYPE_CHECKING
from sqlalchemy import select, update, delete, func, text
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

if TYPE_CHECKING:
    from tennis_backend.models.schemas import (
        CreateMatchRequest,
        MatchSetRequest,
        RecordMatchResultRequest,
        UpdateMatchRequest,
    )
from tennis_backend.database.models import (
    Player,
    Court,
    Schedule,
    SchedulePlayer,
    Match,
    MatchSet,
)
from tennis_backend.models import entities
from tennis_backend.models.entities import (
    CourtSurface,
    MatchStatus,
    ScheduleStatus,
    SkillLevel,
)
from tennis_backend.services import calculation_service
from tennis_backend.utils.datetime_utils import to_naive_utc
from tennis_backend.utils.display import (
    duration_label,
    match_score_string,
    match_winner_label,
    team_name,
)

MATCH_SLOTS = ("a1", "a2", "b1", "b2")


#
# Helper functions
#

def _isoformat(value) -> Optional[str]:
    return value.isoformat() if value else None


def _player_from_row(player: Player) -> entities.Player:
    return entities.Player(
        id=player.id,
        name=player.name,
        skill_level=player.skill_level,
        email=player.email,
        phone=player.phone,
        created_at=player.created_at,
    )


def _court_from_row(court: Court) -> entities.Court:
    return entities.Court(
        id=court.id,
        name=court.name,
        location=court.location,
        surface=court.surface,
        is_indoor=court.is_indoor,
        is_active=court.is_active,
        created_at=court.created_at,
    )


def _schedule_from_row(schedule: Schedule) -> entities.Schedule:
    return entities.Schedule(
        id=schedule.id,
        date=schedule.date,
        players=tuple(
            _player_from_row(entry.player) for entry in schedule.entries if entry.player is not None
        ),
        status=schedule.status,
        notes=schedule.notes,
        created_at=schedule.created_at,
        updated_at=schedule.updated_at,
    )


def _match_player(match: Match, slot: str) -> entities.Player:
    """Rebuild the player snapshot stored in one of the four match slots."""
    return entities.Player(
        id=getattr(match, f"player_{slot}_id"),
        name=getattr(match, f"player_{slot}_name"),
        skill_level=getattr(match, f"player_{slot}_skill_level") or SkillLevel.BEGINNER,
    )


def _match_from_row(match: Match) -> entities.Match:
    return entities.Match(
        id=match.id,
        date=match.date,
        player_a1=_match_player(match, "a1"),
        player_a2=_match_player(match, "a2"),
        player_b1=_match_player(match, "b1"),
        player_b2=_match_player(match, "b2"),
        result=match.result,
        duration=match.duration,
        court_id=match.court_id,
        court_name=match.court_name,
        sets=tuple(
            entities.MatchSet(
                set_number=s.set_number,
                team_a_score=s.team_a_score,
                team_b_score=s.team_b_score,
                result=s.result,
                duration=s.duration,
            )
            for s in match.sets
        ),
        status=match.status,
        schedule_id=match.schedule_id,
        notes=match.notes,
        created_at=match.created_at,
        updated_at=match.updated_at,
    )


def _schedule_query():
    return select(Schedule).options(
        selectinload(Schedule.entries).joinedload(SchedulePlayer.player)
    )


async def _fetch_player(session: AsyncSession, player_id: str) -> Optional[Player]:
    result = await session.execute(
        select(Player)
        .where(Player.id == player_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _fetch_court(session: AsyncSession, court_id: str) -> Optional[Court]:
    result = await session.execute(
        select(Court)
        .where(Court.id == court_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _fetch_schedule(session: AsyncSession, schedule_id: str) -> Optional[Schedule]:
    result = await session.execute(
        _schedule_query()
        .where(Schedule.id == schedule_id)
        .execution_options(populate_existing=True)
    )
    return result.unique().scalar_one_or_none()


async def _fetch_match(session: AsyncSession, match_id: str) -> Optional[Match]:
    result = await session.execute(
        select(Match)
        .where(Match.id == match_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _load_players(session: AsyncSession, player_ids: Sequence[str]) -> Dict[str, Player]:
    """
    Load the given players, keyed by id.

    Raises:
        ValueError: If any id does not exist
    """
    result = await session.execute(select(Player).where(Player.id.in_(list(player_ids))))
    players = {p.id: p for p in result.scalars().all()}
    for player_id in player_ids:
        if player_id not in players:
            raise ValueError(f"Player {player_id} not found")
    return players


async def _require_court(session: AsyncSession, court_id: str) -> Court:
    court = await _fetch_court(session, court_id)
    if court is None:
        raise ValueError(f"Court {court_id} not found")
    return court


def _check_distinct(player_ids: Sequence[str], message: str) -> None:
    if len(set(player_ids)) != len(player_ids):
        raise ValueError(message)


async def _match_lineup(
    session: AsyncSession, player_ids: Sequence[str], court_id: str
) -> Dict:
    """
    Validate a four-player lineup and court, returning snapshot column values.

    Raises:
        ValueError: If players repeat or any player/court does not exist
    """
    _check_distinct(player_ids, "All four players must be distinct")
    players = await _load_players(session, player_ids)
    court = await _require_court(session, court_id)

    values = {"court_id": court.id, "court_name": court.name}
    for slot, player_id in zip(MATCH_SLOTS, player_ids):
        player = players[player_id]
        values[f"player_{slot}_id"] = player.id
        values[f"player_{slot}_name"] = player.name
        values[f"player_{slot}_skill_level"] = player.skill_level
    return values


def _sets_from_request(set_requests: Sequence['MatchSetRequest']) -> List[MatchSet]:
    return [
        MatchSet(
            set_number=s.set_number,
            team_a_score=s.team_a_score,
            team_b_score=s.team_b_score,
            result=calculation_service.calculate_set_result(s.team_a_score, s.team_b_score),
            duration=s.duration,
        )
        for s in set_requests
    ]


# ============================================================================
# Health
# ============================================================================

async def check_connection(session: AsyncSession) -> bool:
    """Return True if the database answers a trivial query."""
    result = await session.execute(text("SELECT 1"))
    return result.scalar() == 1


# ============================================================================
# Players
# ============================================================================

async def create_player(
    session: AsyncSession,
    name: str,
    skill_level: SkillLevel = SkillLevel.BEGINNER,
    email: Optional[str] = None,
    phone: Optional[str] = None,
) -> entities.Player:
    """Create a player."""
    player = Player(name=name, skill_level=skill_level, email=email, phone=phone)
    session.add(player)
    await session.commit()
    await session.refresh(player)
    return _player_from_row(player)


async def list_players(session: AsyncSession) -> List[entities.Player]:
    """List players by name."""
    result = await session.execute(
        select(Player).order_by(Player.name.asc(), Player.id.asc())
    )
    return [_player_from_row(p) for p in result.scalars().all()]


async def get_player(session: AsyncSession, player_id: str) -> Optional[entities.Player]:
    """Get a player by id."""
    player = await _fetch_player(session, player_id)
    return _player_from_row(player) if player else None


async def update_player(
    session: AsyncSession,
    player_id: str,
    name: Optional[str] = None,
    skill_level: Optional[SkillLevel] = None,
    email: Optional[str] = None,
    phone: Optional[str] = None,
) -> Optional[entities.Player]:
    """
    Update a player. Only non-None fields are written.

    Matches keep the name and level captured when they were recorded.
    """
    update_values = {}
    if name is not None:
        update_values["name"] = name
    if skill_level is not None:
        update_values["skill_level"] = skill_level
    if email is not None:
        update_values["email"] = email
    if phone is not None:
        update_values["phone"] = phone

    if update_values:
        await session.execute(
            update(Player)
            .where(Player.id == player_id)
            .values(**update_values)
        )
        await session.commit()

    return await get_player(session, player_id)


async def delete_player(session: AsyncSession, player_id: str) -> bool:
    """
    Delete a player and their schedule memberships.
    Recorded matches are untouched and keep the player's snapshot.

    Raises:
        ValueError: if a schedule would be left with fewer than two players
    """
    memberships = select(SchedulePlayer.schedule_id).where(SchedulePlayer.player_id == player_id)
    result = await session.execute(
        select(SchedulePlayer.schedule_id)
        .where(SchedulePlayer.schedule_id.in_(memberships))
        .group_by(SchedulePlayer.schedule_id)
        .having(func.count(SchedulePlayer.player_id) <= 2)
    )
    blocking = sorted(result.scalars().all())
    if blocking:
        raise ValueError(
            f"Player {player_id} cannot be deleted: schedule {', '.join(blocking)} "
            "would have fewer than two players"
        )

    await session.execute(
        delete(SchedulePlayer).where(SchedulePlayer.player_id == player_id)
    )
    result = await session.execute(
        delete(Player).where(Player.id == player_id)
    )
    await session.commit()
    return result.rowcount > 0


# ============================================================================
# Courts
# ============================================================================

async def create_court(
    session: AsyncSession,
    name: str,
    location: str = "",
    surface: CourtSurface = CourtSurface.HARD,
    is_indoor: bool = False,
    is_active: bool = True,
) -> entities.Court:
    """Create a court."""
    court = Court(
        name=name,
        location=location,
        surface=surface,
        is_indoor=is_indoor,
        is_active=is_active,
    )
    session.add(court)
    await session.commit()
    await session.refresh(court)
    return _court_from_row(court)


async def list_courts(session: AsyncSession) -> List[entities.Court]:
    """List courts by name."""
    result = await session.execute(
        select(Court).order_by(Court.name.asc(), Court.id.asc())
    )
    return [_court_from_row(c) for c in result.scalars().all()]


async def get_court(session: AsyncSession, court_id: str) -> Optional[entities.Court]:
    """Get a court by id."""
    court = await _fetch_court(session, court_id)
    return _court_from_row(court) if court else None


async def update_court(
    session: AsyncSession,
    court_id: str,
    name: Optional[str] = None,
    location: Optional[str] = None,
    surface: Optional[CourtSurface] = None,
    is_indoor: Optional[bool] = None,
    is_active: Optional[bool] = None,
) -> Optional[entities.Court]:
    """Update a court. Only non-None fields are written."""
    update_values = {}
    if name is not None:
        update_values["name"] = name
    if location is not None:
        update_values["location"] = location
    if surface is not None:
        update_values["surface"] = surface
    if is_indoor is not None:
        update_values["is_indoor"] = is_indoor
    if is_active is not None:
        update_values["is_active"] = is_active

    if update_values:
        await session.execute(
            update(Court)
            .where(Court.id == court_id)
            .values(**update_values)
        )
        await session.commit()

    return await get_court(session, court_id)


async def delete_court(session: AsyncSession, court_id: str) -> bool:
    """Delete a court. Matches played there keep the court name they recorded."""
    result = await session.execute(
        delete(Court).where(Court.id == court_id)
    )
    await session.commit()
    return result.rowcount > 0


# ============================================================================
# Schedules
# ============================================================================

async def _validate_schedule_players(session: AsyncSession, player_ids: Sequence[str]) -> None:
    if len(player_ids) < 2:
        raise ValueError("A schedule needs at least two players")
    _check_distinct(player_ids, "Schedule players must be distinct")
    await _load_players(session, player_ids)


async def create_schedule(
    session: AsyncSession,
    date,
    player_ids: Sequence[str],
    status: ScheduleStatus = ScheduleStatus.SCHEDULED,
    notes: Optional[str] = None,
) -> entities.Schedule:
    """
    Create a schedule for a day with its players.

    Raises:
        ValueError: Fewer than two players, repeated players or unknown player ids
    """
    await _validate_schedule_players(session, player_ids)

    schedule = Schedule(
        date=date,
        status=status,
        notes=notes,
        entries=[SchedulePlayer(player_id=player_id) for player_id in player_ids],
    )
    session.add(schedule)
    await session.commit()

    return await get_schedule(session, schedule.id)


async def list_schedules(session: AsyncSession) -> List[entities.Schedule]:
    """List schedules, newest day first."""
    result = await session.execute(
        _schedule_query().order_by(Schedule.date.desc(), Schedule.created_at.desc())
    )
    return [_schedule_from_row(s) for s in result.unique().scalars().all()]


async def get_schedule(session: AsyncSession, schedule_id: str) -> Optional[entities.Schedule]:
    """Get a schedule with its players."""
    schedule = await _fetch_schedule(session, schedule_id)
    return _schedule_from_row(schedule) if schedule else None


async def update_schedule(
    session: AsyncSession,
    schedule_id: str,
    date=None,
    player_ids: Optional[Sequence[str]] = None,
    status: Optional[ScheduleStatus] = None,
    notes: Optional[str] = None,
) -> Optional[entities.Schedule]:
    """
    Update a schedule. Only non-None fields are written; ``player_ids``
    replaces the whole player list.

    Raises:
        ValueError: If the new player list is invalid
    """
    exists = await session.execute(select(Schedule.id).where(Schedule.id == schedule_id))
    if exists.scalar_one_or_none() is None:
        return None

    update_values = {}
    if date is not None:
        update_values["date"] = date
    if status is not None:
        update_values["status"] = status
    if notes is not None:
        update_values["notes"] = notes

    if player_ids is not None:
        await _validate_schedule_players(session, player_ids)
        await session.execute(
            delete(SchedulePlayer).where(SchedulePlayer.schedule_id == schedule_id)
        )
        session.add_all(
            SchedulePlayer(schedule_id=schedule_id, player_id=player_id)
            for player_id in player_ids
        )
        update_values["updated_at"] = func.now()

    if update_values:
        await session.execute(
            update(Schedule)
            .where(Schedule.id == schedule_id)
            .values(**update_values)
        )
    await session.commit()

    return await get_schedule(session, schedule_id)


async def delete_schedule(session: AsyncSession, schedule_id: str) -> bool:
    """
    Delete a schedule and its player list.
    Matches recorded against it are kept and lose the schedule link.
    """
    await session.execute(
        update(Match)
        .where(Match.schedule_id == schedule_id)
        .values(schedule_id=None)
    )
    await session.execute(
        delete(SchedulePlayer).where(SchedulePlayer.schedule_id == schedule_id)
    )
    result = await session.execute(
        delete(Schedule).where(Schedule.id == schedule_id)
    )
    await session.commit()
    return result.rowcount > 0


# ============================================================================
# Matches
# ============================================================================

async def create_match(
    session: AsyncSession,
    match_request: 'CreateMatchRequest',
) -> entities.Match:
    """
    Create a match from entered set scores.

    Each set is awarded to team A only when its score is strictly higher,
    otherwise to team B. The overall result is the request's result when
    given, else the result of the last set with differing scores, else a draw.

    Args:
        session: Database session
        match_request: CreateMatchRequest with players, court and sets

    Returns:
        The stored match

    Raises:
        ValueError: Repeated players, unknown player/court/schedule ids
    """
    player_ids = [
        match_request.player_a1_id,
        match_request.player_a2_id,
        match_request.player_b1_id,
        match_request.player_b2_id,
    ]
    lineup = await _match_lineup(session, player_ids, match_request.court_id)

    if match_request.schedule_id is not None:
        if await _fetch_schedule(session, match_request.schedule_id) is None:
            raise ValueError(f"Schedule {match_request.schedule_id} not found")

    result = match_request.result
    if result is None:
        result = calculation_service.result_from_set_scores(
            [(s.team_a_score, s.team_b_score) for s in match_request.sets]
        )

    new_match = Match(
        date=to_naive_utc(match_request.date),
        result=result,
        duration=match_request.duration,
        status=MatchStatus.COMPLETED,
        schedule_id=match_request.schedule_id,
        notes=match_request.notes,
        sets=_sets_from_request(match_request.sets),
        **lineup,
    )
    session.add(new_match)
    await session.commit()

    return await get_match(session, new_match.id)


async def record_match_result(
    session: AsyncSession,
    result_request: 'RecordMatchResultRequest',
) -> entities.Match:
    """
    Record the outcome of a doubles match played from a schedule.

    The match takes the schedule's day as its date and gets a single
    illustrative set matching the result (6-4, 4-6 or 5-5).

    Raises:
        ValueError: Unknown schedule, players outside the schedule, repeated
            players or unknown court
    """
    schedule = await _fetch_schedule(session, result_request.schedule_id)
    if schedule is None:
        raise ValueError(f"Schedule {result_request.schedule_id} not found")

    player_ids = [
        result_request.player_a1_id,
        result_request.player_a2_id,
        result_request.player_b1_id,
        result_request.player_b2_id,
    ]
    scheduled_ids = {entry.player_id for entry in schedule.entries}
    outsiders = [pid for pid in player_ids if pid not in scheduled_ids]
    if outsiders:
        raise ValueError(f"Player {outsiders[0]} is not part of this schedule")

    lineup = await _match_lineup(session, player_ids, result_request.court_id)

    team_a_score, team_b_score = calculation_service.RESULT_SET_SCORES[result_request.result]
    new_match = Match(
        date=datetime.combine(schedule.date, time.min),
        result=result_request.result,
        duration=result_request.duration,
        status=MatchStatus.COMPLETED,
        schedule_id=schedule.id,
        notes=result_request.notes,
        sets=[
            MatchSet(
                set_number=1,
                team_a_score=team_a_score,
                team_b_score=team_b_score,
                result=result_request.result,
            )
        ],
        **lineup,
    )
    session.add(new_match)
    await session.commit()

    return await get_match(session, new_match.id)


async def list_matches(session: AsyncSession) -> List[entities.Match]:
    """List all matches, most recent first."""
    result = await session.execute(
        select(Match).order_by(Match.date.desc(), Match.created_at.desc())
    )
    return [_match_from_row(m) for m in result.scalars().all()]


async def get_match(session: AsyncSession, match_id: str) -> Optional[entities.Match]:
    """Get a match with its sets."""
    match = await _fetch_match(session, match_id)
    return _match_from_row(match) if match else None


async def update_match(
    session: AsyncSession,
    match_id: str,
    match_request: 'UpdateMatchRequest',
) -> Optional[entities.Match]:
    """
    Update an existing match.

    Only fields set on the request change. Changing any player slot or the
    court re-validates the full lineup and refreshes its snapshot. Supplied
    sets replace the stored ones; the overall result only changes when
    ``result`` is given.

    Returns:
        The updated match, or None if it does not exist

    Raises:
        ValueError: If the resulting lineup is invalid
    """
    match = await _fetch_match(session, match_id)
    if match is None:
        return None

    fields = match_request.model_fields_set
    slot_fields = [f"player_{slot}_id" for slot in MATCH_SLOTS]
    if "court_id" in fields or any(f in fields for f in slot_fields):
        player_ids = [
            getattr(match_request, f) if getattr(match_request, f) is not None else getattr(match, f)
            for f in slot_fields
        ]
        court_id = match_request.court_id or match.court_id
        for column, value in (await _match_lineup(session, player_ids, court_id)).items():
            setattr(match, column, value)

    if match_request.date is not None:
        match.date = to_naive_utc(match_request.date)
    if match_request.result is not None:
        match.result = match_request.result
    if match_request.duration is not None:
        match.duration = match_request.duration
    if match_request.status is not None:
        match.status = match_request.status
    if match_request.notes is not None:
        match.notes = match_request.notes
    if match_request.sets is not None:
        match.sets = _sets_from_request(match_request.sets)

    await session.commit()
    return await get_match(session, match_id)


async def delete_match(session: AsyncSession, match_id: str) -> bool:
    """
    Delete a match from the database.
    Also deletes its set rows first.
    """
    await session.execute(
        delete(MatchSet).where(MatchSet.match_id == match_id)
    )
    result = await session.execute(
        delete(Match).where(Match.id == match_id)
    )
    await session.commit()
    return result.rowcount > 0


# ============================================================================
# Snapshots
# ============================================================================

async def load_snapshot(
    session: AsyncSession,
) -> Tuple[List[entities.Player], List[entities.Court], List[entities.Schedule], List[entities.Match]]:
    """Load every stored collection for the stats and export helpers."""
    players = await list_players(session)
    courts = await list_courts(session)
    schedules = await list_schedules(session)
    matches = await list_matches(session)
    return players, courts, schedules, matches


# ============================================================================
# Serializers
# ============================================================================

def player_to_dict(player: entities.Player) -> Dict:
    return {
        "id": player.id,
        "name": player.name,
        "email": player.email,
        "phone": player.phone,
        "skill_level": player.skill_level.value,
        "created_at": _isoformat(player.created_at),
    }


def court_to_dict(court: entities.Court) -> Dict:
    return {
        "id": court.id,
        "name": court.name,
        "location": court.location,
        "surface": court.surface.value,
        "is_indoor": court.is_indoor,
        "is_active": court.is_active,
        "created_at": _isoformat(court.created_at),
    }


def schedule_to_dict(schedule: entities.Schedule) -> Dict:
    return {
        "id": schedule.id,
        "date": schedule.date.isoformat(),
        "players": [player_to_dict(p) for p in schedule.players],
        "status": schedule.status.value,
        "notes": schedule.notes,
        "created_at": _isoformat(schedule.created_at),
        "updated_at": _isoformat(schedule.updated_at),
    }


def _match_player_to_dict(player: Optional[entities.Player]) -> Optional[Dict]:
    if player is None:
        return None
    return {"id": player.id, "name": player.name, "skill_level": player.skill_level.value}


def match_to_dict(match: entities.Match) -> Dict:
    """Match payload including team, winner, score and duration labels."""
    return {
        "id": match.id,
        "schedule_id": match.schedule_id,
        "date": match.date.isoformat(),
        "player_a1": _match_player_to_dict(match.player_a1),
        "player_a2": _match_player_to_dict(match.player_a2),
        "player_b1": _match_player_to_dict(match.player_b1),
        "player_b2": _match_player_to_dict(match.player_b2),
        "team_a": team_name(match.player_a1, match.player_a2),
        "team_b": team_name(match.player_b1, match.player_b2),
        "sets": [
            {
                "set_number": s.set_number,
                "team_a_score": s.team_a_score,
                "team_b_score": s.team_b_score,
                "result": s.result.value,
                "duration": s.duration,
            }
            for s in match.sets
        ],
        "result": match.result.value,
        "winner": match_winner_label(match),
        "score": match_score_string(match),
        "duration": match.duration,
        "duration_label": duration_label(match.duration),
        "status": match.status.value,
        "court_id": match.court_id,
        "court_name": match.court_name,
        "notes": match.notes,
        "created_at": _isoformat(match.created_at),
        "updated_at": _isoformat(match.updated_at),
    }


def stats_to_dict(stats: entities.MatchStats) -> Dict:
    return {
        "total_matches": stats.total_matches,
        "completed_matches": stats.completed_matches,
        "cancelled_matches": stats.cancelled_matches,
        "average_duration": stats.average_duration,
        "most_active_player": stats.most_active_player,
        "most_active_court": stats.most_active_court,
        "win_rate": dict(stats.win_rate),
    }
