"""
Tests for data_service CRUD operations.
Covers players, courts, schedules and both match-creation flows.
"""
import pytest
import pytest_asyncio
from datetime import date, datetime, timedelta, timezone
from sqlalchemy import select

from tennis_backend.database.models import MatchSet as MatchSetRow, SchedulePlayer
from tennis_backend.models.entities import (
    CourtSurface,
    MatchResult,
    MatchStatus,
    ScheduleStatus,
    SkillLevel,
)
from tennis_backend.models.schemas import (
    CreateMatchRequest,
    MatchSetRequest,
    RecordMatchResultRequest,
    UpdateMatchRequest,
)
from tennis_backend.services import data_service, filter_service

# db_session fixture is provided by conftest.py


@pytest_asyncio.fixture
async def players(db_session):
    """Four players plus a fifth who is left out of the schedule."""
    created = []
    for name, level in [
        ("Alice", SkillLevel.ADVANCED),
        ("Bob", SkillLevel.BEGINNER),
        ("Carol", SkillLevel.INTERMEDIATE),
        ("Dave", SkillLevel.BEGINNER),
        ("Erin", SkillLevel.ADVANCED),
    ]:
        created.append(await data_service.create_player(db_session, name=name, skill_level=level))
    return created


@pytest_asyncio.fixture
async def court(db_session):
    return await data_service.create_court(db_session, name="Court 1", location="Riverside Park")


@pytest_asyncio.fixture
async def schedule(db_session, players):
    return await data_service.create_schedule(
        db_session,
        date=date(2024, 5, 4),
        player_ids=[p.id for p in players[:4]],
    )


def score_request(players, court, sets, result=None, **kwargs):
    a1, a2, b1, b2 = players[:4]
    return CreateMatchRequest(
        date=kwargs.pop("date", datetime(2024, 5, 1, 18, 0)),
        court_id=court.id,
        player_a1_id=a1.id,
        player_a2_id=a2.id,
        player_b1_id=b1.id,
        player_b2_id=b2.id,
        sets=[MatchSetRequest(set_number=i + 1, team_a_score=a, team_b_score=b) for i, (a, b) in enumerate(sets)],
        result=result,
        duration=kwargs.pop("duration", 90),
        **kwargs,
    )


def result_request(players, court, schedule, result, duration=75):
    a1, a2, b1, b2 = players[:4]
    return RecordMatchResultRequest(
        schedule_id=schedule.id,
        court_id=court.id,
        player_a1_id=a1.id,
        player_a2_id=a2.id,
        player_b1_id=b1.id,
        player_b2_id=b2.id,
        result=result,
        duration=duration,
    )


# ============================================================================
# Health
# ============================================================================

@pytest.mark.asyncio
async def test_check_connection(db_session):
    assert await data_service.check_connection(db_session) is True


# ============================================================================
# Player CRUD Tests
# ============================================================================

@pytest.mark.asyncio
async def test_create_and_get_player(db_session):
    player = await data_service.create_player(
        db_session, name="Alice", skill_level=SkillLevel.ADVANCED, email="alice@example.com"
    )
    assert player.id
    assert player.created_at is not None

    fetched = await data_service.get_player(db_session, player.id)
    assert fetched.name == "Alice"
    assert fetched.skill_level == SkillLevel.ADVANCED
    assert fetched.email == "alice@example.com"


@pytest.mark.asyncio
async def test_list_players_by_skill_level(db_session, players):
    all_players = await data_service.list_players(db_session)
    assert [p.name for p in all_players] == ["Alice", "Bob", "Carol", "Dave", "Erin"]

    advanced = filter_service.players_by_skill_level(all_players, SkillLevel.ADVANCED)
    assert [p.name for p in advanced] == ["Alice", "Erin"]


@pytest.mark.asyncio
async def test_update_player_partial(db_session, players):
    alice = players[0]
    updated = await data_service.update_player(db_session, alice.id, phone="555-0100")
    assert updated.phone == "555-0100"
    assert updated.name == "Alice"
    assert updated.skill_level == SkillLevel.ADVANCED


@pytest.mark.asyncio
async def test_update_and_delete_missing_player(db_session):
    assert await data_service.get_player(db_session, "missing") is None
    assert await data_service.update_player(db_session, "missing", name="X") is None
    assert await data_service.delete_player(db_session, "missing") is False


# ============================================================================
# Court CRUD Tests
# ============================================================================

@pytest.mark.asyncio
async def test_court_crud(db_session):
    court = await data_service.create_court(
        db_session, name="Court 2", surface=CourtSurface.CLAY, is_indoor=True
    )
    assert court.surface == CourtSurface.CLAY
    assert court.is_indoor is True
    assert court.is_active is True

    updated = await data_service.update_court(db_session, court.id, is_active=False, location="Club")
    assert updated.is_active is False
    assert updated.location == "Club"
    assert updated.name == "Court 2"

    assert await data_service.delete_court(db_session, court.id) is True
    assert await data_service.get_court(db_session, court.id) is None


@pytest.mark.asyncio
async def test_list_courts_active_only(db_session):
    await data_service.create_court(db_session, name="Court 1")
    await data_service.create_court(db_session, name="Court 2", is_active=False)

    courts = await data_service.list_courts(db_session)
    assert len(courts) == 2
    active = filter_service.active_courts(courts)
    assert [c.name for c in active] == ["Court 1"]


# ============================================================================
# Schedule CRUD Tests
# ============================================================================

@pytest.mark.asyncio
async def test_create_schedule_keeps_player_order(db_session, players, schedule):
    assert schedule.date == date(2024, 5, 4)
    assert schedule.status == ScheduleStatus.SCHEDULED
    assert [p.name for p in schedule.players] == ["Alice", "Bob", "Carol", "Dave"]


@pytest.mark.asyncio
async def test_create_schedule_validation(db_session, players):
    with pytest.raises(ValueError, match="at least two"):
        await data_service.create_schedule(db_session, date=date(2024, 5, 4), player_ids=[players[0].id])
    with pytest.raises(ValueError, match="distinct"):
        await data_service.create_schedule(
            db_session, date=date(2024, 5, 4), player_ids=[players[0].id, players[0].id]
        )
    with pytest.raises(ValueError, match="not found"):
        await data_service.create_schedule(
            db_session, date=date(2024, 5, 4), player_ids=[players[0].id, "missing"]
        )


@pytest.mark.asyncio
async def test_update_schedule_replaces_players(db_session, players, schedule):
    updated = await data_service.update_schedule(
        db_session,
        schedule.id,
        player_ids=[players[4].id, players[0].id],
        status=ScheduleStatus.CANCELLED,
    )
    assert [p.name for p in updated.players] == ["Erin", "Alice"]
    assert updated.status == ScheduleStatus.CANCELLED
    assert updated.date == date(2024, 5, 4)


@pytest.mark.asyncio
async def test_update_missing_schedule(db_session):
    assert await data_service.update_schedule(db_session, "missing", notes="x") is None


@pytest.mark.asyncio
async def test_list_schedules_newest_first(db_session, players, schedule):
    await data_service.create_schedule(
        db_session, date=date(2024, 6, 1), player_ids=[players[0].id, players[1].id]
    )
    schedules = await data_service.list_schedules(db_session)
    assert [s.date for s in schedules] == [date(2024, 6, 1), date(2024, 5, 4)]


@pytest.mark.asyncio
async def test_delete_player_removes_schedule_membership(db_session, players, schedule):
    assert await data_service.delete_player(db_session, players[1].id) is True
    refreshed = await data_service.get_schedule(db_session, schedule.id)
    assert [p.name for p in refreshed.players] == ["Alice", "Carol", "Dave"]


@pytest.mark.asyncio
async def test_delete_player_refused_when_schedule_would_drop_below_two(db_session, players):
    pair = await data_service.create_schedule(
        db_session, date=date(2024, 5, 11), player_ids=[players[0].id, players[1].id]
    )

    with pytest.raises(ValueError, match="fewer than two players"):
        await data_service.delete_player(db_session, players[0].id)

    assert await data_service.get_player(db_session, players[0].id) is not None
    refreshed = await data_service.get_schedule(db_session, pair.id)
    assert [p.name for p in refreshed.players] == ["Alice", "Bob"]


@pytest.mark.asyncio
async def test_delete_schedule_keeps_matches(db_session, players, court, schedule):
    match = await data_service.record_match_result(
        db_session, result_request(players, court, schedule, MatchResult.TEAM_A)
    )
    assert await data_service.delete_schedule(db_session, schedule.id) is True
    assert await data_service.get_schedule(db_session, schedule.id) is None

    kept = await data_service.get_match(db_session, match.id)
    assert kept is not None
    assert kept.schedule_id is None

    entries = await db_session.execute(select(SchedulePlayer))
    assert entries.scalars().all() == []


# ============================================================================
# Match Tests - score entry flow
# ============================================================================

@pytest.mark.asyncio
async def test_create_match_derives_set_results(db_session, players, court):
    match = await data_service.create_match(
        db_session, score_request(players, court, [(6, 4), (3, 6), (7, 5)])
    )
    assert [s.result for s in match.sets] == [MatchResult.TEAM_A, MatchResult.TEAM_B, MatchResult.TEAM_A]
    assert match.result == MatchResult.TEAM_A
    assert match.status == MatchStatus.COMPLETED
    assert match.court_name == "Court 1"
    assert match.player_a1.name == "Alice"
    assert match.player_b2.skill_level == SkillLevel.BEGINNER


@pytest.mark.asyncio
async def test_create_match_level_set_goes_to_team_b(db_session, players, court):
    match = await data_service.create_match(db_session, score_request(players, court, [(5, 5)]))
    assert match.sets[0].result == MatchResult.TEAM_B
    # No set with differing scores, so the overall result is a draw
    assert match.result == MatchResult.DRAW


@pytest.mark.asyncio
async def test_create_match_explicit_result_wins(db_session, players, court):
    match = await data_service.create_match(
        db_session, score_request(players, court, [(6, 4)], result=MatchResult.DRAW)
    )
    assert match.result == MatchResult.DRAW


@pytest.mark.asyncio
async def test_create_match_normalizes_aware_date(db_session, players, court):
    aware = datetime(2024, 5, 1, 20, 0, tzinfo=timezone(timedelta(hours=2)))
    match = await data_service.create_match(db_session, score_request(players, court, [(6, 4)], date=aware))
    assert match.date == datetime(2024, 5, 1, 18, 0)


@pytest.mark.asyncio
async def test_create_match_validation(db_session, players, court):
    request = score_request(players, court, [(6, 4)])
    duplicate = request.model_copy(update={"player_b2_id": players[0].id})
    with pytest.raises(ValueError, match="distinct"):
        await data_service.create_match(db_session, duplicate)

    unknown_court = request.model_copy(update={"court_id": "missing"})
    with pytest.raises(ValueError, match="Court missing not found"):
        await data_service.create_match(db_session, unknown_court)

    unknown_player = request.model_copy(update={"player_a2_id": "missing"})
    with pytest.raises(ValueError, match="Player missing not found"):
        await data_service.create_match(db_session, unknown_player)

    unknown_schedule = request.model_copy(update={"schedule_id": "missing"})
    with pytest.raises(ValueError, match="Schedule missing not found"):
        await data_service.create_match(db_session, unknown_schedule)


@pytest.mark.asyncio
async def test_match_snapshot_survives_player_changes(db_session, players, court):
    match = await data_service.create_match(db_session, score_request(players, court, [(6, 4)]))

    await data_service.update_player(db_session, players[0].id, name="Alicia")
    await data_service.delete_player(db_session, players[1].id)
    await data_service.delete_court(db_session, court.id)

    stored = await data_service.get_match(db_session, match.id)
    assert stored.player_a1.name == "Alice"
    assert stored.player_a2.name == "Bob"
    assert stored.court_name == "Court 1"


# ============================================================================
# Match Tests - result flow
# ============================================================================

@pytest.mark.asyncio
@pytest.mark.parametrize(
    "result, scores",
    [
        (MatchResult.TEAM_A, (6, 4)),
        (MatchResult.TEAM_B, (4, 6)),
        (MatchResult.DRAW, (5, 5)),
    ],
)
async def test_record_match_result_fabricates_single_set(db_session, players, court, schedule, result, scores):
    match = await data_service.record_match_result(
        db_session, result_request(players, court, schedule, result)
    )
    assert match.result == result
    assert match.date == datetime(2024, 5, 4, 0, 0)
    assert match.schedule_id == schedule.id
    assert len(match.sets) == 1
    assert (match.sets[0].team_a_score, match.sets[0].team_b_score) == scores
    assert match.sets[0].result == result


@pytest.mark.asyncio
async def test_record_match_result_requires_scheduled_players(db_session, players, court, schedule):
    outsider = players[4]
    request = result_request(players, court, schedule, MatchResult.TEAM_A)
    request = request.model_copy(update={"player_b2_id": outsider.id})
    with pytest.raises(ValueError, match="not part of this schedule"):
        await data_service.record_match_result(db_session, request)


@pytest.mark.asyncio
async def test_record_match_result_unknown_schedule(db_session, players, court, schedule):
    request = result_request(players, court, schedule, MatchResult.TEAM_A)
    request = request.model_copy(update={"schedule_id": "missing"})
    with pytest.raises(ValueError, match="Schedule missing not found"):
        await data_service.record_match_result(db_session, request)


# ============================================================================
# Match Tests - list, update, delete
# ============================================================================

@pytest.mark.asyncio
async def test_list_matches_most_recent_first(db_session, players, court):
    for day in (3, 1, 7):
        await data_service.create_match(
            db_session, score_request(players, court, [(6, 4)], date=datetime(2024, 5, day, 10, 0))
        )
    matches = await data_service.list_matches(db_session)
    assert [m.date.day for m in matches] == [7, 3, 1]


@pytest.mark.asyncio
async def test_update_match_partial(db_session, players, court):
    match = await data_service.create_match(db_session, score_request(players, court, [(6, 4)]))

    updated = await data_service.update_match(
        db_session,
        match.id,
        UpdateMatchRequest(status=MatchStatus.CANCELLED, notes="Rain"),
    )
    assert updated.status == MatchStatus.CANCELLED
    assert updated.notes == "Rain"
    assert updated.result == MatchResult.TEAM_A
    assert updated.duration == 90


@pytest.mark.asyncio
async def test_update_match_replaces_sets_without_changing_result(db_session, players, court):
    match = await data_service.create_match(db_session, score_request(players, court, [(6, 4)]))

    updated = await data_service.update_match(
        db_session,
        match.id,
        UpdateMatchRequest(sets=[
            MatchSetRequest(set_number=1, team_a_score=2, team_b_score=6),
            MatchSetRequest(set_number=2, team_a_score=3, team_b_score=6),
        ]),
    )
    assert [(s.team_a_score, s.team_b_score) for s in updated.sets] == [(2, 6), (3, 6)]
    assert [s.result for s in updated.sets] == [MatchResult.TEAM_B, MatchResult.TEAM_B]
    assert updated.result == MatchResult.TEAM_A

    rows = await db_session.execute(select(MatchSetRow).where(MatchSetRow.match_id == match.id))
    assert len(rows.scalars().all()) == 2


@pytest.mark.asyncio
async def test_update_match_lineup_refreshes_snapshot(db_session, players, court):
    match = await data_service.create_match(db_session, score_request(players, court, [(6, 4)]))

    updated = await data_service.update_match(
        db_session, match.id, UpdateMatchRequest(player_b2_id=players[4].id)
    )
    assert updated.player_b2.name == "Erin"
    assert updated.player_a1.name == "Alice"

    with pytest.raises(ValueError, match="distinct"):
        await data_service.update_match(
            db_session, match.id, UpdateMatchRequest(player_a1_id=players[4].id)
        )


@pytest.mark.asyncio
async def test_update_and_delete_missing_match(db_session):
    assert await data_service.update_match(db_session, "missing", UpdateMatchRequest(notes="x")) is None
    assert await data_service.delete_match(db_session, "missing") is False


@pytest.mark.asyncio
async def test_delete_match_removes_sets(db_session, players, court):
    match = await data_service.create_match(db_session, score_request(players, court, [(6, 4), (6, 3)]))
    assert await data_service.delete_match(db_session, match.id) is True
    assert await data_service.get_match(db_session, match.id) is None

    rows = await db_session.execute(select(MatchSetRow))
    assert rows.scalars().all() == []


# ============================================================================
# Snapshot and serializers
# ============================================================================

@pytest.mark.asyncio
async def test_load_snapshot(db_session, players, court, schedule):
    await data_service.record_match_result(
        db_session, result_request(players, court, schedule, MatchResult.TEAM_B)
    )
    all_players, courts, schedules, matches = await data_service.load_snapshot(db_session)
    assert len(all_players) == 5
    assert len(courts) == 1
    assert len(schedules) == 1
    assert len(matches) == 1


@pytest.mark.asyncio
async def test_match_to_dict_labels(db_session, players, court):
    match = await data_service.create_match(
        db_session, score_request(players, court, [(6, 4), (3, 6), (7, 5)], duration=95)
    )
    payload = data_service.match_to_dict(match)
    assert payload["team_a"] == "Alice & Bob"
    assert payload["team_b"] == "Carol & Dave"
    assert payload["winner"] == "Alice & Bob"
    assert payload["score"] == "6-4 / 3-6 / 7-5"
    assert payload["duration_label"] == "1h 35m"
    assert payload["result"] == "teamA"
    assert payload["date"] == "2024-05-01T18:00:00"
