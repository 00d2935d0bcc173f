"""
Filter helpers for matches, schedules, courts and players.

Every function is pure: the input sequence is never mutated and the result
is a new list that keeps the relative order of the input. Criteria left as
None impose no constraint; all supplied criteria must hold (logical AND).
"""

from datetime import date, datetime, time
from typing import List, Sequence, Union

from tennis_backend.models.entities import (
    Court,
    Match,
    MatchFilters,
    Player,
    Schedule,
    ScheduleFilters,
    SkillLevel,
)


def end_of_day(value: Union[date, datetime]) -> datetime:
    """
    Extend a calendar day to its last representable instant.

    The filters compare dates exactly, so callers holding a day-level
    ``date_to`` (e.g. from a query string) use this before filtering.
    """
    day = value.date() if isinstance(value, datetime) else value
    return datetime.combine(day, time.max)


def _match_has_player(match: Match, player_id: str) -> bool:
    return any(p is not None and p.id == player_id for p in match.players)


def match_matches_filters(match: Match, filters: MatchFilters) -> bool:
    """
    Return True if ``match`` satisfies every criterion set on ``filters``.

    Date bounds must be naive UTC, as match dates are stored; an aware bound
    cannot be compared and raises TypeError.
    """
    if filters.date_from is not None and match.date < filters.date_from:
        return False
    if filters.date_to is not None and match.date > filters.date_to:
        return False
    if filters.court_id is not None and match.court_id != filters.court_id:
        return False
    if filters.player_id is not None and not _match_has_player(match, filters.player_id):
        return False
    if filters.status is not None and match.status != filters.status:
        return False
    return True


def filter_matches(matches: Sequence[Match], filters: MatchFilters = MatchFilters()) -> List[Match]:
    """Select the matches satisfying ``filters``, preserving input order."""
    return [m for m in matches if match_matches_filters(m, filters)]


def schedule_matches_filters(schedule: Schedule, filters: ScheduleFilters) -> bool:
    """Return True if ``schedule`` satisfies every criterion set on ``filters``."""
    if filters.date_from is not None and schedule.date < filters.date_from:
        return False
    if filters.date_to is not None and schedule.date > filters.date_to:
        return False
    if filters.player_id is not None and not any(
        p.id == filters.player_id for p in schedule.players
    ):
        return False
    if filters.status is not None and schedule.status != filters.status:
        return False
    return True


def filter_schedules(
    schedules: Sequence[Schedule], filters: ScheduleFilters = ScheduleFilters()
) -> List[Schedule]:
    """Select the schedules satisfying ``filters``, preserving input order."""
    return [s for s in schedules if schedule_matches_filters(s, filters)]


def active_courts(courts: Sequence[Court]) -> List[Court]:
    return [c for c in courts if c.is_active]


def players_by_skill_level(players: Sequence[Player], level: SkillLevel) -> List[Player]:
    return [p for p in players if p.skill_level == level]
