"""
Display helpers for match data.

Pure formatting functions shared by the stats endpoints, the CSV exporter
and the share summary. They take literal entity values and never touch the
database or any global state.
"""

from datetime import datetime
from typing import Optional

from tennis_backend.models.entities import Match, MatchResult, Player

DRAW_LABEL = "Draw"
SET_SEPARATOR = " / "


def _player_name(player: Optional[Player]) -> str:
    return player.name if player else ""


def team_name(player_a: Optional[Player], player_b: Optional[Player]) -> str:
    """Canonical team label, e.g. ``"Alice & Bob"``."""
    return f"{_player_name(player_a)} & {_player_name(player_b)}"


def match_winner_label(match: Match) -> str:
    """
    Name of the winning team, or ``DRAW_LABEL`` for a drawn match.

    Args:
        match: Match snapshot

    Returns:
        Team label of the side named by ``match.result``
    """
    if match.result == MatchResult.TEAM_A:
        return team_name(match.player_a1, match.player_a2)
    if match.result == MatchResult.TEAM_B:
        return team_name(match.player_b1, match.player_b2)
    return DRAW_LABEL


def match_score_string(match: Match) -> str:
    """
    Set scores as ``"6-4 / 3-6"``.

    Sets are rendered in stored order, not sorted by set number.
    """
    return SET_SEPARATOR.join(f"{s.team_a_score}-{s.team_b_score}" for s in match.sets)


def duration_label(minutes: int) -> str:
    """Hours and minutes, e.g. ``"1h 30m"``; just ``"45m"`` under an hour."""
    hours, mins = divmod(int(minutes), 60)
    if hours > 0:
        return f"{hours}h {mins}m"
    return f"{mins}m"


def format_date_time(value: datetime) -> str:
    """Format a match timestamp for exports (``YYYY-MM-DD HH:MM``)."""
    return value.strftime("%Y-%m-%d %H:%M")
