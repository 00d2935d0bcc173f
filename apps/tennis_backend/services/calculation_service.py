"""
Match statistics service.
Computes summary stats, win rates and standings from match snapshots.

Everything here is a pure function of its arguments: nothing is cached and
the inputs are never mutated, so the same snapshot always yields the same
result.
"""

import re
from typing import Dict, Iterable, List, Sequence, Tuple

from tennis_backend.models.entities import (
    Court,
    Match,
    MatchResult,
    MatchStats,
    MatchStatus,
    Player,
)


# ============================================================================
# Helper Functions
# ============================================================================

def _player_ids(match: Match) -> List[str]:
    """Ids of the players present in the match, in a1, a2, b1, b2 order."""
    return [p.id for p in match.players if p is not None and p.id]


def _winning_player_ids(match: Match) -> List[str]:
    """Ids of the players on the side named by ``match.result``; empty for a draw."""
    if match.result == MatchResult.TEAM_A:
        team = match.team_a
    elif match.result == MatchResult.TEAM_B:
        team = match.team_b
    else:
        return []
    return [p.id for p in team if p is not None and p.id]


def _duration(match: Match) -> int:
    return match.duration or 0


def most_frequent(keys: Iterable[str]) -> str:
    """
    Return the key that occurs most often.

    Ties go to the key encountered first during the left-to-right scan.
    Returns an empty string for an empty iterable.

    Args:
        keys: Keys in scan order (falsy keys are ignored)

    Returns:
        The most frequent key, or "" if there is none
    """
    counts: Dict[str, int] = {}
    for key in keys:
        if key:
            counts[key] = counts.get(key, 0) + 1

    best_key = ""
    best_count = 0
    # dicts keep insertion order, i.e. first-encountered order
    for key, count in counts.items():
        if count > best_count:
            best_key, best_count = key, count
    return best_key


def percentage(part: int, whole: int) -> float:
    """``part / whole * 100``, or 0.0 when ``whole`` is zero."""
    if whole <= 0:
        return 0.0
    return part / whole * 100


# ============================================================================
# Result Derivation
# ============================================================================

# Illustrative set score recorded by the result-only flow, per outcome
RESULT_SET_SCORES: Dict[MatchResult, Tuple[int, int]] = {
    MatchResult.TEAM_A: (6, 4),
    MatchResult.TEAM_B: (4, 6),
    MatchResult.DRAW: (5, 5),
}


def calculate_set_result(team_a_score: int, team_b_score: int) -> MatchResult:
    """
    Set result for the score-entry flow.

    Team A takes the set only with the strictly higher score; anything else
    is recorded for team B, level scores included.
    """
    if team_a_score > team_b_score:
        return MatchResult.TEAM_A
    return MatchResult.TEAM_B


def result_from_set_scores(scores: Sequence[Tuple[int, int]]) -> MatchResult:
    """
    Overall result for the score-entry flow when the caller gives none.

    Follows the last set whose scores differ; all-level sets are a draw.

    Args:
        scores: (team_a_score, team_b_score) per set, in entry order

    Returns:
        MatchResult of the deciding set
    """
    for team_a_score, team_b_score in reversed(scores):
        if team_a_score != team_b_score:
            return calculate_set_result(team_a_score, team_b_score)
    return MatchResult.DRAW


# ============================================================================
# Summary Stats
# ============================================================================

def calculate_win_rates(matches: Sequence[Match]) -> Dict[str, float]:
    """
    Win percentage per player over completed matches.

    A draw counts as a played match but never as a win. Players without a
    completed match are absent from the mapping.
    """
    games: Dict[str, int] = {}
    wins: Dict[str, int] = {}
    for match in matches:
        if match.status != MatchStatus.COMPLETED:
            continue
        for player_id in _player_ids(match):
            games[player_id] = games.get(player_id, 0) + 1
        for player_id in _winning_player_ids(match):
            wins[player_id] = wins.get(player_id, 0) + 1

    return {player_id: percentage(wins.get(player_id, 0), played) for player_id, played in games.items()}


def compute_stats(matches: Sequence[Match]) -> MatchStats:
    """
    Compute the summary statistics for a collection of matches.

    Args:
        matches: Match snapshots in any order and any status

    Returns:
        MatchStats; an empty input yields the all-zero stats
    """
    completed = [m for m in matches if m.status == MatchStatus.COMPLETED]
    cancelled = [m for m in matches if m.status == MatchStatus.CANCELLED]

    total_duration = sum(_duration(m) for m in completed)
    average_duration = total_duration / len(completed) if completed else 0.0

    most_active_player = most_frequent(pid for m in matches for pid in _player_ids(m))
    most_active_court = most_frequent(m.court_id for m in matches)

    return MatchStats(
        total_matches=len(matches),
        completed_matches=len(completed),
        cancelled_matches=len(cancelled),
        average_duration=average_duration,
        most_active_player=most_active_player,
        most_active_court=most_active_court,
        win_rate=calculate_win_rates(matches),
    )


# ============================================================================
# Standings and Breakdowns
# ============================================================================

class PlayerStanding:
    """Running totals for a single player across matches of any status."""

    def __init__(self, player: Player):
        self.player = player
        self.match_count = 0
        self.win_count = 0
        self.total_duration = 0

    @property
    def win_rate(self) -> float:
        return percentage(self.win_count, self.match_count)

    def record(self, match: Match) -> None:
        self.match_count += 1
        self.total_duration += _duration(match)
        if self.player.id in _winning_player_ids(match):
            self.win_count += 1

    def to_dict(self) -> Dict:
        return {
            "player_id": self.player.id,
            "name": self.player.name,
            "skill_level": self.player.skill_level.value,
            "total_matches": self.match_count,
            "wins": self.win_count,
            "win_rate": self.win_rate,
            "total_duration": self.total_duration,
        }


def player_standings(players: Sequence[Player], matches: Sequence[Match]) -> List[Dict]:
    """
    Per-player results, best win rate first.

    Ties on win rate are ordered by matches played (more first); remaining
    ties keep the order of ``players``.
    """
    standings = {p.id: PlayerStanding(p) for p in players}
    for match in matches:
        for player_id in set(_player_ids(match)):
            standing = standings.get(player_id)
            if standing is not None:
                standing.record(match)

    ordered = sorted(
        standings.values(), key=lambda s: (-s.win_rate, -s.match_count)
    )
    return [s.to_dict() for s in ordered]


def _court_number(name: str) -> int:
    digits = re.sub(r"[^\d]", "", name)
    return int(digits) if digits else 0


def court_usage(courts: Sequence[Court], matches: Sequence[Match]) -> List[Dict]:
    """Match count and durations per court, ordered by the number in the court name."""
    usage = []
    for court in sorted(courts, key=lambda c: _court_number(c.name)):
        court_matches = [m for m in matches if m.court_id == court.id]
        total_duration = sum(_duration(m) for m in court_matches)
        usage.append({
            "court_id": court.id,
            "name": court.name,
            "match_count": len(court_matches),
            "total_duration": total_duration,
            "average_duration": total_duration / len(court_matches) if court_matches else 0.0,
        })
    return usage


def monthly_match_counts(matches: Sequence[Match]) -> Dict[str, int]:
    """Number of matches per ``"YYYY-M"`` month key, in first-seen order."""
    counts: Dict[str, int] = {}
    for match in matches:
        key = f"{match.date.year}-{match.date.month}"
        counts[key] = counts.get(key, 0) + 1
    return counts
