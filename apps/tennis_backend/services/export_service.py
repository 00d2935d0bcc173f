"""
Match export service - CSV download and plain-text share summary.
"""

import csv
import io
from typing import List, Sequence

from tennis_backend.models.entities import Match, MatchResult, MatchStats
from tennis_backend.utils.display import (
    format_date_time,
    match_score_string,
    match_winner_label,
    team_name,
)

CSV_HEADERS = [
    "Date",
    "Team A",
    "Team B",
    "Winner",
    "Score",
    "Duration (min)",
    "Court",
    "Status",
]

RECENT_MATCH_LIMIT = 5


def match_to_row(match: Match) -> List[str]:
    """Export row for a single match, in ``CSV_HEADERS`` order."""
    return [
        format_date_time(match.date),
        team_name(match.player_a1, match.player_a2),
        team_name(match.player_b1, match.player_b2),
        match_winner_label(match),
        match_score_string(match),
        str(match.duration),
        match.court_name,
        match.status.value,
    ]


def export_matches_to_csv(matches: Sequence[Match]) -> str:
    """
    Export matches to CSV.

    Every field is double-quoted and every row ends with a newline. Rows
    follow the order of ``matches``; the exporter does not sort.

    Args:
        matches: Match snapshots to export

    Returns:
        str: CSV text with a header row
    """
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")

    writer.writerow(CSV_HEADERS)
    for match in matches:
        writer.writerow(match_to_row(match))

    return output.getvalue()


def _average_players_per_match(matches: Sequence[Match]) -> float:
    if not matches:
        return 0.0
    total = sum(len({p.id for p in m.players if p is not None}) for m in matches)
    return total / len(matches)


def build_share_text(matches: Sequence[Match], stats: MatchStats) -> str:
    """Plain-text summary of the stats and the most recent matches."""
    lines = [
        "Tennis match summary",
        "",
        f"Total matches: {stats.total_matches}",
        f"Completed matches: {stats.completed_matches}",
        f"Average match time: {round(stats.average_duration)} min",
        f"Players per match: {_average_players_per_match(matches):g}",
        "",
        "Recent results:",
    ]
    recent = sorted(matches, key=lambda m: m.date, reverse=True)[:RECENT_MATCH_LIMIT]
    for match in recent:
        outcome = match_winner_label(match)
        if match.result != MatchResult.DRAW:
            outcome += " won"
        lines.append(
            f"{format_date_time(match.date)} - {outcome} ({match_score_string(match)})"
        )
    return "\n".join(lines)
