"""
Standings service - Rank teams for display
"""
from typing import Dict, List

from jeopardy.models import Team


def build_standings(ordered_teams: List[Team]) -> List[Dict]:
    """
    Attach display ranks to teams already sorted by score

    Tied scores share a rank (1, 2, 2, 4). Order is left untouched, so ties
    keep creation order.

    Returns:
        [{"rank", "team_id", "name", "score"}, ...]
    """
    results = []
    previous_score = None
    rank = 0
    for idx, team in enumerate(ordered_teams):
        if team.score != previous_score:
            rank = idx + 1
            previous_score = team.score
        results.append({
            "rank": rank,
            "team_id": team.id,
            "name": team.name,
            "score": team.score,
        })
    return results
