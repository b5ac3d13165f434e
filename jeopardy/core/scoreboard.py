"""
Team roster, scores and turn order
"""
import logging
from typing import List, Optional, Union

from jeopardy.models import Team


logger = logging.getLogger(__name__)


class ScoreBoard:
    """Holds the teams and the active-team pointer"""

    def __init__(self):
        self.teams: List[Team] = []
        self.active_team_index: int = 0

    def create_teams(self, count: int) -> List[Team]:
        """Replace the roster with `count` fresh teams at score 0"""
        self.teams = [
            Team(id=f"team-{n}", name=f"Team {n}", score=0)
            for n in range(1, count + 1)
        ]
        self.active_team_index = 0
        return self.teams

    def clear(self) -> None:
        self.teams = []
        self.active_team_index = 0

    def __len__(self) -> int:
        return len(self.teams)

    @property
    def active_team(self) -> Optional[Team]:
        if not self.teams:
            return None
        return self.teams[self.active_team_index]

    def get(self, team_id: str) -> Optional[Team]:
        for team in self.teams:
            if team.id == team_id:
                return team
        return None

    def apply_delta(self, team: Union[int, str], amount: int) -> Optional[int]:
        """
        Add `amount` to a team's score, clamped at zero

        Args:
            team: Team index or team id
            amount: Signed delta

        Returns:
            New score, or None if the team does not exist
        """
        if isinstance(team, int):
            target = self.teams[team] if 0 <= team < len(self.teams) else None
        else:
            target = self.get(team)
        if target is None:
            return None

        old = target.score
        target.score = max(0, old + amount)
        logger.info(f"💰 {target.name}: {old} -> {target.score} (delta {amount:+d})")
        return target.score

    def advance_turn(self) -> int:
        """Round-robin to the next team"""
        if len(self.teams) < 1:
            return self.active_team_index
        self.active_team_index = (self.active_team_index + 1) % len(self.teams)
        return self.active_team_index

    def standings(self) -> List[Team]:
        """Teams by score (desc); ties keep creation order"""
        # sorted() is stable, so equal scores stay in roster order
        return sorted(self.teams, key=lambda team: -team.score)
