"""
Wager capture and final-round resolution

Two bonus mechanics coexist: a daily double always pays twice the clue value,
while the final clue pays exactly what each team wagered. Wagers have no
upper bound here; a team cannot drop below zero anyway.
"""
from typing import Dict, Optional

from jeopardy.models import FinalOutcome


class WagerLedger:
    """clue id -> team id -> non-negative wager"""

    def __init__(self):
        self._wagers: Dict[str, Dict[str, int]] = {}

    def record(self, clue_id: str, team_id: str, amount: int) -> int:
        """Store a wager (clamped to >= 0), overwriting any previous one"""
        amount = max(0, int(amount))
        self._wagers.setdefault(clue_id, {})[team_id] = amount
        return amount

    def get(self, clue_id: str, team_id: str) -> int:
        return self._wagers.get(clue_id, {}).get(team_id, 0)

    def for_clue(self, clue_id: str) -> Dict[str, int]:
        return dict(self._wagers.get(clue_id, {}))

    def clear(self) -> None:
        self._wagers.clear()

    def __contains__(self, clue_id: str) -> bool:
        return clue_id in self._wagers


class FinalResults:
    """Per-team outcome of the final clue; each team is judged once"""

    def __init__(self):
        self._results: Dict[str, FinalOutcome] = {}

    def is_judged(self, team_id: str) -> bool:
        return team_id in self._results

    def record(self, team_id: str, outcome: FinalOutcome) -> bool:
        if team_id in self._results:
            return False
        self._results[team_id] = outcome
        return True

    def get(self, team_id: str) -> Optional[FinalOutcome]:
        return self._results.get(team_id)

    def as_dict(self) -> Dict[str, str]:
        return {team_id: outcome.value for team_id, outcome in self._results.items()}

    def clear(self) -> None:
        self._results.clear()

    def __len__(self) -> int:
        return len(self._results)


def final_delta(wager: int, outcome: FinalOutcome) -> int:
    """Signed score change for a judged final answer"""
    return wager if outcome == FinalOutcome.CORRECT else -wager
