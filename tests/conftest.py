import json
import random

import pytest

from jeopardy.core.cues import CueLog
from jeopardy.core.scheduling import ManualScheduler
from jeopardy.core.session import GameSession


class FixedRandom(random.Random):
    """randrange() returns the queued indices in order, then falls back to the seeded generator"""

    def __init__(self, picks):
        super().__init__(0)
        self.picks = list(picks)

    def randrange(self, *args, **kwargs):
        if not self.picks:
            return super().randrange(*args, **kwargs)
        return self.picks.pop(0)


def make_board(values_per_category, final=True, title="Test Board"):
    """Board document with one category per list of clue values"""
    doc = {
        "title": title,
        "subtitle": "pytest",
        "categories": [
            {
                "name": f"Category {ci}",
                "questions": [
                    {"value": value, "clue": f"clue {ci}-{qi}", "answer": f"answer {ci}-{qi}"}
                    for qi, value in enumerate(values)
                ],
            }
            for ci, values in enumerate(values_per_category)
        ],
    }
    if final:
        doc["finalJeopardy"] = {"category": "Finale", "clue": "final clue", "answer": "final answer"}
    return doc


@pytest.fixture()
def scheduler():
    return ManualScheduler()


@pytest.fixture()
def cue_log():
    return CueLog(maxlen=50)


@pytest.fixture()
def make_session(scheduler, cue_log):
    """Factory: session on a manual clock with fixed daily double picks"""
    def _make(values_per_category, picks, final=True, team_count=2, start=True):
        session = GameSession(rng=FixedRandom(picks), scheduler=scheduler)
        session.subscribe(cue_log)
        session.initialize(make_board(values_per_category, final=final))
        if start:
            assert session.start_game(team_count).applied
        return session
    return _make


@pytest.fixture()
def board_file(tmp_path):
    path = tmp_path / "board.json"
    path.write_text(json.dumps(make_board([[200, 400], [200, 400]])), encoding="utf-8")
    return path
