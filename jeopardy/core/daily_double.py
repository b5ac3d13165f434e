"""
Daily double assignment

One bonus clue per non-empty category, drawn uniformly at random when the
game starts. The random source is injected so assignments are reproducible.
"""
import random
from typing import FrozenSet, Optional

from jeopardy.models import Board
from jeopardy.utils import build_clue_id


def assign_daily_doubles(board: Board, rng: Optional[random.Random] = None) -> FrozenSet[str]:
    """
    Pick the daily double of every category

    Args:
        board: Loaded board
        rng: Random source (module-level random if omitted)

    Returns:
        Frozen set of flagged clue ids, one per category with at least one clue

    Example:
        >>> board = Board(title="t", categories=[
        ...     {"name": "A", "questions": [{"value": 100, "clue": "q", "answer": "a"}]},
        ...     {"name": "B", "questions": []},
        ... ])
        >>> sorted(assign_daily_doubles(board, random.Random(1)))
        ['c0-q0']
    """
    rng = rng or random.Random()
    flagged = set()
    for category_index, category in enumerate(board.categories):
        if not category.clues:
            continue
        flagged.add(build_clue_id(category_index, rng.randrange(len(category.clues))))
    return frozenset(flagged)
