"""
Utility functions
"""
import re
from typing import Optional, Tuple

# Sentinel id of the final clue in the answered set and the wager ledger
FINAL_CLUE_ID = "final"

_CLUE_ID_RE = re.compile(r"^c(\d+)-q(\d+)$")


def build_clue_id(category_index: int, clue_index: int) -> str:
    """
    Derive the stable id of a board cell

    Example:
        >>> build_clue_id(1, 0)
        'c1-q0'
    """
    return f"c{category_index}-q{clue_index}"


def parse_clue_id(clue_id: str) -> Optional[Tuple[int, int]]:
    """
    Inverse of build_clue_id

    Returns:
        (category_index, clue_index), or None for the final sentinel and
        malformed ids

    Example:
        >>> parse_clue_id("c2-q4")
        (2, 4)
    """
    match = _CLUE_ID_RE.match(clue_id)
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))
