"""
Board document loader from JSON
"""
import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict

from pydantic import ValidationError

from jeopardy.errors import InvalidBoardError, LoadError
from jeopardy.models import Board, OperationResult


logger = logging.getLogger(__name__)


def parse_board(data: Dict[str, Any]) -> Board:
    """
    Validate a board document

    Document format:
        {
            "title": "...", "subtitle": "...",
            "categories": [
                {"name": "...", "hint": "...", "questions": [
                    {"value": 200, "clue": "...", "answer": "...", "reference": "...", "href": "..."}
                ]}
            ],
            "finalJeopardy": {"category": "...", "clue": "...", "answer": "..."}
        }

    Raises:
        InvalidBoardError: If the document has no categories, a category has
            no questions array, category names repeat, or a value is negative
    """
    if not isinstance(data, dict):
        raise InvalidBoardError(f"Board document must be an object, got {type(data).__name__}")
    try:
        return Board.model_validate(data)
    except ValidationError as e:
        raise InvalidBoardError(f"Invalid board document: {e}") from e


def load_board(path: str) -> Board:
    """
    Load and validate a board from a JSON file

    Raises:
        LoadError: If the file is missing, not UTF-8 or not valid JSON
        InvalidBoardError: If the document shape is unusable
    """
    board_path = Path(path)

    if not board_path.exists():
        raise LoadError(f"Board file not found: {path}")

    try:
        with open(board_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise LoadError(f"Unable to read board {path}: {e}") from e

    board = parse_board(data)
    logger.info(f"✅ Loaded board '{board.title}' from {path}")
    return board


async def fetch_board(session, path: str):
    """
    Load a board off the event loop and hand it to the session

    Only one load runs at a time; if the session was torn down (or a newer
    load took over) meanwhile, the result is discarded.

    Returns:
        OperationResult of the load, ignored if another load is in flight

    Raises:
        LoadError: On fetch/parse failure (no retry); the load slot is
            released on any failure
    """
    ticket = session.begin_load()
    if ticket is None:
        return OperationResult.ignored("load_board", "a board load is already in progress")

    try:
        board = await asyncio.to_thread(load_board, path)
    except Exception as e:
        session.fail_load(ticket, e)
        raise
    return session.complete_load(ticket, board)
