"""
Admin endpoints: operator shortcuts and board management
"""
from fastapi import APIRouter, HTTPException
from pathlib import Path
import logging

from jeopardy import state
from jeopardy.api.game import get_session, operation_response
from jeopardy.board_loader import fetch_board
from jeopardy.errors import InvalidBoardError, LoadError
from jeopardy.models import LoadBoardRequest


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/fast-forward")
async def fast_forward():
    """Mark every clue answered except the last one"""
    return operation_response(get_session().debug_fast_forward())


@router.post("/toggle-markers")
async def toggle_markers():
    """Show/hide daily double markers on the board view"""
    return operation_response(get_session().toggle_daily_double_markers())


@router.post("/reset")
async def reset_game():
    """New game: back to team setup with the same board"""
    return operation_response(get_session().reset())


@router.post("/load-board")
async def load_board_endpoint(request: LoadBoardRequest):
    """
    Load (or reload) the board document

    Request:
        {"path": "data/board.json"}   # optional, default from config
    """
    path = request.path or state.SETTINGS.board_path
    session = get_session()

    try:
        result = await fetch_board(session, path)
    except InvalidBoardError as e:
        state.LOAD_ERROR = str(e)
        raise HTTPException(status_code=422, detail=str(e))
    except LoadError as e:
        state.LOAD_ERROR = str(e)
        status = 404 if not Path(path).exists() else 400
        raise HTTPException(status_code=status, detail=str(e))

    if result.applied:
        state.LOAD_ERROR = None
    return operation_response(result)
