"""
Health check and system status endpoints
"""
from fastapi import APIRouter
from jeopardy import state


router = APIRouter(tags=["health"])


@router.get("/")
async def health_check():
    """Health check endpoint"""
    session = state.SESSION
    board = session.board if session else None
    return {
        "status": "ok",
        "message": "Quiz Board Session Controller",
        "version": "1.0.0",
        "board_loaded": board is not None,
        "board_title": board.title if board else None,
        "phase": session.phase.value if session else None,
        "load_error": state.LOAD_ERROR,
    }
