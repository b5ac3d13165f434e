"""
Game endpoints: the operator surface over the session state machine
"""
from fastapi import APIRouter, HTTPException
import logging

from jeopardy import state
from jeopardy.core.session import GameSession
from jeopardy.models import (
    FinalJudgeRequest, JudgeRequest, OperationResult, SelectClueRequest, SoundRequest,
    StartGameRequest, WagerRequest,
)
from jeopardy.services.standings import build_standings


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/game", tags=["game"])


def get_session() -> GameSession:
    if state.SESSION is None:
        raise HTTPException(status_code=503, detail="Game session not initialized")
    return state.SESSION


def operation_response(result: OperationResult) -> dict:
    """
    Response shape shared by all operation endpoints

        {"applied": bool, "operation": str, "reason": str | null, "state": {...}}
    """
    return {**result.model_dump(), "state": get_session().snapshot()}


@router.get("/state")
async def get_state():
    """Full session snapshot"""
    return get_session().snapshot()


@router.post("/start")
async def start_game(request: StartGameRequest):
    """
    Create teams and assign daily doubles

    Request:
        {"team_count": 3}   # optional, default from config
    """
    team_count = request.team_count or state.SETTINGS.default_team_count
    return operation_response(get_session().start_game(team_count))


@router.post("/select")
async def select_clue(request: SelectClueRequest):
    """
    Select a board cell

    Request:
        {"category_index": 0, "clue_index": 2}
    """
    return operation_response(get_session().select_clue(request.category_index, request.clue_index))


@router.post("/daily-double/confirm")
async def confirm_daily_double():
    return operation_response(get_session().confirm_daily_double())


@router.post("/daily-double/cancel")
async def cancel_daily_double():
    return operation_response(get_session().cancel_daily_double())


@router.post("/reveal")
async def reveal_answer():
    return operation_response(get_session().reveal_answer())


@router.post("/close")
async def close_clue():
    """Dismiss the open clue without scoring it"""
    return operation_response(get_session().close_clue())


@router.post("/wager")
async def record_wager(request: WagerRequest):
    """
    Record a team's wager on the open daily double / final clue

    Request:
        {"team_id": "team-1", "amount": 500}
    """
    return operation_response(get_session().record_wager(request.team_id, request.amount))


@router.post("/judge")
async def judge(request: JudgeRequest):
    """
    Judge the active team on the open clue

    Request:
        {"outcome": "correct" | "incorrect" | "noResponse"}
    """
    return operation_response(get_session().judge(request.outcome))


@router.post("/final/open")
async def open_final():
    return operation_response(get_session().open_final())


@router.post("/final/judge")
async def judge_final(request: FinalJudgeRequest):
    """
    Judge one team on the final clue

    Request:
        {"team_id": "team-2", "outcome": "correct" | "incorrect"}
    """
    return operation_response(get_session().judge_final(request.team_id, request.outcome))


@router.post("/final/finish")
async def finish_final():
    return operation_response(get_session().finish_final())


@router.get("/standings")
async def get_standings():
    """Teams ranked by score (desc), ties in creation order"""
    session = get_session()
    return {
        "phase": session.phase.value,
        "standings": build_standings(session.standings()),
    }


@router.get("/cues")
async def get_cues(since: int = 0):
    """Cue events newer than `since` (sequence number)"""
    cue_log = state.CUE_LOG
    if cue_log is None:
        return {"muted": True, "volume": 0.0, "cues": []}
    return {
        "muted": cue_log.muted,
        "volume": cue_log.volume,
        "cues": cue_log.since(since),
    }


@router.post("/sound")
async def update_sound(request: SoundRequest):
    """
    Mute/unmute and set cue volume

    Request:
        {"muted": false, "volume": 0.8}   # both optional
    """
    cue_log = state.CUE_LOG
    if cue_log is None:
        raise HTTPException(status_code=503, detail="Cue log not initialized")
    if request.muted is not None:
        cue_log.muted = request.muted
    if request.volume is not None:
        cue_log.set_volume(request.volume)
    logger.info(f"🔊 Sound muted={cue_log.muted} volume={cue_log.volume}")
    return {"muted": cue_log.muted, "volume": cue_log.volume}
