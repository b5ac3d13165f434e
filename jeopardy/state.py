"""
Global application state
Shared resources accessible across all API modules
"""
from typing import Optional

from jeopardy.core.cues import CueLog
from jeopardy.core.session import GameSession
from jeopardy.models import GameSettings

# Settings loaded at startup
SETTINGS: GameSettings = GameSettings()

# The one game session served by this process
SESSION: Optional[GameSession] = None

# Cue history polled by the front end to play sounds
CUE_LOG: Optional[CueLog] = None

# Last board load error, surfaced by the health endpoint
LOAD_ERROR: Optional[str] = None


def build_session(settings: GameSettings) -> GameSession:
    """Create the process-wide session and its cue log from settings"""
    global SESSION, CUE_LOG, SETTINGS

    if SESSION is not None:
        SESSION.teardown()

    SETTINGS = settings
    SESSION = GameSession(
        final_offer_delay_ms=settings.final_offer_delay_ms,
        min_teams=settings.min_teams,
        max_teams=settings.max_teams,
    )
    CUE_LOG = CueLog(
        maxlen=settings.cue_history_size,
        enabled=settings.sound_enabled,
        volume=settings.sound_volume,
    )
    SESSION.subscribe(CUE_LOG)
    return SESSION
