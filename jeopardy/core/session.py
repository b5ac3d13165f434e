"""
Game session state machine

Phases:
    TeamSetup -> Board <-> ClueOpen
    Board <-> DailyDoubleIntro -> ClueOpen
    Board -> FinalIntro -> ClueOpen(final) -> FinalStandings

Every operation returns an OperationResult. Calls outside their phase or
precondition are ignored (applied=False) instead of raising, so stray input
from the operator surface never breaks a game.
"""
import inspect
import logging
import random
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from jeopardy.board_loader import parse_board
from jeopardy.core.daily_double import assign_daily_doubles
from jeopardy.core.scheduling import AsyncioScheduler, ManualScheduler, Scheduler, TimerHandle
from jeopardy.core.scoreboard import ScoreBoard
from jeopardy.core.wagers import FinalResults, WagerLedger, final_delta
from jeopardy.models import (
    Board, CueEvent, FinalOutcome, JudgeOutcome, OpenClue, OperationResult, Phase, Team,
)
from jeopardy.services.standings import build_standings
from jeopardy.utils import FINAL_CLUE_ID, build_clue_id, parse_clue_id


logger = logging.getLogger(__name__)

CueListener = Callable[[CueEvent], None]

# Operations reachable through dispatch()
ACTIONS = frozenset({
    "initialize", "start_game", "select_clue", "confirm_daily_double", "cancel_daily_double",
    "reveal_answer", "close_clue", "record_wager", "judge", "judge_final", "open_final",
    "finish_final", "auto_offer_final", "debug_fast_forward", "toggle_daily_double_markers",
    "reset",
})


class GameSession:
    """Owns all mutable game state and exposes the operation contract"""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        scheduler: Optional[Scheduler] = None,
        final_offer_delay_ms: int = 3000,
        min_teams: int = 2,
        max_teams: int = 6,
    ):
        self.rng = rng or random.Random()
        self.scheduler = scheduler or AsyncioScheduler()
        self.final_offer_delay_ms = final_offer_delay_ms
        self.min_teams = min_teams
        self.max_teams = max_teams

        self.board: Optional[Board] = None
        self.scoreboard = ScoreBoard()
        self.wagers = WagerLedger()
        self.final_results = FinalResults()
        self.show_daily_double_markers = False
        self.history: List[Dict[str, Any]] = []

        self._listeners: List[CueListener] = []
        self._final_offer: Optional[TimerHandle] = None
        self._load_generation = 0
        self._load_in_flight: Optional[int] = None
        self._clear_game_state()

    def _clear_game_state(self) -> None:
        self.phase = Phase.TEAM_SETUP
        self.open_clue: Optional[OpenClue] = None
        self.revealed = False
        self.pending_daily_double: Optional[str] = None
        self.final_intro_shown = False
        self._answered = set()
        self._daily_doubles = frozenset()

    # ==================== READ ACCESS ====================

    @property
    def answered(self) -> frozenset:
        return frozenset(self._answered)

    @property
    def daily_doubles(self) -> frozenset:
        return self._daily_doubles

    @property
    def teams(self) -> List[Team]:
        return self.scoreboard.teams

    @property
    def active_team_index(self) -> int:
        return self.scoreboard.active_team_index

    @property
    def final_offer_pending(self) -> bool:
        return self._final_offer is not None

    @property
    def is_loading(self) -> bool:
        return self._load_in_flight is not None

    def standings(self) -> List[Team]:
        return self.scoreboard.standings()

    def is_daily_double(self, category_index: int, clue_index: int) -> bool:
        return build_clue_id(category_index, clue_index) in self._daily_doubles

    # ==================== CUE EVENTS ====================

    def subscribe(self, listener: CueListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: CueListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event: CueEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                # Cue consumers are observers; they must not break the game
                logger.error(f"❌ Cue listener failed on {event.value}", exc_info=True)

    # ==================== HELPERS ====================

    def _ignore(self, operation: str, reason: str) -> OperationResult:
        logger.debug(f"⏭️ {operation} ignored: {reason} (phase={self.phase.value})")
        return OperationResult.ignored(operation, reason)

    def _applied(self, operation: str) -> OperationResult:
        self._sync_final_offer()
        return OperationResult.ok(operation)

    def _set_phase(self, phase: Phase) -> None:
        if phase != self.phase:
            logger.info(f"🔀 Phase {self.phase.value} -> {phase.value}")
        self.phase = phase

    def _open(self, category_index: int, clue_index: int) -> None:
        category = self.board.categories[category_index]
        clue = category.clues[clue_index]
        clue_id = build_clue_id(category_index, clue_index)
        self.open_clue = OpenClue(
            id=clue_id,
            category=category.name,
            category_index=category_index,
            clue_index=clue_index,
            value=clue.value or 0,
            text=clue.text,
            answer=clue.answer,
            reference=clue.reference,
            href=clue.href,
            is_daily_double=clue_id in self._daily_doubles,
        )
        self.revealed = False
        self._set_phase(Phase.CLUE_OPEN)

    def _close(self) -> None:
        self.open_clue = None
        self.revealed = False
        self._set_phase(Phase.BOARD)

    # ==================== LIFECYCLE ====================

    def initialize(self, board: Union[Board, Dict[str, Any]]) -> OperationResult:
        """
        Load a board and start over at team setup

        Raises:
            InvalidBoardError: If the document has no categories, a category
                without a clues array, or any other shape violation
        """
        if not isinstance(board, Board):
            board = parse_board(board)
        self._cancel_final_offer()
        self.board = board
        self.scoreboard.clear()
        self.wagers.clear()
        self.final_results.clear()
        self._clear_game_state()
        logger.info(
            f"✅ Board '{board.title}' loaded: {len(board.categories)} categories, "
            f"{board.total_clues} clues, final={'yes' if board.final else 'no'}"
        )
        return self._applied("initialize")

    def start_game(self, team_count: int = 2) -> OperationResult:
        op = "start_game"
        if self.board is None:
            return self._ignore(op, "no board loaded")
        if self.phase != Phase.TEAM_SETUP:
            return self._ignore(op, "game already started")
        if not self.min_teams <= team_count <= self.max_teams:
            return self._ignore(op, f"team_count must be between {self.min_teams} and {self.max_teams}")

        self.scoreboard.create_teams(team_count)
        self._daily_doubles = assign_daily_doubles(self.board, self.rng)
        logger.info(f"🎮 Game started with {team_count} teams, {len(self._daily_doubles)} daily doubles")
        self._set_phase(Phase.BOARD)
        return self._applied(op)

    def reset(self) -> OperationResult:
        """Back to team setup; the loaded board is kept"""
        self._cancel_final_offer()
        self.scoreboard.clear()
        self.wagers.clear()
        self.final_results.clear()
        self._clear_game_state()
        logger.info("🔄 Session reset to team setup")
        return self._applied("reset")

    def teardown(self) -> None:
        """Cancel pending work; in-flight board loads become stale"""
        self._cancel_final_offer()
        self._load_generation += 1
        self._load_in_flight = None
        logger.info("🛑 Session torn down")

    # ==================== BOARD LOAD BOUNDARY ====================

    def begin_load(self) -> Optional[int]:
        """Start a load; returns a ticket, or None if one is already in flight"""
        if self._load_in_flight is not None:
            logger.warning("⚠️ Board load already in progress")
            return None
        self._load_generation += 1
        self._load_in_flight = self._load_generation
        return self._load_in_flight

    def complete_load(self, ticket: int, board: Union[Board, Dict[str, Any]]) -> OperationResult:
        op = "complete_load"
        if ticket != self._load_in_flight:
            return self._ignore(op, "stale load result discarded")
        self._load_in_flight = None
        return self.initialize(board)

    def fail_load(self, ticket: int, error: Exception) -> OperationResult:
        op = "fail_load"
        if ticket != self._load_in_flight:
            return self._ignore(op, "stale load failure discarded")
        self._load_in_flight = None
        logger.error(f"❌ Board load failed: {error}")
        return OperationResult.ok(op)

    # ==================== CLUE LIFECYCLE ====================

    def select_clue(self, category_index: int, clue_index: int) -> OperationResult:
        op = "select_clue"
        if self.board is None:
            return self._ignore(op, "no board loaded")
        if self.open_clue is not None:
            return self._ignore(op, "a clue is already open")
        if self.phase != Phase.BOARD:
            return self._ignore(op, "board is not accepting selections")
        if self.board.clue(category_index, clue_index) is None:
            return self._ignore(op, "no such clue")
        clue_id = build_clue_id(category_index, clue_index)
        if clue_id in self._answered:
            return self._ignore(op, f"{clue_id} already answered")

        self._cancel_final_offer()
        if clue_id in self._daily_doubles:
            self.pending_daily_double = clue_id
            self._set_phase(Phase.DAILY_DOUBLE_INTRO)
            logger.info(f"🎯 Daily double found at {clue_id}")
            self._emit(CueEvent.DAILY_DOUBLE)
            return self._applied(op)

        self._open(category_index, clue_index)
        logger.info(f"📖 Opened {clue_id} ({self.open_clue.value})")
        self._emit(CueEvent.SELECT)
        return self._applied(op)

    def confirm_daily_double(self) -> OperationResult:
        op = "confirm_daily_double"
        if self.phase != Phase.DAILY_DOUBLE_INTRO or self.pending_daily_double is None:
            return self._ignore(op, "no daily double pending")
        category_index, clue_index = parse_clue_id(self.pending_daily_double)
        self.pending_daily_double = None
        self._open(category_index, clue_index)
        logger.info(f"📖 Opened daily double {self.open_clue.id} (worth {self.open_clue.score_value})")
        return self._applied(op)

    def cancel_daily_double(self) -> OperationResult:
        op = "cancel_daily_double"
        if self.phase != Phase.DAILY_DOUBLE_INTRO:
            return self._ignore(op, "no daily double pending")
        self.pending_daily_double = None
        self._set_phase(Phase.BOARD)
        return self._applied(op)

    def reveal_answer(self) -> OperationResult:
        op = "reveal_answer"
        if self.phase != Phase.CLUE_OPEN or self.open_clue is None:
            return self._ignore(op, "no clue open")
        if self.revealed:
            return self._ignore(op, "answer already revealed")
        self.revealed = True
        self._emit(CueEvent.REVEAL)
        return self._applied(op)

    def close_clue(self) -> OperationResult:
        """Dismiss the open clue without marking it answered"""
        op = "close_clue"
        if self.phase != Phase.CLUE_OPEN or self.open_clue is None:
            return self._ignore(op, "no clue open")
        if self.open_clue.is_final:
            return self._ignore(op, "the final clue must be finished")
        self._close()
        return self._applied(op)

    # ==================== SCORING ====================

    def record_wager(self, team_id: str, amount: int) -> OperationResult:
        op = "record_wager"
        if self.phase != Phase.CLUE_OPEN or self.open_clue is None:
            return self._ignore(op, "no clue open")
        if not (self.open_clue.is_daily_double or self.open_clue.is_final):
            return self._ignore(op, "clue does not take wagers")
        if self.revealed:
            return self._ignore(op, "wagers are closed once the answer is revealed")
        if self.scoreboard.get(team_id) is None:
            return self._ignore(op, f"unknown team {team_id}")

        stored = self.wagers.record(self.open_clue.id, team_id, amount)
        logger.info(f"🎲 Wager {team_id} on {self.open_clue.id}: {stored}")
        return self._applied(op)

    def judge(self, outcome: Union[JudgeOutcome, str]) -> OperationResult:
        """Score the active team on the open (non-final) clue and close it"""
        op = "judge"
        try:
            outcome = JudgeOutcome(outcome)
        except ValueError:
            return self._ignore(op, f"unknown outcome {outcome!r}")
        clue = self.open_clue
        if self.phase != Phase.CLUE_OPEN or clue is None:
            return self._ignore(op, "no clue open")
        if clue.is_final:
            return self._ignore(op, "use judge_final for the final clue")
        if not self.revealed:
            return self._ignore(op, "answer not revealed yet")
        if not clue.value:
            return self._ignore(op, "clue is unscored")

        points = clue.score_value
        if outcome == JudgeOutcome.CORRECT:
            self.scoreboard.apply_delta(self.scoreboard.active_team_index, points)
            self._emit(CueEvent.CORRECT)
        elif outcome == JudgeOutcome.INCORRECT:
            self.scoreboard.apply_delta(self.scoreboard.active_team_index, -points)
            self.scoreboard.advance_turn()
            self._emit(CueEvent.INCORRECT)
        else:
            self._emit(CueEvent.INCORRECT)

        logger.info(f"⚖️ {clue.id} judged {outcome.value} ({points})")
        self._answered.add(clue.id)
        self._close()
        return self._applied(op)

    def auto_offer_final(self) -> OperationResult:
        op = "auto_offer_final"
        self._cancel_final_offer()
        if not self._final_offer_ready():
            return self._ignore(op, "final round is not ready")
        self.final_intro_shown = True
        self._set_phase(Phase.FINAL_INTRO)
        self._emit(CueEvent.FINAL_INTRO)
        return self._applied(op)

    def open_final(self) -> OperationResult:
        op = "open_final"
        if self.phase != Phase.FINAL_INTRO or self.board is None or self.board.final is None:
            return self._ignore(op, "final intro not showing")
        final = self.board.final
        self.final_results.clear()
        self.open_clue = OpenClue(
            id=FINAL_CLUE_ID,
            category=final.category,
            text=final.text,
            answer=final.answer,
            reference=final.reference,
            href=final.href,
            is_final=True,
        )
        self.revealed = False
        self._set_phase(Phase.CLUE_OPEN)
        self._emit(CueEvent.SELECT)
        return self._applied(op)

    def judge_final(self, team_id: str, outcome: Union[FinalOutcome, str]) -> OperationResult:
        op = "judge_final"
        try:
            outcome = FinalOutcome(outcome)
        except ValueError:
            return self._ignore(op, f"unknown outcome {outcome!r}")
        if self.phase != Phase.CLUE_OPEN or self.open_clue is None or not self.open_clue.is_final:
            return self._ignore(op, "final clue not open")
        if not self.revealed:
            return self._ignore(op, "answer not revealed yet")
        if self.scoreboard.get(team_id) is None:
            return self._ignore(op, f"unknown team {team_id}")
        if self.final_results.is_judged(team_id):
            return self._ignore(op, f"{team_id} already judged")

        wager = self.wagers.get(FINAL_CLUE_ID, team_id)
        self.scoreboard.apply_delta(team_id, final_delta(wager, outcome))
        self.final_results.record(team_id, outcome)
        self._emit(CueEvent.CORRECT if outcome == FinalOutcome.CORRECT else CueEvent.INCORRECT)
        return self._applied(op)

    def finish_final(self) -> OperationResult:
        """End the game; unjudged teams simply keep their score"""
        op = "finish_final"
        if self.phase != Phase.CLUE_OPEN or self.open_clue is None or not self.open_clue.is_final:
            return self._ignore(op, "final clue not open")
        if not self.revealed:
            return self._ignore(op, "answer not revealed yet")

        unjudged = [team.id for team in self.teams if not self.final_results.is_judged(team.id)]
        if unjudged:
            logger.info(f"🏁 Finishing final with unjudged teams: {unjudged}")
        self._answered.add(FINAL_CLUE_ID)
        self.final_results.clear()
        self.open_clue = None
        self.revealed = False
        self._set_phase(Phase.FINAL_STANDINGS)
        self._emit(CueEvent.GAME_END)
        return self._applied(op)

    # ==================== OPERATOR SHORTCUTS ====================

    def debug_fast_forward(self) -> OperationResult:
        """
        Mark every clue answered except the last one on the board

        Answers are only ever added. If the last clue was already answered,
        nothing is left open and the final offer arms right away.
        """
        op = "debug_fast_forward"
        if self.board is None:
            return self._ignore(op, "no board loaded")
        if self.phase == Phase.FINAL_STANDINGS:
            return self._ignore(op, "game is over")
        clue_ids = self.board.clue_ids()
        if not clue_ids:
            return self._ignore(op, "board has no clues")

        self._answered.update(clue_ids[:-1])
        self.pending_daily_double = None
        if self.phase in (Phase.CLUE_OPEN, Phase.DAILY_DOUBLE_INTRO, Phase.FINAL_INTRO):
            self.final_intro_shown = False
            self._close()
        else:
            self.open_clue = None
            self.revealed = False
        logger.info(f"⏩ Fast-forward: only {clue_ids[-1]} left")
        return self._applied(op)

    def toggle_daily_double_markers(self) -> OperationResult:
        op = "toggle_daily_double_markers"
        if self.board is None:
            return self._ignore(op, "no board loaded")
        self.show_daily_double_markers = not self.show_daily_double_markers
        return self._applied(op)

    # ==================== FINAL OFFER TIMER ====================

    def _final_offer_ready(self) -> bool:
        board = self.board
        if board is None or board.final is None:
            return False
        if self.phase != Phase.BOARD or self.open_clue is not None:
            return False
        if self.final_intro_shown or FINAL_CLUE_ID in self._answered:
            return False
        clue_ids = board.clue_ids()
        return len(clue_ids) > 0 and all(clue_id in self._answered for clue_id in clue_ids)

    def _sync_final_offer(self) -> None:
        ready = self._final_offer_ready()
        if ready and self._final_offer is None:
            logger.info(f"⏳ Final round offered in {self.final_offer_delay_ms}ms")
            self._final_offer = self.scheduler.call_later(self.final_offer_delay_ms, self._on_final_offer_due)
        elif not ready:
            self._cancel_final_offer()

    def _cancel_final_offer(self) -> None:
        if self._final_offer is not None:
            self._final_offer.cancel()
            self._final_offer = None

    def _on_final_offer_due(self) -> None:
        self._final_offer = None
        self.auto_offer_final()

    # ==================== REDUCER ENTRY POINT ====================

    def dispatch(self, action: Dict[str, Any]) -> OperationResult:
        """
        Apply an action of the form {"type": <operation>, **kwargs}

        Example:
            session.dispatch({"type": "select_clue", "category_index": 0, "clue_index": 1})
        """
        payload = dict(action)
        kind = payload.pop("type", None)
        if kind not in ACTIONS:
            return OperationResult.ignored(str(kind), "unknown action")
        operation = getattr(self, kind)
        try:
            inspect.signature(operation).bind(**payload)
        except TypeError as e:
            logger.warning(f"⚠️ Bad arguments for {kind}: {e}")
            return OperationResult.ignored(kind, "bad arguments")
        result = operation(**payload)
        self.history.append(dict(action))
        return result

    # ==================== VIEW ====================

    def snapshot(self) -> Dict[str, Any]:
        """JSON-ready view of the session"""
        board = self.board
        categories = []
        if board:
            for category_index, category in enumerate(board.categories):
                cells = []
                for clue_index, clue in enumerate(category.clues):
                    clue_id = build_clue_id(category_index, clue_index)
                    cell = {"id": clue_id, "value": clue.value or 0, "answered": clue_id in self._answered}
                    if self.show_daily_double_markers:
                        cell["daily_double"] = clue_id in self._daily_doubles
                    cells.append(cell)
                categories.append({"name": category.name, "hint": category.hint, "clues": cells})

        open_clue = None
        if self.open_clue:
            clue = self.open_clue
            open_clue = {
                "id": clue.id,
                "category": clue.category,
                "text": clue.text,
                "value": clue.value,
                "score_value": clue.score_value,
                "is_daily_double": clue.is_daily_double,
                "is_final": clue.is_final,
                "revealed": self.revealed,
                "wagers": self.wagers.for_clue(clue.id),
            }
            if self.revealed:
                open_clue.update({"answer": clue.answer, "reference": clue.reference, "href": clue.href})

        active = self.scoreboard.active_team
        return {
            "phase": self.phase.value,
            "title": board.title if board else None,
            "subtitle": board.subtitle if board else None,
            "has_final": bool(board and board.final),
            "categories": categories,
            "rows": board.max_clues_per_category if board else 0,
            "total_clues": board.total_clues if board else 0,
            "answered_count": len(self._answered - {FINAL_CLUE_ID}),
            "teams": [team.model_dump() for team in self.teams],
            "active_team_index": self.scoreboard.active_team_index,
            "active_team_id": active.id if active else None,
            "open_clue": open_clue,
            "pending_daily_double": self.pending_daily_double is not None,
            "final_results": self.final_results.as_dict(),
            "final_offer_pending": self.final_offer_pending,
            "show_daily_double_markers": self.show_daily_double_markers,
            "standings": build_standings(self.standings()),
            "loading": self.is_loading,
        }


def replay(
    board: Union[Board, Dict[str, Any]],
    actions: Iterable[Dict[str, Any]],
    rng: Optional[random.Random] = None,
) -> GameSession:
    """
    Rebuild a session from an action list on a virtual clock

    Besides session operations, {"type": "wait", "ms": N} advances the clock.
    """
    scheduler = ManualScheduler()
    session = GameSession(rng=rng, scheduler=scheduler)
    session.initialize(board)
    for action in actions:
        if action.get("type") == "wait":
            scheduler.advance(int(action.get("ms", 0)))
            continue
        session.dispatch(action)
    return session
