"""
Data models for the game session controller
"""
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from jeopardy.utils import build_clue_id


class Phase(str, Enum):
    """Session state machine nodes"""
    TEAM_SETUP = "TeamSetup"
    BOARD = "Board"
    DAILY_DOUBLE_INTRO = "DailyDoubleIntro"
    CLUE_OPEN = "ClueOpen"
    FINAL_INTRO = "FinalIntro"
    FINAL_STANDINGS = "FinalStandings"


class CueEvent(str, Enum):
    """Discrete audio cues emitted by the session"""
    SELECT = "select"
    REVEAL = "reveal"
    CORRECT = "correct"
    INCORRECT = "incorrect"
    DAILY_DOUBLE = "dailyDouble"
    FINAL_INTRO = "finalIntro"
    GAME_END = "gameEnd"


class JudgeOutcome(str, Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"
    NO_RESPONSE = "noResponse"


class FinalOutcome(str, Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"


class Clue(BaseModel):
    """One question/answer cell of the board"""
    model_config = ConfigDict(populate_by_name=True)

    value: Optional[int] = 0              # absent or 0 means unscored
    text: str = Field(alias="clue")
    answer: str
    reference: Optional[str] = None
    href: Optional[str] = None

    @field_validator("value")
    @classmethod
    def value_not_negative(cls, v):
        if v is not None and v < 0:
            raise ValueError("clue value must be non-negative")
        return v


class Category(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    hint: Optional[str] = None
    clues: List[Clue] = Field(alias="questions")


class FinalClue(BaseModel):
    """The single end-of-game clue"""
    model_config = ConfigDict(populate_by_name=True)

    category: str
    text: str = Field(alias="clue")
    answer: str
    reference: Optional[str] = None
    href: Optional[str] = None


class Board(BaseModel):
    """A validated board document"""
    model_config = ConfigDict(populate_by_name=True)

    title: str
    subtitle: Optional[str] = None
    categories: List[Category]
    final: Optional[FinalClue] = Field(default=None, alias="finalJeopardy")

    @model_validator(mode="after")
    def check_categories(self):
        if not self.categories:
            raise ValueError("board has no categories")
        seen = set()
        for category in self.categories:
            if category.name in seen:
                raise ValueError(f"duplicate category name: {category.name}")
            seen.add(category.name)
        return self

    def iter_clues(self) -> Iterator[Tuple[str, int, int, Clue]]:
        """Yield (clue_id, category_index, clue_index, clue) in board order"""
        for category_index, category in enumerate(self.categories):
            for clue_index, clue in enumerate(category.clues):
                yield build_clue_id(category_index, clue_index), category_index, clue_index, clue

    def clue_ids(self) -> List[str]:
        return [clue_id for clue_id, _, _, _ in self.iter_clues()]

    def clue(self, category_index: int, clue_index: int) -> Optional[Clue]:
        if not 0 <= category_index < len(self.categories):
            return None
        clues = self.categories[category_index].clues
        if not 0 <= clue_index < len(clues):
            return None
        return clues[clue_index]

    @property
    def total_clues(self) -> int:
        return sum(len(category.clues) for category in self.categories)

    @property
    def max_clues_per_category(self) -> int:
        return max((len(category.clues) for category in self.categories), default=0)


class Team(BaseModel):
    id: str
    name: str
    score: int = 0


class OpenClue(BaseModel):
    """The clue currently shown (single slot)"""
    id: str
    category: str
    category_index: Optional[int] = None
    clue_index: Optional[int] = None
    value: int = 0
    text: str
    answer: str
    reference: Optional[str] = None
    href: Optional[str] = None
    is_daily_double: bool = False
    is_final: bool = False

    @property
    def score_value(self) -> int:
        # Daily doubles pay a fixed double value; the final clue pays wagers
        if self.is_final:
            return 0
        return self.value * 2 if self.is_daily_double else self.value


class OperationResult(BaseModel):
    """Explicit outcome of a session operation"""
    applied: bool
    operation: str
    reason: Optional[str] = None

    @classmethod
    def ok(cls, operation: str) -> "OperationResult":
        return cls(applied=True, operation=operation)

    @classmethod
    def ignored(cls, operation: str, reason: str) -> "OperationResult":
        return cls(applied=False, operation=operation, reason=reason)

    def __bool__(self) -> bool:
        return self.applied


class GameSettings(BaseModel):
    """Runtime configuration (config/game.yaml)"""
    board_path: str = "data/board.json"
    final_offer_delay_ms: int = 3000   # auto-offer of the final clue
    min_teams: int = 2
    max_teams: int = 6
    default_team_count: int = 2
    cue_history_size: int = 100
    sound_enabled: bool = True
    sound_volume: float = 0.6
    log_level: str = "INFO"


# ==================== API PAYLOADS ====================

class StartGameRequest(BaseModel):
    team_count: Optional[int] = None


class SelectClueRequest(BaseModel):
    category_index: int
    clue_index: int


class WagerRequest(BaseModel):
    team_id: str
    amount: int


class JudgeRequest(BaseModel):
    outcome: JudgeOutcome


class FinalJudgeRequest(BaseModel):
    team_id: str
    outcome: FinalOutcome


class SoundRequest(BaseModel):
    muted: Optional[bool] = None
    volume: Optional[float] = None


class LoadBoardRequest(BaseModel):
    path: Optional[str] = None
