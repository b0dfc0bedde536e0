"""
Explicit validation & Pydantic models
- Define the structure of API requests and responses.
- Colors travel as their names ("red", "blue", ...); the core works in PegColor.
"""

from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .types import PegColor

Tier = Literal["tutorial", "beginner", "intermediate", "advanced", "expert", "master"]
Status = Literal["playing", "won", "lost", "paused"]
Rating = Literal["optimal", "good", "acceptable", "suboptimal", "poor"]


# 1. Starting a game: free play on a tier, a fixed level, or today's daily
class NewGameRequest(BaseModel):
    mode: Literal["free", "level", "daily"] = Field("free", description="What kind of puzzle to start")
    tier: Tier = Field("intermediate", description="Tier for free play (ignored otherwise)")
    level_id: Optional[int] = Field(None, ge=0, description="Level to play when mode='level'")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"mode": "free", "tier": "beginner"},
                {"mode": "level", "level_id": 12},
                {"mode": "daily"},
            ]
        }
    }


class SlotRequest(BaseModel):
    color: PegColor = Field(..., description="Color to place in the slot")


# 2. Rules of the puzzle being played
class ConfigOut(BaseModel):
    code_length: int
    color_count: int
    allow_duplicates: bool
    max_attempts: int
    colors: List[PegColor] = Field(..., description="Active colors, palette order")


# 3. Feedback for a single guess
class GuessEntryOut(BaseModel):
    guess: List[PegColor] = Field(..., description="The player's guess")
    black: int = Field(..., description="Right color, right position")
    white: int = Field(..., description="Right color, wrong position")
    message: str = Field(..., description="Feedback message")


class StateOut(BaseModel):
    status: Status
    attempts: Optional[int] = Field(None, description="Attempts taken (won only)")
    stars: Optional[int] = Field(None, description="Stars earned (won only)")


# 4. Overall state of a game
class GameOut(BaseModel):
    game_id: str = Field(..., description="Unique ID for the game")
    mode: Literal["free", "level", "daily"]
    tier: Tier
    level_id: Optional[int] = None
    day: Optional[date] = None
    config: ConfigOut
    state: StateOut
    current_guess: List[Optional[PegColor]] = Field(..., description="Slots being filled; null = empty")
    attempts_used: int
    attempts_left: int
    max_attempts: int
    bonus_granted: bool
    hints_used: int
    history: List[GuessEntryOut] = Field(..., description="All guesses made so far with feedback")
    secret: Optional[List[PegColor]] = Field(None, description="Only revealed once the game is over")


# 5. Result of a submission
class GuessResponse(BaseModel):
    feedback: GuessEntryOut
    game: GameOut
    note: Optional[str] = Field(None, description="Extra note (ex. 'Game lost. No more guesses.')")


class HintOut(BaseModel):
    suggested_guess: List[PegColor]
    remaining_possibilities: int
    guaranteed_elimination_min: int
    is_optimal: bool
    reasoning: str
    hints_used: int


class AnalysisOut(BaseModel):
    attempt: int = Field(..., description="1-based guess number")
    guess: List[PegColor]
    optimal_guess: List[PegColor]
    was_optimal: bool
    possibilities_before: int
    possibilities_after: int
    optimal_would_leave: int = Field(..., description="Approximate; see docs")
    rating: Rating


class LevelOut(BaseModel):
    level_id: int
    tier: Tier
    level_in_tier: int
    display_name: str
    stars: int = 0
    best_attempts: Optional[int] = None
    is_unlocked: bool = False


class DailyOut(BaseModel):
    day: date
    tier: Tier
    completed: bool
    attempts: Optional[int] = None
    stars: Optional[int] = None


class StatsOut(BaseModel):
    games_started: int
    games_won: int
    games_lost: int
    current_streak: int = Field(..., description="Games won in a row (per game, not per day)")
    best_streak: int = Field(..., description="Longest run of games won in a row")
    average_attempts_to_win: Optional[float] = None
    fastest_win_attempts: Optional[int] = None
    total_stars: int = Field(..., description="Sum of best stars over all levels")
    levels_completed: int
    hints_used: int
    bonus_lives_used: int
