'''
Code Breaker API

Endpoints:
POST   /games                        -> start a game (free play, level, or daily)
GET    /games/{id}                   -> read state & history
DELETE /games/{id}                   -> abandon a game
PUT    /games/{id}/slots/{index}     -> place a color in a slot
DELETE /games/{id}/slots/{index}     -> empty one slot
DELETE /games/{id}/slots             -> empty every slot
POST   /games/{id}/guess             -> submit the current guess
POST   /games/{id}/bonus             -> one extra attempt after a loss (reward confirmed)
POST   /games/{id}/restart           -> new round, same rules
POST   /games/{id}/pause | /resume
GET    /games/{id}/hint              -> minimax hint (computed off the event loop)
GET    /games/{id}/analysis          -> grade every guess of a finished game

Extras:
GET  /levels                         -> level catalog with progress
GET  /daily                          -> today's challenge status
GET  /stats                          -> scoreboard
POST /stats/reset                    -> reset scoreboard

Live games are held in memory (SessionStore); only outcomes go to the database.
'''

import asyncio
import logging
from datetime import date
from functools import lru_cache
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware

from . import config as settings
from .bootstrap_db import create_all       # dev-only: create tables
from .db import get_db                      # SQLAlchemy Session dependency
from .errors import IncompleteGuessError
from .hints import HintService, HintWorker
from .levels import DAILY_TIER, daily_session, get_level, session_for_level
from .random_client import fetch_code
from .repository import ProgressRepository
from .session import GameSession
from .solver import KnuthSolver
from .store import LiveGame, SessionStore
from .types import DifficultyConfig, GuessResult, tier_by_name
from .schemas import (
    AnalysisOut,
    ConfigOut,
    DailyOut,
    GameOut,
    GuessEntryOut,
    GuessResponse,
    HintOut,
    LevelOut,
    NewGameRequest,
    SlotRequest,
    StateOut,
    StatsOut,
)

settings.configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Code Breaker API", version="1.0.0")

# Allow everything in dev so the docs and front-end work easily
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

sessions = SessionStore()
hint_worker = HintWorker(max_workers=settings.HINT_WORKERS)

# --- Dev convenience: auto-create tables locally ---
if settings.APP_ENV == "local":
    @app.on_event("startup")
    def _dev_create_tables():
        create_all()


@app.on_event("shutdown")
def _stop_hint_worker():
    hint_worker.shutdown(wait=False)


# One stateless solver per difficulty config, built on first use
@lru_cache(maxsize=None)
def hint_service_for(cfg: DifficultyConfig) -> HintService:
    return HintService(KnuthSolver(cfg, seed=settings.SOLVER_SEED))


def get_sessions() -> SessionStore:
    return sessions


def get_repo(db = Depends(get_db)) -> ProgressRepository:
    return ProgressRepository(db)


# ---------------- DTO builders ----------------

def _message(result: GuessResult) -> str:
    black, white = result.feedback
    if black == 0 and white == 0:
        return "all incorrect"
    return f"{black} in the right place, {white} right color in the wrong place"


def _to_entry_out(result: GuessResult) -> GuessEntryOut:
    return GuessEntryOut(
        guess=list(result.guess),
        black=result.feedback.black,
        white=result.feedback.white,
        message=_message(result),
    )


def _to_game_out(game: LiveGame) -> GameOut:
    session = game.session
    cfg = session.config
    revealed = session.revealed_secret
    return GameOut(
        game_id=game.id,
        mode=game.kind,
        tier=game.tier,
        level_id=game.level_id,
        day=game.day,
        config=ConfigOut(
            code_length=cfg.code_length,
            color_count=cfg.color_count,
            allow_duplicates=cfg.allow_duplicates,
            max_attempts=cfg.max_attempts,
            colors=list(cfg.colors),
        ),
        state=StateOut(
            status=session.state.status,
            attempts=session.state.attempts,
            stars=session.state.stars,
        ),
        current_guess=list(session.current_guess),
        attempts_used=session.attempts_used,
        attempts_left=session.attempts_remaining,
        max_attempts=session.max_attempts,
        bonus_granted=session.bonus_granted,
        hints_used=game.hints_used,
        history=[_to_entry_out(r) for r in session.guess_history],
        secret=list(revealed) if revealed is not None else None,
    )


def _require_game(store: SessionStore, game_id: str) -> LiveGame:
    game = store.get(game_id)
    if not game:
        raise HTTPException(status_code=404, detail="Game not found")
    return game


def _require_playing(game: LiveGame) -> None:
    status = game.session.state.status
    if status != "playing":
        raise HTTPException(status_code=409, detail=f"Game {status}. Action not allowed.")


def _record_outcome(game: LiveGame, store: SessionStore, repo: ProgressRepository) -> None:
    """Hand a finished round's (stars, attempts) to persistence, once."""
    state = game.session.state
    if not state.is_finished or not store.mark_recorded(game.id):
        return
    won = state.status == "won"
    attempts = state.attempts if won else game.session.attempts_used
    repo.record_result(won, attempts, state.stars or 0, level_id=game.level_id)
    if won and game.kind == "daily" and game.day is not None:
        repo.complete_daily(game.day, attempts, state.stars)


# ---------------- Routes ----------------

@app.post("/games", response_model=GameOut, summary="Start a new game")
def start_game(
    payload: Optional[NewGameRequest] = None,
    store: SessionStore = Depends(get_sessions),
    repo: ProgressRepository = Depends(get_repo),
) -> GameOut:
    """
    Modes:
      free  -> fresh random secret on the chosen tier
      level -> fixed secret derived from the level id (must be unlocked)
      daily -> fixed secret derived from today's date, intermediate tier
    """
    payload = payload or NewGameRequest()
    if payload.mode == "level":
        if payload.level_id is None:
            raise HTTPException(status_code=400, detail="level_id is required for mode='level'.")
        try:
            level = get_level(payload.level_id)
        except KeyError:
            raise HTTPException(status_code=404, detail="Level not found")
        if not repo.is_unlocked(level.id):
            raise HTTPException(status_code=403, detail="Level is locked.")
        session = session_for_level(level.id)
        game = store.create(session, kind="level", tier=level.tier.name, level_id=level.id)
    elif payload.mode == "daily":
        today = date.today()
        session = daily_session(today)
        game = store.create(session, kind="daily", tier=DAILY_TIER, day=today)
    else:
        tier = tier_by_name(payload.tier)
        session = GameSession(tier.config, draw=fetch_code)   # random.org w/ secure fallback
        game = store.create(session, kind="free", tier=tier.name)

    repo.record_start()
    logger.info("started %s game %s on %s", game.kind, game.id, game.tier)
    return _to_game_out(game)


@app.get("/games/{game_id}", response_model=GameOut, summary="Get current game state")
def get_game(game_id: str, store: SessionStore = Depends(get_sessions)) -> GameOut:
    return _to_game_out(_require_game(store, game_id))


@app.delete("/games/{game_id}", summary="Abandon a game")
def remove_game(game_id: str, store: SessionStore = Depends(get_sessions)) -> dict:
    if not store.remove(game_id):
        raise HTTPException(status_code=404, detail="Game not found")
    hint_worker.forget(game_id)
    hint_worker.forget(f"{game_id}:analysis")
    return {"message": "Game removed."}


@app.put("/games/{game_id}/slots/{index}", response_model=GameOut, summary="Place a color")
def set_slot(
    game_id: str,
    index: int,
    payload: SlotRequest,
    store: SessionStore = Depends(get_sessions),
) -> GameOut:
    game = _require_game(store, game_id)
    _require_playing(game)
    if not store.set_slot(game_id, index, payload.color):
        raise HTTPException(
            status_code=400,
            detail=f"Slot must be 0..{game.session.config.code_length - 1} and the color active in this game.",
        )
    return _to_game_out(game)


@app.delete("/games/{game_id}/slots/{index}", response_model=GameOut, summary="Empty one slot")
def clear_slot(game_id: str, index: int, store: SessionStore = Depends(get_sessions)) -> GameOut:
    game = _require_game(store, game_id)
    _require_playing(game)
    if not store.clear_slot(game_id, index):
        raise HTTPException(status_code=400, detail="Slot index out of range.")
    return _to_game_out(game)


@app.delete("/games/{game_id}/slots", response_model=GameOut, summary="Empty every slot")
def clear_slots(game_id: str, store: SessionStore = Depends(get_sessions)) -> GameOut:
    game = _require_game(store, game_id)
    _require_playing(game)
    store.clear_slot(game_id)
    return _to_game_out(game)


@app.post("/games/{game_id}/guess", response_model=GuessResponse, summary="Submit the current guess")
def submit_guess(
    game_id: str,
    store: SessionStore = Depends(get_sessions),
    repo: ProgressRepository = Depends(get_repo),
) -> GuessResponse:
    game = _require_game(store, game_id)
    status = game.session.state.status
    if status != "playing":
        raise HTTPException(status_code=409, detail=f"Game {status}. No more guesses allowed.")
    try:
        game.session.require_complete_guess()
    except IncompleteGuessError as exc:
        raise HTTPException(status_code=400, detail=f"Incomplete guess. {exc}")

    result = store.guess(game_id)
    if result is None:
        # Lost a race with another request on the same game
        raise HTTPException(status_code=409, detail="Guess was not accepted.")

    _record_outcome(game, store, repo)

    status = game.session.state.status
    return GuessResponse(
        feedback=_to_entry_out(result),
        game=_to_game_out(game),
        note=(f"Game {status}. No more guesses allowed." if game.session.state.is_finished else None),
    )


@app.post("/games/{game_id}/bonus", response_model=GameOut, summary="Grant the one-time bonus attempt")
def grant_bonus(
    game_id: str,
    store: SessionStore = Depends(get_sessions),
    repo: ProgressRepository = Depends(get_repo),
) -> GameOut:
    """Call only after the reward collaborator confirms the reward was earned."""
    game = _require_game(store, game_id)
    if not store.grant_bonus(game_id):
        raise HTTPException(status_code=409, detail="Bonus is only available once, after a loss.")
    repo.record_bonus()
    return _to_game_out(game)


@app.post("/games/{game_id}/restart", response_model=GameOut, summary="Start a new round")
def restart_game(
    game_id: str,
    store: SessionStore = Depends(get_sessions),
    repo: ProgressRepository = Depends(get_repo),
) -> GameOut:
    _require_game(store, game_id)
    game = store.restart(game_id)
    repo.record_start()
    return _to_game_out(game)


@app.post("/games/{game_id}/pause", response_model=GameOut, summary="Pause the game")
def pause_game(game_id: str, store: SessionStore = Depends(get_sessions)) -> GameOut:
    game = _require_game(store, game_id)
    if not store.pause(game_id, paused=True):
        raise HTTPException(status_code=409, detail="Only a game in play can be paused.")
    return _to_game_out(game)


@app.post("/games/{game_id}/resume", response_model=GameOut, summary="Resume a paused game")
def resume_game(game_id: str, store: SessionStore = Depends(get_sessions)) -> GameOut:
    game = _require_game(store, game_id)
    if not store.pause(game_id, paused=False):
        raise HTTPException(status_code=409, detail="Game is not paused.")
    return _to_game_out(game)


@app.get("/games/{game_id}/hint", response_model=HintOut, summary="Get a minimax hint")
async def get_hint(
    game_id: str,
    store: SessionStore = Depends(get_sessions),
    repo: ProgressRepository = Depends(get_repo),
) -> HintOut:
    game = _require_game(store, game_id)
    _require_playing(game)

    service = hint_service_for(game.session.config)
    future = hint_worker.submit_hint(service, game.session.guess_history, key=game_id)
    hint = await asyncio.wrap_future(future)
    if hint is None:
        raise HTTPException(status_code=409, detail="No hint available.")

    # Store lock and DB commit both block; keep them off the event loop
    used = await run_in_threadpool(store.use_hint, game_id) or 0
    await run_in_threadpool(repo.record_hint)
    return HintOut(
        suggested_guess=list(hint.suggested_guess),
        remaining_possibilities=hint.remaining_possibilities,
        guaranteed_elimination_min=hint.guaranteed_elimination_min,
        is_optimal=hint.is_optimal,
        reasoning=hint.reasoning,
        hints_used=used,
    )


@app.get("/games/{game_id}/analysis", response_model=List[AnalysisOut], summary="Grade every guess")
async def get_analysis(game_id: str, store: SessionStore = Depends(get_sessions)) -> List[AnalysisOut]:
    game = _require_game(store, game_id)
    if not game.session.state.is_finished:
        raise HTTPException(status_code=409, detail="Analysis is available once the game is over.")

    service = hint_service_for(game.session.config)
    future = hint_worker.submit_analysis(service, game.session.guess_history, key=f"{game_id}:analysis")
    analyses = await asyncio.wrap_future(future)
    return [
        AnalysisOut(
            attempt=i,
            guess=list(a.guess),
            optimal_guess=list(a.optimal_guess),
            was_optimal=a.was_optimal,
            possibilities_before=a.possibilities_before,
            possibilities_after=a.possibilities_after,
            optimal_would_leave=a.optimal_would_leave,
            rating=a.rating.value,
        )
        for i, a in enumerate(analyses, start=1)
    ]


@app.get("/levels", response_model=List[LevelOut], summary="Level catalog with progress")
def list_levels(tier: Optional[str] = None, repo: ProgressRepository = Depends(get_repo)) -> List[LevelOut]:
    if tier is not None:
        try:
            tier_by_name(tier)
        except KeyError:
            raise HTTPException(status_code=404, detail="Tier not found")
    return repo.list_levels(tier)


@app.get("/daily", response_model=DailyOut, summary="Today's challenge status")
def get_daily(repo: ProgressRepository = Depends(get_repo)) -> DailyOut:
    return repo.get_daily(date.today())


@app.get("/stats", response_model=StatsOut, summary="Get scoreboard")
def get_stats(repo: ProgressRepository = Depends(get_repo)) -> StatsOut:
    return repo.get_stats()


@app.post("/stats/reset", summary="Reset the scoreboard")
def reset_stats(repo: ProgressRepository = Depends(get_repo)) -> dict:
    repo.reset_stats()
    return {"message": "Stats reset."}
