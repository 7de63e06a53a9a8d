"""FastAPI server for alefbet application."""

import json
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional, Union

from fastapi import FastAPI, HTTPException
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from core.catalog import available_symbols, load_catalog_dir
from core.config import ADVANCE_DELAY_SECONDS, RETRY_DELAY_SECONDS
from core.game import BANK, SLOT, GameSession
from core.rounds import default_exercise_kinds
from server.file_storage import FileHistoryStore

logger = logging.getLogger(__name__)

# Paths
PROJECT_ROOT = Path(__file__).parent.parent
IMAGES_DIR = Path(os.environ.get('ALEFBET_IMAGES_DIR', PROJECT_ROOT / "images"))


# Pydantic models for API
class PromptItemModel(BaseModel):
    symbol: str
    word: str
    image_ref: str


class RoundModel(BaseModel):
    exercise_kind: str
    round_id: int
    target_symbol: Optional[str]
    target_word: Optional[str]
    correct_item: Optional[PromptItemModel]
    image_options: list[PromptItemModel]
    symbol_options: list[str]
    word_options: list[str]
    shuffled_letters: list[str]
    arrangement: list[Optional[str]]


class StateResponse(BaseModel):
    round: Optional[RoundModel]
    last_outcome: Optional[bool]
    score: int
    selected_answer: Union[PromptItemModel, str, None]
    ready: bool
    error: Optional[str]
    recording_paused: bool
    stats_version: int


class ImageChoiceRequest(BaseModel):
    word: str
    symbol: Optional[str] = None


class SymbolChoiceRequest(BaseModel):
    symbol: str


class WordChoiceRequest(BaseModel):
    word: str


class DrawingRequest(BaseModel):
    passed: bool
    score: Optional[float] = None


class MoveLetterRequest(BaseModel):
    from_area: str
    from_index: int
    to_area: str
    to_index: int


class StatsRow(BaseModel):
    symbol: str
    name: str
    correct: int
    incorrect: int
    total: int
    success_rate: Optional[float]
    last_attempt_correct: Optional[bool]
    weight: float
    probability: float


class StatsResponse(BaseModel):
    rows: list[StatsRow]
    total_records: int
    recording_paused: bool


# Global state (single learner per server)
history_store: FileHistoryStore = None
game: GameSession = None


def load_settings(storage: FileHistoryStore) -> dict:
    """Read the optional config file. Missing or unreadable files mean defaults."""
    try:
        return storage.load_config()
    except FileNotFoundError:
        return {}
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Could not read config {storage.config_file}: {e}")
        return {}


def create_game(storage: FileHistoryStore, images_dir: Path, settings: dict) -> GameSession:
    """Load the catalog and build a started game session."""
    catalog = load_catalog_dir(str(images_dir))
    session = GameSession(
        catalog,
        storage,
        symbols=available_symbols(catalog),
        kinds=default_exercise_kinds(settings.get('exercise_weights')),
        advance_delay=float(settings.get('advance_delay_seconds', ADVANCE_DELAY_SECONDS)),
        retry_delay=float(settings.get('retry_delay_seconds', RETRY_DELAY_SECONDS))
    )
    session.add_stats_listener(lambda: logger.debug("Stats changed"))
    session.start()
    return session


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize storage and the game session on startup."""
    global history_store, game

    history_store = FileHistoryStore(
        state_dir=os.environ.get('ALEFBET_STATE_DIR'),
        config_file=os.environ.get('ALEFBET_CONFIG')
    )
    settings = load_settings(history_store)
    game = create_game(history_store, IMAGES_DIR, settings)
    logger.info(f"History file: {history_store.history_file}")
    if game.state.error:
        logger.error(f"Game not playable: {game.state.error}")
    else:
        logger.info(f"Game ready with {len(game.symbols)} letters")
    yield
    game.timer.cancel()


app = FastAPI(title="Alefbet API", description="Hebrew letter learning game API", lifespan=lifespan)

# Picture files referenced by prompt items
app.mount("/images", StaticFiles(directory=IMAGES_DIR, check_dir=False), name="images")


def require_game() -> GameSession:
    if game is None:
        raise HTTPException(status_code=503, detail="Game not initialized")
    return game


def state_response(session: GameSession) -> StateResponse:
    return StateResponse(
        **session.state.to_dict(),
        recording_paused=session.recording_paused,
        stats_version=session.stats_version
    )


@app.get("/")
async def root():
    """Health check."""
    return {"service": "alefbet", "status": "ok"}


@app.get("/api/state", response_model=StateResponse)
async def get_state():
    """Get the current round, feedback and score."""
    return state_response(require_game())


@app.post("/api/round", response_model=StateResponse)
async def request_new_round():
    """Skip to a new round."""
    session = require_game()
    session.request_new_round()
    return state_response(session)


@app.post("/api/answer/image", response_model=StateResponse)
async def submit_image_choice(request: ImageChoiceRequest):
    """Choose a picture in a letter-to-picture round."""
    session = require_game()
    spec = session.state.round
    options = spec.image_options if spec else ()
    matches = [item for item in options
               if item.word == request.word and (request.symbol is None or item.symbol == request.symbol)]
    if not matches:
        raise HTTPException(status_code=400, detail=f"Picture '{request.word}' is not an option")
    session.submit_image_choice(matches[0])
    logger.info(f"Image choice {request.word}: {session.state.last_outcome}")
    return state_response(session)


@app.post("/api/answer/symbol", response_model=StateResponse)
async def submit_symbol_choice(request: SymbolChoiceRequest):
    """Choose a letter in a picture-to-letter round."""
    session = require_game()
    spec = session.state.round
    if spec is None or request.symbol not in spec.symbol_options:
        raise HTTPException(status_code=400, detail=f"Letter '{request.symbol}' is not an option")
    session.submit_symbol_choice(request.symbol)
    logger.info(f"Letter choice {request.symbol}: {session.state.last_outcome}")
    return state_response(session)


@app.post("/api/answer/word", response_model=StateResponse)
async def submit_word_choice(request: WordChoiceRequest):
    """Choose a word in a picture-to-word round."""
    session = require_game()
    spec = session.state.round
    if spec is None or request.word not in spec.word_options:
        raise HTTPException(status_code=400, detail=f"Word '{request.word}' is not an option")
    session.submit_word_choice(request.word)
    logger.info(f"Word choice {request.word}: {session.state.last_outcome}")
    return state_response(session)


@app.post("/api/drawing", response_model=StateResponse)
async def submit_drawing(request: DrawingRequest):
    """Submit the drawing oracle's verdict for a drawing round."""
    session = require_game()
    session.submit_drawing({'pass': request.passed, 'score': request.score})
    return state_response(session)


@app.post("/api/scramble/move", response_model=StateResponse)
async def move_letter(request: MoveLetterRequest):
    """Move a letter between the bank and the word slots."""
    session = require_game()
    for area in (request.from_area, request.to_area):
        if area not in (BANK, SLOT):
            raise HTTPException(status_code=400, detail=f"Unknown area '{area}'")
    session.drag_letter((request.from_area, request.from_index), (request.to_area, request.to_index))
    return state_response(session)


@app.post("/api/recording/toggle")
async def toggle_recording():
    """Pause or resume writing answers to the history."""
    session = require_game()
    return {"recording_paused": session.toggle_pause_recording()}


@app.get("/api/stats", response_model=StatsResponse)
async def get_stats():
    """Per-letter performance and current selection weights."""
    session = require_game()
    return StatsResponse(
        rows=session.stats(),
        total_records=len(session.history_store.read_all()),
        recording_paused=session.recording_paused
    )


@app.delete("/api/history")
async def clear_history():
    """Delete all recorded answers."""
    session = require_game()
    session.clear_history()
    logger.info("History cleared via API")
    return {"success": True}
