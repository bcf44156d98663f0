"""FastAPI server for tippen application."""

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import FileResponse
from pydantic import BaseModel

from core.game import TypingGame
from core.keyboard import keyboard_rows
from core.interfaces import LevelStore
from server.file_storage import FileLevelStore

logger = logging.getLogger(__name__)


# Pydantic models for API
class UserRequest(BaseModel):
    user_id: str = "default"


class KeysRequest(BaseModel):
    keys: list[str]
    user_id: str = "default"


class GameStateResponse(BaseModel):
    level: int
    level_name: str
    level_count: int
    progress: int
    correct_count: int
    error_count: int
    current_word: str
    current_icons: list[str]
    current_index: int
    display: str
    case_sensitive: bool
    next_key: Optional[dict]
    is_level_intro_playing: bool
    game_started: bool
    intro: Optional[dict] = None  # {name, description} when an intro should be played
    success_message: Optional[dict] = None  # {text, icon} on level up


class KeysResponse(BaseModel):
    results: list[dict]
    state: GameStateResponse
    level_change: Optional[dict]  # {level, success_message, intro}


# Global state (in production, use proper DI)
store: LevelStore = None
levels: list = []
success_messages: list = []
game_sessions: dict[str, TypingGame] = {}


def init_app(level_store: LevelStore) -> None:
    """Load levels and success messages from a store and reset all sessions."""
    global store, levels, success_messages
    store = level_store
    levels = store.load_levels()
    success_messages = store.load_success_messages()
    game_sessions.clear()


def get_game(user_id: str = "default") -> TypingGame:
    """Get or create the game session for a user."""
    if user_id not in game_sessions:
        game_sessions[user_id] = TypingGame(levels, success_messages)
        logger.info(f"New game session for {user_id}")
    return game_sessions[user_id]


def state_response(game: TypingGame, intro: dict = None, success_message: dict = None) -> GameStateResponse:
    return GameStateResponse(intro=intro, success_message=success_message, **game.status())


def require_started(game: TypingGame) -> None:
    if not game.state.game_started:
        raise HTTPException(status_code=409, detail="Game not started")


app = FastAPI(title="Tippen API", description="German typing tutor API")


@app.on_event("startup")
async def startup():
    """Initialize storage and load game data on startup."""
    if store is None:
        init_app(FileLevelStore())
    print(f"Loaded {len(levels)} levels, {len(success_messages)} success messages")


@app.get("/")
async def root():
    """Health check."""
    return {"service": "Tippen API", "levels": len(levels)}


@app.get("/api/levels")
async def list_levels():
    """List all levels."""
    return {"levels": [level.summary(i) for i, level in enumerate(levels)]}


@app.get("/api/keyboard")
async def get_keyboard(user_id: str = "default", level: Optional[int] = None):
    """Keyboard rows annotated with finger colours and the keys a level allows."""
    if level is None:
        level = get_game(user_id).state.level
    if not 0 <= level < len(levels):
        raise HTTPException(status_code=404, detail=f"Level {level} not found")
    return {"level": level, "rows": keyboard_rows(levels[level].enabled_keys)}


@app.post("/api/start", response_model=GameStateResponse)
async def start_game(request: UserRequest):
    """Start the game. The response carries the intro of the first level."""
    game = get_game(request.user_id)
    intro = game.start()
    return state_response(game, intro=intro)


@app.post("/api/intro/complete", response_model=GameStateResponse)
async def complete_intro(request: UserRequest):
    """Called by the client when it finished playing the level intro."""
    game = get_game(request.user_id)
    require_started(game)
    game.finish_level_intro()
    return state_response(game)


@app.post("/api/keys", response_model=KeysResponse)
async def press_keys(request: KeysRequest):
    """Feed keystrokes in order. Keys after a level up are ignored until the intro completes."""
    game = get_game(request.user_id)
    require_started(game)
    results = []
    level_change = None
    for key in request.keys:
        result = game.handle_key(key)
        if 'level_change' in result:
            level_change = result.pop('level_change')
        results.append(result)
    return KeysResponse(results=results, state=state_response(game), level_change=level_change)


@app.post("/api/next", response_model=GameStateResponse)
async def next_word(request: UserRequest):
    """Pick the next word after the previous one was completed."""
    game = get_game(request.user_id)
    require_started(game)
    game.next_word()
    return state_response(game)


@app.post("/api/level/up", response_model=GameStateResponse)
async def level_up(request: UserRequest):
    game = get_game(request.user_id)
    require_started(game)
    change = game.level_up(show_success_message=False)
    return state_response(game, intro=change['intro'])


@app.post("/api/level/down", response_model=GameStateResponse)
async def level_down(request: UserRequest):
    game = get_game(request.user_id)
    require_started(game)
    change = game.level_down()
    return state_response(game, intro=change['intro'])


@app.post("/api/level/{level}", response_model=GameStateResponse)
async def set_level(level: int, request: UserRequest):
    game = get_game(request.user_id)
    require_started(game)
    try:
        change = game.set_level(level)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return state_response(game, intro=change['intro'])


@app.get("/api/status", response_model=GameStateResponse)
async def get_status(user_id: str = "default"):
    return state_response(get_game(user_id))


@app.get("/audio/{filename}")
async def get_audio(filename: str):
    """Serve a pre-generated pronunciation file."""
    path = store.audio_path(filename)
    if path is None:
        raise HTTPException(status_code=404, detail=f"Audio file {filename} not found")
    return FileResponse(path, media_type="audio/mpeg")


@app.get("/avatars/{name}/talk-animation.json")
async def get_avatar_config(name: str):
    """Serve the raw sprite animation config of an avatar."""
    try:
        return store.load_avatar_config(name)
    except (FileNotFoundError, ValueError) as e:
        raise HTTPException(status_code=404, detail=str(e))
