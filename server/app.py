"""FastAPI server for the scripture memory game."""

import asyncio
import logging
import os
import uuid

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
from typing import Optional

logger = logging.getLogger(__name__)

from core.auth import AuthState, AuthError, sign_in, sign_out, sign_up
from core.badges import BADGES
from core.config import (
    DIFFICULTIES, GAME_MODES, POINTS_PER_CORRECT, SYNC_DEBOUNCE_SECONDS
)
from core.decks import DECKS, get_deck
from core.generators import generate_blanks, generate_matching_pairs, get_hint
from core.interfaces import RemoteStore
from core.models import LeaderboardEntry
from core.progress import ProgressEngine
from core.scoring import (
    calculate_score, calculate_xp, xp_for_current_level,
    get_timer_for_difficulty, get_max_hints, get_today
)
from core.sync import PersistenceSynchronizer

from server.file_storage import FileCache, FileRemoteStore
from server.postgres_storage import PostgresStore


# Pydantic models for API
class CreateSessionRequest(BaseModel):
    device_id: Optional[str] = None


class SignUpRequest(BaseModel):
    user_id: str
    password: str
    confirm_password: Optional[str] = None


class LoginRequest(BaseModel):
    user_id: str
    password: str


class ActionRequest(BaseModel):
    type: str
    score: Optional[int] = None
    correct: Optional[int] = None
    total: Optional[int] = None
    time_remaining: Optional[int] = None
    max_combo: Optional[int] = None
    mode: Optional[str] = None
    deck_id: Optional[str] = None
    card_id: Optional[str] = None
    difficulty: Optional[str] = None
    enabled: Optional[bool] = None
    size: Optional[str] = None


class RoundRequest(BaseModel):
    correct: int
    total: int
    time_remaining: int = 0
    total_time: Optional[int] = None
    max_combo: int = 0
    hints_used: int = 0
    mode: Optional[str] = None
    deck_id: Optional[str] = None
    name: Optional[str] = None


class StateResponse(BaseModel):
    session_id: str
    user_id: Optional[str]
    is_loaded: bool
    stats: dict
    settings: dict
    new_badges: list[str]
    level_progress: dict  # {current, needed}


class RoundResponse(BaseModel):
    score: int
    xp_earned: int
    new_badges: list[dict]
    state: StateResponse


class GameSession:
    """One client's engine, synchronizer, device cache and identity."""

    def __init__(self, session_id: str, device_id: str, remote: RemoteStore,
                 debounce_seconds: float = SYNC_DEBOUNCE_SECONDS):
        self.session_id = session_id
        self.device_id = device_id
        self.engine = ProgressEngine()
        self.auth = AuthState()
        self.cache = FileCache(device_id)
        self.sync = PersistenceSynchronizer(
            self.engine, self.cache, remote, self.auth, debounce_seconds=debounce_seconds
        )

    def to_state(self) -> StateResponse:
        current, needed = xp_for_current_level(self.engine.stats.total_xp)
        return StateResponse(
            session_id=self.session_id,
            user_id=self.auth.user_id,
            is_loaded=self.engine.is_loaded,
            stats=self.engine.stats.to_dict(),
            settings=self.engine.settings.to_dict(),
            new_badges=list(self.engine.new_badges),
            level_progress={'current': current, 'needed': needed}
        )


# Actions a client may send; loading state is left to the synchronizer
CLIENT_ACTIONS = frozenset([
    'COMPLETE_GAME', 'UPDATE_CARD_PROGRESS', 'MASTER_CARD', 'RESET_DECK_MASTERED',
    'RESET_PROGRESS', 'CLEAR_NEW_BADGES',
    'SET_DIFFICULTY', 'SET_DECK', 'SET_GAME_MODE', 'SET_SOUND', 'SET_FONT_SIZE',
])


# Global state (in production, use proper DI)
remote_store: RemoteStore = None
sync_debounce: float = SYNC_DEBOUNCE_SECONDS
sessions: dict[str, GameSession] = {}


app = FastAPI(title="Scripture Memory API", description="Scripture memorization game API")


def get_session(session_id: str) -> GameSession:
    """Look up an active session or fail with 404."""
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def require_deck(deck_id: str):
    deck = get_deck(deck_id)
    if deck is None:
        raise HTTPException(status_code=404, detail=f"Unknown deck: {deck_id}")
    return deck


def require_difficulty(difficulty: str) -> str:
    if difficulty not in DIFFICULTIES:
        raise HTTPException(status_code=400, detail=f"Unknown difficulty: {difficulty}")
    return difficulty


@app.on_event("startup")
async def startup():
    """Initialize the remote store on startup."""
    global remote_store, sync_debounce

    # Use PostgreSQL by default, set SCRIPTURE_STORAGE=file to use file storage
    storage_type = os.environ.get('SCRIPTURE_STORAGE', 'postgres')
    if storage_type == 'file':
        remote_store = FileRemoteStore()
        print("Using file storage")
    else:
        remote_store = PostgresStore()
        print("Using PostgreSQL storage")

    sync_debounce = float(os.environ.get('SCRIPTURE_SYNC_DEBOUNCE', SYNC_DEBOUNCE_SECONDS))


@app.on_event("shutdown")
async def shutdown():
    """Flush pending remote writes of every open session."""
    for session_id in list(sessions):
        session = sessions.pop(session_id)
        await session.sync.close()
    if hasattr(remote_store, 'close'):
        remote_store.close()


@app.get("/")
async def root():
    """Health check."""
    return {"status": "ok", "service": "scripture-memory"}


# Session lifecycle
@app.post("/api/sessions", response_model=StateResponse)
async def create_session(request: CreateSessionRequest):
    """Start a session. Guests get their device's cached progress."""
    session_id = str(uuid.uuid4())[:8]
    device_id = request.device_id or session_id
    session = GameSession(session_id, device_id, remote_store, sync_debounce)
    sessions[session_id] = session
    await session.sync.initialize()
    logger.info(f"Session {session_id} started on device {device_id}")
    return session.to_state()


@app.delete("/api/sessions/{session_id}")
async def end_session(session_id: str):
    """End a session, sending any pending remote write first."""
    session = get_session(session_id)
    await session.sync.close()
    del sessions[session_id]
    return {"success": True}


@app.get("/api/sessions/{session_id}/state", response_model=StateResponse)
async def get_state(session_id: str):
    return get_session(session_id).to_state()


@app.post("/api/sessions/{session_id}/signup")
async def signup(session_id: str, request: SignUpRequest):
    """Create an account and switch the session to it."""
    session = get_session(session_id)
    loop = asyncio.get_event_loop()
    try:
        # Credential checks hit the blocking store
        await loop.run_in_executor(
            None, sign_up, remote_store, session.auth, request.user_id, request.password,
            request.confirm_password
        )
    except AuthError as e:
        return {"success": False, "error": e.message}
    await session.sync.on_identity_change()
    logger.info(f"Session {session_id} signed up as {session.auth.user_id}")
    return {"success": True, "state": session.to_state()}


@app.post("/api/sessions/{session_id}/login")
async def login(session_id: str, request: LoginRequest):
    """Sign in and load the account's progress."""
    session = get_session(session_id)
    loop = asyncio.get_event_loop()
    try:
        await loop.run_in_executor(
            None, sign_in, remote_store, session.auth, request.user_id, request.password
        )
    except AuthError as e:
        return {"success": False, "error": e.message}
    await session.sync.on_identity_change()
    logger.info(f"Session {session_id} signed in as {session.auth.user_id}")
    return {"success": True, "state": session.to_state()}


@app.post("/api/sessions/{session_id}/logout")
async def logout(session_id: str):
    """Sign out. Local progress is reset to defaults."""
    session = get_session(session_id)
    sign_out(session.auth)
    await session.sync.on_identity_change()
    return {"success": True, "state": session.to_state()}


# Gameplay
@app.post("/api/sessions/{session_id}/actions", response_model=StateResponse)
async def dispatch_action(session_id: str, request: ActionRequest):
    """Apply one named progress or settings action."""
    session = get_session(session_id)
    if request.type not in CLIENT_ACTIONS:
        raise HTTPException(status_code=400, detail=f"Unsupported action: {request.type}")
    action = {k: v for k, v in request.model_dump().items() if v is not None}
    session.engine.dispatch(action)
    return session.to_state()


@app.post("/api/sessions/{session_id}/rounds", response_model=RoundResponse)
async def complete_round(session_id: str, request: RoundRequest):
    """Score a finished round from its raw results and record it."""
    session = get_session(session_id)
    settings = session.engine.settings
    mode = request.mode or settings.game_mode
    deck_id = request.deck_id or settings.selected_deck_id
    if mode not in GAME_MODES:
        raise HTTPException(status_code=400, detail=f"Unknown game mode: {mode}")
    require_deck(deck_id)

    if mode == 'flashcards':
        # Flashcards are untimed
        score = request.correct * POINTS_PER_CORRECT
        time_remaining = 0
        max_combo = 0
    else:
        total_time = request.total_time or get_timer_for_difficulty(settings.difficulty)
        score = calculate_score(request.correct, request.total, request.time_remaining,
                                total_time, request.max_combo, request.hints_used)
        time_remaining = request.time_remaining
        max_combo = request.max_combo

    new_badges = session.engine.complete_round(
        score, request.correct, request.total, time_remaining, max_combo, mode, deck_id
    )
    entry = LeaderboardEntry(
        name=request.name or session.auth.user_id or 'Guest',
        score=score,
        date=get_today(),
        mode=mode
    )
    await session.sync.record_leaderboard_entry(entry)
    logger.info(f"Session {session_id} finished {mode} on {deck_id}: score={score}")

    return RoundResponse(
        score=score,
        xp_earned=calculate_xp(score, max_combo, True),
        new_badges=[b.to_dict() for b in BADGES if b.id in new_badges],
        state=session.to_state()
    )


# Static content and generated rounds
@app.get("/api/decks")
async def list_decks(session_id: str = None):
    """List decks, with unlock and mastery info when a session is given."""
    session = sessions.get(session_id) if session_id else None
    result = []
    for deck in DECKS:
        data = deck.to_dict(include_cards=False)
        if session:
            stats = session.engine.stats
            progress = stats.deck_progress.get(deck.id)
            data['unlocked'] = deck.id in stats.unlocked_decks
            data['mastered_count'] = progress.count_status('mastered') if progress else 0
        result.append(data)
    return {"decks": result}


@app.get("/api/decks/{deck_id}")
async def get_deck_detail(deck_id: str):
    return require_deck(deck_id).to_dict()


@app.get("/api/decks/{deck_id}/blanks")
async def get_blanks(deck_id: str, difficulty: str = "beginner"):
    """Fill-in-the-blank prompts for every card in a deck."""
    deck = require_deck(deck_id)
    require_difficulty(difficulty)
    cards = []
    for card in deck.cards:
        display, blanks = generate_blanks(card.text, difficulty)
        cards.append({
            'card_id': card.id,
            'deck_id': deck.id,
            'reference': card.reference,
            'display': display,
            'blanks': blanks,
            'hints': [get_hint(word) for word in blanks]
        })
    return {
        'difficulty': difficulty,
        'total_time': get_timer_for_difficulty(difficulty),
        'max_hints': get_max_hints(difficulty),
        'cards': cards
    }


@app.get("/api/decks/{deck_id}/matching")
async def get_matching(deck_id: str, difficulty: str = "beginner"):
    """Shuffled reference/scripture columns for the matching game."""
    deck = require_deck(deck_id)
    require_difficulty(difficulty)
    references, scriptures = generate_matching_pairs(deck.cards)
    return {
        'difficulty': difficulty,
        'total_time': get_timer_for_difficulty(difficulty),
        'references': references,
        'scriptures': scriptures
    }


@app.get("/api/badges")
async def list_badges(session_id: str = None):
    session = sessions.get(session_id) if session_id else None
    unlocked = set(session.engine.stats.unlocked_badges) if session else set()
    return {"badges": [{**b.to_dict(), 'unlocked': b.id in unlocked} for b in BADGES]}


@app.get("/api/leaderboard")
async def get_leaderboard(session_id: str = None):
    """Device-local and global leaderboards."""
    local = []
    global_board = []
    if session_id:
        session = get_session(session_id)
        local = [e.to_dict() for e in session.sync.load_local_leaderboard()]
        global_board = [e.to_dict() for e in await session.sync.load_global_leaderboard()]
    elif remote_store is not None:
        try:
            global_board = remote_store.load_global_leaderboard()
        except Exception as e:
            logger.error(f"Error loading global leaderboard: {e}")
    return {"local": local, "global": global_board}


def create_app():
    """Factory function for creating the app (useful for testing)."""
    return app
