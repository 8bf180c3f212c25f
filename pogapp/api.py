"""
Local HTTP host for the pog match engine.
Thin wrappers around MatchEngine commands: in-memory sessions, one engine each,
AI throws deferred by an asyncio scheduler and pushed to WebSocket subscribers.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncGenerator

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from pogapp.ai_turns import AsyncAITurnScheduler
from pogapp.config import ai_delay_seconds, load_match_config
from pogapp.engine import (
    GameSnapshot,
    MatchEngine,
    SeededRNG,
    action_enabled,
    action_label,
    next_action,
    press_action,
)

logger = logging.getLogger(__name__)


# ---------- Sessions ----------
# Concurrency: sessions are process-local; each session's lock serialises player commands and AI turns.


@dataclass
class Session:
    id: str
    engine: MatchEngine
    scheduler: AsyncAITurnScheduler
    lock: asyncio.Lock
    seed: int | None = None
    connections: list[WebSocket] = field(default_factory=list)


_sessions: dict[str, Session] = {}


def _render(snapshot: GameSnapshot) -> dict[str, Any]:
    """Snapshot plus the single action button state."""
    action = next_action(snapshot)
    return {
        **snapshot.to_dict(),
        "action": action.value,
        "action_label": action_label(action),
        "action_enabled": action_enabled(snapshot),
    }


async def _broadcast(session: Session, snapshot: GameSnapshot) -> None:
    payload = {"type": "snapshot", **_render(snapshot)}
    for ws in session.connections[:]:
        try:
            await ws.send_json(payload)
        except (WebSocketDisconnect, RuntimeError, OSError) as exc:
            logger.debug("dropping subscriber of session %s: %s", session.id, exc)
            if ws in session.connections:
                session.connections.remove(ws)


def _get_session(session_id: str) -> Session:
    session = _sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def _response(session: Session, snapshot: GameSnapshot) -> dict[str, Any]:
    return {"session_id": session.id, "snapshot": _render(snapshot)}


# ---------- Lifespan ----------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    yield
    for session in _sessions.values():
        session.scheduler.cancel()
    _sessions.clear()


# ---------- FastAPI app ----------
app = FastAPI(
    title="Pog Match API",
    description="Local host for the pog flipping game engine",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------- Request models ----------


class CreateSessionRequest(BaseModel):
    seed: int | None = Field(None, description="RNG seed for a reproducible match")
    initial_tokens_per_player: int | None = Field(None, ge=0)
    tokens_per_round_stake: int | None = Field(None, ge=1)
    rounds_to_win_match: int | None = Field(None, ge=1)
    player_flip_probability: float | None = Field(None, ge=0.0, le=1.0)
    ai_flip_probability: float | None = Field(None, ge=0.0, le=1.0)
    ai_delay_seconds: float | None = Field(None, ge=0.0, description="AI thinking pause; default from POGS_AI_DELAY_SECONDS")


# ---------- Endpoints ----------


@app.post("/sessions")
async def create_session(req: CreateSessionRequest | None = None) -> dict[str, Any]:
    """Create a session and start its first match."""
    req = req or CreateSessionRequest()
    config = load_match_config(
        initial_tokens_per_player=req.initial_tokens_per_player,
        tokens_per_round_stake=req.tokens_per_round_stake,
        rounds_to_win_match=req.rounds_to_win_match,
        player_flip_probability=req.player_flip_probability,
        ai_flip_probability=req.ai_flip_probability,
    )
    delay = req.ai_delay_seconds if req.ai_delay_seconds is not None else ai_delay_seconds()
    session_id = str(uuid.uuid4())
    lock = asyncio.Lock()
    scheduler = AsyncAITurnScheduler(delay_seconds=delay, lock=lock)
    engine = MatchEngine(config, SeededRNG(req.seed), schedule_ai_turn=scheduler.schedule)
    session = Session(id=session_id, engine=engine, scheduler=scheduler, lock=lock, seed=req.seed)

    async def on_ai_result(snapshot: GameSnapshot) -> None:
        await _broadcast(session, snapshot)

    scheduler.on_result = on_ai_result
    _sessions[session_id] = session
    async with lock:
        snapshot = engine.start_match()
    logger.info("session %s created (seed=%s)", session_id, req.seed)
    return {**_response(session, snapshot), "config": config.to_dict(), "ai_delay_seconds": delay}


@app.get("/sessions/{session_id}")
async def get_session(session_id: str) -> dict[str, Any]:
    session = _get_session(session_id)
    return _response(session, session.engine.current_snapshot())


@app.delete("/sessions/{session_id}")
async def delete_session(session_id: str) -> dict[str, Any]:
    """Drop a session; any pending AI turn is cancelled."""
    session = _get_session(session_id)
    session.scheduler.cancel()
    _sessions.pop(session_id, None)
    return {"session_id": session_id, "deleted": True}


@app.post("/sessions/{session_id}/match")
async def start_match(session_id: str) -> dict[str, Any]:
    session = _get_session(session_id)
    async with session.lock:
        snapshot = session.engine.start_match()
    await _broadcast(session, snapshot)
    return _response(session, snapshot)


@app.post("/sessions/{session_id}/round")
async def start_round(session_id: str) -> dict[str, Any]:
    session = _get_session(session_id)
    async with session.lock:
        snapshot = session.engine.start_round()
    await _broadcast(session, snapshot)
    return _response(session, snapshot)


@app.post("/sessions/{session_id}/throw")
async def player_throw(session_id: str) -> dict[str, Any]:
    """Player's slammer throw. 409 while the AI is due to throw."""
    session = _get_session(session_id)
    async with session.lock:
        if session.engine.current_snapshot().awaiting_ai:
            raise HTTPException(status_code=409, detail="Wait for the AI to throw")
        snapshot = session.engine.player_throw()
    await _broadcast(session, snapshot)
    return _response(session, snapshot)


@app.post("/sessions/{session_id}/action")
async def press_action_button(session_id: str) -> dict[str, Any]:
    """Single-button UI: start match, start round, or throw, depending on phase."""
    session = _get_session(session_id)
    async with session.lock:
        if not action_enabled(session.engine.current_snapshot()):
            raise HTTPException(status_code=409, detail="Action disabled while the AI is thinking")
        snapshot = press_action(session.engine)
    await _broadcast(session, snapshot)
    return _response(session, snapshot)


@app.websocket("/ws/sessions/{session_id}")
async def websocket_session(websocket: WebSocket, session_id: str):
    """
    Subscribe to snapshots for a session. Server pushes { type: "snapshot", ... } after
    every command, including deferred AI throws. Late join: current snapshot is sent on connect.
    """
    await websocket.accept()
    session = _sessions.get(session_id)
    if session is None:
        await websocket.close(code=4404)
        return
    session.connections.append(websocket)
    try:
        await websocket.send_json({"type": "snapshot", **_render(session.engine.current_snapshot())})
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        if websocket in session.connections:
            session.connections.remove(websocket)
