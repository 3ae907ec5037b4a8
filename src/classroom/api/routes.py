"""HTTP and WebSocket API for classroom sessions."""

import json
import logging
from dataclasses import asdict
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, HTTPException, Query, WebSocket, WebSocketDisconnect

from classroom.core.manager import ClassroomManager, SessionNotFoundError
from classroom.core.simulator import LessonObserver, LessonSimulator
from classroom.core.state import Utterance
from classroom.logs.transcript_io import append_utterance, load_utterances

logger = logging.getLogger(__name__)

router = APIRouter()

_manager: Optional[ClassroomManager] = None


def configure_manager(manager: ClassroomManager) -> None:
    """Inject the session manager from the host app."""
    global _manager
    _manager = manager


def _require_manager() -> ClassroomManager:
    if _manager is None:
        raise HTTPException(status_code=500, detail="Classroom manager not configured")
    return _manager


class WebSocketObserver(LessonObserver):
    """Relays simulator events to one viewer and appends utterances to the transcript log."""

    def __init__(self, websocket: WebSocket, manager: ClassroomManager, session_id: str):
        self.websocket = websocket
        self.manager = manager
        self.session_id = session_id
        self.simulator: Optional[LessonSimulator] = None

    async def on_utterance(self, utterance: Utterance) -> None:
        try:
            append_utterance(utterance, self.manager.base_dir)
        except Exception:
            logger.exception("transcript write failed for session %s", self.session_id)
        await self.websocket.send_json({"type": "utterance", "utterance": asdict(utterance)})

    async def on_phase_change(self, phase: str) -> None:
        await self.websocket.send_json({"type": "phase_change", "phase": phase})

    async def on_time_update(self, elapsed_minutes: float) -> None:
        await self.websocket.send_json({"type": "time_update", "elapsed_minutes": elapsed_minutes})

    async def on_lesson_end(self) -> None:
        if self.manager.get_simulator(self.session_id) is self.simulator:
            self.manager.close_simulator(self.session_id)
        await self.websocket.send_json({"type": "lesson_end"})


async def handle_control(simulator: LessonSimulator, message: str) -> None:
    """Apply one control message; malformed input is logged and ignored."""
    try:
        data = json.loads(message)
        kind = data["type"]
        if kind == "start":
            simulator.start()
        elif kind == "playback":
            simulator.set_playback(bool(data["is_playing"]), float(data.get("speed", 1.0)))
        elif kind == "seek":
            await simulator.seek(float(data["minutes"]))
        else:
            logger.warning("ignoring unknown control message type %r", kind)
    except (ValueError, KeyError, TypeError) as exc:
        logger.warning("ignoring malformed control message %r: %s", message, exc)


@router.get("/api/sessions")
def list_sessions():
    mgr = _require_manager()
    return [asdict(s) for s in mgr.list_sessions()]


@router.post("/api/sessions")
async def create_session(payload: Dict[str, Any] = Body(default_factory=dict)):
    mgr = _require_manager()
    try:
        session = await mgr.create_session(payload)
    except (KeyError, ValueError, TypeError) as exc:
        raise HTTPException(status_code=400, detail=f"invalid session payload: {exc}")
    return asdict(session)


@router.get("/api/sessions/{session_id}")
def get_session(session_id: str):
    mgr = _require_manager()
    try:
        return asdict(mgr.get_session(session_id))
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")


@router.get("/api/sessions/{session_id}/utterances")
def get_utterances(session_id: str):
    mgr = _require_manager()
    return [asdict(u) for u in load_utterances(session_id, mgr.base_dir)]


@router.get("/api/sessions/{session_id}/state")
def get_state(session_id: str):
    mgr = _require_manager()
    simulator = mgr.get_simulator(session_id)
    if simulator is None:
        raise HTTPException(status_code=404, detail="No running lesson for session")
    return asdict(simulator.get_state())


@router.delete("/api/sessions/{session_id}")
def delete_session(session_id: str):
    mgr = _require_manager()
    try:
        mgr.delete_session(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")
    return {"success": True}


@router.websocket("/ws")
async def lesson_socket(websocket: WebSocket, session_id: Optional[str] = Query(default=None)):
    await websocket.accept()
    if _manager is None:
        await websocket.send_json({"type": "error", "message": "Classroom manager not configured"})
        await websocket.close()
        return
    if not session_id:
        await websocket.send_json({"type": "error", "message": "Session ID required"})
        await websocket.close()
        return

    observer = WebSocketObserver(websocket, _manager, session_id)
    try:
        simulator = _manager.open_simulator(session_id, observer)
    except SessionNotFoundError:
        await websocket.send_json({"type": "error", "message": "Session not found"})
        await websocket.close()
        return
    observer.simulator = simulator

    await websocket.send_json({"type": "connected", "session": asdict(simulator.session)})
    try:
        while True:
            message = await websocket.receive_text()
            await handle_control(simulator, message)
    except WebSocketDisconnect:
        logger.info("viewer disconnected from session %s", session_id)
    finally:
        if _manager.get_simulator(session_id) is simulator:
            _manager.close_simulator(session_id)
        else:
            simulator.stop()
