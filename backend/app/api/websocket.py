from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import ValidationError
from starlette.websockets import WebSocketState
import json
import re
import logging
import traceback
from typing import Any, Dict, List

from ..core.chime import Chime
from ..core.config import Settings, get_settings
from ..core.routine import RoutineError
from ..core.state_machine import Intent, RoutineSession
from ..models.routine import RoutineView, Step
from ..services.routine_editor import RoutineEditor
from ..services.routine_parser import load_routine

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1")

UNKNOWN_COMMAND = "Sorry, I didn't understand that. Try 'start', 'pause' or 'next step'."

# whole words only, so "good morning" is not a "go"
TOGGLE_WORDS = re.compile(r"\btoggle\b")
PAUSE_WORDS = re.compile(r"\b(pause|stop|hold on|wait)\b")
NEXT_WORDS = re.compile(r"\b(next|skip|done|end)\b")
START_WORDS = re.compile(r"\b(start|resume|begin|go)\b")


def classify_intent(text: str) -> Intent:
    """Simple keyword-based intent classification for typed commands"""
    text = text.lower().strip()

    if TOGGLE_WORDS.search(text):
        return Intent.TOGGLE

    # checked before start so that "stop" never reads as a start
    if PAUSE_WORDS.search(text):
        return Intent.PAUSE

    if NEXT_WORDS.search(text):
        return Intent.NEXT

    if START_WORDS.search(text):
        return Intent.START

    return Intent.UNKNOWN


def draft_index(data: Dict[str, Any]) -> int:
    try:
        return int(data.get("index", -1))
    except (TypeError, ValueError):
        raise ValueError("index must be an integer") from None


def apply_draft(editor: RoutineEditor, session: RoutineSession, data: Dict[str, Any]) -> None:
    op = data.get("op", "show")
    if op == "add":
        editor.add_step()
    elif op == "remove":
        editor.remove_step(draft_index(data))
    elif op == "change":
        editor.change_step(draft_index(data), str(data.get("field", "")), data.get("value"))
    elif op == "revert":
        editor.load(session.sequence.steps)
    elif op != "show":
        raise ValueError(f"unknown draft operation {op!r}")


@router.get("/routine/default", response_model=List[Step])
async def default_routine(settings: Settings = Depends(get_settings)):
    return load_routine(settings)


@router.websocket("/ws")
async def websocket_endpoint(ws: WebSocket, settings: Settings = Depends(get_settings)):
    log.info("🔗 New WebSocket connection attempt")
    await ws.accept()
    log.info("✅ WebSocket connection accepted")

    chime = Chime(settings)

    async def send(payload: Dict[str, Any]) -> None:
        if ws.application_state == WebSocketState.CONNECTED:
            await ws.send_json(payload)
        else:
            log.warning(f"❌ WebSocket not connected, {payload.get('type')} message dropped")

    async def send_view(view: RoutineView) -> None:
        await send({"type": "view", "view": view.model_dump()})

    async def play_signal() -> None:
        log.info("🔔 Sending end-of-step signal")
        await send({"type": "signal", "chime": chime.as_base64()})

    async def navigate(url: str) -> None:
        log.info(f"🌐 Asking client to open {url}")
        await send({"type": "navigate", "url": url})

    try:
        session = RoutineSession(
            load_routine(settings),
            on_end_reached=play_signal,
            on_navigate=navigate,
            on_change=send_view,
            settings=settings,
        )
    except (RoutineError, OSError, ValueError) as e:
        log.error(f"❌ Could not load routine: {e}")
        await send({"type": "error", "message": f"Could not load routine: {e}"})
        await ws.close()
        return

    editor = RoutineEditor(session.sequence.steps)
    log.info(f"✅ Session ready: {len(session.sequence.steps)} steps")

    async def dispatch(raw: str) -> None:
        text = raw.strip()
        if not text.startswith("{"):
            intent = classify_intent(text)
            log.info(f"🎯 Classified intent: {intent} for text: '{text}'")
            if intent == Intent.UNKNOWN:
                await send({"type": "error", "message": UNKNOWN_COMMAND})
                return
            await session.handle(intent)
            return

        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("expected a JSON object")
        name = str(data.get("intent", "")).lower()

        if name == "draft":
            apply_draft(editor, session, data)
            await send({"type": "draft", "steps": editor.rows})
            return

        intent = Intent(name)
        log.info(f"🎯 Intent: {intent}")
        if intent == Intent.EDIT:
            if "steps" in data:
                if not isinstance(data["steps"], list):
                    raise ValueError("steps must be a list")
                editor.load(data["steps"])
            await session.handle(Intent.EDIT, editor.save())
        else:
            await session.handle(intent)

    try:
        await send_view(session.view())
        while True:
            raw = await ws.receive_text()
            try:
                await dispatch(raw)
            except (RoutineError, ValidationError, ValueError, TypeError) as e:
                log.warning(f"⚠️ Rejected message '{raw[:100]}': {e}")
                await send({"type": "error", "message": str(e)})
                await send_view(session.view())
    except WebSocketDisconnect:
        log.info("👋 Client disconnected")
    except Exception as e:
        log.error(f"💥 WebSocket error: {e}")
        log.error(f"📋 Full error traceback: {traceback.format_exc()}")
        await send({"type": "error", "message": f"Server error: {str(e)}"})
        await ws.close()
    finally:
        await session.close()
        log.info("🛑 Ticker stopped")
