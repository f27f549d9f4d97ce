"""Reading session APIs including the WebSocket recognizer feed."""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any

from fastapi import APIRouter, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import FileResponse, JSONResponse

from readalong.config import settings
from readalong.services.reading_session import ReadingSession
from readalong.services.recognizer import (
    INTERIM,
    REJECTED,
    RecognizerResult,
    classify_result,
)
from readalong.services.text_matching import normalise
from readalong.services.tts import (
    build_word_text,
    resolve_cached_file,
    synthesize_speech,
)
from readalong.stories import get_story

logger = logging.getLogger(__name__)

router = APIRouter()

# ---------------------------------------------------------------------------
# In-memory session registry (one entry per open reading screen)
# ---------------------------------------------------------------------------

_sessions: dict[str, ReadingSession] = {}
# session_id -> number of WebSockets currently attached
_open_sockets: dict[str, int] = {}


def reading_words(text: str) -> list[str]:
    """
    Split story text into the words a reader is expected to say.

    A token with nothing left after normalisation ("-", "...") can
    never be matched, so it is glued onto the previous word, or onto the
    next one when the text starts with it.
    """
    words: list[str] = []
    leading: list[str] = []
    for token in text.split():
        if normalise(token):
            words.append(" ".join(leading + [token]))
            leading = []
        elif words:
            words[-1] = f"{words[-1]} {token}"
        else:
            leading.append(token)
    return words


def _evict_one() -> None:
    # Oldest session without a live socket; the oldest overall if every one has one.
    evicted_id = next(
        (sid for sid in _sessions if not _open_sockets.get(sid)),
        next(iter(_sessions)),
    )
    _sessions.pop(evicted_id)
    logger.info("Session registry full, evicted session %s", evicted_id)


def _new_session(words: list[str]) -> tuple[str, ReadingSession]:
    while _sessions and len(_sessions) >= settings.max_sessions:
        _evict_one()

    session_id = uuid.uuid4().hex[:12]
    session = ReadingSession(
        words,
        policy=settings.match_policy(),
        milestone_interval=settings.milestone_interval,
    )
    _sessions[session_id] = session
    return session_id, session


def _session_payload(session_id: str, session: ReadingSession) -> dict[str, Any]:
    return {
        "session_id": session_id,
        "words": list(session.words),
        "snapshot": session.snapshot().to_dict(),
    }


def _not_found() -> JSONResponse:
    return JSONResponse({"error": "Session not found"}, status_code=404)


async def _read_json(request: Request) -> dict[str, Any] | None:
    """Request body as a dict; {} when empty, None when not a JSON object."""
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        body = json.loads(raw)
    except json.JSONDecodeError:
        return None
    return body if isinstance(body, dict) else None


def process_result(session: ReadingSession, result: RecognizerResult) -> dict[str, Any]:
    """
    Route one recognizer result through the session.

    Returns one of:
      {"type": "interim", "transcript": str}
      {"type": "rejected", "reason": "low_confidence", "transcript": str, "snapshot": {...}}
      {"type": "alignment", "events": [...], "milestones": [int],
       "snapshot": {...}, "completed": bool}
    """
    action = classify_result(result)
    if action == INTERIM:
        return {"type": "interim", "transcript": result.transcript}
    if action == REJECTED:
        return {
            "type": "rejected",
            "reason": "low_confidence",
            "transcript": result.transcript,
            "snapshot": session.snapshot().to_dict(),
        }

    outcome = session.submit(result.transcript)
    return {
        "type": "alignment",
        "events": outcome.events,
        "milestones": outcome.milestones,
        "snapshot": outcome.snapshot.to_dict(),
        # True only on the call that read the final word
        "completed": outcome.snapshot.is_complete and outcome.advanced > 0,
    }


# ---- Create / inspect / reset / destroy ----


@router.post("/sessions")
async def create_session(request: Request):
    """Start a reading session. Body: {story_id: str} or {text: str}."""
    body = await _read_json(request)
    if body is None:
        return JSONResponse({"error": "Body must be a JSON object"}, status_code=400)

    story_id = body.get("story_id")
    if story_id is not None:
        story = get_story(story_id)
        if not story:
            return JSONResponse({"error": "Story not found"}, status_code=404)
        text = story["text"]
    else:
        text = body.get("text")
        if not isinstance(text, str) or not text.split():
            return JSONResponse(
                {"error": "Provide a story_id or a non-empty text"}, status_code=400
            )

    words = reading_words(text)
    if not words:
        return JSONResponse({"error": "Text has no readable words"}, status_code=400)

    session_id, session = _new_session(words)
    logger.info(
        "Session started: id=%s, story=%s, total_words=%d",
        session_id, story_id, len(session.words),
    )
    return JSONResponse(_session_payload(session_id, session), status_code=201)


@router.get("/sessions/{session_id}")
async def get_session(session_id: str):
    session = _sessions.get(session_id)
    if not session:
        return _not_found()
    return JSONResponse(_session_payload(session_id, session))


@router.post("/sessions/{session_id}/reset")
async def reset_session(session_id: str):
    """Restart the reading from the first word."""
    session = _sessions.get(session_id)
    if not session:
        return _not_found()
    snapshot = session.reset()
    logger.info("Session reset: id=%s", session_id)
    return JSONResponse({"snapshot": snapshot.to_dict()})


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str):
    session = _sessions.pop(session_id, None)
    if not session:
        return _not_found()
    logger.info(
        "Session closed: id=%s, cursor=%d/%d",
        session_id, session.cursor, len(session.words),
    )
    return JSONResponse({"deleted": session_id})


# ---- Recognizer results over plain HTTP ----


@router.post("/sessions/{session_id}/results")
async def submit_result(session_id: str, request: Request):
    """Feed one recognizer result. Body: {transcript, is_final, confidence}."""
    session = _sessions.get(session_id)
    if not session:
        return _not_found()

    body = await _read_json(request)
    if body is None:
        return JSONResponse({"error": "Body must be a JSON object"}, status_code=400)
    try:
        result = RecognizerResult.from_payload(body)
    except ValueError as e:
        return JSONResponse({"error": str(e)}, status_code=400)

    return JSONResponse(process_result(session, result))


# ---- Playback (speak word / speak passage) ----


@router.post("/sessions/{session_id}/speak/word")
async def speak_word(session_id: str, request: Request):
    """Audio for one word. Body (optional): {index: int}; defaults to the current word."""
    session = _sessions.get(session_id)
    if not session:
        return _not_found()

    body = await _read_json(request)
    if body is None:
        return JSONResponse({"error": "Body must be a JSON object"}, status_code=400)

    index = body.get("index")
    if index is None:
        word = session.current_word()
        if word is None:
            return JSONResponse({"error": "Reading already complete"}, status_code=409)
    else:
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < len(session.words):
            return JSONResponse({"error": "Word index out of range"}, status_code=400)
        word = session.words[index]

    try:
        audio_path = await synthesize_speech(build_word_text(word))
    except Exception as e:
        logger.exception("Word TTS failed")
        return JSONResponse({"error": str(e)}, status_code=500)

    return JSONResponse({
        "word": word,
        "audio_url": f"/api/tts-cache/{audio_path.name}",
    })


@router.post("/sessions/{session_id}/speak/passage")
async def speak_passage(session_id: str):
    """Audio for the full story text."""
    session = _sessions.get(session_id)
    if not session:
        return _not_found()

    try:
        audio_path = await synthesize_speech(" ".join(session.words))
    except Exception as e:
        logger.exception("Passage TTS failed")
        return JSONResponse({"error": str(e)}, status_code=500)

    return JSONResponse({"audio_url": f"/api/tts-cache/{audio_path.name}"})


@router.get("/tts-cache/{filename}")
async def serve_tts_cache(filename: str):
    """Serve a cached TTS audio file."""
    audio_path = resolve_cached_file(filename)
    if audio_path is None:
        return JSONResponse({"error": "Audio not found"}, status_code=404)
    return FileResponse(str(audio_path), media_type="audio/mpeg")


# ---- WebSocket for a live reading session ----


@router.websocket("/ws/sessions/{session_id}")
async def reading_session_ws(websocket: WebSocket, session_id: str):
    """
    Streaming recognizer feed for one reading session.

    Client sends JSON text frames:
      {"type": "start"}    new listening attempt (resets progress)
      {"type": "restart"}  explicit restart (resets progress)
      {"type": "result", "transcript": str, "is_final": bool, "confidence": float|null}
      {"type": "stop"}

    Server sends:
      {"type": "state", "snapshot": {...}}
      {"type": "interim" | "rejected" | "alignment", ...}  (see process_result)
      {"type": "milestone", "words_read": int}
      {"type": "complete", "message": str}
      {"type": "error", "message": str}
    """
    await websocket.accept()

    session = _sessions.get(session_id)
    if not session:
        await websocket.send_json({"type": "error", "message": "Session not found"})
        await websocket.close()
        return

    logger.info("WS connected: session=%s, total_words=%d", session_id, len(session.words))
    _open_sockets[session_id] = _open_sockets.get(session_id, 0) + 1

    try:
        await websocket.send_json({"type": "state", "snapshot": session.snapshot().to_dict()})
        while True:
            raw = await websocket.receive_text()

            # Deleted or evicted while this socket was open
            if _sessions.get(session_id) is not session:
                logger.info("WS closing: session=%s no longer registered", session_id)
                await websocket.send_json({"type": "error", "message": "Session closed"})
                break

            try:
                msg = json.loads(raw)
            except json.JSONDecodeError:
                await websocket.send_json({"type": "error", "message": "Invalid JSON"})
                continue
            if not isinstance(msg, dict):
                await websocket.send_json({"type": "error", "message": "Expected a JSON object"})
                continue

            msg_type = msg.get("type")

            if msg_type == "stop":
                logger.info("WS stop: session=%s, cursor=%d", session_id, session.cursor)
                break

            if msg_type in ("start", "restart"):
                snapshot = session.reset()
                await websocket.send_json({"type": "state", "snapshot": snapshot.to_dict()})
                continue

            if msg_type != "result":
                await websocket.send_json({
                    "type": "error",
                    "message": f"Unknown message type: {msg_type!r}",
                })
                continue

            try:
                result = RecognizerResult.from_payload(msg)
            except ValueError as e:
                await websocket.send_json({"type": "error", "message": str(e)})
                continue

            reply = process_result(session, result)
            await websocket.send_json(reply)

            if reply["type"] != "alignment":
                continue
            for words_read in reply["milestones"]:
                await websocket.send_json({"type": "milestone", "words_read": words_read})
            if reply["completed"]:
                logger.info("Session complete: id=%s", session_id)
                await websocket.send_json({
                    "type": "complete",
                    "message": "Great job! You finished the story!",
                })

    except WebSocketDisconnect:
        logger.info("WS disconnected: session=%s", session_id)
        return
    finally:
        remaining = _open_sockets.get(session_id, 1) - 1
        if remaining > 0:
            _open_sockets[session_id] = remaining
        else:
            _open_sockets.pop(session_id, None)

    await websocket.close()
