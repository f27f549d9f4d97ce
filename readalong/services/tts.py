"""Text-to-speech via ElevenLabs TTS API with caching.

Used for "speak this word" (a clicked word or the one under the cursor)
and "speak the whole passage".  Playback never feeds back into the
reading session.
"""

from __future__ import annotations

import hashlib
import logging
import os
import tempfile
from pathlib import Path

import httpx

from readalong.config import TTS_CACHE_DIR, settings

logger = logging.getLogger(__name__)

ELEVENLABS_TTS_URL = "https://api.elevenlabs.io/v1/text-to-speech"


def _cache_key(voice_id: str, model_id: str, text: str) -> str:
    return hashlib.sha256(f"{voice_id}:{model_id}:{text}".encode()).hexdigest()


def get_cached_path(voice_id: str, text: str) -> Path | None:
    """Return path to cached audio file if it exists."""
    key = _cache_key(voice_id, settings.elevenlabs_tts_model, text)
    path = TTS_CACHE_DIR / f"{key}.mp3"
    return path if path.exists() else None


def _write_atomic(path: Path, data: bytes) -> None:
    """Write via a temp file in the same dir so readers never see a partial mp3."""
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}-", suffix=".part")
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


async def synthesize_speech(
    text: str,
    voice_id: str | None = None,
) -> Path:
    """
    Generate TTS audio for the given text.  Returns the path to the mp3 file.
    Uses cache if available.
    """
    voice_id = voice_id or settings.elevenlabs_voice_id
    cached = get_cached_path(voice_id, text)
    if cached:
        return cached

    if not settings.elevenlabs_api_key:
        raise RuntimeError("ElevenLabs API key not configured")

    url = f"{ELEVENLABS_TTS_URL}/{voice_id}"
    headers = {
        "xi-api-key": settings.elevenlabs_api_key,
        "Content-Type": "application/json",
        "Accept": "audio/mpeg",
    }
    payload = {
        "text": text,
        "model_id": settings.elevenlabs_tts_model,
        "language_code": settings.language.split("-")[0],
        "voice_settings": {
            "stability": settings.tts_stability,
            "similarity_boost": settings.tts_similarity_boost,
        },
    }

    async with httpx.AsyncClient(timeout=settings.tts_timeout_seconds) as client:
        response = await client.post(url, headers=headers, json=payload)
        response.raise_for_status()

    key = _cache_key(voice_id, settings.elevenlabs_tts_model, text)
    out_path = TTS_CACHE_DIR / f"{key}.mp3"
    _write_atomic(out_path, response.content)
    logger.info("Cached TTS audio %s (%d bytes, %d chars)", out_path.name, len(response.content), len(text))

    return out_path


def resolve_cached_file(filename: str) -> Path | None:
    """Map a client-supplied cache filename to a file inside the cache dir."""
    # Sanitize filename to prevent directory traversal
    safe_name = Path(filename).name
    if not safe_name.endswith(".mp3"):
        return None
    path = TTS_CACHE_DIR / safe_name
    return path if path.is_file() else None


def build_word_text(word: str) -> str:
    """Spoken form of a single story word, without its punctuation."""
    return word.strip(".,;:!?\"'()[]«»“”") or word
