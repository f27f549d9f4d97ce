"""Pytest configuration and fixtures for the ReadAlong tests."""

import os
import tempfile

import pytest

# Keep TTS cache files out of the working tree; must run before readalong.config is imported.
os.environ.setdefault("READALONG_TTS_CACHE_DIR", tempfile.mkdtemp(prefix="readalong-tts-"))

from readalong.services.reading_session import ReadingSession  # noqa: E402


@pytest.fixture
def era_uma_vez() -> ReadingSession:
    """Three-word session: "era uma vez"."""
    return ReadingSession(["era", "uma", "vez"])


@pytest.fixture
def twelve_words() -> list[str]:
    """A 12-word target text."""
    return "Era uma vez um gato muito esperto que usava botas muito grandes".split()


@pytest.fixture(autouse=True)
def clear_sessions():
    """Empty the in-memory session registry around every test."""
    from readalong.routes.sessions import _open_sockets, _sessions

    _sessions.clear()
    _open_sockets.clear()
    yield
    _sessions.clear()
    _open_sockets.clear()
