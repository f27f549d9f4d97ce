"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from readalong.services.text_matching import MatchPolicy

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent
TTS_CACHE_DIR = Path(os.getenv("READALONG_TTS_CACHE_DIR", str(BASE_DIR / "tts_cache")))


@dataclass(frozen=True)
class Settings:
    # --- Reading language (recognizer + playback) ---
    language: str = os.getenv("READALONG_LANGUAGE", "pt-BR")

    # --- Word matching ---
    short_word_max_length: int = int(os.getenv("READALONG_SHORT_WORD_MAX_LENGTH", "2"))
    max_length_difference: int = int(os.getenv("READALONG_MAX_LENGTH_DIFFERENCE", "2"))
    short_word_similarity: float = float(os.getenv("READALONG_SHORT_WORD_SIMILARITY", "0.6"))
    long_word_similarity: float = float(os.getenv("READALONG_LONG_WORD_SIMILARITY", "0.8"))

    # --- Reading session ---
    milestone_interval: int = int(os.getenv("READALONG_MILESTONE_INTERVAL", "5"))  # celebrate every N words
    # explicit recognizer confidences below this are dropped
    min_recognizer_confidence: float = float(os.getenv("READALONG_MIN_CONFIDENCE", "0.5"))
    max_sessions: int = int(os.getenv("READALONG_MAX_SESSIONS", "200"))

    # --- ElevenLabs TTS (speak word / speak passage) ---
    elevenlabs_api_key: str = os.getenv("ELEVENLABS_API_KEY", "")
    elevenlabs_voice_id: str = os.getenv("ELEVENLABS_VOICE_ID", "EXAVITQu4vr4xnSDxMaL")
    elevenlabs_tts_model: str = os.getenv("ELEVENLABS_TTS_MODEL", "eleven_multilingual_v2")
    tts_stability: float = 0.6
    tts_similarity_boost: float = 0.8
    tts_timeout_seconds: float = 30.0

    def match_policy(self) -> MatchPolicy:
        return MatchPolicy(
            short_word_max_length=self.short_word_max_length,
            max_length_difference=self.max_length_difference,
            short_word_similarity=self.short_word_similarity,
            long_word_similarity=self.long_word_similarity,
        )


settings = Settings()

# Ensure directories exist
TTS_CACHE_DIR.mkdir(parents=True, exist_ok=True)
