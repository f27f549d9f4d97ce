"""Intake of speech-recognition results from the capture client.

The browser (or any other capture client) owns the microphone and the
recognizer; it forwards every result here.  Only finalised results are
aligned against the story.  Interim results are echoed back for live
display and never touch the session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from readalong.config import settings

logger = logging.getLogger(__name__)

INTERIM = "interim"
REJECTED = "rejected"
ACCEPTED = "accepted"


@dataclass(frozen=True)
class RecognizerResult:
    transcript: str
    is_final: bool = True
    confidence: Optional[float] = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "RecognizerResult":
        """Build from a JSON body. Raises ValueError on a malformed payload."""
        transcript = payload.get("transcript", "")
        if not isinstance(transcript, str):
            raise ValueError("transcript must be a string")
        confidence = payload.get("confidence")
        if confidence is not None:
            try:
                confidence = float(confidence)
            except (TypeError, ValueError):
                raise ValueError("confidence must be a number") from None
        return cls(
            transcript=transcript,
            is_final=bool(payload.get("is_final", True)),
            confidence=confidence,
        )


def classify_result(
    result: RecognizerResult,
    min_confidence: float | None = None,
) -> str:
    """
    Decide what to do with a recognizer result.

    Returns INTERIM (display only), REJECTED (final but explicitly
    low-confidence) or ACCEPTED (feed to the session).  A missing
    confidence is trusted: several browsers never report one.
    """
    if not result.is_final:
        return INTERIM

    threshold = settings.min_recognizer_confidence if min_confidence is None else min_confidence
    if result.confidence is not None and result.confidence < threshold:
        logger.info(
            "Rejected low-confidence result %r (%.0f%% < %.0f%%)",
            result.transcript[:80],
            result.confidence * 100,
            threshold * 100,
        )
        return REJECTED

    return ACCEPTED
