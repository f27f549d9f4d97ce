"""Reading session: the cursor over a story and its per-word status.

The session is fed finalised recognizer hypotheses one at a time.  Each
hypothesis is split into tokens which are compared, in order, against the
word under the cursor.  A match marks the word correct and moves on; the
first mismatch marks the word incorrect and ends the hypothesis, so a
single garbled result never stamps a run of errors across the story.

Starting to listen again always begins a fresh attempt (``reset``).

The session is not re-entrant.  Callers must let one ``submit`` finish
before starting the next; inside an asyncio service that holds trivially
because neither method awaits.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Optional

from readalong.services.text_matching import (
    DEFAULT_POLICY,
    MatchPolicy,
    extract_words,
    words_match,
)

logger = logging.getLogger(__name__)


class WordStatus(str, Enum):
    PENDING = "pending"
    CURRENT = "current"
    CORRECT = "correct"
    INCORRECT = "incorrect"


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a session after a mutation."""

    cursor: int
    statuses: tuple[WordStatus, ...]
    progress: float
    is_complete: bool
    current_word: Optional[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "cursor": self.cursor,
            "statuses": [s.value for s in self.statuses],
            "progress": self.progress,
            "is_complete": self.is_complete,
            "current_word": self.current_word,
        }


@dataclass(frozen=True)
class SubmitResult:
    """
    Outcome of one ``submit`` call.

    events:     [{"word_index": int, "expected": str, "recognized": str,
                  "match": "correct"|"incorrect"}, ...]
    milestones: cursor values (multiples of the milestone interval) reached
                during this call; advisory, used for celebrations only.
    """

    snapshot: SessionSnapshot
    events: list[dict] = field(default_factory=list)
    milestones: list[int] = field(default_factory=list)

    @property
    def advanced(self) -> int:
        return sum(1 for e in self.events if e["match"] == "correct")


class ReadingSession:
    def __init__(
        self,
        words: Iterable[str],
        policy: MatchPolicy = DEFAULT_POLICY,
        milestone_interval: int = 5,
    ) -> None:
        self._words: tuple[str, ...] = tuple(words)
        self._policy = policy
        self._milestone_interval = milestone_interval
        self._cursor = 0
        self._statuses: list[WordStatus] = []
        self.reset()

    @classmethod
    def from_text(cls, text: str, **kwargs: Any) -> "ReadingSession":
        """Build a session from raw story text (whitespace-split)."""
        return cls(text.split(), **kwargs)

    # ---- Read-only accessors ----

    @property
    def words(self) -> tuple[str, ...]:
        return self._words

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def statuses(self) -> tuple[WordStatus, ...]:
        return tuple(self._statuses)

    @property
    def is_complete(self) -> bool:
        return self._cursor >= len(self._words)

    def current_word(self) -> Optional[str]:
        """The word the reader should say next, or None once finished."""
        if self.is_complete:
            return None
        return self._words[self._cursor]

    def progress_fraction(self) -> float:
        # An empty text is complete from the start.
        if not self._words:
            return 1.0
        return self._cursor / len(self._words)

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            cursor=self._cursor,
            statuses=tuple(self._statuses),
            progress=self.progress_fraction(),
            is_complete=self.is_complete,
            current_word=self.current_word(),
        )

    # ---- Mutations ----

    def reset(self) -> SessionSnapshot:
        """Back to the first word; every other word pending."""
        self._cursor = 0
        self._statuses = [
            WordStatus.CURRENT if i == 0 else WordStatus.PENDING
            for i in range(len(self._words))
        ]
        return self.snapshot()

    def submit(self, hypothesis: str) -> SubmitResult:
        """Align one finalised recognizer hypothesis against the cursor."""
        if self.is_complete:
            return SubmitResult(snapshot=self.snapshot())

        tokens = extract_words(hypothesis)
        if not tokens:
            return SubmitResult(snapshot=self.snapshot())

        # Give the reader a fresh chance on a word marked wrong last time.
        if self._statuses[self._cursor] is WordStatus.INCORRECT:
            self._statuses[self._cursor] = WordStatus.CURRENT

        events: list[dict] = []
        milestones: list[int] = []
        total = len(self._words)
        idx = self._cursor

        for token in tokens:
            if idx >= total:
                break
            expected = self._words[idx]

            if not words_match(token, expected, self._policy):
                self._statuses[idx] = WordStatus.INCORRECT
                events.append({
                    "word_index": idx,
                    "expected": expected,
                    "recognized": token,
                    "match": "incorrect",
                })
                break

            self._statuses[idx] = WordStatus.CORRECT
            if idx + 1 < total:
                self._statuses[idx + 1] = WordStatus.CURRENT
            events.append({
                "word_index": idx,
                "expected": expected,
                "recognized": token,
                "match": "correct",
            })
            idx += 1
            if self._milestone_interval > 0 and idx % self._milestone_interval == 0:
                milestones.append(idx)

        logger.debug(
            "Submit: %d tokens → %d events, idx %d→%d of %d",
            len(tokens),
            len(events),
            self._cursor,
            idx,
            total,
        )
        self._cursor = idx

        return SubmitResult(
            snapshot=self.snapshot(),
            events=events,
            milestones=milestones,
        )
