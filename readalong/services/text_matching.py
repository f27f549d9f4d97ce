"""Token-level matching between spoken words and story words.

A child reading aloud rarely produces a clean transcript: the recognizer
drops accents, mangles endings and occasionally hears a neighbouring
word.  Matching is therefore approximate, with thresholds tiered by the
length of the *expected* word because normalised edit distance is much
noisier on one- and two-letter words than on long ones.

There is no "spoken contains expected" shortcut: a long
recognizer token would otherwise satisfy every short story word inside it.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass


@dataclass(frozen=True)
class MatchPolicy:
    """Thresholds used by :func:`words_match`."""

    short_word_max_length: int = 2
    max_length_difference: int = 2
    short_word_similarity: float = 0.6
    long_word_similarity: float = 0.8


DEFAULT_POLICY = MatchPolicy()


def normalise(word: str) -> str:
    """Lower-case, strip accents and punctuation, trim."""
    word = unicodedata.normalize("NFD", word.lower())
    word = "".join(ch for ch in word if not unicodedata.combining(ch))
    word = re.sub(r"[^\w\s]", "", word)
    return word.strip()


def edit_distance(a: str, b: str) -> int:
    """Simple Levenshtein distance."""
    if len(a) < len(b):
        return edit_distance(b, a)
    if len(b) == 0:
        return len(a)
    prev = list(range(len(b) + 1))
    for i, ca in enumerate(a):
        curr = [i + 1]
        for j, cb in enumerate(b):
            cost = 0 if ca == cb else 1
            curr.append(min(curr[j] + 1, prev[j + 1] + 1, prev[j] + cost))
        prev = curr
    return prev[len(b)]


def similarity(a: str, b: str) -> float:
    """Edit-distance similarity in [0, 1]; 1.0 means identical."""
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0
    return 1 - edit_distance(a, b) / max(len(a), len(b))


def words_match(
    spoken: str,
    expected: str,
    policy: MatchPolicy = DEFAULT_POLICY,
) -> bool:
    """
    Decide whether *spoken* is an acceptable reading of *expected*.

    Tiers, first hit wins:
      1. identical after normalisation
      2. short expected word (<= 2 chars): similarity >= 0.6
      3. any other expected word: similarity >= 0.8
    Both fuzzy tiers require the lengths to differ by at most 2; larger
    differences are rejected before any distance is computed.

    Not symmetric: the tier is picked from the expected word's length.
    """
    spoken_norm = normalise(spoken)
    expected_norm = normalise(expected)

    if spoken_norm == expected_norm:
        return True

    length_diff = abs(len(spoken_norm) - len(expected_norm))
    if length_diff > policy.max_length_difference:
        return False

    if len(expected_norm) <= policy.short_word_max_length:
        return similarity(spoken_norm, expected_norm) >= policy.short_word_similarity
    return similarity(spoken_norm, expected_norm) >= policy.long_word_similarity


def extract_words(text: str) -> list[str]:
    """Split a recognizer hypothesis into lower-cased tokens, in order."""
    return text.lower().split()
