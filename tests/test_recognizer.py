"""Tests for the recognizer-result intake gate."""

import pytest

from readalong.services.recognizer import (
    ACCEPTED,
    INTERIM,
    REJECTED,
    RecognizerResult,
    classify_result,
)


class TestClassifyResult:
    """Test cases for classify_result."""

    def test_interim_is_display_only(self) -> None:
        result = RecognizerResult("era uma", is_final=False, confidence=0.99)
        assert classify_result(result) == INTERIM

    def test_final_without_confidence_is_trusted(self) -> None:
        """Browsers that never report a confidence are not penalised."""
        assert classify_result(RecognizerResult("era")) == ACCEPTED

    def test_low_confidence_rejected(self) -> None:
        assert classify_result(RecognizerResult("era", confidence=0.3)) == REJECTED

    def test_threshold_is_inclusive(self) -> None:
        assert classify_result(RecognizerResult("era", confidence=0.5)) == ACCEPTED

    def test_custom_threshold(self) -> None:
        result = RecognizerResult("era", confidence=0.7)
        assert classify_result(result, min_confidence=0.8) == REJECTED
        assert classify_result(result, min_confidence=0.6) == ACCEPTED


class TestFromPayload:
    """Test cases for RecognizerResult.from_payload."""

    def test_full_payload(self) -> None:
        result = RecognizerResult.from_payload(
            {"transcript": "era uma vez", "is_final": False, "confidence": "0.8"}
        )
        assert result == RecognizerResult("era uma vez", is_final=False, confidence=0.8)

    def test_defaults(self) -> None:
        """Missing fields mean a final result with no confidence."""
        result = RecognizerResult.from_payload({})
        assert result == RecognizerResult("", is_final=True, confidence=None)

    @pytest.mark.parametrize(
        "payload",
        [{"transcript": 42}, {"transcript": "era", "confidence": "high"}, {"confidence": [1]}],
    )
    def test_malformed(self, payload: dict) -> None:
        with pytest.raises(ValueError):
            RecognizerResult.from_payload(payload)
