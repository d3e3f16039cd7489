"""
Unit tests for FormatDetector.

Detection order is part of the contract; these tests lock it in.
Run: pytest tests/unit/test_detector.py -v
"""
import pytest

from src.lessons.detector import (
    FormatDetector,
    build_detection_table,
    detect_format,
    is_canonical,
    is_legacy,
    is_slides,
    is_tiered,
)
from src.lessons.models import DetectedFormat


@pytest.fixture
def detector():
    return FormatDetector()


class TestDetectionTable:
    """The predicate table is ordered and closed."""

    def test_table_order(self):
        table = build_detection_table(["forced"])
        assert [fmt for fmt, _ in table] == [
            DetectedFormat.CANONICAL,
            DetectedFormat.SLIDES,
            DetectedFormat.TIERED,
            DetectedFormat.LEGACY,
            DetectedFormat.SLIDES,
        ]

    def test_default_forced_ids_from_settings(self, detector):
        assert detector.detect({"id": "history-of-ai"}) is DetectedFormat.SLIDES

    def test_custom_forced_ids(self):
        detector = FormatDetector(build_detection_table(["odd-one"]))
        assert detector.detect({"id": "odd-one"}) is DetectedFormat.SLIDES
        assert detector.detect({"id": "history-of-ai"}) is DetectedFormat.UNKNOWN


class TestShapes:
    """Each historical shape is recognized."""

    def test_legacy(self, detector, legacy_record):
        assert detector.detect(legacy_record) is DetectedFormat.LEGACY

    def test_tiered(self, detector, tiered_record):
        assert detector.detect(tiered_record) is DetectedFormat.TIERED

    def test_slides(self, detector, slides_record):
        assert detector.detect(slides_record) is DetectedFormat.SLIDES

    def test_canonical(self, detector, canonical_lesson):
        assert detector.detect(canonical_lesson) is DetectedFormat.CANONICAL

    def test_slides_wins_over_tiered(self, detector, slides_record, tiered_record):
        record = {**tiered_record, "slides": slides_record["slides"]}
        assert detector.detect(record) is DetectedFormat.SLIDES

    def test_canonical_wins_over_everything(self, detector, canonical_lesson, slides_record):
        record = {**canonical_lesson, "slides": slides_record["slides"], "adaptedContent": {}}
        assert detector.detect(record) is DetectedFormat.CANONICAL

    def test_legacy_needs_difficulty_or_category(self):
        assert not is_legacy({"adaptedContent": {}})
        assert is_legacy({"adaptedContent": {}, "category": "Math"})
        assert is_legacy({"adaptedContent": {}, "difficulty": "Hard"})

    def test_tiered_needs_core_concept_and_free_tier(self):
        assert not is_tiered({"coreConcept": "", "content": {"free": {"a": 1}}})
        assert not is_tiered({"coreConcept": "x", "content": {"beginner": {"a": 1}}})
        assert is_tiered({"coreConcept": "x", "content": {"free": {"a": 1}}})

    def test_slides_needs_type_and_content(self):
        assert not is_slides({"slides": []})
        assert not is_slides({"slides": [{"type": "intro"}]})
        assert is_slides({"slides": [{"type": "intro", "content": {"title": "T"}}]})

    def test_canonical_needs_value(self):
        assert not is_canonical({"content": [{"type": "text"}]})
        assert is_canonical({"content": [{"type": "text", "value": ""}]})


class TestUnknown:
    """Detection never raises and defaults to unknown."""

    def test_empty_record(self):
        assert detect_format({}) is DetectedFormat.UNKNOWN

    @pytest.mark.parametrize("record", [None, [], "lesson", 42])
    def test_non_mapping(self, detector, record):
        assert detector.detect(record) is DetectedFormat.UNKNOWN

    def test_unhashable_id(self, detector):
        assert detector.detect({"id": ["not", "hashable"]}) is DetectedFormat.UNKNOWN

    def test_failing_predicate_is_skipped(self):
        def explode(record):
            raise RuntimeError("boom")

        detector = FormatDetector([
            (DetectedFormat.CANONICAL, explode),
            (DetectedFormat.LEGACY, is_legacy),
        ])
        assert detector.detect({"adaptedContent": {}, "category": "x"}) is DetectedFormat.LEGACY
