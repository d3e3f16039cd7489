"""
Format detector - Classifies a raw lesson record by its shape.

Detection walks one ordered table of structural predicates and returns the
first match. The order is part of the contract: a record carrying both a
slide sequence and tiered content is a slides lesson.

Checks, in order:
- Canonical: content[0] has a type and a value
- Slides: slides[0] has a type and content
- Tiered: coreConcept string plus content.free
- Legacy: adaptedContent plus difficulty or category
- Known inconsistent records forced to slides (by id)
- Unknown
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from loguru import logger

from config import get_settings

from .models import DetectedFormat

Predicate = Callable[[Mapping[str, Any]], bool]


def _first_item(value: Any) -> Any:
    """First element of a non-empty list, else None."""
    if isinstance(value, list) and value:
        return value[0]
    return None


def is_canonical(record: Mapping[str, Any]) -> bool:
    first = _first_item(record.get("content"))
    return isinstance(first, Mapping) and bool(first.get("type")) and "value" in first


def is_slides(record: Mapping[str, Any]) -> bool:
    first = _first_item(record.get("slides"))
    return isinstance(first, Mapping) and bool(first.get("type")) and bool(first.get("content"))


def is_tiered(record: Mapping[str, Any]) -> bool:
    core_concept = record.get("coreConcept")
    content = record.get("content")
    return (
        isinstance(core_concept, str)
        and bool(core_concept)
        and isinstance(content, Mapping)
        and bool(content.get("free"))
    )


def is_legacy(record: Mapping[str, Any]) -> bool:
    return isinstance(record.get("adaptedContent"), Mapping) and bool(
        record.get("difficulty") or record.get("category")
    )


def forced_slides(forced_ids: Iterable[str]) -> Predicate:
    """Predicate matching records whose id is in the forced list."""
    ids = frozenset(forced_ids)

    def predicate(record: Mapping[str, Any]) -> bool:
        return record.get("id") in ids

    return predicate


def build_detection_table(forced_ids: Iterable[str] | None = None) -> list[tuple[DetectedFormat, Predicate]]:
    """
    Build the ordered predicate table.

    Args:
        forced_ids: Ids force-classified as slides. Defaults to settings.

    Returns:
        List of (format, predicate) pairs, evaluated top to bottom
    """
    if forced_ids is None:
        forced_ids = get_settings().forced_slides_ids

    return [
        (DetectedFormat.CANONICAL, is_canonical),
        (DetectedFormat.SLIDES, is_slides),
        (DetectedFormat.TIERED, is_tiered),
        (DetectedFormat.LEGACY, is_legacy),
        (DetectedFormat.SLIDES, forced_slides(forced_ids)),
    ]


class FormatDetector:
    """Classifies raw records with a fixed predicate table."""

    def __init__(self, table: Sequence[tuple[DetectedFormat, Predicate]] | None = None):
        self.table = list(table) if table is not None else build_detection_table()

    def detect(self, record: Any) -> DetectedFormat:
        """
        Classify a raw lesson record. Never raises.

        Args:
            record: Raw lesson record (anything; non-mappings are Unknown)

        Returns:
            The first matching DetectedFormat, or UNKNOWN
        """
        if not isinstance(record, Mapping):
            return DetectedFormat.UNKNOWN

        for detected, predicate in self.table:
            try:
                if predicate(record):
                    return detected
            except Exception as e:
                # An unhashable id or an exotic mapping must not abort detection
                logger.debug(f"Predicate for {detected.value} failed on {record.get('id')!r}: {e}")

        return DetectedFormat.UNKNOWN


def detect_format(record: Any) -> DetectedFormat:
    """Convenience function using the default detection table."""
    return FormatDetector().detect(record)
