"""
Fallback transformer for records of unknown shape.

Keeps the title and description, adds a placeholder and flags the lesson
for manual review. Unknown records are never rejected for field shapes:
optional lists that are not lists are dropped.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar

from ..models import CanonicalLesson, ContentBlock, DetectedFormat
from .base import DEFAULT_DIFFICULTY, DEFAULT_LESSON_TYPE, DEFAULT_TITLE, BaseLessonTransformer, lenient_list

PENDING_MIGRATION_TEXT = (
    "This lesson is being migrated to the new format. Content will be available soon."
)


class FallbackLessonTransformer(BaseLessonTransformer):
    """Placeholder migration for unrecognized records."""

    name: ClassVar[str] = "fallback_transformer"
    source_format: ClassVar[DetectedFormat] = DetectedFormat.UNKNOWN

    DEFAULT_ESTIMATED_MINUTES: ClassVar[int] = 15
    DEFAULT_XP: ClassVar[int] = 100
    DEFAULT_CATEGORY: ClassVar[str] = "General"

    def _build_blocks(self, record: Mapping[str, Any]) -> list[ContentBlock]:
        blocks = [self.title_block(record)]
        if record.get("description"):
            blocks.append(self.factory.text(record["description"]))
        blocks.append(self.factory.text(PENDING_MIGRATION_TEXT))
        return blocks

    def _build_lesson(self, record: Mapping[str, Any], blocks: list[ContentBlock]) -> CanonicalLesson:
        return CanonicalLesson(
            id=self.lesson_id(record),
            title=record.get("title") or DEFAULT_TITLE,
            description=record.get("description") or "Lesson content needs migration",
            lesson_type=DEFAULT_LESSON_TYPE,
            estimated_time_minutes=self.DEFAULT_ESTIMATED_MINUTES,
            xp_award=self.DEFAULT_XP,
            difficulty=record.get("difficulty") or DEFAULT_DIFFICULTY,
            category=record.get("category") or self.DEFAULT_CATEGORY,
            content=blocks,
            learning_objectives=lenient_list(record.get("learningObjectives")),
            tags=lenient_list(record.get("tags")),
            migration_metadata=self.metadata(needs_manual_review=True),
        )
