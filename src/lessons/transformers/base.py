"""
Base Lesson Transformer.

Provides the abstract base for all schema transformers and the shape
helpers they share. A transformer turns one raw record of a known shape
into a CanonicalLesson and never mutates its input.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar

from config import Settings, get_settings

from ..blocks import BlockFactory
from ..exceptions import MalformedLessonError
from ..models import BlockType, CanonicalLesson, ContentBlock, DetectedFormat, MigrationMetadata

DEFAULT_TITLE = "Untitled Lesson"
DEFAULT_LESSON_TYPE = "concept_explanation"
DEFAULT_DIFFICULTY = "Beginner"
DEFAULT_EXPLANATION = "Great job!"
SANDBOX_TITLE = "Code Exercise"


# =============================================================================
# Shape Helpers
# =============================================================================


def optional_list(container: Mapping[str, Any], key: str, field: str) -> list[Any]:
    """
    Read a list field that may be absent.

    Falsy values count as absent. Anything else that is not a list raises
    MalformedLessonError naming `field`.
    """
    value = container.get(key)
    if not value:
        return []
    if not isinstance(value, list):
        raise MalformedLessonError(field, "a list", value)
    return value


def optional_mapping(container: Mapping[str, Any], key: str, field: str) -> Mapping[str, Any]:
    """Read a mapping field that may be absent (falsy counts as absent)."""
    value = container.get(key)
    if not value:
        return {}
    if not isinstance(value, Mapping):
        raise MalformedLessonError(field, "a mapping", value)
    return value


def lenient_list(value: Any) -> list[Any]:
    """A private copy of `value` when it is a list, else an empty list."""
    if isinstance(value, list):
        return copy.deepcopy(value)
    return []


def bulleted(label: str, items: list[Any]) -> str:
    """Aggregate a list into one bold-labelled bulleted text."""
    return f"**{label}:**\n" + "\n".join(f"• {item}" for item in items)


def option_text(option: Any) -> str:
    """Normalize a quiz option (plain string or {text, correct}) to text."""
    if isinstance(option, str):
        return option
    if isinstance(option, Mapping):
        text = option.get("text")
        if isinstance(text, str):
            return text
        return "" if text is None else str(text)
    return str(option)


def correct_option_index(options: list[Any]) -> int:
    """Index of the first option flagged correct, -1 when none is."""
    for index, option in enumerate(options):
        if isinstance(option, Mapping) and (option.get("correct") or option.get("isCorrect")):
            return index
    return -1


# =============================================================================
# Base Transformer
# =============================================================================


class BaseLessonTransformer(ABC):
    """
    Abstract base class for schema transformers.

    Subclasses implement:
    - _build_blocks(): the ordered content blocks for the record
    - _build_lesson(): the lesson envelope with per-source defaults
    """

    name: ClassVar[str] = "base_transformer"
    source_format: ClassVar[DetectedFormat] = DetectedFormat.UNKNOWN

    def __init__(self, factory: BlockFactory | None = None, settings: Settings | None = None):
        """
        Initialize transformer.

        Args:
            factory: Block factory for this run (ids, styles, timestamps)
            settings: Engine settings; defaults to the cached settings
        """
        self.factory = factory or BlockFactory()
        self.settings = settings or get_settings()

    def transform(self, record: Any) -> CanonicalLesson:
        """
        Transform a raw record into a canonical lesson.

        Args:
            record: Raw lesson record of this transformer's shape

        Returns:
            A new CanonicalLesson

        Raises:
            MalformedLessonError: A field is present with the wrong shape
        """
        if not isinstance(record, Mapping):
            raise MalformedLessonError("record", "a mapping", record)

        blocks = self._build_blocks(record)
        return self._build_lesson(record, blocks)

    @abstractmethod
    def _build_blocks(self, record: Mapping[str, Any]) -> list[ContentBlock]:
        ...

    @abstractmethod
    def _build_lesson(self, record: Mapping[str, Any], blocks: list[ContentBlock]) -> CanonicalLesson:
        ...

    # -------------------------------------------------------------------------
    # Shared building blocks
    # -------------------------------------------------------------------------

    def lesson_id(self, record: Mapping[str, Any]) -> str:
        """Source id when present (never renamed), else a fresh run-scoped id."""
        source_id = record.get("id")
        if source_id is not None:
            return source_id
        return f"lesson-{self.factory.new_id()}"

    def metadata(self, needs_manual_review: bool = False) -> MigrationMetadata:
        return MigrationMetadata(
            original_format=self.source_format,
            migrated_at=self.factory.now(),
            version=self.settings.migration_version,
            needs_manual_review=needs_manual_review,
        )

    def title_block(self, record: Mapping[str, Any], default: str = DEFAULT_TITLE) -> ContentBlock:
        return self.factory.heading(record.get("title") or default, level=1)

    def bulleted_block(self, label: str, items: list[Any]) -> ContentBlock:
        return self.factory.text(bulleted(label, items))

    def quiz_block(self, question: Any, options: list[Any], explanation: Any = None) -> ContentBlock:
        return self.factory.create_block(BlockType.QUIZ, {
            "question": question,
            "options": [option_text(option) for option in options],
            "correctAnswer": correct_option_index(options),
            "explanation": explanation or DEFAULT_EXPLANATION,
        })

    def sandbox_block(self, instructions: str, code: str | None = None) -> ContentBlock:
        return self.factory.create_block(BlockType.CODE_SANDBOX, {
            "language": self.settings.sandbox_language,
            "code": code or self.settings.placeholder_code,
            "title": SANDBOX_TITLE,
            "instructions": instructions,
        })

    def copied_list(self, record: Mapping[str, Any], key: str) -> list[Any]:
        return copy.deepcopy(optional_list(record, key, key))
