"""
Legacy lesson transformer.

Legacy records keep their material under `adaptedContent`:

    {
        "id": "...", "title": "...", "difficulty": "...", "category": "...",
        "adaptedContent": {
            "content": {"introduction": str, "keyPoints": [...], "examples": [...]},
            "assessment": {"questions": [{"question", "options", "explanation"}]},
            "sandbox": {"instructions": str},
            "estimatedTime": int, "xpReward": int,
        },
        "sandbox": {"required": bool},
    }

Introduction, key points and examples each collapse into one text block.
Every assessment question becomes one quiz block.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar

from loguru import logger

from ..exceptions import MalformedLessonError
from ..models import CanonicalLesson, ContentBlock, DetectedFormat
from .base import (
    DEFAULT_DIFFICULTY,
    DEFAULT_LESSON_TYPE,
    DEFAULT_TITLE,
    BaseLessonTransformer,
    optional_list,
    optional_mapping,
)

DEFAULT_SANDBOX_INSTRUCTIONS = "Try out the concepts!"


class LegacyLessonTransformer(BaseLessonTransformer):
    """Transforms adaptedContent records into canonical lessons."""

    name: ClassVar[str] = "legacy_transformer"
    source_format: ClassVar[DetectedFormat] = DetectedFormat.LEGACY

    # Per-source defaults
    DEFAULT_ESTIMATED_MINUTES: ClassVar[int] = 15
    DEFAULT_XP: ClassVar[int] = 100
    DEFAULT_CATEGORY: ClassVar[str] = "General"

    def _build_blocks(self, record: Mapping[str, Any]) -> list[ContentBlock]:
        blocks = [self.title_block(record)]

        if record.get("description"):
            blocks.append(self.factory.text(record["description"]))

        adapted = optional_mapping(record, "adaptedContent", "adaptedContent")
        content = optional_mapping(adapted, "content", "adaptedContent.content")

        if content.get("introduction"):
            blocks.append(self.factory.text(content["introduction"]))

        key_points = optional_list(content, "keyPoints", "adaptedContent.content.keyPoints")
        if key_points:
            blocks.append(self.bulleted_block("Key Points", key_points))

        examples = optional_list(content, "examples", "adaptedContent.content.examples")
        if examples:
            blocks.append(self.bulleted_block("Examples", examples))

        assessment = optional_mapping(adapted, "assessment", "adaptedContent.assessment")
        questions = optional_list(assessment, "questions", "adaptedContent.assessment.questions")
        for index, question in enumerate(questions):
            blocks.append(self._question_block(question, index))

        sandbox = optional_mapping(record, "sandbox", "sandbox")
        if sandbox.get("required"):
            nested = optional_mapping(adapted, "sandbox", "adaptedContent.sandbox")
            blocks.append(self.sandbox_block(nested.get("instructions") or DEFAULT_SANDBOX_INSTRUCTIONS))

        logger.debug(
            f"Legacy lesson {record.get('id')!r}: {len(questions)} questions -> {len(blocks)} blocks"
        )
        return blocks

    def _question_block(self, question: Any, index: int) -> ContentBlock:
        field = f"adaptedContent.assessment.questions[{index}]"
        if not isinstance(question, Mapping):
            raise MalformedLessonError(field, "a mapping", question)

        options = question.get("options")
        if options is None:
            options = []
        elif not isinstance(options, list):
            raise MalformedLessonError(f"{field}.options", "a list", options)

        return self.quiz_block(question.get("question"), options, question.get("explanation"))

    def _build_lesson(self, record: Mapping[str, Any], blocks: list[ContentBlock]) -> CanonicalLesson:
        adapted = optional_mapping(record, "adaptedContent", "adaptedContent")
        return CanonicalLesson(
            id=self.lesson_id(record),
            title=record.get("title") or DEFAULT_TITLE,
            description=record.get("description") or "No description available",
            lesson_type=DEFAULT_LESSON_TYPE,
            estimated_time_minutes=adapted.get("estimatedTime") or self.DEFAULT_ESTIMATED_MINUTES,
            xp_award=adapted.get("xpReward") or self.DEFAULT_XP,
            difficulty=record.get("difficulty") or DEFAULT_DIFFICULTY,
            category=record.get("category") or self.DEFAULT_CATEGORY,
            content=blocks,
            learning_objectives=self.copied_list(record, "learningObjectives"),
            tags=self.copied_list(record, "tags"),
            migration_metadata=self.metadata(),
        )
