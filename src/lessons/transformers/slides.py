"""
Slides lesson transformer.

Slide lessons are an ordered `slides` list of `{type, content}` entries.
One pass over the slides, dispatched by slide type. A slide of an
unrecognized type with neither a title nor an explanation yields no block;
that loss is accepted legacy behavior.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, ClassVar

from loguru import logger

from ..exceptions import MalformedLessonError
from ..models import BlockType, CanonicalLesson, ContentBlock, DetectedFormat
from .base import (
    DEFAULT_DIFFICULTY,
    DEFAULT_LESSON_TYPE,
    DEFAULT_TITLE,
    BaseLessonTransformer,
    optional_list,
)

FILL_BLANK_TITLE = "Fill in the Blanks"
DEFAULT_SANDBOX_INSTRUCTIONS = "Complete the exercise"

SlideHandler = Callable[[Mapping[str, Any], int], list[ContentBlock]]


class SlidesLessonTransformer(BaseLessonTransformer):
    """Transforms slide-sequence records into canonical lessons."""

    name: ClassVar[str] = "slides_transformer"
    source_format: ClassVar[DetectedFormat] = DetectedFormat.SLIDES

    DEFAULT_ESTIMATED_MINUTES: ClassVar[int] = 20
    DEFAULT_XP: ClassVar[int] = 150
    DEFAULT_CATEGORY: ClassVar[str] = "AI Fundamentals"

    def _handlers(self) -> dict[str, SlideHandler]:
        return {
            "concept": self._concept_blocks,
            "intro": self._concept_blocks,
            "quiz": self._quiz_blocks,
            "progress_checkpoint": self._checkpoint_blocks,
            "example": self._example_blocks,
            "sandbox": self._sandbox_blocks,
            "fill-blank": self._fill_blank_blocks,
        }

    def _build_blocks(self, record: Mapping[str, Any]) -> list[ContentBlock]:
        blocks = [self.title_block(record)]

        if record.get("description"):
            blocks.append(self.factory.text(record["description"]))

        handlers = self._handlers()
        slides = optional_list(record, "slides", "slides")
        dropped = 0

        for index, slide in enumerate(slides):
            if not isinstance(slide, Mapping):
                raise MalformedLessonError(f"slides[{index}]", "a mapping", slide)

            content = slide.get("content")
            if not isinstance(content, Mapping):
                content = {}

            slide_type = slide.get("type")
            handler = self._generic_blocks
            if isinstance(slide_type, str):
                handler = handlers.get(slide_type, self._generic_blocks)

            slide_blocks = handler(content, index)
            if not slide_blocks:
                dropped += 1
            blocks.extend(slide_blocks)

        if dropped:
            logger.debug(f"Slides lesson {record.get('id')!r}: {dropped} slides produced no blocks")
        return blocks

    # -------------------------------------------------------------------------
    # Slide handlers
    # -------------------------------------------------------------------------

    def _concept_blocks(self, content: Mapping[str, Any], index: int) -> list[ContentBlock]:
        blocks = []
        if content.get("title"):
            blocks.append(self.factory.heading(content["title"], level=2))

        body = content.get("explanation") or content.get("description")
        if body:
            blocks.append(self.factory.text(body))

        key_points = optional_list(content, "keyPoints", f"slides[{index}].content.keyPoints")
        if key_points:
            blocks.append(self.bulleted_block("Key Points", key_points))
        return blocks

    def _quiz_blocks(self, content: Mapping[str, Any], index: int) -> list[ContentBlock]:
        if not content.get("question"):
            return []
        options = optional_list(content, "options", f"slides[{index}].content.options")
        if not options:
            return []

        explanation = content.get("explanation") or content.get("correctFeedback")
        return [self.quiz_block(content["question"], options, explanation)]

    def _checkpoint_blocks(self, content: Mapping[str, Any], index: int) -> list[ContentBlock]:
        title = content.get("title") or "Progress Checkpoint"
        message = content.get("message") or ""
        return [self.factory.text(f"**{title}**\n\n{message}")]

    def _example_blocks(self, content: Mapping[str, Any], index: int) -> list[ContentBlock]:
        return [
            self.factory.heading("Example", level=3),
            self.factory.text(content.get("example") or content.get("explanation") or ""),
        ]

    def _sandbox_blocks(self, content: Mapping[str, Any], index: int) -> list[ContentBlock]:
        instructions = content.get("instructions") or DEFAULT_SANDBOX_INSTRUCTIONS
        return [self.sandbox_block(instructions, content.get("code"))]

    def _fill_blank_blocks(self, content: Mapping[str, Any], index: int) -> list[ContentBlock]:
        return [
            self.factory.heading(FILL_BLANK_TITLE, level=3),
            self.factory.create_block(BlockType.FILL_BLANK, {
                "text": content.get("text") or content.get("sentence") or "",
                "title": FILL_BLANK_TITLE,
            }),
        ]

    def _generic_blocks(self, content: Mapping[str, Any], index: int) -> list[ContentBlock]:
        if not (content.get("title") or content.get("explanation")):
            return []

        blocks = []
        if content.get("title"):
            blocks.append(self.factory.heading(content["title"], level=3))

        body = content.get("explanation") or content.get("description")
        if body:
            blocks.append(self.factory.text(body))
        return blocks

    def _build_lesson(self, record: Mapping[str, Any], blocks: list[ContentBlock]) -> CanonicalLesson:
        return CanonicalLesson(
            id=self.lesson_id(record),
            title=record.get("title") or DEFAULT_TITLE,
            description=record.get("description") or "Interactive lesson",
            lesson_type=DEFAULT_LESSON_TYPE,
            estimated_time_minutes=record.get("estimatedTime") or self.DEFAULT_ESTIMATED_MINUTES,
            xp_award=record.get("xpReward") or self.DEFAULT_XP,
            difficulty=record.get("difficulty") or DEFAULT_DIFFICULTY,
            category=self.DEFAULT_CATEGORY,
            content=blocks,
            learning_objectives=self.copied_list(record, "learningObjectives"),
            tags=self.copied_list(record, "tags"),
            migration_metadata=self.metadata(),
        )
