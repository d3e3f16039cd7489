"""
Tiered lesson transformer.

Tiered records carry a core concept and content split by difficulty tier
(free / beginner / intermediate / advanced). Only one tier is migrated:
`free` when present, then `beginner`, else the raw content mapping.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar

from ..exceptions import MalformedLessonError
from ..models import CanonicalLesson, ContentBlock, DetectedFormat
from .base import (
    DEFAULT_LESSON_TYPE,
    DEFAULT_TITLE,
    BaseLessonTransformer,
    optional_list,
    optional_mapping,
)

DEFAULT_SCENARIO_INSTRUCTIONS = "Practice exercise"


def select_tier(content: Mapping[str, Any], *tiers: str) -> tuple[str | None, Any]:
    """First truthy tier among `tiers`, else the content itself (tier None)."""
    for tier in tiers:
        if content.get(tier):
            return tier, content[tier]
    return None, content


class TieredLessonTransformer(BaseLessonTransformer):
    """Transforms difficulty-tiered records into canonical lessons."""

    name: ClassVar[str] = "tiered_transformer"
    source_format: ClassVar[DetectedFormat] = DetectedFormat.TIERED

    DEFAULT_ESTIMATED_MINUTES: ClassVar[int] = 25
    DEFAULT_XP: ClassVar[int] = 150
    DEFAULT_CATEGORY: ClassVar[str] = "AI Fundamentals"
    DEFAULT_TAGS: ClassVar[tuple[str, ...]] = ("ai", "fundamentals")

    def _build_blocks(self, record: Mapping[str, Any]) -> list[ContentBlock]:
        blocks = [self.title_block(record, default="Untitled AI Lesson")]

        if record.get("coreConcept"):
            blocks.append(self.factory.text(record["coreConcept"]))

        content = optional_mapping(record, "content", "content")
        tier, tier_content = select_tier(content, "free", "beginner")
        field = f"content.{tier}" if tier else "content"
        if not isinstance(tier_content, Mapping):
            raise MalformedLessonError(field, "a mapping", tier_content)

        if tier_content.get("introduction"):
            blocks.append(self.factory.text(tier_content["introduction"]))

        blocks.extend(self._main_content_blocks(tier_content.get("mainContent")))

        key_points = optional_list(tier_content, "keyPoints", f"{field}.keyPoints")
        if key_points:
            blocks.append(self.bulleted_block("Key Points", key_points))

        examples = optional_list(tier_content, "examples", f"{field}.examples")
        if examples:
            blocks.append(self.bulleted_block("Examples", examples))

        blocks.extend(self._scenario_blocks(record))
        return blocks

    def _main_content_blocks(self, main_content: Any) -> list[ContentBlock]:
        if not main_content:
            return []
        if isinstance(main_content, str):
            return [self.factory.text(main_content)]
        if isinstance(main_content, Mapping):
            # Only string subsections are migrated; nested structures are skipped
            return [
                self.factory.text(f"**{name}:** {value}")
                for name, value in main_content.items()
                if isinstance(value, str)
            ]
        return []

    def _scenario_blocks(self, record: Mapping[str, Any]) -> list[ContentBlock]:
        sandbox = optional_mapping(record, "sandbox", "sandbox")
        if not sandbox:
            return []

        tier, tier_sandbox = select_tier(sandbox, "beginner", "intermediate")
        field = f"sandbox.{tier}" if tier else "sandbox"
        if not isinstance(tier_sandbox, Mapping):
            raise MalformedLessonError(field, "a mapping", tier_sandbox)

        blocks = []
        scenarios = optional_list(tier_sandbox, "scenarios", f"{field}.scenarios")
        for index, scenario in enumerate(scenarios):
            if not isinstance(scenario, Mapping):
                raise MalformedLessonError(f"{field}.scenarios[{index}]", "a mapping", scenario)
            instructions = scenario.get("task") or scenario.get("instructions") or DEFAULT_SCENARIO_INSTRUCTIONS
            blocks.append(self.sandbox_block(instructions, scenario.get("code")))
        return blocks

    def _build_lesson(self, record: Mapping[str, Any], blocks: list[ContentBlock]) -> CanonicalLesson:
        return CanonicalLesson(
            id=self.lesson_id(record),
            title=record.get("title") or DEFAULT_TITLE,
            description=record.get("coreConcept") or "AI lesson",
            lesson_type=record.get("lessonType") or DEFAULT_LESSON_TYPE,
            estimated_time_minutes=self.DEFAULT_ESTIMATED_MINUTES,
            xp_award=self.DEFAULT_XP,
            difficulty="Beginner",
            category=self.DEFAULT_CATEGORY,
            content=blocks,
            learning_objectives=self.copied_list(record, "learningObjectives"),
            tags=list(self.DEFAULT_TAGS),
            migration_metadata=self.metadata(),
        )
