"""
Lesson Migration Data Models.

These models represent the data flowing through the migration engine:
raw records come in as plain dicts, leave as CanonicalLesson dicts,
and every validation produces a ValidationReport.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Raw lesson records are untyped, polymorphic mappings straight from the stores
RawLessonRecord = dict[str, Any]


# =============================================================================
# Classification Enums
# =============================================================================


class DetectedFormat(str, Enum):
    """Historical lesson shapes the engine knows how to classify."""
    CANONICAL = "canonical"  # Block-based admin format (target shape)
    SLIDES = "slides"        # Ordered slide sequence
    TIERED = "tiered"        # Difficulty-tiered content with a core concept
    LEGACY = "legacy"        # adaptedContent fallback dataset
    UNKNOWN = "unknown"


class BlockType(str, Enum):
    """Closed allow-list of content block kinds."""
    HEADING = "heading"
    TEXT = "text"
    QUIZ = "quiz"
    CODE_SANDBOX = "code-sandbox"
    FILL_BLANK = "fill-blank"
    IMAGE = "image"
    VIDEO = "video"
    PODCAST_SYNC = "podcast-sync"
    SECTION_BREAK = "section-break"
    CHECKLIST = "checklist"
    PROGRESS_CHECKPOINT = "progress-checkpoint"
    CALL_TO_ACTION = "call-to-action"
    API_CALL = "api-call"


KNOWN_BLOCK_TYPES: frozenset[str] = frozenset(t.value for t in BlockType)

# Payload field the admin editor shows as the block's editable value
PRIMARY_TEXT_FIELD: dict[BlockType, str] = {
    BlockType.HEADING: "text",
    BlockType.TEXT: "text",
    BlockType.FILL_BLANK: "text",
    BlockType.QUIZ: "question",
    BlockType.CODE_SANDBOX: "instructions",
}

# Payload fields each kind must carry
REQUIRED_CONTENT_FIELDS: dict[BlockType, tuple[str, ...]] = {
    BlockType.HEADING: ("text", "level"),
    BlockType.TEXT: ("text",),
    BlockType.QUIZ: ("question", "options"),
    BlockType.CODE_SANDBOX: ("language", "code", "instructions"),
    BlockType.FILL_BLANK: ("text",),
}


# =============================================================================
# Canonical Models
# =============================================================================


@dataclass
class ContentBlock:
    """
    An atomic typed unit of lesson content.

    `content` is the kind-specific payload, `style` the visual attributes
    the slide runtime applies. Every block owns its own style dict.
    """
    id: str
    type: BlockType
    content: dict[str, Any]
    style: dict[str, Any] = field(default_factory=dict)
    created: str = ""
    updated: str = ""

    @property
    def value(self) -> str:
        """Primary text of the block ("" for kinds without one)."""
        key = PRIMARY_TEXT_FIELD.get(self.type)
        if key is None:
            return ""
        text = self.content.get(key)
        return text if isinstance(text, str) else ""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the canonical block shape."""
        return {
            "id": self.id,
            "type": self.type.value,
            "content": dict(self.content),
            "value": self.value,
            "style": dict(self.style),
            "metadata": {
                "created": self.created,
                "updated": self.updated,
            },
        }


@dataclass
class MigrationMetadata:
    """Provenance stamped onto every migrated lesson."""
    original_format: DetectedFormat
    migrated_at: str
    version: str = "1.0"
    needs_manual_review: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "originalFormat": self.original_format.value,
            "migratedAt": self.migrated_at,
            "version": self.version,
            "needsManualReview": self.needs_manual_review,
        }


@dataclass
class CanonicalLesson:
    """
    A lesson in the canonical block-based representation.

    This is the output of a transformer. `to_dict()` produces the camelCase
    wire shape consumed by the admin editor and the slide runtime.
    """
    # Identity
    id: str
    title: str
    description: str

    # Presentation
    lesson_type: str
    estimated_time_minutes: int
    xp_award: int
    difficulty: str
    category: str

    # Content
    content: list[ContentBlock] = field(default_factory=list)
    learning_objectives: list[Any] = field(default_factory=list)
    tags: list[Any] = field(default_factory=list)

    migration_metadata: MigrationMetadata | None = None

    def content_versions(self) -> dict[str, Any]:
        """Tiered page wrapper the lesson builder edits."""
        created = self.migration_metadata.migrated_at if self.migration_metadata else ""
        return {
            "free": {
                "pages": [{
                    "id": f"{self.id}-page-1",
                    "title": "Introduction",
                    "blocks": [block.to_dict() for block in self.content],
                    "created": created,
                }]
            }
        }

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the canonical lesson shape."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "lessonType": self.lesson_type,
            "estimatedTimeMinutes": self.estimated_time_minutes,
            "xpAward": self.xp_award,
            "difficulty": self.difficulty,
            "category": self.category,
            "content": [block.to_dict() for block in self.content],
            "learningObjectives": list(self.learning_objectives),
            "tags": list(self.tags),
            "contentVersions": self.content_versions(),
            "migrationMetadata": (
                self.migration_metadata.to_dict() if self.migration_metadata else None
            ),
        }


# =============================================================================
# Validation Models
# =============================================================================


@dataclass
class ValidationReport:
    """Errors and warnings found in one canonical lesson."""
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        """Warnings never affect validity."""
        return len(self.errors) == 0

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "details": dict(self.details),
        }
