"""
Lesson Format Migration and Validation Engine.

Classifies lesson records stored in historical shapes, transforms them into
the canonical block-based representation and validates that the
transformation preserved meaning.

Architecture:
    FormatDetector -> LessonMigrator (transformers) -> LessonValidator
    MigrationOrchestrator runs the three over a batch.

Example:
    from src.lessons import BlockFactory, LessonMigrator, MigrationOrchestrator

    orchestrator = MigrationOrchestrator(
        migrator=LessonMigrator(factory=BlockFactory.seeded(42)),
    )
    result = orchestrator.run(records)
"""

from .blocks import BlockFactory
from .detector import FormatDetector, detect_format
from .exceptions import (
    LessonMigrationError,
    MalformedLessonError,
    TransformationError,
    UnsupportedFormatError,
)
from .migrator import LessonMigrator, migrate_lesson, transform
from .models import (
    BlockType,
    CanonicalLesson,
    ContentBlock,
    DetectedFormat,
    MigrationMetadata,
    ValidationReport,
)
from .orchestrator import (
    BatchMigrationResult,
    FailedMigration,
    MigrationOrchestrator,
    MigrationOutcome,
    MigrationStats,
    migration_stats,
)
from .validator import BatchValidationResult, LessonValidator, batch_validate, validate_lesson

__all__ = [
    # Pipeline
    "BlockFactory",
    "FormatDetector",
    "LessonMigrator",
    "LessonValidator",
    "MigrationOrchestrator",
    # Functions
    "detect_format",
    "migrate_lesson",
    "transform",
    "validate_lesson",
    "batch_validate",
    "migration_stats",
    # Models
    "BlockType",
    "CanonicalLesson",
    "ContentBlock",
    "DetectedFormat",
    "MigrationMetadata",
    "ValidationReport",
    "BatchMigrationResult",
    "BatchValidationResult",
    "MigrationOutcome",
    "FailedMigration",
    "MigrationStats",
    # Errors
    "LessonMigrationError",
    "TransformationError",
    "MalformedLessonError",
    "UnsupportedFormatError",
]
