"""
Lesson Migrator.

Detects a record's shape and dispatches it to the matching transformer.
Canonical records pass through untouched.

Example:
    migrator = LessonMigrator(factory=BlockFactory.seeded(7))
    canonical = migrator.migrate(raw_record)          # auto-detect
    canonical = migrator.migrate(raw_record, "slides")  # forced shape
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from config import Settings, get_settings

from .blocks import BlockFactory
from .detector import FormatDetector, build_detection_table
from .exceptions import UnsupportedFormatError
from .logs import StructuredLogger, default_logger
from .models import DetectedFormat, RawLessonRecord
from .transformers import BaseLessonTransformer, build_transformers

AUTO = "auto"


class LessonMigrator:
    """Detector plus transformer registry for one migration run."""

    def __init__(
        self,
        factory: BlockFactory | None = None,
        settings: Settings | None = None,
        detector: FormatDetector | None = None,
        transformers: dict[DetectedFormat, BaseLessonTransformer] | None = None,
        logger: StructuredLogger | None = None,
    ):
        """
        Initialize migrator.

        Args:
            factory: Block factory shared by all transformers of this run
            settings: Engine settings
            detector: Format detector (defaults to the standard table)
            transformers: Override the per-format transformer registry
            logger: Logger for migration progress (defaults to loguru)
        """
        self.settings = settings or get_settings()
        self.factory = factory or BlockFactory()
        self.detector = detector or FormatDetector(
            build_detection_table(self.settings.forced_slides_ids)
        )
        if transformers is None:
            transformers = build_transformers(self.factory, self.settings)
        self.transformers = transformers
        self.logger = logger or default_logger()

    def detect(self, record: Any) -> DetectedFormat:
        return self.detector.detect(record)

    def resolve_format(self, record: Any, source_format: DetectedFormat | str = AUTO) -> DetectedFormat:
        """Turn 'auto' or a tag string into a DetectedFormat."""
        if source_format == AUTO:
            return self.detect(record)
        try:
            return DetectedFormat(source_format)
        except ValueError:
            raise UnsupportedFormatError(f"Unknown lesson format: {source_format!r}") from None

    def migrate(
        self,
        record: Any,
        source_format: DetectedFormat | str = AUTO,
        logger: StructuredLogger | None = None,
    ) -> RawLessonRecord:
        """
        Migrate a record into the canonical dict shape.

        Args:
            record: Raw lesson record
            source_format: Format tag, or 'auto' to detect
            logger: Logger for this call, overriding the migrator's own

        Returns:
            The canonical lesson dict. For canonical input, the input itself.

        Raises:
            TransformationError: The record is malformed for its shape
            UnsupportedFormatError: No transformer for the format tag
        """
        detected = self.resolve_format(record, source_format)

        if detected is DetectedFormat.CANONICAL:
            return record

        transformer = self.transformers.get(detected)
        if transformer is None:
            raise UnsupportedFormatError(f"No transformer registered for {detected.value}")

        lesson_id = record.get("id") if isinstance(record, Mapping) else None
        log = logger or self.logger
        log.info(f"Migrating lesson {lesson_id!r} from format: {detected.value}")
        return transformer.transform(record).to_dict()


def migrate_lesson(record: Any, source_format: DetectedFormat | str = AUTO) -> RawLessonRecord:
    """Convenience function migrating one record with a fresh migrator."""
    return LessonMigrator().migrate(record, source_format)


def transform(record: Any, source_format: DetectedFormat | str) -> RawLessonRecord:
    """Transform a record as the given shape, skipping detection."""
    return LessonMigrator().migrate(record, source_format)
