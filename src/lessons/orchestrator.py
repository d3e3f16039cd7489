"""
Batch Migration Orchestrator.

Drives detect -> transform -> validate across a collection of raw records.
Processing is strictly sequential so reports come out in input order, and
one failing record never stops the batch.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .detector import FormatDetector
from .logs import StructuredLogger, default_logger
from .migrator import LessonMigrator
from .models import DetectedFormat, RawLessonRecord, ValidationReport
from .validator import LessonValidator


# =============================================================================
# Result Types
# =============================================================================


def _lesson_ref(record: Any) -> Any:
    """Best reference for a record in reports: its id, else its title."""
    if isinstance(record, Mapping):
        return record.get("id") or record.get("title")
    return None


@dataclass
class MigrationOutcome:
    """A record that went through transformation and validation."""
    index: int
    original: Any
    lesson: RawLessonRecord
    detected_format: DetectedFormat
    report: ValidationReport

    @property
    def lesson_id(self) -> Any:
        return self.lesson.get("id")


@dataclass
class FailedMigration:
    """A record whose transformation raised."""
    index: int
    record: Any
    detected_format: DetectedFormat
    error: str
    error_type: str

    @property
    def lesson_ref(self) -> Any:
        return _lesson_ref(self.record)


@dataclass
class MigrationStats:
    """Aggregate counts computed from detection alone."""
    total: int = 0
    by_format: dict[str, int] = field(default_factory=dict)
    needs_migration: int = 0
    already_migrated: int = 0

    @property
    def completion_percentage(self) -> float:
        """Share of records already canonical, 0.0 for an empty batch."""
        if self.total == 0:
            return 0.0
        return round(self.already_migrated / self.total * 100, 1)

    def count(self, detected: DetectedFormat) -> None:
        self.total += 1
        self.by_format[detected.value] = self.by_format.get(detected.value, 0) + 1
        if detected is DetectedFormat.CANONICAL:
            self.already_migrated += 1
        else:
            self.needs_migration += 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "byFormat": dict(self.by_format),
            "needsMigration": self.needs_migration,
            "alreadyMigrated": self.already_migrated,
            "completionPercentage": self.completion_percentage,
        }


@dataclass
class BatchMigrationResult:
    """Result of migrating a batch of records."""

    # Buckets
    migrated: list[MigrationOutcome] = field(default_factory=list)
    issues: list[MigrationOutcome] = field(default_factory=list)
    already_migrated: list[RawLessonRecord] = field(default_factory=list)
    failed: list[FailedMigration] = field(default_factory=list)

    # Aggregates
    stats: MigrationStats = field(default_factory=MigrationStats)

    # Timing
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: datetime | None = None
    duration_seconds: float = 0.0

    _order: list[tuple[int, RawLessonRecord]] = field(default_factory=list, repr=False)

    @property
    def total(self) -> int:
        return self.stats.total

    @property
    def succeeded(self) -> int:
        """Records that came out as a canonical lesson."""
        return len(self.migrated) + len(self.issues) + len(self.already_migrated)

    @property
    def completion_percentage(self) -> float:
        return self.stats.completion_percentage

    @property
    def success(self) -> bool:
        return not self.failed and not self.issues

    def canonical_lessons(self) -> list[RawLessonRecord]:
        """Every canonical lesson produced, in input order."""
        return [lesson for _, lesson in sorted(self._order, key=lambda item: item[0])]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "summary": {
                "total": self.total,
                "migrated": len(self.migrated),
                "issues": len(self.issues),
                "alreadyMigrated": len(self.already_migrated),
                "failed": len(self.failed),
            },
            "stats": self.stats.to_dict(),
            "durationSeconds": self.duration_seconds,
            "migrated": [
                {"index": o.index, "lessonId": o.lesson_id, "format": o.detected_format.value,
                 "validation": o.report.to_dict()}
                for o in self.migrated
            ],
            "issues": [
                {"index": o.index, "lessonId": o.lesson_id, "format": o.detected_format.value,
                 "validation": o.report.to_dict()}
                for o in self.issues
            ],
            "alreadyMigrated": [_lesson_ref(lesson) for lesson in self.already_migrated],
            "failed": [
                {"index": f.index, "lesson": f.lesson_ref, "format": f.detected_format.value,
                 "error": f.error, "errorType": f.error_type}
                for f in self.failed
            ],
        }


# =============================================================================
# Orchestrator
# =============================================================================


class MigrationOrchestrator:
    """
    Batch migration orchestrator.

    Example:
        orchestrator = MigrationOrchestrator(
            migrator=LessonMigrator(factory=BlockFactory.seeded(1)),
            logger=logger.bind(job="nightly"),
        )
        result = orchestrator.run(records)
        print(result.to_dict()["summary"])
    """

    def __init__(
        self,
        migrator: LessonMigrator | None = None,
        validator: LessonValidator | None = None,
        logger: StructuredLogger | None = None,
    ):
        """
        Initialize orchestrator.

        Args:
            migrator: Detector + transformers for this run
            validator: Validator applied to every migrated lesson
            logger: Structured logger; defaults to loguru bound to this component
        """
        self.migrator = migrator or LessonMigrator()
        self.validator = validator or LessonValidator(
            settings=self.migrator.settings, detector=self.migrator.detector
        )
        self.logger = logger or default_logger()

    def run(self, records: Iterable[Any]) -> BatchMigrationResult:
        """
        Migrate every record of a batch.

        Args:
            records: Raw lesson records, processed in order

        Returns:
            BatchMigrationResult with buckets and aggregate counts
        """
        result = BatchMigrationResult()
        self.logger.info("Starting batch migration...")

        for index, record in enumerate(records):
            self._process(index, record, result)

        result.completed_at = datetime.now()
        result.duration_seconds = (result.completed_at - result.started_at).total_seconds()

        self.logger.info(
            f"Batch migration complete: {len(result.migrated)} migrated, "
            f"{len(result.issues)} with issues, {len(result.already_migrated)} already migrated, "
            f"{len(result.failed)} failed"
        )
        return result

    def _process(self, index: int, record: Any, result: BatchMigrationResult) -> None:
        detected = self.migrator.detect(record)
        result.stats.count(detected)
        ref = _lesson_ref(record)
        self.logger.debug(f"Record {index} ({ref!r}): format detected {detected.value}")

        if detected is DetectedFormat.CANONICAL:
            result.already_migrated.append(record)
            result._order.append((index, record))
            return

        try:
            lesson = self.migrator.migrate(record, detected, logger=self.logger)
        except Exception as e:
            self.logger.error(f"Failed to migrate record {index} ({ref!r}): {e}")
            result.failed.append(FailedMigration(
                index=index,
                record=record,
                detected_format=detected,
                error=str(e),
                error_type=type(e).__name__,
            ))
            return

        report = self.validator.validate(lesson, record, logger=self.logger)
        outcome = MigrationOutcome(index, record, lesson, detected, report)
        result._order.append((index, lesson))

        if report.is_valid:
            result.migrated.append(outcome)
        else:
            self.logger.warning(
                f"Record {index} ({ref!r}) migrated with {len(report.errors)} validation errors"
            )
            result.issues.append(outcome)


def migration_stats(records: Iterable[Any], detector: FormatDetector | None = None) -> MigrationStats:
    """Aggregate format counts for a batch without transforming anything."""
    detector = detector or FormatDetector()
    stats = MigrationStats()
    for record in records:
        stats.count(detector.detect(record))
    return stats
