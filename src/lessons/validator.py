"""
Validator for canonical lessons.

Inspects a canonical lesson dict, optionally against the raw record it was
migrated from, and classifies every finding as an error (the lesson cannot
be used) or a warning (worth a look). Validation never raises.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from config import Settings, get_settings

from .detector import FormatDetector
from .logs import StructuredLogger, default_logger
from .models import KNOWN_BLOCK_TYPES, REQUIRED_CONTENT_FIELDS, BlockType, DetectedFormat, ValidationReport

REQUIRED_FIELDS = ("id", "title", "content")
ADMIN_FIELDS = ("lessonType", "estimatedTimeMinutes", "xpAward")
CORE_CONCEPT_PREFIX = 50


# =============================================================================
# Block accessors
# =============================================================================


def block_field(block: Mapping[str, Any], name: str) -> Any:
    """Read a kind-specific field from the payload, else from the block itself."""
    payload = block.get("content")
    if isinstance(payload, Mapping) and name in payload:
        return payload[name]
    return block.get(name)


def block_text(block: Mapping[str, Any]) -> str:
    """The block's primary text: `value` first, then the payload text."""
    value = block.get("value")
    if isinstance(value, str) and value:
        return value
    text = block_field(block, "text")
    return text if isinstance(text, str) else ""


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# =============================================================================
# Validator
# =============================================================================


class LessonValidator:
    """
    Validates canonical lessons.

    Usage:
        validator = LessonValidator()
        report = validator.validate(canonical, original=raw_record)
        if not report.is_valid:
            print(report.errors)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        detector: FormatDetector | None = None,
        logger: StructuredLogger | None = None,
    ):
        self.settings = settings or get_settings()
        self.detector = detector or FormatDetector()
        self.logger = logger or default_logger()

    def validate(
        self, lesson: Any, original: Any = None, logger: StructuredLogger | None = None
    ) -> ValidationReport:
        """
        Validate a canonical lesson.

        Args:
            lesson: Canonical lesson dict
            original: Raw record the lesson was migrated from (optional)
            logger: Logger for this call, overriding the validator's own

        Returns:
            ValidationReport; is_valid is True iff there are no errors
        """
        log = logger or self.logger
        report = ValidationReport(details={
            "contentBlocks": 0,
            "blockTypes": {},
            "hasMetadata": False,
            "estimatedTime": 0,
        })

        if not isinstance(lesson, Mapping):
            report.errors.append("Lesson must be a mapping")
            return report

        try:
            self._validate_structure(lesson, report)
            self._validate_blocks(lesson, report)
            self._validate_metadata(lesson, report)
            if original is not None:
                self._cross_validate(lesson, original, report)
            self._validate_admin_compatibility(lesson, report)
        except Exception as e:
            report.errors.append(f"Validation error: {e}")
            log.error(f"Validation of lesson {lesson.get('id')!r} failed: {e}")

        self._log_report(lesson, report, log)
        return report

    # -------------------------------------------------------------------------
    # Structure
    # -------------------------------------------------------------------------

    def _validate_structure(self, lesson: Mapping[str, Any], report: ValidationReport) -> None:
        for name in REQUIRED_FIELDS:
            if name not in lesson or lesson[name] is None or lesson[name] == "":
                report.errors.append(f"Missing required field: {name}")

        content = lesson.get("content")
        if content is not None and not isinstance(content, list):
            report.errors.append("Content must be an array")

        lesson_id = lesson.get("id")
        if lesson_id is not None and not isinstance(lesson_id, str):
            report.errors.append("Lesson ID must be a string")

        title = lesson.get("title")
        if isinstance(title, str) and title and len(title) < self.settings.min_title_length:
            report.warnings.append("Title is very short - consider making it more descriptive")

    def _validate_blocks(self, lesson: Mapping[str, Any], report: ValidationReport) -> None:
        content = lesson.get("content")
        if not isinstance(content, list):
            return

        report.details["contentBlocks"] = len(content)
        if not content:
            report.warnings.append("No content blocks found - lesson may be empty")
            return

        counts: dict[str, int] = report.details["blockTypes"]
        for index, block in enumerate(content):
            if not isinstance(block, Mapping):
                report.errors.append(f"Content block {index} must be a mapping")
                continue

            raw_type = block.get("type")
            if not raw_type:
                report.errors.append(f"Content block {index} missing type")
                continue

            kind = raw_type if isinstance(raw_type, str) else str(raw_type)
            counts[kind] = counts.get(kind, 0) + 1

            if kind == BlockType.QUIZ.value:
                self._validate_quiz(block, index, report)
            elif kind == BlockType.TEXT.value:
                self._validate_text(block, index, report)
            elif kind == BlockType.CODE_SANDBOX.value:
                self._validate_sandbox(block, index, report)
            elif kind in KNOWN_BLOCK_TYPES:
                self._validate_required_fields(block, BlockType(kind), index, report)

        if counts.get(BlockType.TEXT.value, 0) == 0:
            report.warnings.append("No text blocks found - lesson may lack instructional content")

        if len(content) > self.settings.max_content_blocks:
            report.warnings.append("Lesson has many content blocks - consider breaking into multiple lessons")

    def _validate_quiz(self, block: Mapping[str, Any], index: int, report: ValidationReport) -> None:
        if not block_field(block, "question"):
            report.errors.append(f"Quiz block {index} missing question")

        options = block_field(block, "options")
        if not isinstance(options, list):
            report.errors.append(f"Quiz block {index} missing or invalid options")
            return

        if len(options) < 2:
            report.errors.append(f"Quiz block {index} needs at least 2 options")

        flagged = sum(
            1 for option in options
            if isinstance(option, Mapping) and (option.get("correct") or option.get("isCorrect"))
        )
        if flagged == 0:
            answer = block_field(block, "correctAnswer")
            if isinstance(answer, int) and not isinstance(answer, bool) and 0 <= answer < len(options):
                flagged = 1

        if flagged == 0:
            report.warnings.append(f"Quiz block {index} has no correct answer marked")
        elif flagged > 1:
            report.warnings.append(f"Quiz block {index} has multiple correct answers - ensure this is intentional")

    def _validate_text(self, block: Mapping[str, Any], index: int, report: ValidationReport) -> None:
        text = block_text(block)
        if not text:
            report.warnings.append(f"Text block {index} has no text content")
            return

        if len(text) < self.settings.min_text_length:
            report.warnings.append(f"Text block {index} has very short content")
        if len(text) > self.settings.max_text_length:
            report.warnings.append(f"Text block {index} has very long content - consider breaking it up")

    def _validate_sandbox(self, block: Mapping[str, Any], index: int, report: ValidationReport) -> None:
        if not block_field(block, "instructions"):
            report.warnings.append(f"Code block {index} has no instructions")
        if not block_field(block, "code"):
            report.warnings.append(f"Code block {index} has no starting code")

    def _validate_required_fields(
        self, block: Mapping[str, Any], kind: BlockType, index: int, report: ValidationReport
    ) -> None:
        for name in REQUIRED_CONTENT_FIELDS.get(kind, ()):
            if block_field(block, name) in (None, ""):
                report.warnings.append(f"Block {index} ({kind.value}) missing '{name}'")

    # -------------------------------------------------------------------------
    # Metadata
    # -------------------------------------------------------------------------

    def _validate_metadata(self, lesson: Mapping[str, Any], report: ValidationReport) -> None:
        metadata = lesson.get("migrationMetadata")
        if isinstance(metadata, Mapping):
            report.details["hasMetadata"] = True
            if not metadata.get("originalFormat"):
                report.warnings.append("Migration metadata missing original format")
            if not metadata.get("migratedAt"):
                report.warnings.append("Migration metadata missing timestamp")

        minutes = lesson.get("estimatedTimeMinutes")
        if minutes is not None:
            if not _is_number(minutes):
                report.warnings.append("Estimated time is not a number")
            else:
                report.details["estimatedTime"] = minutes
                if minutes < self.settings.min_estimated_minutes:
                    report.warnings.append("Estimated time is very short")
                if minutes > self.settings.max_estimated_minutes:
                    report.warnings.append("Estimated time is very long - consider breaking into multiple lessons")

        if not lesson.get("description"):
            report.warnings.append("No lesson description provided")

        if not lesson.get("learningObjectives"):
            report.warnings.append("No learning objectives defined")

    # -------------------------------------------------------------------------
    # Cross-validation against the original record
    # -------------------------------------------------------------------------

    def _cross_validate(self, lesson: Mapping[str, Any], original: Any, report: ValidationReport) -> None:
        if not isinstance(original, Mapping):
            report.warnings.append("Original lesson is not a mapping - skipping comparison")
            return

        if original.get("id") is not None and lesson.get("id") != original.get("id"):
            report.errors.append("Lesson ID changed during migration - this will break references")

        if original.get("title") and lesson.get("title") != original.get("title"):
            report.warnings.append("Lesson title changed during migration")

        content = lesson.get("content")
        if not isinstance(content, list):
            return
        blocks = [block for block in content if isinstance(block, Mapping)]

        original_format = self.detector.detect(original)
        if original_format is DetectedFormat.LEGACY:
            self._check_legacy_fidelity(blocks, original, report)
        elif original_format is DetectedFormat.TIERED:
            self._check_tiered_fidelity(blocks, original, report)
        elif original_format is DetectedFormat.SLIDES:
            self._check_slides_fidelity(blocks, original, report)

    def _check_legacy_fidelity(
        self, blocks: list[Mapping[str, Any]], original: Mapping[str, Any], report: ValidationReport
    ) -> None:
        adapted = original.get("adaptedContent") or {}
        content = adapted.get("content") if isinstance(adapted, Mapping) else None
        if isinstance(content, Mapping) and content.get("keyPoints"):
            if not any("Key Points:" in block_text(block) for block in blocks):
                report.warnings.append("Original key points may not have been migrated")

        assessment = adapted.get("assessment") if isinstance(adapted, Mapping) else None
        questions = assessment.get("questions") if isinstance(assessment, Mapping) else None
        if isinstance(questions, list):
            quiz_count = sum(1 for block in blocks if block.get("type") == BlockType.QUIZ.value)
            if quiz_count != len(questions):
                report.warnings.append(
                    f"Quiz count mismatch: original had {len(questions)}, migrated has {quiz_count}"
                )

    def _check_tiered_fidelity(
        self, blocks: list[Mapping[str, Any]], original: Mapping[str, Any], report: ValidationReport
    ) -> None:
        core_concept = original.get("coreConcept")
        if not isinstance(core_concept, str) or not core_concept:
            return
        prefix = core_concept[:CORE_CONCEPT_PREFIX]
        if not any(prefix in block_text(block) for block in blocks):
            report.warnings.append("Core concept may not have been preserved in migration")

    def _check_slides_fidelity(
        self, blocks: list[Mapping[str, Any]], original: Mapping[str, Any], report: ValidationReport
    ) -> None:
        slides = original.get("slides")
        if isinstance(slides, list) and len(blocks) < len(slides) * 0.5:
            report.warnings.append("Migrated lesson may have lost content during slide conversion")

    # -------------------------------------------------------------------------
    # Admin editor compatibility
    # -------------------------------------------------------------------------

    def _validate_admin_compatibility(self, lesson: Mapping[str, Any], report: ValidationReport) -> None:
        for name in ADMIN_FIELDS:
            if not lesson.get(name):
                report.warnings.append(f"Missing admin field: {name} (will use defaults)")

        content = lesson.get("content")
        if not isinstance(content, list):
            return

        for index, block in enumerate(content):
            if not isinstance(block, Mapping) or not block.get("type"):
                continue
            kind = block["type"]
            if not isinstance(kind, str) or kind not in KNOWN_BLOCK_TYPES:
                report.warnings.append(f"Block {index} type '{kind}' may not be fully supported in admin panel")

    def _log_report(self, lesson: Mapping[str, Any], report: ValidationReport, log: StructuredLogger) -> None:
        lesson_id = lesson.get("id")
        if report.errors:
            log.warning(f"Lesson {lesson_id!r}: {len(report.errors)} validation errors")
            for error in report.errors[:5]:
                log.warning(f"  - {error}")
            if len(report.errors) > 5:
                log.warning(f"  ... and {len(report.errors) - 5} more errors")
        if report.warnings:
            log.debug(f"Lesson {lesson_id!r}: {len(report.warnings)} validation warnings")


def validate_lesson(lesson: Any, original: Any = None) -> ValidationReport:
    """Convenience function for validation."""
    return LessonValidator().validate(lesson, original)


# =============================================================================
# Batch validation
# =============================================================================


@dataclass
class LessonValidationResult:
    """Validation outcome for one lesson of a batch."""
    lesson_id: Any
    lesson_title: Any
    report: ValidationReport


@dataclass
class BatchValidationResult:
    """Validation outcome for a batch of canonical lessons."""
    total_lessons: int = 0
    valid_lessons: int = 0
    invalid_lessons: int = 0
    lessons_with_warnings: int = 0
    results: list[LessonValidationResult] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalLessons": self.total_lessons,
            "validLessons": self.valid_lessons,
            "invalidLessons": self.invalid_lessons,
            "lessonsWithWarnings": self.lessons_with_warnings,
            "results": [
                {
                    "lessonId": result.lesson_id,
                    "lessonTitle": result.lesson_title,
                    "validation": result.report.to_dict(),
                }
                for result in self.results
            ],
        }


def batch_validate(
    lessons: Iterable[Any],
    originals: Mapping[Any, Any] | None = None,
    validator: LessonValidator | None = None,
) -> BatchValidationResult:
    """
    Validate many canonical lessons.

    Args:
        lessons: Canonical lesson dicts
        originals: Raw records keyed by lesson id, used for cross-validation
        validator: Validator to use (defaults to a fresh LessonValidator)
    """
    validator = validator or LessonValidator()
    originals = originals or {}
    result = BatchValidationResult()

    for lesson in lessons:
        lesson_id = lesson.get("id") if isinstance(lesson, Mapping) else None
        title = lesson.get("title") if isinstance(lesson, Mapping) else None
        original = originals.get(lesson_id) if isinstance(lesson_id, str) else None
        report = validator.validate(lesson, original)

        result.total_lessons += 1
        result.results.append(LessonValidationResult(lesson_id, title, report))
        if report.is_valid:
            result.valid_lessons += 1
        else:
            result.invalid_lessons += 1
        if report.has_warnings:
            result.lessons_with_warnings += 1

    return result
