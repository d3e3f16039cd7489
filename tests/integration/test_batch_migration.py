"""
Integration tests for MigrationOrchestrator.

Runs whole batches through detect -> transform -> validate.
Run: pytest tests/integration/test_batch_migration.py -v
"""
import copy

import pytest

from src.lessons import BlockFactory, LessonMigrator, MigrationOrchestrator, migration_stats
from src.lessons.logs import StructuredLogger


class RecordingLogger:
    """Collects log lines per level."""

    def __init__(self):
        self.lines = []

    def _log(self, level, message):
        self.lines.append((level, message))

    def debug(self, message):
        self._log("debug", message)

    def info(self, message):
        self._log("info", message)

    def warning(self, message):
        self._log("warning", message)

    def error(self, message):
        self._log("error", message)


@pytest.fixture
def log():
    return RecordingLogger()


@pytest.fixture
def orchestrator(factory, log):
    return MigrationOrchestrator(migrator=LessonMigrator(factory=factory), logger=log)


@pytest.fixture
def batch(legacy_record, tiered_record, slides_record, canonical_lesson):
    malformed = copy.deepcopy(legacy_record)
    malformed["id"] = "broken-lesson"
    malformed["adaptedContent"]["assessment"]["questions"] = "not a list"
    return [legacy_record, tiered_record, malformed, slides_record, canonical_lesson]


class TestBatchRun:

    def test_one_failure_does_not_stop_batch(self, orchestrator, batch):
        result = orchestrator.run(batch)

        assert result.total == 5
        assert result.succeeded == 4
        assert len(result.migrated) == 3
        assert len(result.already_migrated) == 1
        assert len(result.failed) == 1

        failure = result.failed[0]
        assert failure.index == 2
        assert failure.lesson_ref == "broken-lesson"
        assert failure.error_type == "MalformedLessonError"
        assert failure.error == "'adaptedContent.assessment.questions' must be a list, got str"

    def test_buckets_keep_input_order(self, orchestrator, batch):
        result = orchestrator.run(batch)
        assert [outcome.index for outcome in result.migrated] == [0, 1, 3]
        assert [lesson["id"] for lesson in result.canonical_lessons()] == [
            "intro-to-variables", "what-is-ml", "neural-networks", "intro-to-variables",
        ]

    def test_already_migrated_untouched(self, orchestrator, batch, canonical_lesson):
        result = orchestrator.run(batch)
        assert result.already_migrated[0] is batch[4]

    def test_stats(self, orchestrator, batch):
        stats = orchestrator.run(batch).stats
        assert stats.by_format == {"legacy": 2, "tiered": 1, "slides": 1, "canonical": 1}
        assert stats.needs_migration == 4
        assert stats.already_migrated == 1
        assert stats.completion_percentage == 20.0

    def test_invalid_lesson_goes_to_issues(self, orchestrator, legacy_record):
        legacy_record["adaptedContent"]["assessment"]["questions"] = [
            {"question": "Only one option?", "options": [{"text": "Yes", "correct": True}]},
        ]
        result = orchestrator.run([legacy_record])
        assert len(result.issues) == 1
        assert not result.success
        assert "Quiz block 5 needs at least 2 options" in result.issues[0].report.errors

    def test_ids_preserved(self, orchestrator, batch):
        result = orchestrator.run(batch)
        for outcome in result.migrated:
            assert outcome.lesson_id == outcome.original["id"]

    def test_empty_batch(self, orchestrator):
        result = orchestrator.run([])
        assert result.total == 0
        assert result.completion_percentage == 0.0
        assert result.success

    def test_to_dict_summary(self, orchestrator, batch):
        data = orchestrator.run(batch).to_dict()
        assert data["summary"] == {
            "total": 5, "migrated": 3, "issues": 0, "alreadyMigrated": 1, "failed": 1,
        }
        assert data["failed"][0]["lesson"] == "broken-lesson"

    def test_unknown_record_with_odd_fields_is_migrated(self, orchestrator):
        result = orchestrator.run([{"id": "odd", "title": "Odd lesson", "tags": "ai"}])
        assert result.failed == []
        assert len(result.migrated) == 1
        lesson = result.migrated[0].lesson
        assert lesson["tags"] == []
        assert lesson["migrationMetadata"]["needsManualReview"] is True

    def test_non_mapping_records(self, orchestrator):
        result = orchestrator.run([None, "text"])
        assert result.stats.by_format == {"unknown": 2}
        assert len(result.failed) == 2


class TestInjectedLogger:

    def test_logger_protocol(self, log):
        assert isinstance(log, StructuredLogger)

    def test_failure_logged(self, orchestrator, batch, log):
        orchestrator.run(batch)
        errors = [message for level, message in log.lines if level == "error"]
        assert len(errors) == 1
        assert "broken-lesson" in errors[0]

    def test_summary_logged(self, orchestrator, batch, log):
        orchestrator.run(batch)
        assert log.lines[-1] == (
            "info",
            "Batch migration complete: 3 migrated, 0 with issues, 1 already migrated, 1 failed",
        )

    def test_migrator_logs_through_injected_logger(self, orchestrator, legacy_record, log):
        orchestrator.run([legacy_record])
        assert ("info", "Migrating lesson 'intro-to-variables' from format: legacy") in log.lines

    def test_validator_logs_through_injected_logger(self, orchestrator, legacy_record, log):
        legacy_record["adaptedContent"]["assessment"]["questions"] = [
            {"question": "Only one option?", "options": [{"text": "Yes", "correct": True}]},
        ]
        orchestrator.run([legacy_record])
        warnings = [message for level, message in log.lines if level == "warning"]
        assert any(message.startswith("Lesson 'intro-to-variables': ") for message in warnings)
        assert "  - Quiz block 5 needs at least 2 options" in warnings


class TestDeterminism:

    def test_seeded_runs_match(self, batch, fixed_time):
        def run():
            factory = BlockFactory.seeded(5, clock=lambda: fixed_time)
            return MigrationOrchestrator(migrator=LessonMigrator(factory=factory)).run(
                copy.deepcopy(batch)
            ).canonical_lessons()

        assert run() == run()


def test_migration_stats_without_transforming(batch):
    stats = migration_stats(batch)
    assert stats.total == 5
    assert stats.to_dict()["completionPercentage"] == 20.0
