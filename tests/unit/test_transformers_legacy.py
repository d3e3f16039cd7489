"""
Unit tests for LegacyLessonTransformer.

Run: pytest tests/unit/test_transformers_legacy.py -v
"""
import copy

import pytest

from src.lessons.exceptions import MalformedLessonError, TransformationError
from src.lessons.transformers import LegacyLessonTransformer


@pytest.fixture
def transformer(factory):
    return LegacyLessonTransformer(factory=factory)


class TestLegacyBlocks:
    """Block layout of a migrated legacy record."""

    def test_block_order(self, transformer, legacy_record):
        lesson = transformer.transform(legacy_record).to_dict()
        assert [block["type"] for block in lesson["content"]] == [
            "heading", "text", "text", "text", "text", "quiz", "quiz", "code-sandbox",
        ]

    def test_title_heading_first(self, transformer, legacy_record):
        first = transformer.transform(legacy_record).to_dict()["content"][0]
        assert first["content"] == {"text": "Introduction to Variables", "level": 1}
        assert first["value"] == "Introduction to Variables"

    def test_key_points_aggregate_into_one_block(self, transformer, legacy_record):
        content = transformer.transform(legacy_record).to_dict()["content"]
        assert content[3]["value"] == "**Key Points:**\n• Variables have names\n• Values can change"
        assert content[4]["value"].startswith("**Examples:**\n• let x = 5")

    def test_one_quiz_per_question(self, transformer, legacy_record):
        content = transformer.transform(legacy_record).to_dict()["content"]
        quizzes = [block for block in content if block["type"] == "quiz"]
        assert len(quizzes) == len(legacy_record["adaptedContent"]["assessment"]["questions"])

    def test_quiz_payload(self, transformer, legacy_record):
        quizzes = [
            block for block in transformer.transform(legacy_record).to_dict()["content"]
            if block["type"] == "quiz"
        ]
        assert quizzes[0]["content"] == {
            "question": "What does a variable hold?",
            "options": ["A value", "A keyboard"],
            "correctAnswer": 0,
            "explanation": "Variables hold values.",
        }
        assert quizzes[1]["content"]["explanation"] == "Great job!"

    def test_sandbox_block(self, transformer, legacy_record):
        sandbox = transformer.transform(legacy_record).to_dict()["content"][-1]
        assert sandbox["content"] == {
            "language": "javascript",
            "code": "// Write your code here",
            "title": "Code Exercise",
            "instructions": "Declare a variable called age.",
        }

    def test_sandbox_only_when_required(self, transformer, legacy_record):
        legacy_record["sandbox"] = {"required": False}
        content = transformer.transform(legacy_record).to_dict()["content"]
        assert all(block["type"] != "code-sandbox" for block in content)

    def test_sandbox_default_instructions(self, transformer, legacy_record):
        del legacy_record["adaptedContent"]["sandbox"]
        sandbox = transformer.transform(legacy_record).to_dict()["content"][-1]
        assert sandbox["content"]["instructions"] == "Try out the concepts!"


class TestLegacyLesson:
    """Lesson envelope and per-source defaults."""

    def test_source_values_kept(self, transformer, legacy_record):
        lesson = transformer.transform(legacy_record).to_dict()
        assert lesson["id"] == "intro-to-variables"
        assert lesson["estimatedTimeMinutes"] == 12
        assert lesson["xpAward"] == 80
        assert lesson["category"] == "Programming"
        assert lesson["lessonType"] == "concept_explanation"
        assert lesson["learningObjectives"] == ["Declare variables"]

    def test_defaults(self, transformer):
        lesson = transformer.transform({"id": "bare", "category": "", "difficulty": "Easy", "adaptedContent": {}}).to_dict()
        assert lesson["title"] == "Untitled Lesson"
        assert lesson["description"] == "No description available"
        assert lesson["estimatedTimeMinutes"] == 15
        assert lesson["xpAward"] == 100
        assert lesson["category"] == "General"
        assert [block["type"] for block in lesson["content"]] == ["heading"]

    def test_metadata(self, transformer, legacy_record, fixed_time):
        metadata = transformer.transform(legacy_record).to_dict()["migrationMetadata"]
        assert metadata == {
            "originalFormat": "legacy",
            "migratedAt": fixed_time.isoformat(),
            "version": "1.0",
            "needsManualReview": False,
        }

    def test_content_versions_wrap_blocks(self, transformer, legacy_record):
        lesson = transformer.transform(legacy_record).to_dict()
        page = lesson["contentVersions"]["free"]["pages"][0]
        assert page["id"] == "intro-to-variables-page-1"
        assert page["title"] == "Introduction"
        assert page["blocks"] == lesson["content"]

    def test_missing_id_is_generated(self, transformer, legacy_record):
        del legacy_record["id"]
        lesson = transformer.transform(legacy_record).to_dict()
        assert lesson["id"].startswith("lesson-")

    def test_input_not_mutated(self, transformer, legacy_record):
        before = copy.deepcopy(legacy_record)
        lesson = transformer.transform(legacy_record).to_dict()
        lesson["learningObjectives"].append("Changed")
        assert legacy_record == before


class TestLegacyMalformed:
    """Wrongly-shaped fields raise MalformedLessonError."""

    def test_questions_not_a_list(self, transformer, legacy_record):
        legacy_record["adaptedContent"]["assessment"]["questions"] = "What is x?"
        with pytest.raises(MalformedLessonError) as exc_info:
            transformer.transform(legacy_record)
        assert exc_info.value.field == "adaptedContent.assessment.questions"
        assert "must be a list, got str" in str(exc_info.value)

    def test_options_not_a_list(self, transformer, legacy_record):
        legacy_record["adaptedContent"]["assessment"]["questions"][0]["options"] = "A, B"
        with pytest.raises(MalformedLessonError, match=r"questions\[0\]\.options"):
            transformer.transform(legacy_record)

    def test_key_points_not_a_list(self, transformer, legacy_record):
        legacy_record["adaptedContent"]["content"]["keyPoints"] = {"a": 1}
        with pytest.raises(TransformationError):
            transformer.transform(legacy_record)

    def test_non_mapping_record(self, transformer):
        with pytest.raises(MalformedLessonError, match="'record' must be a mapping"):
            transformer.transform(["not", "a", "record"])
