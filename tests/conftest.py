"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import copy
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.lessons.blocks import BlockFactory  # noqa: E402

FIXED_TIME = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (batch runs and CLI)")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def fixed_time():
    """Frozen clock value used by the factory fixture."""
    return FIXED_TIME


@pytest.fixture
def factory():
    """Seeded block factory with a frozen clock."""
    return BlockFactory.seeded(42, clock=lambda: FIXED_TIME)


@pytest.fixture
def legacy_record():
    """Provide a sample legacy (adaptedContent) record."""
    return {
        "id": "intro-to-variables",
        "title": "Introduction to Variables",
        "description": "Learn how programs remember values.",
        "difficulty": "Beginner",
        "category": "Programming",
        "adaptedContent": {
            "content": {
                "introduction": "Variables are named containers for values.",
                "keyPoints": ["Variables have names", "Values can change"],
                "examples": ["let x = 5", "const name = 'Ada'"],
            },
            "assessment": {
                "questions": [
                    {
                        "question": "What does a variable hold?",
                        "options": [
                            {"text": "A value", "correct": True},
                            {"text": "A keyboard"},
                        ],
                        "explanation": "Variables hold values.",
                    },
                    {
                        "question": "Can a let variable change?",
                        "options": [{"text": "Yes", "correct": True}, {"text": "No"}],
                    },
                ]
            },
            "sandbox": {"instructions": "Declare a variable called age."},
            "estimatedTime": 12,
            "xpReward": 80,
        },
        "sandbox": {"required": True},
        "learningObjectives": ["Declare variables"],
        "tags": ["basics"],
    }


@pytest.fixture
def tiered_record():
    """Provide a sample difficulty-tiered record."""
    return {
        "id": "what-is-ml",
        "title": "What is Machine Learning?",
        "coreConcept": "Machine learning lets computers learn patterns from data.",
        "lessonType": "concept_explanation",
        "content": {
            "free": {
                "introduction": "Start with the idea of learning from examples.",
                "mainContent": {
                    "Supervised": "Learning from labelled examples.",
                    "Unsupervised": "Finding structure without labels.",
                    "Diagram": {"src": "ml.png"},
                },
                "keyPoints": ["Data drives models", "Models generalize"],
                "examples": ["Spam filters", "Recommendations"],
            },
            "advanced": {"introduction": "Gradient descent in depth."},
        },
        "sandbox": {
            "beginner": {
                "scenarios": [
                    {"task": "Label five emails as spam or not spam.", "code": "const emails = [];"},
                    {"instructions": "Count the spam emails."},
                ]
            }
        },
        "learningObjectives": ["Define machine learning"],
    }


@pytest.fixture
def slides_record():
    """Provide a sample slide-sequence record."""
    return {
        "id": "neural-networks",
        "title": "Neural Networks",
        "description": "How neurons stack into networks.",
        "estimatedTime": 30,
        "xpReward": 200,
        "difficulty": "Intermediate",
        "slides": [
            {
                "type": "intro",
                "content": {"title": "Welcome", "explanation": "Neural networks are layered functions."},
            },
            {
                "type": "concept",
                "content": {
                    "title": "Neurons",
                    "explanation": "A neuron weighs its inputs and fires.",
                    "keyPoints": ["Weights", "Bias", "Activation"],
                },
            },
            {
                "type": "quiz",
                "content": {
                    "question": "What does a neuron apply after summing?",
                    "options": [{"text": "An activation", "correct": True}, {"text": "A database"}],
                    "explanation": "Activations add non-linearity.",
                },
            },
            {"type": "progress_checkpoint", "content": {"title": "Halfway!", "message": "Keep going."}},
            {"type": "example", "content": {"example": "Image classifiers stack many layers."}},
            {"type": "sandbox", "content": {"instructions": "Build a single neuron.", "code": "function neuron() {}"}},
            {"type": "fill-blank", "content": {"sentence": "A neuron sums its ___ inputs."}},
        ],
    }


@pytest.fixture
def canonical_lesson(factory, legacy_record):
    """Provide a lesson already in the canonical block format."""
    from src.lessons.transformers import LegacyLessonTransformer

    return LegacyLessonTransformer(factory=factory).transform(copy.deepcopy(legacy_record)).to_dict()
