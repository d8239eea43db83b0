"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.learning_path.models import (  # noqa: E402
    AssessmentResult,
    CurriculumTopic,
    KeyStage,
    LearningResource,
    LearningStyle,
    PathGenerationParams,
    Subject,
    UserLearningProfile,
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "property: Property-based tests (hypothesis)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "property" in str(item.fspath):
            item.add_marker(pytest.mark.property)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def clock():
    """Fixed 'now' so paths and events are reproducible."""
    return datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)


def make_topic(topic_id, prerequisites=(), difficulty=1, order=0, duration=60, **kwargs):
    """Build a KS2 maths topic unless subject/key_stage are overridden."""
    return CurriculumTopic(
        id=topic_id,
        subject=kwargs.pop("subject", Subject.MATHS),
        key_stage=kwargs.pop("key_stage", KeyStage.KS2),
        prerequisites=tuple(prerequisites),
        difficulty=difficulty,
        order=order,
        estimated_duration=duration,
        name=kwargs.pop("name", topic_id.replace("-", " ").title()),
        **kwargs,
    )


def make_resource(resource_id, topic_ids, styles=(), interests=(), difficulty=1):
    return LearningResource(
        id=resource_id,
        topic_ids=tuple(topic_ids),
        learning_styles=tuple(styles),
        interest_categories=tuple(interests),
        difficulty=difficulty,
    )


@pytest.fixture
def maths_topics():
    """
    KS2 maths graph (300 minutes in total) plus out-of-scope topics.

        place-value -> addition -> multiplication -> fractions
                    -> subtraction ---------------->
    """
    return [
        make_topic("place-value", difficulty=1, order=1),
        make_topic("addition", ["place-value"], difficulty=2, order=1),
        make_topic("subtraction", ["place-value"], difficulty=2, order=2),
        make_topic("multiplication", ["addition"], difficulty=3, order=1),
        make_topic("fractions", ["multiplication", "subtraction"], difficulty=4, order=1),
        make_topic("algebra", ["fractions"], difficulty=6, key_stage=KeyStage.KS3),
        make_topic("phonics", subject=Subject.ENGLISH),
    ]


@pytest.fixture
def maths_resources():
    return [
        make_resource("pv-video", ["place-value"], [LearningStyle.VISUAL], ["sports"], 1),
        make_resource("pv-text", ["place-value"], [LearningStyle.READING_WRITING], [], 3),
        make_resource(
            "add-game", ["addition"], [LearningStyle.KINESTHETIC, LearningStyle.VISUAL], ["games"], 4
        ),
        make_resource("add-sheet", ["addition"], [LearningStyle.READING_WRITING], [], 8),
        make_resource("sub-video", ["subtraction"], [LearningStyle.VISUAL], [], 2),
        make_resource("mult-song", ["multiplication"], [LearningStyle.AUDITORY], ["music"], 5),
        make_resource("mult-challenge", ["multiplication"], [LearningStyle.VISUAL], [], 9),
        make_resource(
            "frac-pizza", ["fractions"], [LearningStyle.VISUAL, LearningStyle.KINESTHETIC], ["cooking"], 3
        ),
        make_resource("frac-proof", ["fractions"], [LearningStyle.READING_WRITING], [], 7),
    ]


@pytest.fixture
def profile():
    return UserLearningProfile(
        dominant_learning_style=LearningStyle.VISUAL,
        secondary_learning_style=LearningStyle.KINESTHETIC,
        interests=("sports", "cooking"),
        learning_pace=5,
    )


@pytest.fixture
def params():
    """Secure proficiency at intensity 10 keeps every resource in the pool."""
    return PathGenerationParams(
        user_id="learner-1",
        subject=Subject.MATHS,
        key_stage=KeyStage.KS2,
        starting_proficiency="secure",
        adaptation_intensity=10,
    )


@pytest.fixture
def make_result(clock):
    def _make(topic_id, score, subject=None):
        return AssessmentResult(topic_id=topic_id, score=score, timestamp=clock, subject=subject)
    return _make
