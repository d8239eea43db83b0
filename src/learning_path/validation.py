"""
Boundary validation - fail fast on malformed engine inputs.

Philosophy:
- The engine should NOT plan over broken reference data
- No silent corrections - explicit failures only
- Checks run once, before any computation
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence

from loguru import logger

from src.learning_path.errors import InvalidCurriculumError, InvalidInputError
from src.learning_path.models import (
    AssessmentResult,
    CurriculumTopic,
    LearningResource,
    UserLearningProfile,
)

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 10


def validate_topics(topics: Sequence[CurriculumTopic]) -> None:
    """Reject duplicate ids, self-prerequisites and out-of-range values."""
    seen: set[str] = set()
    for topic in topics:
        if topic.id in seen:
            raise InvalidCurriculumError(f"Duplicate topic id: {topic.id}")
        seen.add(topic.id)

        if topic.id in topic.prerequisites:
            raise InvalidCurriculumError(f"Topic {topic.id} lists itself as a prerequisite")
        if not MIN_DIFFICULTY <= topic.difficulty <= MAX_DIFFICULTY:
            raise InvalidCurriculumError(
                f"Topic {topic.id} difficulty {topic.difficulty} outside "
                f"{MIN_DIFFICULTY}-{MAX_DIFFICULTY}"
            )
        if topic.estimated_duration < 0:
            raise InvalidCurriculumError(
                f"Topic {topic.id} has negative duration {topic.estimated_duration}"
            )


def validate_resources(resources: Sequence[LearningResource]) -> None:
    seen: set[str] = set()
    for resource in resources:
        if resource.id in seen:
            raise InvalidCurriculumError(f"Duplicate resource id: {resource.id}")
        seen.add(resource.id)

        if not MIN_DIFFICULTY <= resource.difficulty <= MAX_DIFFICULTY:
            raise InvalidCurriculumError(
                f"Resource {resource.id} difficulty {resource.difficulty} outside "
                f"{MIN_DIFFICULTY}-{MAX_DIFFICULTY}"
            )


def validate_profile(profile: UserLearningProfile) -> None:
    if not 1 <= profile.learning_pace <= 10:
        raise InvalidInputError(f"Learning pace {profile.learning_pace} outside 1-10")


def validate_results(results: Iterable[AssessmentResult]) -> None:
    for result in results:
        if not 0 <= result.score <= 100:
            raise InvalidInputError(
                f"Assessment score {result.score} for topic {result.topic_id} outside 0-100"
            )


def validate_intensity(intensity: int) -> None:
    if not 1 <= intensity <= 10:
        raise InvalidInputError(f"Adaptation intensity {intensity} outside 1-10")


def validate_inputs(
    topics: Sequence[CurriculumTopic],
    resources: Sequence[LearningResource],
    profile: UserLearningProfile,
    results: Iterable[AssessmentResult] = (),
) -> None:
    """Run every boundary check for a build or adapt call."""
    validate_topics(topics)
    validate_resources(resources)
    validate_profile(profile)
    validate_results(results)
    logger.debug(f"Validated {len(topics)} topics and {len(resources)} resources")
