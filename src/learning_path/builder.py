"""
Learning Path Builder.

Assembles a new LearningPath from a generation request:
1. Scope the catalogue to the requested subject and key stage
2. Pick targets (focus list or whole scope, minus exclusions)
3. Optionally add the prerequisite closure
4. Sequence topics topologically
5. Rank each topic's resources for the learner
6. Gate units (first Available, the rest Locked)
7. Narrow resource pools to the learner's proficiency
8. Estimate the completion date from durations and pace
"""
from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from fractions import Fraction

from loguru import logger

from src.learning_path.difficulty import DifficultyAdjuster
from src.learning_path.models import (
    AssessmentResult,
    CurriculumTopic,
    LearningPath,
    LearningPathUnit,
    LearningResource,
    PathGenerationParams,
    TopicStatus,
    UserLearningProfile,
)
from src.learning_path.policy import DEFAULT_POLICY, PathPolicy
from src.learning_path.prerequisites import PrerequisiteResolver
from src.learning_path.proficiency import ProficiencyEstimator
from src.learning_path.resources import ResourceSelector
from src.learning_path.sequencer import TopicSequencer
from src.learning_path.validation import validate_inputs


def estimate_completion_date(
    units: Sequence[LearningPathUnit],
    learning_pace: int,
    start: datetime,
    policy: PathPolicy = DEFAULT_POLICY,
) -> datetime:
    """
    Estimate when a learner will finish a set of units.

    Total duration is scaled by baseline_pace / learning_pace (a faster
    pace shortens the estimate) and spread over a fixed daily budget.

    Args:
        units: Units to complete
        learning_pace: Learner pace (1-10)
        start: Date the path starts
        policy: Supplies the baseline pace and daily study minutes

    Returns:
        start plus the whole number of study days needed
    """
    total_minutes = sum(unit.estimated_duration for unit in units)
    # ceil() must see 150/30 as exactly 5
    adjusted_minutes = Fraction(total_minutes * policy.baseline_pace, learning_pace)
    days = math.ceil(adjusted_minutes / policy.daily_study_minutes)
    return start + timedelta(days=days)


def derive_path_id(params: PathGenerationParams, now: datetime) -> str:
    return f"path-{params.user_id}-{params.subject.value}-{int(now.timestamp() * 1000)}"


class PathBuilder:
    """
    Build personalised learning paths.

    Pure with respect to its arguments: inputs are never mutated and the
    same inputs (including ``now``) always produce the same path.
    """

    def __init__(self, policy: PathPolicy | None = None):
        self.policy = policy or DEFAULT_POLICY
        self._sequencer = TopicSequencer()
        self._selector = ResourceSelector()
        self._adjuster = DifficultyAdjuster()

    def build(
        self,
        params: PathGenerationParams,
        topics: Sequence[CurriculumTopic],
        resources: Sequence[LearningResource],
        profile: UserLearningProfile,
        assessment_results: Sequence[AssessmentResult] = (),
        now: datetime | None = None,
    ) -> LearningPath:
        """
        Generate a learning path for a request.

        Args:
            params: Generation request
            topics: Full curriculum catalogue
            resources: Full resource catalogue
            profile: Learner profile
            assessment_results: Learner's assessment history
            now: Creation time (default: current UTC time)

        Returns:
            A new LearningPath with overall progress 0

        Raises:
            InvalidCurriculumError: Malformed catalogue (incl. prerequisite cycles)
            InvalidInputError: Out-of-range profile or results
        """
        validate_inputs(topics, resources, profile, assessment_results)
        now = now or datetime.now(timezone.utc)

        in_scope = [
            topic for topic in topics
            if topic.subject == params.subject and topic.key_stage == params.key_stage
        ]
        included = self._included_topic_ids(params, topics, in_scope)
        selected = [topic for topic in in_scope if topic.id in included]
        sequence = self._sequencer.sequence(selected)

        by_id = {topic.id: topic for topic in selected}
        units = [
            self._build_unit(by_id[topic_id], position, resources, profile, params)
            for position, topic_id in enumerate(sequence)
        ]

        proficiency = params.starting_proficiency or ProficiencyEstimator.estimate_for_subject(
            assessment_results, params.subject, topics
        )
        units = self._adjuster.adjust(units, proficiency, params.adaptation_intensity)

        path = LearningPath(
            id=params.path_id or derive_path_id(params, now),
            user_id=params.user_id,
            subject=params.subject,
            key_stage=params.key_stage,
            units=tuple(units),
            created_at=now,
            updated_at=now,
            estimated_completion_date=estimate_completion_date(
                units, profile.learning_pace, now, self.policy
            ),
            adaptation_intensity=params.adaptation_intensity,
            last_assessment_date=None,
            title=f"{params.subject.display_name} Learning Path",
            description=(
                f"Personalised learning path for {params.subject.display_name} "
                f"at {params.key_stage.value}"
            ),
        )

        logger.info(
            f"Built path {path.id}: {len(path.units)} units, "
            f"proficiency={proficiency.value}, "
            f"completion={path.estimated_completion_date.date().isoformat()}"
        )
        return path

    def _included_topic_ids(
        self,
        params: PathGenerationParams,
        topics: Sequence[CurriculumTopic],
        in_scope: Sequence[CurriculumTopic],
    ) -> set[str]:
        if params.focus_topics is not None:
            targets = list(params.focus_topics)
        else:
            targets = [topic.id for topic in in_scope]

        excluded = set(params.exclude_topics)
        targets = [topic_id for topic_id in targets if topic_id not in excluded]

        included = set(targets)
        if params.include_prerequisites:
            prerequisites = PrerequisiteResolver(topics).resolve(targets)
            included.update(prerequisites)
        return included

    def _build_unit(
        self,
        topic: CurriculumTopic,
        position: int,
        resources: Sequence[LearningResource],
        profile: UserLearningProfile,
        params: PathGenerationParams,
    ) -> LearningPathUnit:
        topic_resources = self._selector.resources_for_topic(resources, topic.id)
        if params.adapt_to_learning_style or params.adapt_to_interests:
            topic_resources = self._selector.rank(topic_resources, profile)

        return LearningPathUnit(
            id=f"unit-{topic.id}",
            topic_id=topic.id,
            title=topic.name,
            status=TopicStatus.AVAILABLE if position == 0 else TopicStatus.LOCKED,
            progress=0,
            resources=tuple(topic_resources),
            estimated_duration=topic.estimated_duration,
            actual_duration=0,
            proficiency_level=None,
            position=position,
        )


def build(
    params: PathGenerationParams,
    topics: Sequence[CurriculumTopic],
    resources: Sequence[LearningResource],
    profile: UserLearningProfile,
    assessment_results: Sequence[AssessmentResult] = (),
    *,
    now: datetime | None = None,
    policy: PathPolicy | None = None,
) -> LearningPath:
    """Build a new learning path. See PathBuilder.build."""
    return PathBuilder(policy).build(params, topics, resources, profile, assessment_results, now)
