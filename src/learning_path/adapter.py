"""
Learning Path Adapter.

Re-plans an existing path when new assessment results arrive.

For each result whose topic is in the path:
- Record progress (rounded score) and the score's proficiency level
- Score >= completion threshold: unit Completed, next Locked unit unlocked
- Otherwise: unit InProgress
- Score < remediation threshold: resources re-ranked and narrowed to easy ones

Overall progress is derived from the new unit statuses. The input path is
never modified; callers keep it for comparison and audit.
"""
from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone

from loguru import logger

from src.learning_path.errors import UnknownTopicError
from src.learning_path.models import (
    AdaptationEvent,
    AssessmentResult,
    CurriculumTopic,
    LearningPath,
    LearningPathUnit,
    LearningResource,
    PathChanges,
    ProficiencyLevel,
    TopicStatus,
    TriggerType,
    UserLearningProfile,
    round_half_up,
)
from src.learning_path.policy import DEFAULT_POLICY, PathPolicy
from src.learning_path.resources import ResourceSelector
from src.learning_path.validation import validate_inputs

ASSESSMENT_REASON = "Assessment results triggered path adaptation"


@dataclass(frozen=True)
class AdaptationOutcome:
    """Result of adapting a path: the new path, its audit event, and skipped topics."""

    updated_path: LearningPath
    event: AdaptationEvent
    unknown_topic_ids: tuple[str, ...] = ()

    def __iter__(self) -> Iterator:
        # Allows `path, event = adapt(...)`
        yield self.updated_path
        yield self.event


class PathAdapter:
    """Apply assessment results to a learning path."""

    def __init__(self, policy: PathPolicy | None = None):
        self.policy = policy or DEFAULT_POLICY
        self._selector = ResourceSelector()

    def adapt(
        self,
        path: LearningPath,
        new_results: Sequence[AssessmentResult],
        topics: Sequence[CurriculumTopic],
        resources: Sequence[LearningResource],
        profile: UserLearningProfile,
        now: datetime | None = None,
    ) -> AdaptationOutcome:
        """
        Produce an updated path and adaptation event from new results.

        Args:
            path: Previously built path (left unchanged)
            new_results: Assessment results to apply, in order
            topics: Curriculum catalogue
            resources: Resource catalogue
            profile: Learner profile
            now: Adaptation time (default: current UTC time)

        Returns:
            AdaptationOutcome with the updated path and event

        Raises:
            UnknownTopicError: A result's topic is not in the path and the
                policy is "raise" (checked before any change is made)
        """
        validate_inputs(topics, resources, profile, new_results)
        now = now or datetime.now(timezone.utc)

        positions = {unit.topic_id: index for index, unit in enumerate(path.units)}
        unknown = tuple(dict.fromkeys(
            result.topic_id for result in new_results if result.topic_id not in positions
        ))
        if unknown and self.policy.unknown_topic_policy == "raise":
            raise UnknownTopicError(unknown, path.id)

        units = list(path.units)
        resources_changed = False
        applied = 0

        for result in new_results:
            index = positions.get(result.topic_id)
            if index is None:
                logger.warning(
                    f"Skipping result for topic {result.topic_id}: not in path {path.id}"
                )
                continue

            unit = units[index]
            status = self._next_status(unit, result.score)
            if status is None:
                logger.info(
                    f"Unit {unit.id} already {unit.status.value}; "
                    f"ignoring score {result.score}"
                )
                continue

            applied += 1
            units[index] = unit.with_assessment(
                progress=round_half_up(result.score),
                status=status,
                proficiency_level=ProficiencyLevel.from_score(result.score),
                assessed_at=result.timestamp,
            )

            if status.is_finished and index + 1 < len(units):
                following = units[index + 1]
                if following.status is TopicStatus.LOCKED:
                    units[index + 1] = following.with_status(TopicStatus.AVAILABLE)
                    logger.debug(f"Unlocked {following.id} after completing {unit.id}")

            if result.score < self.policy.remediation_score:
                remedial = self._remedial_resources(result.topic_id, resources, profile)
                if remedial:
                    units[index] = units[index].with_resources(remedial)
                    resources_changed = True
                else:
                    logger.warning(
                        f"No resources at or below difficulty "
                        f"{self.policy.remedial_max_difficulty} for {result.topic_id}; "
                        f"keeping current resources"
                    )

        updated = path.with_units(tuple(units), updated_at=now, last_assessment_date=now)
        event = AdaptationEvent(
            id=f"adapt-{path.id}-{int(now.timestamp() * 1000)}",
            path_id=path.id,
            timestamp=now,
            trigger_type=TriggerType.ASSESSMENT,
            changes=PathChanges(resources_changed=resources_changed),
            reason=ASSESSMENT_REASON,
            performed_by=None,
        )

        logger.info(
            f"Adapted path {path.id}: {applied} of {len(new_results)} results applied, "
            f"progress {path.overall_progress}% -> {updated.overall_progress}%"
        )
        return AdaptationOutcome(updated_path=updated, event=event, unknown_topic_ids=unknown)

    def _next_status(self, unit: LearningPathUnit, score: float) -> TopicStatus | None:
        """Status after a score, or None when the score should be ignored."""
        passed = score >= self.policy.completion_score

        if unit.status.is_finished:
            if passed:
                return unit.status
            if self.policy.completed_regression_policy == "terminal":
                return None
            return TopicStatus.NEEDS_REVIEW

        return TopicStatus.COMPLETED if passed else TopicStatus.IN_PROGRESS

    def _remedial_resources(
        self,
        topic_id: str,
        resources: Sequence[LearningResource],
        profile: UserLearningProfile,
    ) -> tuple[LearningResource, ...]:
        ranked = self._selector.select_for_topic(resources, topic_id, profile)
        return tuple(
            resource for resource in ranked
            if resource.difficulty <= self.policy.remedial_max_difficulty
        )


def adapt(
    path: LearningPath,
    new_results: Sequence[AssessmentResult],
    topics: Sequence[CurriculumTopic],
    resources: Sequence[LearningResource],
    profile: UserLearningProfile,
    *,
    now: datetime | None = None,
    policy: PathPolicy | None = None,
) -> AdaptationOutcome:
    """Adapt a path to new assessment results. See PathAdapter.adapt."""
    return PathAdapter(policy).adapt(path, new_results, topics, resources, profile, now)
