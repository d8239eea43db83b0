"""
Proficiency Estimator.

Maps a learner's assessment history for one subject to a ProficiencyLevel.
No history means Beginner; otherwise the arithmetic mean of the scores is
bucketed by ProficiencyLevel.from_score.
"""
from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from src.learning_path.models import (
    AssessmentResult,
    CurriculumTopic,
    ProficiencyLevel,
    Subject,
)


class ProficiencyEstimator:
    """Estimate proficiency from historical assessment scores."""

    @staticmethod
    def estimate(results: Sequence[AssessmentResult]) -> ProficiencyLevel:
        """
        Estimate proficiency from results already filtered to one subject.

        Args:
            results: Assessment results for a single subject

        Returns:
            Beginner for an empty history, else the bucket of the mean score
        """
        if not results:
            return ProficiencyLevel.BEGINNER

        mean_score = sum(result.score for result in results) / len(results)
        return ProficiencyLevel.from_score(mean_score)

    @staticmethod
    def results_for_subject(
        results: Sequence[AssessmentResult],
        subject: Subject,
        topics: Sequence[CurriculumTopic],
    ) -> list[AssessmentResult]:
        """
        Filter results to one subject.

        A result that names its subject is matched directly; otherwise its
        subject is looked up through the topic catalogue. Results for
        topics missing from the catalogue are dropped.
        """
        topic_subjects = {topic.id: topic.subject for topic in topics}
        filtered = []
        for result in results:
            result_subject = result.subject or topic_subjects.get(result.topic_id)
            if result_subject == subject:
                filtered.append(result)
        return filtered

    @classmethod
    def estimate_for_subject(
        cls,
        results: Sequence[AssessmentResult],
        subject: Subject,
        topics: Sequence[CurriculumTopic],
    ) -> ProficiencyLevel:
        subject_results = cls.results_for_subject(results, subject, topics)
        level = cls.estimate(subject_results)
        logger.debug(
            f"Estimated {level.value} proficiency in {subject.value} "
            f"from {len(subject_results)} of {len(results)} results"
        )
        return level
