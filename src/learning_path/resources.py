"""
Resource Selector.

Ranks the learning resources of a topic against a learner profile:
- +3 if the resource supports the dominant learning style
- +1 if it also supports the secondary learning style
- +2 per interest category shared with the learner

Ranking never drops a resource; equal scores keep catalogue order.
"""
from __future__ import annotations

from collections.abc import Sequence

from src.learning_path.models import LearningResource, UserLearningProfile

DOMINANT_STYLE_WEIGHT = 3
SECONDARY_STYLE_WEIGHT = 1
INTEREST_WEIGHT = 2


class ResourceSelector:
    """Score and rank learning resources for a learner."""

    @staticmethod
    def resources_for_topic(
        resources: Sequence[LearningResource],
        topic_id: str,
    ) -> list[LearningResource]:
        """Resources supporting a topic, in catalogue order."""
        return [resource for resource in resources if resource.supports_topic(topic_id)]

    @staticmethod
    def score(resource: LearningResource, profile: UserLearningProfile) -> int:
        score = 0
        if profile.dominant_learning_style in resource.learning_styles:
            score += DOMINANT_STYLE_WEIGHT
        if (
            profile.secondary_learning_style is not None
            and profile.secondary_learning_style in resource.learning_styles
        ):
            score += SECONDARY_STYLE_WEIGHT

        shared_interests = set(resource.interest_categories) & set(profile.interests)
        score += INTEREST_WEIGHT * len(shared_interests)
        return score

    def rank(
        self,
        resources: Sequence[LearningResource],
        profile: UserLearningProfile,
    ) -> list[LearningResource]:
        """
        Rank resources by descending relevance to the learner.

        Args:
            resources: Candidate resources for one topic
            profile: Learner profile

        Returns:
            The same resources, best match first
        """
        # sorted() is stable, so equal scores keep catalogue order
        return sorted(resources, key=lambda resource: -self.score(resource, profile))

    def select_for_topic(
        self,
        resources: Sequence[LearningResource],
        topic_id: str,
        profile: UserLearningProfile,
    ) -> list[LearningResource]:
        return self.rank(self.resources_for_topic(resources, topic_id), profile)
