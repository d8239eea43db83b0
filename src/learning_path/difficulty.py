"""
Difficulty Adjuster.

Narrows each unit's resource pool to the difficulty window that suits the
learner's proficiency. A proficiency-dependent factor, scaled by the
adaptation intensity, is added to each resource's difficulty; resources
whose shifted difficulty falls outside 1-10 are dropped. The resource's own
difficulty value is never changed.
"""
from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from src.learning_path.models import LearningPathUnit, LearningResource, ProficiencyLevel
from src.learning_path.validation import MAX_DIFFICULTY, MIN_DIFFICULTY, validate_intensity

BASE_ADJUSTMENT: dict[ProficiencyLevel, int] = {
    ProficiencyLevel.BEGINNER: -2,
    ProficiencyLevel.DEVELOPING: -1,
    ProficiencyLevel.SECURE: 0,
    ProficiencyLevel.EXCEEDING: 1,
    ProficiencyLevel.MASTERY: 2,
}


class DifficultyAdjuster:
    """Filter unit resources by proficiency-shifted difficulty."""

    @staticmethod
    def scaled_factor(proficiency: ProficiencyLevel, intensity: int) -> float:
        """
        Scale the proficiency's base adjustment by intensity / 10.

        Args:
            proficiency: Learner's current proficiency
            intensity: Adaptation intensity (1-10)

        Returns:
            Amount added to each resource difficulty before the range check
        """
        validate_intensity(intensity)
        return BASE_ADJUSTMENT[proficiency] * (intensity / 10)

    @staticmethod
    def fits(resource: LearningResource, factor: float) -> bool:
        return MIN_DIFFICULTY <= resource.difficulty + factor <= MAX_DIFFICULTY

    def adjust(
        self,
        units: Sequence[LearningPathUnit],
        proficiency: ProficiencyLevel,
        intensity: int,
    ) -> list[LearningPathUnit]:
        """Return new units keeping only resources inside the shifted window."""
        factor = self.scaled_factor(proficiency, intensity)
        logger.debug(
            f"Difficulty factor {factor:+.1f} for {proficiency.value} at intensity {intensity}"
        )

        adjusted = []
        for unit in units:
            kept = tuple(resource for resource in unit.resources if self.fits(resource, factor))
            if len(kept) < len(unit.resources):
                logger.debug(
                    f"Unit {unit.id}: kept {len(kept)} of {len(unit.resources)} resources"
                )
            adjusted.append(unit.with_resources(kept))
        return adjusted
