"""
Learning path engine exceptions.

Every failure the engine raises derives from LearningPathError so callers
can catch the whole family at the persistence/transport boundary.
"""
from __future__ import annotations

from collections.abc import Iterable


class LearningPathError(Exception):
    """Base class for learning path engine errors."""
    pass


class InvalidInputError(LearningPathError):
    """Raised when a profile, request or assessment result is out of range."""
    pass


class InvalidCurriculumError(LearningPathError):
    """Raised when curriculum reference data is malformed."""
    pass


class CyclicPrerequisiteError(InvalidCurriculumError):
    """Raised when the prerequisite graph contains a cycle."""

    def __init__(self, cycle: Iterable[str]):
        self.cycle = list(cycle)
        super().__init__(f"Prerequisite cycle detected: {' -> '.join(self.cycle)}")


class UnknownTopicError(LearningPathError):
    """Raised when assessment results reference topics that are not in the path."""

    def __init__(self, topic_ids: Iterable[str], path_id: str | None = None):
        self.topic_ids = list(topic_ids)
        self.path_id = path_id
        target = f" {path_id}" if path_id else ""
        super().__init__(
            f"Assessment results reference topics absent from path{target}: "
            f"{', '.join(self.topic_ids)}"
        )
