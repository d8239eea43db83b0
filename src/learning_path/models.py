"""
Learning Path Domain Models.

Value types shared by every stage of the engine. All records are frozen
dataclasses; changes are made through the ``with_*`` builders, which return
a new instance and leave the receiver untouched.

Design:
- Subject / KeyStage / LearningStyle: closed enums for curriculum scoping
- ProficiencyLevel: discrete performance bucket (Beginner..Mastery)
- TopicStatus: per-unit gating state
- CurriculumTopic / LearningResource: immutable reference data
- LearningPathUnit / LearningPath: engine output
- PathChanges / AdaptationEvent: audit record for a re-plan
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for non-negatives."""
    return int(math.floor(value + 0.5))


# =============================================================================
# ENUMS
# =============================================================================


class Subject(str, Enum):
    """Curriculum subjects."""

    MATHS = "maths"
    ENGLISH = "english"
    SCIENCE = "science"
    HISTORY = "history"
    GEOGRAPHY = "geography"
    ART = "art"
    MUSIC = "music"
    PE = "pe"
    COMPUTING = "computing"
    LANGUAGES = "languages"

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return self.value.replace("_", " ").title()


class KeyStage(str, Enum):
    """UK curriculum phases."""

    EYFS = "EYFS"
    KS1 = "KS1"
    KS2 = "KS2"
    KS3 = "KS3"
    KS4 = "KS4"
    KS5 = "KS5"


class LearningStyle(str, Enum):
    """Learning styles based on the VARK model."""

    VISUAL = "visual"
    AUDITORY = "auditory"
    READING_WRITING = "reading_writing"
    KINESTHETIC = "kinesthetic"
    MULTIMODAL = "multimodal"


class ProficiencyLevel(str, Enum):
    """
    Proficiency bucket derived from assessment scores.

    Thresholds are inclusive lower bounds on the mean score (0-100).
    """

    BEGINNER = "beginner"  # < 50
    DEVELOPING = "developing"  # 50-64
    SECURE = "secure"  # 65-79
    EXCEEDING = "exceeding"  # 80-89
    MASTERY = "mastery"  # 90-100

    @classmethod
    def from_score(cls, score: float) -> ProficiencyLevel:
        """
        Convert a 0-100 score to a level.

        Args:
            score: Mean assessment score

        Returns:
            Corresponding ProficiencyLevel
        """
        if score >= 90:
            return cls.MASTERY
        elif score >= 80:
            return cls.EXCEEDING
        elif score >= 65:
            return cls.SECURE
        elif score >= 50:
            return cls.DEVELOPING
        else:
            return cls.BEGINNER

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return self.value.title()


class TopicStatus(str, Enum):
    """Lifecycle state of a unit within a path."""

    LOCKED = "locked"
    AVAILABLE = "available"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    MASTERED = "mastered"
    NEEDS_REVIEW = "needs_review"

    @property
    def is_finished(self) -> bool:
        """Whether the unit counts towards overall progress."""
        return self in (TopicStatus.COMPLETED, TopicStatus.MASTERED)

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            TopicStatus.LOCKED: "dim",
            TopicStatus.AVAILABLE: "cyan",
            TopicStatus.IN_PROGRESS: "yellow",
            TopicStatus.COMPLETED: "green",
            TopicStatus.MASTERED: "bold green",
            TopicStatus.NEEDS_REVIEW: "red",
        }[self]


class TriggerType(str, Enum):
    """What caused a path to be re-planned."""

    ASSESSMENT = "assessment"


# =============================================================================
# REFERENCE DATA
# =============================================================================


@dataclass(frozen=True)
class CurriculumTopic:
    """A topic in the curriculum graph."""

    id: str
    subject: Subject
    key_stage: KeyStage
    prerequisites: tuple[str, ...] = ()  # Ordered prerequisite topic ids
    difficulty: int = 1  # 1-10
    order: int = 0  # Explicit tie-break within equal difficulty
    estimated_duration: int = 30  # Minutes
    name: str = ""
    description: str = ""


@dataclass(frozen=True)
class LearningResource:
    """A piece of learning material attached to one or more topics."""

    id: str
    topic_ids: tuple[str, ...] = ()
    learning_styles: tuple[LearningStyle, ...] = ()
    interest_categories: tuple[str, ...] = ()
    difficulty: int = 1  # 1-10
    title: str = ""

    def supports_topic(self, topic_id: str) -> bool:
        return topic_id in self.topic_ids


@dataclass(frozen=True)
class UserLearningProfile:
    """Learner preferences used for resource ranking and pacing."""

    dominant_learning_style: LearningStyle
    secondary_learning_style: LearningStyle | None = None
    interests: tuple[str, ...] = ()
    learning_pace: int = 5  # 1-10, 5 is baseline


@dataclass(frozen=True)
class AssessmentResult:
    """A single scored assessment for a topic."""

    topic_id: str
    score: float  # 0-100
    timestamp: datetime
    subject: Subject | None = None


# =============================================================================
# ENGINE OUTPUT
# =============================================================================


@dataclass(frozen=True)
class LearningPathUnit:
    """One topic's slot in a learning path."""

    id: str
    topic_id: str
    title: str = ""
    status: TopicStatus = TopicStatus.LOCKED
    progress: int = 0  # 0-100
    resources: tuple[LearningResource, ...] = ()
    estimated_duration: int = 0  # Minutes
    actual_duration: int = 0  # Minutes
    proficiency_level: ProficiencyLevel | None = None
    position: int = 0
    started_at: datetime | None = None
    completed_at: datetime | None = None

    def with_status(self, status: TopicStatus) -> LearningPathUnit:
        return replace(self, status=status)

    def with_resources(self, resources: tuple[LearningResource, ...]) -> LearningPathUnit:
        return replace(self, resources=tuple(resources))

    def with_assessment(
        self,
        progress: int,
        status: TopicStatus,
        proficiency_level: ProficiencyLevel,
        assessed_at: datetime,
    ) -> LearningPathUnit:
        """Record an assessment outcome, stamping start/completion times."""
        return replace(
            self,
            progress=progress,
            status=status,
            proficiency_level=proficiency_level,
            started_at=self.started_at or assessed_at,
            completed_at=assessed_at if status.is_finished else self.completed_at,
        )


@dataclass(frozen=True)
class LearningPath:
    """
    A learner's ordered sequence of units for one subject and key stage.

    Unit order is a topological order of the prerequisite graph restricted
    to the included topics. Overall progress is always derived from unit
    statuses.
    """

    id: str
    user_id: str
    subject: Subject
    key_stage: KeyStage
    units: tuple[LearningPathUnit, ...]
    created_at: datetime
    updated_at: datetime
    estimated_completion_date: datetime
    adaptation_intensity: int = 5  # 1-10
    last_assessment_date: datetime | None = None
    title: str = ""
    description: str = ""

    @property
    def overall_progress(self) -> int:
        """Percentage of units Completed or Mastered."""
        if not self.units:
            return 0
        return round_half_up(100 * self.finished_count / len(self.units))

    @property
    def finished_count(self) -> int:
        return sum(1 for unit in self.units if unit.status.is_finished)

    def unit_index(self, topic_id: str) -> int | None:
        """Index of the unit for a topic, or None if the topic is not in the path."""
        for index, unit in enumerate(self.units):
            if unit.topic_id == topic_id:
                return index
        return None

    def topic_ids(self) -> list[str]:
        return [unit.topic_id for unit in self.units]

    def with_units(
        self,
        units: tuple[LearningPathUnit, ...],
        updated_at: datetime,
        last_assessment_date: datetime | None = None,
    ) -> LearningPath:
        return replace(
            self,
            units=tuple(units),
            updated_at=updated_at,
            last_assessment_date=last_assessment_date or self.last_assessment_date,
        )


@dataclass(frozen=True)
class PathChanges:
    """Structured summary of what an adaptation changed."""

    added_units: tuple[str, ...] = ()
    removed_units: tuple[str, ...] = ()
    reordered_units: bool = False
    difficulty_changed: bool = False
    resources_changed: bool = False

    @property
    def has_changes(self) -> bool:
        return bool(
            self.added_units
            or self.removed_units
            or self.reordered_units
            or self.difficulty_changed
            or self.resources_changed
        )


@dataclass(frozen=True)
class AdaptationEvent:
    """Audit record emitted whenever the engine re-plans a path."""

    id: str
    path_id: str
    timestamp: datetime
    trigger_type: TriggerType
    changes: PathChanges = field(default_factory=PathChanges)
    reason: str = ""
    performed_by: str | None = None


# =============================================================================
# REQUESTS
# =============================================================================


class PathGenerationParams(BaseModel):
    """Request to build a new learning path."""

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., min_length=1, description="Learner identifier")
    subject: Subject = Field(..., description="Subject to plan for")
    key_stage: KeyStage = Field(..., description="Key stage scoping the topic catalogue")
    focus_topics: tuple[str, ...] | None = Field(
        None, description="Explicit target topic ids (default: every topic in scope)"
    )
    exclude_topics: tuple[str, ...] = Field((), description="Topic ids to leave out")
    include_prerequisites: bool = Field(True, description="Pull in the prerequisite closure")
    adapt_to_learning_style: bool = Field(True, description="Rank resources by learning style")
    adapt_to_interests: bool = Field(True, description="Rank resources by interests")
    starting_proficiency: ProficiencyLevel | None = Field(
        None, description="Override the proficiency estimated from history"
    )
    adaptation_intensity: int = Field(5, ge=1, le=10, description="Difficulty adaptation dial")
    path_id: str | None = Field(None, description="Explicit path id (default: derived from clock)")
