"""
Personalised Learning Path Engine.

Plans and re-plans a learner's route through a curriculum topic graph.

Components:
- ProficiencyEstimator: Assessment history -> proficiency level
- PrerequisiteResolver: Transitive prerequisite closure with cycle detection
- TopicSequencer: Deterministic batched topological ordering
- ResourceSelector: Ranks resources by learning style and interests
- DifficultyAdjuster: Narrows resource pools to the learner's level
- PathBuilder: Orchestrates the above into a new LearningPath
- PathAdapter: Applies new assessment results to an existing path

Entry points:
- build(params, topics, resources, profile, assessment_results) -> LearningPath
- adapt(path, new_results, topics, resources, profile) -> AdaptationOutcome
"""
from src.learning_path.adapter import AdaptationOutcome, PathAdapter, adapt
from src.learning_path.builder import PathBuilder, build, estimate_completion_date
from src.learning_path.difficulty import DifficultyAdjuster
from src.learning_path.errors import (
    CyclicPrerequisiteError,
    InvalidCurriculumError,
    InvalidInputError,
    LearningPathError,
    UnknownTopicError,
)
from src.learning_path.models import (
    AdaptationEvent,
    AssessmentResult,
    CurriculumTopic,
    KeyStage,
    LearningPath,
    LearningPathUnit,
    LearningResource,
    LearningStyle,
    PathChanges,
    PathGenerationParams,
    ProficiencyLevel,
    Subject,
    TopicStatus,
    TriggerType,
    UserLearningProfile,
)
from src.learning_path.policy import PathPolicy
from src.learning_path.prerequisites import PrerequisiteResolver
from src.learning_path.proficiency import ProficiencyEstimator
from src.learning_path.resources import ResourceSelector
from src.learning_path.sequencer import TopicSequencer

__all__ = [
    # Entry points
    "build",
    "adapt",
    "estimate_completion_date",
    # Component classes
    "PathBuilder",
    "PathAdapter",
    "ProficiencyEstimator",
    "PrerequisiteResolver",
    "TopicSequencer",
    "ResourceSelector",
    "DifficultyAdjuster",
    "PathPolicy",
    # Data models
    "CurriculumTopic",
    "LearningResource",
    "UserLearningProfile",
    "AssessmentResult",
    "LearningPathUnit",
    "LearningPath",
    "PathChanges",
    "AdaptationEvent",
    "AdaptationOutcome",
    "PathGenerationParams",
    # Enums
    "Subject",
    "KeyStage",
    "LearningStyle",
    "ProficiencyLevel",
    "TopicStatus",
    "TriggerType",
    # Errors
    "LearningPathError",
    "InvalidInputError",
    "InvalidCurriculumError",
    "CyclicPrerequisiteError",
    "UnknownTopicError",
]
