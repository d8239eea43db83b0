"""
Engine policy: thresholds and open-behaviour switches.

The engine never reads global settings. Callers pass a PathPolicy
explicitly (or accept the defaults) so build/adapt stay pure functions
of their arguments.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from config import Settings


UnknownTopicPolicy = Literal["skip", "raise"]
RegressionPolicy = Literal["terminal", "needs_review"]


@dataclass(frozen=True)
class PathPolicy:
    daily_study_minutes: int = 30
    baseline_pace: int = 5
    completion_score: float = 80.0
    remediation_score: float = 50.0
    remedial_max_difficulty: int = 5
    unknown_topic_policy: UnknownTopicPolicy = "skip"
    # "terminal": Completed/Mastered units ignore later low scores
    # "needs_review": a later sub-completion score demotes the unit
    completed_regression_policy: RegressionPolicy = "terminal"

    @classmethod
    def from_settings(cls, settings: Settings) -> PathPolicy:
        return cls(
            daily_study_minutes=settings.daily_study_minutes,
            baseline_pace=settings.baseline_pace,
            completion_score=settings.completion_score,
            remediation_score=settings.remediation_score,
            remedial_max_difficulty=settings.remedial_max_difficulty,
            unknown_topic_policy=settings.unknown_topic_policy,
            completed_regression_policy=settings.completed_regression_policy,
        )


DEFAULT_POLICY = PathPolicy()
