"""
Unit tests for PathAdapter.

Assessment-driven status changes, gating promotion, remedial resource
narrowing, and the two configurable policies (unknown topics and
regression of completed units).
"""

from datetime import timedelta

import pytest

from src.learning_path.adapter import ASSESSMENT_REASON, PathAdapter, adapt
from src.learning_path.builder import build
from src.learning_path.errors import InvalidInputError, UnknownTopicError
from src.learning_path.models import ProficiencyLevel, TopicStatus, TriggerType
from src.learning_path.policy import PathPolicy


@pytest.fixture
def path(params, maths_topics, maths_resources, profile, clock):
    """Fresh KS2 path: place-value, addition, subtraction, multiplication, fractions."""
    return build(params, maths_topics, maths_resources, profile, now=clock)


@pytest.fixture
def later(clock):
    return clock + timedelta(days=1)


@pytest.fixture
def run_adapt(path, maths_topics, maths_resources, profile, later):
    def _run(results, on=None, policy=None, resources=None):
        return adapt(
            on or path,
            results,
            maths_topics,
            maths_resources if resources is None else resources,
            profile,
            now=later,
            policy=policy,
        )
    return _run


def unit_for(path, topic_id):
    return path.units[path.unit_index(topic_id)]


class TestCompletion:
    def test_passing_score_completes_and_unlocks_next(self, run_adapt, make_result, clock):
        updated, event = run_adapt([make_result("place-value", 85)])

        done = unit_for(updated, "place-value")
        assert done.status is TopicStatus.COMPLETED
        assert done.progress == 85
        assert done.proficiency_level is ProficiencyLevel.EXCEEDING
        assert done.started_at == clock
        assert done.completed_at == clock
        assert unit_for(updated, "addition").status is TopicStatus.AVAILABLE
        assert unit_for(updated, "subtraction").status is TopicStatus.LOCKED
        assert updated.overall_progress == 20

    def test_threshold_is_inclusive(self, run_adapt, make_result):
        updated, _ = run_adapt([make_result("place-value", 80)])

        assert unit_for(updated, "place-value").status is TopicStatus.COMPLETED

    def test_below_threshold_is_in_progress(self, run_adapt, make_result):
        updated, event = run_adapt([make_result("place-value", 65)])

        unit = unit_for(updated, "place-value")
        assert unit.status is TopicStatus.IN_PROGRESS
        assert unit.progress == 65
        assert unit.completed_at is None
        assert unit_for(updated, "addition").status is TopicStatus.LOCKED
        assert updated.overall_progress == 0
        assert event.changes.resources_changed is False

    def test_progress_rounds_half_up(self, run_adapt, make_result):
        updated, _ = run_adapt([
            make_result("place-value", 84.5),
            make_result("addition", 79.5),
        ])

        assert unit_for(updated, "place-value").progress == 85
        added = unit_for(updated, "addition")
        assert added.progress == 80
        # Status follows the raw score, not the rounded progress
        assert added.status is TopicStatus.IN_PROGRESS

    def test_results_applied_in_order(self, run_adapt, make_result):
        updated, _ = run_adapt([
            make_result("place-value", 85),
            make_result("addition", 90),
        ])

        assert unit_for(updated, "addition").status is TopicStatus.COMPLETED
        assert unit_for(updated, "subtraction").status is TopicStatus.AVAILABLE
        assert updated.overall_progress == 40

    def test_last_unit_completion(self, run_adapt, make_result):
        updated, _ = run_adapt([make_result("fractions", 99)])

        assert unit_for(updated, "fractions").proficiency_level is ProficiencyLevel.MASTERY
        assert updated.overall_progress == 20

    def test_all_units_finished(self, run_adapt, make_result, path):
        updated, _ = run_adapt([make_result(topic_id, 100) for topic_id in path.topic_ids()])

        assert updated.overall_progress == 100

    def test_promotion_only_from_locked(self, run_adapt, make_result):
        started, _ = run_adapt([make_result("addition", 60)])

        updated, _ = run_adapt([make_result("place-value", 85)], on=started)

        assert unit_for(updated, "addition").status is TopicStatus.IN_PROGRESS


class TestRemediation:
    def test_low_score_narrows_to_easy_resources(self, run_adapt, make_result, path):
        assert [r.id for r in unit_for(path, "addition").resources] == ["add-game", "add-sheet"]

        updated, event = run_adapt([make_result("addition", 40)])

        unit = unit_for(updated, "addition")
        assert unit.status is TopicStatus.IN_PROGRESS
        assert unit.proficiency_level is ProficiencyLevel.BEGINNER
        assert [r.id for r in unit.resources] == ["add-game"]
        assert all(r.difficulty <= 5 for r in unit.resources)
        assert event.changes.resources_changed is True

    def test_remedial_pool_comes_from_catalogue(self, run_adapt, make_result, path):
        # Multiplication's built pool is ranked challenge-first; remediation keeps only the song
        updated, _ = run_adapt([make_result("multiplication", 10)])

        assert [r.id for r in unit_for(updated, "multiplication").resources] == ["mult-song"]

    def test_no_easy_resources_keeps_current(self, run_adapt, make_result, path, maths_resources):
        hard_only = [r for r in maths_resources if r.id != "add-game"]

        updated, event = run_adapt([make_result("addition", 20)], resources=hard_only)

        unit = unit_for(updated, "addition")
        assert unit.resources == unit_for(path, "addition").resources
        assert event.changes.resources_changed is False

    def test_threshold_is_exclusive(self, run_adapt, make_result):
        _, event = run_adapt([make_result("addition", 50)])

        assert event.changes.resources_changed is False


class TestEvent:
    def test_event_fields(self, run_adapt, make_result, path, later):
        updated, event = run_adapt([make_result("place-value", 85)])

        assert event.id == f"adapt-{path.id}-{int(later.timestamp() * 1000)}"
        assert event.path_id == path.id
        assert event.timestamp == later
        assert event.trigger_type is TriggerType.ASSESSMENT
        assert event.reason == ASSESSMENT_REASON
        assert event.performed_by is None
        assert event.changes.added_units == ()
        assert event.changes.removed_units == ()
        assert event.changes.reordered_units is False
        assert event.changes.difficulty_changed is False

    def test_path_timestamps(self, run_adapt, make_result, path, later):
        updated, _ = run_adapt([make_result("place-value", 85)])

        assert updated.updated_at == later
        assert updated.last_assessment_date == later
        assert updated.created_at == path.created_at
        assert updated.id == path.id

    def test_outcome_attributes(self, run_adapt, make_result):
        outcome = run_adapt([make_result("place-value", 85)])

        updated, event = outcome
        assert outcome.updated_path is updated
        assert outcome.event is event
        assert outcome.unknown_topic_ids == ()

    def test_adapter_class_matches_function(
        self, run_adapt, make_result, path, maths_topics, maths_resources, profile, later
    ):
        results = [make_result("place-value", 85)]

        via_class = PathAdapter().adapt(
            path, results, maths_topics, maths_resources, profile, now=later
        )

        assert via_class == run_adapt(results)


class TestImmutability:
    def test_original_path_untouched(self, run_adapt, make_result, path):
        snapshot = (path.units, path.updated_at, path.last_assessment_date)

        run_adapt([make_result("place-value", 85), make_result("addition", 10)])

        assert (path.units, path.updated_at, path.last_assessment_date) == snapshot
        assert path.units[0].status is TopicStatus.AVAILABLE
        assert path.overall_progress == 0

    def test_empty_results(self, run_adapt, path, later):
        updated, event = run_adapt([])

        assert updated.units == path.units
        assert updated.last_assessment_date == later
        assert event.changes.has_changes is False


class TestUnknownTopics:
    def test_skipped_by_default(self, run_adapt, make_result, path):
        outcome = run_adapt([make_result("ghost", 90), make_result("place-value", 85)])

        assert outcome.unknown_topic_ids == ("ghost",)
        assert outcome.updated_path.overall_progress == 20
        assert outcome.updated_path.topic_ids() == path.topic_ids()

    def test_raise_policy(self, run_adapt, make_result, path):
        policy = PathPolicy(unknown_topic_policy="raise")

        with pytest.raises(UnknownTopicError) as excinfo:
            run_adapt(
                [make_result("place-value", 85), make_result("ghost", 90)], policy=policy
            )

        assert excinfo.value.topic_ids == ["ghost"]
        assert excinfo.value.path_id == path.id
        assert "ghost" in str(excinfo.value)

    def test_raise_policy_allows_known_topics(self, run_adapt, make_result):
        policy = PathPolicy(unknown_topic_policy="raise")

        outcome = run_adapt([make_result("place-value", 85)], policy=policy)

        assert outcome.unknown_topic_ids == ()

    def test_out_of_scope_catalogue_topic_is_unknown(self, run_adapt, make_result):
        # "algebra" is in the catalogue but not in the KS2 path
        outcome = run_adapt([make_result("algebra", 90)])

        assert outcome.unknown_topic_ids == ("algebra",)


class TestCompletedRegression:
    @pytest.fixture
    def completed(self, run_adapt, make_result):
        updated, _ = run_adapt([make_result("place-value", 90)])
        return updated

    def test_terminal_ignores_low_score(self, run_adapt, make_result, completed):
        updated, event = run_adapt([make_result("place-value", 30)], on=completed)

        unit = unit_for(updated, "place-value")
        assert unit.status is TopicStatus.COMPLETED
        assert unit.progress == 90
        assert unit.resources == unit_for(completed, "place-value").resources
        assert event.changes.resources_changed is False

    def test_needs_review_demotes(self, run_adapt, make_result, completed, clock):
        policy = PathPolicy(completed_regression_policy="needs_review")

        updated, event = run_adapt([make_result("place-value", 30)], on=completed, policy=policy)

        unit = unit_for(updated, "place-value")
        assert unit.status is TopicStatus.NEEDS_REVIEW
        assert unit.progress == 30
        assert unit.proficiency_level is ProficiencyLevel.BEGINNER
        assert unit.completed_at == clock
        assert updated.overall_progress == 0
        assert event.changes.resources_changed is True

    def test_needs_review_keeps_completed_on_pass(self, run_adapt, make_result, completed):
        policy = PathPolicy(completed_regression_policy="needs_review")

        updated, _ = run_adapt([make_result("place-value", 95)], on=completed, policy=policy)

        unit = unit_for(updated, "place-value")
        assert unit.status is TopicStatus.COMPLETED
        assert unit.progress == 95
        assert unit.proficiency_level is ProficiencyLevel.MASTERY


class TestValidation:
    def test_score_out_of_range(self, run_adapt, make_result):
        with pytest.raises(InvalidInputError):
            run_adapt([make_result("place-value", 150)])

    def test_negative_score(self, run_adapt, make_result):
        with pytest.raises(InvalidInputError):
            run_adapt([make_result("place-value", -1)])
