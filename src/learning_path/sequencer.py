"""
Topic Sequencer.

Orders a topic set into a learning sequence using a batched Kahn
topological sort:
- In-degree counts only prerequisites that are inside the set
- Every topic that is ready at the same time forms one batch
- Each batch is sorted by (difficulty, explicit order, id) before it is
  appended, so the output is reproducible regardless of input order
"""
from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import replace

from loguru import logger

from src.learning_path.errors import CyclicPrerequisiteError, InvalidCurriculumError
from src.learning_path.models import CurriculumTopic
from src.learning_path.prerequisites import PrerequisiteResolver


class TopicSequencer:
    """Sequence topics so every prerequisite precedes its dependents."""

    @staticmethod
    def batch_key(topic: CurriculumTopic) -> tuple[int, int, str]:
        return (topic.difficulty, topic.order, topic.id)

    def sequence(self, topics: Sequence[CurriculumTopic]) -> list[str]:
        """
        Topologically order a topic subset.

        Args:
            topics: Targets plus their resolved prerequisites

        Returns:
            Topic ids in learning order

        Raises:
            InvalidCurriculumError: If a topic id appears twice
            CyclicPrerequisiteError: If some topics can never become ready
        """
        return [topic_id for batch in self.batches(topics) for topic_id in batch]

    def batches(self, topics: Sequence[CurriculumTopic]) -> list[list[str]]:
        """Same as sequence(), but keeps the ready-batch boundaries."""
        by_id: dict[str, CurriculumTopic] = {}
        for topic in topics:
            if topic.id in by_id:
                raise InvalidCurriculumError(f"Duplicate topic id in sequence input: {topic.id}")
            by_id[topic.id] = topic

        in_degree: dict[str, int] = {}
        dependents: dict[str, list[str]] = defaultdict(list)
        for topic in topics:
            in_subset = [p for p in dict.fromkeys(topic.prerequisites) if p in by_id]
            in_degree[topic.id] = len(in_subset)
            for prereq_id in in_subset:
                dependents[prereq_id].append(topic.id)

        ready = [topic.id for topic in topics if in_degree[topic.id] == 0]
        batches: list[list[str]] = []

        while ready:
            batch = sorted(ready, key=lambda topic_id: self.batch_key(by_id[topic_id]))
            ready = []
            for topic_id in batch:
                for dependent_id in dependents[topic_id]:
                    in_degree[dependent_id] -= 1
                    if in_degree[dependent_id] == 0:
                        ready.append(dependent_id)
            batches.append(batch)
            logger.debug(f"Sequenced batch {len(batches)}: {batch}")

        sequenced = sum(len(batch) for batch in batches)
        if sequenced < len(by_id):
            stuck = [topic_id for topic_id, degree in in_degree.items() if degree > 0]
            self._raise_cycle(stuck, by_id)

        return batches

    @staticmethod
    def _raise_cycle(stuck: list[str], by_id: dict[str, CurriculumTopic]) -> None:
        # Every stuck topic waits on another stuck topic, so a cycle exists among them
        stuck_set = set(stuck)
        restricted = [
            replace(
                by_id[topic_id],
                prerequisites=tuple(p for p in by_id[topic_id].prerequisites if p in stuck_set),
            )
            for topic_id in stuck
        ]
        PrerequisiteResolver(restricted).resolve(stuck)
        raise CyclicPrerequisiteError(sorted(stuck))
