"""
Prerequisite Resolver.

Computes the transitive prerequisite closure of a set of target topics.

Traversal is an iterative depth-first search with a three-colour visited
map (unvisited / in progress / done). Reaching a topic that is still in
progress means the search followed a back-edge, so the curriculum has a
cycle and CyclicPrerequisiteError is raised with the offending loop.
"""
from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from enum import Enum

from loguru import logger

from src.learning_path.errors import CyclicPrerequisiteError
from src.learning_path.models import CurriculumTopic


class _Mark(Enum):
    IN_PROGRESS = 1
    DONE = 2


class PrerequisiteResolver:
    """
    Resolve prerequisite closures over a topic catalogue.

    Prerequisite ids that are missing from the catalogue are still reported
    (they must be learned first) but cannot be descended into.
    """

    def __init__(self, topics: Sequence[CurriculumTopic]):
        self._topics = {topic.id: topic for topic in topics}

    def resolve(self, target_ids: Iterable[str]) -> list[str]:
        """
        Get every topic that must be learned before the targets.

        Args:
            target_ids: Topics that are the focus of the path

        Returns:
            Prerequisite topic ids in discovery order, excluding the targets

        Raises:
            CyclicPrerequisiteError: If the traversal meets a cycle
        """
        targets = list(dict.fromkeys(target_ids))
        target_set = set(targets)
        marks: dict[str, _Mark] = {}
        found: dict[str, None] = {}  # Insertion-ordered set

        for target in targets:
            if target in marks:
                continue
            self._visit(target, marks, found)

        closure = [topic_id for topic_id in found if topic_id not in target_set]
        logger.debug(f"Resolved {len(closure)} prerequisites for {len(targets)} targets")
        return closure

    def _visit(
        self,
        root: str,
        marks: dict[str, _Mark],
        found: dict[str, None],
    ) -> None:
        marks[root] = _Mark.IN_PROGRESS
        stack: list[tuple[str, Iterator[str]]] = [(root, self._prerequisites_of(root))]

        while stack:
            node, pending = stack[-1]
            child = next(pending, None)

            if child is None:
                marks[node] = _Mark.DONE
                stack.pop()
                continue

            found.setdefault(child, None)
            mark = marks.get(child)

            if mark is _Mark.IN_PROGRESS:
                trail = [topic_id for topic_id, _ in stack]
                cycle = trail[trail.index(child):] + [child]
                logger.warning(f"Prerequisite cycle: {' -> '.join(cycle)}")
                raise CyclicPrerequisiteError(cycle)

            if mark is None:
                marks[child] = _Mark.IN_PROGRESS
                stack.append((child, self._prerequisites_of(child)))

    def _prerequisites_of(self, topic_id: str) -> Iterator[str]:
        topic = self._topics.get(topic_id)
        if topic is None:
            logger.debug(f"Prerequisite {topic_id} not in catalogue; not descending")
            return iter(())
        return iter(topic.prerequisites)
