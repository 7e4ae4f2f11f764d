"""Dependency graph - keeps task dependency edges consistent and acyclic.

An edge ``prerequisite -> dependent`` is stored as the prerequisite's id in
``dependent.dependencies``. Every insertion is checked against the current
store state with the proposed edge overlaid on the real adjacency, so a
rejected edge never touches the store.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable, Iterator, Mapping, Sequence

from taskflow.models import (
    CircularDependencyError,
    SelfDependencyError,
    Task,
    TaskNotFoundError,
    TaskUpdate,
)
from taskflow.repositories import TaskRepository

logger = logging.getLogger(__name__)

Adjacency = Mapping[str, Sequence[str]]
# (dependent, prerequisite) pair evaluated as if it were already stored
Edge = tuple[str, str]

_ON_STACK = 1
_DONE = 2


def _neighbours(adjacency: Adjacency, node: str, extra_edge: Edge | None) -> Iterator[str]:
    yield from adjacency.get(node, ())
    if extra_edge is not None and extra_edge[0] == node:
        yield extra_edge[1]


def find_cycle(
    adjacency: Adjacency,
    roots: Iterable[str],
    extra_edge: Edge | None = None,
) -> list[str] | None:
    """Depth-first search for a cycle reachable from *roots*.

    Iterative three-colour DFS: a node met again while still on the traversal
    stack closes a cycle; a finished node is never explored twice, so shared
    prerequisites (diamonds) cost one visit and never count as a cycle. Ids
    without an adjacency entry are leaves.

    Returns:
        The cycle as a path that starts and ends on the same id, or None
    """
    state: dict[str, int] = {}
    for root in roots:
        if root in state:
            continue
        path = [root]
        state[root] = _ON_STACK
        stack = [(root, _neighbours(adjacency, root, extra_edge))]
        while stack:
            node, children = stack[-1]
            for child in children:
                child_state = state.get(child)
                if child_state == _ON_STACK:
                    return path[path.index(child) :] + [child]
                if child_state is None:
                    state[child] = _ON_STACK
                    path.append(child)
                    stack.append((child, _neighbours(adjacency, child, extra_edge)))
                    break
            else:
                state[node] = _DONE
                path.pop()
                stack.pop()
    return None


class DependencyGraph:
    """Guarded view over the dependency edges of a task set.

    Queries run against a snapshot loaded with :meth:`refresh`; mutations
    refresh first, validate, then write through the repository.
    """

    def __init__(
        self,
        repository: TaskRepository | None = None,
        tasks: Iterable[Task] | None = None,
    ):
        self.repository = repository
        self._tasks: dict[str, Task] = {}
        if tasks is not None:
            self._load(tasks)

    def _load(self, tasks: Iterable[Task]) -> None:
        self._tasks = {task.id: task for task in tasks}

    async def refresh(self) -> None:
        """Reload the snapshot from the repository."""
        if self.repository is None:
            raise RuntimeError("DependencyGraph has no repository to refresh from")
        self._load(await self.repository.get_all())

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks.values())

    def adjacency(self) -> dict[str, list[str]]:
        """Map of task id to its dependency ids."""
        return {task_id: list(task.dependencies) for task_id, task in self._tasks.items()}

    def _require(self, task_id: str) -> Task:
        task = self._tasks.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def detect_cycle(self, task_id: str, extra_edge: Edge | None = None) -> bool:
        """True if a cycle is reachable from *task_id* following dependencies.

        Args:
            task_id: Traversal start
            extra_edge: Optional ``(dependent, prerequisite)`` edge treated as
                present without being stored
        """
        return find_cycle(self.adjacency(), [task_id], extra_edge) is not None

    def has_cycle(self) -> bool:
        """True if any cycle exists anywhere in the graph."""
        return find_cycle(self.adjacency(), list(self._tasks)) is not None

    def get_dependencies(self, task_id: str) -> list[Task]:
        """Direct prerequisites of a task; dangling ids are skipped."""
        task = self._require(task_id)
        return [self._tasks[dep] for dep in task.dependencies if dep in self._tasks]

    def get_dependents(self, task_id: str) -> list[Task]:
        """Tasks listing *task_id* as a dependency, in store order."""
        self._require(task_id)
        return [task for task in self._tasks.values() if task_id in task.dependencies]

    def get_transitive_dependents(self, task_id: str) -> list[Task]:
        """Every task downstream of *task_id*, breadth-first, each once."""
        self._require(task_id)
        dependents: dict[str, list[str]] = {}
        for task in self._tasks.values():
            for dep in task.dependencies:
                dependents.setdefault(dep, []).append(task.id)

        seen = {task_id}
        order: list[Task] = []
        queue = deque([task_id])
        while queue:
            current = queue.popleft()
            for child in dependents.get(current, []):
                if child not in seen:
                    seen.add(child)
                    order.append(self._tasks[child])
                    queue.append(child)
        return order

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def check_dependency(self, source_id: str, target_id: str) -> bool:
        """Validate making *target_id* depend on *source_id* against the snapshot.

        Returns:
            True if the edge is new, False if it already exists

        Raises:
            SelfDependencyError: source and target are the same task
            TaskNotFoundError: either id is unknown
            CircularDependencyError: the edge would close a cycle
        """
        if source_id == target_id:
            task = self._tasks.get(source_id)
            raise SelfDependencyError(source_id, task.title if task else None)

        source = self._require(source_id)
        target = self._require(target_id)
        if source_id in target.dependencies:
            return False

        cycle = find_cycle(self.adjacency(), [target_id], extra_edge=(target_id, source_id))
        if cycle is not None:
            logger.debug("rejected edge %s -> %s, cycle %s", source_id, target_id, cycle)
            raise CircularDependencyError(
                source_id, target_id, source_title=source.title, target_title=target.title
            )
        return True

    async def add_dependency(self, source_id: str, target_id: str) -> Task:
        """Make *target_id* depend on *source_id*.

        Adding an edge that already exists is a no-op.

        Returns:
            The target task as stored after the call
        """
        if self.repository is None:
            raise RuntimeError("DependencyGraph has no repository to write to")
        if source_id == target_id:
            raise SelfDependencyError(source_id)

        await self.refresh()
        if not self.check_dependency(source_id, target_id):
            return self._tasks[target_id]

        target = self._tasks[target_id]
        updated = await self.repository.update(
            target_id, TaskUpdate(dependencies=[*target.dependencies, source_id])
        )
        self._tasks[target_id] = updated
        logger.info("added dependency %s -> %s", source_id, target_id)
        return updated

    async def remove_dependency(self, task_id: str, dependency_id: str) -> Task:
        """Remove *dependency_id* from the dependencies of *task_id*.

        Removing an edge that does not exist is a no-op.

        Raises:
            TaskNotFoundError: task_id is unknown
        """
        if self.repository is None:
            raise RuntimeError("DependencyGraph has no repository to write to")

        await self.refresh()
        task = self._require(task_id)
        if dependency_id not in task.dependencies:
            return task

        remaining = [dep for dep in task.dependencies if dep != dependency_id]
        updated = await self.repository.update(task_id, TaskUpdate(dependencies=remaining))
        self._tasks[task_id] = updated
        logger.info("removed dependency %s -> %s", dependency_id, task_id)
        return updated
