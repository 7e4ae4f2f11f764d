"""Tests for DependencyGraph and the cycle search behind it."""

from __future__ import annotations

import random
from unittest.mock import AsyncMock, patch

import pytest

from taskflow.models import (
    CircularDependencyError,
    SelfDependencyError,
    TaskNotFoundError,
)
from taskflow.services.dependency_graph import DependencyGraph, find_cycle


def _reaches_itself(adjacency: dict[str, list[str]], start: str) -> bool:
    """Brute-force reachability check, independent of find_cycle."""
    seen: set[str] = set()
    frontier = list(adjacency.get(start, []))
    while frontier:
        node = frontier.pop()
        if node == start:
            return True
        if node in seen:
            continue
        seen.add(node)
        frontier.extend(adjacency.get(node, []))
    return False


# ---------------------------------------------------------------------------
# find_cycle
# ---------------------------------------------------------------------------


def test_find_cycle_on_chain_is_none():
    adjacency = {"c": ["b"], "b": ["a"], "a": []}
    assert find_cycle(adjacency, ["c"]) is None


def test_find_cycle_reports_closed_path():
    adjacency = {"a": ["b"], "b": ["c"], "c": ["a"]}
    cycle = find_cycle(adjacency, ["a"])
    assert cycle is not None
    assert cycle[0] == cycle[-1]
    assert set(cycle) == {"a", "b", "c"}


def test_find_cycle_diamond_is_not_a_cycle():
    # d depends on b and c, both depend on a
    adjacency = {"d": ["b", "c"], "b": ["a"], "c": ["a"], "a": []}
    assert find_cycle(adjacency, ["d"]) is None


def test_find_cycle_with_overlay_edge_does_not_mutate_adjacency():
    adjacency = {"b": ["a"], "a": []}
    assert find_cycle(adjacency, ["a"], extra_edge=("a", "b")) is not None
    assert adjacency == {"b": ["a"], "a": []}


def test_find_cycle_unknown_ids_are_leaves():
    assert find_cycle({"a": ["ghost"]}, ["a"]) is None


def test_find_cycle_handles_long_chain_without_recursion_limit():
    size = 5000
    adjacency = {f"t{i}": [f"t{i - 1}"] for i in range(1, size)}
    adjacency["t0"] = []
    assert find_cycle(adjacency, [f"t{size - 1}"]) is None


# ---------------------------------------------------------------------------
# add_dependency
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_add_dependency_appends_prerequisite(make_task, make_repo):
    repo = make_repo(make_task("a"), make_task("b"))
    graph = DependencyGraph(repo)

    updated = await graph.add_dependency("a", "b")

    assert updated.dependencies == ["a"]
    stored = await repo.get_by_id("b")
    assert stored.dependencies == ["a"]


@pytest.mark.asyncio
async def test_add_dependency_twice_is_idempotent(make_task, make_repo):
    repo = make_repo(make_task("a"), make_task("b"))
    graph = DependencyGraph(repo)

    await graph.add_dependency("a", "b")
    await graph.add_dependency("a", "b")

    stored = await repo.get_by_id("b")
    assert stored.dependencies.count("a") == 1


@pytest.mark.asyncio
async def test_self_dependency_rejected_and_graph_unchanged(make_task, make_repo):
    repo = make_repo(make_task("x"))
    graph = DependencyGraph(repo)

    with patch.object(repo, "update", AsyncMock()) as update:
        with pytest.raises(SelfDependencyError):
            await graph.add_dependency("x", "x")

    update.assert_not_awaited()
    assert (await repo.get_by_id("x")).dependencies == []


@pytest.mark.asyncio
async def test_self_dependency_rejected_even_for_unknown_id(make_repo):
    graph = DependencyGraph(make_repo())
    with pytest.raises(SelfDependencyError):
        await graph.add_dependency("ghost", "ghost")


@pytest.mark.asyncio
async def test_circular_dependency_rejected_without_mutation(make_task, make_repo):
    repo = make_repo(
        make_task("a"),
        make_task("b", deps=["a"]),
        make_task("c", deps=["b"]),
    )
    graph = DependencyGraph(repo)

    with pytest.raises(CircularDependencyError) as exc_info:
        await graph.add_dependency("c", "a")

    assert exc_info.value.kind == "circular_dependency"
    assert "'A' (a)" in exc_info.value.message
    assert (await repo.get_by_id("a")).dependencies == []


@pytest.mark.asyncio
async def test_diamond_edges_are_accepted(make_task, make_repo):
    repo = make_repo(make_task("a"), make_task("b"), make_task("c"), make_task("d"))
    graph = DependencyGraph(repo)

    await graph.add_dependency("a", "b")
    await graph.add_dependency("a", "c")
    await graph.add_dependency("b", "d")
    await graph.add_dependency("c", "d")

    assert (await repo.get_by_id("d")).dependencies == ["b", "c"]
    assert not graph.has_cycle()


@pytest.mark.asyncio
async def test_missing_ids_raise_not_found(make_task, make_repo):
    repo = make_repo(make_task("a"))
    graph = DependencyGraph(repo)

    with pytest.raises(TaskNotFoundError):
        await graph.add_dependency("ghost", "a")
    with pytest.raises(TaskNotFoundError):
        await graph.add_dependency("a", "ghost")


@pytest.mark.asyncio
@pytest.mark.parametrize("seed", range(8))
async def test_random_insertions_keep_graph_acyclic(seed, make_task, make_repo):
    """Random add attempts, rejecting cycles, never leave a cycle behind."""
    rng = random.Random(seed)
    ids = [f"t{i}" for i in range(12)]
    repo = make_repo(*(make_task(task_id) for task_id in ids))
    graph = DependencyGraph(repo)

    for _ in range(60):
        source, target = rng.choice(ids), rng.choice(ids)
        try:
            await graph.add_dependency(source, target)
        except (SelfDependencyError, CircularDependencyError):
            pass

        adjacency = {task.id: task.dependencies for task in await repo.get_all()}
        assert not any(_reaches_itself(adjacency, task_id) for task_id in ids)


# ---------------------------------------------------------------------------
# remove_dependency
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_remove_dependency(make_task, make_repo):
    repo = make_repo(make_task("a"), make_task("b"), make_task("c", deps=["a", "b"]))
    graph = DependencyGraph(repo)

    updated = await graph.remove_dependency("c", "a")

    assert updated.dependencies == ["b"]


@pytest.mark.asyncio
async def test_remove_absent_dependency_is_noop(make_task, make_repo):
    repo = make_repo(make_task("a"), make_task("b", deps=["a"]))
    graph = DependencyGraph(repo)

    updated = await graph.remove_dependency("b", "zzz")

    assert updated.dependencies == ["a"]


@pytest.mark.asyncio
async def test_remove_dependency_unknown_task(make_repo):
    graph = DependencyGraph(make_repo())
    with pytest.raises(TaskNotFoundError):
        await graph.remove_dependency("ghost", "a")


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


def test_dependencies_and_dependents(make_task):
    graph = DependencyGraph(
        tasks=[
            make_task("a"),
            make_task("b", deps=["a"]),
            make_task("c", deps=["a"]),
            make_task("d", deps=["b", "c"]),
        ]
    )

    assert [t.id for t in graph.get_dependencies("d")] == ["b", "c"]
    assert [t.id for t in graph.get_dependents("a")] == ["b", "c"]
    assert [t.id for t in graph.get_transitive_dependents("a")] == ["b", "c", "d"]


def test_detect_cycle_with_overlay(make_task):
    graph = DependencyGraph(tasks=[make_task("a"), make_task("b", deps=["a"])])

    assert not graph.detect_cycle("b")
    assert graph.detect_cycle("a", extra_edge=("a", "b"))
    assert graph.get_dependencies("a") == []


def test_has_cycle_on_stored_cycle(make_task):
    graph = DependencyGraph(
        tasks=[make_task("a", deps=["b"]), make_task("b", deps=["a"])]
    )
    assert graph.has_cycle()
