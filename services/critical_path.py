"""Critical Path Method (CPM) analysis over a project's task graph.

All times are whole days relative to an arbitrary project start at t=0.
Dependencies point from a task to the tasks it waits for. Dependencies on
tasks outside the analysed set are ignored.

Cyclic dependencies are not rejected. The traversal is depth-first in
input order; a dependency on a task that is still on the traversal stack
contributes the neutral value (0 on the forward pass, the project duration
on the backward pass) and the offending edge is reported in
``CriticalPathResult.cycles``. Times for tasks on a cycle are therefore an
approximation, not a rigorous CPM result.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from core.enums import TaskStatus
from core.log import get_logger
from core.settings import PLANNING
from models.snapshots import TaskPlanningData
from services.duration import estimate_duration_days


logger = get_logger("planning.cpm")

Edge = Tuple[str, str]

_WHITE, _GRAY, _BLACK = 0, 1, 2


@dataclass
class PathNode:
    task: TaskPlanningData
    duration: int
    earliest_start: int = 0
    earliest_finish: int = 0
    latest_start: int = 0
    latest_finish: int = 0
    slack: int = 0
    is_critical: bool = False

    @property
    def task_id(self) -> str:
        return self.task.id


@dataclass(frozen=True)
class CriticalPathResult:
    nodes: Tuple[PathNode, ...]
    critical_tasks: Tuple[PathNode, ...]
    project_duration: int
    total_slack: int
    # (task_id, depends_on_id) edges that close a dependency cycle.
    cycles: Tuple[Edge, ...] = ()

    @property
    def has_cycles(self) -> bool:
        return bool(self.cycles)

    @property
    def critical_path_progress(self) -> float:
        """Percentage of critical tasks already completed."""
        if not self.critical_tasks:
            return 0.0
        done = sum(1 for node in self.critical_tasks if node.task.status == TaskStatus.COMPLETED)
        return done / len(self.critical_tasks) * 100

    @property
    def blocked_critical_tasks(self) -> Tuple[PathNode, ...]:
        return tuple(node for node in self.critical_tasks if node.task.status == TaskStatus.BLOCKED)

    def node_for(self, task_id: str) -> Optional[PathNode]:
        for node in self.nodes:
            if node.task_id == task_id:
                return node
        return None


def _post_order(order: Sequence[str], edges: Mapping[str, Sequence[str]]) -> Tuple[List[str], List[Edge]]:
    """Iterative three-colour DFS.

    Returns the nodes in post-order (every node after the nodes its edges
    lead to) and the back edges that closed a cycle.
    """

    color = {node: _WHITE for node in order}
    finished: List[str] = []
    back_edges: List[Edge] = []

    for root in order:
        if color[root] != _WHITE:
            continue
        color[root] = _GRAY
        stack = [(root, iter(edges.get(root, ())))]
        while stack:
            node, targets = stack[-1]
            for target in targets:
                state = color[target]
                if state == _WHITE:
                    color[target] = _GRAY
                    stack.append((target, iter(edges.get(target, ()))))
                    break
                if state == _GRAY:
                    back_edges.append((node, target))
            else:
                stack.pop()
                color[node] = _BLACK
                finished.append(node)
    return finished, back_edges


def _dependency_graph(tasks: Iterable[TaskPlanningData]):
    task_map: Dict[str, TaskPlanningData] = {}
    for task in tasks:
        task_map[task.id] = task

    predecessors: Dict[str, List[str]] = {}
    successors: Dict[str, List[str]] = {task_id: [] for task_id in task_map}
    for task_id, task in task_map.items():
        deps: List[str] = []
        for dep in task.depends_on or ():
            if dep.id in task_map and dep.id not in deps:
                deps.append(dep.id)
                successors[dep.id].append(task_id)
        predecessors[task_id] = deps
    return task_map, predecessors, successors


def find_dependency_cycles(tasks: Iterable[TaskPlanningData]) -> List[Edge]:
    """Return the ``(task_id, depends_on_id)`` edges that close a cycle."""

    task_map, predecessors, _ = _dependency_graph(tasks)
    _, back_edges = _post_order(list(task_map), predecessors)
    return back_edges


def analyze_critical_path(
    tasks: Sequence[TaskPlanningData],
    *,
    hours_per_day: float = PLANNING.hours_per_day,
) -> Optional[CriticalPathResult]:
    """Run a CPM forward and backward pass over ``tasks``.

    Returns ``None`` when there is nothing to analyse. Every call builds
    fresh nodes, so repeated calls on the same input give equal results.
    """

    if not tasks:
        return None

    task_map, predecessors, successors = _dependency_graph(tasks)
    order = list(task_map)
    nodes = {
        task_id: PathNode(task=task, duration=estimate_duration_days(task, hours_per_day=hours_per_day))
        for task_id, task in task_map.items()
    }

    # Forward pass: dependencies are finished before their dependents.
    forward_order, cycles = _post_order(order, predecessors)
    finished: Dict[str, int] = {}
    for task_id in forward_order:
        node = nodes[task_id]
        node.earliest_start = max((finished[dep] for dep in predecessors[task_id] if dep in finished), default=0)
        node.earliest_finish = node.earliest_start + node.duration
        finished[task_id] = node.earliest_finish

    project_duration = max((node.earliest_finish for node in nodes.values()), default=0)

    # Backward pass: successors are settled before the tasks they wait on.
    backward_order, _ = _post_order(order, successors)
    latest_starts: Dict[str, int] = {}
    for task_id in backward_order:
        node = nodes[task_id]
        settled = [latest_starts[succ] for succ in successors[task_id] if succ in latest_starts]
        node.latest_finish = min([project_duration, *settled])
        node.latest_start = node.latest_finish - node.duration
        latest_starts[task_id] = node.latest_start

    for node in nodes.values():
        node.slack = node.latest_start - node.earliest_start
        node.is_critical = node.slack == 0

    all_nodes = tuple(nodes[task_id] for task_id in order)
    critical = tuple(sorted((node for node in all_nodes if node.is_critical), key=lambda n: n.earliest_start))

    if cycles:
        logger.warning("Dependency cycle detected across %d edge(s): %s", len(cycles), cycles)
    logger.debug(
        "CPM: %d tasks, duration %d days, %d critical",
        len(all_nodes),
        project_duration,
        len(critical),
    )

    return CriticalPathResult(
        nodes=all_nodes,
        critical_tasks=critical,
        project_duration=project_duration,
        total_slack=sum(node.slack for node in all_nodes),
        cycles=tuple(cycles),
    )


__all__ = [
    "CriticalPathResult",
    "PathNode",
    "analyze_critical_path",
    "find_dependency_cycles",
]
