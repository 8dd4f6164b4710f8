# dag.py
from __future__ import annotations

from collections import deque
from typing import Dict, Iterable, List, Set, Tuple

from .errors import InvalidJobError
from .model import WorkflowJob


def build_dag(jobs: List[WorkflowJob]) -> Tuple[Dict[str, Set[str]], Dict[str, int]]:
    """
    Build a DAG from WorkflowJob objects.

    Requires:
      - job.id: str (unique)
      - job.needs: iterable[str] (ids of jobs that must finish BEFORE this job)
    """
    ids = [j.id for j in jobs]
    if len(set(ids)) != len(ids):
        dupes = sorted({i for i in ids if ids.count(i) > 1})
        raise InvalidJobError(dupes[0], f"duplicate job ids found: {dupes}")

    id_set = set(ids)
    adj: Dict[str, Set[str]] = {i: set() for i in id_set}
    indeg: Dict[str, int] = {i: 0 for i in id_set}

    for job in jobs:
        for need in job.needs:
            if need not in id_set:
                raise InvalidJobError(
                    job.id,
                    f"needs missing job '{need}'. Known jobs: {sorted(id_set)}",
                )
            # Edge need -> job.id (need must run before job)
            if job.id not in adj[need]:
                adj[need].add(job.id)
                indeg[job.id] += 1

    return adj, indeg


def topo_levels(adj: Dict[str, Set[str]], indeg: Dict[str, int]) -> List[List[str]]:
    """
    Convert DAG into topological "levels" (stages).
    Jobs in the same stage have no ordering between them on GitHub's runners.
    """
    indeg = dict(indeg)  # copy (we mutate it)
    q = deque(sorted([n for n, d in indeg.items() if d == 0]))

    levels: List[List[str]] = []
    processed = 0

    while q:
        level_size = len(q)
        level: List[str] = []

        for _ in range(level_size):
            node = q.popleft()
            level.append(node)
            processed += 1

            for child in sorted(adj.get(node, set())):
                indeg[child] -= 1
                if indeg[child] == 0:
                    q.append(child)

        levels.append(level)

    if processed != len(indeg):
        remaining = sorted([n for n, d in indeg.items() if d > 0])
        raise InvalidJobError(remaining[0], f"needs form a cycle. Stuck jobs: {remaining}")

    return levels


def validate_jobs(jobs: Iterable[WorkflowJob]) -> List[List[str]]:
    """Check ids and `needs` of a whole document; returns the stages on success."""
    adj, indeg = build_dag(list(jobs))
    return topo_levels(adj, indeg)
