# dsl.py
from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from .model import (
    DEFAULT_OSES,
    DEFAULT_RUNTIME_VERSIONS,
    DEFAULT_TOOL_VERSIONS,
    ActionUse,
    Run,
    ToolInvocation,
    Workflow,
    WorkflowJob,
    WorkflowStep,
)


# ---------------------------------------------------------------------
# Step helpers
# ---------------------------------------------------------------------

def sh(
    *commands: str,
    name: str | None = None,
    cond: str | None = None,
    env: Optional[Dict[str, str]] = None,
) -> Run:
    """Create a shell step; several commands end up in one `run: |` block."""
    return Run(commands, name=name, cond=cond, env=env or {})


def tool(
    *commands: str,
    name: str | None = None,
    cond: str | None = None,
    env: Optional[Dict[str, str]] = None,
) -> ToolInvocation:
    """Create a build-tool step: tool("test", "+publish") -> `sbt ++... test +publish`."""
    return ToolInvocation(commands, name=name, cond=cond, env=env or {})


def use(
    owner: str,
    repo: str,
    version: int,
    *,
    params: Optional[Dict[str, str]] = None,
    name: str | None = None,
    cond: str | None = None,
    env: Optional[Dict[str, str]] = None,
) -> ActionUse:
    """Create an action step: use("actions", "cache", 1, params={...})."""
    return ActionUse(owner, repo, version, params=params or {}, name=name, cond=cond, env=env or {})


# ---------------------------------------------------------------------
# Functional Job helper
# ---------------------------------------------------------------------

def job(
    id: str,
    name: str,
    *steps: WorkflowStep,  # allow: job("build", "Build", sh(...), tool(...))
    steps_list: Optional[List[WorkflowStep]] = None,  # allow: job(..., steps_list=[...])
    needs: Optional[List[str]] = None,
    cond: str | None = None,
    env: Optional[Dict[str, str]] = None,
    oses: Optional[List[str]] = None,
    tool_versions: Optional[List[str]] = None,
    runtime_versions: Optional[List[str]] = None,
) -> WorkflowJob:
    steps_final: List[WorkflowStep] = []
    if steps_list:
        steps_final.extend(steps_list)
    steps_final.extend(steps)

    return WorkflowJob(
        id=id,
        name=name,
        steps=steps_final,
        needs=needs or [],
        cond=cond,
        env=env or {},
        oses=DEFAULT_OSES if oses is None else oses,
        tool_versions=DEFAULT_TOOL_VERSIONS if tool_versions is None else tool_versions,
        runtime_versions=DEFAULT_RUNTIME_VERSIONS if runtime_versions is None else runtime_versions,
    )


# ---------------------------------------------------------------------
# Builder API
# ---------------------------------------------------------------------

class JobBuilder:
    def __init__(self, id: str, name: str | None = None):
        self.id = id
        self.name = name if name is not None else id
        self._needs: list[str] = []
        self._steps: list[WorkflowStep] = []
        self._cond: str | None = None
        self._env: dict[str, str] = {}
        self._oses: list[str] = list(DEFAULT_OSES)
        self._tool_versions: list[str] = list(DEFAULT_TOOL_VERSIONS)
        self._runtime_versions: list[str] = list(DEFAULT_RUNTIME_VERSIONS)

    def depends_on(self, *job_ids: str):
        self._needs.extend(job_ids)
        return self

    def when(self, cond: str):
        self._cond = cond
        return self

    def on(self, *oses: str):
        self._oses = list(oses)
        return self

    def with_tool_versions(self, *versions: str):
        self._tool_versions = list(versions)
        return self

    def with_runtime_versions(self, *versions: str):
        self._runtime_versions = list(versions)
        return self

    def with_env(self, **env):
        # values must be strings once they reach the YAML
        self._env.update({k: str(v) for k, v in env.items()})
        return self

    def step(self, step: WorkflowStep):
        self._steps.append(step)
        return self

    def define_step(self, name: str, *commands: str):
        return self.step(sh(*commands, name=name))

    def build(self) -> WorkflowJob:
        return WorkflowJob(
            id=self.id,
            name=self.name,
            steps=self._steps,
            needs=self._needs,
            cond=self._cond,
            env=self._env,
            oses=self._oses,
            tool_versions=self._tool_versions,
            runtime_versions=self._runtime_versions,
        )


def build(id: str, name: str | None = None) -> JobBuilder:
    """Convenience: build('test', 'Run tests').define_step(...).build()"""
    return JobBuilder(id, name)


# ---------------------------------------------------------------------
# Workflow helper (single-file story)
# ---------------------------------------------------------------------

def wf(
    name: str,
    *jobs: WorkflowJob,
    branches: Optional[Iterable[str]] = None,
    env: Optional[Dict[str, str]] = None,
) -> Workflow:
    """
    Workflow definition helper. Use this name so you can define your own
    def workflow(): return wf(...).

    Users can write:
        from workflowgen import wf, job, sh, tool

        def workflow():
            return wf(
                "Continuous Integration",
                job("build", "Build and Test", tool("test")),
            )

    Or use WORKFLOW directly:
        WORKFLOW = wf("Continuous Integration", job(...))
    """
    return Workflow(
        name=name,
        jobs=jobs,
        target_branches=("*",) if branches is None else tuple(branches),
        env=env or {},
    )


workflow = wf  # alias (avoid naming your function workflow if you use it)
