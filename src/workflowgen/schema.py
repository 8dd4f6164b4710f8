# schema.py
"""
Pydantic schemas for workflow descriptions stored as JSON.

A `.json` workflow file mirrors the Python model, with each step tagged by
`kind`:

    {"kind": "run", "commands": ["echo hi"], "if": "github.event_name == 'push'"}
    {"kind": "tool", "commands": ["test"], "name": "Build project"}
    {"kind": "use", "owner": "actions", "repo": "cache", "version": 1, "params": {...}}
    {"kind": "checkout"}
    {"kind": "setup"}
"""
from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .model import (
    CHECKOUT,
    DEFAULT_OSES,
    DEFAULT_RUNTIME_VERSIONS,
    DEFAULT_TOOL_VERSIONS,
    SETUP_ENVIRONMENT,
    ActionUse,
    Run,
    ToolInvocation,
    Workflow,
    WorkflowJob,
    WorkflowStep,
)


class _StepSpec(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str | None = None
    cond: str | None = Field(default=None, alias="if")
    env: dict[str, str] = Field(default_factory=dict)


class RunSpec(_StepSpec):
    kind: Literal["run"]
    commands: list[str]

    def to_step(self) -> WorkflowStep:
        return Run(self.commands, name=self.name, cond=self.cond, env=self.env)


class ToolSpec(_StepSpec):
    kind: Literal["tool"]
    commands: list[str]

    def to_step(self) -> WorkflowStep:
        return ToolInvocation(self.commands, name=self.name, cond=self.cond, env=self.env)


class UseSpec(_StepSpec):
    kind: Literal["use"]
    owner: str
    repo: str
    version: int = Field(ge=0)
    params: dict[str, str] = Field(default_factory=dict)

    def to_step(self) -> WorkflowStep:
        return ActionUse(
            self.owner,
            self.repo,
            self.version,
            params=self.params,
            name=self.name,
            cond=self.cond,
            env=self.env,
        )


class BuiltinSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: Literal["checkout", "setup"]

    def to_step(self) -> WorkflowStep:
        return CHECKOUT if self.kind == "checkout" else SETUP_ENVIRONMENT


# Each member pins `kind` to a literal, so exactly one of them validates.
StepSpec = Union[RunSpec, ToolSpec, UseSpec, BuiltinSpec]


class JobSpec(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    id: str
    name: str
    steps: list[StepSpec] = Field(min_length=1)
    needs: list[str] = Field(default_factory=list)
    cond: str | None = Field(default=None, alias="if")
    env: dict[str, str] = Field(default_factory=dict)
    oses: list[str] = Field(default_factory=lambda: list(DEFAULT_OSES), min_length=1)
    tool_versions: list[str] = Field(default_factory=lambda: list(DEFAULT_TOOL_VERSIONS))
    runtime_versions: list[str] = Field(default_factory=lambda: list(DEFAULT_RUNTIME_VERSIONS))

    def to_job(self) -> WorkflowJob:
        return WorkflowJob(
            id=self.id,
            name=self.name,
            steps=[s.to_step() for s in self.steps],
            needs=self.needs,
            cond=self.cond,
            env=self.env,
            oses=self.oses,
            tool_versions=self.tool_versions,
            runtime_versions=self.runtime_versions,
        )


class WorkflowSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = "Continuous Integration"
    jobs: list[JobSpec]
    target_branches: list[str] = Field(default_factory=lambda: ["*"])
    env: dict[str, str] = Field(default_factory=dict)

    def to_workflow(self) -> Workflow:
        return Workflow(
            name=self.name,
            jobs=[j.to_job() for j in self.jobs],
            target_branches=self.target_branches,
            env=self.env,
        )
