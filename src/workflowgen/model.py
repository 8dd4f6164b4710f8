# model.py
from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple, Union

from .errors import InvalidJobError, InvalidStepError

# GitHub Actions job ids: letter or underscore, then alphanumerics, '-' or '_'
JOB_ID_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")

DEFAULT_OSES = ("ubuntu-latest",)
DEFAULT_TOOL_VERSIONS = ("2.13.1",)
DEFAULT_RUNTIME_VERSIONS = ("adopt@1.8",)


def _freeze(obj, name: str, value) -> None:
    # frozen dataclasses: normalise inputs in __post_init__
    object.__setattr__(obj, name, value)


def _strings(values) -> Tuple[str, ...]:
    if isinstance(values, str):
        return (values,)
    return tuple(values)


def _mapping(values) -> Mapping[str, str]:
    # read-only view over a private copy; excluded from hashing
    return MappingProxyType(dict(values))


@dataclass(frozen=True)
class Run:
    """Shell commands, joined by newlines into a single `run:` block."""
    commands: Tuple[str, ...]
    name: Optional[str] = None
    cond: Optional[str] = None
    env: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        _freeze(self, "commands", _strings(self.commands))
        _freeze(self, "env", _mapping(self.env))


@dataclass(frozen=True)
class ToolInvocation:
    """
    Commands handed to the build tool (e.g. sbt) in one invocation.

    The rendered line is `<tool> ++${{ matrix.scala }} <commands...>`, so every
    matrix entry runs the commands against its own tool version.
    """
    commands: Tuple[str, ...]
    name: Optional[str] = None
    cond: Optional[str] = None
    env: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        _freeze(self, "commands", _strings(self.commands))
        _freeze(self, "env", _mapping(self.env))


@dataclass(frozen=True)
class ActionUse:
    """A reusable action pinned to a major version: `uses: owner/repo@vN`."""
    owner: str
    repo: str
    version: int
    params: Mapping[str, str] = field(default_factory=dict, hash=False)
    name: Optional[str] = None
    cond: Optional[str] = None
    env: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        # bool is an int subclass, but `v True` is never what anyone meant
        if isinstance(self.version, bool) or not isinstance(self.version, int) or self.version < 0:
            raise InvalidStepError(
                f"action {self.owner}/{self.repo} needs a non-negative integer version, got {self.version!r}"
            )
        _freeze(self, "params", _mapping(self.params))
        _freeze(self, "env", _mapping(self.env))

    @property
    def ref(self) -> str:
        return f"{self.owner}/{self.repo}@v{self.version}"


WorkflowStep = Union[Run, ToolInvocation, ActionUse]

STEP_TYPES = (Run, ToolInvocation, ActionUse)

# Built-in steps
CHECKOUT = ActionUse("actions", "checkout", 2, name="Checkout current branch")
SETUP_ENVIRONMENT = ActionUse("olafurpg", "setup-scala", 5, name="Setup Java and Scala")


@dataclass(frozen=True)
class WorkflowJob:
    """
    One job of the workflow.

    `id` is the key under `jobs:` and what other jobs list in `needs`;
    `name` is the display name shown in the GitHub UI.
    """
    id: str
    name: str
    steps: Tuple[WorkflowStep, ...]
    needs: Tuple[str, ...] = ()
    cond: Optional[str] = None
    env: Mapping[str, str] = field(default_factory=dict, hash=False)
    oses: Tuple[str, ...] = DEFAULT_OSES
    tool_versions: Tuple[str, ...] = DEFAULT_TOOL_VERSIONS
    runtime_versions: Tuple[str, ...] = DEFAULT_RUNTIME_VERSIONS

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not JOB_ID_PATTERN.match(self.id):
            raise InvalidJobError(
                str(self.id),
                "job id must start with a letter or '_' and contain only letters, digits, '-' or '_'",
            )

        _freeze(self, "steps", tuple(self.steps))
        _freeze(self, "needs", _strings(self.needs))
        _freeze(self, "oses", _strings(self.oses))
        _freeze(self, "tool_versions", _strings(self.tool_versions))
        _freeze(self, "runtime_versions", _strings(self.runtime_versions))
        _freeze(self, "env", _mapping(self.env))

        if not self.steps:
            raise InvalidJobError(self.id, "job must have at least one step")
        if not self.oses:
            raise InvalidJobError(self.id, "job must run on at least one OS")
        for step in self.steps:
            if not isinstance(step, STEP_TYPES):
                raise InvalidJobError(self.id, f"not a workflow step: {step!r}")

    @property
    def declares_shell(self) -> bool:
        """Windows runners default to PowerShell, so mixed matrices pin bash."""
        return any("windows" in os_name.lower() for os_name in self.oses)


@dataclass(frozen=True)
class Workflow:
    """The whole ci.yml document."""
    name: str
    jobs: Tuple[WorkflowJob, ...]
    target_branches: Tuple[str, ...] = ("*",)
    env: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        _freeze(self, "jobs", tuple(self.jobs))
        _freeze(self, "target_branches", _strings(self.target_branches))
        _freeze(self, "env", _mapping(self.env))
