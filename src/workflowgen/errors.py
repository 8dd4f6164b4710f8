# errors.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class WorkflowError(Exception):
    """Base class for every error raised while building or checking workflows."""


@dataclass
class InvalidKeyError(WorkflowError):
    """An env / with key that cannot be emitted as a bare mapping key."""
    key: str
    section: str = "env"

    def __str__(self) -> str:
        kind = "environment variable" if self.section == "env" else f"'{self.section}' parameter"
        return f"'{self.key}' is not a valid {kind} name"


@dataclass
class InvalidScalarError(WorkflowError):
    value: str
    reason: str

    def __str__(self) -> str:
        return f"{self.value!r} cannot be emitted: {self.reason}"


@dataclass
class InvalidJobError(WorkflowError):
    job: str
    message: str

    def __str__(self) -> str:
        return f"job '{self.job}': {self.message}"


@dataclass
class InvalidStepError(WorkflowError):
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class DriftError(WorkflowError):
    """
    A persisted workflow file differs from what would be generated now.

    `filename` is the bare file name (ci.yml / clean.yml) so the message
    stays stable regardless of where the repository is checked out.
    """
    filename: str

    def __str__(self) -> str:
        return (
            f"{self.filename} does not contain contents that would have been generated "
            f"by workflowgen; try running `workflowgen generate`"
        )


@dataclass
class WorkflowLoadError(WorkflowError):
    path: Path
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"
