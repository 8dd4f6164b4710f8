# settings.py
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .compiler import DEFAULT_TOOL_COMMAND

TOOL_COMMAND_VAR = "WORKFLOWGEN_TOOL_COMMAND"
WORKFLOW_VAR = "WORKFLOWGEN_WORKFLOW"
BASE_DIR_VAR = "WORKFLOWGEN_BASE_DIR"


@dataclass(frozen=True)
class Settings:
    """Configuration picked up from the environment; CLI options override it."""
    tool_command: str = DEFAULT_TOOL_COMMAND
    workflow: Optional[Path] = None   # None -> discover in the working directory
    base_dir: Optional[Path] = None   # None -> git repository root


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ

    workflow = env.get(WORKFLOW_VAR) or None
    base_dir = env.get(BASE_DIR_VAR) or None

    return Settings(
        tool_command=env.get(TOOL_COMMAND_VAR) or DEFAULT_TOOL_COMMAND,
        workflow=Path(workflow) if workflow else None,
        base_dir=Path(base_dir) if base_dir else None,
    )
