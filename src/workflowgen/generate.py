# generate.py
from __future__ import annotations

from pathlib import Path
from typing import List, Tuple

from .compiler import DEFAULT_TOOL_COMMAND, compile_workflow
from .errors import DriftError
from .model import Workflow

CI_FILENAME = "ci.yml"
CLEAN_FILENAME = "clean.yml"

CLEAN_TEMPLATE = Path(__file__).parent / "templates" / CLEAN_FILENAME


def _join_lines(text: str) -> str:
    # Compare line by line: line endings and the final newline don't count.
    return "\n".join(text.splitlines())


def workflows_dir(base_dir: str | Path) -> Path:
    return Path(base_dir) / ".github" / "workflows"


def read_clean_contents() -> str:
    """The bundled artifact-cleanup workflow, passed through unchanged."""
    return _join_lines(CLEAN_TEMPLATE.read_text(encoding="utf-8"))


def expected_documents(
    workflow: Workflow,
    tool_command: str = DEFAULT_TOOL_COMMAND,
) -> List[Tuple[str, str]]:
    """(filename, contents) for every file `generate` owns, in write order."""
    return [
        (CI_FILENAME, compile_workflow(workflow, tool_command)),
        (CLEAN_FILENAME, read_clean_contents()),
    ]


def generate_workflows(
    workflow: Workflow,
    base_dir: str | Path,
    tool_command: str = DEFAULT_TOOL_COMMAND,
) -> List[Path]:
    """
    Write ci.yml and clean.yml under `<base_dir>/.github/workflows`.

    Both documents are rendered before anything is written, so an invalid
    workflow never leaves a half-updated directory behind.
    """
    documents = expected_documents(workflow, tool_command)

    target = workflows_dir(base_dir)
    target.mkdir(parents=True, exist_ok=True)

    written: List[Path] = []
    for filename, contents in documents:
        path = target / filename
        path.write_text(contents, encoding="utf-8")
        written.append(path)
    return written


def check_workflows(
    workflow: Workflow,
    base_dir: str | Path,
    tool_command: str = DEFAULT_TOOL_COMMAND,
) -> List[Path]:
    """
    Verify the persisted workflows match what `generate_workflows` would write.

    Raises:
        DriftError: naming the first stale file.
        FileNotFoundError: a workflow file has never been generated.
    """
    target = workflows_dir(base_dir)

    checked: List[Path] = []
    for filename, expected in expected_documents(workflow, tool_command):
        path = target / filename
        actual = path.read_text(encoding="utf-8")
        if _join_lines(expected) != _join_lines(actual):
            raise DriftError(filename)
        checked.append(path)
    return checked
