# loader.py
from __future__ import annotations

import runpy
from pathlib import Path
from typing import List

from pydantic import ValidationError

from .errors import WorkflowLoadError
from .model import Workflow
from .schema import WorkflowSpec

DEFAULT_WORKFLOW_FILE = "workflowgen_workflow.py"
WORKFLOW_SUFFIXES = (".py", ".json")


# ----------------------------------------------------------------------
# Discovery
# ----------------------------------------------------------------------

def find_workflow_files(directory: str | Path = ".") -> List[Path]:
    """
    Find all workflow description files in `directory`.

    Looks for workflowgen_workflow.py first, then any *_workflow.py or
    *_workflow.json.
    """
    root = Path(directory)
    workflow_files: List[Path] = []

    default_workflow = root / DEFAULT_WORKFLOW_FILE
    if default_workflow.exists():
        workflow_files.append(default_workflow)

    for suffix in WORKFLOW_SUFFIXES:
        for path in root.glob(f"*_workflow{suffix}"):
            if path != default_workflow:
                workflow_files.append(path)

    return sorted(workflow_files)


# ----------------------------------------------------------------------
# Loading
# ----------------------------------------------------------------------

def _load_python(wf_path: Path) -> Workflow:
    module_name = f"workflowgen_workflow_{wf_path.stem}"
    globals_dict = runpy.run_path(str(wf_path), run_name=module_name)

    workflow = None
    if "workflow" in globals_dict and callable(globals_dict["workflow"]):
        try:
            workflow = globals_dict["workflow"]()
        except TypeError as e:
            if "positional argument" in str(e):
                raise WorkflowLoadError(
                    wf_path,
                    "workflow() is being called with arguments (name collision with the helper). "
                    "Use the 'wf' helper instead: `from workflowgen import wf, job, sh` then "
                    "`def workflow(): return wf('CI', job(...))`",
                ) from e
            raise
    elif "WORKFLOW" in globals_dict:
        workflow = globals_dict["WORKFLOW"]

    if not isinstance(workflow, Workflow):
        raise WorkflowLoadError(
            wf_path,
            "must return/define a Workflow. Define workflow() -> Workflow or WORKFLOW = wf(...).",
        )
    return workflow


def _load_json(wf_path: Path) -> Workflow:
    try:
        spec = WorkflowSpec.model_validate_json(wf_path.read_text(encoding="utf-8"))
    except ValidationError as e:
        raise WorkflowLoadError(wf_path, f"invalid workflow description:\n{e}") from e
    return spec.to_workflow()


def load_workflow(path: str | Path) -> Workflow:
    """
    Load a workflow description from a .py or .json file.

    A Python file must define either:
      - workflow() -> Workflow
      - WORKFLOW = Workflow(...)
    A JSON file must match `workflowgen.schema.WorkflowSpec`.
    """
    wf_path = Path(path).expanduser().resolve()
    if not wf_path.exists():
        raise FileNotFoundError(f"Workflow file not found: {wf_path}")

    if wf_path.suffix == ".py":
        return _load_python(wf_path)
    if wf_path.suffix == ".json":
        return _load_json(wf_path)

    raise WorkflowLoadError(wf_path, f"workflow must be a .py or .json file, got: {wf_path.name}")
