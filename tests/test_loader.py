"""Tests for loading workflow descriptions from disk."""

import json
from textwrap import dedent

import pytest

from workflowgen.errors import InvalidJobError, WorkflowLoadError
from workflowgen.loader import find_workflow_files, load_workflow
from workflowgen.model import CHECKOUT, ActionUse, Run, ToolInvocation, Workflow


def _write(path, text: str):
    path.write_text(dedent(text), encoding="utf-8")
    return path


class TestLoadPython:
    """Tests for .py workflow files."""

    def test_workflow_function(self, tmp_path) -> None:
        """Test a workflow() factory is called."""
        path = _write(
            tmp_path / "ci_workflow.py",
            """
            from workflowgen import wf, job, sh, CHECKOUT

            def workflow():
                return wf("CI", job("build", "Build", CHECKOUT, sh("make")))
            """,
        )
        loaded = load_workflow(path)
        assert isinstance(loaded, Workflow)
        assert loaded.name == "CI"
        assert loaded.jobs[0].steps == (CHECKOUT, Run(("make",)))

    def test_workflow_constant(self, tmp_path) -> None:
        """Test a module-level WORKFLOW is picked up."""
        path = _write(
            tmp_path / "ci_workflow.py",
            """
            from workflowgen import wf, job, tool

            WORKFLOW = wf("CI", job("build", "Build", tool("test")))
            """,
        )
        assert load_workflow(path).jobs[0].steps == (ToolInvocation(("test",)),)

    def test_helper_name_collision(self, tmp_path) -> None:
        """Test importing the `workflow` helper gets a clear message."""
        path = _write(
            tmp_path / "ci_workflow.py",
            """
            from workflowgen import workflow
            """,
        )
        with pytest.raises(WorkflowLoadError, match="name collision"):
            load_workflow(path)

    def test_not_a_workflow(self, tmp_path) -> None:
        """Test files without a Workflow are rejected."""
        path = _write(tmp_path / "ci_workflow.py", "WORKFLOW = 42\n")
        with pytest.raises(WorkflowLoadError, match="must return/define a Workflow"):
            load_workflow(path)

    def test_model_errors_propagate(self, tmp_path) -> None:
        """Test invalid jobs fail while the file is loaded."""
        path = _write(
            tmp_path / "ci_workflow.py",
            """
            from workflowgen import wf, job, sh

            WORKFLOW = wf("CI", job("build job", "Build", sh("make")))
            """,
        )
        with pytest.raises(InvalidJobError):
            load_workflow(path)


class TestLoadJson:
    """Tests for .json workflow files."""

    def test_all_step_kinds(self, tmp_path) -> None:
        """Test every step kind maps onto the model."""
        description = {
            "name": "CI",
            "target_branches": ["main"],
            "env": {"GITHUB_TOKEN": "${{ secrets.GITHUB_TOKEN }}"},
            "jobs": [
                {
                    "id": "build",
                    "name": "Build",
                    "oses": ["ubuntu-latest", "windows-latest"],
                    "steps": [
                        {"kind": "checkout"},
                        {"kind": "use", "owner": "actions", "repo": "cache", "version": 1, "params": {"path": "~/.cache"}},
                        {"kind": "tool", "commands": ["test"], "name": "Build project"},
                        {"kind": "run", "commands": ["du -sh target"], "if": "always()"},
                    ],
                },
                {"id": "publish", "name": "Publish", "needs": ["build"], "steps": [{"kind": "setup"}]},
            ],
        }
        path = tmp_path / "ci_workflow.json"
        path.write_text(json.dumps(description), encoding="utf-8")

        loaded = load_workflow(path)
        build, publish = loaded.jobs
        assert loaded.target_branches == ("main",)
        assert build.declares_shell
        assert build.steps[0] is CHECKOUT
        assert build.steps[1] == ActionUse("actions", "cache", 1, params={"path": "~/.cache"})
        assert build.steps[2] == ToolInvocation(("test",), name="Build project")
        assert build.steps[3].cond == "always()"
        assert publish.needs == ("build",)
        assert publish.tool_versions == ("2.13.1",)

    @pytest.mark.parametrize(
        "step",
        [
            {"kind": "script", "commands": ["x"]},
            {"kind": "use", "owner": "a", "repo": "b", "version": -1},
            {"kind": "run", "commands": ["x"], "unknown": True},
        ],
    )
    def test_invalid_steps(self, tmp_path, step) -> None:
        """Test schema violations become load errors."""
        path = tmp_path / "ci_workflow.json"
        path.write_text(
            json.dumps({"jobs": [{"id": "build", "name": "Build", "steps": [step]}]}),
            encoding="utf-8",
        )
        with pytest.raises(WorkflowLoadError, match="invalid workflow description"):
            load_workflow(path)

    def test_empty_steps(self, tmp_path) -> None:
        """Test a job without steps is rejected by the schema."""
        path = tmp_path / "ci_workflow.json"
        path.write_text(json.dumps({"jobs": [{"id": "build", "name": "Build", "steps": []}]}), encoding="utf-8")
        with pytest.raises(WorkflowLoadError):
            load_workflow(path)


class TestLoadWorkflow:
    """Tests for dispatch and discovery."""

    def test_missing_file(self, tmp_path) -> None:
        """Test a missing path raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_workflow(tmp_path / "nope.py")

    def test_unsupported_suffix(self, tmp_path) -> None:
        """Test only .py and .json are accepted."""
        path = _write(tmp_path / "ci_workflow.txt", "hello\n")
        with pytest.raises(WorkflowLoadError, match=r"\.py or \.json"):
            load_workflow(path)

    def test_find_workflow_files(self, tmp_path) -> None:
        """Test discovery picks up the default file and *_workflow files."""
        for name in ("workflowgen_workflow.py", "ci_workflow.py", "nightly_workflow.json", "helpers.py"):
            (tmp_path / name).write_text("", encoding="utf-8")

        found = [p.name for p in find_workflow_files(tmp_path)]
        assert found == sorted(["workflowgen_workflow.py", "ci_workflow.py", "nightly_workflow.json"])

    def test_find_workflow_files_empty(self, tmp_path) -> None:
        """Test an empty directory yields nothing."""
        assert find_workflow_files(tmp_path) == []
