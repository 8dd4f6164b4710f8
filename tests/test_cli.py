"""Tests for the workflowgen command line."""

from textwrap import dedent

import pytest
from click.testing import CliRunner

from workflowgen.cli import cli
from workflowgen.compiler import compile_workflow
from workflowgen.generate import CI_FILENAME, CLEAN_FILENAME, workflows_dir
from workflowgen.loader import load_workflow

WORKFLOW_SOURCE = """
from workflowgen import wf, job, sh, tool, CHECKOUT

def workflow():
    return wf(
        "Continuous Integration",
        job("build", "Build and Test", CHECKOUT, tool("test"), sh("echo done")),
    )
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("WORKFLOWGEN_TOOL_COMMAND", "WORKFLOWGEN_WORKFLOW", "WORKFLOWGEN_BASE_DIR"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def workflow_file(tmp_path):
    path = tmp_path / "workflowgen_workflow.py"
    path.write_text(dedent(WORKFLOW_SOURCE), encoding="utf-8")
    return path


class TestRender:
    """Tests for `workflowgen render`."""

    def test_prints_document(self, runner, workflow_file) -> None:
        """Test render prints exactly the compiled document."""
        result = runner.invoke(cli, ["render", "--workflow", str(workflow_file)])
        assert result.exit_code == 0, result.output
        assert result.output == compile_workflow(load_workflow(workflow_file)) + "\n"

    def test_tool_command_option(self, runner, workflow_file) -> None:
        """Test --tool-command replaces sbt."""
        result = runner.invoke(cli, ["render", "--workflow", str(workflow_file), "--tool-command", "./mill"])
        assert "run: ./mill ++${{ matrix.scala }} test" in result.output

    def test_tool_command_from_environment(self, runner, workflow_file, monkeypatch) -> None:
        """Test WORKFLOWGEN_TOOL_COMMAND is honoured."""
        monkeypatch.setenv("WORKFLOWGEN_TOOL_COMMAND", "./sbtx")
        result = runner.invoke(cli, ["render", "--workflow", str(workflow_file)])
        assert "run: ./sbtx ++${{ matrix.scala }} test" in result.output

    def test_discovers_default_file(self, runner, workflow_file, monkeypatch) -> None:
        """Test workflowgen_workflow.py in the working directory is found."""
        monkeypatch.chdir(workflow_file.parent)
        result = runner.invoke(cli, ["render"])
        assert result.exit_code == 0, result.output
        assert "name: Continuous Integration" in result.output

    def test_workflow_from_environment(self, runner, workflow_file, monkeypatch) -> None:
        """Test WORKFLOWGEN_WORKFLOW names the description file."""
        monkeypatch.setenv("WORKFLOWGEN_WORKFLOW", str(workflow_file))
        result = runner.invoke(cli, ["render"])
        assert result.exit_code == 0, result.output

    def test_no_workflow_found(self, runner, tmp_path, monkeypatch) -> None:
        """Test a directory without descriptions fails."""
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(cli, ["render"])
        assert result.exit_code == 1
        assert "No workflow file found" in result.output

    def test_multiple_workflows_found(self, runner, workflow_file, monkeypatch) -> None:
        """Test ambiguous discovery asks for --workflow."""
        (workflow_file.parent / "other_workflow.py").write_text(dedent(WORKFLOW_SOURCE), encoding="utf-8")
        monkeypatch.chdir(workflow_file.parent)
        result = runner.invoke(cli, ["render"])
        assert result.exit_code == 1
        assert "Multiple workflow files found" in result.output

    def test_invalid_workflow(self, runner, tmp_path) -> None:
        """Test load errors are reported, not raised."""
        path = tmp_path / "bad_workflow.py"
        path.write_text("WORKFLOW = None\n", encoding="utf-8")
        result = runner.invoke(cli, ["render", "--workflow", str(path)])
        assert result.exit_code == 1
        assert "Invalid workflow" in result.output


class TestGenerateAndCheck:
    """Tests for `workflowgen generate` and `workflowgen check`."""

    def test_generate_then_check(self, runner, workflow_file, tmp_path) -> None:
        """Test check passes right after generate."""
        base = tmp_path / "repo"
        args = ["--workflow", str(workflow_file), "--base-dir", str(base)]

        result = runner.invoke(cli, ["generate", *args])
        assert result.exit_code == 0, result.output
        assert "WORKFLOWS GENERATED" in result.output
        assert (workflows_dir(base) / CI_FILENAME).exists()
        assert (workflows_dir(base) / CLEAN_FILENAME).exists()

        result = runner.invoke(cli, ["check", *args])
        assert result.exit_code == 0, result.output
        assert "WORKFLOWS UP TO DATE" in result.output

    def test_check_reports_drift(self, runner, workflow_file, tmp_path) -> None:
        """Test a hand-edited ci.yml fails the check."""
        base = tmp_path / "repo"
        args = ["--workflow", str(workflow_file), "--base-dir", str(base)]
        runner.invoke(cli, ["generate", *args])

        ci = workflows_dir(base) / CI_FILENAME
        ci.write_text(ci.read_text(encoding="utf-8") + "\n# edited", encoding="utf-8")

        result = runner.invoke(cli, ["check", *args])
        assert result.exit_code == 1
        assert "ci.yml does not contain contents that would have been generated" in result.output

    def test_check_reports_tool_command_drift(self, runner, workflow_file, tmp_path) -> None:
        """Test checking with another tool command fails."""
        base = tmp_path / "repo"
        args = ["--workflow", str(workflow_file), "--base-dir", str(base)]
        runner.invoke(cli, ["generate", *args])

        result = runner.invoke(cli, ["check", *args, "--tool-command", "./mill"])
        assert result.exit_code == 1

    def test_check_without_generate(self, runner, workflow_file, tmp_path) -> None:
        """Test missing files are reported."""
        result = runner.invoke(cli, ["check", "--workflow", str(workflow_file), "--base-dir", str(tmp_path)])
        assert result.exit_code == 1
        assert "Workflow file missing" in result.output

    def test_base_dir_from_environment(self, runner, workflow_file, tmp_path, monkeypatch) -> None:
        """Test WORKFLOWGEN_BASE_DIR chooses the output directory."""
        base = tmp_path / "elsewhere"
        monkeypatch.setenv("WORKFLOWGEN_BASE_DIR", str(base))
        result = runner.invoke(cli, ["generate", "--workflow", str(workflow_file)])
        assert result.exit_code == 0, result.output
        assert (workflows_dir(base) / CI_FILENAME).exists()
