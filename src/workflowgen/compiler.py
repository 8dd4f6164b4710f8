# compiler.py
"""
Render a Workflow model into GitHub Actions YAML.

Everything here is a pure string transformation: nothing is parsed back,
nothing is written to disk. Each emitter renders its own level at column 0
and the caller nests it with `indent`, so a fragment never needs to know how
deep it will end up.
"""
from __future__ import annotations

import re
from typing import Iterable, List, Mapping

from .dag import validate_jobs
from .errors import InvalidKeyError, InvalidScalarError
from .model import ActionUse, Run, ToolInvocation, Workflow, WorkflowJob, WorkflowStep

DEFAULT_TOOL_COMMAND = "sbt"

# Matrix axes. The tool invocation selects its version from TOOL_VERSION_AXIS.
TOOL_VERSION_AXIS = "scala"
RUNTIME_VERSION_AXIS = "java"
VERSION_SELECTOR = "++${{ matrix.%s }}" % TOOL_VERSION_AXIS
MATRIX_OS = "${{ matrix.os }}"

HEADER = """\
# This file was automatically generated by workflowgen using the
# `workflowgen generate` command. You should add and commit this file to
# your git repository. It goes without saying that you shouldn't edit
# this file by hand! Instead, if you wish to make changes, you should
# change your workflow description to revise the jobs and steps
# to meet your needs, then regenerate this file."""

# Deliberately broader than YAML's real plain-scalar rules: colons and
# comments are treated as illegal everywhere.
_UNSAFE_ANYWHERE = (":", "#")
_UNSAFE_LEADING = frozenset("!*-?{}[],|>@`\"'&%")
_FLOW_INDICATORS = frozenset(",[]{}")

# Plain scalars a YAML 1.1 or 1.2 reader resolves to null, bool, int, float
# or timestamp instead of a string.
_NON_STRING_PLAIN = re.compile(
    r"""
    ~ | null | Null | NULL
    | y | Y | yes | Yes | YES | n | N | no | No | NO
    | true | True | TRUE | false | False | FALSE
    | on | On | ON | off | Off | OFF
    | [-+]?0b[01_]+
    | [-+]?0o?[0-7_]+
    | [-+]?0x[0-9a-fA-F_]+
    | [-+]?[0-9][0-9_]*
    | [-+]?(?:[0-9][0-9_]*)?\.[0-9_]*(?:[eE][-+]?[0-9]+)?
    | [-+]?[0-9][0-9_]*[eE][-+]?[0-9]+
    | [-+]?\.(?:inf|Inf|INF)
    | \.(?:nan|NaN|NAN)
    | [0-9]{4}-[0-9]{1,2}-[0-9]{1,2}(?:[Tt\s].*)?
    | <<
    | =
    """,
    re.VERBOSE,
)


# ---------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------

def indent(output: str, level: int) -> str:
    """
    Prefix every line of `output` with `level * 2` spaces.

    Blank lines stay blank, so nesting never leaves trailing whitespace behind.
    """
    if level < 0:
        raise ValueError(f"indentation level must be non-negative, got {level}")
    space = " " * (level * 2)
    return "\n".join(space + line if line else line for line in output.split("\n"))


def is_safe_string(s: str, *, flow: bool = False) -> bool:
    """True if `s` can be emitted as a plain (unquoted) scalar."""
    if not s:
        return False
    if any(c in s for c in _UNSAFE_ANYWHERE):
        return False
    if s[0] in _UNSAFE_LEADING:
        return False
    # plain scalars lose surrounding whitespace
    if s != s.strip():
        return False
    if _NON_STRING_PLAIN.fullmatch(s):
        return False
    if flow and any(c in _FLOW_INDICATORS for c in s):
        return False
    return True


def _is_printable(c: str) -> bool:
    o = ord(c)
    if c in "\t\n":
        return True
    # U+2028/U+2029 are line breaks to YAML 1.1 readers, U+FEFF a byte order mark
    if c in "\u2028\u2029\ufeff":
        return False
    return 0x20 <= o <= 0x7E or 0xA0 <= o <= 0xD7FF or 0xE000 <= o <= 0xFFFD or o >= 0x10000


def _check_printable(s: str) -> None:
    for c in s:
        if not _is_printable(c):
            raise InvalidScalarError(s, f"character {c!r} has no literal YAML form")


def _block_header(s: str) -> str:
    # An explicit indentation indicator is needed when the content itself
    # starts with spaces, otherwise YAML would treat them as indentation.
    for line in s.split("\n"):
        if line.startswith(" "):
            return "|2"
        if line.strip():
            break
    return "|"


def wrap(s: str, *, flow: bool = False) -> str:
    """
    Render one string as a YAML scalar.

    Multi-line strings become `|` literal blocks, safe strings stay bare and
    everything else is single-quoted with embedded quotes doubled.
    """
    _check_printable(s)
    if "\n" in s:
        if flow:
            raise InvalidScalarError(s, "multi-line values are not allowed inside a [...] list")
        return _block_header(s) + "\n" + indent(s, 1)
    if is_safe_string(s, flow=flow):
        return s
    return "'" + s.replace("'", "''") + "'"


# ---------------------------------------------------------------------
# Lists and mappings
# ---------------------------------------------------------------------

def compile_list(items: Iterable[str]) -> str:
    return "\n".join("- " + wrap(item) for item in items)


def compile_flow_list(items: Iterable[str]) -> str:
    return "[" + ", ".join(wrap(item, flow=True) for item in items) + "]"


def _check_key(key: str, section: str) -> None:
    if (
        not isinstance(key, str)
        or not is_safe_string(key)
        or any(c.isspace() or not _is_printable(c) for c in key)
    ):
        raise InvalidKeyError(str(key), section)


def compile_env(env: Mapping[str, str], prefix: str = "env") -> str:
    """
    Render `env:` (or `with:`) followed by one `key: value` per entry.

    An empty mapping renders as "" so callers can drop the section entirely.
    """
    if not env:
        return ""

    rendered: List[str] = []
    for key, value in env.items():
        _check_key(key, prefix)
        rendered.append(f"{key}: {wrap(value)}")

    return f"{prefix}:\n{indent(chr(10).join(rendered), 1)}"


# ---------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------

def _quote_command(command: str) -> str:
    if " " not in command:
        return command
    return "'" + command.replace("'", "'\\''") + "'"


def _compile_step_body(step: WorkflowStep, tool_command: str) -> str:
    if isinstance(step, Run):
        return "run: " + wrap("\n".join(step.commands))

    if isinstance(step, ToolInvocation):
        parts = [tool_command, VERSION_SELECTOR, *(_quote_command(c) for c in step.commands)]
        return "run: " + wrap(" ".join(parts))

    if isinstance(step, ActionUse):
        rendered_params = compile_env(step.params, prefix="with")
        body = "uses: " + wrap(step.ref)
        if rendered_params:
            body += "\n" + rendered_params
        return body

    raise TypeError(f"unsupported workflow step: {step!r}")


def compile_step(
    step: WorkflowStep,
    tool_command: str = DEFAULT_TOOL_COMMAND,
    *,
    declare_shell: bool = False,
) -> str:
    """Render one step as a `- ` list item (without the job's indentation)."""
    body = _compile_step_body(step, tool_command)

    rendered_name = f"name: {wrap(step.name)}\n" if step.name is not None else ""
    rendered_cond = f"if: {wrap(step.cond)}\n" if step.cond is not None else ""
    rendered_shell = "shell: bash\n" if declare_shell else ""

    rendered_env = compile_env(step.env)
    if rendered_env:
        rendered_env += "\n"

    preamble = rendered_name + rendered_cond + rendered_shell + rendered_env
    rendered = indent(preamble + body, 1)

    # the first indentation space becomes the list marker
    return "-" + rendered[1:]


# ---------------------------------------------------------------------
# Jobs and the document
# ---------------------------------------------------------------------

def compile_job(job: WorkflowJob, tool_command: str = DEFAULT_TOOL_COMMAND) -> str:
    rendered_needs = f"\nneeds: {compile_flow_list(job.needs)}" if job.needs else ""
    rendered_cond = f"\nif: {wrap(job.cond)}" if job.cond is not None else ""

    rendered_env = compile_env(job.env)
    if rendered_env:
        rendered_env = "\n" + rendered_env

    declare_shell = job.declares_shell
    rendered_steps = "\n\n".join(
        compile_step(step, tool_command, declare_shell=declare_shell) for step in job.steps
    )

    body = (
        f"name: {wrap(job.name)}{rendered_needs}{rendered_cond}\n"
        f"strategy:\n"
        f"  matrix:\n"
        f"    os: {compile_flow_list(job.oses)}\n"
        f"    {TOOL_VERSION_AXIS}: {compile_flow_list(job.tool_versions)}\n"
        f"    {RUNTIME_VERSION_AXIS}: {compile_flow_list(job.runtime_versions)}\n"
        f"runs-on: {MATRIX_OS}{rendered_env}\n"
        f"steps:\n"
        f"{indent(rendered_steps, 1)}"
    )

    return f"{job.id}:\n{indent(body, 1)}"


def compile_workflow(workflow: Workflow, tool_command: str = DEFAULT_TOOL_COMMAND) -> str:
    """
    Render the complete ci.yml document.

    The output carries no trailing newline; the same model and tool command
    always produce the same bytes.
    """
    validate_jobs(workflow.jobs)

    rendered_env = compile_env(workflow.env)
    if rendered_env:
        rendered_env += "\n\n"

    branches = compile_flow_list(workflow.target_branches)
    rendered_jobs = "\n\n".join(compile_job(job, tool_command) for job in workflow.jobs)

    return (
        f"{HEADER}\n"
        f"\n"
        f"name: {wrap(workflow.name)}\n"
        f"\n"
        f"on:\n"
        f"  pull_request:\n"
        f"    branches: {branches}\n"
        f"  push:\n"
        f"    branches: {branches}\n"
        f"\n"
        f"{rendered_env}jobs:\n"
        f"{indent(rendered_jobs, 1)}"
    )
