from .dsl import sh, tool, use, job, wf, workflow, JobBuilder, build
from .compiler import compile_workflow
from .generate import generate_workflows, check_workflows
from .model import (
    Run,
    ToolInvocation,
    ActionUse,
    WorkflowJob,
    Workflow,
    CHECKOUT,
    SETUP_ENVIRONMENT,
)

__all__ = [
    "sh",
    "tool",
    "use",
    "job",
    "wf",
    "workflow",
    "JobBuilder",
    "build",
    "compile_workflow",
    "generate_workflows",
    "check_workflows",
    "Run",
    "ToolInvocation",
    "ActionUse",
    "WorkflowJob",
    "Workflow",
    "CHECKOUT",
    "SETUP_ENVIRONMENT",
]
