# workflowgen_workflow.py
# Example workflow description: build and test an sbt project on two OSes,
# then publish from master. `workflowgen generate` turns this into
# .github/workflows/ci.yml and clean.yml.
from __future__ import annotations

from workflowgen import CHECKOUT, SETUP_ENVIRONMENT, job, sh, tool, use, wf

HASHES = "${{ hashFiles('**/*.sbt') }}-${{ hashFiles('project/build.properties') }}"


def cache_steps():
    return [
        use(
            "actions",
            "cache",
            1,
            name="Cache ivy2",
            params={"path": "~/.ivy2/cache", "key": f"${{{{ runner.os }}}}-sbt-ivy-cache-{HASHES}"},
        ),
        use(
            "actions",
            "cache",
            1,
            name="Cache coursier",
            params={"path": "~/.cache/coursier/v1", "key": f"${{{{ runner.os }}}}-sbt-coursier-cache-{HASHES}"},
        ),
    ]


def workflow():
    return wf(
        "Continuous Integration",
        job(
            "build",
            "Build and Test",
            CHECKOUT,
            SETUP_ENVIRONMENT,
            *cache_steps(),
            tool("test", name="Build project"),
            sh("du -sh target", name="Report target size", cond="always()"),
            oses=["ubuntu-latest", "windows-latest"],
            tool_versions=["2.13.1", "2.12.10"],
        ),
        job(
            "publish",
            "Publish Artifacts",
            CHECKOUT,
            SETUP_ENVIRONMENT,
            *cache_steps(),
            tool("+publish", name="Publish project"),
            needs=["build"],
            cond="github.event_name != 'pull_request' && (contains(github.ref, master))",
        ),
        env={"GITHUB_TOKEN": "${{ secrets.GITHUB_TOKEN }}"},
    )
