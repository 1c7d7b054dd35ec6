"""Fail-fast step sequencing for repository pipelines."""

from collections.abc import Awaitable, Callable, Sequence

from pydantic import BaseModel

from phettest.logger import get_logger
from phettest.models.command import CommandFailure, OperationResult
from phettest.services.repository import RepositoryOperations

logger = get_logger(__name__)

StepAction = Callable[[], Awaitable[OperationResult]]


class Step:
    """One named pipeline step: a zero-argument coroutine factory."""

    def __init__(self, name: str, action: StepAction) -> None:
        self.name = name
        self.action = action

    def __repr__(self) -> str:
        return f"Step({self.name!r})"


class PipelineOutcome(BaseModel):
    """Terminal state of a pipeline run.

    Either every step succeeded, or ``failed_step`` names the first step that
    did not; there is no third state.
    """

    pipeline: str
    success: bool
    completed_steps: list[str] = []
    failed_step: str | None = None
    exit_code: int | None = None
    diagnostic: str = ""

    @property
    def message(self) -> str:
        """Short text for inline display on the dashboard."""
        if self.success:
            return self.pipeline
        return f"{self.failed_step} exit code {self.exit_code}"


class Pipeline:
    """Runs steps strictly in order and stops at the first failure."""

    def __init__(self, name: str, steps: Sequence[Step]) -> None:
        self.name = name
        self.steps = list(steps)

    def then(self, *steps: Step) -> "Pipeline":
        """Return a new pipeline with ``steps`` appended."""
        return Pipeline(self.name, [*self.steps, *steps])

    async def run(self) -> PipelineOutcome:
        completed: list[str] = []
        logger.info("Pipeline started", pipeline=self.name, steps=[s.name for s in self.steps])

        for step in self.steps:
            result = await step.action()
            if isinstance(result, CommandFailure):
                logger.warning(
                    "Pipeline step failed",
                    pipeline=self.name,
                    step=step.name,
                    exit_code=result.exit_code,
                    diagnostic=result.diagnostic,
                )
                return PipelineOutcome(
                    pipeline=self.name,
                    success=False,
                    completed_steps=completed,
                    failed_step=step.name,
                    exit_code=result.exit_code,
                    diagnostic=result.diagnostic,
                )
            completed.append(step.name)

        logger.info("Pipeline completed", pipeline=self.name)
        return PipelineOutcome(pipeline=self.name, success=True, completed_steps=completed)


# Step builders. Each closes over its repository so pipelines are plain lists.


def pull_step(ops: RepositoryOperations, repo: str) -> Step:
    return Step(f"pull {repo}", lambda: ops.synchronize(repo))


def install_step(ops: RepositoryOperations, repo: str) -> Step:
    command = " ".join([ops.config.commands.install.command, *ops.config.commands.install.args])
    return Step(f"{command} {repo}", lambda: ops.install_dependencies(repo))


def build_step(ops: RepositoryOperations, repo: str) -> Step:
    return Step(f"{ops.config.commands.build.command} {repo}", lambda: ops.build(repo))


# Pipelines served to the dashboard


def pull_pipeline(ops: RepositoryOperations, repo: str) -> Pipeline:
    return Pipeline(f"pull {repo}", [pull_step(ops, repo)])


def build_pipeline(ops: RepositoryOperations, repo: str, shared_repos: Sequence[str] = ()) -> Pipeline:
    """Refresh dependencies of the shared build repositories, then of ``repo``, then build it."""
    steps = [install_step(ops, shared) for shared in shared_repos if shared != repo]
    steps += [install_step(ops, repo), build_step(ops, repo)]
    return Pipeline(f"build {repo}", steps)


def pull_all_pipeline(ops: RepositoryOperations, repos: Sequence[str]) -> Pipeline:
    """Pull every repository in list order, then regenerate shared derived sources."""
    return Pipeline("pulled", [pull_step(ops, repo) for repo in repos]).then(
        Step("rebuild shared sources", ops.rebuild_shared_sources)
    )


def perennial_refresh_pipeline(ops: RepositoryOperations, tooling_repo: str) -> Pipeline:
    """Update the shared tooling checkout and clone any repositories missing locally."""
    return Pipeline(
        f"{tooling_repo} refresh",
        [
            pull_step(ops, tooling_repo),
            install_step(ops, tooling_repo),
            Step(f"{tooling_repo} clone missing repos", ops.clone_missing_repos),
        ],
    )
