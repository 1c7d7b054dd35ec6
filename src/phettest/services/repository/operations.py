"""Named repository actions built on the command runner."""

from phettest.logger import get_logger
from phettest.models.app_config import AppConfig
from phettest.models.command import CommandFailure, OperationResult
from phettest.models.repository import RemoteComparisonStatus, validate_repository_name
from phettest.utils.command_runner import Runner
from phettest.utils.paths import get_comparison_script

logger = get_logger(__name__)


class RepositoryOperations:
    """Manages git/npm/grunt operations on repositories under the working copy root.

    None of these raise for an expected outcome: a failed pull is a
    ``CommandFailure`` and an out-of-date checkout is just a status.
    """

    def __init__(self, runner: Runner, config: AppConfig) -> None:
        self.runner = runner
        self.config = config

    async def synchronize(self, repo: str) -> OperationResult:
        """Pull the repository from its remote."""
        repo = validate_repository_name(repo)
        return await self.runner.run(self.config.commands.git, ["pull"], self.config.paths.get_repo_path(repo))

    async def install_dependencies(self, repo: str) -> OperationResult:
        """Resolve the repository's package-manager dependencies."""
        repo = validate_repository_name(repo)
        spec = self.config.commands.install
        return await self.runner.run(spec.command, spec.args, self.config.paths.get_repo_path(repo))

    async def build(self, repo: str) -> OperationResult:
        """Run the project build tool in the repository."""
        repo = validate_repository_name(repo)
        spec = self.config.commands.build
        return await self.runner.run(spec.command, spec.args, self.config.paths.get_repo_path(repo))

    async def compare_to_remote(self, repo: str) -> RemoteComparisonStatus:
        """
        Check whether the repository's checkout matches its remote default branch.

        Args:
            repo: Repository name

        Returns:
            UP_TO_DATE or OUT_OF_DATE when the comparison script answers "same" or
            "different", CHECK_FAILED for any other outcome
        """
        repo = validate_repository_name(repo)
        script = self.config.paths.comparison_script
        script_path = self.config.paths.resolve(script) if script else get_comparison_script()

        result = await self.runner.run(
            self.config.commands.bash, [str(script_path)], self.config.paths.get_repo_path(repo)
        )
        if isinstance(result, CommandFailure):
            logger.warning(
                "Remote comparison failed",
                repo=repo,
                exit_code=result.exit_code,
                diagnostic=result.diagnostic,
            )
            return RemoteComparisonStatus.CHECK_FAILED

        # git may print progress before the answer; only the last line counts
        lines = result.output.strip().splitlines()
        answer = lines[-1].strip() if lines else ""
        if answer == "same":
            return RemoteComparisonStatus.UP_TO_DATE
        if answer == "different":
            return RemoteComparisonStatus.OUT_OF_DATE

        logger.warning("Unexpected comparison output", repo=repo, output=result.output)
        return RemoteComparisonStatus.CHECK_FAILED

    async def clone_missing_repos(self) -> OperationResult:
        """Clone every listed repository that has no checkout under the root yet."""
        paths = self.config.paths
        return await self.runner.run(str(paths.resolve(paths.clone_missing_script)), [], paths.root_dir)

    async def rebuild_shared_sources(self) -> OperationResult:
        """Regenerate derived sources shared by all repositories."""
        spec = self.config.commands.shared_rebuild
        repo = validate_repository_name(spec.repo)
        return await self.runner.run(spec.command, spec.args, self.config.paths.get_repo_path(repo))

