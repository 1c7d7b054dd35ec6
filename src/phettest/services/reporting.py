"""Dashboard-facing operations rendered as uniform response envelopes."""

from phettest.exceptions import ValidationError
from phettest.logger import get_logger
from phettest.models.api import FleetStatusResponse, TaskResponse
from phettest.models.app_config import AppConfig
from phettest.models.repository import FleetKind, RemoteComparisonStatus, validate_repository_name
from phettest.services.fleet import FleetStatusAggregator
from phettest.services.pipeline import (
    Pipeline,
    PipelineOutcome,
    build_pipeline,
    perennial_refresh_pipeline,
    pull_all_pipeline,
    pull_pipeline,
)
from phettest.services.repository import RepositoryCatalog, RepositoryOperations

logger = get_logger(__name__)

COMPARISON_ANSWERS = {
    RemoteComparisonStatus.UP_TO_DATE: "same",
    RemoteComparisonStatus.OUT_OF_DATE: "different",
}


def outcome_response(outcome: PipelineOutcome) -> TaskResponse:
    return TaskResponse(output=outcome.message, success=outcome.success)


class StatusReportingService:
    """Maps each dashboard task onto a pipeline or the fleet aggregator.

    Every repository name is validated before anything is spawned; invalid
    input raises ``ValidationError`` and has no side effects.
    """

    def __init__(
        self,
        config: AppConfig,
        ops: RepositoryOperations,
        catalog: RepositoryCatalog,
        aggregator: FleetStatusAggregator,
    ) -> None:
        self.config = config
        self.ops = ops
        self.catalog = catalog
        self.aggregator = aggregator

    def list_all(self) -> TaskResponse:
        return TaskResponse(output=self.catalog.all_repos(), success=True)

    def list_simulations(self) -> TaskResponse:
        return TaskResponse(output=self.catalog.sims(), success=True)

    async def pull_one(self, sim: str | None) -> TaskResponse:
        repo = validate_repository_name(sim, kind="sim")
        return await self._run_and_recheck(pull_pipeline(self.ops, repo), repo)

    async def build_one(self, sim: str | None) -> TaskResponse:
        repo = validate_repository_name(sim, kind="sim")
        pipeline = build_pipeline(self.ops, repo, self.config.commands.build_shared_repos)
        return await self._run_and_recheck(pipeline, repo)

    async def pull_all(self) -> TaskResponse:
        outcome = await pull_all_pipeline(self.ops, self.catalog.all_repos()).run()
        if outcome.success:
            self.aggregator.start_all()
        return outcome_response(outcome)

    async def refresh_shared_tooling(self) -> TaskResponse:
        tooling_repo = validate_repository_name(self.config.paths.tooling_repo)
        outcome = await perennial_refresh_pipeline(self.ops, tooling_repo).run()
        if outcome.success:
            # New repositories may have been cloned and listed
            self.aggregator.reload()
            self.aggregator.start_all()
        return outcome_response(outcome)

    async def compare_one(self, repo: str | None) -> TaskResponse:
        name = validate_repository_name(repo)
        status = await self.aggregator.check_repository(name)
        if status in COMPARISON_ANSWERS:
            return TaskResponse(output=COMPARISON_ANSWERS[status], success=True)
        return TaskResponse(output=f"same-as-remote-master {name} failed", success=False)

    def fleet_status(self) -> FleetStatusResponse:
        return FleetStatusResponse(
            common=self.aggregator.snapshot(FleetKind.COMMON),
            sims=self.aggregator.snapshot(FleetKind.SIMS),
        )

    def check_fleet(self, fleet: str | None) -> TaskResponse:
        """Start aggregation passes for ``fleet`` ("common", "sims" or "all")."""
        if fleet in (None, "all"):
            kinds = list(FleetKind)
        elif fleet in {kind.value for kind in FleetKind}:
            kinds = [FleetKind(fleet)]
        else:
            raise ValidationError("Invalid fleet", fleet=fleet)

        for kind in kinds:
            self.aggregator.start_pass(kind)
        return TaskResponse(output="checking", success=True)

    async def _run_and_recheck(self, pipeline: Pipeline, repo: str) -> TaskResponse:
        outcome = await pipeline.run()
        # The dashboard re-checks a repository after any action on it, whatever the result
        if self.aggregator.fleets_listing(repo):
            await self.aggregator.check_repository(repo)
        return outcome_response(outcome)
