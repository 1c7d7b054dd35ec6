"""Sequential remote-comparison passes over the repository fleets."""

import asyncio
from collections.abc import Iterable

from phettest.exceptions import AppBaseError, OperationalError
from phettest.logger import get_logger
from phettest.models.repository import FleetKind, FleetSnapshot, PassPhase, RemoteComparisonStatus
from phettest.services.repository import RepositoryCatalog, RepositoryOperations

logger = get_logger(__name__)

FLEET_LABELS = {
    FleetKind.COMMON: "common repositories",
    FleetKind.SIMS: "simulation repositories",
}


class FleetState:
    """Remote comparison status per repository.

    Entries start as UNKNOWN the first time a repository is seen and are only
    ever updated in place.
    """

    def __init__(self) -> None:
        self._statuses: dict[str, RemoteComparisonStatus] = {}

    def ensure(self, repos: Iterable[str]) -> None:
        for repo in repos:
            self._statuses.setdefault(repo, RemoteComparisonStatus.UNKNOWN)

    def record(self, repo: str, status: RemoteComparisonStatus) -> None:
        self._statuses[repo] = status

    def get(self, repo: str) -> RemoteComparisonStatus:
        return self._statuses.get(repo, RemoteComparisonStatus.UNKNOWN)

    def tracks(self, repo: str) -> bool:
        return repo in self._statuses

    @property
    def all(self) -> list[str]:
        return list(self._statuses)

    @property
    def out_of_date(self) -> list[str]:
        return [repo for repo, status in self._statuses.items() if status is RemoteComparisonStatus.OUT_OF_DATE]

    def out_of_date_among(self, repos: Iterable[str]) -> list[str]:
        """Out-of-date repositories among ``repos``, in the order given."""
        return [repo for repo in repos if self.get(repo) is RemoteComparisonStatus.OUT_OF_DATE]

    def as_dict(self) -> dict[str, RemoteComparisonStatus]:
        return dict(self._statuses)


class FleetPass:
    """One fleet's pass: idle -> checking(remaining) -> done.

    Repositories are checked one at a time in list order because the comparison
    script works inside the repository's checkout. Starting a pass while another
    is in flight supersedes it: the old pass stops after its current check and
    drops that result.
    """

    def __init__(self, kind: FleetKind, ops: RepositoryOperations) -> None:
        self.kind = kind
        self.ops = ops
        self.state = FleetState()
        # Current repository list; state may still hold names dropped from it
        self.repos: list[str] = []
        self.phase = PassPhase.IDLE
        self.remaining = 0
        self.summary = ""
        self._generation = 0
        self._task: asyncio.Task[None] | None = None

    @property
    def label(self) -> str:
        return FLEET_LABELS[self.kind]

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, repos: Iterable[str]) -> "asyncio.Task[None]":
        """Schedule a pass over ``repos`` on the running event loop."""
        self.repos = list(repos)
        self._generation += 1
        self._task = asyncio.create_task(self._run(list(self.repos), self._generation))
        self._task.add_done_callback(self._log_crash)
        return self._task

    async def run(self, repos: Iterable[str]) -> None:
        """Run a pass over ``repos`` and wait for it."""
        self.repos = list(repos)
        self._generation += 1
        await self._run(list(self.repos), self._generation)

    async def _run(self, repos: list[str], generation: int) -> None:
        try:
            await self._visit(repos, generation)
        except Exception:
            if generation == self._generation:
                self.phase = PassPhase.IDLE
                self.remaining = 0
                self.summary = f"Checking {self.label} failed"
            raise

    async def _visit(self, repos: list[str], generation: int) -> None:
        self.state.ensure(repos)
        self.phase = PassPhase.CHECKING
        self.remaining = len(repos)
        self.summary = "checking..."
        logger.info("Aggregation pass started", fleet=self.kind.value, repos=len(repos))

        for repo in repos:
            status = await self._check(repo)
            if generation != self._generation:
                logger.info("Aggregation pass superseded", fleet=self.kind.value, repo=repo)
                return
            self.state.record(repo, status)
            self.remaining -= 1

        self._finish(repos)

    async def _check(self, repo: str) -> RemoteComparisonStatus:
        try:
            return await self.ops.compare_to_remote(repo)
        except AppBaseError as e:
            logger.error("Remote comparison raised", fleet=self.kind.value, repo=repo, error=str(e))
            return RemoteComparisonStatus.CHECK_FAILED

    def _finish(self, repos: list[str]) -> None:
        out_of_date = self.state.out_of_date_among(repos)
        if out_of_date:
            self.summary = f"{len(out_of_date)} out-of-date {self.label}"
        else:
            self.summary = f"No out-of-date {self.label}!"
        self.phase = PassPhase.DONE
        logger.info("Aggregation pass done", fleet=self.kind.value, out_of_date=out_of_date)

    def _log_crash(self, task: "asyncio.Task[None]") -> None:
        if task.cancelled():
            return
        if (exc := task.exception()) is not None:
            logger.error("Aggregation pass crashed", fleet=self.kind.value, error=repr(exc))

    def snapshot(self) -> FleetSnapshot:
        return FleetSnapshot(
            kind=self.kind,
            phase=self.phase,
            remaining=self.remaining,
            summary=self.summary,
            statuses=self.state.as_dict(),
            out_of_date=self.state.out_of_date_among(self.repos),
        )


class FleetStatusAggregator:
    """Owns the status of every tracked repository.

    The common and simulation fleets have separate state and may be checked at
    the same time; each is sequential on its own.
    """

    def __init__(self, ops: RepositoryOperations, catalog: RepositoryCatalog) -> None:
        self.ops = ops
        self.catalog = catalog
        self.passes = {kind: FleetPass(kind, ops) for kind in FleetKind}

    def start_pass(self, kind: FleetKind) -> "asyncio.Task[None]":
        """Start (or restart) a pass over the full list for ``kind``."""
        return self.passes[kind].start(self.catalog.repos_for(kind))

    def start_all(self) -> list["asyncio.Task[None]"]:
        return [self.start_pass(kind) for kind in FleetKind]

    async def run_pass(self, kind: FleetKind) -> FleetSnapshot:
        """Run a pass over the full list for ``kind`` and return the result."""
        fleet_pass = self.passes[kind]
        await fleet_pass.run(self.catalog.repos_for(kind))
        return fleet_pass.snapshot()

    async def check_repository(self, repo: str) -> RemoteComparisonStatus:
        """
        Compare one repository with its remote outside of a pass.

        The result is recorded in every fleet whose list contains the repository,
        creating its entry if no pass has seen it yet.
        """
        status = await self.ops.compare_to_remote(repo)
        for kind in self.fleets_listing(repo):
            self.passes[kind].state.record(repo, status)
        return status

    def fleets_listing(self, repo: str) -> list[FleetKind]:
        """Fleets whose current list contains ``repo``, or that already track it."""
        self._adopt_lists()
        return [
            kind
            for kind, fleet_pass in self.passes.items()
            if repo in fleet_pass.repos or fleet_pass.state.tracks(repo)
        ]

    def _adopt_lists(self) -> None:
        try:
            lists = {kind: self.catalog.repos_for(kind) for kind in FleetKind}
        except OperationalError as e:
            logger.warning("Repository lists unavailable, using tracked repositories", error=str(e))
            return
        for kind, repos in lists.items():
            self.passes[kind].repos = repos

    def reload(self) -> None:
        """Re-read the repository lists and start tracking any new names."""
        self.catalog.reload()
        for kind, fleet_pass in self.passes.items():
            fleet_pass.repos = self.catalog.repos_for(kind)
            fleet_pass.state.ensure(fleet_pass.repos)

    def snapshot(self, kind: FleetKind) -> FleetSnapshot:
        return self.passes[kind].snapshot()
