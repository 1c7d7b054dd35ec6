import asyncio
from pathlib import Path
from typing import NamedTuple

import pytest

from phettest.models.app_config import AdvancedConfig, AppConfig, PathsConfig
from phettest.models.command import CommandFailure, CommandSuccess
from phettest.services.fleet import FleetStatusAggregator
from phettest.services.repository import RepositoryCatalog, RepositoryOperations

ACTIVE_REPOS = ["axon", "chipper", "faradays-law", "joist", "perennial", "gravity-and-orbits"]
ACTIVE_SIMS = ["faradays-law", "gravity-and-orbits"]


class Call(NamedTuple):
    command: str
    args: list[str]
    cwd: Path

    @property
    def repo(self) -> str:
        return self.cwd.name


class FakeRunner:
    """Records every run and answers from a script instead of spawning processes."""

    def __init__(self) -> None:
        self.calls: list[Call] = []
        self._failures: dict[tuple[str, str], int] = {}
        self._comparisons: dict[str, str] = {}
        # When set, every run waits for it before answering
        self.gate: asyncio.Event | None = None

    def fail(self, repo: str, command: str, exit_code: int = 1) -> None:
        self._failures[(repo, command)] = exit_code

    def answer(self, repo: str, comparison: str) -> None:
        self._comparisons[repo] = comparison

    async def run(self, command, args, cwd):
        cwd = Path(cwd)
        self.calls.append(Call(command, list(args), cwd))
        if self.gate is not None:
            await self.gate.wait()
        else:
            await asyncio.sleep(0)

        exit_code = self._failures.get((cwd.name, command))
        if exit_code is not None:
            return CommandFailure(exit_code=exit_code, diagnostic=f"{command} failed in {cwd.name}")
        if command == "bash":
            return CommandSuccess(output=self._comparisons.get(cwd.name, "same"))
        return CommandSuccess()

    def summary(self) -> list[str]:
        return [" ".join([call.command, *call.args, "@", call.repo]) for call in self.calls]


@pytest.fixture
def root_dir(tmp_path: Path) -> Path:
    data_dir = tmp_path / "perennial" / "data"
    data_dir.mkdir(parents=True)
    (data_dir / "active-repos").write_text("\n".join(ACTIVE_REPOS) + "\n")
    (data_dir / "active-sims").write_text("\n".join(ACTIVE_SIMS) + "\n")
    return tmp_path


@pytest.fixture
def config(root_dir: Path) -> AppConfig:
    return AppConfig(
        paths=PathsConfig(root_dir=root_dir),
        advanced=AdvancedConfig(check_on_startup=False),
    )


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def ops(runner: FakeRunner, config: AppConfig) -> RepositoryOperations:
    return RepositoryOperations(runner, config)


@pytest.fixture
def catalog(config: AppConfig) -> RepositoryCatalog:
    return RepositoryCatalog(config)


@pytest.fixture
def aggregator(ops: RepositoryOperations, catalog: RepositoryCatalog) -> FleetStatusAggregator:
    return FleetStatusAggregator(ops, catalog)
