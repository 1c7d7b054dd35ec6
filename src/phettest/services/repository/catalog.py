"""Repository lists read from the shared tooling checkout."""

from pathlib import Path

from phettest.exceptions import OperationalError
from phettest.logger import get_logger
from phettest.models.app_config import AppConfig
from phettest.models.repository import FleetKind, is_valid_repository_name

logger = get_logger(__name__)


def read_repository_list(path: Path) -> list[str]:
    """
    Read a newline-separated repository list.

    Blank lines are ignored; names that are not valid repository names are
    skipped with a warning so they never reach a path or process argument.

    Raises:
        OperationalError: If the file cannot be read
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise OperationalError("Repository list unavailable", retriable=True, path=str(path), error=str(e)) from e

    names = []
    for line in text.split("\n"):
        name = line.strip()
        if not name:
            continue
        if not is_valid_repository_name(name):
            logger.warning("Skipping invalid repository name", name=name, path=str(path))
            continue
        names.append(name)
    return names


class RepositoryCatalog:
    """The all-repositories and simulation-repositories lists.

    Read lazily on first use and again on every ``reload``; callers get copies.
    """

    def __init__(self, config: AppConfig) -> None:
        self.config = config
        self._repos: list[str] = []
        self._sims: list[str] = []
        self._loaded = False

    def reload(self) -> None:
        """Re-read both lists from disk."""
        paths = self.config.paths
        repos = read_repository_list(paths.resolve(paths.active_repos_file))
        sims = read_repository_list(paths.resolve(paths.active_sims_file))
        self._repos, self._sims = repos, sims
        self._loaded = True
        logger.info("Loaded repository lists", repos=len(repos), sims=len(sims))

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.reload()

    def all_repos(self) -> list[str]:
        self._ensure_loaded()
        return list(self._repos)

    def sims(self) -> list[str]:
        self._ensure_loaded()
        return list(self._sims)

    def common_repos(self) -> list[str]:
        """Repositories that are not simulations, in list order."""
        sims = set(self.sims())
        return [repo for repo in self.all_repos() if repo not in sims]

    def repos_for(self, kind: FleetKind) -> list[str]:
        if kind is FleetKind.SIMS:
            return self.sims()
        return self.common_repos()
