from pathlib import Path

import pytest

from phettest.exceptions import OperationalError
from phettest.models.repository import FleetKind
from phettest.services.repository import RepositoryCatalog, read_repository_list

from conftest import ACTIVE_REPOS, ACTIVE_SIMS


def test_read_list_skips_blank_and_invalid_lines(tmp_path: Path) -> None:
    path = tmp_path / "active-repos"
    path.write_text("chipper\n\n  joist  \nbad;name\nUpper\naxon\n")

    assert read_repository_list(path) == ["chipper", "joist", "axon"]


def test_missing_list_raises_operational_error(tmp_path: Path) -> None:
    with pytest.raises(OperationalError) as exc_info:
        read_repository_list(tmp_path / "missing")
    assert exc_info.value.status_code == 500


def test_catalog_lists(catalog: RepositoryCatalog) -> None:
    assert catalog.all_repos() == ACTIVE_REPOS
    assert catalog.sims() == ACTIVE_SIMS
    assert catalog.common_repos() == ["axon", "chipper", "joist", "perennial"]
    assert catalog.repos_for(FleetKind.SIMS) == ACTIVE_SIMS
    assert catalog.repos_for(FleetKind.COMMON) == catalog.common_repos()


def test_catalog_returns_copies(catalog: RepositoryCatalog) -> None:
    catalog.all_repos().clear()

    assert catalog.all_repos() == ACTIVE_REPOS


def test_catalog_reload_picks_up_changes(catalog: RepositoryCatalog, root_dir: Path) -> None:
    assert "twixt" not in catalog.all_repos()

    (root_dir / "perennial" / "data" / "active-repos").write_text("axon\ntwixt\n")
    assert "twixt" not in catalog.all_repos()

    catalog.reload()
    assert catalog.all_repos() == ["axon", "twixt"]
