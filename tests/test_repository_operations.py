import pytest

from phettest.exceptions import ValidationError
from phettest.models.command import CommandFailure, CommandSuccess
from phettest.models.repository import RemoteComparisonStatus
from phettest.utils.paths import get_comparison_script


@pytest.mark.asyncio
async def test_synchronize_pulls_in_repo_directory(ops, runner, root_dir) -> None:
    result = await ops.synchronize("joist")

    assert isinstance(result, CommandSuccess)
    assert runner.calls[0].command == "git"
    assert runner.calls[0].args == ["pull"]
    assert runner.calls[0].cwd == root_dir / "joist"


@pytest.mark.asyncio
async def test_install_and_build_use_configured_commands(ops, runner) -> None:
    await ops.install_dependencies("faradays-law")
    await ops.build("faradays-law")

    assert runner.summary() == [
        "npm update @ faradays-law",
        "grunt --no-color --minify.uglify=false @ faradays-law",
    ]


@pytest.mark.asyncio
async def test_failure_is_returned_not_raised(ops, runner) -> None:
    runner.fail("joist", "git", exit_code=128)

    result = await ops.synchronize("joist")

    assert isinstance(result, CommandFailure)
    assert result.exit_code == 128


@pytest.mark.asyncio
@pytest.mark.parametrize("name", ["bad;name", "../perennial", ""])
async def test_invalid_name_never_reaches_runner(ops, runner, name: str) -> None:
    with pytest.raises(ValidationError):
        await ops.synchronize(name)
    with pytest.raises(ValidationError):
        await ops.compare_to_remote(name)

    assert runner.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("output", "expected"),
    [
        ("same", RemoteComparisonStatus.UP_TO_DATE),
        ("different", RemoteComparisonStatus.OUT_OF_DATE),
        ("From github.com:phetsims/joist\ndifferent\n", RemoteComparisonStatus.OUT_OF_DATE),
        ("", RemoteComparisonStatus.CHECK_FAILED),
        ("maybe", RemoteComparisonStatus.CHECK_FAILED),
    ],
)
async def test_compare_to_remote_parses_answer(ops, runner, output: str, expected) -> None:
    runner.answer("joist", output)

    assert await ops.compare_to_remote("joist") is expected


@pytest.mark.asyncio
async def test_compare_to_remote_failure_is_check_failed(ops, runner) -> None:
    runner.fail("joist", "bash", exit_code=1)

    assert await ops.compare_to_remote("joist") is RemoteComparisonStatus.CHECK_FAILED


@pytest.mark.asyncio
async def test_compare_to_remote_uses_bundled_script_by_default(ops, runner, root_dir) -> None:
    await ops.compare_to_remote("joist")

    call = runner.calls[0]
    assert call.command == "bash"
    assert call.args == [str(get_comparison_script())]
    assert call.cwd == root_dir / "joist"
    assert get_comparison_script().exists()


@pytest.mark.asyncio
async def test_compare_to_remote_is_idempotent(ops, runner) -> None:
    runner.answer("axon", "different")

    first = await ops.compare_to_remote("axon")
    second = await ops.compare_to_remote("axon")

    assert first is second is RemoteComparisonStatus.OUT_OF_DATE


@pytest.mark.asyncio
async def test_clone_missing_repos_runs_from_root(ops, runner, root_dir) -> None:
    await ops.clone_missing_repos()

    call = runner.calls[0]
    assert call.command == str(root_dir / "perennial" / "bin" / "clone-missing-repos.sh")
    assert call.args == []
    assert call.cwd == root_dir


@pytest.mark.asyncio
async def test_rebuild_shared_sources_runs_in_shared_repo(ops, runner) -> None:
    await ops.rebuild_shared_sources()

    assert runner.summary() == ["grunt --no-color output-js-all @ chipper"]
