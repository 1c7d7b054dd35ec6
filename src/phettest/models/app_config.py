"""Configuration data models for phettest."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class ServerConfig(BaseModel):
    """Server configuration."""

    # Default port - the dashboard page hard-codes it in its server URL
    port: int = 45362
    host: str = "127.0.0.1"


class PathsConfig(BaseModel):
    """Paths configuration.

    Every repository lives in a directory named after it directly under
    ``root_dir``; the remaining paths are resolved against ``root_dir`` when
    they are relative.
    """

    root_dir: Path = Field(default_factory=Path.cwd)
    tooling_repo: str = "perennial"
    active_repos_file: Path = Path("perennial/data/active-repos")
    active_sims_file: Path = Path("perennial/data/active-sims")
    clone_missing_script: Path = Path("perennial/bin/clone-missing-repos.sh")
    comparison_script: Path | None = None  # None means the script bundled with phettest

    @field_validator("root_dir", mode="before")
    @classmethod
    def expand_root_dir(cls, v: str | Path) -> Path:
        """Expand user path for root_dir."""
        if isinstance(v, str):
            return Path(v).expanduser()
        return v

    def resolve(self, path: Path) -> Path:
        """Resolve a configured path against the working copy root."""
        path = path.expanduser()
        if path.is_absolute():
            return path
        return self.root_dir / path

    def get_repo_path(self, repo: str) -> Path:
        """
        Get the working directory of a repository.

        Callers must validate ``repo`` first; see ``validate_repository_name``.

        Args:
            repo: Repository name (e.g., "chipper", "gravity-and-orbits")

        Returns:
            Path to the repository checkout (e.g., <root_dir>/chipper)
        """
        return self.root_dir / repo


class CommandSpec(BaseModel):
    """An executable and its argument tokens. Never passed through a shell."""

    command: str
    args: list[str] = Field(default_factory=list)


class SharedRebuildSpec(CommandSpec):
    """Command that regenerates shared derived sources after a pull-all."""

    repo: str = "chipper"


class CommandsConfig(BaseModel):
    """External commands used by the repository operations."""

    git: str = "git"
    bash: str = "bash"
    install: CommandSpec = Field(default_factory=lambda: CommandSpec(command="npm", args=["update"]))
    build: CommandSpec = Field(
        default_factory=lambda: CommandSpec(command="grunt", args=["--no-color", "--minify.uglify=false"])
    )
    # Repositories whose dependencies are refreshed before any simulation build
    build_shared_repos: list[str] = Field(default_factory=lambda: ["chipper"])
    shared_rebuild: SharedRebuildSpec = Field(
        default_factory=lambda: SharedRebuildSpec(command="grunt", args=["--no-color", "output-js-all"])
    )


class AdvancedConfig(BaseModel):
    """Advanced configuration."""

    log_level: Literal["WARNING", "INFO", "DEBUG"] = "INFO"
    diagnostic_lines: int = 20  # Output lines kept for a failed command's diagnostic
    check_on_startup: bool = True  # Start both aggregation passes when the server starts


class AppConfig(BaseModel):
    """Application configuration."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    commands: CommandsConfig = Field(default_factory=CommandsConfig)
    advanced: AdvancedConfig = Field(default_factory=AdvancedConfig)
