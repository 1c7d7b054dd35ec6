"""Repository related models."""

import re
from enum import Enum
from typing import TypeGuard

from pydantic import BaseModel, Field

from phettest.exceptions import ValidationError

# Lower-case ASCII letters and hyphens, e.g. "gravity-and-orbits"
REPOSITORY_NAME_PATTERN = re.compile(r"[a-z-]+")


def is_valid_repository_name(name: object) -> TypeGuard[str]:
    """Return True if ``name`` is safe to use as a directory name and process argument."""
    return isinstance(name, str) and REPOSITORY_NAME_PATTERN.fullmatch(name) is not None


def validate_repository_name(name: object, kind: str = "repo") -> str:
    """
    Validate a repository name before it reaches a path or a process argument.

    Args:
        name: Candidate name, usually straight from a query parameter
        kind: Word used in the error message ("sim" or "repo")

    Returns:
        The validated name

    Raises:
        ValidationError: If the name contains anything besides a-z and '-'
    """
    if not is_valid_repository_name(name):
        raise ValidationError(f"Invalid {kind} name", name=name)
    return name


class RemoteComparisonStatus(str, Enum):
    """Whether a repository's local checkout matches its remote default branch."""

    UNKNOWN = "unknown"
    UP_TO_DATE = "up-to-date"
    OUT_OF_DATE = "out-of-date"
    CHECK_FAILED = "check-failed"


class FleetKind(str, Enum):
    """The two independently checked groups of repositories."""

    COMMON = "common"
    SIMS = "sims"


class PassPhase(str, Enum):
    """Aggregation pass lifecycle."""

    IDLE = "idle"
    CHECKING = "checking"
    DONE = "done"


class FleetSnapshot(BaseModel):
    """Point-in-time view of one fleet, as served to the dashboard."""

    kind: FleetKind
    phase: PassPhase
    remaining: int = 0
    summary: str = ""
    statuses: dict[str, RemoteComparisonStatus] = Field(default_factory=dict)
    out_of_date: list[str] = Field(default_factory=list)
