"""Data models for phettest."""

from phettest.models.app_config import AppConfig
from phettest.models.command import CommandFailure, CommandSuccess, OperationResult
from phettest.models.repository import (
    FleetKind,
    FleetSnapshot,
    PassPhase,
    RemoteComparisonStatus,
    is_valid_repository_name,
    validate_repository_name,
)

__all__ = [
    "AppConfig",
    "CommandFailure",
    "CommandSuccess",
    "FleetKind",
    "FleetSnapshot",
    "OperationResult",
    "PassPhase",
    "RemoteComparisonStatus",
    "is_valid_repository_name",
    "validate_repository_name",
]
