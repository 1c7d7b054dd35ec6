"""API request/response models."""

from phettest.models.api.tasks import FleetStatusResponse, TaskResponse

__all__ = ["FleetStatusResponse", "TaskResponse"]
