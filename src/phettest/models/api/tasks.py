"""API models for dashboard task endpoints."""

from pydantic import BaseModel

from phettest.models.repository import FleetSnapshot


class TaskResponse(BaseModel):
    """Uniform envelope returned by every task endpoint."""

    output: str | list[str]
    success: bool


class FleetStatusResponse(BaseModel):
    """Status of both fleets."""

    common: FleetSnapshot
    sims: FleetSnapshot
    success: bool = True
