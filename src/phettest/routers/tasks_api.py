"""Dashboard task endpoints.

Paths and query parameter names are the ones the dashboard page already calls.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from phettest.logger import get_logger
from phettest.models.api import FleetStatusResponse, TaskResponse
from phettest.services.reporting import StatusReportingService

logger = get_logger(__name__)
router = APIRouter(tags=["tasks"])


def get_reporting_service(request: Request) -> StatusReportingService:
    """Get the service instance created with the app."""
    service: StatusReportingService = request.app.state.reporting
    return service


def envelope(response: TaskResponse) -> JSONResponse:
    """Render a task envelope; failed tasks are reported with HTTP 500."""
    return JSONResponse(status_code=200 if response.success else 500, content=response.model_dump())


@router.get("/repo-list", response_model=TaskResponse)
async def repo_list(service: StatusReportingService = Depends(get_reporting_service)) -> JSONResponse:
    """List every active repository."""
    return envelope(service.list_all())


@router.get("/sim-list", response_model=TaskResponse)
async def sim_list(service: StatusReportingService = Depends(get_reporting_service)) -> JSONResponse:
    """List the simulation repositories."""
    return envelope(service.list_simulations())


@router.get("/pull", response_model=TaskResponse)
async def pull(
    sim: str | None = None, service: StatusReportingService = Depends(get_reporting_service)
) -> JSONResponse:
    """Pull one repository."""
    return envelope(await service.pull_one(sim))


@router.get("/build", response_model=TaskResponse)
async def build(
    sim: str | None = None, service: StatusReportingService = Depends(get_reporting_service)
) -> JSONResponse:
    """Install dependencies for and build one simulation."""
    return envelope(await service.build_one(sim))


@router.get("/pull-all", response_model=TaskResponse)
async def pull_all(service: StatusReportingService = Depends(get_reporting_service)) -> JSONResponse:
    """Pull every repository, then regenerate shared derived sources."""
    return envelope(await service.pull_all())


@router.get("/same-as-remote-master", response_model=TaskResponse)
async def same_as_remote_master(
    repo: str | None = None, service: StatusReportingService = Depends(get_reporting_service)
) -> JSONResponse:
    """Report whether a repository matches its remote default branch."""
    return envelope(await service.compare_one(repo))


@router.get("/perennial-refresh", response_model=TaskResponse)
async def perennial_refresh(service: StatusReportingService = Depends(get_reporting_service)) -> JSONResponse:
    """Update the shared tooling checkout and clone missing repositories."""
    return envelope(await service.refresh_shared_tooling())


@router.get("/fleet-status", response_model=FleetStatusResponse)
async def fleet_status(service: StatusReportingService = Depends(get_reporting_service)) -> FleetStatusResponse:
    """Current status of both fleets, for polling."""
    return service.fleet_status()


@router.get("/check", response_model=TaskResponse)
async def check(
    fleet: str | None = None, service: StatusReportingService = Depends(get_reporting_service)
) -> JSONResponse:
    """Start (or restart) aggregation passes in the background."""
    return envelope(service.check_fleet(fleet))
