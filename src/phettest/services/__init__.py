"""Services for phettest."""

from phettest.services.fleet import FleetPass, FleetState, FleetStatusAggregator
from phettest.services.pipeline import Pipeline, PipelineOutcome, Step
from phettest.services.reporting import StatusReportingService

__all__ = [
    "FleetPass",
    "FleetState",
    "FleetStatusAggregator",
    "Pipeline",
    "PipelineOutcome",
    "StatusReportingService",
    "Step",
]
