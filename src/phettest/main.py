import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from phettest import __version__
from phettest.core.app_config import get_config
from phettest.exceptions import AppBaseError, OperationalError
from phettest.logger import get_logger
from phettest.models.api import TaskResponse
from phettest.models.app_config import AppConfig
from phettest.routers import tasks_api as tasks_router
from phettest.services.fleet import FleetStatusAggregator
from phettest.services.reporting import StatusReportingService
from phettest.services.repository import RepositoryCatalog, RepositoryOperations
from phettest.utils.command_runner import CommandRunner, Runner

# Configure basic logging early so uvicorn's own messages are visible
if not logging.getLogger().handlers:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

logger = get_logger(__name__)


def failure_response(status_code: int, output: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=TaskResponse(output=output, success=False).model_dump())


async def app_error_handler(request: Request, exc: AppBaseError) -> JSONResponse:
    logger.warning("Request rejected", path=request.url.path, error=str(exc), status_code=exc.status_code)
    return failure_response(exc.status_code, exc.message)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        logger.warning("Unknown task", path=request.url.path)
        return failure_response(404, "Unknown task")
    return failure_response(exc.status_code, str(exc.detail))


async def request_validation_handler(request: Request, exc: Exception) -> JSONResponse:
    return failure_response(400, "Invalid request")


def create_app(config: AppConfig | None = None, runner: Runner | None = None) -> FastAPI:
    """Build the application and the services it owns.

    Args:
        config: Configuration to use; defaults to the global configuration
        runner: Process runner; tests pass a fake one

    Returns:
        Configured FastAPI application
    """
    if config is None:
        config = get_config()
    if runner is None:
        runner = CommandRunner(diagnostic_lines=config.advanced.diagnostic_lines)

    ops = RepositoryOperations(runner, config)
    catalog = RepositoryCatalog(config)
    aggregator = FleetStatusAggregator(ops, catalog)
    reporting = StatusReportingService(config, ops, catalog, aggregator)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Manage application lifespan events."""
        logger.info("phettest started", version=__version__, root_dir=str(config.paths.root_dir))
        if config.advanced.check_on_startup:
            try:
                aggregator.reload()
                aggregator.start_all()
            except OperationalError as e:
                logger.warning("Initial status check skipped", error=str(e))
        yield

    app = FastAPI(title="phettest", version=__version__, lifespan=lifespan)
    app.state.aggregator = aggregator
    app.state.reporting = reporting

    # The dashboard is served from another origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AppBaseError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(tasks_router.router)
    return app


def run_server(
    port: int | None = None,
    host: str | None = None,
    root_dir: Path | None = None,
    initial_check: bool = True,
) -> None:
    """Run the phettest server.

    Args:
        port: Optional port number to override config
        host: Optional interface to bind to
        root_dir: Optional working copy root containing every repository
        initial_check: Whether to check every repository against its remote on startup
    """
    config = get_config()

    if port is not None:
        config.server.port = port
    if host is not None:
        config.server.host = host
    if root_dir is not None:
        config.paths.root_dir = root_dir.expanduser().resolve()
    config.advanced.check_on_startup = config.advanced.check_on_startup and initial_check

    logger.info(
        "Starting server",
        host=config.server.host,
        port=config.server.port,
        root_dir=str(config.paths.root_dir),
    )
    uvicorn.run(create_app(config), host=config.server.host, port=config.server.port)


def main() -> None:
    """Main entry point with CLI argument parsing."""
    import argparse

    parser = argparse.ArgumentParser(
        description="phettest - sync, build and status server for the dev dashboard",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  phettest                           # Serve the current directory's repositories
  phettest --root-dir ~/phetsims     # Serve repositories under ~/phetsims
  phettest --port 9000 --no-initial-check
        """,
    )

    parser.add_argument(
        "--port",
        type=int,
        metavar="PORT",
        help="Port number to run the server on",
    )

    parser.add_argument(
        "--host",
        metavar="HOST",
        help="Interface to bind to (trusted networks only, there is no authentication)",
    )

    parser.add_argument(
        "--root-dir",
        type=Path,
        metavar="DIR",
        help="Directory that contains every repository checkout",
    )

    parser.add_argument(
        "--no-initial-check",
        action="store_true",
        help="Do not compare repositories with their remotes on startup",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"phettest {__version__}",
    )

    args = parser.parse_args()

    run_server(port=args.port, host=args.host, root_dir=args.root_dir, initial_check=not args.no_initial_check)


if __name__ == "__main__":
    main()
