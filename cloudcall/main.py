"""Main entry point for the cloudcall application.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
"""

import asyncio
import functools
import logging
from typing import Annotated, Any, Dict, Optional

import typer

from cloudcall.core.command_handler import CommandHandler
from cloudcall.core.request_dispatcher import RequestDispatcher
from cloudcall.domain.errors import CloudCallError
from cloudcall.infrastructure.aws.client_resolver import ClientResolver
from cloudcall.infrastructure.aws.service_registry import default_registry
from cloudcall.infrastructure.aws.transport import build_transport
from cloudcall.infrastructure.cache.call_cache import CallCache
from cloudcall.infrastructure.cli.display import ConsoleDisplay
from cloudcall.infrastructure.config.settings import get_config, load_configuration, load_request_settings
from cloudcall.infrastructure.monitoring.logger_setup import setup_logging
from cloudcall.infrastructure.resilience.api_retry import RetryPolicy
from cloudcall.infrastructure.resilience.request_queue import RequestQueue

logger = logging.getLogger(__name__)

# --- Dependency Injection Container (Manual) ---

def create_dependencies() -> Dict[str, Any]:
    """Creates and wires up all dependencies for the application.

    This acts as the Composition Root. Settings are read exactly once here
    and passed down by reference.
    """
    dependencies: Dict[str, Any] = {}
    dependencies['ui'] = ConsoleDisplay()

    # 1. Configuration first, then logging based on it
    load_configuration()
    settings = load_request_settings()
    log_level_name = str(get_config('logging.level', 'WARNING')).upper()
    setup_logging(
        log_level=getattr(logging, log_level_name, logging.WARNING),
        log_file=get_config('logging.file'),
        sdk_debug=settings.sdk_debug,
    )
    dependencies['settings'] = settings

    # 2. SDK adapters
    transport = build_transport(settings)
    registry = default_registry(transport)
    registry.validate()
    dependencies['registry'] = registry

    # 3. Resilience + dispatcher
    dependencies['dispatcher'] = RequestDispatcher(
        resolver=ClientResolver(registry),
        retry_policy=RetryPolicy(max_retries=settings.max_retries),
        request_queue=RequestQueue(max_concurrent=settings.max_concurrent_requests),
        call_cache=CallCache(),
    )

    # 4. Command handler
    dependencies['command_handler'] = CommandHandler(
        dispatcher=dependencies['dispatcher'],
        registry=registry,
        settings=settings,
        ui=dependencies['ui'],
    )
    logger.debug("All dependencies initialized successfully.")
    return dependencies


@functools.lru_cache(maxsize=None)
def get_dependencies() -> Dict[str, Any]:
    """Builds the dependency graph on first use."""
    try:
        return create_dependencies()
    except CloudCallError as e:
        logger.error(f"Fatal Error during application initialization: {e.message}")
        ConsoleDisplay().display_error(f"Application Initialization Failed: {e.message}")
        raise typer.Exit(code=1)


# --- Typer App Definition ---
app = typer.Typer(
    name="cloudcall",
    help="cloudcall: issue AWS requests through a bounded, retrying, memoized request layer.",
    add_completion=False,
)

RegionOption = Annotated[
    Optional[str],
    typer.Option("--region", "-r", help="AWS region (defaults to us-east-1)."),
]


@app.command()
def request(
    service: Annotated[str, typer.Argument(help="Service identifier, e.g. 'CloudFormation' or 'DynamoDB.Resource'.")],
    method: Annotated[str, typer.Argument(help="SDK method name, e.g. 'describe_stacks'.")],
    params: Annotated[Optional[str], typer.Option("--params", "-p", help="Method parameters as a JSON object.")] = None,
    region: RegionOption = None,
    profile: Annotated[Optional[str], typer.Option("--profile", help="Named AWS profile to use.")] = None,
    accelerate: Annotated[bool, typer.Option("--accelerate", help="Use S3 Transfer Acceleration for uploads.")] = False,
    memoize: Annotated[bool, typer.Option("--memoize", help="Share identical calls.")] = False,
    repeat: Annotated[int, typer.Option("--repeat", min=1, help="Issue the call this many times concurrently.")] = 1,
):
    """Issue a single provider request and print the response."""
    handler: CommandHandler = get_dependencies()['command_handler']
    ok = asyncio.run(handler.handle_request(
        service, method, params_json=params, region=region, profile=profile,
        accelerate=accelerate, memoize=memoize, repeat=repeat,
    ))
    if not ok:
        raise typer.Exit(code=1)


@app.command()
def services():
    """List the registered service identifiers."""
    handler: CommandHandler = get_dependencies()['command_handler']
    handler.handle_list_services()


@app.command()
def settings():
    """Show the effective transport and retry settings."""
    handler: CommandHandler = get_dependencies()['command_handler']
    handler.handle_show_settings()


# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()


if __name__ == "__main__":
    cli_entry_point()
