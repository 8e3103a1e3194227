"""
DataSeeder CLI - Main entry point.

Runs the seeders registered by an application's setup hook. ``APP`` is a
``module:function`` reference to an async (or plain) callable taking
``(builder, engine)``: it prepares the schema and registers seeders on the
``SeederBuilder``.

Example Usage:
    # Seed everything from the bookstore sample
    $ dataseeder run dataseeder.samples.bookstore:setup

    # Run two seeders in parallel tiers, continuing past failures
    $ dataseeder run myapp.seeding:setup --only authors --only books \\
        --parallel --max-parallel 2 --continue-on-error

    # Show the resolved order without running anything
    $ dataseeder list dataseeder.samples.bookstore:setup

Options left unset fall back to the SEEDER_* environment settings.
"""

import asyncio
import importlib
import inspect
import logging
from typing import Any, Callable, Dict, List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from dataseeder.core.config.settings import settings
from dataseeder.core.exceptions.custom_exceptions import (
    ConfigurationError,
    DataSeederError,
)
from dataseeder.core.logging.logger import get_logger
from dataseeder.seeding.base.seeder import BaseSeeder
from dataseeder.seeding.builder import SeederBuilder
from dataseeder.storage.database import create_engine

app = typer.Typer(
    name="dataseeder",
    help="Dependency-ordered database seeding",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()
logger = get_logger(__name__)


def load_setup_hook(reference: str) -> Callable[..., Any]:
    """
    Import the setup hook named by ``module:function``.

    Raises:
        ConfigurationError: If the reference is malformed or cannot be loaded
    """
    module_name, _, attribute = reference.partition(":")
    if not module_name or not attribute:
        raise ConfigurationError(
            f"Invalid app reference '{reference}', expected 'module:function'"
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import module '{module_name}': {e}") from e

    hook = getattr(module, attribute, None)
    if hook is None or not callable(hook):
        raise ConfigurationError(
            f"Module '{module_name}' has no callable '{attribute}'"
        )
    return hook


async def _with_app(
    reference: str,
    builder: SeederBuilder,
    database_url: Optional[str],
    action: Callable[[SeederBuilder], Any],
) -> Any:
    hook = load_setup_hook(reference)
    engine = create_engine(database_url)
    try:
        result = hook(builder, engine)
        if inspect.isawaitable(result):
            await result
        outcome = action(builder)
        if inspect.isawaitable(outcome):
            outcome = await outcome
        return outcome
    finally:
        await engine.dispose()


def _build_options(
    parallel: Optional[bool],
    max_parallel: Optional[int],
    continue_on_error: bool,
    timeout: Optional[float],
    allow_cycles: bool,
) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if parallel is not None:
        overrides["enable_parallelization"] = parallel
    if max_parallel is not None:
        overrides["max_degree_of_parallelization"] = max_parallel
    if continue_on_error:
        overrides["continue_on_error"] = True
    if timeout is not None:
        overrides["seeder_timeout"] = timeout
    if allow_cycles:
        overrides["throw_on_circular_dependency"] = False
    return overrides


@app.command()
def run(
    app_ref: str = typer.Argument(
        ..., metavar="APP", help="Setup hook as 'module:function'"
    ),
    only: Optional[List[str]] = typer.Option(
        None, "--only", "-k", help="Run only the seeder with this key (repeatable)"
    ),
    parallel: Optional[bool] = typer.Option(
        None, "--parallel/--sequential", help="Run priority tiers in parallel"
    ),
    max_parallel: Optional[int] = typer.Option(
        None, "--max-parallel", min=1, help="Maximum concurrent seeders per tier"
    ),
    continue_on_error: bool = typer.Option(
        False, "--continue-on-error", help="Log failed seeders and keep going"
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Per-seeder timeout in seconds"
    ),
    allow_cycles: bool = typer.Option(
        False, "--allow-cycles", help="Ignore circular dependencies"
    ),
    database_url: Optional[str] = typer.Option(
        None, "--database-url", help="Async database URL (defaults to DATABASE_URL)"
    ),
) -> None:
    """Run the seeders registered by APP"""
    try:
        builder = SeederBuilder(settings.seeder_options).configure(
            **_build_options(
                parallel, max_parallel, continue_on_error, timeout, allow_cycles
            )
        )
    except (ValidationError, ConfigurationError) as e:
        console.print(f"Invalid seeder options: {e}", style="red")
        raise typer.Exit(1)

    async def execute(builder: SeederBuilder) -> None:
        orchestrator = builder.build()
        if only:
            await orchestrator.seed(only)
        else:
            await orchestrator.seed_all()

    logger.info(f"Starting seeding with {app_ref}")
    try:
        asyncio.run(_with_app(app_ref, builder, database_url, execute))
    except (DataSeederError, FileNotFoundError) as e:
        console.print(f"Seeding failed: {e}", style="red")
        raise typer.Exit(1)

    console.print("Seeding completed successfully", style="green")


@app.command(name="list")
def list_seeders(
    app_ref: str = typer.Argument(
        ..., metavar="APP", help="Setup hook as 'module:function'"
    ),
    allow_cycles: bool = typer.Option(
        False, "--allow-cycles", help="Ignore circular dependencies"
    ),
    database_url: Optional[str] = typer.Option(
        None, "--database-url", help="Async database URL (defaults to DATABASE_URL)"
    ),
) -> None:
    """Show the resolved seeding order of APP without running it"""
    builder = SeederBuilder(settings.seeder_options)
    if allow_cycles:
        builder.configure(throw_on_circular_dependency=False)

    def resolve(builder: SeederBuilder) -> List[BaseSeeder]:
        return builder.build().get_ordered_seeders()

    try:
        seeders = asyncio.run(_with_app(app_ref, builder, database_url, resolve))
    except DataSeederError as e:
        console.print(f"Cannot resolve seeders: {e}", style="red")
        raise typer.Exit(1)

    table = Table(title="Seeding Order")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Key", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("Order", style="yellow", justify="right")
    table.add_column("Depends On", style="green")

    for position, seeder in enumerate(seeders, start=1):
        table.add_row(
            str(position),
            seeder.key,
            seeder.name,
            str(seeder.order),
            ", ".join(seeder.dependencies) or "-",
        )

    console.print(table)


@app.command()
def version() -> None:
    """Show DataSeeder version information"""
    table = Table(title="DataSeeder Version Information")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")
    table.add_column("Environment", style="yellow")

    table.add_row("DataSeeder", settings.APP_VERSION, settings.ENVIRONMENT)
    table.add_row("Python", "3.9+", "Required")

    console.print(table)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose logging"
    ),
) -> None:
    """
    DataSeeder CLI - dependency-ordered database seeding

    Run 'dataseeder --help' for available commands.
    """
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.info("Verbose logging enabled")


if __name__ == "__main__":
    app()
