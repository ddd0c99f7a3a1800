"""Main CLI interface for tcsync (test catalog synchronizer)."""

import asyncio
import sys
from typing import Optional, Tuple

import click
from loguru import logger
from rich.console import Console
from rich.table import Table
from rich.text import Text

from config import Config, LogLevel, get_session_logger, setup_logging
from reporting import catalog_snapshot, render_condensed_summary
from runner import CommandTestRunner
from runner.command import dump_entries
from testcases import TestModel, WorkspaceObserver

console = Console()

WATCH_ACTIONS = {
    "created": "file_created",
    "changed": "file_changed",
    "deleted": "file_deleted",
}


def parse_watch_line(line: str) -> Optional[Tuple[str, str]]:
    """Parse '<created|changed|deleted> <path>'; returns None for anything else."""
    parts = line.strip().split(None, 1)
    if len(parts) != 2 or parts[0] not in WATCH_ACTIONS:
        return None
    return parts[0], parts[1]


async def feed_workspace_events(model: TestModel, observer: WorkspaceObserver, stream) -> None:
    """Forward events from ``stream`` to ``observer`` until EOF, then drain."""
    loop = asyncio.get_running_loop()
    while True:
        # Read off the loop so debounce timers and discovery keep running
        line = await loop.run_in_executor(None, stream.readline)
        if not line:
            break
        event = parse_watch_line(line)
        if event is None:
            if line.strip():
                logger.warning(f"Ignoring malformed workspace event: {line.strip()}")
            continue
        action, path = event
        getattr(observer, WATCH_ACTIONS[action])(path)

    observer.flush()
    await model.wait_for_discovery()


def build_model(config: Config) -> TestModel:
    """Create a catalog wired to the configured runner command."""
    runner = CommandTestRunner(timeout=config.runner_timeout)
    return TestModel(
        runner,
        workspace_folder=config.workspace_folder,
        config_file=config.resolve_config_file(),
        cli=config.runner_cli,
    )


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Set the logging level",
)
@click.option("--log-file", type=click.Path(), help="Path to log file")
@click.option("--verbose", is_flag=True, help="Enable verbose debugging output with detailed logs")
@click.option("--workspace", type=click.Path(file_okay=False), help="Workspace folder (default: TCS_WORKSPACE or .)")
@click.option("--config-file", help="Runner configuration file, relative to the workspace")
@click.option("--runner", "runner_cli", help="Runner command speaking the catalog JSON contract")
@click.pass_context
def cli(ctx, log_level, log_file, verbose, workspace, config_file, runner_cli):
    """tcsync: keep a test catalog in sync with a test runner."""

    config = Config.from_env()

    if log_level:
        config.log_level = LogLevel(log_level)
    if log_file:
        config.log_file = log_file
    if verbose:
        config.verbose = verbose
    if workspace:
        config.workspace_folder = workspace
    if config_file:
        config.config_file = config_file
    if runner_cli:
        config.runner_cli = runner_cli

    setup_logging(config)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config

    if config.verbose:
        session_logger = get_session_logger()
        if session_logger:
            logger.info(f"Session ID: {session_logger.session_id}")
            logger.info(f"Logs directory: {session_logger.session_log_dir}")


@cli.command(name="list")
@click.pass_context
def list_command(ctx):
    """List projects and files reported by the runner."""

    model = build_model(ctx.obj["config"])
    model.list_files()

    if not model.projects:
        console.print("[yellow]No projects reported by the runner.[/yellow]")
        console.print("[dim]Check --runner and --config-file, or run with --verbose.[/dim]")
        sys.exit(1)

    table = Table(title="Test Projects", show_header=True, header_style="bold magenta")
    table.add_column("Project", style="cyan", no_wrap=True)
    table.add_column("Test Dir", style="blue")
    table.add_column("Files", justify="right")
    table.add_column("Default", style="green")

    for project in model.projects.values():
        table.add_row(
            project.name,
            project.test_dir,
            str(len(project.files)),
            Text("yes", style="green") if project.is_first else Text("", style="dim"),
        )

    console.print(table)


@cli.command()
@click.argument("files", nargs=-1)
@click.option("--json", "as_json", is_flag=True, help="Print discovered project entries as JSON")
@click.pass_context
def discover(ctx, files: Tuple[str, ...], as_json: bool):
    """Discover tests in FILES (default: every listed file)."""

    model = build_model(ctx.obj["config"])
    model.list_files()

    targets = list(files) if files else sorted(model.all_files)
    unknown = [f for f in targets if f not in model.all_files]
    for file in unknown:
        console.print(f"[yellow]⚠️ Not part of any project: {file}[/yellow]")

    asyncio.run(model.list_tests(targets))

    if as_json:
        for project in model.projects.values():
            click.echo(f"{project.name}\t{dump_entries(model.test_entries(project))}")
        return

    table = Table(title="Discovered Tests", show_header=True, header_style="bold magenta")
    table.add_column("Project", style="cyan", no_wrap=True)
    table.add_column("Location", style="blue")
    table.add_column("Title", style="white")

    for project in model.projects.values():
        tests = sorted(
            model.test_entries(project),
            key=lambda e: (e.location.file, e.location.line, e.title),
        )
        for entry in tests:
            table.add_row(project.name, f"{entry.location.file}:{entry.location.line}", entry.title)

    console.print(table)
    console.print(f"\n[dim]{render_condensed_summary(catalog_snapshot(model))}[/dim]")


@cli.command()
@click.option("--discover/--no-discover", default=True, help="Discover every listed file before applying events")
@click.pass_context
def watch(ctx, discover: bool):
    """Apply workspace events read from stdin.

    Each line is '<created|changed|deleted> <path>', as produced by any file
    watcher. Events are batched with the configured debounce delay.
    """

    config = ctx.obj["config"]
    model = build_model(config)
    model.list_files()

    observer = WorkspaceObserver(model.workspace_changed, debounce=config.watch_debounce_seconds)
    model.on_updated.connect(
        lambda: console.print(f"[dim]{render_condensed_summary(catalog_snapshot(model))}[/dim]")
    )

    async def run():
        if discover:
            await model.list_tests(sorted(model.all_files))
        await feed_workspace_events(model, observer, click.get_text_stream("stdin"))

    try:
        asyncio.run(run())
    finally:
        observer.dispose()
        model.dispose()


if __name__ == "__main__":
    cli()
