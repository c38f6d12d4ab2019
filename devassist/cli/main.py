"""
Main CLI entry point for DevAssist.
"""

# Standard library imports
import asyncio
import importlib.metadata
from pathlib import Path
from typing import List, Optional

# Third-party imports
import typer
from loguru import logger
from pydantic import ValidationError

# Local imports
from devassist.environment import ConfigurationError, EnvironmentConfig
from devassist.file_monitor import FileMonitorError, SyncMonitor
from devassist.models import Directory, Project, SyncResult
from devassist.stores import DevAssistClient, JsonFileStore, RemoteStore, RemoteStoreError
from devassist.sync import DEFAULT_IGNORED, FileSynchronizer
from devassist.sync.state import list_states
from devassist.utils.rich_console import get_console, print_error, print_success, print_table


console = get_console()


app = typer.Typer(
    help="DevAssist CLI Companion\n\nSynchronizes the files of a local directory with a DevAssist project.",
    no_args_is_help=True,
)


ProjectOption = typer.Option(..., "--project", "-p", help="Project name on the DevAssist service")
DirectoryOption = typer.Option(..., "--directory", "-d", help="Directory to synchronize")
IgnoreOption = typer.Option(
    None, "--ignore", "-i", help="Extra directory or file name to skip (repeatable)"
)
OutputOption = typer.Option(
    None, "--output", "-o", help="Write documents to this JSON file instead of the DevAssist API"
)
EnvFileOption = typer.Option(None, "--env-file", help="Load environment variables from this file")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Enable debug logging")


def _fail(message: str) -> None:
    print_error(message)
    raise typer.Exit(1)


def _validation_message(error: ValidationError) -> str:
    return "; ".join(str(item["msg"]).removeprefix("Value error, ") for item in error.errors())


def _validate_directory(directory: Path) -> Path:
    try:
        return Directory(path=directory).path
    except ValidationError as error:
        _fail(_validation_message(error))


def _validate_project(project: str) -> str:
    try:
        return Project(name=project).name
    except ValidationError as error:
        _fail(_validation_message(error))


def _validate_target(project: str, directory: Path) -> tuple[str, Path]:
    return _validate_project(project), _validate_directory(directory)


def _build_store(config: EnvironmentConfig, output: Optional[Path], directory: Path) -> RemoteStore:
    if output is not None:
        output = output.expanduser().resolve()
        if output == directory or directory in output.parents:
            _fail(f"--output must be outside the synchronized directory: {output}")
        return JsonFileStore(output)
    return DevAssistClient(
        api_key=config.require_api_key(),
        base_url=config.DEVASSIST_API_URL,
        timeout=config.DEVASSIST_TIMEOUT,
    )


def _report(result: SyncResult) -> None:
    if result.has_changes:
        print_success(
            f"Files synchronized: {len(result.uploaded)} uploaded, "
            f"{len(result.deleted)} deleted, {result.unchanged} unchanged."
        )
    else:
        console.print("No new or modified files to send.")
    for name in result.skipped:
        console.print(f"[yellow]Skipped[/yellow] {name}")


def _prepare(
    project: str,
    directory: Path,
    ignore: Optional[List[str]],
    output: Optional[Path],
    env_file: Optional[Path],
    verbose: bool,
    **synchronizer_options,
) -> tuple[EnvironmentConfig, FileSynchronizer]:
    config = EnvironmentConfig.load(env_file=env_file, debug=verbose)
    project, directory = _validate_target(project, directory)
    store = _build_store(config, output, directory)
    synchronizer = FileSynchronizer(
        project,
        directory,
        store,
        ignored=tuple(DEFAULT_IGNORED) + tuple(ignore or ()),
        on_result=_report,
        **synchronizer_options,
    )
    return config, synchronizer


@app.command()
def sync(
    project: str = ProjectOption,
    directory: Path = DirectoryOption,
    once: bool = typer.Option(False, "--once", help="Run a single pass and exit"),
    interval: Optional[int] = typer.Option(
        None, "--interval", min=1, help="Seconds between passes (default: DEVASSIST_SYNC_INTERVAL or 30)"
    ),
    ignore: Optional[List[str]] = IgnoreOption,
    output: Optional[Path] = OutputOption,
    prune: bool = typer.Option(True, "--prune/--no-prune", help="Delete remote files missing locally"),
    state: bool = typer.Option(True, "--state/--no-state", help="Persist the hash cache between runs"),
    env_file: Optional[Path] = EnvFileOption,
    verbose: bool = VerboseOption,
):
    """Scan the directory and push new, modified and deleted files every INTERVAL seconds.

    Press Ctrl+C to stop.
    """
    try:
        config, synchronizer = _prepare(
            project, directory, ignore, output, env_file, verbose,
            persist_state=state, prune_remote=prune,
        )
        interval = interval or config.DEVASSIST_SYNC_INTERVAL
        with synchronizer.store:
            if once:
                asyncio.run(synchronizer.sync_once())
            else:
                typer.echo(
                    f"Synchronizing {synchronizer.directory} to project {synchronizer.project} "
                    f"every {interval}s (Ctrl+C to stop)..."
                )
                asyncio.run(synchronizer.run(interval))
    except KeyboardInterrupt:
        typer.echo("\nStopped synchronizing.")
    except (ConfigurationError, RemoteStoreError, OSError) as error:
        logger.debug(f"sync failed: {error!r}")
        _fail(str(error))


@app.command()
def watch(
    project: str = ProjectOption,
    directory: Path = DirectoryOption,
    debounce: float = typer.Option(0.5, "--debounce", min=0.0, help="Seconds of quiet before syncing"),
    ignore: Optional[List[str]] = IgnoreOption,
    output: Optional[Path] = OutputOption,
    env_file: Optional[Path] = EnvFileOption,
    verbose: bool = VerboseOption,
):  # pragma: no cover
    """Synchronize once, then again whenever files in the directory change.

    Press Ctrl+C to stop watching.
    """

    async def _watch(synchronizer: FileSynchronizer) -> None:
        await synchronizer.sync_once()
        with SyncMonitor(synchronizer, asyncio.get_running_loop(), debounce_time=debounce):
            typer.echo(f"Watching {synchronizer.directory} for changes (Ctrl+C to stop)...")
            await asyncio.Event().wait()

    try:
        _, synchronizer = _prepare(project, directory, ignore, output, env_file, verbose)
        with synchronizer.store:
            asyncio.run(_watch(synchronizer))
    except KeyboardInterrupt:
        typer.echo("\nStopped watching.")
    except (ConfigurationError, RemoteStoreError, FileMonitorError, OSError) as error:
        _fail(str(error))


@app.command()
def status(
    directory: Path = DirectoryOption,
    project: Optional[str] = typer.Option(None, "--project", "-p", help="Only show this project"),
):
    """Show what has been synchronized from the directory."""
    directory = _validate_directory(directory)
    if project is not None:
        project = _validate_project(project)
    states = [s for s in list_states(directory) if project is None or s.project == project]
    if not states:
        typer.echo(f"No synchronization state found in {directory}")
        raise typer.Exit(0)

    print_table(
        ["Project", "Tracked Files", "Last Sync"],
        [
            [s.project, len(s.hashes), s.last_sync.isoformat() if s.last_sync else "(never)"]
            for s in states
        ],
        title="DevAssist Sync Status",
    )


@app.command()
def version():
    """Show the DevAssist CLI version."""
    try:
        installed = importlib.metadata.version("devassist-cli")
    except importlib.metadata.PackageNotFoundError:
        from devassist import __version__ as installed
    typer.echo(f"DevAssist CLI version: {installed}")


if __name__ == "__main__":
    app()
