"""swarmpy CLI - Main commands."""
import asyncio
import logging
import signal
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn
from rich.progress_bar import ProgressBar
from rich.table import Table

app = typer.Typer(
    name="swarmpy",
    help="Upload files and directories to a local Swarm Bee node",
    add_completion=False
)
console = Console()

STATUS_MESSAGES = {
    'creating_transfer': "[yellow]Creating tag...[/yellow]",
    'transferring': "[yellow]Uploading to local Bee node...[/yellow]",
    'syncing': "[cyan]Syncing with Swarm network...[/cyan]",
}


class Options:
    """Global options shared by every command."""

    def __init__(self, state_dir: Optional[Path], gateway: Optional[str]):
        self.state_dir = state_dir
        self.gateway = gateway

    def client(self):
        from swarmpy import SwarmClient, APIConfig

        config = APIConfig.for_gateway(self.gateway) if self.gateway else None
        return SwarmClient(self.state_dir, config=config)


def run_async(coro):
    """Run async function."""
    return asyncio.run(coro)


def format_size(num_bytes: int) -> str:
    """Human-readable size with two decimals."""
    if num_bytes <= 0:
        return "0 B"
    size = float(num_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024:
            return f"{size:.2f} {unit}"
        size /= 1024
    return f"{size:.2f} TB"


def detach_on_interrupt(loop: asyncio.AbstractEventLoop, session) -> bool:
    """
    Make Ctrl-C detach session instead of aborting the process.

    Only installed once the session is observable; before that Ctrl-C
    keeps its default behaviour and cancels the upload.

    Returns:
        True if the handler was installed
    """
    try:
        loop.add_signal_handler(signal.SIGINT, session.detach)
    except (NotImplementedError, RuntimeError):
        return False
    return True


def restore_interrupt(loop: asyncio.AbstractEventLoop) -> None:
    try:
        loop.remove_signal_handler(signal.SIGINT)
    except (NotImplementedError, RuntimeError):
        pass


def node_unreachable(gateway: str) -> None:
    console.print(Panel(
        f"[bold]Swarm node unreachable[/bold]\n\n[dim]Check if bee is running on {gateway}[/dim]",
        border_style="red",
        expand=False
    ))


@app.callback()
def main(
    ctx: typer.Context,
    state_dir: Path = typer.Option(None, "--state-dir", envvar="SWARMPY_STATE_DIR", help="State directory"),
    gateway: str = typer.Option(None, "--gateway", help="Bee API address"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Upload files and directories to a local Swarm Bee node."""
    from swarmpy import setup_logging

    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    setup_logging(level)
    ctx.obj = Options(state_dir, gateway)


@app.command()
def batch(
    ctx: typer.Context,
    batch_id: str = typer.Argument(None, help="Postage batch id to save"),
):
    """Show or set the postage batch id."""
    client = ctx.obj.client()

    if batch_id:
        client.set_batch_id(batch_id)
        console.print(f"[green]Batch ID saved:[/green] {batch_id[:24]}...")
    elif client.batch_id:
        console.print(f"Batch: [green]{client.batch_id}[/green]")
    else:
        console.print("Batch: [red]NOT SET[/red] (run 'swarmpy batch <id>')")


@app.command()
def upload(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="File or directory to upload", exists=True),
    name: str = typer.Option(None, "--name", "-n", help="Name on Swarm"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    background: bool = typer.Option(False, "--background", "-b", help="Detach once the tag is created"),
):
    """Upload a file or directory to Swarm."""
    from swarmpy import SessionState, UploadProgress, SwarmException, UnreachableError

    options: Options = ctx.obj

    async def do_upload():
        async with options.client() as swarm:
            if not swarm.batch_id:
                console.print("[red]Batch ID not set! Run 'swarmpy batch <id>' first.[/red]")
                raise typer.Exit(1)

            display_name = name or path.resolve().name
            if path.is_dir():
                scan = swarm.scan_directory(path)
                if scan.file_count == 0:
                    console.print(f"[red]Directory is empty: {path}[/red]")
                    raise typer.Exit(1)
                console.print(f"[bold]Directory:[/bold] {path}")
                console.print(f"[bold]Files:[/bold] {scan.file_count} ({format_size(scan.total_size)})")
                if scan.entry_point:
                    console.print(f"[bold]Index:[/bold] {scan.entry_point}")
            else:
                console.print(f"[bold]File:[/bold] {path.name}")
                console.print(f"[bold]Size:[/bold] {format_size(path.stat().st_size)}")
            console.print(f"[bold]Name on Swarm:[/bold] {display_name}")

            if not yes and not typer.confirm("Upload to Swarm?", default=True):
                raise typer.Exit(0)

            session = swarm.create_session(path, name)

            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                TextColumn("{task.fields[transferred]}"),
                console=console,
                transient=True
            ) as progress:
                task = progress.add_task("Initializing", total=100, transferred="")

                def on_state(state: SessionState):
                    if state.value in STATUS_MESSAGES:
                        progress.update(task, description=STATUS_MESSAGES[state.value])
                    if state is SessionState.TRANSFERRING:
                        progress.console.print(f"Tag UID: [green]{session.handle}[/green]")
                        if background:
                            session.detach()
                        else:
                            detach_on_interrupt(asyncio.get_running_loop(), session)

                def on_progress(p: UploadProgress):
                    progress.update(
                        task,
                        completed=p.percent,
                        description=p.label,
                        transferred=f"{format_size(p.transferred_bytes)} / {format_size(p.total_bytes)}"
                    )

                session.on('state', on_state).on('progress', on_progress)

                try:
                    result = await session.start().wait()
                except UnreachableError:
                    progress.stop()
                    node_unreachable(swarm.api.config.base_url)
                    raise typer.Exit(1)
                except SwarmException as e:
                    progress.stop()
                    console.print(f"[red]Upload failed: {e}[/red]")
                    raise typer.Exit(1)
                finally:
                    restore_interrupt(asyncio.get_running_loop())

            if result.is_detached:
                console.print(f"[cyan]Upload running in background (Tag: {result.handle})[/cyan]")
                result = await session.settled()
                if session.error is not None:
                    console.print(f"[red]Upload failed: {session.error}[/red]")
                    raise typer.Exit(1)
                console.print(f"[green]Uploaded:[/green] {result.name} → {result.reference}")
            elif result.synced:
                console.print(f"[green]Synced:[/green] {result.name} → {result.reference}")
            else:
                console.print(f"[green]Uploaded (syncing):[/green] {result.name} → {result.reference}")

    run_async(do_upload())


@app.command()
def ls(ctx: typer.Context):
    """List uploads known to the Bee node, newest first."""
    from swarmpy import UnreachableError

    options: Options = ctx.obj

    async def list_transfers():
        async with options.client() as swarm:
            try:
                transfers = await swarm.list_known_transfers()
            except UnreachableError:
                node_unreachable(swarm.api.config.base_url)
                raise typer.Exit(1)

            table = Table()
            table.add_column("Tag", style="dim", justify="right")
            table.add_column("Name")
            table.add_column("Sync", justify="right")
            table.add_column("Chunks", justify="right")

            for transfer in transfers:
                status = transfer.status
                table.add_row(
                    str(transfer.handle),
                    transfer.name[:40],
                    f"{status.sync_percent}%",
                    f"{status.synced}/{status.split}",
                    style=row_style(status)
                )

            console.print(table)

    run_async(list_transfers())


def row_style(status) -> str:
    """Colour of a transfer row by propagation phase."""
    if status.split == 0:
        return "bright_black"
    if status.synced >= status.split:
        return "green"
    if status.sent > 0 or status.synced > 0:
        return "cyan"
    if status.seen > 0 or status.stored > 0:
        return "yellow"
    return ""


@app.command()
def show(
    ctx: typer.Context,
    handle: int = typer.Argument(..., help="Tag UID"),
):
    """Show details of one upload."""
    from swarmpy import SwarmException

    options: Options = ctx.obj

    async def show_transfer():
        async with options.client() as swarm:
            record = swarm.get_record(handle)
            try:
                status = await swarm.get_status(handle)
            except SwarmException as e:
                status = None
                console.print(f"[yellow]Could not fetch tag status: {e}[/yellow]")

            table = Table(show_header=False, box=None)
            table.add_column(style="bold")
            table.add_column()
            table.add_row("Name:", (record.name if record else None) or "(unknown)")
            table.add_row("Hash:", (record.reference if record else None) or "(pending)")
            table.add_row("Date:", (record.date if record else None) or "(unknown)")
            table.add_row("Batch:", (record.batch_id if record else None) or "(unknown)")
            table.add_row("Tag UID:", str(handle))
            if record and record.is_directory:
                table.add_row("Files:", str(record.file_count))
                table.add_row("Index:", record.entry_point or "(none)")
            if status is not None:
                table.add_row("Progress:", ProgressBar(total=100, completed=status.sync_percent, width=25))
                table.add_row("", f"{status.synced} / {status.split} chunks synced ({status.sync_percent}%)")

            console.print(Panel(table, title="Upload Details", border_style="cyan", expand=False))

    run_async(show_transfer())


if __name__ == "__main__":
    app()
