"""CLI entry point for notevc.

Invoked as::

    notevc [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m notevc.cli.main

Commands
--------
diff        Compare two text files line by line
save        Record a manual snapshot of a file
history     List the snapshots of a document
show        Print the content of one snapshot
compare     Diff two snapshots of a document
restore     Write a snapshot's content back out
delete      Delete one snapshot
quota       Show storage usage
cleanup     Trim or evict stored histories
backends    List registered storage backends
version     Show version information
"""
from __future__ import annotations

import json
import logging
import sys
from datetime import datetime
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from notevc.errors import ConfigError, NoOp

console = Console()
err_console = Console(stderr=True)


class _Context:
    """Lazily built service shared by every command of one invocation."""

    def __init__(self, store_dir: str, config_path: str | None) -> None:
        self.store_dir = store_dir
        self.config_path = config_path
        self._service = None

    def config(self):
        from notevc.config import VersionControlConfig

        if self.config_path is None:
            return VersionControlConfig()
        try:
            return VersionControlConfig.from_yaml(self.config_path)
        except ConfigError as exc:
            err_console.print(f"[red]Config error:[/red] {exc}")
            sys.exit(1)

    def service(self):
        if self._service is None:
            from notevc.backends import FileBackend
            from notevc.service import VersionControlService

            self._service = VersionControlService.create(
                self.config(), backend=FileBackend(self.store_dir)
            )
        return self._service


def _read_text(path: str) -> str:
    """Read a text file, exiting on error."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        err_console.print(f"[red]Error:[/red] File not found: {path}")
        sys.exit(1)
    except OSError as exc:
        err_console.print(f"[red]Error:[/red] Cannot read {path}: {exc}")
        sys.exit(1)


def _print_change(line: str) -> None:
    if line.startswith("[+]"):
        console.print(f"[green]{escape(line)}[/green]", highlight=False)
    elif line.startswith("[-]"):
        console.print(f"[red]{escape(line)}[/red]", highlight=False)
    elif line.startswith("[~]"):
        console.print(f"[yellow]{escape(line)}[/yellow]", highlight=False)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="notevc")
@click.option(
    "--store",
    "store_dir",
    default=".notevc",
    envvar="NOTEVC_STORE",
    show_default=True,
    help="Directory holding the snapshot histories.",
)
@click.option("--config", "config_path", default=None, help="YAML configuration file.")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log to stderr.")
@click.pass_context
def cli(ctx: click.Context, store_dir: str, config_path: str | None, verbose: bool) -> None:
    """Per-document version control and line diffing for text notes."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
        )
    ctx.obj = _Context(store_dir, config_path)


# ---------------------------------------------------------------------------
# version / backends
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from notevc import __version__

    table = Table(show_header=False, box=None)
    table.add_row("[bold]notevc[/bold]", f"v{__version__}")
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    table.add_row("Platform", sys.platform)
    console.print(table)


@cli.command(name="backends")
def backends_command() -> None:
    """List registered storage backends, including entry-point plugins."""
    from notevc.backends import backend_registry

    backend_registry.load_entrypoints()
    console.print("[bold]Storage backends:[/bold]")
    for name in backend_registry.names():
        console.print(f"  {name}  [dim]{backend_registry.get(name).__qualname__}[/dim]")


# ---------------------------------------------------------------------------
# diff command
# ---------------------------------------------------------------------------


@cli.command(name="diff")
@click.argument("old", type=click.Path(exists=False))
@click.argument("new", type=click.Path(exists=False))
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the result as JSON.")
def diff_command(old: str, new: str, as_json: bool) -> None:
    """Compare two text files line by line.

    OLD and NEW are paths to the files to compare.
    """
    from notevc.diff import Differ

    result = Differ().compare(_read_text(old), _read_text(new))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return
    if not result.has_changes:
        console.print("[green]No changes between the two files.[/green]")
        return

    console.print(f"[bold]Diff:[/bold] {old} → {new}\n")
    for change in result.changes:
        _print_change(str(change))
    console.print(f"\n[bold]{result.description}[/bold]")


# ---------------------------------------------------------------------------
# save command
# ---------------------------------------------------------------------------


@cli.command(name="save")
@click.argument("file", type=click.Path(exists=False))
@click.option("--id", "document_id", default=None, help="Document id (defaults to the file stem).")
@click.option("--title", default=None, help="Document title (defaults to the file name).")
@click.option("--description", "-m", default=None, help="Change description.")
@click.pass_obj
def save_command(
    obj: _Context,
    file: str,
    document_id: str | None,
    title: str | None,
    description: str | None,
) -> None:
    """Record a manual snapshot of FILE."""
    from notevc.models import ChangeType, Document

    path = Path(file)
    content = _read_text(file)
    service = obj.service()
    document = Document(
        id=document_id or path.stem,
        title=title or path.name,
        content=content,
    )
    snapshot = service.store.save_version(document, ChangeType.MANUAL, description)
    if snapshot is not None:
        console.print(
            f"[green]Saved[/green] {document.id} v{snapshot.version}: {snapshot.change_description}"
        )
        return

    failure = service.store.last_failure
    if failure is None or isinstance(failure, NoOp):
        console.print(f"[blue]No changes to save[/blue] for {document.id}")
        return
    err_console.print(f"[red]Save failed:[/red] {failure}")
    sys.exit(1)


# ---------------------------------------------------------------------------
# history / show / compare
# ---------------------------------------------------------------------------


@cli.command(name="history")
@click.argument("document_id")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json", "yaml"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@click.pass_obj
def history_command(obj: _Context, document_id: str, output_format: str) -> None:
    """List the snapshots of DOCUMENT_ID, newest first."""
    from notevc.models import SnapshotSerializer

    versions = obj.service().get_versions(document_id)
    serializer = SnapshotSerializer()

    if output_format == "json":
        click.echo(serializer.to_json(versions, indent=2))
        return
    if output_format == "yaml":
        click.echo(serializer.to_yaml(versions), nl=False)
        return

    if not versions:
        console.print(f"No versions stored for {document_id}")
        return
    table = Table(title=f"History: {document_id}")
    table.add_column("Version", justify="right")
    table.add_column("Type")
    table.add_column("Created")
    table.add_column("Description")
    table.add_column("+/-/chars", justify="right")

    for snapshot in versions:
        stats = snapshot.diff_stats
        stats_text = (
            f"{stats.added_lines}/{stats.removed_lines}/{stats.changed_chars}" if stats else "-"
        )
        table.add_row(
            f"v{snapshot.version}",
            snapshot.change_type.value,
            datetime.fromtimestamp(snapshot.created_at).strftime("%Y-%m-%d %H:%M:%S"),
            escape(snapshot.change_description),
            stats_text,
        )
    console.print(table)


@cli.command(name="show")
@click.argument("document_id")
@click.argument("version", type=int)
@click.pass_obj
def show_command(obj: _Context, document_id: str, version: int) -> None:
    """Print the content of one snapshot."""
    snapshot = obj.service().store.find_version(document_id, version)
    if snapshot is None:
        err_console.print(f"[red]Error:[/red] {document_id} has no version {version}")
        sys.exit(1)
    console.print(f"[bold]{escape(snapshot.title)}[/bold] [dim]v{snapshot.version}[/dim]")
    console.print(Syntax(snapshot.content, "markdown", line_numbers=True))


@cli.command(name="compare")
@click.argument("document_id")
@click.argument("old_version", type=int)
@click.argument("new_version", type=int)
@click.pass_obj
def compare_command(obj: _Context, document_id: str, old_version: int, new_version: int) -> None:
    """Diff two snapshots of DOCUMENT_ID."""
    from notevc.diff import Differ

    comparison = obj.service().compare_versions(document_id, old_version, new_version)
    if comparison.old is None or comparison.new is None:
        missing = old_version if comparison.old is None else new_version
        err_console.print(f"[red]Error:[/red] {document_id} has no version {missing}")
        sys.exit(1)

    result = Differ().compare(comparison.old.content, comparison.new.content)
    console.print(f"[bold]{document_id}:[/bold] v{old_version} → v{new_version}\n")
    for change in result.changes:
        _print_change(str(change))
    console.print(f"\n[bold]{result.description}[/bold]")


# ---------------------------------------------------------------------------
# restore / delete
# ---------------------------------------------------------------------------


@cli.command(name="restore")
@click.argument("document_id")
@click.argument("version", type=int)
@click.option("--output", "-o", default=None, help="Write the restored content to this file.")
@click.option(
    "--record/--no-record",
    default=None,
    help="Record the restore as a new version (overrides the configured policy).",
)
@click.pass_obj
def restore_command(
    obj: _Context,
    document_id: str,
    version: int,
    output: str | None,
    record: bool | None,
) -> None:
    """Restore DOCUMENT_ID to VERSION."""
    from notevc.config import RestorePolicy

    policy = None
    if record is not None:
        policy = RestorePolicy.RECORD_VERSION if record else RestorePolicy.APPLY_ONLY

    snapshot = obj.service().coordinator.restore(document_id, version, policy=policy)
    if snapshot is None:
        err_console.print(f"[red]Restore failed:[/red] {document_id} v{version}")
        sys.exit(1)

    if output:
        Path(output).write_text(snapshot.content, encoding="utf-8")
        console.print(f"[green]Restored[/green] {document_id} v{version} to {output}")
    else:
        click.echo(snapshot.content)
    if snapshot.version != version:
        console.print(f"[dim]Recorded as v{snapshot.version}[/dim]")


@cli.command(name="delete")
@click.argument("document_id")
@click.argument("version", type=int)
@click.option(
    "--current",
    type=int,
    default=None,
    help="The document's current version; it will not be deleted.",
)
@click.pass_obj
def delete_command(obj: _Context, document_id: str, version: int, current: int | None) -> None:
    """Delete VERSION from the history of DOCUMENT_ID."""
    if current is not None and current == version:
        err_console.print(f"[yellow]Refused:[/yellow] v{version} is the current version")
        sys.exit(1)
    if not obj.service().store.delete_version(document_id, version, current_version=current):
        err_console.print(f"[red]Delete failed:[/red] {document_id} v{version}")
        sys.exit(1)
    console.print(f"[green]Deleted[/green] {document_id} v{version}")


# ---------------------------------------------------------------------------
# quota / cleanup
# ---------------------------------------------------------------------------


@cli.command(name="quota")
@click.pass_obj
def quota_command(obj: _Context) -> None:
    """Show storage usage across every history."""
    service = obj.service()
    status = service.get_quota_status()
    color = "green" if status.is_healthy else "red"

    table = Table(show_header=False, box=None)
    table.add_row("Usage", f"[{color}]{status.usage_fraction:.1%}[/{color}]")
    table.add_row("Total size", f"{status.total_size:,} bytes")
    table.add_row("Budget", f"{service.config.max_total_size:,} bytes")
    table.add_row("Documents", str(status.document_count))
    table.add_row("Versions", str(status.version_count))
    table.add_row("Needs cleanup", "yes" if status.needs_cleanup else "no")
    console.print(table)


@cli.command(name="cleanup")
@click.option("--keep", type=int, default=None, help="Keep at most this many versions per document.")
@click.option("--emergency", is_flag=True, default=False, help="Evict oldest data until healthy.")
@click.pass_obj
def cleanup_command(obj: _Context, keep: int | None, emergency: bool) -> None:
    """Trim long histories or evict the oldest data."""
    if keep is None and not emergency:
        err_console.print("[red]Error:[/red] pass --keep N and/or --emergency")
        sys.exit(1)
    quota = obj.service().quota
    if keep is not None:
        removed = quota.cleanup_oldest(keep)
        console.print(f"Trimmed [bold]{removed}[/bold] old version(s)")
    if emergency:
        evicted = quota.emergency_cleanup()
        console.print(f"Evicted [bold]{evicted}[/bold] unit(s)")


if __name__ == "__main__":
    cli()
