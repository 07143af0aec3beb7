"""Rich terminal renderer for selection and persistence results.

Color scheme
------------
- yellow : changed (will be reprocessed)
- green  : unchanged
- dim    : skipped by the target filter
- red    : resources whose status is unknown
"""

from __future__ import annotations

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from deltaforge.models.fingerprints import FingerprintEntry, GroupSelection, PersistReport

_STATUS_MARKUP: dict[str, str] = {
    "changed": "[bold yellow]CHANGED[/bold yellow]",
    "unchanged": "[green]UNCHANGED[/green]",
    "skipped": "[dim]SKIPPED[/dim]",
}


class SelectionRenderer:
    """Renders ``GroupSelection`` and ``PersistReport`` as Rich output.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render_selection(self, selection: GroupSelection, all_groups: list[str]) -> Panel:
        """Render a selection as a Panel with one row per group."""
        table = Table(show_header=True, header_style="bold cyan", expand=True)
        table.add_column("#", style="dim", width=4, justify="right")
        table.add_column("Group", min_width=16)
        table.add_column("Status", justify="center", min_width=12)
        table.add_column("Unknown resources", ratio=1)

        changed = set(selection.changed)
        skipped = set(selection.skipped)
        unknown_by_group: dict[str, list[str]] = {}
        for issue in selection.unknown:
            unknown_by_group.setdefault(issue.group, []).append(issue.uri)

        for idx, name in enumerate(all_groups, start=1):
            if name in skipped:
                status = "skipped"
            elif name in changed:
                status = "changed"
            else:
                status = "unchanged"
            unknown = unknown_by_group.get(name, [])
            table.add_row(
                str(idx),
                name,
                _STATUS_MARKUP[status],
                Text(", ".join(unknown), style="red") if unknown else Text(""),
            )

        summary = "  |  ".join([
            f"[bold]Evaluated:[/bold] {len(selection.evaluated)}",
            f"[bold]Changed:[/bold] {len(selection.changed)}",
            f"[bold]Skipped:[/bold] {len(selection.skipped)}",
            f"[bold]Unknown:[/bold] {len(selection.unknown)}",
        ])
        return Panel(
            Group(table, Text(""), Text.from_markup(summary)),
            title="[bold]Change Detection[/bold]",
            border_style="cyan",
            padding=(1, 2),
        )

    def render_persist(self, report: PersistReport) -> Panel:
        """Render a persistence report as a compact Panel."""
        lines = [f"[bold green]{len(report.written)}[/bold green] fingerprint(s) recorded"]
        if report.failed:
            lines.append(
                f"[bold red]{len(report.failed)}[/bold red] resource(s) could not be read:"
            )
            lines.extend(f"  [red]- {uri}[/red]" for uri in report.failed)
        border = "red" if report.failed else "green"
        return Panel("\n".join(lines), title="[bold]Fingerprints[/bold]", border_style=border)

    def render_entries(self, entries: list[FingerprintEntry]) -> Table:
        """Render stored fingerprints as a Table."""
        table = Table(title="Stored Fingerprints", header_style="bold cyan")
        table.add_column("URI", style="cyan")
        table.add_column("Fingerprint", style="green")
        table.add_column("Updated (UTC)", style="dim")
        for entry in entries:
            table.add_row(
                entry.uri,
                entry.hash,
                entry.updated_at.strftime("%Y-%m-%d %H:%M:%S"),
            )
        return table

    # ------------------------------------------------------------------
    # Print shortcuts
    # ------------------------------------------------------------------

    def print_selection(self, selection: GroupSelection, all_groups: list[str]) -> None:
        self.console.print(self.render_selection(selection, all_groups))

    def print_persist(self, report: PersistReport) -> None:
        self.console.print(self.render_persist(report))

    def print_entries(self, entries: list[FingerprintEntry]) -> None:
        if not entries:
            self.console.print("[dim]No fingerprints stored.[/dim]")
            return
        self.console.print(self.render_entries(entries))
