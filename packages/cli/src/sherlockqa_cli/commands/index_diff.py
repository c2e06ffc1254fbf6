"""index-diff command — show where inline comments would land for a diff."""

from __future__ import annotations

import json

import click
from rich.console import Console
from rich.table import Table

from sherlockqa_core.diff import index_diff

console = Console()


@click.command("index-diff")
@click.argument("diff_file", type=click.File("r", encoding="utf-8"))
@click.option("--file", "only_file", default=None, help="Only show positions for this path.")
@click.option("--json", "as_json", is_flag=True, help="Print the raw position map as JSON.")
def index_diff_cmd(diff_file, only_file: str | None, as_json: bool):
    """Print the new-file line → diff position map of DIFF_FILE ('-' for stdin).

    Useful for checking why an inline comment was dropped: a line missing
    from the map cannot carry a comment.

    \b
    Example:
      git diff main... | sherlockqa index-diff -
    """
    positions = index_diff(diff_file.read())
    if only_file is not None:
        if only_file not in positions:
            raise click.ClickException(f"{only_file} does not appear in the diff.")
        positions = {only_file: positions[only_file]}

    if as_json:
        click.echo(json.dumps(positions, indent=2))
        return

    if not positions:
        console.print("[yellow]No file headers found in the diff.[/yellow]")
        return

    for path, lines in positions.items():
        table = Table(title=path, title_justify="left")
        table.add_column("Line", justify="right")
        table.add_column("Position", justify="right")
        for line, position in sorted(lines.items()):
            table.add_row(str(line), str(position))
        console.print(table)
