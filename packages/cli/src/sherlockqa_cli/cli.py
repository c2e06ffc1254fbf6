"""CLI entry point for sherlockqa.

Commands:
  review      — review a pull request and post the result
  init        — write .sherlockqa.yml and a GitHub Actions workflow
  index-diff  — print the diff-position map of a unified diff
"""

from __future__ import annotations

import logging

import click

from sherlockqa_cli.commands.index_diff import index_diff_cmd
from sherlockqa_cli.commands.init import init_cmd
from sherlockqa_cli.commands.review import review_cmd


@click.group()
@click.version_option(package_name="sherlockqa", prog_name="sherlockqa")
@click.option(
    "--config",
    "config_path",
    default=".sherlockqa.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="SHERLOCKQA_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """AI pull-request reviewer with a QA checklist that survives re-reviews."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


main.add_command(review_cmd)
main.add_command(init_cmd)
main.add_command(index_diff_cmd)
