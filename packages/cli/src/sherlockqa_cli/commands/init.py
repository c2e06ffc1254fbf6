"""init command — write a starter .sherlockqa.yml and GitHub Actions workflow."""

from __future__ import annotations

from pathlib import Path

import click
import yaml
from rich.console import Console

console = Console()

_API_KEY_ENVS = {
    "openai": ["OPENAI_API_KEY"],
    "azure": ["AZURE_OPENAI_API_KEY", "AZURE_OPENAI_ENDPOINT"],
    "azure-responses": ["AZURE_OPENAI_API_KEY", "AZURE_OPENAI_ENDPOINT"],
    "anthropic": ["ANTHROPIC_API_KEY"],
}

_WORKFLOW_TEMPLATE = """\
name: SherlockQA Review

on:
  pull_request:
    types: [opened, synchronize, reopened]

jobs:
  review:
    runs-on: ubuntu-latest
    permissions:
      contents: read
      pull-requests: write

    steps:
      - uses: actions/checkout@v4

      - name: Set up Python
        uses: actions/setup-python@v5
        with:
          python-version: "3.12"

      - name: Install sherlockqa
        run: pip install "sherlockqa[{extra}]=={version}"

      - name: Run SherlockQA review
        id: sherlockqa
        env:
          GITHUB_TOKEN: ${{{{ secrets.GITHUB_TOKEN }}}}
{secret_env}
        run: |
          sherlockqa review \\
            --repo ${{{{ github.repository }}}} \\
            --pr ${{{{ github.event.pull_request.number }}}}
"""


@click.command("init")
@click.option(
    "--provider",
    type=click.Choice(list(_API_KEY_ENVS)),
    default=None,
    help="AI provider. Prompted for when omitted.",
)
@click.option("--no-workflow", is_flag=True, help="Do not generate .github/workflows/sherlockqa.yml.")
def init_cmd(provider: str | None, no_workflow: bool):
    """Set up sherlockqa for a repository.

    Creates .sherlockqa.yml and, unless --no-workflow is given, a GitHub
    Actions workflow that reviews every pull request update.
    """
    console.print("\n[bold cyan]sherlockqa init[/bold cyan]\n")

    if provider is None:
        provider = click.prompt("AI provider", type=click.Choice(list(_API_KEY_ENVS)), default="openai")

    min_severity = click.prompt(
        "Lowest severity to post inline",
        type=click.Choice(["suggestion", "warning", "error"]),
        default="warning",
    )
    layout = click.prompt("Review layout", type=click.Choice(["compact", "detailed"]), default="detailed")

    config: dict = {"provider": provider, "min_severity": min_severity, "layout": layout}
    if provider == "anthropic":
        config["model"] = "claude-sonnet-4-20250514"

    _write_config(config)
    console.print("[green]Created .sherlockqa.yml[/green]")

    if not no_workflow:
        _write_workflow(provider)
        console.print("[green]Created .github/workflows/sherlockqa.yml[/green]")
        secrets = ", ".join(_API_KEY_ENVS[provider])
        console.print(
            f"\n[yellow]Remember to add [bold]{secrets}[/bold] to your "
            "GitHub repository secrets (Settings → Secrets → Actions).[/yellow]"
        )

    console.print("\n[bold green]Setup complete![/bold green]")


def _write_config(config: dict) -> None:
    """Write or update .sherlockqa.yml, preserving any existing keys."""
    path = Path(".sherlockqa.yml")
    existing: dict = {}
    if path.exists():
        existing = yaml.safe_load(path.read_text()) or {}
    existing.update(config)
    path.write_text(yaml.dump(existing, default_flow_style=False, sort_keys=False, allow_unicode=True))


def _get_version() -> str:
    from importlib.metadata import PackageNotFoundError, version

    try:
        return version("sherlockqa")
    except PackageNotFoundError:
        return "0.1.0"


def _write_workflow(provider: str) -> None:
    extra = "anthropic" if provider == "anthropic" else "openai"
    secret_env = "\n".join(
        f"          {name}: ${{{{ secrets.{name} }}}}" for name in _API_KEY_ENVS[provider]
    )
    workflow_dir = Path(".github/workflows")
    workflow_dir.mkdir(parents=True, exist_ok=True)
    (workflow_dir / "sherlockqa.yml").write_text(
        _WORKFLOW_TEMPLATE.format(extra=extra, version=_get_version(), secret_env=secret_env)
    )
