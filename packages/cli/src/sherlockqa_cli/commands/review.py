"""review command — run the AI review on a pull request."""

from __future__ import annotations

import os

import click
from github import GithubException
from rich.console import Console

from sherlockqa_core.exceptions import ConfigError, ProviderError
from sherlockqa_core.gh.pull_request import get_pull_requests, get_repo
from sherlockqa_core.render import Verdict
from sherlockqa_core.reviewer import run_review, write_action_outputs

console = Console()

# Credential each provider needs, by config key → environment variable.
_REQUIRED_CREDENTIALS = {
    "openai": {"openai_api_key": "OPENAI_API_KEY"},
    "azure": {"azure_api_key": "AZURE_OPENAI_API_KEY", "azure_endpoint": "AZURE_OPENAI_ENDPOINT"},
    "azure-responses": {"azure_api_key": "AZURE_OPENAI_API_KEY", "azure_endpoint": "AZURE_OPENAI_ENDPOINT"},
    "anthropic": {"anthropic_api_key": "ANTHROPIC_API_KEY"},
}


@click.command("review")
@click.option("--repo", required=True, help="GitHub repository in owner/name format.")
@click.option(
    "--pr",
    "pr_number",
    type=int,
    default=None,
    help="Pull request number. Omit to list open PRs interactively.",
)
@click.option(
    "--provider",
    type=click.Choice(["openai", "azure", "azure-responses", "anthropic"]),
    default=None,
    help="AI provider. Overrides config file.",
)
@click.option("--model", default=None, help="Model (or Azure deployment) name. Overrides config file.")
@click.option(
    "--min-severity",
    type=click.Choice(["suggestion", "warning", "error"]),
    default=None,
    help="Lowest severity posted as an inline comment. Overrides config file.",
)
@click.option(
    "--layout",
    type=click.Choice(["compact", "detailed"]),
    default=None,
    help="Review body layout. Overrides config file.",
)
@click.option(
    "--shadow",
    "-s",
    is_flag=True,
    help="Dry-run mode: print the review without posting or dismissing anything.",
)
@click.pass_context
def review_cmd(
    ctx,
    repo: str,
    pr_number: int | None,
    provider: str | None,
    model: str | None,
    min_severity: str | None,
    layout: str | None,
    shadow: bool,
):
    """Review a pull request and post inline comments plus a QA checklist.

    Scenarios ticked in an earlier sherlockqa review stay ticked when the
    new review lists an equivalent scenario.

    \b
    Required environment variables:
      GITHUB_TOKEN           GitHub token (or use gh CLI)
      OPENAI_API_KEY         --provider openai
      AZURE_OPENAI_API_KEY   --provider azure / azure-responses
      AZURE_OPENAI_ENDPOINT  --provider azure / azure-responses
      ANTHROPIC_API_KEY      --provider anthropic
    """
    from sherlockqa_core.config import load_config, validate_config
    from sherlockqa_cli.auth import resolve_github_token

    config_path = (ctx.obj or {}).get("config_path", ".sherlockqa.yml")
    try:
        config = load_config(
            config_path,
            cli_overrides={"provider": provider, "model": model, "min_severity": min_severity, "layout": layout},
        )
        validate_config(config)
    except ConfigError as e:
        raise click.UsageError(str(e))

    token = resolve_github_token()
    if not token:
        raise click.UsageError(
            "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.\n"
            "Create a token at https://github.com/settings/tokens"
        )
    config["github_token"] = token

    for key, env_var in _REQUIRED_CREDENTIALS[config["provider"]].items():
        if not config.get(key):
            raise click.UsageError(f"{env_var} environment variable is not set.")

    this_repo = get_repo(repo, token=token)

    if pr_number is None:
        prs = list(get_pull_requests(this_repo))
        if not prs:
            console.print("[yellow]No open pull requests found.[/yellow]")
            return
        console.print("\nOpen pull requests:")
        for pr in prs:
            console.print(f"  [bold]#{pr.number}[/bold]  {pr.title}")
        pr_number = click.prompt("\nEnter the pull request number", type=int)

    try:
        outcome = run_review(repo=repo, pr_number=pr_number, config=config, shadow=shadow, repo_obj=this_repo)
    except (ValueError, ProviderError, ConfigError, GithubException) as e:
        raise click.ClickException(f"Review failed: {e}")

    if outcome is None:
        return

    output_path = os.environ.get("GITHUB_OUTPUT")
    if output_path:
        write_action_outputs(outcome, output_path)

    if outcome.verdict == Verdict.DO_NOT_MERGE.value:
        raise click.ClickException("Review verdict: Do Not Merge")
