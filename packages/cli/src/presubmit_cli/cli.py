"""CLI entry point for presubmit.

Commands:
  review   summarize and review a pull request from a terminal or CI step
  action   GitHub Actions entrypoint, driven by the triggering event
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from presubmit_cli.commands.action import action_cmd
from presubmit_cli.commands.review import review_cmd

console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, rich_tracebacks=True)],
    )
    # PyGithub and urllib3 log every request at DEBUG; keep them quiet unless asked.
    if not verbose:
        logging.getLogger("github").setLevel(logging.WARNING)
        logging.getLogger("urllib3").setLevel(logging.WARNING)


@click.group()
@click.version_option(
    version=importlib.metadata.version("presubmit"),
    prog_name="presubmit",
)
@click.option(
    "--config",
    "config_path",
    default=".presubmit.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRESUBMIT_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """AI pull request summaries and incremental code review."""
    from presubmit_core.config import load_config
    from presubmit_cli.auth import resolve_github_token

    _configure_logging(verbose)
    ctx.ensure_object(dict)

    config = load_config(config_path)

    # Resolve token early so all subcommands share the same resolution.
    token = resolve_github_token()
    if token:
        config["github_token"] = token

    ctx.obj["config"] = config


main.add_command(review_cmd)
main.add_command(action_cmd)
