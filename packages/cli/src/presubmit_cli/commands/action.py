"""action command: entrypoint for the GitHub Action.

GitHub runs the action once per triggering event. The event name and the
path to the JSON event payload come from the runner environment.
"""

from __future__ import annotations

import json
import logging
import os

import click

from presubmit_cli.commands.review import check_credentials, execute_review

logger = logging.getLogger(__name__)

PULL_REQUEST_EVENTS = ("pull_request", "pull_request_target")


def _warning(message: str) -> None:
    # Workflow command: shows up as an annotation on the run summary.
    click.echo(f"::warning::{message}")
    logger.warning(message)


def load_event_payload(path: str | None) -> dict:
    if not path:
        return {}
    with open(path, encoding="utf-8") as f:
        return json.load(f)


@click.command("action")
@click.pass_context
def action_cmd(ctx):
    """Handle the GitHub Actions event that started this run."""
    config = ctx.obj["config"]
    event_name = os.environ.get("GITHUB_EVENT_NAME", "")

    if event_name == "pull_request_review_comment":
        logger.info("Ignoring %s event", event_name)
        return
    if event_name not in PULL_REQUEST_EVENTS:
        _warning(f"Skipped: unsupported github event {event_name!r}")
        return

    try:
        payload = load_event_payload(os.environ.get("GITHUB_EVENT_PATH"))
    except (OSError, ValueError) as e:
        raise click.ClickException(f"Failed with error: could not read event payload: {e}") from e

    pull_request = payload.get("pull_request")
    if not pull_request:
        _warning("`pull_request` is missing from payload")
        return

    repo = os.environ.get("GITHUB_REPOSITORY") or payload.get("repository", {}).get("full_name")
    if not repo:
        raise click.ClickException("Failed with error: GITHUB_REPOSITORY is not set")

    check_credentials(config)
    execute_review(config, repo, int(pull_request["number"]))
