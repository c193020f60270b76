"""
Helpers shared by the deploy and cleanup commands.
"""

import logging
from typing import Dict, Tuple

import click

from cloudformation import (
    CloudFormationProvider,
    ConvergencePoller,
    PollResult,
    StackError,
    StackOperationFailed,
    StackTimeoutError,
)
from cloudformation.diagnostics import format_failure_report, format_timeout_report
from config import ClusterConfig

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(verbose: bool) -> None:
    """Configure root logging for a command run."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
    )
    # botocore is noisy at DEBUG
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def parse_key_values(items: Tuple[str, ...]) -> Dict[str, str]:
    """Parse KEY=VALUE pairs given on the command line."""
    values: Dict[str, str] = {}
    for item in items:
        if "=" not in item:
            raise click.BadParameter(f"Expected KEY=VALUE, got '{item}'")
        key, value = item.split("=", 1)
        values[key.strip()] = value
    return values


def echo_progress(result: PollResult) -> None:
    """Report one poll tick."""
    click.echo(f"⏳ [{result.elapsed_seconds:>5.0f}s] {result.raw_status}")


def make_poller(provider: CloudFormationProvider, config: ClusterConfig) -> ConvergencePoller:
    return ConvergencePoller(
        provider,
        interval=config.poll_interval,
        timeout=config.poll_timeout,
        on_tick=echo_progress,
    )


def report_stack_error(error: StackError) -> None:
    """Print a stack error to stderr in its most useful form."""
    if isinstance(error, StackOperationFailed):
        click.echo(format_failure_report(error), err=True)
    elif isinstance(error, StackTimeoutError):
        click.echo(format_timeout_report(error), err=True)
    else:
        click.echo(click.style(f"❌ {error}", fg="red"), err=True)
