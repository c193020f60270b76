#!/usr/bin/env python3
"""
Cluster teardown command.
"""

import sys
from typing import Callable, Optional

import click

from cloudformation import (
    CloudFormationProvider,
    OperationKind,
    StackError,
    StackNotFoundError,
    StackOperation,
    StackSubmitter,
)
from config import ClusterConfig, ConfigurationError, get_cluster_config

from .common import make_poller, report_stack_error, setup_logging

CONFIRMATION_TOKEN = "DELETE"


class TokenConfirmer:
    """Ask the user to type an exact token before a destructive action."""

    def __init__(
        self,
        token: str = CONFIRMATION_TOKEN,
        prompt: Callable[..., str] = click.prompt,
    ):
        self.token = token
        self.prompt = prompt

    def confirm(self, message: str) -> bool:
        response = self.prompt(
            f"{message}\nType {self.token} to confirm",
            default="",
            show_default=False,
        )
        return response.strip() == self.token


def run_cleanup(config: ClusterConfig) -> int:
    """
    Delete the cluster stack and wait until it is gone.

    Returns:
        Process exit code
    """
    stack_name = config.get_stack_name()
    provider = CloudFormationProvider(region=config.region, profile=config.profile)
    operation = StackOperation(
        kind=OperationKind.DELETE, stack_name=stack_name, region=config.region
    )

    try:
        ack = StackSubmitter(provider).submit(operation, require_existing=True)
        make_poller(provider, config).poll(stack_name, ack.kind)
    except StackNotFoundError as e:
        click.echo(f"❌ {e} in {config.region}", err=True)
        return 1
    except StackError as e:
        report_stack_error(e)
        return 1

    click.echo(click.style(f"✅ Stack {stack_name} deleted successfully", fg="green"))
    return 0


@click.command()
@click.option("--stack-name", "-s", help="CloudFormation stack name")
@click.option("--region", "-r", help="AWS region")
@click.option("--profile", help="AWS profile to use")
@click.option("--config", "config_file", type=click.Path(dir_okay=False), help="YAML config file")
@click.option("--interval", type=click.FloatRange(min=0), help="Seconds between status checks")
@click.option("--timeout", type=click.FloatRange(min=0), help="Seconds to wait for deletion")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cleanup(
    ctx: click.Context,
    stack_name: Optional[str],
    region: Optional[str],
    profile: Optional[str],
    config_file: Optional[str],
    interval: Optional[float],
    timeout: Optional[float],
    verbose: bool,
) -> None:
    """Delete an EKS cluster stack and everything in it."""
    setup_logging(verbose)

    try:
        config = get_cluster_config(
            config_file,
            region=region,
            stack_name=stack_name,
            profile=profile,
            poll_interval=interval,
            poll_timeout=timeout,
        )
    except ConfigurationError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)

    confirmer = (ctx.obj or {}).get("confirmer") or TokenConfirmer()
    message = (
        f"⚠️  This will permanently delete stack {config.get_stack_name()} "
        f"in {config.region} and all cluster resources."
    )
    if not confirmer.confirm(message):
        click.echo("Cleanup cancelled")
        sys.exit(0)

    try:
        exit_code = run_cleanup(config)
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    cleanup()
