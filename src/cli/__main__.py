#!/usr/bin/env python3
"""Main CLI entry point for EKS stack utilities."""

import click

from .cleanup import cleanup
from .deploy import deploy


@click.group()
@click.version_option(package_name="eks-stack-utils")
def cli() -> None:
    """EKS cluster lifecycle management.

    Deploy creates or updates the CloudFormation stack behind a cluster and
    configures kubectl access; cleanup tears the stack down.
    """
    pass


cli.add_command(deploy)
cli.add_command(cleanup)


if __name__ == "__main__":
    cli()
