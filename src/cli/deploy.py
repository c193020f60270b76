#!/usr/bin/env python3
"""
Cluster deployment command.
"""

import sys
from typing import Optional, Tuple

import click

from cloudformation import (
    CloudFormationProvider,
    OperationKind,
    StackError,
    StackOperation,
    StackSubmitter,
    TemplateRef,
)
from cluster import (
    ClusterAccessConfigurator,
    ClusterAccessError,
    PostActionVerifier,
    VerificationOutcome,
)
from config import ClusterConfig, ConfigurationError, get_cluster_config

from .common import make_poller, parse_key_values, report_stack_error, setup_logging


def _print_next_steps(config: ClusterConfig) -> None:
    click.echo("\n📋 Next steps:")
    click.echo("  kubectl get nodes")
    click.echo("  kubectl get pods --all-namespaces")
    click.echo(
        f"  eks-cleanup --stack-name {config.get_stack_name()} --region {config.region}"
        "  (to tear the cluster down)"
    )


def run_deploy(config: ClusterConfig) -> int:
    """
    Create or update the cluster stack and wait for it.

    Returns:
        Process exit code
    """
    stack_name = config.get_stack_name()
    provider = CloudFormationProvider(region=config.region, profile=config.profile)

    operation = StackOperation(
        kind=OperationKind.CREATE,
        stack_name=stack_name,
        region=config.region,
        template=TemplateRef(config.template),
        parameters=config.to_parameters(),
        tags=config.to_tags(),
    )

    click.echo(f"☸️  Deploying cluster {config.cluster_name} ({stack_name}, {config.region})")

    try:
        ack = StackSubmitter(provider).submit(operation)
        if ack.needs_polling:
            result = make_poller(provider, config).poll(stack_name, ack.kind)
            click.echo(
                click.style(
                    f"✅ Stack {stack_name} {result.raw_status} "
                    f"after {result.elapsed_seconds:.0f}s",
                    fg="green",
                )
            )
    except StackError as e:
        report_stack_error(e)
        return 1

    outputs = provider.get_stack_outputs(stack_name)
    if outputs:
        click.echo("\nOutputs:")
        for key, value in outputs.items():
            click.echo(f"  {key}: {value}")

    try:
        ClusterAccessConfigurator(
            profile=config.profile, kubeconfig=config.kubeconfig
        ).write_local_access_config(config.cluster_name, config.region)
    except ClusterAccessError as e:
        click.echo(f"⚠️  WARNING: {e}")
        click.echo("   Skipping cluster verification")
        _print_next_steps(config)
        return 0

    outcome = PostActionVerifier(kubeconfig=config.kubeconfig).verify(
        config.cluster_name, config.region
    )
    if outcome is VerificationOutcome.INCONCLUSIVE:
        click.echo("⚠️  Cluster verification inconclusive; nodes may still be joining")

    _print_next_steps(config)
    return 0


@click.command()
@click.option("--cluster-name", "-c", help="EKS cluster name")
@click.option("--region", "-r", help="AWS region")
@click.option("--stack-name", "-s", help="CloudFormation stack name")
@click.option("--node-instance-type", help="EC2 instance type for worker nodes")
@click.option("--desired-nodes", type=click.IntRange(min=1), help="Number of worker nodes")
@click.option("--template", "-t", help="CloudFormation template path or URL")
@click.option("--parameter", "-P", multiple=True, help="Extra parameters (key=value)")
@click.option("--profile", help="AWS profile to use")
@click.option("--config", "config_file", type=click.Path(dir_okay=False), help="YAML config file")
@click.option("--interval", type=click.FloatRange(min=0), help="Seconds between status checks")
@click.option("--timeout", type=click.FloatRange(min=0), help="Seconds to wait for the stack")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def deploy(
    cluster_name: Optional[str],
    region: Optional[str],
    stack_name: Optional[str],
    node_instance_type: Optional[str],
    desired_nodes: Optional[int],
    template: Optional[str],
    parameter: Tuple[str, ...],
    profile: Optional[str],
    config_file: Optional[str],
    interval: Optional[float],
    timeout: Optional[float],
    verbose: bool,
) -> None:
    """Create or update an EKS cluster stack."""
    setup_logging(verbose)

    try:
        config = get_cluster_config(
            config_file,
            cluster_name=cluster_name,
            region=region,
            stack_name=stack_name,
            node_instance_type=node_instance_type,
            desired_nodes=desired_nodes,
            template=template,
            profile=profile,
            poll_interval=interval,
            poll_timeout=timeout,
        )
    except ConfigurationError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)

    if parameter:
        config.extra_parameters.update(parse_key_values(parameter))

    try:
        exit_code = run_deploy(config)
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    deploy()
