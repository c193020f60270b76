"""
CloudFormation stack failure diagnostics.
"""

from typing import List

from .errors import StackOperationFailed, StackTimeoutError
from .models import FailureDetail


def recommendations_for(detail: FailureDetail) -> List[str]:
    """Get recommendations based on a failed resource's reason."""
    recommendations = []
    reason = detail.reason
    lowered = reason.lower()

    # IAM permission issues
    if "AccessDenied" in reason or "is not authorized" in reason:
        recommendations.append("Check IAM permissions for CloudFormation and EKS")

    # Capacity and quota issues
    if "LimitExceeded" in reason or "limit exceeded" in lowered:
        recommendations.append("A service quota was reached. Request a limit increase.")
    if "InsufficientInstanceCapacity" in reason or "capacity" in lowered:
        recommendations.append(
            "Instance capacity unavailable. Try another node instance type or region."
        )

    # Node group issues
    if detail.resource_type == "AWS::EKS::Nodegroup" and "health" in lowered:
        recommendations.append(
            "Nodes failed to join the cluster. Check subnets, routes and the node role."
        )

    # VPC issues
    if detail.resource_type.startswith("AWS::EC2::") and "DependencyViolation" in reason:
        recommendations.append(
            "VPC resources have dependencies. Check security groups, ENIs and load balancers."
        )

    if "already exists" in lowered:
        recommendations.append("A resource with this name already exists. Choose a different name.")

    if "timeout" in lowered or "timed out" in lowered:
        recommendations.append("Operation timed out. Check resource logs for details.")

    return recommendations


def _status_emoji(status: str) -> str:
    if "FAILED" in status:
        return "❌"
    elif "ROLLBACK" in status:
        return "↩️"
    return "•"


def format_failure_report(error: StackOperationFailed) -> str:
    """Format a failed stack operation for the console."""
    report = [f"❌ Stack {error.stack_name} failed: {error.status}"]

    if not error.failures:
        report.append("   No failed resources reported in stack events")
        return "\n".join(report)

    report.append(f"\nFailed resources ({len(error.failures)}):")
    recommendations: List[str] = []
    for detail in error.failures:
        label = f" ({detail.resource_type})" if detail.resource_type else ""
        report.append(
            f"  {_status_emoji(detail.status)} {detail.logical_resource_id}{label}"
        )
        report.append(f"    → {detail.reason}")
        for recommendation in recommendations_for(detail):
            if recommendation not in recommendations:
                recommendations.append(recommendation)

    if recommendations:
        report.append("\n💡 Recommendations:")
        for i, recommendation in enumerate(recommendations, 1):
            report.append(f"  {i}. {recommendation}")

    return "\n".join(report)


def format_timeout_report(error: StackTimeoutError) -> str:
    """Format a timed out polling session for the console."""
    return "\n".join(
        [
            f"⏰ {error}",
            "   The operation may still be running. Check it with:",
            f"   aws cloudformation describe-stacks --stack-name {error.stack_name}",
        ]
    )
