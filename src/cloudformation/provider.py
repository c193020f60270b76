"""
CloudFormation API access.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .models import FailureDetail, StackOperation

logger = logging.getLogger(__name__)

CAPABILITIES = ["CAPABILITY_IAM", "CAPABILITY_NAMED_IAM", "CAPABILITY_AUTO_EXPAND"]

NO_UPDATES_MESSAGE = "No updates are to be performed"


def is_stack_missing(error: ClientError) -> bool:
    """Check whether a ClientError says the stack does not exist."""
    message = error.response.get("Error", {}).get("Message", "")
    return "does not exist" in message


def is_no_updates(error: Exception) -> bool:
    """Check whether an update was refused because nothing changed."""
    return isinstance(error, ClientError) and NO_UPDATES_MESSAGE in error_message(error)


def error_code(error: Exception) -> Optional[str]:
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code")
    return type(error).__name__


def error_message(error: Exception) -> str:
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Message", str(error))
    return str(error)


def _parameter_list(parameters: Mapping[str, str]) -> List[Dict[str, str]]:
    return [
        {"ParameterKey": key, "ParameterValue": str(value)}
        for key, value in parameters.items()
    ]


def _tag_list(tags: Mapping[str, str]) -> List[Dict[str, str]]:
    return [{"Key": key, "Value": str(value)} for key, value in tags.items()]


class CloudFormationProvider:
    """Thin wrapper around the boto3 CloudFormation client."""

    def __init__(
        self,
        region: Optional[str] = None,
        profile: Optional[str] = None,
        client: Optional[Any] = None,
    ):
        """
        Initialize the provider.

        Args:
            region: AWS region
            profile: AWS profile to use
            client: Pre-built CloudFormation client (skips session creation)
        """
        self.region = region or "us-west-2"
        self.profile = profile

        if client is None:
            session_args = {"region_name": self.region}
            if profile:
                session_args["profile_name"] = profile

            session = boto3.Session(**session_args)
            client = session.client("cloudformation")

        self.cloudformation = client

    def describe_stack(self, stack_name: str) -> Optional[Dict[str, Any]]:
        """
        Describe a stack.

        Returns:
            The stack description, or None if the stack does not exist

        Raises:
            ClientError: For any failure other than a missing stack
        """
        try:
            response = self.cloudformation.describe_stacks(StackName=stack_name)
        except ClientError as e:
            if is_stack_missing(e):
                return None
            raise

        if response["Stacks"]:
            return dict(response["Stacks"][0])
        return None

    def get_stack_status(self, stack_name: str) -> Optional[str]:
        """Get current stack status, or None if the stack does not exist."""
        stack = self.describe_stack(stack_name)
        if stack is None:
            return None
        return str(stack["StackStatus"])

    def create_stack(self, operation: StackOperation) -> Optional[str]:
        """Create a stack and return its id."""
        response = self.cloudformation.create_stack(
            StackName=operation.stack_name, **self._stack_request(operation)
        )
        return response.get("StackId")

    def update_stack(self, operation: StackOperation) -> Optional[str]:
        """Update a stack and return its id."""
        response = self.cloudformation.update_stack(
            StackName=operation.stack_name, **self._stack_request(operation)
        )
        return response.get("StackId")

    def delete_stack(self, stack_name: str) -> None:
        """Request stack deletion."""
        self.cloudformation.delete_stack(StackName=stack_name)

    def describe_failed_events(self, stack_name: str) -> List[FailureDetail]:
        """
        Get the failed resources of the most recent stack operation.

        Events are returned newest first; collection stops at the event that
        started the operation.
        """
        failures: List[FailureDetail] = []

        paginator = self.cloudformation.get_paginator("describe_stack_events")
        for page in paginator.paginate(StackName=stack_name):
            for event in page["StackEvents"]:
                status = event.get("ResourceStatus", "")

                if status.endswith("_FAILED"):
                    failures.append(
                        FailureDetail(
                            logical_resource_id=event["LogicalResourceId"],
                            reason=event.get(
                                "ResourceStatusReason", "No reason provided"
                            ),
                            resource_type=event.get("ResourceType", ""),
                            status=status,
                        )
                    )

                if (
                    event.get("LogicalResourceId") == stack_name
                    and event.get("ResourceStatusReason") == "User Initiated"
                ):
                    return failures

        return failures

    def get_stack_outputs(self, stack_name: str) -> Dict[str, str]:
        """Get outputs from a CloudFormation stack."""
        try:
            stack = self.describe_stack(stack_name)
        except (ClientError, BotoCoreError) as e:
            logger.warning(f"Failed to get stack outputs: {error_message(e)}")
            return {}
        if not stack:
            return {}
        return {
            output["OutputKey"]: output["OutputValue"]
            for output in stack.get("Outputs", [])
        }

    def _stack_request(self, operation: StackOperation) -> Dict[str, Any]:
        if operation.template is None:
            raise ValueError(f"{operation.kind.value} of {operation.stack_name} needs a template")
        request: Dict[str, Any] = operation.template.to_request()
        request["Parameters"] = _parameter_list(operation.parameters)
        request["Capabilities"] = CAPABILITIES
        if operation.tags:
            request["Tags"] = _tag_list(operation.tags)
        summary = {k: v for k, v in request.items() if k != "TemplateBody"}
        logger.debug(f"Stack request for {operation.stack_name}: {summary}")
        return request
