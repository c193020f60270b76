"""
Tests for CloudFormation stack operation submission.
"""

from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError, NoCredentialsError

from cloudformation.errors import (
    StackLookupError,
    StackNotFoundError,
    StackRejectedError,
)
from cloudformation.models import OperationKind, StackOperation, TemplateRef
from cloudformation.stack_manager import StackSubmitter

STACK_ID = "arn:aws:cloudformation:us-west-2:123456789012:stack/test-stack/abc"


class TestStackSubmitter:
    """Test idempotent stack submission."""

    @pytest.fixture
    def template(self, tmp_path):
        """Write a minimal template file."""
        path = tmp_path / "cluster.yaml"
        path.write_text("Resources: {}\n")
        return TemplateRef(str(path))

    def create_submitter(self, existing=None):
        """Create a submitter with a mocked provider."""
        provider = Mock()
        provider.region = "us-west-2"
        provider.describe_stack.return_value = existing
        provider.create_stack.return_value = STACK_ID
        provider.update_stack.return_value = STACK_ID
        return StackSubmitter(provider), provider

    def make_operation(self, kind, template=None, region="us-west-2"):
        return StackOperation(
            kind=kind,
            stack_name="test-stack",
            region=region,
            template=template,
            parameters={"ClusterName": "test"},
        )

    def test_create_when_absent(self, template) -> None:
        """Test a create against a missing stack issues a create call."""
        submitter, provider = self.create_submitter(existing=None)

        ack = submitter.submit(self.make_operation(OperationKind.CREATE, template))

        assert ack.kind is OperationKind.CREATE
        assert ack.stack_id == STACK_ID
        assert ack.needs_polling is True
        provider.describe_stack.assert_called_once_with("test-stack")
        provider.create_stack.assert_called_once()
        provider.update_stack.assert_not_called()

    def test_create_when_exists_updates(self, template) -> None:
        """Test a create against an existing stack issues an update, never a create."""
        submitter, provider = self.create_submitter(
            existing={"StackStatus": "CREATE_COMPLETE", "StackId": STACK_ID}
        )

        ack = submitter.submit(self.make_operation(OperationKind.CREATE, template))

        assert ack.kind is OperationKind.UPDATE
        provider.create_stack.assert_not_called()
        provider.update_stack.assert_called_once()
        sent = provider.update_stack.call_args[0][0]
        assert sent.kind is OperationKind.UPDATE
        assert sent.parameters == {"ClusterName": "test"}

    def test_update_when_absent_creates(self, template) -> None:
        """Test an update against a missing stack creates it."""
        submitter, provider = self.create_submitter(existing=None)

        ack = submitter.submit(self.make_operation(OperationKind.UPDATE, template))

        assert ack.kind is OperationKind.CREATE
        provider.create_stack.assert_called_once()

    def test_update_with_no_changes(self, template) -> None:
        """Test 'No updates are to be performed' is acknowledged, not an error."""
        submitter, provider = self.create_submitter(
            existing={"StackStatus": "UPDATE_COMPLETE", "StackId": STACK_ID}
        )
        provider.update_stack.side_effect = ClientError(
            {
                "Error": {
                    "Code": "ValidationError",
                    "Message": "No updates are to be performed.",
                }
            },
            "UpdateStack",
        )

        ack = submitter.submit(self.make_operation(OperationKind.UPDATE, template))

        assert ack.no_changes is True
        assert ack.needs_polling is False
        assert ack.stack_id == STACK_ID

    def test_rejected_create(self, template) -> None:
        """Test a provider rejection is raised as StackRejectedError."""
        submitter, provider = self.create_submitter(existing=None)
        provider.create_stack.side_effect = ClientError(
            {
                "Error": {
                    "Code": "InsufficientCapabilitiesException",
                    "Message": "Requires capabilities : [CAPABILITY_NAMED_IAM]",
                }
            },
            "CreateStack",
        )

        with pytest.raises(StackRejectedError) as exc_info:
            submitter.submit(self.make_operation(OperationKind.CREATE, template))

        assert exc_info.value.code == "InsufficientCapabilitiesException"
        assert "CAPABILITY_NAMED_IAM" in str(exc_info.value)

    def test_rejected_update_in_progress(self, template) -> None:
        """Test an update refused because another operation is running."""
        submitter, provider = self.create_submitter(
            existing={"StackStatus": "UPDATE_IN_PROGRESS"}
        )
        provider.update_stack.side_effect = ClientError(
            {
                "Error": {
                    "Code": "ValidationError",
                    "Message": "Stack is in UPDATE_IN_PROGRESS state and can not be updated.",
                }
            },
            "UpdateStack",
        )

        with pytest.raises(StackRejectedError):
            submitter.submit(self.make_operation(OperationKind.CREATE, template))

    def test_unreadable_template(self, tmp_path) -> None:
        """Test a missing template file is rejected before any provider call."""
        submitter, provider = self.create_submitter()
        template = TemplateRef(str(tmp_path / "missing.yaml"))

        with pytest.raises(StackRejectedError) as exc_info:
            submitter.submit(self.make_operation(OperationKind.CREATE, template))

        assert exc_info.value.code == "TemplateNotReadable"
        provider.describe_stack.assert_not_called()

    def test_template_url_is_not_read_locally(self) -> None:
        """Test URL templates skip the local readability check."""
        submitter, provider = self.create_submitter(existing=None)
        template = TemplateRef("https://bucket.s3.amazonaws.com/cluster.yaml")

        ack = submitter.submit(self.make_operation(OperationKind.CREATE, template))

        assert ack.kind is OperationKind.CREATE

    @pytest.mark.parametrize(
        "location",
        ["http://bucket.s3.amazonaws.com/cluster.yaml", "s3://bucket/cluster.yaml"],
    )
    def test_non_https_template_url(self, location) -> None:
        """Test template URLs other than https are rejected before any provider call."""
        submitter, provider = self.create_submitter()

        with pytest.raises(StackRejectedError) as exc_info:
            submitter.submit(
                self.make_operation(OperationKind.CREATE, TemplateRef(location))
            )

        assert exc_info.value.code == "UnsupportedTemplateURL"
        provider.describe_stack.assert_not_called()

    @pytest.mark.parametrize("kind", list(OperationKind))
    def test_region_mismatch(self, kind, template) -> None:
        """Test an operation for another region never reaches the provider."""
        submitter, provider = self.create_submitter(
            existing={"StackStatus": "CREATE_COMPLETE", "StackId": STACK_ID}
        )
        operation = self.make_operation(
            kind,
            None if kind is OperationKind.DELETE else template,
            region="eu-central-1",
        )

        with pytest.raises(StackRejectedError) as exc_info:
            submitter.submit(operation)

        assert exc_info.value.code == "RegionMismatch"
        assert "eu-central-1" in str(exc_info.value)
        provider.describe_stack.assert_not_called()
        provider.create_stack.assert_not_called()
        provider.update_stack.assert_not_called()
        provider.delete_stack.assert_not_called()

    def test_existence_check_failure(self, template) -> None:
        """Test credential problems during the existence check are fatal."""
        submitter, provider = self.create_submitter()
        provider.describe_stack.side_effect = NoCredentialsError()

        with pytest.raises(StackLookupError) as exc_info:
            submitter.submit(self.make_operation(OperationKind.CREATE, template))

        assert exc_info.value.code == "NoCredentialsError"
        assert "Failed to look up stack test-stack" in str(exc_info.value)
        provider.create_stack.assert_not_called()

    def test_delete_existing(self) -> None:
        """Test deleting an existing stack issues one delete call."""
        submitter, provider = self.create_submitter(
            existing={"StackStatus": "CREATE_COMPLETE", "StackId": STACK_ID}
        )

        ack = submitter.submit(self.make_operation(OperationKind.DELETE))

        assert ack.kind is OperationKind.DELETE
        assert ack.needs_polling is True
        provider.delete_stack.assert_called_once_with("test-stack")

    def test_delete_absent_is_acknowledged(self) -> None:
        """Test deleting a missing stack succeeds without a delete call."""
        submitter, provider = self.create_submitter(existing=None)

        ack = submitter.submit(self.make_operation(OperationKind.DELETE))

        assert ack.already_absent is True
        assert ack.needs_polling is False
        provider.delete_stack.assert_not_called()

    def test_delete_absent_when_required(self) -> None:
        """Test deleting a missing stack raises when existence is required."""
        submitter, provider = self.create_submitter(existing=None)

        with pytest.raises(StackNotFoundError):
            submitter.submit(
                self.make_operation(OperationKind.DELETE), require_existing=True
            )

        provider.delete_stack.assert_not_called()

    def test_delete_rejected(self) -> None:
        """Test a refused delete is raised as StackRejectedError."""
        submitter, provider = self.create_submitter(
            existing={"StackStatus": "CREATE_COMPLETE"}
        )
        provider.delete_stack.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "Not authorized"}},
            "DeleteStack",
        )

        with pytest.raises(StackRejectedError):
            submitter.submit(self.make_operation(OperationKind.DELETE))


class TestStackOperation:
    """Test StackOperation validation."""

    def test_empty_stack_name(self) -> None:
        """Test an empty stack name is refused."""
        with pytest.raises(ValueError):
            StackOperation(kind=OperationKind.DELETE, stack_name="", region="us-west-2")

    def test_create_requires_template(self) -> None:
        """Test create and update need a template."""
        with pytest.raises(ValueError):
            StackOperation(kind=OperationKind.CREATE, stack_name="s", region="us-west-2")

    def test_operation_is_immutable(self) -> None:
        """Test operations cannot be changed after construction."""
        operation = StackOperation(
            kind=OperationKind.DELETE, stack_name="s", region="us-west-2"
        )
        with pytest.raises(AttributeError):
            operation.stack_name = "other"
