"""
CloudFormation stack operation submission.
"""

import logging
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError

from .errors import StackLookupError, StackNotFoundError, StackRejectedError
from .models import OperationKind, StackOperation, SubmitAck
from .provider import CloudFormationProvider, error_code, error_message, is_no_updates

logger = logging.getLogger(__name__)


def _rejected(stack_name: str, error: Exception) -> StackRejectedError:
    return StackRejectedError(stack_name, error_message(error), error_code(error))


class StackSubmitter:
    """Submit create, update and delete operations for a stack."""

    def __init__(self, provider: CloudFormationProvider):
        self.provider = provider

    def submit(
        self, operation: StackOperation, require_existing: bool = False
    ) -> SubmitAck:
        """
        Submit a stack operation.

        The current stack is looked up first, so a create against an existing
        stack is sent as an update (and an update against a missing stack as
        a create). Deleting a missing stack succeeds without any call.

        Args:
            operation: The requested operation
            require_existing: Raise instead of acknowledging a delete of a
                stack that does not exist

        Returns:
            Acknowledgement naming the operation kind actually issued

        Raises:
            StackNotFoundError: Delete target is absent and require_existing is set
            StackRejectedError: The provider refused the request, the template
                cannot be read, or the operation targets another region
            StackLookupError: The existence check itself failed
        """
        stack_name = operation.stack_name

        if operation.region != self.provider.region:
            raise StackRejectedError(
                stack_name,
                f"Operation targets {operation.region} but the provider is "
                f"connected to {self.provider.region}",
                "RegionMismatch",
            )

        if operation.template is not None:
            try:
                operation.template.ensure_readable()
            except ValueError as e:
                raise StackRejectedError(stack_name, str(e), "UnsupportedTemplateURL")
            except OSError as e:
                raise StackRejectedError(
                    stack_name, f"Cannot read template: {e}", "TemplateNotReadable"
                )

        try:
            existing = self.provider.describe_stack(stack_name)
        except (ClientError, BotoCoreError) as e:
            raise StackLookupError(stack_name, error_message(e), error_code(e))

        if operation.kind is OperationKind.DELETE:
            if existing is None:
                if require_existing:
                    raise StackNotFoundError(stack_name)
                logger.info(f"Stack {stack_name} does not exist, nothing to delete")
                return SubmitAck(OperationKind.DELETE, stack_name, already_absent=True)
            return self._delete(stack_name, existing.get("StackId"))

        if existing is None:
            return self._create(operation.with_kind(OperationKind.CREATE))

        if operation.kind is OperationKind.CREATE:
            logger.info(f"Stack {stack_name} already exists, switching to update")
        return self._update(
            operation.with_kind(OperationKind.UPDATE), existing.get("StackId")
        )

    def _create(self, operation: StackOperation) -> SubmitAck:
        print(f"🚀 Creating stack {operation.stack_name}...")
        try:
            stack_id = self.provider.create_stack(operation)
        except (ClientError, BotoCoreError) as e:
            raise _rejected(operation.stack_name, e)
        return SubmitAck(OperationKind.CREATE, operation.stack_name, stack_id=stack_id)

    def _update(
        self, operation: StackOperation, stack_id: Optional[str]
    ) -> SubmitAck:
        print(f"🔄 Updating stack {operation.stack_name}...")
        try:
            stack_id = self.provider.update_stack(operation) or stack_id
        except (ClientError, BotoCoreError) as e:
            if is_no_updates(e):
                print("ℹ️  No stack updates needed")
                return SubmitAck(
                    OperationKind.UPDATE,
                    operation.stack_name,
                    stack_id=stack_id,
                    no_changes=True,
                )
            raise _rejected(operation.stack_name, e)
        return SubmitAck(OperationKind.UPDATE, operation.stack_name, stack_id=stack_id)

    def _delete(self, stack_name: str, stack_id: Optional[str]) -> SubmitAck:
        print(f"🗑️  Deleting stack {stack_name}...")
        try:
            self.provider.delete_stack(stack_name)
        except (ClientError, BotoCoreError) as e:
            raise _rejected(stack_name, e)
        return SubmitAck(OperationKind.DELETE, stack_name, stack_id=stack_id)
