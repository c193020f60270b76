"""
Stack convergence polling.

A polling session queries the stack status once per tick until the stack
reaches a terminal state or the timeout elapses. Each tick is evaluated in a
fixed order:

1. stack absent and absence counts as success (deletes)
2. the completion status of the requested operation
3. a failure or rollback status
4. the timeout deadline
5. otherwise still pending: sleep and query again

A terminal status observed in a tick therefore always wins over a timeout
that fires in the same tick.
"""

import logging
import time
from typing import Callable, List, Optional

from botocore.exceptions import BotoCoreError, ClientError

from .errors import StackOperationFailed, StackQueryError, StackTimeoutError
from .models import (
    COMPLETE_STATUS,
    AbsencePolicy,
    FailureDetail,
    OperationKind,
    Outcome,
    PollResult,
    is_failure_status,
)
from .provider import CloudFormationProvider, error_message

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 30
DEFAULT_TIMEOUT = 3600


class ConvergencePoller:
    """Poll a stack until its current operation converges."""

    def __init__(
        self,
        provider: CloudFormationProvider,
        interval: float = DEFAULT_INTERVAL,
        timeout: float = DEFAULT_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        on_tick: Optional[Callable[[PollResult], None]] = None,
    ):
        """
        Initialize the poller.

        Args:
            provider: CloudFormation provider used for status queries
            interval: Seconds to sleep between ticks
            timeout: Seconds after the first query before giving up
            clock: Monotonic time source
            sleep: Sleep function
            on_tick: Called with every pending tick's result
        """
        if interval < 0 or timeout < 0:
            raise ValueError("Poll interval and timeout must not be negative")

        self.provider = provider
        self.interval = interval
        self.timeout = timeout
        self.clock = clock
        self.sleep = sleep
        self.on_tick = on_tick

    def poll(
        self,
        stack_name: str,
        kind: OperationKind,
        on_absence: Optional[AbsencePolicy] = None,
    ) -> PollResult:
        """
        Wait for a stack operation to converge.

        Args:
            stack_name: Stack to watch
            kind: Operation that was submitted
            on_absence: Treatment of a missing stack; defaults to SUCCESS for
                deletes and NOT_APPLICABLE otherwise

        Returns:
            The terminal successful PollResult

        Raises:
            StackOperationFailed: The stack reached a failure status
            StackTimeoutError: No terminal status before the deadline
            StackQueryError: A status query failed
        """
        if on_absence is None:
            on_absence = (
                AbsencePolicy.SUCCESS
                if kind is OperationKind.DELETE
                else AbsencePolicy.NOT_APPLICABLE
            )

        expected = COMPLETE_STATUS[kind]
        start = self.clock()
        last_status: Optional[str] = None
        ticks = 0

        while True:
            ticks += 1
            try:
                status = self.provider.get_stack_status(stack_name)
            except (ClientError, BotoCoreError) as e:
                raise StackQueryError(stack_name, error_message(e))
            elapsed = self.clock() - start

            if status is None:
                if on_absence is AbsencePolicy.SUCCESS:
                    logger.info(f"Stack {stack_name} no longer exists after {ticks} queries")
                    return PollResult(last_status, elapsed, Outcome.NOT_FOUND)
                raise StackQueryError(stack_name, "stack does not exist")

            last_status = status

            if status == expected:
                logger.info(f"Stack {stack_name} reached {status} after {ticks} queries")
                return PollResult(status, elapsed, Outcome.SUCCESS)

            if is_failure_status(status, kind):
                logger.info(f"Stack {stack_name} failed with status {status}")
                failures = self._failed_resources(stack_name)
                raise StackOperationFailed(stack_name, status, failures)

            if elapsed > self.timeout:
                raise StackTimeoutError(stack_name, status, elapsed)

            result = PollResult(status, elapsed, Outcome.PENDING)
            logger.debug(f"Stack {stack_name}: {status} ({elapsed:.0f}s elapsed)")
            if self.on_tick:
                self.on_tick(result)

            self.sleep(self.interval)

    def _failed_resources(self, stack_name: str) -> List[FailureDetail]:
        try:
            return self.provider.describe_failed_events(stack_name)
        except (ClientError, BotoCoreError) as e:
            logger.warning(f"Could not retrieve stack events: {error_message(e)}")
            return []
