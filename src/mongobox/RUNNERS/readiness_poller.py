# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Polling driver that repeats readiness checks until a container is ready,
the timeout elapses or the wait is cancelled.
"""
import asyncio
from enum import Enum
from typing import Optional

from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_result,
    stop_after_delay,
    stop_when_event_set,
    wait_fixed,
)

from ..MODELS.errors import ContainerNotReadyError, ReadinessCancelledError
from ..MODELS.wait_strategy import WaitStrategy
from .runtime import ContainerHandle
from .wait_checks import evaluate


class ReadinessState(str, Enum):
    """State of a readiness wait."""

    POLLING = "polling"
    READY = "ready"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"


def _not_ready(ready: bool) -> bool:
    return not ready


class ReadinessPoller:
    """
    Re-evaluates a wait strategy on a fixed interval.

    Sleeps between checks with asyncio, so other tasks keep running while a
    container starts. Errors raised by a check (e.g. the runtime failing to
    return logs) are not retried and propagate as is.
    """

    def __init__(
        self,
        timeout: float = 60.0,
        interval: float = 1.0,
        cancel_event: Optional[asyncio.Event] = None,
    ):
        """
        Initializes the poller.

        :param timeout: Seconds to keep polling before giving up.
        :param interval: Seconds between checks.
        :param cancel_event: Stops polling once set.
        """
        self.timeout = timeout
        self.interval = interval
        self.cancel_event = cancel_event
        self.state = ReadinessState.POLLING
        self.attempts = 0

    def _cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    async def _attempt(self, strategy: WaitStrategy, handle: ContainerHandle) -> bool:
        if self._cancelled():
            return False
        self.attempts += 1
        return await evaluate(strategy, handle)

    async def wait_until_ready(self, strategy: WaitStrategy, handle: ContainerHandle) -> None:
        """
        Polls until the strategy reports ready.

        Args:
            strategy: Readiness condition to evaluate.
            handle: The running container.

        Raises:
            ContainerNotReadyError: The timeout elapsed first.
            ReadinessCancelledError: The cancel event was set first.
        """
        self.state = ReadinessState.POLLING
        self.attempts = 0

        stop = stop_after_delay(self.timeout)
        if self.cancel_event is not None:
            stop = stop | stop_when_event_set(self.cancel_event)

        retrying = AsyncRetrying(
            retry=retry_if_result(_not_ready),
            stop=stop,
            wait=wait_fixed(self.interval),
        )

        try:
            await retrying(self._attempt, strategy, handle)
        except RetryError:
            if self._cancelled():
                self.state = ReadinessState.CANCELLED
                raise ReadinessCancelledError(self.attempts) from None
            self.state = ReadinessState.TIMED_OUT
            raise ContainerNotReadyError(
                self.timeout, self.attempts, getattr(handle, "name", handle.id)
            ) from None

        self.state = ReadinessState.READY
