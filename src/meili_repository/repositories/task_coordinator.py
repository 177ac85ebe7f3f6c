"""Turns asynchronously applied index mutations into synchronous ones.

The service answers every mutation with a task handle and applies it in the
background. TaskCoordinator polls the task until it is terminal:

    Submitted -> Polling -> {Succeeded, Failed, TimedOut}

A failed task raises IndexMutationError with the service's error triple;
running out of time (or being cancelled) raises CoordinationTimeoutError.
Nothing is resubmitted automatically.
"""

import logging
import threading
import time
from typing import Callable, Optional

from tenacity import RetryError, Retrying, retry_if_result, stop_after_delay, stop_when_event_set, wait_fixed

from ..config.settings import MeiliSettings
from ..errors import CoordinationTimeoutError, IndexMutationError
from .meili_client import MeiliClient
from .models import TaskHandle, TaskInfo, TaskStatus

logger = logging.getLogger(__name__)

DEFAULT_MAX_WAIT_MS = 180000
DEFAULT_POLL_INTERVAL_MS = 500


def _still_running(task: TaskInfo) -> bool:
    return not task.is_terminal


class TaskCoordinator:
    """Submits mutations and waits for their tasks.

    Attributes:
        client: Client used to read task status
        max_wait_ms: Default upper bound on waiting for one task
        poll_interval_ms: Default delay between two status reads

    Example:
        >>> coordinator = TaskCoordinator(client)
        >>> handle = coordinator.submit(lambda: client.delete_all_documents("books"))
        >>> coordinator.await_completion(handle).status
        <TaskStatus.SUCCEEDED: 'succeeded'>
    """

    def __init__(
        self,
        client: MeiliClient,
        max_wait_ms: int = DEFAULT_MAX_WAIT_MS,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
    ) -> None:
        self.client = client
        self.max_wait_ms = max_wait_ms
        self.poll_interval_ms = poll_interval_ms

    @classmethod
    def from_settings(cls, client: MeiliClient, settings: MeiliSettings) -> "TaskCoordinator":
        return cls(
            client,
            max_wait_ms=settings.task_timeout_ms,
            poll_interval_ms=settings.poll_interval_ms,
        )

    def submit(self, mutation: Callable[[], TaskHandle]) -> TaskHandle:
        """Issue a mutation and return its handle without waiting."""
        handle = mutation()
        logger.debug(
            "meili_task_submitted",
            extra={"task_uid": handle.task_uid, "index": handle.index_uid, "type": handle.type},
        )
        return handle

    def await_completion(
        self,
        handle: TaskHandle,
        max_wait_ms: Optional[int] = None,
        poll_interval_ms: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> TaskInfo:
        """Block until the task behind ``handle`` is terminal.

        Args:
            handle: Handle returned by submit()
            max_wait_ms: Upper bound on the wait (default: coordinator setting)
            poll_interval_ms: Delay between status reads (default: coordinator setting)
            cancel_event: When set, the wait stops at the next poll

        Returns:
            The succeeded task

        Raises:
            IndexMutationError: If the task failed or was canceled on the service
            CoordinationTimeoutError: If the task is still running after
                max_wait_ms, or the wait was cancelled
            IndexServiceError: If the task status cannot be read
        """
        max_wait_ms = self.max_wait_ms if max_wait_ms is None else max_wait_ms
        poll_interval_ms = self.poll_interval_ms if poll_interval_ms is None else poll_interval_ms
        event = cancel_event or threading.Event()

        retrying = Retrying(
            retry=retry_if_result(_still_running),
            stop=stop_after_delay(max_wait_ms / 1000) | stop_when_event_set(event),
            wait=wait_fixed(poll_interval_ms / 1000),
            sleep=event.wait,
        )

        started = time.monotonic()
        try:
            task = retrying(self.client.get_task, handle.task_uid)
        except RetryError:
            waited_ms = int((time.monotonic() - started) * 1000)
            logger.warning(
                "meili_task_wait_aborted",
                extra={
                    "task_uid": handle.task_uid,
                    "waited_ms": waited_ms,
                    "cancelled": event.is_set(),
                },
            )
            raise CoordinationTimeoutError(handle.task_uid, waited_ms, cancelled=event.is_set()) from None

        if not task.succeeded:
            raise self._mutation_error(task)

        logger.debug(
            "meili_task_succeeded",
            extra={
                "task_uid": task.uid,
                "type": task.type,
                "waited_ms": int((time.monotonic() - started) * 1000),
            },
        )
        return task

    @staticmethod
    def _mutation_error(task: TaskInfo) -> IndexMutationError:
        error = task.error
        code = error.code if error else None
        if code is None and task.status == TaskStatus.CANCELED:
            code = "task_canceled"
        logger.error(
            "meili_task_failed",
            extra={
                "task_uid": task.uid,
                "status": task.status.value,
                "code": code,
                "type": error.type if error else None,
            },
        )
        return IndexMutationError(
            task.uid,
            code,
            error.type if error else None,
            error.link if error else None,
            error.message if error else None,
        )

    def run(
        self,
        mutation: Callable[[], TaskHandle],
        synchronous: bool,
        cancel_event: Optional[threading.Event] = None,
    ) -> TaskHandle:
        """Submit a mutation and, in synchronous mode, wait for it to succeed."""
        handle = self.submit(mutation)
        if synchronous:
            self.await_completion(handle, cancel_event=cancel_event)
        return handle
