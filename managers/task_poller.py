"""Polling loop that drives a remote task to a terminal state"""

import logging
import threading
import time
from typing import Callable, Optional

from image_api_client import ImageAPIClient
from models.errors import QueryError
from models.task import PollResult, PollState, ProgressUpdate

logger = logging.getLogger("MCP_Server")

DEFAULT_INTERVAL = 3.0
DEFAULT_MAX_ATTEMPTS = 50

STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"

TASK_FAILED_MESSAGE = "Task processing failed"
TIMEOUT_MESSAGE = "Processing timeout, please try again later"
CANCELLED_MESSAGE = "Generation cancelled"

ProgressObserver = Callable[[ProgressUpdate], None]


class TaskPoller:
    """Polls one task at a fixed interval until it completes, fails or times out.

    Each run ends in exactly one terminal PollState. The observer sees every
    non-terminal snapshot and is never called after the run has ended.
    """

    def __init__(
        self,
        client: ImageAPIClient,
        interval: float = DEFAULT_INTERVAL,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.client = client
        self.interval = interval
        self.max_attempts = max_attempts

    def run(
        self,
        task_id: str,
        observer: Optional[ProgressObserver] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> PollResult:
        attempts = 0
        while True:
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Polling for task %s cancelled after %s attempts", task_id, attempts)
                return PollResult(PollState.CANCELLED, error=CANCELLED_MESSAGE, attempts=attempts)

            try:
                snapshot = self.client.poll(task_id)
            except QueryError as e:
                logger.warning("Status query for task %s failed: %s", task_id, e.message)
                return PollResult(PollState.QUERY_ERROR, error=e.message, attempts=attempts)

            if snapshot.status == STATUS_COMPLETED:
                return PollResult(PollState.SUCCEEDED, result=snapshot.result, attempts=attempts)
            if snapshot.status == STATUS_FAILED:
                return PollResult(
                    PollState.FAILED,
                    error=snapshot.error or TASK_FAILED_MESSAGE,
                    attempts=attempts,
                )

            self._notify(observer, ProgressUpdate(status=snapshot.status, progress=snapshot.progress))

            attempts += 1
            if attempts >= self.max_attempts:
                logger.warning("Task %s still %s after %s attempts", task_id, snapshot.status, attempts)
                return PollResult(PollState.TIMED_OUT, error=TIMEOUT_MESSAGE, attempts=attempts)

            if cancel_event is not None:
                cancel_event.wait(self.interval)
            else:
                time.sleep(self.interval)

    def _notify(self, observer: Optional[ProgressObserver], update: ProgressUpdate):
        if observer is None:
            return
        try:
            observer(update)
        except Exception:
            logger.exception("Progress observer raised; continuing to poll")
