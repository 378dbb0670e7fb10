"""End-to-end image generation: submit, poll, normalize, validate"""

import logging
import threading
import time
from typing import Optional

from image_api_client import ImageAPIClient
from managers.task_poller import ProgressObserver, TaskPoller
from models.errors import SubmissionError
from models.task import GenerationOutcome
from result_normalizer import normalize_result

logger = logging.getLogger("MCP_Server")

INVALID_IMAGE_URL = "Invalid image URL"
INVALID_RESULT_OBJECT = "Invalid result object"


class GenerationOrchestrator:
    """Runs one generation request and always returns a GenerationOutcome"""

    def __init__(self, client: ImageAPIClient, poller: TaskPoller):
        self.client = client
        self.poller = poller

    def generate(
        self,
        image: Optional[bytes],
        prompt: str = "",
        observer: Optional[ProgressObserver] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> GenerationOutcome:
        start_time = time.monotonic()
        try:
            outcome = self._generate(image, prompt, observer, cancel_event)
        except Exception as exc:
            logger.exception("Image generation failed unexpectedly")
            outcome = GenerationOutcome.failure(str(exc) or exc.__class__.__name__)

        elapsed = time.monotonic() - start_time
        if outcome.success:
            logger.info("Image generated in %.1fs: %s", elapsed, outcome.image_url)
        else:
            logger.info("Image generation failed after %.1fs: %s", elapsed, outcome.error)
        return outcome

    def _generate(self, image, prompt, observer, cancel_event) -> GenerationOutcome:
        try:
            task_id = self.client.submit(image, prompt)
        except SubmissionError as e:
            return GenerationOutcome.failure(e.message, e.code)

        poll_result = self.poller.run(task_id, observer=observer, cancel_event=cancel_event)
        logger.info(
            "Task %s finished polling in state %s after %s attempts",
            task_id,
            poll_result.state.value,
            poll_result.attempts,
        )
        if not poll_result.succeeded:
            return GenerationOutcome.failure(poll_result.error)

        result = poll_result.result
        if result is None:
            result = {}
        if not isinstance(result, dict):
            return GenerationOutcome.failure(INVALID_RESULT_OBJECT)

        result = normalize_result(result)
        image_url = result.get("image_url")
        if isinstance(image_url, str) and image_url.startswith("http"):
            return GenerationOutcome.ok(image_url)
        return GenerationOutcome.failure(INVALID_IMAGE_URL)
