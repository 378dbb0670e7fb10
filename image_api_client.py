import logging
from typing import Any, Dict, Optional

import requests

from models.errors import QueryError, SubmissionError
from models.task import TaskSnapshot

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("ImageAPIClient")

SUBMIT_ENDPOINT = "4oimage"
AUTH_HEADER = "X-Subscription-Token"
IMAGE_FILENAME = "image.jpg"
IMAGE_CONTENT_TYPE = "image/jpeg"
DEFAULT_TIMEOUT = 30


def normalize_prompt(prompt: Optional[str]) -> str:
    """Strip CR/LF characters so the prompt travels as a single line"""
    if not prompt:
        return ""
    return prompt.replace("\r\n", "").replace("\r", "").replace("\n", "")


class ImageAPIClient:
    """Thin client for the task submission and task status endpoints.

    Neither call retries; callers decide what to do with a failure.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def _headers(self) -> Dict[str, str]:
        return {AUTH_HEADER: self.api_key}

    def submit(self, image: Optional[bytes], prompt: str = "") -> str:
        """Submit a generation task and return its task id"""
        normalized_prompt = normalize_prompt(prompt)

        # (None, value) tuples become plain multipart form fields
        files: Dict[str, Any] = {}
        if image:
            files["image"] = (IMAGE_FILENAME, image, IMAGE_CONTENT_TYPE)
        if normalized_prompt:
            files["prompt"] = (None, normalized_prompt)

        url = f"{self.base_url}/api/image/api/{SUBMIT_ENDPOINT}"
        logger.info("Submitting image task (image=%s, prompt_chars=%s)", bool(image), len(normalized_prompt))
        try:
            response = self.session.post(url, headers=self._headers, files=files, timeout=self.timeout)
            result = response.json()
        except ValueError as e:  # requests' JSONDecodeError is also a RequestException
            raise SubmissionError(f"Invalid response from image API: {e}") from e
        except requests.RequestException as e:
            raise SubmissionError(f"Image API request failed: {e}") from e

        if not isinstance(result, dict):
            raise SubmissionError("Invalid response from image API")
        if not result.get("success"):
            raise SubmissionError(
                result.get("error") or "Task submission failed",
                code=result.get("code"),
            )

        task_id = result.get("task_id")
        if not task_id:
            raise SubmissionError("Image API did not return a task id")
        logger.info("Queued image task with task_id: %s", task_id)
        return str(task_id)

    def poll(self, task_id: str) -> TaskSnapshot:
        """Query the current status of a task once"""
        url = f"{self.base_url}/api/image/api/task/{task_id}"
        try:
            response = self.session.get(url, headers=self._headers, timeout=self.timeout)
            result: Any = response.json()
        except ValueError as e:  # requests' JSONDecodeError is also a RequestException
            raise QueryError(f"Invalid response from image API: {e}") from e
        except requests.RequestException as e:
            raise QueryError(f"Image API request failed: {e}") from e

        if not isinstance(result, dict):
            raise QueryError("Invalid response from image API")
        if not result.get("success"):
            raise QueryError(result.get("error") or "Task query failed")

        task = result.get("task")
        if not isinstance(task, dict):
            raise QueryError("Task query returned no task")
        snapshot = TaskSnapshot.from_task(task)
        logger.debug("Task %s status=%s progress=%s", task_id, snapshot.status, snapshot.progress)
        return snapshot
