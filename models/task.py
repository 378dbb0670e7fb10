"""Task lifecycle data models"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


@dataclass
class TaskSnapshot:
    """One status query result for a remote task"""
    status: str
    progress: float = 0.0
    result: Any = None
    error: Optional[str] = None

    @classmethod
    def from_task(cls, task: Dict[str, Any]) -> "TaskSnapshot":
        return cls(
            status=str(task.get("status", "")),
            progress=task.get("progress") or 0,
            result=task.get("result"),
            error=task.get("error"),
        )


@dataclass(frozen=True)
class ProgressUpdate:
    status: str
    progress: float


class PollState(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    QUERY_ERROR = "query_error"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class PollResult:
    """Terminal state of one polling run"""
    state: PollState
    result: Any = None
    error: Optional[str] = None
    attempts: int = 0

    @property
    def succeeded(self) -> bool:
        return self.state is PollState.SUCCEEDED


@dataclass(frozen=True)
class GenerationOutcome:
    """Final result of a generation request, returned to the tool layer"""
    success: bool
    image_url: Optional[str] = None
    error: Optional[str] = None
    error_code: Any = None

    @classmethod
    def ok(cls, image_url: str) -> "GenerationOutcome":
        return cls(success=True, image_url=image_url)

    @classmethod
    def failure(cls, error: str, error_code: Any = None) -> "GenerationOutcome":
        return cls(success=False, error=error, error_code=error_code)

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True, "imageUrl": self.image_url}
        data: Dict[str, Any] = {"success": False, "error": self.error}
        if self.error_code is not None:
            data["code"] = self.error_code
        return data
