"""Data models for the 4o-image MCP Server"""

from models.config import ServerConfig
from models.errors import ImageAPIError, QueryError, SubmissionError
from models.task import (
    GenerationOutcome,
    PollResult,
    PollState,
    ProgressUpdate,
    TaskSnapshot,
)

__all__ = [
    "GenerationOutcome",
    "ImageAPIError",
    "PollResult",
    "PollState",
    "ProgressUpdate",
    "QueryError",
    "ServerConfig",
    "SubmissionError",
    "TaskSnapshot",
]
