"""Exceptions raised by the remote image API client"""

from typing import Any, Optional


class ImageAPIError(Exception):
    """Base class for failures talking to the image API"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SubmissionError(ImageAPIError):
    """Task submission was rejected or could not be sent"""

    def __init__(self, message: str, code: Optional[Any] = None):
        super().__init__(message)
        self.code = code


class QueryError(ImageAPIError):
    """A task status query failed"""
