"""Shared fixtures for the 4o-image MCP Server tests"""

from unittest.mock import MagicMock

import pytest
import requests

from image_api_client import ImageAPIClient
from models.task import TaskSnapshot

BASE_URL = "https://api.test"
API_KEY = "test-subscription-token"


def make_response(payload=None, json_error=None):
    """Build a fake requests.Response whose json() returns payload or raises"""
    response = MagicMock(spec=requests.Response)
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


def running(progress=0.0, status="running"):
    return TaskSnapshot(status=status, progress=progress)


def completed(result):
    return TaskSnapshot(status="completed", progress=1.0, result=result)


@pytest.fixture
def mock_session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def api_client(mock_session):
    return ImageAPIClient(BASE_URL, API_KEY, timeout=5, session=mock_session)


@pytest.fixture
def fake_client():
    """Stand-in for ImageAPIClient with scripted submit/poll behaviour"""
    client = MagicMock(spec=ImageAPIClient)
    client.submit.return_value = "task-123"
    return client
