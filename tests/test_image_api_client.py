"""Tests for the remote image API client

Run with pytest from project root:
    pytest tests/test_image_api_client.py -v
"""

import pytest
import requests

from image_api_client import AUTH_HEADER, ImageAPIClient, normalize_prompt
from models.errors import QueryError, SubmissionError

from conftest import API_KEY, BASE_URL, make_response


class TestNormalizePrompt:
    """Tests for prompt normalization"""

    def test_strips_all_line_endings(self):
        assert normalize_prompt("a\r\nb\rc\nd") == "abcd"

    def test_leaves_plain_prompt_alone(self):
        assert normalize_prompt("a red fox in snow") == "a red fox in snow"

    def test_empty_and_none(self):
        assert normalize_prompt("") == ""
        assert normalize_prompt(None) == ""


class TestSubmit:
    """Tests for ImageAPIClient.submit"""

    def test_submit_prompt_only(self, api_client, mock_session):
        mock_session.post.return_value = make_response({"success": True, "task_id": "abc"})

        task_id = api_client.submit(None, "a cat\non a mat")

        assert task_id == "abc"
        args, kwargs = mock_session.post.call_args
        assert args[0] == f"{BASE_URL}/api/image/api/4oimage"
        assert kwargs["headers"] == {AUTH_HEADER: API_KEY}
        assert kwargs["files"] == {"prompt": (None, "a caton a mat")}
        assert kwargs["timeout"] == 5

    def test_submit_with_image(self, api_client, mock_session):
        mock_session.post.return_value = make_response({"success": True, "task_id": "abc"})

        api_client.submit(b"\xff\xd8jpeg-bytes", "make it blue")

        files = mock_session.post.call_args.kwargs["files"]
        assert files["image"] == ("image.jpg", b"\xff\xd8jpeg-bytes", "image/jpeg")
        assert files["prompt"] == (None, "make it blue")

    def test_submit_image_without_prompt_omits_prompt_part(self, api_client, mock_session):
        mock_session.post.return_value = make_response({"success": True, "task_id": "abc"})

        api_client.submit(b"img", "\r\n")

        files = mock_session.post.call_args.kwargs["files"]
        assert "prompt" not in files
        assert "image" in files

    def test_submit_rejected_passes_code_through(self, api_client, mock_session):
        mock_session.post.return_value = make_response(
            {"success": False, "error": "bad prompt", "code": 42}
        )

        with pytest.raises(SubmissionError) as excinfo:
            api_client.submit(None, "x")

        assert excinfo.value.message == "bad prompt"
        assert excinfo.value.code == 42

    def test_submit_rejected_without_message(self, api_client, mock_session):
        mock_session.post.return_value = make_response({"success": False})

        with pytest.raises(SubmissionError, match="Task submission failed"):
            api_client.submit(None, "x")

    def test_submit_transport_failure(self, api_client, mock_session):
        mock_session.post.side_effect = requests.ConnectionError("connection refused")

        with pytest.raises(SubmissionError, match="connection refused"):
            api_client.submit(None, "x")

    def test_submit_unparsable_body(self, api_client, mock_session):
        mock_session.post.return_value = make_response(json_error=ValueError("Expecting value"))

        with pytest.raises(SubmissionError, match="Invalid response"):
            api_client.submit(None, "x")

    def test_submit_non_object_body(self, api_client, mock_session):
        mock_session.post.return_value = make_response(["not", "an", "object"])

        with pytest.raises(SubmissionError, match="Invalid response"):
            api_client.submit(None, "x")

    def test_submit_success_without_task_id(self, api_client, mock_session):
        mock_session.post.return_value = make_response({"success": True})

        with pytest.raises(SubmissionError, match="task id"):
            api_client.submit(None, "x")


class TestPoll:
    """Tests for ImageAPIClient.poll"""

    def test_poll_returns_snapshot(self, api_client, mock_session):
        mock_session.get.return_value = make_response({
            "success": True,
            "task": {"status": "running", "progress": 0.4},
        })

        snapshot = api_client.poll("abc")

        assert snapshot.status == "running"
        assert snapshot.progress == 0.4
        assert snapshot.result is None
        args, kwargs = mock_session.get.call_args
        assert args[0] == f"{BASE_URL}/api/image/api/task/abc"
        assert kwargs["headers"] == {AUTH_HEADER: API_KEY}

    def test_poll_completed_carries_result(self, api_client, mock_session):
        mock_session.get.return_value = make_response({
            "success": True,
            "task": {"status": "completed", "result": {"image_url": "https://cdn.test/a.png"}},
        })

        snapshot = api_client.poll("abc")

        assert snapshot.status == "completed"
        assert snapshot.progress == 0
        assert snapshot.result == {"image_url": "https://cdn.test/a.png"}

    def test_poll_failure_envelope(self, api_client, mock_session):
        mock_session.get.return_value = make_response({"success": False, "error": "no such task"})

        with pytest.raises(QueryError, match="no such task"):
            api_client.poll("abc")

    def test_poll_failure_envelope_default_message(self, api_client, mock_session):
        mock_session.get.return_value = make_response({"success": False})

        with pytest.raises(QueryError, match="Task query failed"):
            api_client.poll("abc")

    def test_poll_missing_task(self, api_client, mock_session):
        mock_session.get.return_value = make_response({"success": True})

        with pytest.raises(QueryError):
            api_client.poll("abc")

    def test_poll_transport_failure_is_not_retried(self, api_client, mock_session):
        mock_session.get.side_effect = requests.Timeout("read timed out")

        with pytest.raises(QueryError, match="read timed out"):
            api_client.poll("abc")
        assert mock_session.get.call_count == 1

    def test_trailing_slash_in_base_url(self, mock_session):
        client = ImageAPIClient(BASE_URL + "/", API_KEY, session=mock_session)
        mock_session.get.return_value = make_response({"success": True, "task": {"status": "queued"}})

        client.poll("abc")

        assert mock_session.get.call_args.args[0] == f"{BASE_URL}/api/image/api/task/abc"
