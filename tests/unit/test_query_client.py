"""Unit tests for the HTTP query client."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from src.load_test import CallFailure, MissingEndpointConfigError, QueryClient, RequestSessionManager
from ..test_const import (
    CONNECTION_REFUSED,
    MOCK_ERROR_BODY,
    MOCK_QUERY_PAYLOAD,
    MOCK_SUCCESS_BODY,
    TEST_ENDPOINT_URL,
    TEST_QUERY_FUNCTION,
    TEST_SIZE_ARGUMENT,
)


def make_response(body=None, raise_error=None, json_error=None):
    response = MagicMock()
    if raise_error is not None:
        response.raise_for_status.side_effect = raise_error
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def mock_session():
    return MagicMock(spec=requests.Session)


class TestQueryClient:
    """Test calls against the query API."""

    def test_posts_query_body(self, mock_session):
        """Test the request targets the query path with the size argument."""
        mock_session.post.return_value = make_response(MOCK_SUCCESS_BODY)
        client = QueryClient(TEST_ENDPOINT_URL + "/", TEST_QUERY_FUNCTION, TEST_SIZE_ARGUMENT,
                             timeout=12, session=mock_session)

        result = client.query(25)

        assert result == MOCK_QUERY_PAYLOAD
        mock_session.post.assert_called_once_with(
            f"{TEST_ENDPOINT_URL}/api/query",
            json={"path": TEST_QUERY_FUNCTION, "args": {TEST_SIZE_ARGUMENT: 25}, "format": "json"},
            timeout=12,
        )

    def test_zero_timeout_disables_timeout(self, mock_session):
        """Test a timeout of 0 is sent as no timeout."""
        mock_session.post.return_value = make_response(MOCK_SUCCESS_BODY)
        QueryClient(TEST_ENDPOINT_URL, timeout=0, session=mock_session).query(1)
        assert mock_session.post.call_args.kwargs["timeout"] is None

    def test_error_status(self, mock_session):
        """Test an error body raises CallFailure with the server message."""
        mock_session.post.return_value = make_response(MOCK_ERROR_BODY)
        client = QueryClient(TEST_ENDPOINT_URL, session=mock_session)

        with pytest.raises(CallFailure, match="too many reads"):
            client.query(1)

    def test_http_error(self, mock_session):
        """Test an HTTP error status raises CallFailure."""
        mock_session.post.return_value = make_response(raise_error=requests.HTTPError("503 Server Error"))
        with pytest.raises(CallFailure, match="503"):
            QueryClient(TEST_ENDPOINT_URL, session=mock_session).query(1)

    def test_transport_error(self, mock_session):
        """Test a connection error raises CallFailure."""
        mock_session.post.side_effect = requests.ConnectionError(CONNECTION_REFUSED)
        with pytest.raises(CallFailure, match=CONNECTION_REFUSED):
            QueryClient(TEST_ENDPOINT_URL, session=mock_session).query(1)

    def test_timeout_error(self, mock_session):
        """Test a stalled call surfaces as CallFailure."""
        mock_session.post.side_effect = requests.Timeout("read timed out")
        with pytest.raises(CallFailure, match="timed out"):
            QueryClient(TEST_ENDPOINT_URL, session=mock_session).query(1)

    def test_invalid_json(self, mock_session):
        """Test a non-JSON body raises CallFailure."""
        mock_session.post.return_value = make_response(json_error=ValueError("no json"))
        with pytest.raises(CallFailure, match="Invalid JSON"):
            QueryClient(TEST_ENDPOINT_URL, session=mock_session).query(1)

    def test_unexpected_body(self, mock_session):
        """Test a body without a known status raises CallFailure."""
        mock_session.post.return_value = make_response(["not", "an", "object"])
        with pytest.raises(CallFailure, match="Invalid response format"):
            QueryClient(TEST_ENDPOINT_URL, session=mock_session).query(1)

    def test_missing_url(self):
        """Test an empty endpoint URL is a configuration error."""
        with pytest.raises(MissingEndpointConfigError):
            QueryClient("")

    def test_close_closes_session(self, mock_session):
        """Test close releases the underlying session."""
        QueryClient(TEST_ENDPOINT_URL, session=mock_session).close()
        mock_session.close.assert_called_once()

    def test_owns_its_session(self):
        """Test each client creates its own session when none is given."""
        with patch.object(RequestSessionManager, "create_session_with_retries") as create:
            create.side_effect = lambda retries: MagicMock()
            first = QueryClient(TEST_ENDPOINT_URL, max_retries=2)
            second = QueryClient(TEST_ENDPOINT_URL, max_retries=2)
        assert create.call_count == 2
        create.assert_called_with(2)
        assert first._session is not second._session


class TestRequestSessionManager:
    """Test session creation."""

    def test_no_retries_by_default(self):
        """Test no retry adapter is mounted when retries are disabled."""
        session = RequestSessionManager.create_session_with_retries(0)
        assert session.get_adapter("https://example.com").max_retries.total == 0

    def test_retries_mounted(self):
        """Test a retry strategy is mounted on both schemes."""
        session = RequestSessionManager.create_session_with_retries(3)
        for url in ("http://example.com", "https://example.com"):
            retry = session.get_adapter(url).max_retries
            assert retry.total == 3
            assert 503 in retry.status_forcelist
