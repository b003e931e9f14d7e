"""HTTP client for the remote query endpoint."""
import json
import logging
from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .constants import LoadTestConstants
from .exceptions import CallFailure, MissingEndpointConfigError


# Configure logging
logger = logging.getLogger(__name__)


class RequestSessionManager:
    """Manages HTTP request sessions with retry logic."""

    @staticmethod
    def create_session_with_retries(max_retries: int = LoadTestConstants.DEFAULT_MAX_RETRIES) -> requests.Session:
        """Create a requests session, mounting a retry strategy when max_retries > 0."""
        session = requests.Session()
        if max_retries > 0:
            retry = Retry(
                total=max_retries,
                backoff_factor=1,
                status_forcelist=LoadTestConstants.RETRY_STATUS_CODES,
                allowed_methods=None,
            )
            adapter = HTTPAdapter(max_retries=retry)
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        return session


def measure_payload_bytes(payload: Any) -> int:
    """Byte length of a payload; structured values are measured as compact JSON."""
    if payload is None:
        return 0
    if isinstance(payload, (bytes, bytearray)):
        return len(payload)
    if isinstance(payload, str):
        return len(payload.encode("utf-8"))
    return len(json.dumps(payload, separators=(",", ":"), ensure_ascii=False, default=str).encode("utf-8"))


class QueryClient:
    """One connection handle to a Convex deployment's HTTP query API.

    Each instance owns its own `requests.Session`, so reusing an instance
    reuses pooled connections while constructing a new one starts cold.
    """

    def __init__(
        self,
        endpoint_url: str,
        function_path: str = LoadTestConstants.DEFAULT_QUERY_FUNCTION,
        size_argument: str = LoadTestConstants.DEFAULT_SIZE_ARGUMENT,
        timeout: Optional[float] = LoadTestConstants.DEFAULT_CALL_TIMEOUT,
        max_retries: int = LoadTestConstants.DEFAULT_MAX_RETRIES,
        session: Optional[requests.Session] = None,
    ):
        if not endpoint_url:
            raise MissingEndpointConfigError(
                "Query endpoint URL is not configured (set LOAD_TEST_CONVEX_URL or NEXT_PUBLIC_CONVEX_URL)"
            )
        self.endpoint_url = endpoint_url.rstrip("/")
        self.function_path = function_path
        self.size_argument = size_argument
        self.timeout = timeout if timeout else None
        self._session = session or RequestSessionManager.create_session_with_retries(max_retries)

    @property
    def query_url(self) -> str:
        return f"{self.endpoint_url}{LoadTestConstants.QUERY_API_PATH}"

    def query(self, size: int) -> Any:
        """
        Run the configured query function with the given result size.

        Args:
            size: Value passed as the size argument.

        Returns:
            The decoded query result value.

        Raises:
            CallFailure: On transport errors, HTTP errors or an error status in the body.
        """
        body = {
            "path": self.function_path,
            "args": {self.size_argument: size},
            "format": "json",
        }
        try:
            response = self._session.post(self.query_url, json=body, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            logger.debug(f"Query request failed: {e}")
            raise CallFailure(f"Request to {self.query_url} failed: {e}") from e
        except ValueError as e:
            raise CallFailure(f"Invalid JSON response from {self.query_url}") from e

        if not isinstance(data, dict):
            raise CallFailure("Invalid response format: expected a JSON object")
        if data.get("status") == "success":
            return data.get("value")
        if data.get("status") == "error":
            raise CallFailure(data.get("errorMessage") or "Query returned an error")
        raise CallFailure(f"Invalid response format: unexpected status {data.get('status')!r}")

    def close(self) -> None:
        self._session.close()
