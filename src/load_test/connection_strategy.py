"""Connection strategies: one shared client vs. a fresh client per call."""
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from .models import ConnectionMode


# Configure logging
logger = logging.getLogger(__name__)

# Anything with query(size) and close(); QueryClient in production
ClientFactory = Callable[[], Any]


class ConnectionStrategy(ABC):
    """Issues queries through a particular connection-handle policy."""

    mode: ConnectionMode

    def __init__(self, client_factory: ClientFactory):
        self.client_factory = client_factory

    @abstractmethod
    def query(self, size: int) -> Any:
        """Invoke the remote query and return its payload."""
        pass

    def close(self) -> None:
        """Release any handle held for the lifetime of the run."""
        pass


class SharedConnectionStrategy(ConnectionStrategy):
    """Constructs one client up front and reuses it for every call."""

    mode = ConnectionMode.SHARED

    def __init__(self, client_factory: ClientFactory):
        super().__init__(client_factory)
        self._client: Optional[Any] = client_factory()

    def query(self, size: int) -> Any:
        return self._client.query(size)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


class FreshConnectionStrategy(ConnectionStrategy):
    """Constructs a new client immediately before each call and discards it after."""

    mode = ConnectionMode.FRESH

    def query(self, size: int) -> Any:
        client = self.client_factory()
        try:
            return client.query(size)
        finally:
            client.close()


def build_strategy(mode: ConnectionMode, client_factory: ClientFactory) -> ConnectionStrategy:
    """Create the strategy for a single-strategy connection mode."""
    if mode == ConnectionMode.SHARED:
        return SharedConnectionStrategy(client_factory)
    if mode == ConnectionMode.FRESH:
        return FreshConnectionStrategy(client_factory)
    raise ValueError(f"No single strategy for connection mode {mode.value!r}")
