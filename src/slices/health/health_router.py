import asyncio
from typing import Any, Dict, Optional

from fastapi import APIRouter

from src.const import (
    HEALTH_CHECK_SIZE,
    HEALTH_STATUS_ERROR,
    HEALTH_STATUS_HEALTHY,
    HEALTH_STATUS_OK,
    HEALTH_STATUS_UNCONFIGURED,
    HEALTH_STATUS_UNHEALTHY,
)
from src.load_test.connection_strategy import ClientFactory
from src.shared.logging import LoggingManager


class HealthRouter:
    """Router for health endpoints."""

    def __init__(self, client_factory: Optional[ClientFactory]):
        self.client_factory = client_factory
        self.router = APIRouter(prefix="/health", tags=["health"])
        self.logger = LoggingManager.get_logger(__name__)
        self.router.get("", response_model=Dict[str, Any])(self.health_check)

    @classmethod
    def get_router(cls, client_factory: Optional[ClientFactory]) -> APIRouter:
        """Get the router instance."""
        return cls(client_factory).router

    def _query_upstream(self) -> None:
        client = self.client_factory()
        try:
            client.query(HEALTH_CHECK_SIZE)
        finally:
            client.close()

    async def health_check(self) -> Dict[str, Any]:
        """Check health of the service and the upstream query endpoint."""
        service_status = HEALTH_STATUS_OK

        if self.client_factory is None:
            upstream_status = HEALTH_STATUS_UNCONFIGURED
        else:
            try:
                self.logger.debug("Probing upstream query endpoint")
                loop = asyncio.get_running_loop()
                await loop.run_in_executor(None, self._query_upstream)
                upstream_status = HEALTH_STATUS_OK
            except Exception as e:
                upstream_status = HEALTH_STATUS_ERROR
                self.logger.warning(f"Upstream health check failed: {str(e)}")

        status = HEALTH_STATUS_HEALTHY if upstream_status == HEALTH_STATUS_OK else HEALTH_STATUS_UNHEALTHY
        self.logger.info(f"Health check result: {status} (service: {service_status}, upstream: {upstream_status})")

        return {
            "status": status,
            "service": service_status,
            "upstream": upstream_status
        }
