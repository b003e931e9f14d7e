import asyncio
from typing import Any, Dict

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from src.const import HTTP_BAD_REQUEST, HTTP_ERROR
from src.load_test import (
    ConnectionMode,
    LoadTester,
    LoadTestError,
    MissingEndpointConfigError,
    ResultExporter,
    RunConfig,
    UnknownPatternError,
)
from src.load_test.constants import LoadTestConstants
from src.shared.logging import LoggingManager


class LoadTestRequest(BaseModel):
    """Load test request as sent by the dashboard."""

    pattern: str = LoadTestConstants.DEFAULT_PATTERN
    totalQueries: int = Field(default=LoadTestConstants.DEFAULT_TOTAL_CALLS, ge=0)
    concurrency: int = Field(default=LoadTestConstants.DEFAULT_CONCURRENCY, ge=1)
    mode: str = ConnectionMode.SHARED.value
    duration: float = Field(default=0, ge=0)
    delayMs: int = Field(default=0, ge=0)


class LoadTestRouter:
    """Router for running load tests over HTTP."""

    def __init__(self, load_tester: LoadTester):
        self.load_tester = load_tester
        self.logger = LoggingManager.get_logger(__name__)
        self.router = APIRouter(tags=["load-test"])
        self.router.post("/api/load-test", response_model=Dict[str, Any])(self.run_load_test)

    @classmethod
    def get_router(cls, load_tester: LoadTester) -> APIRouter:
        """Get the router instance."""
        return cls(load_tester).router

    async def run_load_test(self, request: LoadTestRequest) -> Dict[str, Any]:
        """Run a load test and return its report (or both reports and a verdict)."""
        try:
            config = RunConfig(
                pattern=request.pattern,
                total_calls=request.totalQueries,
                concurrency=request.concurrency,
                duration_seconds=request.duration,
                connection_mode=ConnectionMode(request.mode),
                delay_ms=request.delayMs,
            )
        except ValueError as e:
            self.logger.warning(f"Rejected load test request: {e}")
            raise HTTPException(status_code=HTTP_BAD_REQUEST, detail=str(e))

        self.logger.info(f"Load test router - running {config.connection_mode.value} test, pattern {config.pattern}")
        try:
            loop = asyncio.get_running_loop()
            result = await loop.run_in_executor(None, self.load_tester.run, config)
        except UnknownPatternError as e:
            self.logger.warning(f"Rejected load test request: {e}")
            raise HTTPException(status_code=HTTP_BAD_REQUEST, detail=str(e))
        except MissingEndpointConfigError as e:
            self.logger.error(f"Load test endpoint not configured: {e}")
            raise HTTPException(status_code=HTTP_ERROR, detail=str(e))
        except LoadTestError as e:
            self.logger.error(f"Load test failed: {e}")
            raise HTTPException(status_code=HTTP_ERROR, detail=str(e))

        return ResultExporter.to_dict(result)
