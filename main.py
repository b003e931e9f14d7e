"""Main entry point for the Query Load Tester API."""

from fastapi import FastAPI

from src.const import APP_DESCRIPTION, APP_TITLE, APP_VERSION
from src.load_test import LoadTester, StrategyComparator, query_client_factory
from src.shared.config import Config
from src.shared.logging import LoggingManager
from src.slices.health.health_router import HealthRouter
from src.slices.load_test.load_test_router import LoadTestRouter


class LoadTestApp:
    """Main application class for the Query Load Tester."""

    def __init__(self, config: Config = None):
        self.config = config or Config()

        # Setup logging
        LoggingManager.setup_logging(self.config.log_level, self.config.library_log_levels)
        logger = LoggingManager.get_logger(__name__)

        # Client factory stays None until an endpoint is configured; runs then fail fast
        client_factory = None
        if self.config.convex_url:
            client_factory = query_client_factory(
                self.config.convex_url,
                self.config.query_function,
                self.config.size_argument,
                self.config.call_timeout,
                self.config.max_retries,
            )
        else:
            logger.warning("No query endpoint configured; load tests will be rejected")

        self.load_tester = LoadTester(
            client_factory,
            error_sample_size=self.config.error_sample_size,
            comparator=StrategyComparator(pause_seconds=self.config.comparison_pause),
        )

        # Initialize routers
        self.health_router = HealthRouter.get_router(client_factory)
        self.load_test_router = LoadTestRouter.get_router(self.load_tester)

        # Create FastAPI app
        self.app = FastAPI(
            title=APP_TITLE,
            description=APP_DESCRIPTION,
            version=APP_VERSION,
        )

        # Mount slices
        self.app.include_router(self.health_router)
        self.app.include_router(self.load_test_router)


def create_app(config: Config = None) -> FastAPI:
    return LoadTestApp(config).app


# Create application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    server_config = Config()
    uvicorn.run(app, host=server_config.server_host, port=server_config.server_port)
