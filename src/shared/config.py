import json
from pathlib import Path
from typing import Dict, Any

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.const import CONFIG_FILE_NAME, DEFAULT_LOG_LEVEL, DEFAULT_SERVER_HOST, DEFAULT_SERVER_PORT, LIBRARY_LOG_LEVELS
from src.load_test.constants import LoadTestConstants


class Config(BaseSettings):
    """Global configuration settings for the query load tester."""

    convex_url: str = Field(
        default="",
        validation_alias=AliasChoices("LOAD_TEST_CONVEX_URL", "NEXT_PUBLIC_CONVEX_URL", "convex_url"),
    )
    query_function: str = LoadTestConstants.DEFAULT_QUERY_FUNCTION
    size_argument: str = LoadTestConstants.DEFAULT_SIZE_ARGUMENT
    call_timeout: float = LoadTestConstants.DEFAULT_CALL_TIMEOUT
    max_retries: int = LoadTestConstants.DEFAULT_MAX_RETRIES
    default_pattern: str = LoadTestConstants.DEFAULT_PATTERN
    default_total_calls: int = LoadTestConstants.DEFAULT_TOTAL_CALLS
    default_concurrency: int = LoadTestConstants.DEFAULT_CONCURRENCY
    error_sample_size: int = LoadTestConstants.DEFAULT_ERROR_SAMPLE_SIZE
    comparison_pause: float = LoadTestConstants.DEFAULT_COMPARISON_PAUSE
    server_host: str = DEFAULT_SERVER_HOST
    server_port: int = DEFAULT_SERVER_PORT
    log_level: str = DEFAULT_LOG_LEVEL
    library_log_levels: Dict[str, str] = dict(LIBRARY_LOG_LEVELS)

    model_config = SettingsConfigDict(
        env_prefix='LOAD_TEST_',
        env_file=('.env', '.env.local'),
        extra='ignore',
    )

    @classmethod
    def load_config_from_json(cls) -> Dict[str, Any]:
        """Load configuration from config.json file."""
        config_path = Path(CONFIG_FILE_NAME)
        if config_path.exists():
            with open(config_path, 'r') as f:
                return json.load(f)
        return {}

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        """
        Customise the sources for settings.

        Order of precedence (highest to lowest):
        1. Environment variables
        2. Init settings (kwargs passed to constructor)
        3. .env / .env.local files
        4. JSON config file
        5. Default values
        """
        def json_source():
            return cls.load_config_from_json()

        return (
            env_settings,
            init_settings,
            dotenv_settings,
            json_source,
        )
