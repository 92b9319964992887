import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


class Settings(BaseModel):
    # Backend API Configuration
    api_base_url: str = Field(default="http://localhost:3000", alias="API_BASE_URL")
    api_timeout: float = Field(default=30.0, alias="API_TIMEOUT")
    api_refresh_path: str = Field(
        default="/api/v1/auth/refresh", alias="API_REFRESH_PATH"
    )

    # Retry Configuration
    api_max_retries: int = Field(default=3, alias="API_MAX_RETRIES")
    api_retry_base_delay: float = Field(default=1.0, alias="API_RETRY_BASE_DELAY")
    api_retry_max_delay: float = Field(default=10.0, alias="API_RETRY_MAX_DELAY")
    api_retry_jitter: float = Field(default=1.0, alias="API_RETRY_JITTER")

    # Circuit Breaker Configuration
    circuit_failure_threshold: int = Field(
        default=5, alias="CIRCUIT_FAILURE_THRESHOLD"
    )
    circuit_reset_timeout: float = Field(default=30.0, alias="CIRCUIT_RESET_TIMEOUT")

    # Diagnostics
    api_call_history_size: int = Field(default=20, alias="API_CALL_HISTORY_SIZE")


global_settings = Settings(**os.environ)
