"""
Base endpoint group.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from saaspe.services.client import ApiClient


class ApiModel(BaseModel):
    """Backend payload; camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BaseEndpoint:
    """
    Base class for a group of backend endpoints.

    All endpoint groups should:
    - Use ApiClient for HTTP requests (with circuit breaker, retries, refresh)
    - Return Pydantic models
    - Let ApiError propagate to the caller
    """

    def __init__(self, client: ApiClient | None = None):
        from saaspe.services.client import get_api_client

        self.client = client or get_api_client()
