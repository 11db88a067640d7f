"""Remote-service client, async bridging and the observable container."""

from .async_utils import run_sync
from .client import ApiClient, RestApiClient
from .state_flow import StateFlow

__all__ = ["ApiClient", "RestApiClient", "StateFlow", "run_sync"]
