# noqa

from .base import BaseApiClient, BaseClientError
from .worldtides import (
    InvalidRequestError,
    MalformedResponseError,
    QuotaExceededError,
    RateLimitedError,
    ServerError,
    TideProviderError,
    UnauthorizedError,
    WorldTidesApi,
)

__all__ = [
    "BaseApiClient",
    "BaseClientError",
    "InvalidRequestError",
    "MalformedResponseError",
    "QuotaExceededError",
    "RateLimitedError",
    "ServerError",
    "TideProviderError",
    "UnauthorizedError",
    "WorldTidesApi",
]
