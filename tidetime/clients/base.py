"""Base class for API clients."""

import abc
import logging
from typing import Optional

import aiohttp


class BaseClientError(Exception):
    """Base exception for all API client errors."""


class BaseApiClient(abc.ABC):
    """Abstract base class for API clients."""

    _session: aiohttp.ClientSession

    @property
    @abc.abstractmethod
    def client_type(self) -> str:
        """Return the string identifier for the client type (e.g., 'worldtides')."""
        raise NotImplementedError

    def __init__(self, session: aiohttp.ClientSession) -> None:
        """Initialize the base client with an aiohttp session.

        Args:
            session: The aiohttp client session to use for requests.
        """
        self._session = session

    def log(
        self,
        message: str,
        level: int = logging.INFO,
        location_code: Optional[str] = None,
    ) -> None:
        """Log a message, automatically prepending client type and optional location code."""
        client_tag = self.client_type
        if location_code:
            prefix = f"[{location_code}][{client_tag}]"
        else:
            prefix = f"[{client_tag}]"
        logging.log(level, f"{prefix} {message}")
