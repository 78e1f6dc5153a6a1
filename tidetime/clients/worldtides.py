"""WorldTides v3 API client.

API documentation: https://www.worldtides.info/apidocs

The client requests predicted heights and high/low extremes for a coordinate
and maps the camelCase JSON response into a TideDataset. Every failure is
raised as a subclass of TideProviderError; nothing is retried.
"""

# Standard library imports
import asyncio
import json
import logging
import math
import urllib.parse
from typing import Any, List, Optional, Tuple, TypedDict

# Third-party imports
import aiohttp
from pandera.errors import SchemaError
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from pydantic.alias_generators import to_camel

# Local imports
from tidetime.clients.base import BaseApiClient, BaseClientError
from tidetime.core import engine
from tidetime.types import TideCategory, TideDataset, TideExtreme, TideSample


class WorldTidesRequestParams(TypedDict, total=False):
    """Parameters for WorldTides v3 requests (besides the heights/extremes flags)."""

    lat: float
    lon: float
    key: str
    step: int
    days: int
    datum: str


#############################################################
# ERRORS                                                     #
#############################################################


class TideProviderError(BaseClientError):
    """Base error for tide data fetches. The message is meant for the user."""

    default_message = "Unknown error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRequestError(TideProviderError):
    """The request was rejected, e.g. because of bad coordinates."""

    default_message = "Invalid request"


class UnauthorizedError(TideProviderError):
    """The API key was missing or rejected."""

    default_message = "Invalid API key"


class QuotaExceededError(TideProviderError):
    """The account has no request credits left."""

    default_message = "API quota exceeded"


class RateLimitedError(TideProviderError):
    """Too many requests in a short period."""

    default_message = "Too many requests. Please try again later."


class ServerError(TideProviderError):
    """Any other upstream or transport failure."""


class MalformedResponseError(TideProviderError):
    """The response body does not have the expected shape."""

    default_message = "Malformed response from tide service"


def error_for_status(status: int, message: Optional[str] = None) -> TideProviderError:
    """Map an HTTP (or response body) status code to a provider error.

    Args:
        status: Status code reported by the API
        message: Error text from the response body, if any

    Returns:
        The matching TideProviderError instance (not raised)
    """
    if status == 400:
        return InvalidRequestError(message)
    if status == 401:
        return UnauthorizedError()
    if status == 403:
        return QuotaExceededError()
    if status == 429:
        return RateLimitedError()
    return ServerError(message)


#############################################################
# WIRE FORMAT                                                #
#############################################################


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


class WorldTidesHeight(_WireModel):
    dt: float
    date: Optional[str] = None
    height: float


class WorldTidesExtreme(_WireModel):
    dt: float
    date: Optional[str] = None
    height: float
    type: TideCategory

    @field_validator("type", mode="before")
    @classmethod
    def _parse_type(cls, value: Any) -> Any:
        # The API reports "High" / "Low"
        if isinstance(value, str):
            return value.strip().lower()
        return value


class WorldTidesResponse(_WireModel):
    status: int
    call_count: Optional[int] = None
    copyright: Optional[str] = None
    request_lat: Optional[float] = None
    request_lon: Optional[float] = None
    response_lat: Optional[float] = None
    response_lon: Optional[float] = None
    atlas: Optional[str] = None
    station: Optional[str] = None
    response_datum: Optional[str] = None
    heights: List[WorldTidesHeight] = []
    extremes: List[WorldTidesExtreme] = []

    def to_dataset(self) -> TideDataset:
        """Convert to the internal dataset, keeping the arrival order."""
        return TideDataset(
            samples=tuple(
                TideSample(timestamp=h.dt, height=h.height) for h in self.heights
            ),
            extremes=tuple(
                TideExtreme(timestamp=e.dt, height=e.height, kind=e.type)
                for e in self.extremes
            ),
            status=self.status,
            call_count=self.call_count,
            request_lat=self.request_lat,
            request_lon=self.request_lon,
            response_lat=self.response_lat,
            response_lon=self.response_lon,
            atlas=self.atlas,
            copyright=self.copyright,
            station=self.station,
            datum=self.response_datum,
        )


#############################################################
# CLIENT                                                     #
#############################################################


class WorldTidesApi(BaseApiClient):
    """Client for the WorldTides v3 API.

    Each call to fetch_tides makes exactly one HTTP request.
    """

    BASE_URL = "https://www.worldtides.info/api/v3"
    # Valueless flags selecting the data products
    PRODUCT_FLAGS = ("heights", "extremes")

    DEFAULT_STEP = 900  # 15-minute samples
    DEFAULT_DAYS = 2
    DEFAULT_DATUM = "LAT"  # Lowest Astronomical Tide
    DEFAULT_TIMEOUT = 30.0  # seconds

    @property
    def client_type(self) -> str:
        return "worldtides"

    def __init__(
        self,
        session: aiohttp.ClientSession,
        api_key: str,
        base_url: str = BASE_URL,
        step: int = DEFAULT_STEP,
        days: int = DEFAULT_DAYS,
        datum: str = DEFAULT_DATUM,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the client.

        Args:
            session: Shared aiohttp session
            api_key: WorldTides API key
            base_url: API endpoint
            step: Seconds between height samples
            days: Number of days of predictions to request
            datum: Reference level for heights
            timeout: Total request timeout in seconds
        """
        super().__init__(session=session)
        self._api_key = api_key
        self.base_url = base_url
        self.step = step
        self.days = days
        self.datum = datum
        self.timeout = timeout

    @staticmethod
    def check_coordinates(lat: float, lon: float) -> None:
        """Raise InvalidRequestError unless lat/lon are finite and in range."""
        if not math.isfinite(lat) or not -90.0 <= lat <= 90.0:
            raise InvalidRequestError(f"Latitude must be within [-90, 90], got {lat}")
        if not math.isfinite(lon) or not -180.0 <= lon <= 180.0:
            raise InvalidRequestError(
                f"Longitude must be within [-180, 180], got {lon}"
            )

    def _build_url(self, params: WorldTidesRequestParams) -> str:
        query = "&".join(self.PRODUCT_FLAGS) + "&" + urllib.parse.urlencode(params)
        return self.base_url + "?" + query

    async def _execute_request(
        self, params: WorldTidesRequestParams, location_code: str
    ) -> Tuple[int, str]:
        """Perform the HTTP request.

        Returns:
            Tuple of (HTTP status, response body text)

        Raises:
            ServerError: If the API could not be reached
        """
        url = self._build_url(params)
        redacted = url.replace(self._api_key, "***") if self._api_key else url
        self.log(f"WorldTides API request: {redacted}", location_code=location_code)
        try:
            async with self._session.get(
                url, timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as response:
                return response.status, await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            error_msg = f"Failed to connect to WorldTides API: {e.__class__.__name__}: {e}"
            self.log(error_msg, level=logging.ERROR, location_code=location_code)
            raise ServerError(error_msg) from e

    def _malformed(
        self, reason: str, body: str, location_code: str
    ) -> MalformedResponseError:
        self.log(
            f"Malformed WorldTides response: {reason}. Raw payload: {body!r}",
            level=logging.ERROR,
            location_code=location_code,
        )
        return MalformedResponseError()

    def parse_response(
        self, status: int, body: str, location_code: str = "unknown"
    ) -> TideDataset:
        """Map an API response into a TideDataset.

        Args:
            status: HTTP status of the response
            body: Raw response body
            location_code: Location code for logging

        Returns:
            The parsed dataset

        Raises:
            TideProviderError: Subclass matching the failure
        """
        try:
            payload = json.loads(body)
        except ValueError as e:
            if status != 200:
                # Error pages are not always JSON
                raise error_for_status(status) from e
            raise self._malformed(f"invalid JSON ({e})", body, location_code) from e

        error_text: Optional[str] = None
        body_status: Optional[int] = None
        if isinstance(payload, dict):
            if payload.get("error"):
                error_text = str(payload["error"])
            if isinstance(payload.get("status"), int):
                body_status = payload["status"]

        # WorldTides reports some failures with HTTP 200 and the real status in the body
        effective_status = status if status != 200 else (body_status or 200)
        if effective_status != 200 or error_text:
            self.log(
                f"WorldTides API error {effective_status}: {error_text}",
                level=logging.ERROR,
                location_code=location_code,
            )
            if effective_status == 200:
                effective_status = 400
            raise error_for_status(effective_status, error_text)

        try:
            dataset = WorldTidesResponse.model_validate(payload).to_dataset()
            # Validate the sorted projections (finite values, known extreme types)
            engine.samples_frame(dataset)
            engine.extremes_frame(dataset)
        except (ValidationError, SchemaError) as e:
            raise self._malformed(str(e), body, location_code) from e
        return dataset

    async def fetch_tides(
        self, lat: float, lon: float, location_code: str = "unknown"
    ) -> TideDataset:
        """Fetch predicted heights and extremes for a coordinate.

        Args:
            lat: Latitude in degrees, within [-90, 90]
            lon: Longitude in degrees, within [-180, 180]
            location_code: Location identifier for logging

        Returns:
            TideDataset with samples every `step` seconds over `days` days

        Raises:
            InvalidRequestError: Bad coordinates or request rejected upstream
            UnauthorizedError: Bad API key
            QuotaExceededError: No credits left
            RateLimitedError: Too many requests
            ServerError: Other upstream or connection failure
            MalformedResponseError: Response body has an unexpected shape
        """
        self.check_coordinates(lat, lon)
        params: WorldTidesRequestParams = {
            "lat": lat,
            "lon": lon,
            "key": self._api_key,
            "step": self.step,
            "days": self.days,
            "datum": self.datum,
        }
        self.log(
            f"Fetching tides for ({lat}, {lon}), {self.days} days at {self.step}s steps",
            location_code=location_code,
        )
        status, body = await self._execute_request(params, location_code)
        dataset = self.parse_response(status, body, location_code)
        self.log(
            f"Received {len(dataset.samples)} heights and {len(dataset.extremes)} extremes",
            location_code=location_code,
        )
        return dataset
