"""Application configuration.

Settings for the WorldTides provider, the location store and the tide view.
Values come from environment variables (see AppConfig.from_env) with defaults
matching the reference app: two days of 15-minute samples relative to Lowest
Astronomical Tide, a 24 hour graph window and a 24 hour extremes list.
"""

# Standard library imports
import datetime
import functools
import os
import pathlib
from typing import Annotated, Literal, Mapping, Optional

# Third-party imports
from pydantic import BaseModel, ConfigDict, Field

# Local imports
from tidetime.clients.worldtides import WorldTidesApi
from tidetime.core import engine, queries

DEFAULT_STATE_FILE = pathlib.Path("~/.tidetime/location.json")

# Environment variable names
ENV_API_KEY = "WORLDTIDES_API_KEY"
ENV_BASE_URL = "WORLDTIDES_BASE_URL"
ENV_DATUM = "TIDETIME_DATUM"
ENV_STATE_FILE = "TIDETIME_STATE_FILE"
ENV_LOG_LEVEL = "TIDETIME_LOG_LEVEL"


class AppConfig(BaseModel, frozen=True):
    """Runtime configuration for tidetime."""

    model_config = ConfigDict(extra="forbid")

    api_key: Annotated[
        str,
        Field(description="WorldTides API key (https://www.worldtides.info/developer)"),
    ] = ""

    base_url: Annotated[
        str, Field(description="WorldTides v3 API endpoint")
    ] = WorldTidesApi.BASE_URL

    step_seconds: Annotated[
        int,
        Field(gt=0, description="Seconds between predicted height samples"),
    ] = WorldTidesApi.DEFAULT_STEP

    days: Annotated[
        int, Field(ge=1, le=7, description="Days of predictions per request")
    ] = WorldTidesApi.DEFAULT_DAYS

    datum: Annotated[
        str, Field(description="Tidal datum heights are relative to (e.g. LAT, MSL)")
    ] = WorldTidesApi.DEFAULT_DATUM

    request_timeout: Annotated[
        float, Field(gt=0, description="HTTP request timeout in seconds")
    ] = WorldTidesApi.DEFAULT_TIMEOUT

    window_half_width: Annotated[
        datetime.timedelta,
        Field(description="Half-width of the tide graph window around now"),
    ] = engine.DEFAULT_WINDOW_HALF_WIDTH

    extremes_horizon: Annotated[
        datetime.timedelta,
        Field(description="How far ahead upcoming highs and lows are listed"),
    ] = queries.DEFAULT_EXTREMES_HORIZON

    state_file: Annotated[
        pathlib.Path,
        Field(description="JSON file holding the last selected location"),
    ] = DEFAULT_STATE_FILE

    log_level: Annotated[
        Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        Field(description="Root logging level"),
    ] = "INFO"

    @property
    def state_path(self) -> pathlib.Path:
        """State file path with ~ expanded."""
        return self.state_file.expanduser()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        """Build a configuration from environment variables.

        Args:
            environ: Mapping to read from, defaults to os.environ

        Returns:
            AppConfig with any variables that are set applied over the defaults
        """
        env = os.environ if environ is None else environ
        overrides: dict[str, object] = {}
        if ENV_API_KEY in env:
            overrides["api_key"] = env[ENV_API_KEY]
        if ENV_BASE_URL in env:
            overrides["base_url"] = env[ENV_BASE_URL]
        if ENV_DATUM in env:
            overrides["datum"] = env[ENV_DATUM]
        if ENV_STATE_FILE in env:
            overrides["state_file"] = pathlib.Path(env[ENV_STATE_FILE])
        if ENV_LOG_LEVEL in env:
            overrides["log_level"] = env[ENV_LOG_LEVEL].strip().upper()
        return cls.model_validate(overrides)


@functools.cache
def get() -> AppConfig:
    """Return the process-wide configuration, read once from the environment."""
    return AppConfig.from_env()
