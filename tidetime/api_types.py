"""API Type definitions for tidetime.

This module contains type definitions used for API request/response handling
via Pydantic models. Internal types are defined in types.py.
"""

# Standard library imports
import datetime
from typing import List, Optional

# Third-party imports
from pydantic import BaseModel, ConfigDict, Field

#############################################################
# API TYPES - Used for external API request/response models  #
#############################################################


class LocationInfo(BaseModel):
    """Location information for API requests and responses."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1, description="Location identifier")
    name: str = Field(..., description="Display name of the location")
    lat: float = Field(..., ge=-90.0, le=90.0, description="Latitude in degrees")
    lon: float = Field(..., ge=-180.0, le=180.0, description="Longitude in degrees")


class TidePoint(BaseModel):
    """A point on the tide curve."""

    model_config = ConfigDict(extra="forbid")

    time: str = Field(..., description="ISO 8601 UTC timestamp of the sample")
    timestamp: float = Field(..., description="Seconds since the epoch")
    height: float = Field(..., description="Height in metres relative to the datum")


class ApiTideExtreme(BaseModel):
    """A high or low tide for API responses."""

    model_config = ConfigDict(extra="forbid")

    time: str = Field(..., description="ISO 8601 UTC timestamp of the tide event")
    timestamp: float = Field(..., description="Seconds since the epoch")
    height: float = Field(..., description="Height in metres relative to the datum")
    type: str = Field(..., description="Type of tide ('high' or 'low')")


class HeightRange(BaseModel):
    """Padded height range for a graph axis."""

    model_config = ConfigDict(extra="forbid")

    min: float = Field(..., description="Lower bound in metres")
    max: float = Field(..., description="Upper bound in metres")


class CurrentTideInfo(BaseModel):
    """The tide at the requested instant."""

    model_config = ConfigDict(extra="forbid")

    time: str = Field(..., description="ISO 8601 UTC timestamp of the query")
    height: Optional[float] = Field(
        None, description="Interpolated height, None outside the sampled range"
    )
    trend: Optional[str] = Field(
        None, description="'rising' or 'falling', None if no extreme follows"
    )
    next_extreme: Optional[ApiTideExtreme] = Field(
        None, description="The extreme the trend was inferred from"
    )


class Attribution(BaseModel):
    """Source attribution carried through from the provider."""

    model_config = ConfigDict(extra="forbid")

    atlas: Optional[str] = Field(None, description="Tide atlas used by the provider")
    copyright: Optional[str] = Field(None, description="Provider copyright notice")
    station: Optional[str] = Field(None, description="Tide station, if any")
    datum: Optional[str] = Field(None, description="Datum heights are relative to")
    response_lat: Optional[float] = Field(None, description="Latitude of the data")
    response_lon: Optional[float] = Field(None, description="Longitude of the data")


class TideView(BaseModel):
    """Complete response for the tide view endpoint."""

    model_config = ConfigDict(extra="forbid")

    location: LocationInfo
    now: str = Field(..., description="ISO 8601 UTC reference time of the view")
    curve: List[TidePoint] = Field(
        ..., description="Samples within the graph window, sorted by time"
    )
    height_range: HeightRange
    current: CurrentTideInfo
    graph_extremes: List[ApiTideExtreme] = Field(
        ..., description="Extremes within the graph window"
    )
    next_extremes: List[ApiTideExtreme] = Field(
        ..., description="Highs and lows in the coming hours"
    )
    attribution: Attribution


class AppStatus(BaseModel):
    """Status of the application state."""

    model_config = ConfigDict(extra="forbid")

    location: Optional[LocationInfo] = Field(None, description="Selected location")
    loading: bool = Field(..., description="Whether a fetch is in flight")
    ready: bool = Field(..., description="Whether a dataset is loaded")
    error: Optional[str] = Field(None, description="Last fetch error message")
    error_type: Optional[str] = Field(None, description="Last fetch error type")
    fetch_timestamp: Optional[datetime.datetime] = Field(
        None, description="Time of the last successful fetch (naive UTC)"
    )
    sample_count: int = Field(0, description="Number of height samples")
    extreme_count: int = Field(0, description="Number of extremes")
    samples_oldest: Optional[str] = Field(
        None, description="ISO 8601 timestamp of the earliest sample"
    )
    samples_newest: Optional[str] = Field(
        None, description="ISO 8601 timestamp of the latest sample"
    )
