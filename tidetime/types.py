"""Type definitions for tidetime.

This module contains the internal types used throughout the application:
the tide dataset returned by a provider, the values the engine derives from
it, and the locations a user can pick. API response models live in
api_types.py.
"""

# Standard library imports
import enum
from typing import Annotated, Optional, Tuple

# Third-party imports
from pydantic import BaseModel, ConfigDict, Field

# Local imports
from tidetime import util


class TideCategory(enum.Enum):
    LOW = "low"
    HIGH = "high"


class TrendDirection(enum.Enum):
    RISING = "rising"
    FALLING = "falling"


# Derive list for Pandera compatibility
TIDE_TYPE_CATEGORIES = [member.value for member in TideCategory]

# Seconds since the epoch, may be fractional. Bounded to what a datetime can hold.
Timestamp = Annotated[
    float,
    Field(ge=util.MIN_TIMESTAMP, le=util.MAX_TIMESTAMP, allow_inf_nan=False),
]


class TideSample(BaseModel, frozen=True):
    """A single predicted tide height."""

    timestamp: Timestamp
    height: float  # Metres relative to the dataset's datum


class TideExtreme(BaseModel, frozen=True):
    """A high or low tide event."""

    timestamp: Timestamp
    height: float
    kind: TideCategory

    @property
    def is_high(self) -> bool:
        return self.kind == TideCategory.HIGH


class TideDataset(BaseModel, frozen=True):
    """Immutable snapshot of one provider response.

    Samples and extremes are kept in the order they arrived. Consumers that
    need time order must sort a copy (see tidetime.core.engine).
    """

    samples: Tuple[TideSample, ...] = ()
    extremes: Tuple[TideExtreme, ...] = ()

    # Response metadata, carried through unchanged
    status: int = 200
    call_count: Optional[int] = None
    request_lat: Optional[float] = None
    request_lon: Optional[float] = None
    response_lat: Optional[float] = None
    response_lon: Optional[float] = None
    atlas: Optional[str] = None
    copyright: Optional[str] = None
    station: Optional[str] = None
    datum: Optional[str] = None

    @property
    def empty(self) -> bool:
        return not self.samples


class Location(BaseModel, frozen=True):
    """A coastal location selected by the user."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1, description="Stable identifier")
    name: str = Field(..., description="Display name")
    lat: float = Field(..., ge=-90.0, le=90.0, description="Latitude in degrees")
    lon: float = Field(..., ge=-180.0, le=180.0, description="Longitude in degrees")

    def __eq__(self, other: object) -> bool:
        # Two selections of the same place are the same location
        if not isinstance(other, Location):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


class TideTrend(BaseModel, frozen=True):
    """Direction the tide is moving, inferred from the next extreme."""

    direction: TrendDirection
    next_extreme: TideExtreme


class CurrentTide(BaseModel, frozen=True):
    """Summary of the tide at a given instant."""

    timestamp: float
    height: Optional[float]  # None outside the dataset's sample range
    trend: Optional[TideTrend]
