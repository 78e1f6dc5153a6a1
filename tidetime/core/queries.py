"""Query functions for presenting a tide dataset.

These functions combine engine primitives into the values the tide view shows:
the current tide, the upcoming extremes, and the markers and axis range of the
tide graph. "Now" is always passed in by the caller.
"""

import datetime
from typing import List, Sequence, Tuple

from tidetime import util
from tidetime.core import engine
from tidetime.types import CurrentTide, TideDataset, TideExtreme, TideSample

# How far ahead the list of upcoming highs and lows reaches
DEFAULT_EXTREMES_HORIZON = datetime.timedelta(hours=24)

# Fraction of the height span added above and below the graph's axis range
DEFAULT_HEIGHT_PADDING = 0.1


def current_tide(dataset: TideDataset, now: float) -> CurrentTide:
    """Get the interpolated height and trend at the given time.

    Args:
        dataset: Tide dataset for the selected location
        now: Reference instant (epoch seconds)

    Returns:
        A CurrentTide. Height is None when now falls outside the sampled range,
        trend is None when no extreme follows now.
    """
    return CurrentTide(
        timestamp=now,
        height=engine.height_at(dataset, now),
        trend=engine.trend(dataset, now),
    )


def next_extremes(
    dataset: TideDataset,
    now: float,
    horizon: util.Duration = DEFAULT_EXTREMES_HORIZON,
) -> List[TideExtreme]:
    """Get the highs and lows after now and up to now + horizon."""
    return engine.extremes_in_window(dataset, now, now + util.to_seconds(horizon))


def graph_extremes(
    dataset: TideDataset,
    now: float,
    half_width: util.Duration = engine.DEFAULT_WINDOW_HALF_WIDTH,
) -> List[TideExtreme]:
    """Get the extremes to mark on a graph centered on now.

    Uses the same symmetric, open window as engine.windowed so markers line up
    with the plotted samples.
    """
    half_width_s = util.to_seconds(half_width)
    return [
        extreme
        for extreme in engine.sorted_extremes(dataset)
        if abs(extreme.timestamp - now) < half_width_s
    ]


def height_range(
    samples: Sequence[TideSample], padding: float = DEFAULT_HEIGHT_PADDING
) -> Tuple[float, float]:
    """Compute a padded (min, max) height range for a graph axis.

    Returns (0.0, 1.0) when there are no samples.
    """
    if not samples:
        return (0.0, 1.0)
    heights = [s.height for s in samples]
    low, high = min(heights), max(heights)
    pad = (high - low) * padding
    return (low - pad, high + pad)
