"""Tide curve and extremes engine.

Pure functions over a TideDataset. Every function takes the dataset and the
reference instant explicitly; nothing here reads the clock or keeps state,
so all of them are safe to call concurrently.

Timestamps are epoch seconds. Datasets are never mutated: sorting always
happens on a copy.
"""

import datetime
import math
from operator import attrgetter
from typing import Any, List, Optional, Tuple

import numpy as np
import pandas as pd

from tidetime import dataframe_models as df_models
from tidetime import util
from tidetime.types import (
    TideCategory,
    TideDataset,
    TideExtreme,
    TideSample,
    TideTrend,
    TrendDirection,
)

# Half-width of the window shown around "now" on the tide graph
DEFAULT_WINDOW_HALF_WIDTH = datetime.timedelta(hours=12)

_by_timestamp = attrgetter("timestamp")


def sorted_samples(dataset: TideDataset) -> List[TideSample]:
    """Return the dataset's samples in ascending time order.

    The sort is stable, so samples sharing a timestamp keep their arrival order.
    """
    return sorted(dataset.samples, key=_by_timestamp)


def sorted_extremes(dataset: TideDataset) -> List[TideExtreme]:
    return sorted(dataset.extremes, key=_by_timestamp)


FloatArray = np.ndarray[Any, np.dtype[np.floating[Any]]]


def _sample_arrays(dataset: TideDataset) -> Tuple[FloatArray, FloatArray]:
    """Return (times, heights) as float arrays sorted by time."""
    samples = dataset.samples
    times = np.fromiter((s.timestamp for s in samples), dtype=float, count=len(samples))
    heights = np.fromiter((s.height for s in samples), dtype=float, count=len(samples))
    order = np.argsort(times, kind="stable")
    return times[order], heights[order]


def windowed(
    dataset: TideDataset,
    center_time: float,
    half_width: util.Duration = DEFAULT_WINDOW_HALF_WIDTH,
) -> List[TideSample]:
    """Select the samples within half_width of center_time.

    Args:
        dataset: Tide dataset to select from
        center_time: Center of the window (epoch seconds), usually "now"
        half_width: Half the window length, in seconds or as a timedelta

    Returns:
        Samples with |timestamp - center_time| < half_width, sorted ascending
        by timestamp. Empty if none fall inside the window.
    """
    half_width_s = util.to_seconds(half_width)
    return [
        sample
        for sample in sorted_samples(dataset)
        if abs(sample.timestamp - center_time) < half_width_s
    ]


def height_at(dataset: TideDataset, time: float) -> Optional[float]:
    """Linearly interpolate the tide height at a given instant.

    The full dataset is used, not a windowed subset. Heights are only defined
    over [first sample, last sample]; queries outside that range on either
    side return None rather than extrapolating or clamping.

    Args:
        dataset: Tide dataset to interpolate over
        time: Query instant (epoch seconds)

    Returns:
        Interpolated height, or None if there are no samples or the query is
        outside the sampled range
    """
    if dataset.empty:
        return None

    times, heights = _sample_arrays(dataset)

    # Index of the first sample strictly after the query time
    after = int(np.searchsorted(times, time, side="right"))
    if after == 0:
        return None
    before = after - 1
    if after == len(times):
        # Only exactly the last sample is inside the range
        if times[before] == time:
            return float(heights[before])
        return None

    span = times[after] - times[before]
    if span == 0:
        return float(heights[before])
    progress = (time - times[before]) / span
    return float(heights[before] + progress * (heights[after] - heights[before]))


def extremes_in_window(
    dataset: TideDataset, start_time: float, end_time: float = math.inf
) -> List[TideExtreme]:
    """Select extremes with start_time < timestamp <= end_time, sorted ascending.

    The lower bound is exclusive and the upper bound inclusive, matching a
    "next N hours" query starting now.
    """
    return [
        extreme
        for extreme in sorted_extremes(dataset)
        if start_time < extreme.timestamp <= end_time
    ]


def trend(dataset: TideDataset, at_time: float) -> Optional[TideTrend]:
    """Infer whether the tide is rising or falling at a given instant.

    The direction comes from the kind of the next extreme after at_time: a
    coming high tide means rising, a coming low tide means falling. The local
    slope of the curve is deliberately not consulted.

    Returns:
        The trend, or None if no extreme follows at_time
    """
    upcoming = extremes_in_window(dataset, at_time)
    if not upcoming:
        return None
    next_extreme = upcoming[0]
    if next_extreme.kind == TideCategory.HIGH:
        direction = TrendDirection.RISING
    else:
        direction = TrendDirection.FALLING
    return TideTrend(direction=direction, next_extreme=next_extreme)


# =============================================================================
# DataFrame projections
# =============================================================================


def samples_frame(dataset: TideDataset) -> pd.DataFrame:
    """Return the samples as a sorted DataFrame indexed by time.

    Raises:
        pandera.errors.SchemaError: If the samples contain non-finite values
    """
    samples = sorted_samples(dataset)
    df = pd.DataFrame(
        {"height": pd.Series([s.height for s in samples], dtype=float)},
    ).set_index(pd.Index([s.timestamp for s in samples], dtype=float, name="time"))
    return df_models.TideHeightDataModel.validate(df)


def extremes_frame(dataset: TideDataset) -> pd.DataFrame:
    """Return the extremes as a sorted DataFrame indexed by time.

    Raises:
        pandera.errors.SchemaError: If the extremes contain non-finite values
    """
    extremes = sorted_extremes(dataset)
    df = pd.DataFrame(
        {
            "height": pd.Series([e.height for e in extremes], dtype=float),
            "type": pd.Series([e.kind.value for e in extremes], dtype=object),
        },
    ).set_index(pd.Index([e.timestamp for e in extremes], dtype=float, name="time"))
    return df_models.TideExtremeDataModel.validate(df)
