"""Tests for the tide curve and extremes engine."""

# Standard library imports
import datetime
import math

# Third-party imports
import pandas as pd
import pytest
from pandera.errors import SchemaError

# Local imports
from tidetime.core import engine
from tidetime.types import TideCategory, TideDataset, TideSample, TrendDirection
from tests.helpers import make_dataset

HOUR = 3600.0

# Unevenly spaced samples, deliberately out of order
IRREGULAR_SAMPLES = [
    (2 * HOUR, 1.8),
    (0.0, 0.5),
    (5 * HOUR, -0.25),
    (0.5 * HOUR, 0.9),
    (3.25 * HOUR, 2.4),
    (-1 * HOUR, 0.1),
]


@pytest.fixture
def irregular() -> TideDataset:
    return make_dataset(samples=IRREGULAR_SAMPLES)


#############################################################
# height_at                                                  #
#############################################################


def test_height_at_midpoint() -> None:
    dataset = make_dataset(samples=[(0, 1.0), (3600, 2.0)])
    assert engine.height_at(dataset, 1800) == 1.5


@pytest.mark.parametrize("timestamp,height", IRREGULAR_SAMPLES)
def test_height_at_is_exact_at_samples(
    irregular: TideDataset, timestamp: float, height: float
) -> None:
    assert engine.height_at(irregular, timestamp) == height


def test_height_at_stays_between_bracketing_heights(irregular: TideDataset) -> None:
    ordered = sorted(IRREGULAR_SAMPLES)
    for (t0, h0), (t1, h1) in zip(ordered, ordered[1:]):
        for fraction in (0.01, 0.25, 0.5, 0.75, 0.99):
            t = t0 + (t1 - t0) * fraction
            height = engine.height_at(irregular, t)
            assert height is not None
            assert min(h0, h1) <= height <= max(h0, h1)


def test_height_at_uses_linear_progress() -> None:
    dataset = make_dataset(samples=[(100, 2.0), (400, -1.0)])
    assert engine.height_at(dataset, 200) == pytest.approx(1.0)
    assert engine.height_at(dataset, 350) == pytest.approx(-0.5)


def test_height_at_ignores_arrival_order() -> None:
    shuffled = make_dataset(samples=[(3600, 2.0), (7200, 0.0), (0, 1.0)])
    ordered = make_dataset(samples=[(0, 1.0), (3600, 2.0), (7200, 0.0)])
    for t in (0, 900, 1800, 3600, 5400, 7200):
        assert engine.height_at(shuffled, t) == engine.height_at(ordered, t)


@pytest.mark.parametrize("query", [-1.5 * HOUR, 5 * HOUR + 1, 100 * HOUR])
def test_height_at_outside_range_is_none(
    irregular: TideDataset, query: float
) -> None:
    assert engine.height_at(irregular, query) is None


def test_height_at_empty_dataset() -> None:
    assert engine.height_at(TideDataset(), 0.0) is None


def test_height_at_single_sample() -> None:
    dataset = make_dataset(samples=[(1000, 0.7)])
    assert engine.height_at(dataset, 1000) == 0.7
    assert engine.height_at(dataset, 999) is None
    assert engine.height_at(dataset, 1001) is None


def test_height_at_duplicate_timestamps() -> None:
    dataset = make_dataset(samples=[(0, 1.0), (0, 3.0), (100, 5.0), (100, 4.0)])
    # The later of the duplicates brackets the query
    assert engine.height_at(dataset, 0) == 3.0
    assert engine.height_at(dataset, 50) == pytest.approx(4.0)
    assert engine.height_at(dataset, 100) == 4.0


def test_height_at_does_not_mutate_dataset(irregular: TideDataset) -> None:
    before = irregular.samples
    engine.height_at(irregular, HOUR)
    assert irregular.samples == before
    assert [s.timestamp for s in irregular.samples] == [t for t, _ in IRREGULAR_SAMPLES]


#############################################################
# windowed                                                   #
#############################################################


def test_windowed_selects_and_sorts(irregular: TideDataset) -> None:
    got = engine.windowed(irregular, center_time=HOUR, half_width=2 * HOUR)
    assert [s.timestamp for s in got] == [0.0, 0.5 * HOUR, 2 * HOUR]


def test_windowed_is_exactly_the_open_window(irregular: TideDataset) -> None:
    center, half_width = 2 * HOUR, 1.25 * HOUR
    got = engine.windowed(irregular, center, half_width)
    expected = sorted(t for t, _ in IRREGULAR_SAMPLES if abs(t - center) < half_width)
    assert [s.timestamp for s in got] == expected
    assert all(a.timestamp < b.timestamp for a, b in zip(got, got[1:]))


def test_windowed_excludes_boundaries() -> None:
    dataset = make_dataset(samples=[(-10, 1.0), (0, 2.0), (10, 3.0)])
    got = engine.windowed(dataset, center_time=0, half_width=10)
    assert [s.timestamp for s in got] == [0]


def test_windowed_accepts_timedelta(irregular: TideDataset) -> None:
    as_seconds = engine.windowed(irregular, 0.0, 3 * HOUR)
    as_timedelta = engine.windowed(irregular, 0.0, datetime.timedelta(hours=3))
    assert as_seconds == as_timedelta


def test_windowed_default_is_twelve_hours() -> None:
    dataset = make_dataset(
        samples=[(-13 * HOUR, 0.0), (11 * HOUR, 1.0), (12 * HOUR, 2.0)]
    )
    got = engine.windowed(dataset, 0.0)
    assert [s.height for s in got] == [1.0]


def test_windowed_empty() -> None:
    assert engine.windowed(TideDataset(), 0.0) == []
    dataset = make_dataset(samples=[(100 * HOUR, 1.0)])
    assert engine.windowed(dataset, 0.0) == []


#############################################################
# extremes_in_window                                         #
#############################################################


def test_extremes_in_window_skips_past_extreme() -> None:
    dataset = make_dataset(
        extremes=[(-3600, 2.0, "high"), (7200, 0.3, "low")],
    )
    got = engine.extremes_in_window(dataset, 0, 24 * 3600)
    assert len(got) == 1
    assert got[0].timestamp == 7200
    assert got[0].kind == TideCategory.LOW


def test_extremes_in_window_bounds() -> None:
    dataset = make_dataset(
        extremes=[
            (200, 0.1, "low"),
            (100, 1.0, "high"),
            (300, 1.1, "high"),
            (301, 0.2, "low"),
        ],
    )
    got = engine.extremes_in_window(dataset, 100, 300)
    # Start is exclusive, end is inclusive
    assert [e.timestamp for e in got] == [200, 300]


def test_extremes_in_window_open_ended() -> None:
    dataset = make_dataset(
        extremes=[(5e9, 1.0, "high"), (10, 0.1, "low"), (1e6, 0.2, "low")],
    )
    got = engine.extremes_in_window(dataset, 0)
    assert [e.timestamp for e in got] == [10, 1e6, 5e9]
    assert engine.extremes_in_window(dataset, 0, math.inf) == got


#############################################################
# trend                                                      #
#############################################################


def test_trend_rising_before_high() -> None:
    dataset = make_dataset(
        samples=[(-3600, 0.5), (3600, 1.5)],
        extremes=[(1800, 1.6, "high")],
    )
    result = engine.trend(dataset, 0)
    assert result is not None
    assert result.direction == TrendDirection.RISING
    assert result.next_extreme.timestamp == 1800


def test_trend_falling_before_low() -> None:
    dataset = make_dataset(
        extremes=[(-1000, 2.0, "high"), (5000, 0.1, "low"), (9000, 2.1, "high")],
    )
    result = engine.trend(dataset, 0)
    assert result is not None
    assert result.direction == TrendDirection.FALLING


def test_trend_uses_earliest_upcoming_extreme() -> None:
    dataset = make_dataset(
        extremes=[(9000, 0.1, "low"), (4000, 2.0, "high")],
    )
    result = engine.trend(dataset, 0)
    assert result is not None
    assert result.direction == TrendDirection.RISING


def test_trend_ignores_extreme_at_query_time() -> None:
    dataset = make_dataset(extremes=[(0, 2.0, "high"), (6000, 0.2, "low")])
    result = engine.trend(dataset, 0)
    assert result is not None
    assert result.direction == TrendDirection.FALLING


def test_trend_follows_next_extreme_not_slope() -> None:
    # Heights fall toward t=0, but the next extreme is a high
    dataset = make_dataset(
        samples=[(-100, 2.0), (100, 1.0)],
        extremes=[(500, 2.5, "high")],
    )
    result = engine.trend(dataset, 0)
    assert result is not None
    assert result.direction == TrendDirection.RISING


def test_trend_none_without_future_extreme() -> None:
    dataset = make_dataset(extremes=[(-500, 1.0, "high")])
    assert engine.trend(dataset, 0) is None


def test_empty_dataset() -> None:
    dataset = TideDataset()
    assert engine.height_at(dataset, 0) is None
    assert engine.windowed(dataset, 0) == []
    assert engine.extremes_in_window(dataset, 0) == []
    assert engine.trend(dataset, 0) is None


#############################################################
# Frame projections                                          #
#############################################################


def test_samples_frame_sorted(irregular: TideDataset) -> None:
    df = engine.samples_frame(irregular)
    assert df.index.name == "time"
    assert list(df.columns) == ["height"]
    assert df.index.is_monotonic_increasing
    assert df.loc[0.0, "height"] == 0.5
    # The dataset itself keeps arrival order
    assert irregular.samples[0].timestamp == 2 * HOUR


def test_samples_frame_empty() -> None:
    df = engine.samples_frame(TideDataset())
    assert df.empty
    assert df.index.name == "time"


def test_samples_frame_rejects_nan() -> None:
    dataset = make_dataset(samples=[(0, 1.0), (60, float("nan"))])
    with pytest.raises(SchemaError):
        engine.samples_frame(dataset)


def test_extremes_frame() -> None:
    dataset = make_dataset(extremes=[(600, 0.2, "low"), (300, 1.9, "high")])
    df = engine.extremes_frame(dataset)
    expected = pd.DataFrame(
        {"height": [1.9, 0.2], "type": ["high", "low"]},
        index=pd.Index([300.0, 600.0], name="time"),
    )
    # The type column's dtype depends on the pandas version
    pd.testing.assert_frame_equal(df, expected, check_dtype=False)
    assert df["height"].dtype == float


def test_extremes_frame_without_extremes() -> None:
    dataset = make_dataset(samples=[(0, 1.0), (60, 2.0)])
    df = engine.extremes_frame(dataset)
    assert df.empty
    assert list(df.columns) == ["height", "type"]
    assert df.index.name == "time"


def test_samples_frame_rejects_unrepresentable_time() -> None:
    # Construct without validation to reach the frame check directly
    dataset = TideDataset.model_construct(
        samples=(
            TideSample.model_construct(timestamp=0.0, height=1.0),
            TideSample.model_construct(timestamp=1e20, height=2.0),
        )
    )
    with pytest.raises(SchemaError, match="datetime range"):
        engine.samples_frame(dataset)
