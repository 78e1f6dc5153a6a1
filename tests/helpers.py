"""Utility functions for tests."""

import json
from typing import Any, Iterable, Tuple

from tidetime.types import TideCategory, TideDataset, TideExtreme, TideSample


def assert_json_serializable(obj: Any) -> None:
    """Assert that an object is JSON serializable.

    Args:
        obj: The object to check for JSON serializability.

    Raises:
        AssertionError: If the object is not JSON serializable.
    """
    try:
        json.dumps(obj)
    except (TypeError, ValueError) as e:
        raise AssertionError(f"Object is not JSON serializable: {e}") from e


def make_dataset(
    samples: Iterable[Tuple[float, float]] = (),
    extremes: Iterable[Tuple[float, float, str]] = (),
    **metadata: Any,
) -> TideDataset:
    """Build a TideDataset from (time, height) and (time, height, type) tuples.

    Items are kept in the order given.
    """
    return TideDataset(
        samples=tuple(TideSample(timestamp=t, height=h) for t, h in samples),
        extremes=tuple(
            TideExtreme(timestamp=t, height=h, kind=TideCategory(kind))
            for t, h, kind in extremes
        ),
        **metadata,
    )
