"""Pandera DataFrame models for validating tide dataset projections."""

import numpy as np
import pandas as pd
import pandera.pandas as pa
import pandera.typing as pa_typing

from tidetime import util
from tidetime.types import TIDE_TYPE_CATEGORIES


class TideTimeSeriesDataModel(pa.DataFrameModel):
    """Pandera DataFrameModel for a time-sorted tide projection.

    The index holds epoch seconds. Duplicate timestamps are allowed since
    providers occasionally repeat a sample; empty frames are valid.
    """

    time: pa_typing.Index[float] = pa.Field(nullable=False, check_name=True)

    @pa.check("time", error="Index not sorted")
    def check_index_monotonic(cls, idx: pd.Index) -> bool:
        return bool(idx.is_monotonic_increasing)

    @pa.check("time", error="Index must be finite")
    def check_index_finite(cls, idx: pd.Index) -> bool:
        return bool(np.isfinite(idx.to_numpy(dtype=float)).all())

    @pa.check("time", error="Index outside the datetime range")
    def check_index_in_range(cls, idx: pd.Index) -> bool:
        times = idx.to_numpy(dtype=float)
        return bool(
            ((times >= util.MIN_TIMESTAMP) & (times <= util.MAX_TIMESTAMP)).all()
        )

    class Config:
        """Pandera model configuration."""

        strict = True  # Disallow columns not specified in the schema
        # Coercion is disabled unless a field opts in
        coerce = False


class TideHeightDataModel(TideTimeSeriesDataModel):
    height: pa_typing.Series[float] = pa.Field(nullable=False)

    @pa.check("height", error="height must be finite")
    def check_height_finite(cls, series: pd.Series) -> bool:
        return bool(np.isfinite(series.to_numpy(dtype=float)).all())


class TideExtremeDataModel(TideTimeSeriesDataModel):
    height: pa_typing.Series[float] = pa.Field(nullable=False)
    # pandera's str dtype is object on pandas 2 and a string dtype on pandas 3
    type: pa_typing.Series[str] = pa.Field(
        nullable=False, isin=TIDE_TYPE_CATEGORIES, coerce=True
    )

    @pa.check("height", error="height must be finite")
    def check_height_finite(cls, series: pd.Series) -> bool:
        return bool(np.isfinite(series.to_numpy(dtype=float)).all())
