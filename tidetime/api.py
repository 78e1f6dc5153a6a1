"""API handlers for tidetime.

This module contains the FastAPI route handlers and the functions that render
an AppState snapshot into API response models.
"""

# Standard library imports
import logging
from typing import Any, Dict, List, Optional

# Third-party imports
import fastapi
from fastapi import HTTPException, Query

# Local imports
from tidetime import config as config_lib
from tidetime import util
from tidetime.api_types import (
    ApiTideExtreme,
    AppStatus,
    Attribution,
    CurrentTideInfo,
    HeightRange,
    LocationInfo,
    TidePoint,
    TideView,
)
from tidetime.core import engine, queries
from tidetime.core.manager import AppState, TideStateManager
from tidetime.types import Location, TideExtreme, TideSample

# The tide state manager is stored in app.state.tide_manager


def location_info(location: Location) -> LocationInfo:
    return LocationInfo(
        id=location.id, name=location.name, lat=location.lat, lon=location.lon
    )


def tide_point(sample: TideSample) -> TidePoint:
    return TidePoint(
        time=util.epoch_to_iso(sample.timestamp),
        timestamp=sample.timestamp,
        height=sample.height,
    )


def api_tide_extreme(extreme: TideExtreme) -> ApiTideExtreme:
    return ApiTideExtreme(
        time=util.epoch_to_iso(extreme.timestamp),
        timestamp=extreme.timestamp,
        height=extreme.height,
        type=extreme.kind.value,
    )


def build_tide_view(
    state: AppState, now: float, cfg: config_lib.AppConfig
) -> TideView:
    """Render a state snapshot into the tide view for a given instant.

    Args:
        state: Snapshot holding a location and a loaded dataset
        now: Reference instant (epoch seconds)
        cfg: Configuration providing the window and horizon sizes

    Returns:
        The tide view

    Raises:
        ValueError: If the snapshot has no location or no dataset
    """
    if state.location is None or state.dataset is None:
        raise ValueError("State has no tide data to render")
    dataset = state.dataset

    curve = engine.windowed(dataset, now, cfg.window_half_width)
    low, high = queries.height_range(curve)
    current = queries.current_tide(dataset, now)

    return TideView(
        location=location_info(state.location),
        now=util.epoch_to_iso(now),
        curve=[tide_point(s) for s in curve],
        height_range=HeightRange(min=low, max=high),
        current=CurrentTideInfo(
            time=util.epoch_to_iso(now),
            height=current.height,
            trend=current.trend.direction.value if current.trend else None,
            next_extreme=(
                api_tide_extreme(current.trend.next_extreme) if current.trend else None
            ),
        ),
        graph_extremes=[
            api_tide_extreme(e)
            for e in queries.graph_extremes(dataset, now, cfg.window_half_width)
        ],
        next_extremes=[
            api_tide_extreme(e)
            for e in queries.next_extremes(dataset, now, cfg.extremes_horizon)
        ],
        attribution=Attribution(
            atlas=dataset.atlas,
            copyright=dataset.copyright,
            station=dataset.station,
            datum=dataset.datum,
            response_lat=dataset.response_lat,
            response_lon=dataset.response_lon,
        ),
    )


def build_status(state: AppState) -> AppStatus:
    """Summarize a state snapshot."""
    dataset = state.dataset
    samples_oldest: Optional[str] = None
    samples_newest: Optional[str] = None
    if dataset is not None and dataset.samples:
        timestamps = [s.timestamp for s in dataset.samples]
        samples_oldest = util.epoch_to_iso(min(timestamps))
        samples_newest = util.epoch_to_iso(max(timestamps))

    return AppStatus(
        location=location_info(state.location) if state.location else None,
        loading=state.loading,
        ready=state.ready,
        error=state.error,
        error_type=state.error_type,
        fetch_timestamp=state.fetched_at,
        sample_count=len(dataset.samples) if dataset else 0,
        extreme_count=len(dataset.extremes) if dataset else 0,
        samples_oldest=samples_oldest,
        samples_newest=samples_newest,
    )


def register_routes(app: fastapi.FastAPI) -> None:
    """Register API routes with the FastAPI application.

    Expects app.state.tide_manager to hold a TideStateManager. The
    configuration is read from app.state.config if present.
    """

    def get_manager() -> TideStateManager:
        manager: Optional[TideStateManager] = getattr(app.state, "tide_manager", None)
        if manager is None:
            raise HTTPException(status_code=503, detail="Service not initialized")
        return manager

    def get_config() -> config_lib.AppConfig:
        cfg: Optional[config_lib.AppConfig] = getattr(app.state, "config", None)
        return cfg if cfg is not None else config_lib.get()

    def loaded_state() -> AppState:
        """Return the current snapshot, raising the matching HTTP error if no data."""
        state = get_manager().state
        if state.location is None:
            raise HTTPException(status_code=404, detail="No location selected")
        if state.error is not None:
            logging.warning(
                f"[{state.location.id}][api] Tide data unavailable: {state.error}"
            )
            raise HTTPException(status_code=503, detail=state.error)
        if state.dataset is None:
            raise HTTPException(status_code=503, detail="Tide data not yet loaded")
        return state

    @app.get("/api/location")
    async def selected_location() -> LocationInfo:
        """Return the currently selected location."""
        state = get_manager().state
        if state.location is None:
            raise HTTPException(status_code=404, detail="No location selected")
        return location_info(state.location)

    @app.post("/api/location")
    async def select_location(location: LocationInfo) -> AppStatus:
        """Select a location and start fetching its tides."""
        state = get_manager().on_location_selected(Location(**location.model_dump()))
        return build_status(state)

    @app.post("/api/refresh")
    async def refresh() -> AppStatus:
        """Re-fetch tides for the selected location."""
        try:
            state = get_manager().retry()
        except ValueError as e:
            raise HTTPException(status_code=404, detail=str(e))
        return build_status(state)

    @app.get("/api/tides")
    async def tide_view(
        now: Optional[float] = Query(
            None, ge=util.MIN_TIMESTAMP, le=util.MAX_TIMESTAMP, allow_inf_nan=False
        ),
    ) -> TideView:
        """Return the tide view for the selected location.

        Args:
            now: Reference time in epoch seconds, defaults to the current time
        """
        state = loaded_state()
        reference = util.epoch_now() if now is None else now
        return build_tide_view(state, reference, get_config())

    @app.get("/api/tides/data")
    async def tide_data() -> Dict[str, List[Dict[str, Any]]]:
        """Return the full dataset as time-sorted records."""
        state = loaded_state()
        assert state.dataset is not None
        try:
            heights = engine.samples_frame(state.dataset).reset_index()
            extremes = engine.extremes_frame(state.dataset).reset_index()
            return {
                "heights": heights.to_dict(orient="records"),
                "extremes": extremes.to_dict(orient="records"),
            }
        except Exception:
            logging.exception("[api] Error exporting tide data")
            raise HTTPException(
                status_code=500, detail="Internal server error exporting tide data"
            )

    @app.get("/api/status")
    async def status() -> AppStatus:
        """Return a summary of the application state."""
        return build_status(get_manager().state)

    @app.get("/api/ready", status_code=200)
    async def ready() -> bool:
        """Return true once tide data is loaded, otherwise respond 503."""
        state = get_manager().state
        if not state.ready:
            raise HTTPException(status_code=503, detail="Tide data not ready")
        return True
