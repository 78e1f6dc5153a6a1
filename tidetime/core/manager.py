"""Application state management for tidetime.

The TideStateManager owns the selected location and the tide dataset fetched
for it. State is exposed as immutable AppState snapshots; every change
(selecting a location, a fetch completing or failing) replaces the snapshot
wholesale.

Only one fetch is ever in flight. Selecting a location cancels the previous
fetch task and bumps the snapshot generation, and a fetch whose generation is
no longer current discards its result.
"""

# Standard library imports
import asyncio
import contextlib
import datetime
import logging
from typing import Optional

# Third-party imports
from pydantic import BaseModel

# Local imports
from tidetime.clients.worldtides import TideProviderError, WorldTidesApi
from tidetime.store import LocationStore
from tidetime.types import Location, TideDataset
from tidetime.util import utc_now


class AppState(BaseModel, frozen=True):
    """Immutable snapshot of what the tide view shows."""

    location: Optional[Location] = None
    dataset: Optional[TideDataset] = None
    loading: bool = False
    # Human-readable message of the last fetch failure
    error: Optional[str] = None
    # Exception class name of the last fetch failure (e.g. "RateLimitedError")
    error_type: Optional[str] = None
    # Incremented on every fetch started; identifies the owning selection
    generation: int = 0
    fetched_at: Optional[datetime.datetime] = None  # naive UTC

    @property
    def ready(self) -> bool:
        return self.dataset is not None


class TideStateManager:
    """Turns location selections into tide state snapshots."""

    def __init__(self, client: WorldTidesApi, store: LocationStore) -> None:
        """Initialize the manager.

        Args:
            client: Provider used to fetch tide datasets
            store: Persistence for the last selected location
        """
        self.client = client
        self.store = store
        self._state = AppState()
        self._fetch_task: asyncio.Task[None] | None = None

    @property
    def state(self) -> AppState:
        return self._state

    def log(self, message: str, level: int = logging.INFO) -> None:
        location = self._state.location
        prefix = f"[{location.id}]" if location else "[-]"
        logging.log(level, f"{prefix}[manager] {message}")

    def restore(self) -> AppState:
        """Select the saved location, if any, and start fetching its tides."""
        location = self.store.load()
        if location is None:
            self.log("No saved location")
            return self._state
        self.log(f"Restoring saved location {location.name}")
        return self._start_fetch(location)

    def on_location_selected(self, location: Location) -> AppState:
        """Handle a new location selection.

        Saves the location, discards the current dataset and starts a fetch.
        Must be called from within a running event loop.

        Returns:
            The new (loading) snapshot
        """
        self.store.save(location)
        return self._start_fetch(location)

    def retry(self) -> AppState:
        """Re-fetch tides for the current location.

        Raises:
            ValueError: If no location is selected
        """
        location = self._state.location
        if location is None:
            raise ValueError("No location selected")
        self.log("Manual retry requested")
        return self._start_fetch(location)

    def _start_fetch(self, location: Location) -> AppState:
        self._cancel_fetch()
        generation = self._state.generation + 1
        self._state = AppState(location=location, loading=True, generation=generation)
        self._fetch_task = asyncio.create_task(
            self._fetch(location, generation), name=f"fetch-tides-{location.id}"
        )
        return self._state

    def _cancel_fetch(self) -> None:
        if self._fetch_task is not None and not self._fetch_task.done():
            self._fetch_task.cancel()
        self._fetch_task = None

    def _is_current(self, generation: int) -> bool:
        return self._state.generation == generation

    async def _fetch(self, location: Location, generation: int) -> None:
        try:
            dataset = await self.client.fetch_tides(
                location.lat, location.lon, location_code=location.id
            )
        except TideProviderError as e:
            if not self._is_current(generation):
                self.log(f"Dropping stale fetch error: {e}", logging.DEBUG)
                return
            self.log(f"Tide fetch failed: {e.__class__.__name__}: {e}", logging.WARNING)
            self._state = self._state.model_copy(
                update={
                    "loading": False,
                    "error": e.message,
                    "error_type": e.__class__.__name__,
                }
            )
            return
        except Exception as e:
            logging.exception(f"[{location.id}][manager] Unexpected fetch failure")
            if self._is_current(generation):
                self._state = self._state.model_copy(
                    update={
                        "loading": False,
                        "error": f"Unexpected error: {e}",
                        "error_type": e.__class__.__name__,
                    }
                )
            return

        if not self._is_current(generation):
            self.log("Dropping stale tide dataset", logging.DEBUG)
            return
        self._state = self._state.model_copy(
            update={"dataset": dataset, "loading": False, "fetched_at": utc_now()}
        )
        self.log(f"Loaded {len(dataset.samples)} tide heights")

    async def wait_for_fetch(self, timeout: float | None = None) -> AppState:
        """Wait for the in-flight fetch, if any, and return the resulting snapshot.

        Raises:
            asyncio.TimeoutError: If the fetch does not finish within timeout
        """
        task = self._fetch_task
        if task is not None and not task.done():
            await asyncio.wait_for(asyncio.shield(task), timeout=timeout)
        return self._state

    async def stop(self) -> None:
        """Cancel any in-flight fetch and wait for it to unwind."""
        task = self._fetch_task
        self._cancel_fetch()
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task
