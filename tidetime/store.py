"""Persistence of the last selected location.

The location is stored as a small JSON document. Reading never fails: a
missing, unreadable or corrupt file simply means no location was saved.
"""

# Standard library imports
import logging
import pathlib
from typing import Optional

# Third-party imports
from pydantic import ValidationError

# Local imports
from tidetime.types import Location


class LocationStore:
    """Saves and loads a single Location to a JSON file."""

    def __init__(self, path: pathlib.Path) -> None:
        self.path = path

    def save(self, location: Location) -> None:
        """Overwrite the stored location.

        Write failures are logged and otherwise ignored; the caller does not
        wait on persistence.
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(location.model_dump_json(), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            logging.warning(f"[{location.id}][store] Failed to save location: {e}")
            return
        logging.info(f"[{location.id}][store] Saved location to {self.path}")

    def load(self) -> Optional[Location]:
        """Return the stored location, or None if there is none or it is unreadable."""
        try:
            raw = self.path.read_text(encoding="utf-8")
            return Location.model_validate_json(raw)
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError, ValidationError) as e:
            logging.warning(
                f"[store] Ignoring unreadable saved location at {self.path}: {e}"
            )
            return None
