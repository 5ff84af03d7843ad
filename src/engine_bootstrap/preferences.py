"""JSON file backed preference store."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)


class JsonPreferenceStore:
    """Persists user settings as a flat JSON object."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._values: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        try:
            with open(self.path) as f:
                values = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable settings file {self.path}: {e}")
            return {}

        if not isinstance(values, dict):
            logger.warning(f"Ignoring settings file {self.path}: expected a JSON object")
            return {}
        return values

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value
        self._write()

    def _write(self) -> None:
        """Write settings atomically."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

        # Write to temporary file first
        with tempfile.NamedTemporaryFile(
            mode="w", dir=self.path.parent, prefix=f"{self.path.name}.tmp.", delete=False
        ) as tmp_file:
            json.dump(self._values, tmp_file, indent=2, sort_keys=True)
            tmp_file.flush()
            os.fsync(tmp_file.fileno())
            tmp_path = tmp_file.name

        try:
            # Atomic move to final location
            os.replace(tmp_path, self.path)
        except OSError:
            os.unlink(tmp_path)
            raise
        logger.debug(f"Wrote settings to {self.path}")
