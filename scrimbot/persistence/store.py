"""JSON file persistence for player profiles and the map pool."""

import json
import logging
from pathlib import Path

from ..session.errors import PersistenceError

logger = logging.getLogger(__name__)

RIOT_IDS = "riot_ids"
TEAM_NAMES = "teamnames"
MAPS = "maps"
CREDENTIALS = "credentials"


class JsonStore:
    """
    Stores id -> string tables and the map list as JSON files.

    Each table is one file in the data directory (`<name>.json`). Tables are
    read once at startup and rewritten in full after every change. A missing
    file is an empty table.
    """

    def __init__(self, data_dir: str | Path = "."):
        self.data_dir = Path(data_dir)

    def _path(self, name: str) -> Path:
        return self.data_dir / f"{name}.json"

    def _read(self, name: str, default):
        path = self._path(name)
        if not path.exists():
            return default
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Error reading %s: %s", path, e)
            raise PersistenceError(table=name) from e

    def _write(self, name: str, data) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self._path(name)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
            tmp_path.replace(path)
        except OSError as e:
            logger.error("Error writing %s: %s", path, e)
            raise PersistenceError(table=name) from e

    def load_cache(self, name: str) -> dict[str, str]:
        """Load an id -> string table."""
        data = self._read(name, {})
        return {str(key): str(value) for key, value in data.items()}

    def save_cache(self, name: str, cache: dict[str, str]) -> None:
        """Rewrite an id -> string table."""
        self._write(name, dict(cache))

    def load_maps(self) -> list[str]:
        """Load the map pool, in registry order."""
        return [str(name) for name in self._read(MAPS, [])]

    def save_maps(self, maps: list[str]) -> None:
        self._write(MAPS, list(maps))
