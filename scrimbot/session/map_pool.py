"""Registry of maps that can be voted on."""

import logging
from dataclasses import dataclass, field

from .errors import ConfigurationError, DuplicateMap, MapNotFound, PoolFull

logger = logging.getLogger(__name__)

MAX_MAPS = 26  # One vote token per letter


@dataclass
class MapPool:
    """Insertion-ordered set of map names."""

    maps: list[str] = field(default_factory=list)
    capacity: int = MAX_MAPS

    @classmethod
    def from_names(cls, names: list[str], capacity: int = MAX_MAPS) -> "MapPool":
        """Build a pool from stored names, skipping duplicates and overflow."""
        pool = cls(capacity=capacity)
        for name in names:
            try:
                pool.add(name)
            except ConfigurationError as e:
                logger.warning("Skipping stored map %r: %s", name, type(e).__name__)
        return pool

    def __len__(self) -> int:
        return len(self.maps)

    def __contains__(self, name: str) -> bool:
        return name in self.maps

    def __iter__(self):
        return iter(list(self.maps))

    def add(self, name: str) -> None:
        """
        Append a map to the pool.

        Raises:
            PoolFull: The pool already holds `capacity` maps.
            DuplicateMap: The map is already in the pool.
        """
        if len(self.maps) >= self.capacity:
            raise PoolFull(capacity=self.capacity)
        if name in self.maps:
            raise DuplicateMap(map=name)
        self.maps.append(name)

    def remove(self, name: str) -> None:
        if name not in self.maps:
            raise MapNotFound(map=name)
        self.maps.remove(name)
