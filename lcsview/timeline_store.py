"""
timeline_store.py — Ordered, seekable timeline of iteration snapshots.

The store drains an importer once, linking every snapshot to its
chronological neighbours, and then answers first/last and closest-iteration
lookups. Snapshots are expected in ascending iteration order; the store
relies on that order for its binary search and does not re-check it.
"""

import logging
from bisect import bisect_left
from operator import attrgetter
from typing import Optional

import numpy as np

from lcsview.config import ViewerConfig
from lcsview.errors import LogOpenError, TimelineStoreError
from lcsview.snapshot import Snapshot

logger = logging.getLogger(__name__)

_iteration_of = attrgetter("iteration")


class TimelineStore:
    """All snapshots of one experiment log, in iteration order."""

    def __init__(self, source, config: ViewerConfig | None = None):
        self.source = source            # path, or an open text stream
        self.config = config or ViewerConfig()
        self._snapshots: list[Snapshot] = []
        self._positions: dict[int, int] = {}   # id(snapshot) -> index
        self._loaded = False

    def __len__(self) -> int:
        return len(self._snapshots)

    def __iter__(self):
        return iter(self._snapshots)

    @property
    def num_snapshots(self) -> int:
        return len(self._snapshots)

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def source_name(self) -> str:
        return getattr(self.source, "name", None) or str(self.source)

    # -- Ingestion -----------------------------------------------------------

    def load(self) -> int:
        """Read the whole log and return the number of snapshots stored.

        Raises LogOpenError if the source cannot be opened; the store then
        stays empty. A store can only be loaded once.
        """
        if self._loaded:
            raise TimelineStoreError(
                f"{self.source_name} is already loaded; create a new store to reload"
            )
        importer = self.config.create_importer()

        if hasattr(self.source, "readline"):
            self._read_all(importer, self.source)
        else:
            try:
                stream = open(self.source, "r", encoding=self.config.encoding,
                              errors="replace")
            except (OSError, TypeError, ValueError) as e:
                logger.error("Could not access log file: %s (%s)", self.source, e)
                raise LogOpenError(f"Could not access log file: {self.source}") from e
            with stream:
                self._read_all(importer, stream)

        self._loaded = True
        logger.info("Loaded %d iterations from %s", len(self._snapshots),
                    self.source_name)
        return len(self._snapshots)

    def _read_all(self, importer, stream):
        snapshot = importer.next_snapshot(stream)
        while snapshot is not None:
            self._append(snapshot)
            snapshot = importer.next_snapshot(stream)

    def _append(self, snapshot: Snapshot):
        """Store a snapshot and link it behind the current last one."""
        if self._snapshots:
            last = self._snapshots[-1]
            last.next = snapshot
            snapshot.previous = last
        else:
            snapshot.previous = snapshot
        snapshot.next = snapshot
        self._positions[id(snapshot)] = len(self._snapshots)
        self._snapshots.append(snapshot)

    # -- Access --------------------------------------------------------------

    def get_first_element(self) -> Optional[Snapshot]:
        """Snapshot of the first iteration, or None if the store is empty."""
        if not self._snapshots:
            return None
        return self._snapshots[0]

    def get_last_element(self) -> Optional[Snapshot]:
        """Snapshot of the last iteration, or None if the store is empty."""
        if not self._snapshots:
            return None
        return self._snapshots[-1]

    def get_snapshot(self, index: int) -> Optional[Snapshot]:
        """Snapshot by position (0-based), or None if out of range."""
        if 0 <= index < len(self._snapshots):
            return self._snapshots[index]
        return None

    def position_of(self, snapshot: Snapshot) -> Optional[int]:
        """Index of a stored snapshot, or None if it is not in this store."""
        return self._positions.get(id(snapshot))

    def iterations(self) -> np.ndarray:
        """Iteration numbers of all snapshots, in store order."""
        return np.array([s.iteration for s in self._snapshots], dtype=np.float64)

    def search_element(self, iteration: float) -> Optional[Snapshot]:
        """Snapshot whose iteration number is closest to ``iteration``.

        Targets outside the stored range return the first or last snapshot.
        Between two stored iterations, the lower one is returned only if it
        is strictly closer; equal distances return the upper one.
        Returns None if the store is empty.
        """
        data = self._snapshots
        if not data:
            return None

        if data[0].iteration >= iteration:
            return data[0]
        if data[-1].iteration <= iteration:
            return data[-1]

        # first < iteration < last, so 1 <= i <= len(data) - 1
        i = bisect_left(data, iteration, key=_iteration_of)
        upper = data[i]
        lower = data[i - 1]
        if iteration - lower.iteration < upper.iteration - iteration:
            return lower
        return upper
