from __future__ import annotations

import dataclasses
from dataclasses import dataclass
import itertools
import logging
from typing import Iterable, Iterator

logger = logging.getLogger(__name__)

_ids = itertools.count(1)


def new_marker_id(lyric_index: int) -> str:
    return f"marker-{next(_ids)}-{lyric_index}"


@dataclass(frozen=True, slots=True)
class TimeMarker:
    id: str
    time: float  # seconds
    lyric_index: int


class MarkerStore:
    """
    Markers keyed by id, always kept in ascending time order.

    Interactive `add` gives every lyric line at most one marker; `replace`
    (used by import) may hold several markers for one line.
    """

    def __init__(self, markers: Iterable[TimeMarker] = ()):
        self._by_id: dict[str, TimeMarker] = {}
        self.replace(markers)

    def __iter__(self) -> Iterator[TimeMarker]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, marker_id: object) -> bool:
        return marker_id in self._by_id

    @property
    def markers(self) -> tuple[TimeMarker, ...]:
        return tuple(self._by_id.values())

    def get(self, marker_id: str) -> TimeMarker | None:
        return self._by_id.get(marker_id)

    def claimed_indices(self) -> set[int]:
        return {m.lyric_index for m in self._by_id.values()}

    def _store_sorted(self, markers: Iterable[TimeMarker]) -> None:
        self._by_id = {m.id: m for m in sorted(markers, key=lambda m: m.time)}

    def replace(self, markers: Iterable[TimeMarker]) -> None:
        self._store_sorted(markers)

    def add(self, time: float, line_count: int) -> TimeMarker | None:
        """
        Mark the first line (lowest index) that has no marker yet.
        Returns None when every line is already marked or there are no lines.
        """
        claimed = self.claimed_indices()
        idx = next((i for i in range(line_count) if i not in claimed), None)
        if idx is None:
            return None

        marker = TimeMarker(id=new_marker_id(idx), time=time, lyric_index=idx)
        self._store_sorted([*self._by_id.values(), marker])
        logger.debug("Marker %s placed on line %d at %.3fs", marker.id, idx, time)
        return marker

    def update(self, marker_id: str, time: float) -> bool:
        m = self._by_id.get(marker_id)
        if m is None:
            return False
        self._by_id[marker_id] = dataclasses.replace(m, time=time)
        self._store_sorted(self._by_id.values())
        return True

    def remove(self, marker_id: str) -> bool:
        return self._by_id.pop(marker_id, None) is not None

    def reconcile(self, line_count: int) -> int:
        """Drop markers pointing past the last line. Returns how many were dropped."""
        kept = [m for m in self._by_id.values() if m.lyric_index < line_count]
        dropped = len(self._by_id) - len(kept)
        if dropped:
            self._store_sorted(kept)
            logger.debug("Dropped %d marker(s) beyond line %d", dropped, line_count)
        return dropped

    def apply_delay(self, delta: float) -> None:
        # times never go below zero
        self._store_sorted(dataclasses.replace(m, time=max(0.0, m.time + delta)) for m in self._by_id.values())

    def nudge_all(self, delta: float) -> None:
        self.apply_delay(delta)
