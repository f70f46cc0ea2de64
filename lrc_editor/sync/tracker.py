from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from typing import Iterable

from lrc_editor.markers.store import TimeMarker


def resolve_active_line(markers: Iterable[TimeMarker], current_time: float) -> int:
    """
    Line index of the last marker (by time) not after current_time, -1 if none.
    """
    ordered = sorted(markers, key=lambda m: m.time)
    times = [m.time for m in ordered]
    i = bisect_right(times, current_time) - 1
    return ordered[i].lyric_index if i >= 0 else -1


@dataclass(slots=True)
class ActiveLineTracker:
    """
    Held by whoever drives the playback clock: reports the active line only
    when it changes. Repeated or backward times are ordinary inputs.
    """

    last_idx: int = -1

    def changed_index(self, markers: Iterable[TimeMarker], current_time: float) -> int | None:
        i = resolve_active_line(markers, current_time)
        if i != self.last_idx:
            self.last_idx = i
            return i
        return None
