from __future__ import annotations

import logging
from typing import Iterable

from lrc_editor.lrc.errors import LrcImportError
from lrc_editor.lrc.export import serialize_lrc
from lrc_editor.lrc.model import LrcFile
from lrc_editor.lrc.parse import parse_lrc
from lrc_editor.lyrics.split import split_lyrics
from lrc_editor.markers.store import MarkerStore, TimeMarker, new_marker_id
from lrc_editor.sync.tracker import resolve_active_line

logger = logging.getLogger(__name__)

DEFAULT_NUDGE_STEP_S = 0.1


def from_import(doc: LrcFile) -> tuple[list[str], list[TimeMarker]]:
    """
    LRC lines -> (lyric lines, markers).

    Identical texts collapse into one lyric line; every LRC line still gets its
    own marker, so a repeated line ends up with several markers.
    """
    positions: dict[str, int] = {}
    for ln in doc.lines:
        positions.setdefault(ln.text, len(positions))
    lines = list(positions)

    markers = [
        TimeMarker(id=new_marker_id(positions[ln.text]), time=ln.time, lyric_index=positions[ln.text])
        for ln in doc.lines
    ]
    markers.sort(key=lambda m: m.time)
    return lines, markers


def to_export(lines: list[str], markers: Iterable[TimeMarker]) -> str:
    times: list[float | None] = [None] * len(lines)
    for m in markers:
        if 0 <= m.lyric_index < len(lines):
            # a later marker for the same line wins
            times[m.lyric_index] = m.time
    return serialize_lrc(lines, times)


def _decode(content: str | bytes) -> str:
    if isinstance(content, bytes):
        try:
            return content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise LrcImportError(f"LRC is not valid UTF-8: {e}") from e
    if not isinstance(content, str):
        raise LrcImportError(f"Expected LRC text, got {type(content).__name__}")
    return content


class LyricTimingEngine:
    """
    Headless editing session: lyric lines, their markers and the staged
    global delay. All mutations go through the methods below.
    """

    def __init__(self, nudge_step_s: float = DEFAULT_NUDGE_STEP_S):
        self.nudge_step_s = nudge_step_s
        self.lyrics_text = ""
        self.lines: list[str] = []
        self.metadata: dict[str, str] = {}
        self.global_delay = 0.0
        self._markers = MarkerStore()

    @property
    def markers(self) -> tuple[TimeMarker, ...]:
        return self._markers.markers

    # Lyrics

    def update_lyrics(self, text: str) -> None:
        """Re-split the full editor text and drop markers of vanished lines."""
        self.lyrics_text = text
        self.lines = split_lyrics(text)
        self._markers.reconcile(len(self.lines))

    # Markers

    def add_marker(self, time: float) -> TimeMarker | None:
        return self._markers.add(time, len(self.lines))

    def update_marker(self, marker_id: str, time: float) -> bool:
        return self._markers.update(marker_id, time)

    def remove_marker(self, marker_id: str) -> bool:
        return self._markers.remove(marker_id)

    def set_global_delay(self, seconds: float) -> None:
        self.global_delay = seconds

    def apply_global_delay(self) -> None:
        if self.global_delay == 0:
            return
        logger.info("Applying %+.3fs delay to %d marker(s)", self.global_delay, len(self._markers))
        self._markers.apply_delay(self.global_delay)
        self.global_delay = 0.0

    def nudge_forward(self) -> None:
        self._markers.nudge_all(self.nudge_step_s)

    def nudge_backward(self) -> None:
        self._markers.nudge_all(-self.nudge_step_s)

    # Playback

    def active_line(self, current_time: float) -> int:
        return resolve_active_line(self._markers, current_time)

    # Import / export

    def import_lrc(self, content: str | bytes) -> bool:
        """
        Replace lyrics and markers with the parsed document.
        On failure the error is logged and the session is left as it was.
        """
        try:
            doc = parse_lrc(_decode(content))
        except LrcImportError as e:
            logger.warning("LRC import failed: %s", e)
            return False

        lines, markers = from_import(doc)
        self.lines = lines
        self.lyrics_text = "\n".join(lines)
        self.metadata = dict(doc.metadata)
        self._markers.replace(markers)
        logger.info("Imported %d line(s), %d marker(s)", len(lines), len(markers))
        return True

    def generate_lrc(self) -> str:
        return to_export(self.lines, self._markers)
