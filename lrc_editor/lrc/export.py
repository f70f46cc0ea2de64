from __future__ import annotations

import json
import math
from typing import Sequence

from .model import LrcFile

_ZERO_TS = "[00:00.00]"


def _centiseconds(seconds: float) -> int:
    # tolerance keeps 0.29 (28.999... cs in binary) on 29
    return math.floor(seconds * 100 + 1e-6)


def format_timestamp(seconds: float) -> str:
    """
    Seconds -> "[mm:ss.xx]". Hundredths are truncated, not rounded.
    Negative, NaN and infinite values give "[00:00.00]".
    """
    if not math.isfinite(seconds) or seconds < 0:
        return _ZERO_TS
    cs = _centiseconds(seconds)
    m, rem = divmod(cs, 6_000)
    s, cs2 = divmod(rem, 100)
    return f"[{m:02d}:{s:02d}.{cs2:02d}]"


def serialize_lrc(lines: Sequence[str], times: Sequence[float | None]) -> str:
    """
    One "[mm:ss.xx]text" row per line that has a time, in line order.
    Lines without a time and empty lines are skipped.
    """
    out: list[str] = []
    for line, t in zip(lines, times):
        if t is not None and line:
            out.append(f"{format_timestamp(t)}{line}\n")
    return "".join(out)


def export_lrc(doc: LrcFile, include_tags: bool = True) -> str:
    out: list[str] = []
    if include_tags and doc.metadata:
        for k in sorted(doc.metadata.keys()):
            out.append(f"[{k}:{doc.metadata[k]}]")

    for ln in doc.lines:
        out.append(f"{format_timestamp(ln.time)}{ln.text}")
    return "\n".join(out) + ("\n" if out else "")


def export_json(doc: LrcFile) -> str:
    return json.dumps(
        {
            "metadata": doc.metadata,
            "lines": [{"time": ln.time, "text": ln.text} for ln in doc.lines],
        },
        ensure_ascii=False,
        indent=2,
    )


def _fmt_srt_time(seconds: float) -> str:
    # HH:MM:SS,mmm
    ms = max(round(seconds * 1000), 0)
    h, rem = divmod(ms, 3_600_000)
    m, rem = divmod(rem, 60_000)
    s, ms2 = divmod(rem, 1_000)
    return f"{h:02d}:{m:02d}:{s:02d},{ms2:03d}"


def export_srt(doc: LrcFile, last_line_duration: float = 2.0) -> str:
    """
    End time is next start time, last line ends at +last_line_duration.
    """
    lines = doc.lines
    if not lines:
        return ""
    out: list[str] = []
    for i, ln in enumerate(lines, start=1):
        start = ln.time
        if i < len(lines):
            end = max(lines[i].time, start + 0.001)
        else:
            end = start + last_line_duration
        out.append(str(i))
        out.append(f"{_fmt_srt_time(start)} --> {_fmt_srt_time(end)}")
        out.append(ln.text)
        out.append("")
    return "\n".join(out)
