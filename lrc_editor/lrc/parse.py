from __future__ import annotations

from dataclasses import dataclass
import re

from .model import LrcFile, LrcLine

_TS_RE = re.compile(r"\[(\d+):(\d{1,2})(?:\.(\d{1,3}))?\]")  # [mm:ss] / [mm:ss.xx] / [mm:ss.xxx]
_TAG_RE = re.compile(r"^\[([A-Za-z]+):(.*)\]\s*$")


@dataclass(frozen=True, slots=True)
class LrcParseStats:
    lines_total: int
    lines_with_timestamps: int
    lines_metadata: int
    lines_ignored: int
    events_total: int


def _ts_to_seconds(m: str, s: str, frac: str | None) -> float:
    seconds = int(m) * 60 + int(s)
    if frac:
        # "5" -> 0.5, "25" -> 0.25, "250" -> 0.25
        seconds += int(frac) / 10 ** len(frac)
    return float(seconds)


def parse_timestamp(token: str) -> float:
    """
    "[01:23.45]" -> 83.45. The fraction is read as a decimal, so "[00:01.5]"
    and "[00:01.500]" are both 1.5. Anything that is not a timestamp gives 0.0.
    """
    m = _TS_RE.search(token)
    if not m:
        return 0.0
    return _ts_to_seconds(m.group(1), m.group(2), m.group(3))


def parse_lrc(text: str) -> LrcFile:
    doc, _stats = parse_lrc_with_stats(text)
    return doc


def parse_lrc_with_stats(text: str) -> tuple[LrcFile, LrcParseStats]:
    """
    Supported:
    - [mm:ss], [mm:ss.xx], [mm:ss.xxx]
    - multiple timestamps per line, all sharing the trailing text
    - tags with a letters-only key: [ar:], [ti:], [al:], [offset:] ...

    Lines are sorted by time; lines with equal times keep their input order.
    Lines with neither a timestamp nor a tag are dropped.
    """
    metadata: dict[str, str] = {}
    lines: list[LrcLine] = []

    total = 0
    lines_with_ts = 0
    lines_meta = 0
    ignored = 0

    # split on "\n" only, so a lone "\r" inside a lyric stays part of it
    for raw in text.split("\n"):
        total += 1
        line = raw.strip()
        if not line:
            ignored += 1
            continue

        ts = list(_TS_RE.finditer(line))
        if not ts:
            tag = _TAG_RE.match(line)
            if tag:
                lines_meta += 1
                metadata[tag.group(1)] = tag.group(2).strip()
            else:
                ignored += 1
            continue

        lines_with_ts += 1
        payload = line[ts[-1].end() :].strip()
        for m in ts:
            lines.append(LrcLine(time=_ts_to_seconds(m.group(1), m.group(2), m.group(3)), text=payload))

    # sorted() is stable, ties keep input order
    lines = sorted(lines, key=lambda ln: ln.time)

    doc = LrcFile(lines=tuple(lines), metadata=metadata)
    stats = LrcParseStats(
        lines_total=total,
        lines_with_timestamps=lines_with_ts,
        lines_metadata=lines_meta,
        lines_ignored=ignored,
        events_total=len(doc.lines),
    )
    return doc, stats
