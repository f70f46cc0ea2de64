from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class LrcLine:
    time: float  # seconds
    text: str


@dataclass(frozen=True, slots=True)
class LrcFile:
    lines: tuple[LrcLine, ...]
    metadata: dict[str, str] = field(default_factory=dict)
