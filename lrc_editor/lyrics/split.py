from __future__ import annotations


def split_lyrics(text: str) -> list[str]:
    """Raw editor text -> non-empty, stripped lines in order."""
    return [ln.strip() for ln in text.split("\n") if ln.strip()]
