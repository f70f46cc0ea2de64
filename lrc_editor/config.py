from __future__ import annotations

import json
from dataclasses import dataclass
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("lrc", "srt", "json")


def _config_dir() -> Path:
    xdg = os.getenv("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "lrc-editor"
    return Path.home() / ".config" / "lrc-editor"


def _config_file() -> Path:
    return _config_dir() / "config.json"


@dataclass(frozen=True)
class EditorConfig:
    config_dir: Path

    # Editing
    nudge_step_s: float

    # Export
    export_format: str
    srt_last_line_s: float


def _read_config_file(cfg_path: Path) -> dict[str, Any]:
    if not cfg_path.exists():
        return {}
    try:
        data = json.loads(cfg_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable config %s: %s", cfg_path, e)
        return {}
    return data if isinstance(data, dict) else {}


def load_config() -> EditorConfig:
    # Priority: config.json → LRC_EDITOR_* env → defaults
    config_dir = _config_dir()
    data = _read_config_file(config_dir / "config.json")

    def _pick(key: str, env: str, default: str) -> str:
        if data.get(key) is not None:
            return str(data[key])
        return os.getenv(env) or default

    export_format = _pick("export_format", "LRC_EDITOR_EXPORT_FORMAT", "lrc").lower()
    if export_format not in EXPORT_FORMATS:
        logger.info("Unknown export format '%s' in config, using lrc", export_format)
        export_format = "lrc"

    def _pick_float(key: str, env: str, default: float) -> float:
        raw = _pick(key, env, str(default))
        try:
            return float(raw)
        except ValueError:
            logger.info("Invalid %s '%s' in config, using %s", key, raw, default)
            return default

    return EditorConfig(
        config_dir=config_dir,
        nudge_step_s=_pick_float("nudge_step_s", "LRC_EDITOR_NUDGE_STEP", 0.1),
        export_format=export_format,
        srt_last_line_s=_pick_float("srt_last_line_s", "LRC_EDITOR_SRT_LAST_LINE", 2.0),
    )


def save_config(**values: Any) -> None:
    cfg_path = _config_file()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    data = _read_config_file(cfg_path)
    data.update(values)
    cfg_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
