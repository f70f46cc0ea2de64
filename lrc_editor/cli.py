from __future__ import annotations

import logging
from pathlib import Path

import typer

from lrc_editor.config import EXPORT_FORMATS, load_config, save_config
from lrc_editor.engine import LyricTimingEngine
from lrc_editor.logging_setup import setup_logging
from lrc_editor.lrc.export import export_json, export_lrc, export_srt
from lrc_editor.lrc.model import LrcFile
from lrc_editor.lrc.parse import parse_lrc, parse_lrc_with_stats
from lrc_editor.sync.tracker import ActiveLineTracker

logger = logging.getLogger(__name__)

app = typer.Typer(no_args_is_help=True, add_completion=False)


@app.callback()
def _main(debug: bool = typer.Option(False, "--debug", help="Enable debug logging")):
    setup_logging(debug)


def _require_lrc(path: Path) -> None:
    if path.suffix.lower() != ".lrc":
        typer.echo(f"Error: not an .lrc file: {path}", err=True)
        raise typer.Exit(code=1)


def _load_engine(lrc_path: Path) -> LyricTimingEngine:
    _require_lrc(lrc_path)
    engine = LyricTimingEngine(nudge_step_s=load_config().nudge_step_s)
    if not engine.import_lrc(lrc_path.read_bytes()):
        typer.echo(f"Error: could not import {lrc_path}", err=True)
        raise typer.Exit(code=1)
    return engine


def _write(data: str, out: Path | None) -> None:
    if out:
        out.write_text(data, encoding="utf-8")
        logger.info("Wrote %s", out)
    else:
        typer.echo(data, nl=False)


@app.command()
def parse(lrc_path: Path):
    """Parse LRC and print stats."""
    _require_lrc(lrc_path)
    try:
        text = lrc_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        typer.echo(f"Error: {lrc_path} is not valid UTF-8: {e}", err=True)
        raise typer.Exit(code=1)
    doc, stats = parse_lrc_with_stats(text)
    typer.echo(f"lines_total={stats.lines_total}")
    typer.echo(f"lines_with_timestamps={stats.lines_with_timestamps}")
    typer.echo(f"lines_metadata={stats.lines_metadata}")
    typer.echo(f"lines_ignored={stats.lines_ignored}")
    typer.echo(f"events_total={stats.events_total}")
    typer.echo(f"metadata={doc.metadata}")


@app.command()
def export(
    lrc_path: Path,
    fmt: str | None = typer.Option(None, "--format", help="lrc|srt|json (default from config)"),
    tags: bool = typer.Option(False, "--tags", help="lrc only: write metadata tags and order lines by time"),
    out: Path | None = typer.Option(None, "--out", help="Output file (default: stdout)"),
):
    """Export LRC to LRC/SRT/JSON."""
    cfg = load_config()
    fmt_l = (fmt or cfg.export_format).lower()
    if fmt_l not in EXPORT_FORMATS:
        raise typer.BadParameter("format must be one of: lrc, srt, json")

    engine = _load_engine(lrc_path)
    if fmt_l == "lrc" and not tags:
        data = engine.generate_lrc()
    else:
        # tagged lrc, srt and json follow the regenerated LRC, so they see the same lines
        doc = parse_lrc(engine.generate_lrc())
        doc = LrcFile(lines=doc.lines, metadata=engine.metadata)
        if fmt_l == "lrc":
            data = export_lrc(doc)
        elif fmt_l == "json":
            data = export_json(doc)
        else:
            data = export_srt(doc, last_line_duration=cfg.srt_last_line_s)
    _write(data, out)


@app.command()
def shift(
    lrc_path: Path,
    delay: float = typer.Option(..., "--delay", help="Seconds to add to every timestamp (may be negative)"),
    out: Path | None = typer.Option(None, "--out", help="Output file (default: stdout)"),
):
    """Apply a global delay to every timestamp."""
    engine = _load_engine(lrc_path)
    engine.set_global_delay(delay)
    engine.apply_global_delay()
    _write(engine.generate_lrc(), out)


@app.command()
def nudge(
    lrc_path: Path,
    steps: int = typer.Option(1, "--steps", help="Number of nudge steps, negative to move earlier"),
    out: Path | None = typer.Option(None, "--out", help="Output file (default: stdout)"),
):
    """Nudge every timestamp by the configured step."""
    engine = _load_engine(lrc_path)
    for _ in range(abs(steps)):
        if steps > 0:
            engine.nudge_forward()
        else:
            engine.nudge_backward()
    _write(engine.generate_lrc(), out)


@app.command()
def stamp(
    lyrics_path: Path,
    times: list[float] = typer.Argument(..., help="Marker times in seconds, one per line in order"),
    out: Path | None = typer.Option(None, "--out", help="Output file (default: stdout)"),
):
    """Time a plain-text lyrics file, one marker per given time."""
    engine = LyricTimingEngine(nudge_step_s=load_config().nudge_step_s)
    engine.update_lyrics(lyrics_path.read_text(encoding="utf-8"))
    for t in times:
        if engine.add_marker(t) is None:
            typer.echo(f"Warning: no unmarked line left for {t}s", err=True)
    _write(engine.generate_lrc(), out)


@app.command()
def active(
    lrc_path: Path,
    at: list[float] = typer.Option(..., "--at", help="Playback time in seconds (repeatable)"),
):
    """Print the active line for each playback time, skipping repeats."""
    engine = _load_engine(lrc_path)
    tracker = ActiveLineTracker()
    for t in at:
        idx = tracker.changed_index(engine.markers, t)
        if idx is None:
            continue
        text = engine.lines[idx] if idx >= 0 else ""
        typer.echo(f"{t:g}\t{idx}\t{text}")


@app.command()
def config(
    nudge_step: float | None = typer.Option(None, "--nudge-step", help="Nudge step in seconds"),
    export_format: str | None = typer.Option(None, "--export-format", help="Default export format: lrc|srt|json"),
    srt_last_line: float | None = typer.Option(None, "--srt-last-line", help="Duration of the last SRT cue in seconds"),
):
    """Show or change saved settings."""
    values: dict[str, object] = {}
    if nudge_step is not None:
        values["nudge_step_s"] = nudge_step
    if export_format is not None:
        if export_format.lower() not in EXPORT_FORMATS:
            raise typer.BadParameter("export format must be one of: lrc, srt, json")
        values["export_format"] = export_format.lower()
    if srt_last_line is not None:
        values["srt_last_line_s"] = srt_last_line
    if values:
        save_config(**values)

    cfg = load_config()
    typer.echo(f"config_dir={cfg.config_dir}")
    typer.echo(f"nudge_step_s={cfg.nudge_step_s}")
    typer.echo(f"export_format={cfg.export_format}")
    typer.echo(f"srt_last_line_s={cfg.srt_last_line_s}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
