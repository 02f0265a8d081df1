"""Command line entry point for rendering scene files."""
from __future__ import annotations

import argparse
import hashlib
import json
import logging
import sys
import time
from pathlib import Path
from typing import Dict, Optional

from .config import RenderConfig, load_config
from .errors import SceneError
from .frames import iter_snapshots
from .parser import parse_file
from .renderer import MapRenderer, output_path_for
from .resolver import Resolver
from .tracks import TrackLibrary, load_track_directory

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render map scene files to images and videos.")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a JSON or YAML configuration file.",
    )
    parser.add_argument("--input", type=Path, default=None, help="Directory holding *.txt scene files.")
    parser.add_argument("--output", type=Path, default=None, help="Directory receiving rendered files.")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Render every scene even if it is unchanged since the last run.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    return parser.parse_args(argv)


def hash_file(path: Path) -> str:
    return hashlib.sha256(Path(path).read_bytes()).hexdigest()


def load_hashes(path: Path) -> Dict[str, str]:
    path = Path(path)
    if not path.exists():
        return {}
    with path.open("r", encoding="utf8") as handle:
        raw = json.load(handle)
    if not isinstance(raw, dict):
        raise ValueError(f"{path} must contain a mapping of file paths to hashes.")
    return {str(key): str(value) for key, value in raw.items()}


def save_hashes(path: Path, hashes: Dict[str, str]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf8") as handle:
        json.dump(hashes, handle, indent=2, sort_keys=True)


def render_scene_file(path: Path, config: RenderConfig, tracks: TrackLibrary) -> Path:
    """Parse, resolve and render a single scene file."""

    scene = parse_file(path, bounds=config.bounds)
    resolver = Resolver(tracks)
    resolved = resolver.resolve(scene)
    snapshots = iter_snapshots(
        resolved,
        config.frame_rate,
        position_path=config.position_path,
        zoom_path=config.zoom_path,
    )
    renderer = MapRenderer(config, resolver)
    return renderer.render(resolved, snapshots, output_path_for(resolved, config.output_dir))


def run(config: RenderConfig, force: bool = False) -> int:
    """Render every scene in the input directory and return the failure count."""

    input_dir = Path(config.input_dir)
    if not input_dir.is_dir():
        raise FileNotFoundError(input_dir)

    tracks = load_track_directory(config.track_dir, config.time_zero)
    hashes = load_hashes(config.hashes_path)
    failures = 0

    try:
        for path in sorted(input_dir.glob("*.txt")):
            key = str(path)
            digest = hash_file(path)
            expected_output = Path(config.output_dir) / path.stem
            unchanged = hashes.get(key) == digest and any(
                expected_output.with_suffix(suffix).exists() for suffix in (".png", ".mp4")
            )
            if unchanged and not force:
                logger.info("skipping unchanged scene %s", path.name)
                continue

            logger.info("rendering %s", path.name)
            start = time.perf_counter()
            try:
                output = render_scene_file(path, config, tracks)
            except SceneError as exc:
                failures += 1
                hashes.pop(key, None)
                logger.error("could not render %s: %s", path.name, exc)
                continue
            except Exception:
                failures += 1
                hashes.pop(key, None)
                logger.exception("could not render %s", path.name)
                continue
            hashes[key] = digest
            logger.info("took %.1fs to render %s -> %s", time.perf_counter() - start, path.name, output)
    finally:
        save_hashes(config.hashes_path, hashes)
    return failures


def main(argv: Optional[list[str]] = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    config = load_config(args.config) if args.config else RenderConfig()
    if args.input:
        config.input_dir = args.input
    if args.output:
        config.output_dir = args.output

    failures = run(config, force=args.force)
    if failures:
        logger.error("%d scene(s) failed", failures)
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()
