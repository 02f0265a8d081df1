"""Configuration loading utilities for the map renderer."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple
import json

import yaml

from .timeline import POSITION_PATHS, ZOOM_PATHS
from .tracks import TIME_FORMAT


DEFAULT_TIME_ZERO = "2025-04-14T00:00:00"


@dataclass
class Checkpoint:
    """A fixed landmark drawn when a scene enables checkpoints."""

    name: str
    latitude: float
    longitude: float

    @staticmethod
    def from_mapping(data: Dict[str, Any]) -> "Checkpoint":
        try:
            name = data["name"]
            latitude = float(data["lat"] if "lat" in data else data["latitude"])
            longitude = float(data["lon"] if "lon" in data else data["longitude"])
        except KeyError as exc:
            raise ValueError(f"Checkpoint configuration missing field: {exc.args[0]}") from exc
        return Checkpoint(name=name, latitude=latitude, longitude=longitude)


def _default_checkpoints() -> List[Checkpoint]:
    return [
        Checkpoint("Grenoble", 45.242976, 5.644920),
        Checkpoint("Avignon", 43.921494, 4.779126),
        Checkpoint("Perpignan", 42.647380, 2.894101),
        Checkpoint("Barcelona", 41.37875146251132, 2.1690145515198394),
    ]


@dataclass
class RenderConfig:
    """Top-level configuration for a rendering run."""

    input_dir: Path = Path("res/in")
    output_dir: Path = Path("res/out")
    track_dir: Path = Path("res/tracks")
    pins_dir: Path = Path("res/pins")
    hashes_path: Path = Path("res/hashes.json")
    width: int = 3840
    height: int = 2160
    frame_rate: float = 30.0
    tile_size: int = 4096
    time_zero: datetime = field(default_factory=lambda: datetime.strptime(DEFAULT_TIME_ZERO, TIME_FORMAT))
    position_path: str = "planar"
    zoom_path: str = "linear"
    bounds: Optional[Tuple[float, float, float, float]] = None
    checkpoints: List[Checkpoint] = field(default_factory=_default_checkpoints)

    @staticmethod
    def from_mapping(data: Dict[str, Any]) -> "RenderConfig":
        defaults = RenderConfig()

        checkpoints = defaults.checkpoints
        if "checkpoints" in data:
            checkpoints_data = data.get("checkpoints") or []
            if not isinstance(checkpoints_data, Iterable) or isinstance(checkpoints_data, (str, bytes)):
                raise ValueError("Checkpoints must be provided as a list of mappings.")
            checkpoints = [Checkpoint.from_mapping(item) for item in checkpoints_data]

        bounds = None
        if data.get("bounds") is not None:
            raw_bounds = data["bounds"]
            if isinstance(raw_bounds, dict):
                bounds = (
                    float(raw_bounds["lat_min"]),
                    float(raw_bounds["lat_max"]),
                    float(raw_bounds["lon_min"]),
                    float(raw_bounds["lon_max"]),
                )
            else:
                values = [float(value) for value in raw_bounds]
                if len(values) != 4:
                    raise ValueError("Bounds must list lat_min, lat_max, lon_min and lon_max.")
                bounds = (values[0], values[1], values[2], values[3])

        position_path = str(data.get("position_path", defaults.position_path))
        if position_path not in POSITION_PATHS:
            raise ValueError(f"position_path must be one of {sorted(POSITION_PATHS)}, got {position_path!r}")
        zoom_path = str(data.get("zoom_path", defaults.zoom_path))
        if zoom_path not in ZOOM_PATHS:
            raise ValueError(f"zoom_path must be one of {list(ZOOM_PATHS)}, got {zoom_path!r}")

        time_zero = defaults.time_zero
        if "time_zero" in data:
            raw_time = data["time_zero"]
            time_zero = raw_time if isinstance(raw_time, datetime) else datetime.strptime(str(raw_time), TIME_FORMAT)

        frame_rate = float(data.get("frame_rate", data.get("fps", defaults.frame_rate)))
        if frame_rate <= 0:
            raise ValueError(f"frame_rate must be positive, got {frame_rate}")

        return RenderConfig(
            input_dir=Path(data.get("input_dir", data.get("input", defaults.input_dir))),
            output_dir=Path(data.get("output_dir", data.get("output", defaults.output_dir))),
            track_dir=Path(data.get("track_dir", data.get("tracks", defaults.track_dir))),
            pins_dir=Path(data.get("pins_dir", data.get("pins", defaults.pins_dir))),
            hashes_path=Path(data.get("hashes_path", defaults.hashes_path)),
            width=int(data.get("width", defaults.width)),
            height=int(data.get("height", defaults.height)),
            frame_rate=frame_rate,
            tile_size=int(data.get("tile_size", defaults.tile_size)),
            time_zero=time_zero,
            position_path=position_path,
            zoom_path=zoom_path,
            bounds=bounds,
            checkpoints=checkpoints,
        )


def _load_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf8") as handle:
        return yaml.safe_load(handle)  # type: ignore[no-any-return]


def load_config(path: Path) -> RenderConfig:
    """Load a :class:`RenderConfig` from a JSON or YAML file."""

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)

    if path.suffix.lower() in {".yaml", ".yml"}:
        raw = _load_yaml(path)
    else:
        with path.open("r", encoding="utf8") as handle:
            raw = json.load(handle)

    if not isinstance(raw, dict):
        raise ValueError("Configuration file must contain a mapping at the top level.")

    return RenderConfig.from_mapping(raw)
