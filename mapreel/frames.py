"""Assemble per-frame snapshots handed to the renderer."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from .geometry import Coordinate
from .scene import ResolvedScene, Timestamp
from .timeline import FrameParameters, Timeline


@dataclass(frozen=True)
class FrameSnapshot:
    """Everything the renderer needs to draw one frame."""

    index: int
    center: Coordinate
    zoom: float
    time_seconds: Optional[float]
    pins: Tuple[str, ...]
    pin_size_px: int
    checkpoints: bool
    pin_scale: float = 1.0

    @property
    def timestamp(self) -> Optional[Timestamp]:
        if self.time_seconds is None:
            return None
        return Timestamp.from_seconds(self.time_seconds)

    @property
    def pin_height_px(self) -> float:
        return self.pin_size_px * self.pin_scale


def build_snapshot(scene: ResolvedScene, parameters: FrameParameters) -> FrameSnapshot:
    return FrameSnapshot(
        index=parameters.index,
        center=parameters.center,
        zoom=parameters.zoom,
        time_seconds=parameters.time_seconds,
        pins=scene.pins,
        pin_size_px=scene.pin_size_px,
        checkpoints=scene.checkpoints_enabled,
        pin_scale=parameters.pin_scale,
    )


class SnapshotSequence:
    """Pull-based sequence of snapshots in increasing frame order.

    Nothing is computed until the consumer asks for the next frame, and
    iterating again restarts from frame zero.
    """

    def __init__(self, scene: ResolvedScene, timeline: Timeline) -> None:
        self.scene = scene
        self.timeline = timeline

    def __len__(self) -> int:
        return len(self.timeline)

    def __iter__(self) -> Iterator[FrameSnapshot]:
        for parameters in self.timeline:
            yield build_snapshot(self.scene, parameters)

    def snapshot_at(self, index: int) -> FrameSnapshot:
        return build_snapshot(self.scene, self.timeline.parameters_at(index))


def iter_snapshots(
    scene: ResolvedScene,
    frame_rate: float,
    position_path: str = "planar",
    zoom_path: str = "linear",
) -> SnapshotSequence:
    """Snapshots for every output frame of ``scene``."""

    timeline = Timeline(scene, frame_rate, position_path=position_path, zoom_path=zoom_path)
    return SnapshotSequence(scene, timeline)
