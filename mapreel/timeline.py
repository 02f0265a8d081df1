"""Sample the animatable parameters of a resolved scene once per frame."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, Optional, Tuple

from .errors import InvalidDuration
from .geometry import (
    Coordinate,
    interpolate_great_circle,
    interpolate_planar,
    lerp,
    smoother_step,
    world_distance,
)
from .scene import Mode, ResolvedScene

logger = logging.getLogger(__name__)

POSITION_PATHS: Dict[str, Callable[[Coordinate, Coordinate, float], Coordinate]] = {
    "planar": interpolate_planar,
    "great_circle": interpolate_great_circle,
}
ZOOM_PATHS = ("linear", "flyover")

# Exponents used by the flyover path: how strongly pins grow while zoomed
# out, and how the center speed follows the on-screen scale.
FLYOVER_PIN_GROWTH = 0.2
FLYOVER_TRAVEL_EXPONENT = 3.0


@dataclass(frozen=True)
class FrameParameters:
    """Interpolated animatable values for one frame."""

    index: int
    center: Coordinate
    zoom: float
    time_seconds: Optional[float]
    pin_scale: float = 1.0


def frame_count(duration_seconds: float, frame_rate: float) -> int:
    """``round(duration * frame_rate)`` with halves rounded away from zero."""

    return int(math.floor(duration_seconds * frame_rate + 0.5))


class Timeline:
    """Lazy, restartable sequence of :class:`FrameParameters`.

    Frame ``i`` of ``N`` is sampled at ``u = i / max(N - 1, 1)`` so the first
    and last frames reproduce the start and end keyframes exactly. A still
    frame yields exactly one set of parameters taken from its literal values.
    """

    def __init__(
        self,
        scene: ResolvedScene,
        frame_rate: float,
        position_path: str = "planar",
        zoom_path: str = "linear",
    ) -> None:
        if position_path not in POSITION_PATHS:
            raise ValueError(f"Unknown position path {position_path!r}; use one of {sorted(POSITION_PATHS)}")
        if zoom_path not in ZOOM_PATHS:
            raise ValueError(f"Unknown zoom path {zoom_path!r}; use one of {list(ZOOM_PATHS)}")

        self.scene = scene
        self.frame_rate = frame_rate
        self._interpolate_position = POSITION_PATHS[position_path]

        self._center = scene.center.endpoints()
        self._zoom = scene.zoom.endpoints()
        self._time: Optional[Tuple[float, float]] = None
        if scene.time_range is not None:
            start, end = scene.time_range.endpoints()
            self._time = (float(start.total_seconds()), float(end.total_seconds()))

        if scene.mode is Mode.SINGLE_FRAME:
            self._frames = 1
        else:
            duration = scene.duration_seconds
            if frame_rate <= 0:
                raise InvalidDuration(f"frame rate must be positive, got {frame_rate}")
            if duration is None or duration <= 0:
                raise InvalidDuration(f"Dauer must be positive, got {duration}")
            self._frames = frame_count(duration, frame_rate)
            if self._frames < 1:
                raise InvalidDuration(
                    f"Dauer {duration}s is shorter than one frame at {frame_rate} fps"
                )

        self._peak_zoom: Optional[float] = None
        if scene.mode is Mode.ANIMATION and zoom_path == "flyover":
            distance = world_distance(*self._center)
            if distance > 0.0:
                peak = -math.log2(distance)
                if peak < self._zoom[0] or peak < self._zoom[1]:
                    self._peak_zoom = peak
                    logger.debug("flyover for %r zooms out to %.2f", scene.name, peak)
        self._travel_total = 0.0
        if self._peak_zoom is not None:
            self._travel_total = sum(self._travel_weight(i) for i in range(1, self._frames))

    def __len__(self) -> int:
        return self._frames

    def fraction(self, index: int) -> float:
        return index / max(self._frames - 1, 1)

    def __iter__(self) -> Iterator[FrameParameters]:
        if self._peak_zoom is None:
            for index in range(self._frames):
                yield self.parameters_at(index)
            return

        travelled = 0.0
        for index in range(self._frames):
            if index > 0:
                travelled += self._travel_weight(index)
            yield self._flyover_parameters(index, travelled)

    def parameters_at(self, index: int) -> FrameParameters:
        """Parameters of frame ``index``; depends only on the scene and index."""

        if not 0 <= index < self._frames:
            raise IndexError(f"frame {index} outside 0..{self._frames - 1}")

        if self.scene.mode is Mode.SINGLE_FRAME:
            time_seconds = self._time[0] if self._time is not None else None
            return FrameParameters(0, self._center[0], self._zoom[0], time_seconds)

        if self._peak_zoom is not None:
            travelled = sum(self._travel_weight(i) for i in range(1, index + 1))
            return self._flyover_parameters(index, travelled)

        u = self.fraction(index)
        return FrameParameters(
            index=index,
            center=self._interpolate_position(self._center[0], self._center[1], u),
            zoom=lerp(self._zoom[0], self._zoom[1], u),
            time_seconds=self._time_at(u),
        )

    def _time_at(self, u: float) -> Optional[float]:
        if self._time is None:
            return None
        return lerp(self._time[0], self._time[1], u)

    def _flyover_zoom(self, u: float) -> float:
        assert self._peak_zoom is not None
        start, end = self._zoom
        peak = self._peak_zoom
        if u >= 1.0:
            return end
        if u < 0.5:
            return (peak - start) * smoother_step(u, 0.0, 0.5) + start
        return (end - peak) * smoother_step(u, 0.5, 1.0) + peak

    def _travel_weight(self, index: int) -> float:
        zoom = self._flyover_zoom(self.fraction(index))
        return 2.0 ** (-FLYOVER_TRAVEL_EXPONENT * zoom)

    def _flyover_parameters(self, index: int, travelled: float) -> FrameParameters:
        u = self.fraction(index)
        zoom = self._flyover_zoom(u)
        if index == self._frames - 1 or self._travel_total == 0.0:
            progress = u
        else:
            progress = travelled / self._travel_total
        linear_zoom = lerp(self._zoom[0], self._zoom[1], u)
        return FrameParameters(
            index=index,
            center=self._interpolate_position(self._center[0], self._center[1], progress),
            zoom=zoom,
            time_seconds=self._time_at(u),
            pin_scale=2.0 ** ((zoom - linear_zoom) * FLYOVER_PIN_GROWTH),
        )
