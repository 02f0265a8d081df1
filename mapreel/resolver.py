"""Resolve entity references of a parsed scene into concrete coordinates."""
from __future__ import annotations

import bisect
import logging
from typing import Dict, List, Sequence, Tuple

from .errors import EmptyTrack
from .geometry import Coordinate, interpolate_planar
from .scene import (
    EntityAtTime,
    LiteralPosition,
    Mode,
    ParamValue,
    PositionRef,
    Range,
    ResolvedScene,
    SceneDescription,
    Single,
    Timestamp,
    TrackSample,
)

logger = logging.getLogger(__name__)


class TrackIndex:
    """A recorded track prepared for repeated position lookups."""

    def __init__(self, entity: str, samples: Sequence[TrackSample]) -> None:
        if not samples:
            raise EmptyTrack(entity)
        self.entity = entity
        self.samples = list(samples)
        self.times: List[int] = [sample.timestamp.total_seconds() for sample in self.samples]

    @property
    def first(self) -> Timestamp:
        return self.samples[0].timestamp

    @property
    def last(self) -> Timestamp:
        return self.samples[-1].timestamp

    def position_at(self, seconds: float) -> Coordinate:
        """Interpolate between the samples recorded around ``seconds``.

        Times before the first or after the last sample are clamped to that
        sample; the track is never extrapolated.
        """

        index = bisect.bisect_right(self.times, seconds)
        if index == 0:
            return self.samples[0].coordinate
        if index == len(self.samples):
            return self.samples[-1].coordinate
        t0 = self.times[index - 1]
        t1 = self.times[index]
        fraction = (seconds - t0) / (t1 - t0)
        return interpolate_planar(self.samples[index - 1].coordinate, self.samples[index].coordinate, fraction)


def position_at(samples: Sequence[TrackSample], timestamp: Timestamp, entity: str = "") -> Coordinate:
    """Position recorded in ``samples`` at ``timestamp``."""

    return TrackIndex(entity, samples).position_at(timestamp.total_seconds())


class Resolver:
    """Replace every entity reference with a coordinate.

    The provider must offer ``lookup(entity)`` returning the samples of that
    entity sorted by time (raising :class:`~mapreel.errors.UnknownEntity`
    when it has no track) and ``entities()`` listing every known entity.
    Each entity is looked up at most once per resolver.
    """

    def __init__(self, provider) -> None:
        self.provider = provider
        self._tracks: Dict[str, TrackIndex] = {}

    def track(self, entity: str) -> TrackIndex:
        if entity not in self._tracks:
            self._tracks[entity] = TrackIndex(entity, self.provider.lookup(entity))
        return self._tracks[entity]

    def resolve_position(self, ref: PositionRef) -> Coordinate:
        if isinstance(ref, LiteralPosition):
            return ref.coordinate
        if isinstance(ref, EntityAtTime):
            track = self.track(ref.entity)
            if not track.first <= ref.timestamp <= track.last:
                logger.warning(
                    "%s[%s] lies outside the recorded range %s to %s; using the nearest sample",
                    ref.entity,
                    ref.timestamp,
                    track.first,
                    track.last,
                )
            return track.position_at(ref.timestamp.total_seconds())
        raise TypeError(f"unsupported position reference: {ref!r}")

    def resolve(self, scene: SceneDescription) -> ResolvedScene:
        center: ParamValue[Coordinate]
        if isinstance(scene.center, Range):
            center = Range(self.resolve_position(scene.center.start), self.resolve_position(scene.center.end))
        else:
            center = Single(self.resolve_position(scene.center.value))

        pins: Tuple[str, ...] = scene.pins
        if not pins:
            pins = tuple(self.provider.entities())
        for entity in pins:
            self.track(entity)

        time_range = scene.time_range
        if scene.mode is Mode.ANIMATION and isinstance(time_range, Single):
            time_range = Range(time_range.value, time_range.value)

        resolved = ResolvedScene(
            mode=scene.mode,
            center=center,
            zoom=scene.zoom,
            time_range=time_range,
            duration_seconds=scene.duration_seconds,
            pins=pins,
            pin_size_px=scene.pin_size_px,
            checkpoints_enabled=scene.checkpoints_enabled,
            name=scene.name,
        )
        logger.debug("resolved scene %r with %d pins", scene.name, len(pins))
        return resolved


def resolve_scene(scene: SceneDescription, provider) -> ResolvedScene:
    """Resolve ``scene`` against the position-history ``provider``."""

    return Resolver(provider).resolve(scene)
