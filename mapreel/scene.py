"""Data model shared by the parser, resolver and timeline."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, Generic, Optional, Tuple, TypeVar, Union

from .geometry import Coordinate

T = TypeVar("T")

SECONDS_PER_DAY = 24 * 60 * 60


class Mode(enum.Enum):
    SINGLE_FRAME = "Bild"
    ANIMATION = "Animation"


@dataclass(frozen=True, order=True)
class Timestamp:
    """A day offset plus time of day, written ``<day>T<hour>:<minute>``.

    Timestamps are relative to the recording epoch, not calendar dates.
    Comparison is lexicographic on ``(day, hour, minute, second)``.
    """

    day: int
    hour: int
    minute: int
    second: int = 0

    def total_seconds(self) -> int:
        return self.day * SECONDS_PER_DAY + self.hour * 3600 + self.minute * 60 + self.second

    @staticmethod
    def from_seconds(seconds: float) -> "Timestamp":
        whole = int(round(seconds))
        day, rest = divmod(whole, SECONDS_PER_DAY)
        hour, rest = divmod(rest, 3600)
        minute, second = divmod(rest, 60)
        return Timestamp(day, hour, minute, second)

    def __str__(self) -> str:
        return f"{self.day}T{self.hour}:{self.minute:02d}"


@dataclass(frozen=True)
class Single(Generic[T]):
    """One value held for the whole scene."""

    value: T

    def endpoints(self) -> Tuple[T, T]:
        return self.value, self.value


@dataclass(frozen=True)
class Range(Generic[T]):
    """A start and an end keyframe. ``end`` may precede ``start``."""

    start: T
    end: T

    def endpoints(self) -> Tuple[T, T]:
        return self.start, self.end


ParamValue = Union[Single[T], Range[T]]


@dataclass(frozen=True)
class LiteralPosition:
    coordinate: Coordinate


@dataclass(frozen=True)
class EntityAtTime:
    """Position of ``entity`` at ``timestamp``, looked up in its track."""

    entity: str
    timestamp: Timestamp


PositionRef = Union[LiteralPosition, EntityAtTime]


@dataclass(frozen=True)
class TrackSample:
    timestamp: Timestamp
    coordinate: Coordinate


@dataclass(frozen=True)
class SceneDescription:
    """A parsed scene file. Position values may still reference entities."""

    mode: Mode
    center: ParamValue[PositionRef]
    zoom: ParamValue[float]
    time_range: Optional[ParamValue[Timestamp]] = None
    duration_seconds: Optional[float] = None
    pins: Tuple[str, ...] = ()
    pin_size_px: int = 100
    checkpoints_enabled: bool = False
    name: str = ""
    lines: Dict[str, int] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class ResolvedScene:
    """A scene whose positions are all concrete coordinates."""

    mode: Mode
    center: ParamValue[Coordinate]
    zoom: ParamValue[float]
    time_range: Optional[ParamValue[Timestamp]] = None
    duration_seconds: Optional[float] = None
    pins: Tuple[str, ...] = ()
    pin_size_px: int = 100
    checkpoints_enabled: bool = False
    name: str = ""
