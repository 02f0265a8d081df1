"""Recorded position histories of the entities a scene can refer to."""
from __future__ import annotations

import csv
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .errors import UnknownEntity
from .scene import Timestamp, TrackSample

logger = logging.getLogger(__name__)

TIME_FORMAT = "%Y-%m-%dT%H:%M:%S"
TRACK_SUFFIXES = (".csv", ".txt")


class TrackLibrary:
    """In-memory position-history provider keyed by entity name."""

    def __init__(self, tracks: Optional[Mapping[str, Iterable[TrackSample]]] = None) -> None:
        self._tracks: Dict[str, List[TrackSample]] = {}
        for entity, samples in (tracks or {}).items():
            self.add(entity, samples)

    def add(self, entity: str, samples: Iterable[TrackSample]) -> None:
        self._tracks[entity] = sorted(samples, key=lambda sample: sample.timestamp)

    def lookup(self, entity: str) -> Sequence[TrackSample]:
        try:
            return self._tracks[entity]
        except KeyError:
            raise UnknownEntity(entity) from None

    def entities(self) -> Sequence[str]:
        return list(self._tracks)

    def __contains__(self, entity: object) -> bool:
        return entity in self._tracks

    def __len__(self) -> int:
        return len(self._tracks)


def read_track(path: Path, time_zero: datetime) -> List[TrackSample]:
    """Read ``lat,lon,timestamp`` rows, timestamps relative to ``time_zero``."""

    samples: List[TrackSample] = []
    with Path(path).open("r", encoding="utf8", newline="") as handle:
        for row_number, row in enumerate(csv.reader(handle), start=1):
            if not row or not "".join(row).strip():
                continue
            if len(row) < 3:
                raise ValueError(f"{path}:{row_number}: expected 'lat,lon,timestamp', got {row!r}")
            latitude = float(row[0])
            longitude = float(row[1])
            recorded = datetime.strptime(row[2].strip(), TIME_FORMAT)
            seconds = (recorded - time_zero).total_seconds()
            samples.append(TrackSample(Timestamp.from_seconds(seconds), (latitude, longitude)))
    return samples


def load_track_directory(directory: Path, time_zero: datetime) -> TrackLibrary:
    """Load every track file in ``directory``; the file stem names the entity."""

    library = TrackLibrary()
    directory = Path(directory)
    if not directory.exists():
        logger.warning("track directory %s does not exist; no entities available", directory)
        return library

    for path in sorted(directory.iterdir()):
        if path.suffix.lower() not in TRACK_SUFFIXES:
            continue
        samples = read_track(path, time_zero)
        library.add(path.stem, samples)
        logger.debug("loaded %d samples for %s", len(samples), path.stem)
    logger.info("loaded %d tracks from %s", len(library), directory)
    return library
