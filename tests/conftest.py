"""Shared fixtures for the scene pipeline tests."""

from typing import List

import pytest

from mapreel.scene import Timestamp, TrackSample
from mapreel.tracks import TrackLibrary


class CountingProvider:
    """Wraps a provider and records every lookup."""

    def __init__(self, library: TrackLibrary) -> None:
        self.library = library
        self.lookups: List[str] = []

    def lookup(self, entity):
        self.lookups.append(entity)
        return self.library.lookup(entity)

    def entities(self):
        return self.library.entities()


@pytest.fixture
def library() -> TrackLibrary:
    return TrackLibrary(
        {
            "Luca": [
                TrackSample(Timestamp(1, 0, 0), (45.0, 5.0)),
                TrackSample(Timestamp(1, 1, 0), (46.0, 6.0)),
                TrackSample(Timestamp(1, 3, 0), (46.0, 8.0)),
            ],
            "Ivo": [
                TrackSample(Timestamp(0, 12, 0), (43.0, 3.0)),
            ],
        }
    )


@pytest.fixture
def provider(library) -> CountingProvider:
    return CountingProvider(library)
