"""Tests for entity reference resolution."""

import pytest

from mapreel.errors import EmptyTrack, ResolveError, UnknownEntity
from mapreel.parser import parse_scene
from mapreel.resolver import Resolver, TrackIndex, position_at, resolve_scene
from mapreel.scene import Mode, Range, Single, Timestamp, TrackSample
from mapreel.tracks import TrackLibrary


class TestPositionAt:
    """Bracketing and interpolation along a track."""

    def test_exact_sample(self, library):
        assert position_at(library.lookup("Luca"), Timestamp(1, 1, 0)) == (46.0, 6.0)

    def test_between_samples(self, library):
        assert position_at(library.lookup("Luca"), Timestamp(1, 0, 30)) == (45.5, 5.5)
        assert position_at(library.lookup("Luca"), Timestamp(1, 2, 0)) == (46.0, 7.0)

    def test_clamps_before_first_sample(self, library):
        assert position_at(library.lookup("Luca"), Timestamp(0, 0, 0)) == (45.0, 5.0)

    def test_clamps_after_last_sample(self, library):
        assert position_at(library.lookup("Luca"), Timestamp(9, 0, 0)) == (46.0, 8.0)

    def test_single_sample_track(self, library):
        assert position_at(library.lookup("Ivo"), Timestamp(5, 0, 0)) == (43.0, 3.0)

    def test_empty_track(self):
        with pytest.raises(EmptyTrack) as info:
            TrackIndex("Niemand", [])
        assert info.value.entity_id == "Niemand"

    def test_fractional_seconds(self, library):
        track = TrackIndex("Luca", library.lookup("Luca"))
        lat, lon = track.position_at(Timestamp(1, 0, 0).total_seconds() + 900.0)
        assert lat == pytest.approx(45.25)
        assert lon == pytest.approx(5.25)


class TestResolver:
    """Whole-scene resolution."""

    def test_literals_pass_through(self, provider):
        scene = parse_scene("Mitte (42.3, 3.12)\nZoom 9\nPins Luca")
        resolved = resolve_scene(scene, provider)
        assert resolved.center == Single((42.3, 3.12))
        assert resolved.zoom == Single(9.0)
        assert resolved.mode is Mode.SINGLE_FRAME

    def test_entity_reference(self, provider):
        scene = parse_scene("Animation\nMitte Luca[1T0:30]; Ivo[0T0:00]\nZoom 9\nZeit 1T0:00\nDauer 1")
        resolved = resolve_scene(scene, provider)
        assert resolved.center == Range((45.5, 5.5), (43.0, 3.0))
        assert resolved.time_range == Range(Timestamp(1, 0, 0), Timestamp(1, 0, 0))

    def test_unknown_entity(self, provider):
        scene = parse_scene("Mitte Ghost[1T0:00]\nZoom 9")
        with pytest.raises(UnknownEntity) as info:
            resolve_scene(scene, provider)
        assert info.value.entity_id == "Ghost"
        assert isinstance(info.value, ResolveError)

    def test_empty_track(self):
        library = TrackLibrary({"Leer": []})
        scene = parse_scene("Mitte Leer[1T0:00]\nZoom 9")
        with pytest.raises(EmptyTrack):
            resolve_scene(scene, library)

    def test_unknown_pin(self, provider):
        scene = parse_scene("Mitte (1, 2)\nZoom 9\nPins Luca Ghost")
        with pytest.raises(UnknownEntity):
            resolve_scene(scene, provider)

    def test_absent_pins_select_every_entity(self, provider):
        resolved = resolve_scene(parse_scene("Mitte (1, 2)\nZoom 9"), provider)
        assert resolved.pins == ("Luca", "Ivo")

    def test_each_entity_looked_up_once(self, provider):
        scene = parse_scene(
            "Animation\nMitte Luca[1T0:00]; Luca[1T2:00]\nZoom 9\nZeit 1T0:00\nDauer 1\nPins Luca"
        )
        resolve_scene(scene, provider)
        assert provider.lookups == ["Luca"]

    def test_idempotent(self, provider):
        resolver = Resolver(provider)
        scene = parse_scene("Mitte Luca[1T0:45]\nZoom 9")
        assert resolver.resolve(scene).center == resolver.resolve(scene).center
        assert resolve_scene(scene, provider).center == resolver.resolve(scene).center

    def test_static_fields_carried(self, provider):
        scene = parse_scene("Mitte (1, 2)\nZoom 9\nPins Ivo\nPingrösse 64\nCheckpoints", name="still")
        resolved = resolve_scene(scene, provider)
        assert resolved.pins == ("Ivo",)
        assert resolved.pin_size_px == 64
        assert resolved.checkpoints_enabled
        assert resolved.name == "still"


class TestTimestamp:
    """Relative clock values."""

    def test_ordering_is_lexicographic(self):
        assert Timestamp(0, 23, 59) < Timestamp(1, 0, 0)
        assert Timestamp(1, 2, 3) < Timestamp(1, 2, 4)

    def test_seconds_round_trip(self):
        stamp = Timestamp(3, 7, 45, 12)
        assert Timestamp.from_seconds(stamp.total_seconds()) == stamp

    def test_str(self):
        assert str(Timestamp(1, 8, 5)) == "1T8:05"
