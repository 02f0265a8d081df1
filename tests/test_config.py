"""Tests for configuration and track loading."""

import json
from datetime import datetime
from pathlib import Path

import pytest

from mapreel.config import Checkpoint, RenderConfig, load_config
from mapreel.errors import UnknownEntity
from mapreel.scene import Timestamp
from mapreel.tracks import load_track_directory, read_track


class TestRenderConfig:
    """Loading render settings."""

    def test_defaults(self):
        config = RenderConfig()
        assert (config.width, config.height) == (3840, 2160)
        assert config.frame_rate == 30.0
        assert config.position_path == "planar"
        assert config.zoom_path == "linear"
        assert [c.name for c in config.checkpoints] == ["Grenoble", "Avignon", "Perpignan", "Barcelona"]

    def test_json(self, tmp_path):
        path = tmp_path / "render.json"
        path.write_text(
            json.dumps(
                {
                    "input": "scenes",
                    "output_dir": "videos",
                    "fps": 25,
                    "zoom_path": "flyover",
                    "bounds": [20, 50, 0, 10],
                    "checkpoints": [{"name": "Basel", "lat": 47.55, "lon": 7.59}],
                }
            ),
            encoding="utf8",
        )
        config = load_config(path)
        assert config.input_dir == Path("scenes")
        assert config.output_dir == Path("videos")
        assert config.frame_rate == 25.0
        assert config.zoom_path == "flyover"
        assert config.bounds == (20.0, 50.0, 0.0, 10.0)
        assert config.checkpoints == [Checkpoint("Basel", 47.55, 7.59)]

    def test_yaml(self, tmp_path):
        path = tmp_path / "render.yaml"
        path.write_text(
            "width: 640\nheight: 360\ntime_zero: '2025-04-15T06:00:00'\n"
            "bounds:\n  lat_min: 40\n  lat_max: 48\n  lon_min: 1\n  lon_max: 8\n",
            encoding="utf8",
        )
        config = load_config(path)
        assert (config.width, config.height) == (640, 360)
        assert config.time_zero == datetime(2025, 4, 15, 6, 0, 0)
        assert config.bounds == (40.0, 48.0, 1.0, 8.0)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.json")

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "render.json"
        path.write_text("[1, 2]", encoding="utf8")
        with pytest.raises(ValueError):
            load_config(path)

    def test_invalid_paths(self):
        with pytest.raises(ValueError):
            RenderConfig.from_mapping({"zoom_path": "bounce"})
        with pytest.raises(ValueError):
            RenderConfig.from_mapping({"position_path": "spline"})

    def test_checkpoint_missing_field(self):
        with pytest.raises(ValueError):
            Checkpoint.from_mapping({"name": "Basel", "lat": 47.5})


class TestTracks:
    """Reading recorded tracks from disk."""

    def test_read_track(self, tmp_path):
        path = tmp_path / "Luca.csv"
        path.write_text(
            "45.0,5.0,2025-04-15T01:00:00\n\n44.0,4.0,2025-04-15T00:30:00\n",
            encoding="utf8",
        )
        samples = read_track(path, datetime(2025, 4, 14))
        assert [s.timestamp for s in samples] == [Timestamp(1, 1, 0), Timestamp(1, 0, 30)]

    def test_malformed_row(self, tmp_path):
        path = tmp_path / "Luca.csv"
        path.write_text("45.0,5.0\n", encoding="utf8")
        with pytest.raises(ValueError):
            read_track(path, datetime(2025, 4, 14))

    def test_load_directory_sorts_samples(self, tmp_path):
        (tmp_path / "Luca.txt").write_text(
            "45.0,5.0,2025-04-15T01:00:00\n44.0,4.0,2025-04-15T00:30:00\n", encoding="utf8"
        )
        (tmp_path / "Ivo.csv").write_text("43.0,3.0,2025-04-14T12:00:00\n", encoding="utf8")
        (tmp_path / "notes.md").write_text("ignored", encoding="utf8")
        library = load_track_directory(tmp_path, datetime(2025, 4, 14))
        assert sorted(library.entities()) == ["Ivo", "Luca"]
        assert [s.coordinate for s in library.lookup("Luca")] == [(44.0, 4.0), (45.0, 5.0)]
        with pytest.raises(UnknownEntity):
            library.lookup("notes")

    def test_missing_directory(self, tmp_path):
        assert len(load_track_directory(tmp_path / "nope", datetime(2025, 4, 14))) == 0
