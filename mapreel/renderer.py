"""Draw frame snapshots with matplotlib and encode them to image or video files."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

import imageio.v2 as imageio
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.offsetbox import AnnotationBbox, OffsetImage
import numpy as np
from tqdm import tqdm

from .config import RenderConfig
from .frames import FrameSnapshot, SnapshotSequence
from .geometry import WorldPoint, to_world
from .pins import checkpoint_pin, load_pin
from .resolver import Resolver
from .scene import Mode, ResolvedScene

logger = logging.getLogger(__name__)

DPI = 100
BACKGROUND_COLOUR = "#111426"
TRACK_COLOUR = "#3a4470"


def output_path_for(scene: ResolvedScene, output_dir: Path) -> Path:
    suffix = ".png" if scene.mode is Mode.SINGLE_FRAME else ".mp4"
    return Path(output_dir) / f"{scene.name or 'scene'}{suffix}"


def view_extent(center: WorldPoint, zoom: float, width: int, height: int, tile_size: int) -> Tuple[float, float, float, float]:
    """World-space ``(x_min, x_max, y_min, y_max)`` visible at ``zoom``."""

    world_per_pixel = 1.0 / (2.0**zoom * tile_size)
    half_width = width / 2.0 * world_per_pixel
    half_height = height / 2.0 * world_per_pixel
    x, y = center
    return x - half_width, x + half_width, y - half_height, y + half_height


class _PinArtist:
    def __init__(self, ax, image: np.ndarray) -> None:
        self.image = image
        self.box = OffsetImage(image, zoom=1.0)
        self.artist = AnnotationBbox(self.box, (0.0, 0.0), frameon=False, box_alignment=(0.5, 0.0))
        self.artist.set_visible(False)
        ax.add_artist(self.artist)

    def place(self, point: WorldPoint, height_px: float) -> None:
        # OffsetImage scales by dpi / 72 when drawing.
        self.box.set_zoom(height_px / self.image.shape[0] * 72.0 / DPI)
        self.artist.xy = point
        self.artist.set_visible(True)

    def hide(self) -> None:
        self.artist.set_visible(False)


class MapRenderer:
    """Render the snapshots of one scene at the configured resolution."""

    def __init__(self, config: RenderConfig, resolver: Resolver) -> None:
        self.config = config
        self.resolver = resolver

    # ------------------------------------------------------------------
    # Canvas construction
    # ------------------------------------------------------------------

    def _setup_canvas(self, scene: ResolvedScene) -> None:
        figsize = (self.config.width / DPI, self.config.height / DPI)
        self._fig = plt.figure(figsize=figsize, dpi=DPI)
        self._fig.patch.set_facecolor(BACKGROUND_COLOUR)
        self._ax = self._fig.add_axes([0.0, 0.0, 1.0, 1.0])
        self._ax.set_facecolor(BACKGROUND_COLOUR)
        self._ax.set_axis_off()

        # Recorded tracks stand in for map tiles as geographic context.
        for entity in scene.pins:
            points = [to_world(sample.coordinate) for sample in self.resolver.track(entity).samples]
            xs = [x for x, _ in points]
            ys = [y for _, y in points]
            self._ax.plot(xs, ys, color=TRACK_COLOUR, linewidth=2.0, alpha=0.8)

        self._pin_artists: Dict[str, _PinArtist] = {
            entity: _PinArtist(self._ax, load_pin(entity, self.config.pins_dir)) for entity in scene.pins
        }

        self._checkpoint_artists: List[Tuple[WorldPoint, _PinArtist]] = []
        if scene.checkpoints_enabled:
            image = checkpoint_pin()
            for checkpoint in self.config.checkpoints:
                point = to_world((checkpoint.latitude, checkpoint.longitude))
                self._checkpoint_artists.append((point, _PinArtist(self._ax, image)))

    # ------------------------------------------------------------------
    # Frame drawing
    # ------------------------------------------------------------------

    def _draw_frame(self, frame: FrameSnapshot) -> np.ndarray:
        x_min, x_max, y_min, y_max = view_extent(
            to_world(frame.center), frame.zoom, self.config.width, self.config.height, self.config.tile_size
        )
        self._ax.set_xlim(x_min, x_max)
        # World y grows southwards.
        self._ax.set_ylim(y_max, y_min)

        for point, artist in self._checkpoint_artists:
            artist.place(point, frame.pin_height_px)

        for entity, artist in self._pin_artists.items():
            if frame.time_seconds is None:
                artist.hide()
                continue
            position = self.resolver.track(entity).position_at(frame.time_seconds)
            artist.place(to_world(position), frame.pin_height_px)

        self._fig.canvas.draw()
        image = np.asarray(self._fig.canvas.buffer_rgba())
        return np.array(image[:, :, :3])

    def frames(self, snapshots: Iterable[FrameSnapshot]) -> Iterable[np.ndarray]:
        for snapshot in snapshots:
            yield self._draw_frame(snapshot)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render(self, scene: ResolvedScene, snapshots: SnapshotSequence, output_path: Path) -> Path:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self._setup_canvas(scene)

        try:
            if scene.mode is Mode.SINGLE_FRAME:
                for image in self.frames(snapshots):
                    imageio.imwrite(output_path, image)
            else:
                self._write_video(scene, snapshots, output_path)
        finally:
            plt.close(self._fig)

        logger.info("wrote %s", output_path)
        return output_path

    def _write_video(self, scene: ResolvedScene, snapshots: SnapshotSequence, output_path: Path) -> None:
        try:
            writer_ctx = imageio.get_writer(
                output_path,
                fps=self.config.frame_rate,
                codec="libx264",
                format="FFMPEG",
                macro_block_size=None,
                pixelformat="yuv420p",
                quality=8,
            )
        except ImportError as exc:
            raise ImportError(
                "FFMPEG support is required to export videos. Install the "
                "'imageio-ffmpeg' package (for example via 'pip install "
                "imageio-ffmpeg') and try again."
            ) from exc

        with writer_ctx as writer:
            progress = tqdm(snapshots, total=len(snapshots), desc=scene.name or "frames", unit="frame")
            for image in self.frames(progress):
                writer.append_data(image)
