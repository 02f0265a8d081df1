"""Helpers for loading and generating map pin images."""
from __future__ import annotations

import hashlib
from pathlib import Path
from typing import List, Optional

import numpy as np
from PIL import Image, ImageDraw, ImageFont


_PIN_COLOURS: List[str] = [
    "#1f77b4",
    "#d62728",
    "#2ca02c",
    "#9467bd",
    "#ff7f0e",
    "#17becf",
    "#8c564b",
]
CHECKPOINT_COLOUR = "#e0c341"


def _colour_for(name: str) -> str:
    digest = hashlib.sha256(name.encode("utf8")).digest()
    return _PIN_COLOURS[digest[0] % len(_PIN_COLOURS)]


def generate_pin(label: str, colour: Optional[str] = None, size: int = 96) -> Image.Image:
    """Draw a round pin head above a pointed tip at the bottom centre."""

    colour = colour or _colour_for(label)
    image = Image.new("RGBA", (size, int(size * 1.5)), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    draw.polygon(
        [(size * 0.2, size * 0.7), (size * 0.8, size * 0.7), (size / 2.0, size * 1.5 - 1)],
        fill=colour,
    )
    draw.ellipse([(0, 0), (size - 1, size - 1)], fill=colour)

    letter = label[:1].upper()
    font = ImageFont.load_default()
    text_bbox = draw.textbbox((0, 0), letter, font=font)
    text_width = text_bbox[2] - text_bbox[0]
    text_height = text_bbox[3] - text_bbox[1]
    draw.text(
        ((size - text_width) / 2.0, (size - text_height) / 2.0),
        letter,
        font=font,
        fill="white",
    )
    return image


def load_pin(name: str, pins_dir: Optional[Path] = None) -> np.ndarray:
    """Return the RGBA pin image for ``name``.

    ``<pins_dir>/<name>.png`` is used when present; otherwise a placeholder is
    generated. The pin tip is expected at the bottom centre of the image.
    """

    path = Path(pins_dir) / f"{name}.png" if pins_dir else None
    if path is not None and path.exists():
        image = Image.open(path).convert("RGBA")
    else:
        image = generate_pin(name)
    return np.array(image)


def checkpoint_pin() -> np.ndarray:
    return np.array(generate_pin("C", colour=CHECKPOINT_COLOUR))
