"""Render animated map scenes described in a small keyword language."""

from .config import RenderConfig, load_config
from .errors import (
    InterpolationError,
    LexError,
    ParseError,
    ResolveError,
    SceneError,
)
from .frames import FrameSnapshot, iter_snapshots
from .lexer import Lexer, tokenize
from .parser import parse_file, parse_scene
from .resolver import Resolver, resolve_scene
from .scene import Mode, Range, ResolvedScene, SceneDescription, Single, Timestamp
from .timeline import Timeline
from .tracks import TrackLibrary, load_track_directory

__all__ = [
    "FrameSnapshot",
    "InterpolationError",
    "LexError",
    "Lexer",
    "Mode",
    "ParseError",
    "Range",
    "RenderConfig",
    "ResolveError",
    "ResolvedScene",
    "Resolver",
    "SceneDescription",
    "SceneError",
    "Single",
    "Timeline",
    "Timestamp",
    "TrackLibrary",
    "iter_snapshots",
    "load_config",
    "load_track_directory",
    "parse_file",
    "parse_scene",
    "resolve_scene",
    "tokenize",
]
