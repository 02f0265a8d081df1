"""Module entry point to run the renderer via ``python -m mapreel``."""
from __future__ import annotations

from .main import main


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()
