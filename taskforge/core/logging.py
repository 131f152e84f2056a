"""Process-wide logging setup."""

from __future__ import annotations

import logging

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Attach a single stream handler to the ``taskforge`` logger tree."""

    root = logging.getLogger("taskforge")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not any(getattr(h, "_taskforge", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._taskforge = True  # type: ignore[attr-defined]
        root.addHandler(handler)


__all__ = ["configure_logging"]
