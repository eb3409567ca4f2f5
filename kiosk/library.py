"""Slide library loading.

The library is a YAML document::

    slides:
      - id: beach
        file: trips/beach.jpg
      - id: timelapse
        file: "sky/frame_*.jpg"
        fps: 12
    default:
      include: [beach, timelapse]
    clients:
      lobby:
        include: [timelapse]

A missing or unreadable file never stops the kiosk: the loader falls back to a
library with no slides and a wildcard-image default include, which makes the
resolver show every image in the photo root.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

import yaml
from pydantic import ValidationError

from kiosk.errors import LibraryLoadError
from kiosk.models import (DEFAULT_IMAGE_PATTERNS, IncludeConfig, LibraryConfig,
                          SlideDefinition)

logger = logging.getLogger(__name__)


def fallback_library() -> LibraryConfig:
    return LibraryConfig(default=IncludeConfig(include=list(DEFAULT_IMAGE_PATTERNS)))


def _parse_slides(raw: Any) -> list[SlideDefinition]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        logger.warning("Ignoring 'slides': expected a list, got %s", type(raw).__name__)
        return []

    slides: list[SlideDefinition] = []
    seen: set[str] = set()
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            logger.warning("Ignoring slide #%d: not a mapping", i)
            continue
        try:
            slide = SlideDefinition.model_validate(item)
        except ValidationError as e:
            logger.warning("Ignoring slide #%d (%s): %s", i,
                           item.get("id", "?"), e.errors()[0].get("msg", e))
            continue
        if slide.id in seen:
            logger.warning("Duplicate slide id %r; keeping the first definition", slide.id)
            continue
        seen.add(slide.id)
        slides.append(slide)
    return slides


def parse_library(data: Any) -> LibraryConfig:
    """Validate a decoded library document. Bad slides are dropped individually."""
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise LibraryLoadError(f"Library must be a mapping, got {type(data).__name__}")

    try:
        return LibraryConfig(
            slides=_parse_slides(data.get("slides")),
            default=data.get("default"),
            clients=data.get("clients"),
        )
    except ValidationError as e:
        raise LibraryLoadError(f"Invalid library: {e}") from e


def read_library_file(path: str) -> LibraryConfig:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise LibraryLoadError(f"Could not read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise LibraryLoadError(f"Could not parse {path}: {e}") from e
    return parse_library(data)


def load_library(path: str) -> LibraryConfig:
    try:
        library = read_library_file(path)
    except LibraryLoadError as e:
        logger.warning("%s; using defaults", e)
        return fallback_library()
    logger.info("Loaded library from %s (%d slides)", path, len(library.slides))
    return library


class LibraryStore:
    """Holds the current library; reload swaps in a new immutable value."""

    def __init__(self, path: str, library: LibraryConfig | None = None) -> None:
        self.path = path
        self._library = library if library is not None else load_library(path)
        self._lock = threading.Lock()

    @property
    def current(self) -> LibraryConfig:
        return self._library

    def reload(self) -> LibraryConfig:
        with self._lock:
            library = load_library(self.path)
            self._library = library
        return library
