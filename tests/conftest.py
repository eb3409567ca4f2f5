from pathlib import Path

import pytest
import yaml
from PIL import Image

from kiosk.config import Settings
from kiosk.images.cache import ImageCache
from kiosk.images.frames import FrameSequence
from kiosk.library import parse_library
from kiosk.resolver import SlideResolver


def make_image(path, width=640, height=480, color="blue", fmt=None, exif=None):
    """Write a solid-color test image, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    mode = "RGBA" if (fmt or path.suffix.lower()) in ("PNG", ".png") else "RGB"
    img = Image.new(mode, (width, height), color)
    params = {}
    if exif is not None:
        params["exif"] = exif
    img.save(path, format=fmt, **params)
    return path


def make_settings(base, **overrides):
    base = Path(base)
    values = dict(
        client_id="test-client",
        photos_dir=str(base / "photos"),
        cache_dir=str(base / "cache"),
        pages_dir=str(base / "pages"),
        public_dir=str(base / "public"),
        log_dir=str(base / "logs"),
        config_path=str(base / "config.yaml"),
    )
    values.update(overrides)
    return Settings(**values)


def write_config(settings, data):
    Path(settings.config_path).write_text(yaml.safe_dump(data), encoding="utf-8")


def make_resolver(settings, data):
    cache = ImageCache(photos_dir=settings.photos_dir, cache_dir=settings.cache_dir)
    return SlideResolver(library=parse_library(data), frames=FrameSequence(cache=cache))


@pytest.fixture
def settings(tmp_path):
    s = make_settings(tmp_path)
    Path(s.photos_dir).mkdir(parents=True)
    return s


@pytest.fixture
def photos(settings):
    """Photo root with one still and a two-frame sequence.

    Structure:
        photos/
            a.jpg            (800x600)
            seq_001.jpg      (640x480)
            seq_002.jpg      (640x480)
            big/wide.jpg     (4000x3000)
    """
    root = Path(settings.photos_dir)
    make_image(root / "a.jpg", 800, 600, "red")
    make_image(root / "seq_001.jpg", 640, 480, "green")
    make_image(root / "seq_002.jpg", 640, 480, "blue")
    make_image(root / "big" / "wide.jpg", 4000, 3000, "white")
    return root


@pytest.fixture
def cache(settings):
    return ImageCache(photos_dir=settings.photos_dir, cache_dir=settings.cache_dir)


@pytest.fixture
def frames(cache):
    return FrameSequence(cache=cache)
