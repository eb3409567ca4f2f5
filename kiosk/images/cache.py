from __future__ import annotations

import contextlib
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from typing import Callable

from PIL import Image

from kiosk.images.patterns import to_posix

logger = logging.getLogger(__name__)

CACHE_URL_PREFIX = "/cache/"
PHOTOS_URL_PREFIX = "/photos/"

ORIENTATION_TAG = 0x0112
# Formats Pillow can write an EXIF block into.
EXIF_FORMATS = {"JPEG", "PNG", "WEBP", "TIFF"}


def _default_file_mode() -> int:
    # mkstemp creates 0600 files; cache entries get what open() would give.
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


FILE_MODE = _default_file_mode()


def _photo_fallback_url(source_path: str, photos_dir: str) -> str:
    try:
        rel = to_posix(os.path.relpath(source_path, photos_dir))
    except ValueError:
        # different drive
        rel = os.pardir
    if rel == ".." or rel.startswith("../"):
        rel = os.path.basename(source_path)
    return PHOTOS_URL_PREFIX + rel


@dataclass(frozen=True)
class ImageCache:
    """Lazily produced display-size copies of photos, mirrored by relative path.

    The existence of a cache file is the only validity check: once written, an
    entry is served as-is until someone deletes it.
    """

    photos_dir: str
    cache_dir: str
    max_width: int = 1920
    max_height: int = 1080
    jpeg_quality: int = 90

    def relative_path(self, source_path: str) -> str:
        rel = os.path.relpath(os.path.abspath(source_path),
                              os.path.abspath(self.photos_dir))
        if rel == os.curdir or rel == os.pardir or rel.startswith(os.pardir + os.sep):
            raise ValueError(f"{source_path} is outside the photo root")
        return to_posix(rel)

    def cached_path(self, rel_path: str) -> str:
        return os.path.join(self.cache_dir, *rel_path.split("/"))

    def ensure_cached(self, source_path: str, max_width: int | None = None,
                      max_height: int | None = None) -> str:
        """Return a servable URL for ``source_path``, creating the cache entry if needed.

        Falls back to the original ``/photos/...`` URL on any error.
        """
        max_w = max_width or self.max_width
        max_h = max_height or self.max_height
        try:
            rel = self.relative_path(source_path)
            dest = self.cached_path(rel)
            os.makedirs(os.path.dirname(dest), exist_ok=True)

            if not os.path.isfile(dest):
                if self._store(source_path, dest, max_w, max_h):
                    logger.info("Cached resized %s", rel)
                else:
                    logger.debug("Cached copy %s", rel)
            return CACHE_URL_PREFIX + rel
        except Exception as e:
            logger.warning("Cache error for %s: %s: %s",
                           source_path, type(e).__name__, e)
            return _photo_fallback_url(source_path, self.photos_dir)

    def _store(self, source_path: str, dest: str, max_w: int, max_h: int) -> bool:
        """Write the cache file; returns True when the image had to be resized."""
        with Image.open(source_path) as img:
            width, height = img.size
            if width <= max_w and height <= max_h:
                resize = False
            else:
                resize = True
                fmt = img.format
                exif = img.getexif()
                img.thumbnail((max_w, max_h), Image.Resampling.LANCZOS)
                self._write_atomic(
                    dest, lambda tmp: self._save_resized(img, tmp, fmt, exif))

        if not resize:
            self._write_atomic(dest, lambda tmp: shutil.copyfile(source_path, tmp))
        return resize

    def _save_resized(self, img: Image.Image, path: str, fmt: str | None,
                      exif: Image.Exif) -> None:
        # Multi-picture camera JPEGs are written back as plain JPEG.
        fmt = "JPEG" if fmt in (None, "MPO") else fmt
        out = img
        if fmt == "JPEG" and out.mode not in ("RGB", "L", "CMYK"):
            out = out.convert("RGB")

        params: dict = {}
        if fmt == "JPEG":
            params["quality"] = self.jpeg_quality
        # Pixels are stored as decoded; a stale orientation tag would make
        # viewers rotate them a second time.
        if ORIENTATION_TAG in exif:
            exif[ORIENTATION_TAG] = 1
        if fmt in EXIF_FORMATS and len(exif):
            params["exif"] = exif.tobytes()

        out.save(path, format=fmt, **params)

    @staticmethod
    def _write_atomic(dest: str, write: Callable[[str], object]) -> None:
        fd, tmp = tempfile.mkstemp(prefix=".", suffix=".part",
                                   dir=os.path.dirname(dest))
        os.close(fd)
        try:
            write(tmp)
            os.chmod(tmp, FILE_MODE)
            os.replace(tmp, dest)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp)
            raise
