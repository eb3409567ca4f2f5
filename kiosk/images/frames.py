from __future__ import annotations

import glob
import logging
import os
from dataclasses import dataclass

from kiosk.images.cache import ImageCache
from kiosk.images.patterns import filter_directory, to_posix

logger = logging.getLogger(__name__)


def _inside(root: str, path: str) -> bool:
    root = os.path.abspath(root)
    path = os.path.abspath(path)
    return path == root or path.startswith(root + os.sep)


@dataclass(frozen=True)
class FrameSequence:
    """Resolves photo-root globs and files to cache URLs."""

    cache: ImageCache

    @property
    def photos_dir(self) -> str:
        return self.cache.photos_dir

    def match(self, pattern: str) -> list[str]:
        """Matching relative paths, sorted; the sort order is the frame order.

        ``glob`` only visits the directories the pattern can reach; the
        candidates are then checked against the case-sensitive segment rules.
        """
        pattern = to_posix(pattern)
        if not pattern or not os.path.isdir(self.photos_dir):
            return []
        candidates: list[str] = []
        for rel in glob.glob(pattern, root_dir=self.photos_dir, recursive=True):
            path = os.path.join(self.photos_dir, rel)
            if _inside(self.photos_dir, path) and os.path.isfile(path):
                candidates.append(to_posix(rel))
        return sorted(filter_directory(candidates, [pattern]))

    def prepare_frames(self, pattern: str) -> list[str]:
        matches = self.match(pattern)
        if not matches:
            logger.debug("No frames match %s", pattern)
        return [
            self.cache.ensure_cached(os.path.join(self.photos_dir, *rel.split("/")))
            for rel in matches
        ]

    def source_path(self, relative_file: str) -> str | None:
        """Absolute path of an existing file under the photo root, else None."""
        rel = to_posix(relative_file)
        if not rel:
            return None
        path = os.path.join(self.photos_dir, *rel.split("/"))
        if not _inside(self.photos_dir, path) or not os.path.isfile(path):
            return None
        return path

    def resolve_image(self, relative_file: str) -> str | None:
        path = self.source_path(relative_file)
        if path is None:
            return None
        return self.cache.ensure_cached(path)
