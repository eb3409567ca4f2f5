from __future__ import annotations

from kiosk.config import Settings, settings as default_settings
from kiosk.errors import UnknownSlideKindError
from kiosk.images.cache import ImageCache
from kiosk.images.frames import FrameSequence
from kiosk.models import (DEFAULT_IMAGE_PATTERNS, LibraryConfig, SlideDescriptor,
                          SlideKind)
from kiosk.resolver import SlideResolver


def build_frames(settings: Settings | None = None) -> FrameSequence:
    settings = settings or default_settings
    cache = ImageCache(
        photos_dir=settings.photos_dir,
        cache_dir=settings.cache_dir,
        max_width=settings.max_width,
        max_height=settings.max_height,
        jpeg_quality=settings.jpeg_quality,
    )
    return FrameSequence(cache=cache)


def build_resolver(library: LibraryConfig, settings: Settings | None = None) -> SlideResolver:
    return SlideResolver(library=library, frames=build_frames(settings))


def build_slideshow(client_id: str, library: LibraryConfig,
                    settings: Settings | None = None) -> list[SlideDescriptor]:
    return build_resolver(library, settings).resolve(client_id)


def warm_cache(library: LibraryConfig, settings: Settings | None = None) -> int:
    """Resolve every still and animated slide so their cache entries exist.

    Returns the number of image URLs produced.
    """
    resolver = build_resolver(library, settings)
    if not library.slides:
        patterns = list(library.default.include)
        for client_cfg in library.clients.values():
            patterns.extend(client_cfg.include)
        return len(resolver.directory_stills(patterns or DEFAULT_IMAGE_PATTERNS))

    count = 0
    for slide in library.slides:
        try:
            kind = slide.kind()
        except UnknownSlideKindError:
            continue
        if kind not in (SlideKind.STILL, SlideKind.ANIMATED):
            continue
        for descriptor in resolver.expand(slide):
            frames = getattr(descriptor, "frames", None)
            count += len(frames) if frames is not None else 1
    return count
