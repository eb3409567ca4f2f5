from __future__ import annotations


class KioskError(Exception):
    """Base class for playlist/cache errors."""


class UnknownSlideKindError(KioskError):
    def __init__(self, slide_id: str, slide_type: str) -> None:
        super().__init__(f"Slide {slide_id!r} has unknown type {slide_type!r}")
        self.slide_id = slide_id
        self.slide_type = slide_type


class LibraryLoadError(KioskError):
    pass
