from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from kiosk.errors import UnknownSlideKindError
from kiosk.images.frames import FrameSequence
from kiosk.models import (DEFAULT_IMAGE_PATTERNS, INFINITE, AnimatedSlide,
                          BlankSlide, HtmlSlide, Infinite, LibraryConfig,
                          MuxSlide, SlideDefinition, SlideDescriptor,
                          SlideKind, StillSlide, YoutubeSlide)

logger = logging.getLogger(__name__)

DEFAULT_FPS = 10
DEFAULT_STILL_DURATION = 5
DEFAULT_BLANK_DURATION = 5
# Pages need time to load and render.
DEFAULT_HTML_DURATION = 10
DEFAULT_YOUTUBE_DURATION = 30

_YOUTUBE_ID_PATTERNS = [
    re.compile(r"youtube(?:-nocookie)?\.com/(?:embed|shorts|live)/([A-Za-z0-9_-]+)"),
    re.compile(r"youtube\.com/watch\?(?:.*&)?v=([A-Za-z0-9_-]+)"),
    re.compile(r"youtu\.be/([A-Za-z0-9_-]+)"),
]


def youtube_video_id(slide: SlideDefinition) -> str | None:
    explicit = (slide.video_id or "").strip()
    if explicit:
        return explicit
    url = (slide.url or "").strip()
    for pattern in _YOUTUBE_ID_PATTERNS:
        m = pattern.search(url)
        if m:
            return m.group(1)
    return None


def _animation_duration(frame_count: int, repeat: int | Infinite, fps: float,
                        explicit: float | Infinite | None) -> float | Infinite:
    if explicit:
        return explicit
    if repeat == INFINITE:
        return INFINITE
    return frame_count * repeat / fps


@dataclass(frozen=True)
class SlideResolver:
    """Turns a client's include list into a flat list of renderable slides.

    Mux slides are followed by everything their panels reference, depth-first.
    Each top-level mux gets its own seen-set, so cyclic panels terminate and a
    slide reached twice inside one mux is emitted once.
    """

    library: LibraryConfig
    frames: FrameSequence

    def include_ids(self, client_id: str) -> list[str]:
        ids = self.library.include_for(client_id)
        return ids or [s.id for s in self.library.slides]

    def resolve(self, client_id: str) -> list[SlideDescriptor]:
        if not self.library.slides:
            expanded = self.resolve_directory(client_id)
            logger.info("Built directory slideshow for %s: %d slides total",
                        client_id, len(expanded))
            return expanded

        expanded: list[SlideDescriptor] = []
        for slide_id in self.include_ids(client_id):
            slide = self.library.find(slide_id)
            if slide is None:
                logger.warning("Skipping unknown slide id %r for %s", slide_id, client_id)
                continue
            expanded.extend(self.expand(slide))

        if not expanded:
            logger.warning("No playable slides for %s; showing every file slide", client_id)
            for slide in self.library.slides:
                if slide.file and self._kind(slide) in (SlideKind.STILL, SlideKind.ANIMATED):
                    expanded.extend(self.expand(slide))

        logger.info("Built slideshow for %s: %d slides total", client_id, len(expanded))
        return expanded

    def resolve_directory(self, client_id: str) -> list[SlideDescriptor]:
        """Playlist for a library without slides: every matching photo, as stills."""
        patterns = self.library.include_for(client_id) or DEFAULT_IMAGE_PATTERNS
        return self.directory_stills(patterns)

    def directory_stills(self, patterns: list[str]) -> list[SlideDescriptor]:
        matched = sorted({rel for pattern in patterns for rel in self.frames.match(pattern)})
        expanded: list[SlideDescriptor] = []
        for rel in matched:
            still = self._still(SlideDefinition(id=rel, file=rel))
            if still is not None:
                expanded.append(still)
        return expanded

    def expand(self, slide: SlideDefinition) -> list[SlideDescriptor]:
        kind = self._kind(slide)
        if kind is None:
            return []
        if kind is SlideKind.MUX:
            return self._expand_mux(slide, {slide.id})
        descriptor = self._single(slide, kind)
        return [descriptor] if descriptor is not None else []

    def _kind(self, slide: SlideDefinition) -> SlideKind | None:
        try:
            return slide.kind()
        except UnknownSlideKindError as e:
            logger.warning("%s; skipping", e)
            return None

    def _expand_mux(self, slide: SlideDefinition,
                    seen: set[str]) -> list[SlideDescriptor]:
        expanded: list[SlideDescriptor] = [self._mux(slide)]
        for ref in slide.referenced_ids():
            if ref in seen:
                continue
            child = self.library.find(ref)
            if child is None:
                logger.warning("Mux %r references unknown slide %r", slide.id, ref)
                continue
            seen.add(ref)
            kind = self._kind(child)
            if kind is None:
                continue
            if kind is SlideKind.MUX:
                expanded.extend(self._expand_mux(child, seen))
                continue
            descriptor = self._single(child, kind)
            if descriptor is not None:
                expanded.append(descriptor)
        return expanded

    def _single(self, slide: SlideDefinition,
                kind: SlideKind) -> SlideDescriptor | None:
        if kind is SlideKind.STILL:
            return self._still(slide)
        if kind is SlideKind.ANIMATED:
            return self._animated(slide)
        if kind is SlideKind.BLANK:
            return self._blank(slide)
        if kind is SlideKind.HTML:
            return self._html(slide)
        if kind is SlideKind.YOUTUBE:
            return self._youtube(slide)
        raise UnknownSlideKindError(slide.id, kind.value)

    def _mux(self, slide: SlideDefinition) -> MuxSlide:
        data = slide.model_dump(exclude_none=True)
        data["type"] = SlideKind.MUX.value
        return MuxSlide.model_validate(data)

    def _still(self, slide: SlideDefinition) -> StillSlide | None:
        path = self.frames.source_path(slide.file or "")
        if path is None:
            logger.warning("Missing file %r for slide %r", slide.file, slide.id)
            return None
        return StillSlide(
            id=slide.id,
            url=self.frames.cache.ensure_cached(path),
            file=slide.file,
            effect=slide.effect or "fade",
            duration=slide.duration or DEFAULT_STILL_DURATION,
            fps=slide.fps or DEFAULT_FPS,
            repeat=slide.repeat or 1,
            title=slide.title or "",
        )

    def _animated(self, slide: SlideDefinition) -> AnimatedSlide | None:
        frames = self.frames.prepare_frames(slide.file or "")
        if not frames:
            logger.warning("No frames match %r for slide %r", slide.file, slide.id)
            return None
        fps = slide.fps or DEFAULT_FPS
        repeat = slide.repeat or 1
        return AnimatedSlide(
            id=slide.id,
            frames=frames,
            file=slide.file,
            effect=slide.effect or "animate-smooth",
            duration=_animation_duration(len(frames), repeat, fps, slide.duration),
            fps=fps,
            repeat=repeat,
            title=slide.title or "",
        )

    def _blank(self, slide: SlideDefinition) -> BlankSlide:
        return BlankSlide(
            id=slide.id,
            effect=slide.effect or "fade",
            duration=slide.duration or DEFAULT_BLANK_DURATION,
            title=slide.title or "",
        )

    def _html(self, slide: SlideDefinition) -> HtmlSlide | None:
        if not slide.url:
            logger.warning("HTML slide %r has no url; skipping", slide.id)
            return None
        return HtmlSlide(
            id=slide.id,
            url=slide.url,
            duration=slide.duration or DEFAULT_HTML_DURATION,
            title=slide.title or "",
        )

    def _youtube(self, slide: SlideDefinition) -> YoutubeSlide | None:
        video_id = youtube_video_id(slide)
        if not video_id:
            logger.warning("YouTube slide %r has no video id; skipping", slide.id)
            return None
        return YoutubeSlide(
            id=slide.id,
            video_id=video_id,
            duration=slide.duration or DEFAULT_YOUTUBE_DURATION,
            title=slide.title or "",
        )
