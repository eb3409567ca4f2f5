from __future__ import annotations

import argparse
import sys

from kiosk.config import settings
from kiosk.errors import LibraryLoadError, UnknownSlideKindError
from kiosk.images.frames import FrameSequence
from kiosk.library import read_library_file
from kiosk.models import LibraryConfig, SlideKind
from kiosk.pipeline import build_frames
from kiosk.resolver import youtube_video_id


def _print_result(name: str, ok: bool, detail: str) -> None:
    status = "OK" if ok else "FAILED"
    print(f"{name}: {status} - {detail}")


def find_problems(library: LibraryConfig, frames: FrameSequence) -> list[str]:
    """Everything that would make the resolver skip a slide or drop an id."""
    problems: list[str] = []

    for slide in library.slides:
        try:
            kind = slide.kind()
        except UnknownSlideKindError as e:
            problems.append(str(e))
            continue

        if kind is SlideKind.STILL and frames.source_path(slide.file or "") is None:
            problems.append(f"Slide {slide.id!r}: file {slide.file!r} not found")
        elif kind is SlideKind.ANIMATED and not frames.match(slide.file or ""):
            problems.append(f"Slide {slide.id!r}: no files match {slide.file!r}")
        elif kind is SlideKind.HTML and not slide.url:
            problems.append(f"Slide {slide.id!r}: html slide without url")
        elif kind is SlideKind.YOUTUBE and not youtube_video_id(slide):
            problems.append(f"Slide {slide.id!r}: no YouTube video id")
        elif kind is SlideKind.MUX:
            for ref in slide.referenced_ids():
                if library.find(ref) is None:
                    problems.append(f"Mux {slide.id!r}: unknown panel slide {ref!r}")

    if library.slides:
        includes = [("default", library.default.include)]
        includes += [(f"client {cid!r}", cfg.include) for cid, cfg in library.clients.items()]
        for owner, ids in includes:
            for sid in ids:
                if library.find(sid) is None:
                    problems.append(f"{owner}: unknown slide id {sid!r}")
    return problems


def main() -> int:
    parser = argparse.ArgumentParser(description="Validate a kiosk slide library")
    parser.add_argument("--config", type=str, default=None,
                        help="Slide library YAML (default: CONFIG_PATH)")
    args = parser.parse_args()
    path = args.config or settings.config_path

    try:
        library = read_library_file(path)
    except LibraryLoadError as e:
        _print_result("Library", False, str(e))
        return 1
    _print_result("Library", True, f"{len(library.slides)} slides in {path}")

    problems = find_problems(library, build_frames(settings))
    for problem in problems:
        _print_result("Slides", False, problem)
    if not problems:
        _print_result("Slides", True, "all references resolve")
    return 1 if problems else 0


if __name__ == "__main__":
    sys.exit(main())
