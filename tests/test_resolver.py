"""Slide graph resolution against a real photo root."""

from pathlib import Path
from typing import get_type_hints

import pytest

from kiosk.models import (AnimatedSlide, MuxSlide, SlideDefinition, SlideDescriptor,
                          StillSlide)
from kiosk.resolver import DEFAULT_FPS, SlideResolver, youtube_video_id

from conftest import make_image, make_resolver


def _ids(slides):
    return [s.id for s in slides]


def test_scenario_still_animated_and_missing(settings, photos):
    resolver = make_resolver(settings, {
        "slides": [{"id": "a", "file": "a.jpg"}, {"id": "b", "file": "seq_*.jpg"}],
        "clients": {"test-client": {"include": ["a", "b", "missing"]}},
    })
    slides = resolver.resolve("test-client")

    assert _ids(slides) == ["a", "b"]
    still, anim = slides
    assert isinstance(still, StillSlide)
    assert still.url == "/cache/a.jpg"
    assert still.effect == "fade" and still.duration == 5
    assert isinstance(anim, AnimatedSlide)
    assert anim.frames == ["/cache/seq_001.jpg", "/cache/seq_002.jpg"]
    assert anim.effect == "animate-smooth"
    assert anim.duration == pytest.approx(0.2)


def test_missing_id_is_dropped_not_substituted(settings, photos):
    resolver = make_resolver(settings, {
        "slides": [{"id": "a", "file": "a.jpg"}, {"id": "other", "file": "a.jpg"}],
        "default": {"include": ["a", "nope"]},
    })
    assert _ids(resolver.resolve("anyone")) == ["a"]


def test_missing_file_is_skipped(settings, photos):
    resolver = make_resolver(settings, {
        "slides": [{"id": "gone", "file": "gone.jpg"}, {"id": "a", "file": "a.jpg"}],
    })
    assert _ids(resolver.resolve("x")) == ["a"]


def test_empty_glob_is_skipped(settings, photos):
    resolver = make_resolver(settings, {
        "slides": [{"id": "anim", "file": "nothing_*.jpg"}, {"id": "p", "type": "blank"}],
    })
    assert _ids(resolver.resolve("x")) == ["p"]


def test_empty_include_uses_whole_library_in_order(settings, photos):
    resolver = make_resolver(settings, {
        "slides": [
            {"id": "p", "type": "blank"},
            {"id": "a", "file": "a.jpg"},
            {"id": "web", "type": "html", "url": "/pages/clock.html"},
        ],
    })
    assert _ids(resolver.resolve("no-entry")) == ["p", "a", "web"]


def test_all_invalid_includes_fall_back_to_file_slides(settings, photos):
    resolver = make_resolver(settings, {
        "slides": [
            {"id": "p", "type": "blank"},
            {"id": "a", "file": "a.jpg"},
            {"id": "b", "file": "seq_*.jpg"},
        ],
        "default": {"include": ["ghost", "phantom"]},
    })
    assert _ids(resolver.resolve("x")) == ["a", "b"]


def test_blank_defaults(settings):
    resolver = make_resolver(settings, {"slides": [{"id": "pause", "title": "Break"}]})
    (blank,) = resolver.resolve("x")
    assert blank.type == "blank"
    assert blank.duration == 5
    assert blank.title == "Break"


def test_html_slide(settings):
    resolver = make_resolver(settings, {"slides": [
        {"id": "web", "type": "html", "url": "https://example.com/board"},
        {"id": "nourl", "type": "html"},
    ]})
    (html,) = resolver.resolve("x")
    assert html.url == "https://example.com/board"
    assert html.duration == 10


@pytest.mark.parametrize("fields,expected", [
    ({"video_id": "abc123"}, "abc123"),
    ({"url": "https://www.youtube.com/embed/dQw4w9WgXcQ?autoplay=1"}, "dQw4w9WgXcQ"),
    ({"url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=10"}, "dQw4w9WgXcQ"),
    ({"url": "https://youtu.be/dQw4w9WgXcQ"}, "dQw4w9WgXcQ"),
    ({"url": "https://vimeo.com/123"}, None),
    ({}, None),
])
def test_youtube_video_id(fields, expected):
    assert youtube_video_id(SlideDefinition(id="yt", type="youtube", **fields)) == expected


def test_youtube_without_id_is_skipped(settings):
    resolver = make_resolver(settings, {"slides": [
        {"id": "yt", "type": "youtube", "url": "https://www.youtube.com/embed/XYZ"},
        {"id": "bad", "type": "youtube"},
    ]})
    (yt,) = resolver.resolve("x")
    assert yt.video_id == "XYZ"
    assert yt.duration == 30


def test_unknown_kind_is_skipped(settings, photos):
    resolver = make_resolver(settings, {"slides": [
        {"id": "clip", "type": "video", "file": "a.jpg"},
        {"id": "a", "file": "a.jpg"},
    ]})
    assert _ids(resolver.resolve("x")) == ["a"]


def test_animation_duration_rules(settings, photos):
    resolver = make_resolver(settings, {"slides": [
        {"id": "rep", "file": "seq_*.jpg", "repeat": 3, "fps": 10},
        {"id": "inf", "file": "seq_*.jpg", "repeat": "infinite"},
        {"id": "fixed", "file": "seq_*.jpg", "repeat": "infinite", "duration": 12},
    ]})
    rep, inf, fixed = resolver.resolve("x")
    assert rep.duration == pytest.approx(0.6)
    assert inf.duration == "infinite"
    assert inf.repeat == "infinite"
    assert fixed.duration == 12


def test_mux_emits_itself_then_children(settings, photos):
    resolver = make_resolver(settings, {"slides": [
        {"id": "wall", "type": "mux", "layout": "2x1", "panels": [
            {"slides": ["a", "b"]}, {"slides": ["p"]},
        ]},
        {"id": "a", "file": "a.jpg"},
        {"id": "b", "file": "seq_*.jpg"},
        {"id": "p", "type": "blank"},
    ], "default": {"include": ["wall"]}})
    slides = resolver.resolve("x")

    assert _ids(slides) == ["wall", "a", "b", "p"]
    mux = slides[0]
    assert isinstance(mux, MuxSlide)
    assert mux.layout == "2x1"
    assert [p.slides for p in mux.panels] == [["a", "b"], ["p"]]
    assert slides[1].url == "/cache/a.jpg"


def test_mux_keeps_unknown_fields_verbatim(settings):
    resolver = make_resolver(settings, {"slides": [
        {"id": "m", "type": "mux", "gap": 8, "panels": [{"slides": [], "width": "30%"}]},
    ]})
    (mux,) = resolver.resolve("x")
    dumped = mux.model_dump()
    assert dumped["gap"] == 8
    assert dumped["panels"][0]["width"] == "30%"


def test_mux_cycles_terminate_and_emit_each_slide_once(settings, photos):
    resolver = make_resolver(settings, {"slides": [
        {"id": "m1", "type": "mux", "panels": [{"slides": ["a", "m2", "m1"]}]},
        {"id": "m2", "type": "mux", "panels": [{"slides": ["m1", "b", "a"]}, {"slides": ["m2"]}]},
        {"id": "a", "file": "a.jpg"},
        {"id": "b", "file": "seq_*.jpg"},
    ], "default": {"include": ["m1"]}})
    assert _ids(resolver.resolve("x")) == ["m1", "a", "m2", "b"]


def test_self_referencing_mux(settings):
    resolver = make_resolver(settings, {"slides": [
        {"id": "loop", "type": "mux", "panels": [{"slides": ["loop", "loop"]}]},
    ]})
    assert _ids(resolver.resolve("x")) == ["loop"]


def test_seen_set_is_per_top_level_mux(settings, photos):
    resolver = make_resolver(settings, {"slides": [
        {"id": "m1", "type": "mux", "panels": [{"slides": ["a"]}]},
        {"id": "m2", "type": "mux", "panels": [{"slides": ["a", "ghost"]}]},
        {"id": "a", "file": "a.jpg"},
    ], "default": {"include": ["m1", "m2", "a"]}})
    assert _ids(resolver.resolve("x")) == ["m1", "a", "m2", "a", "a"]


def test_directory_library_without_slides(settings, photos):
    make_image(Path(settings.photos_dir) / "b.png", 20, 20)
    make_image(Path(settings.photos_dir) / "notes.gif", 20, 20)
    resolver = make_resolver(settings, {"default": {"include": ["*.jpg", "*.png"]}})
    slides = resolver.resolve("x")
    assert _ids(slides) == ["a.jpg", "b.png", "seq_001.jpg", "seq_002.jpg"]
    assert all(isinstance(s, StillSlide) for s in slides)


def test_directory_library_uses_client_patterns(settings, photos):
    resolver = make_resolver(settings, {"clients": {"lobby": {"include": ["big/*.jpg"]}}})
    (wide,) = resolver.resolve("lobby")
    assert wide.url == "/cache/big/wide.jpg"


def test_fallback_library_is_never_empty_when_files_exist(settings, photos):
    resolver = make_resolver(settings, {"default": {"include": []}})
    assert len(resolver.resolve("unknown-client")) > 0


def test_zero_fps_uses_default_rate(settings, photos):
    resolver = make_resolver(settings, {"slides": [
        {"id": "anim", "file": "seq_*.jpg", "fps": 0},
        {"id": "still", "file": "a.jpg", "fps": 0},
    ]})
    anim, still = resolver.resolve("x")
    assert anim.fps == DEFAULT_FPS
    assert anim.duration == pytest.approx(2 / DEFAULT_FPS)
    assert still.fps == DEFAULT_FPS


def test_explicit_empty_client_include_shows_whole_library(settings, photos):
    resolver = make_resolver(settings, {
        "slides": [{"id": "a", "file": "a.jpg"}, {"id": "p", "type": "blank"}],
        "default": {"include": ["a"]},
        "clients": {"lobby": {"include": []}, "bare": {}},
    })
    assert _ids(resolver.resolve("lobby")) == ["a", "p"]
    assert _ids(resolver.resolve("bare")) == ["a"]
    assert _ids(resolver.resolve("unknown")) == ["a"]


def test_resolver_methods_return_descriptors():
    for method in (SlideResolver.resolve, SlideResolver.expand,
                   SlideResolver.directory_stills):
        hints = get_type_hints(method, include_extras=True)
        assert hints["return"] == list[SlideDescriptor]
