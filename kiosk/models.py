from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import (BaseModel, ConfigDict, Field, PrivateAttr,
                      field_validator, model_validator)

from kiosk.errors import UnknownSlideKindError

INFINITE = "infinite"
Infinite = Literal["infinite"]

GLOB_CHARS = "*?["

# Used when the library file is missing or unreadable.
DEFAULT_IMAGE_PATTERNS = ["*.JPG", "*.jpg", "*.png"]


def has_glob(value: str | None) -> bool:
    return bool(value) and any(ch in value for ch in GLOB_CHARS)


class SlideKind(str, Enum):
    STILL = "still"
    ANIMATED = "animated"
    BLANK = "blank"
    HTML = "html"
    YOUTUBE = "youtube"
    MUX = "mux"


# `type` values whose kind is decided by `file`.
FILE_DRIVEN_TYPES = {None, "still", "image", "animated"}


# --- Authored library -------------------------------------------------------

class Panel(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    slides: list[str] = Field(default_factory=list)

    @field_validator("slides", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class SlideDefinition(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: str = Field(min_length=1)
    type: str | None = None
    file: str | None = None
    url: str | None = None
    video_id: str | None = None
    effect: str | None = None
    duration: float | Infinite | None = None
    fps: float | None = None
    repeat: int | Infinite | None = None
    title: str | None = None
    # mux only
    layout: Any = None
    panels: list[Panel] = Field(default_factory=list)

    @field_validator("panels", mode="before")
    @classmethod
    def _panels_none(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("fps", mode="before")
    @classmethod
    def _non_positive_fps(cls, v: Any) -> Any:
        # A zero or negative rate means "use the default rate".
        try:
            return None if v is not None and float(v) <= 0 else v
        except (TypeError, ValueError):
            return v

    def kind(self) -> SlideKind:
        """Classify the slide; raises UnknownSlideKindError for unsupported types."""
        slide_type = self.type.strip().lower() if self.type else None
        if slide_type in FILE_DRIVEN_TYPES:
            if not self.file:
                return SlideKind.BLANK
            return SlideKind.ANIMATED if has_glob(self.file) else SlideKind.STILL
        try:
            kind = SlideKind(slide_type)
        except ValueError:
            raise UnknownSlideKindError(self.id, self.type or "") from None
        if kind in (SlideKind.STILL, SlideKind.ANIMATED):
            raise UnknownSlideKindError(self.id, self.type or "")
        return kind

    def referenced_ids(self) -> list[str]:
        """Slide ids named by this slide's panels, in panel order."""
        return [sid for panel in self.panels for sid in panel.slides]


class IncludeConfig(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    include: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _null_include_is_unset(cls, data: Any) -> Any:
        if isinstance(data, dict) and "include" in data and data["include"] is None:
            return {k: v for k, v in data.items() if k != "include"}
        return data

    @field_validator("include", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v


class LibraryConfig(BaseModel):
    """Decoded slide library: slide definitions plus per-client include lists."""

    slides: list[SlideDefinition] = Field(default_factory=list)
    default: IncludeConfig = Field(default_factory=IncludeConfig)
    clients: dict[str, IncludeConfig] = Field(default_factory=dict)

    _index: dict[str, SlideDefinition] = PrivateAttr(default_factory=dict)

    @field_validator("default", mode="before")
    @classmethod
    def _default_none(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("clients", mode="before")
    @classmethod
    def _clients_none(cls, v: Any) -> Any:
        if v is None:
            return {}
        if isinstance(v, dict):
            return {str(k): ({} if cfg is None else cfg) for k, cfg in v.items()}
        return v

    def model_post_init(self, __context: Any) -> None:
        index: dict[str, SlideDefinition] = {}
        for slide in self.slides:
            index.setdefault(slide.id, slide)
        self._index = index

    def find(self, slide_id: str) -> SlideDefinition | None:
        return self._index.get(slide_id)

    def include_for(self, client_id: str) -> list[str]:
        """Include list for ``client_id``.

        A client entry that sets ``include`` wins even when the list is empty
        (an empty list selects the whole library). Unknown clients, and client
        entries without ``include``, use the default list.
        """
        client_cfg = self.clients.get(client_id)
        if client_cfg is not None and "include" in client_cfg.model_fields_set:
            return list(client_cfg.include)
        return list(self.default.include)


# --- Renderable descriptors -------------------------------------------------

class StillSlide(BaseModel):
    type: Literal["still"] = "still"
    id: str
    url: str
    file: str
    effect: str = "fade"
    duration: float | Infinite = 5
    fps: float = 10
    repeat: int | Infinite = 1
    title: str = ""


class AnimatedSlide(BaseModel):
    type: Literal["animated"] = "animated"
    id: str
    frames: list[str]
    file: str
    effect: str = "animate-smooth"
    duration: float | Infinite
    fps: float = 10
    repeat: int | Infinite = 1
    title: str = ""


class BlankSlide(BaseModel):
    type: Literal["blank"] = "blank"
    id: str
    effect: str = "fade"
    duration: float | Infinite = 5
    title: str = ""


class HtmlSlide(BaseModel):
    type: Literal["html"] = "html"
    id: str
    url: str
    duration: float | Infinite = 10
    title: str = ""


class YoutubeSlide(BaseModel):
    type: Literal["youtube"] = "youtube"
    id: str
    video_id: str
    duration: float | Infinite = 30
    title: str = ""


class MuxSlide(BaseModel):
    # Carries the authored panel structure verbatim, unknown keys included.
    model_config = ConfigDict(extra="allow")

    type: Literal["mux"] = "mux"
    id: str
    layout: Any = None
    panels: list[Panel] = Field(default_factory=list)


SlideDescriptor = Annotated[
    Union[StillSlide, AnimatedSlide, BlankSlide, HtmlSlide, YoutubeSlide, MuxSlide],
    Field(discriminator="type"),
]


# --- API payloads -----------------------------------------------------------

class SlideshowResponse(BaseModel):
    slides: list[SlideDescriptor]


class FramesResponse(BaseModel):
    frames: list[str]


class ImageResponse(BaseModel):
    url: str


class ReloadResponse(BaseModel):
    ok: bool
    slides: int
