"""Per-frame configuration consumed by the rendering pipeline.

Values mirror the photo-frame server's ``[photoframes.<id>]`` tables. Every
field is optional in the source mapping and falls back to the defaults below.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Tuple, Type, TypeVar

from .errors import ConfigError

E = TypeVar("E", bound="_ChoiceEnum")


class _ChoiceEnum(str, Enum):
    @classmethod
    def parse(cls: Type[E], value: Any, default: E) -> E:
        if value is None or value == "":
            return default
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower().replace("-", "_")
        try:
            return cls(normalized)
        except ValueError:
            choices = ", ".join(member.value for member in cls)
            raise ConfigError(f"invalid {cls.__name__} {value!r}; expected one of {choices}") from None


class Orientation(_ChoiceEnum):
    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"


class ScalingMode(_ChoiceEnum):
    CONTAIN = "contain"
    COVER = "cover"


class OutputFormat(_ChoiceEnum):
    PNG = "png"
    PACKED_4BPP = "packed4bpp"


class TimestampPosition(_ChoiceEnum):
    TOP_LEFT = "top_left"
    TOP_CENTER = "top_center"
    TOP_RIGHT = "top_right"
    BOTTOM_LEFT = "bottom_left"
    BOTTOM_CENTER = "bottom_center"
    BOTTOM_RIGHT = "bottom_right"

    @property
    def is_top(self) -> bool:
        return self.value.startswith("top")

    @property
    def horizontal(self) -> str:
        return self.value.split("_", 1)[1]


class TimestampColor(_ChoiceEnum):
    WHITE_BACKGROUND = "white_background"
    BLACK_BACKGROUND = "black_background"
    TRANSPARENT_WHITE_TEXT = "transparent_white_text"
    TRANSPARENT_BLACK_TEXT = "transparent_black_text"
    TRANSPARENT_AUTO_TEXT = "transparent_auto_text"

    @property
    def has_background(self) -> bool:
        return self in (TimestampColor.WHITE_BACKGROUND, TimestampColor.BLACK_BACKGROUND)


class StrokeColor(_ChoiceEnum):
    AUTO = "auto"
    WHITE = "white"
    BLACK = "black"


@dataclass(frozen=True)
class Overscan:
    left: int = 0
    right: int = 0
    top: int = 0
    bottom: int = 0

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "Overscan":
        if not data:
            return cls()
        return cls(
            left=_as_int(data.get("left"), 0),
            right=_as_int(data.get("right"), 0),
            top=_as_int(data.get("top"), 0),
            bottom=_as_int(data.get("bottom"), 0),
        )

    def clamped(self) -> Tuple[int, int, int, int]:
        """Insets as ``(left, right, top, bottom)`` with negatives treated as zero."""
        return max(0, self.left), max(0, self.right), max(0, self.top), max(0, self.bottom)


@dataclass(frozen=True)
class Adjustments:
    brightness: float = 0.0
    contrast: float = 0.0
    saturation: float = 0.0
    sharpness: float = 0.0

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> Optional["Adjustments"]:
        if data is None:
            return None
        return cls(
            brightness=_as_float(data.get("brightness"), 0.0),
            contrast=_as_float(data.get("contrast"), 0.0),
            saturation=_as_float(data.get("saturation"), 0.0),
            sharpness=_as_float(data.get("sharpness"), 0.0),
        )


@dataclass(frozen=True)
class TimestampConfig:
    enabled: bool = False
    format: str = "%Y-%m-%d"
    font_size: float = 24.0
    position: TimestampPosition = TimestampPosition.BOTTOM_RIGHT
    color: TimestampColor = TimestampColor.TRANSPARENT_AUTO_TEXT
    full_width_banner: bool = False
    banner_height: Optional[int] = None
    padding_horizontal: int = 16
    padding_vertical: int = 16
    stroke_enabled: bool = False
    stroke_width: int = 1
    stroke_color: StrokeColor = StrokeColor.AUTO

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> Optional["TimestampConfig"]:
        if data is None:
            return None
        banner_height = data.get("banner_height")
        font_size = _as_float(data.get("font_size"), 24.0)
        if font_size <= 0:
            raise ConfigError(f"timestamp font_size must be positive, got {font_size!r}")
        return cls(
            enabled=_as_bool(data.get("enabled")),
            format=data.get("format") or "%Y-%m-%d",
            font_size=font_size,
            position=TimestampPosition.parse(data.get("position"), TimestampPosition.BOTTOM_RIGHT),
            color=TimestampColor.parse(data.get("color"), TimestampColor.TRANSPARENT_AUTO_TEXT),
            full_width_banner=_as_bool(data.get("full_width_banner")),
            banner_height=None if banner_height is None else _as_int(banner_height, 0),
            padding_horizontal=_as_int(data.get("padding_horizontal"), 16),
            padding_vertical=_as_int(data.get("padding_vertical"), 16),
            stroke_enabled=_as_bool(data.get("stroke_enabled")),
            stroke_width=_as_int(data.get("stroke_width"), 1),
            stroke_color=StrokeColor.parse(data.get("stroke_color"), StrokeColor.AUTO),
        )


@dataclass(frozen=True)
class PanelSpec:
    panel_width: Optional[int] = None
    panel_height: Optional[int] = None
    orientation: Orientation = Orientation.LANDSCAPE
    scaling: ScalingMode = ScalingMode.CONTAIN
    overscan: Overscan = field(default_factory=Overscan)
    flip: bool = False

    @property
    def has_dimensions(self) -> bool:
        return bool(self.panel_width) and bool(self.panel_height)

    @property
    def native_size(self) -> Optional[Tuple[int, int]]:
        if not self.has_dimensions:
            return None
        return self.panel_width, self.panel_height

    def view_size(self, reduced_height: Optional[int] = None) -> Optional[Tuple[int, int]]:
        """Canvas size in display orientation: wide for landscape, tall for portrait.

        ``reduced_height`` overrides the view height when a banner strip takes
        part of the panel.
        """
        if not self.has_dimensions:
            return None
        long_side = max(self.panel_width, self.panel_height)
        short_side = min(self.panel_width, self.panel_height)
        if self.orientation is Orientation.PORTRAIT:
            width, height = short_side, long_side
        else:
            width, height = long_side, short_side
        if reduced_height is not None:
            height = max(1, reduced_height)
        return width, height


@dataclass(frozen=True)
class PackingFlags:
    swap_nibbles: bool = False
    reverse_rows: bool = False
    reverse_cols: bool = False


@dataclass(frozen=True)
class FrameConfig:
    panel: PanelSpec = field(default_factory=PanelSpec)
    adjustments: Optional[Adjustments] = None
    timestamp: Optional[TimestampConfig] = None
    dithering: Optional[str] = None
    supported_colors: Tuple[str, ...] = ()
    output_format: OutputFormat = OutputFormat.PNG
    packing: PackingFlags = field(default_factory=PackingFlags)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FrameConfig":
        panel = PanelSpec(
            panel_width=_optional_dimension(data.get("panel_width")),
            panel_height=_optional_dimension(data.get("panel_height")),
            orientation=Orientation.parse(data.get("orientation"), Orientation.LANDSCAPE),
            scaling=ScalingMode.parse(data.get("scaling"), ScalingMode.CONTAIN),
            overscan=Overscan.from_dict(data.get("overscan")),
            flip=_as_bool(data.get("flip")),
        )
        colors = data.get("supported_colors") or ()
        if isinstance(colors, str):
            colors = [part for part in colors.split(",") if part.strip()]
        return cls(
            panel=panel,
            adjustments=Adjustments.from_dict(data.get("adjustments")),
            timestamp=TimestampConfig.from_dict(data.get("timestamp")),
            dithering=data.get("dithering") or None,
            supported_colors=tuple(str(color).strip() for color in colors),
            output_format=OutputFormat.parse(data.get("output_format"), OutputFormat.PNG),
            packing=PackingFlags(
                swap_nibbles=_as_bool(data.get("swap_nibbles")),
                reverse_rows=_as_bool(data.get("reverse_rows")),
                reverse_cols=_as_bool(data.get("reverse_cols")),
            ),
        )


def _as_int(value: Any, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"expected an integer, got {value!r}") from None


def _as_float(value: Any, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"expected a number, got {value!r}") from None


def _optional_dimension(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    dimension = _as_int(value, 0)
    if dimension <= 0:
        raise ConfigError(f"panel dimensions must be positive, got {value!r}")
    return dimension


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)
