import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

DATA_DIR = Path(__file__).resolve().parent / "data"


@dataclass(frozen=True)
class RenderSettings:
    port: int
    log_level: str
    font_path: Optional[str]
    blue_noise_path: str
    max_source_width: int
    max_source_height: int
    default_dithering: str

    @classmethod
    def from_env(cls) -> "RenderSettings":
        return cls(
            port=int(os.getenv("PORT", "5500")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            font_path=os.getenv("TIMESTAMP_FONT") or None,
            blue_noise_path=os.getenv(
                "BLUE_NOISE_MASK", str(DATA_DIR / "blue_noise_256.png")
            ),
            max_source_width=int(os.getenv("MAX_SOURCE_WIDTH", "0")),
            max_source_height=int(os.getenv("MAX_SOURCE_HEIGHT", "0")),
            default_dithering=os.getenv("DEFAULT_DITHERING", "").strip(),
        )


SETTINGS = RenderSettings.from_env()


# Colors a Spectra-style six-color panel can show, paired with the nibble the
# controller expects for each (GDEP040E01 reference table).
DEVICE_COLORS: Tuple[Tuple[Tuple[int, int, int], int], ...] = (
    ((0, 0, 0), 0x0),
    ((255, 255, 255), 0x1),
    ((255, 255, 0), 0x2),
    ((255, 0, 0), 0x3),
    ((0, 0, 255), 0x5),
    ((0, 255, 0), 0x6),
)


def configure_logging() -> logging.Logger:
    logging.basicConfig(level=SETTINGS.log_level)
    return logging.getLogger("photoframe-render")
