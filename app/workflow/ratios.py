"""
Purpose:
- Fixed catalog of aspect ratios the image model accepts.
- Display order is the enum order.
"""

from __future__ import annotations
from enum import Enum
from typing import List, Dict
from ..core.errors import UnknownAspectRatioError

class AspectRatio(str, Enum):
    SQUARE = "1:1"
    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"
    STANDARD = "4:3"
    PORTRAIT_3_4 = "3:4"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def width_height(self) -> tuple[int, int]:
        w, h = self.value.split(":")
        return int(w), int(h)

    @property
    def ratio(self) -> float:
        w, h = self.width_height
        return w / h

    @property
    def slug(self) -> str:
        # "16:9" -> "16x9", used in download filenames
        return self.value.replace(":", "x")

    @classmethod
    def parse(cls, value: str) -> "AspectRatio":
        try:
            return cls(value.strip())
        except ValueError:
            raise UnknownAspectRatioError(f"Unknown aspect ratio: {value!r}") from None

_LABELS: Dict[AspectRatio, str] = {
    AspectRatio.SQUARE: "Square (1:1)",
    AspectRatio.LANDSCAPE: "Landscape (16:9)",
    AspectRatio.PORTRAIT: "Portrait (9:16)",
    AspectRatio.STANDARD: "Standard (4:3)",
    AspectRatio.PORTRAIT_3_4: "Portrait (3:4)",
}

def catalog() -> List[Dict[str, str]]:
    return [{"value": r.value, "label": r.label} for r in AspectRatio]
