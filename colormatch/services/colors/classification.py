"""
Pixel classification into hue wedges and shade levels.

The classifier is a small interpreter over three ordered tables:

- ``NEUTRAL_RULES``: checked first, any match makes the pixel Neutral
- ``HUE_WEDGES``: twelve 30° wedges starting at 0°, the last one is the catch-all
- ``SHADE_BANDS``: value bands; anything outside them is a neutral shade

A pixel goes to the neutral pool when either its hue label or its shade is
neutral.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, NamedTuple, Optional, Tuple

from .conversion import PixelSample


class HueLabel(Enum):
    """Semantic hue label: (wheel position, color name). Position 0 is Neutral."""
    NEUTRAL = (0, "Neutral")
    RED = (1, "Red")
    ORANGE = (2, "Orange")
    YELLOW = (3, "Yellow")
    YELLOW_GREEN = (4, "Yellow-green")
    GREEN = (5, "Green")
    CYAN_GREEN = (6, "Cyan-green")
    CYAN = (7, "Cyan")
    BLUE = (8, "Blue")
    INDIGO = (9, "Indigo")
    VIOLET = (10, "Violet")
    MAGENTA = (11, "Magenta")
    RED_MAGENTA = (12, "Red-magenta")

    @property
    def position(self) -> int:
        return self.value[0]

    @property
    def color_name(self) -> str:
        return self.value[1]

    @classmethod
    def from_position(cls, position: int) -> "HueLabel":
        for label in cls:
            if label.position == position:
                return label
        raise ValueError(f"Invalid hue label position: {position}")


class Shade(str, Enum):
    """Coarse brightness level derived from HSV value."""
    NEUTRAL = "neutral"
    LIGHT = "light"
    MEDIUM = "medium"
    DARK = "dark"

    @property
    def rank(self) -> int:
        return _SHADE_RANKS[self]


_SHADE_RANKS = {
    Shade.NEUTRAL: 0,
    Shade.LIGHT: 1,
    Shade.MEDIUM: 2,
    Shade.DARK: 3,
}


class NeutralRule(NamedTuple):
    """A named predicate over (hue, saturation, value)."""
    name: str
    matches: Callable[[int, int, int], bool]


# Evaluation order matters: the first matching rule is reported.
NEUTRAL_RULES: List[NeutralRule] = [
    NeutralRule("achromatic", lambda h, s, v: s <= 5),
    NeutralRule("dark_desaturated", lambda h, s, v: s <= 15 and v <= 20),
    NeutralRule("warm_desaturated", lambda h, s, v: 0 <= h <= 45 and s <= 15),
    # tan and brown tones
    NeutralRule("tan_brown", lambda h, s, v: 0 <= h <= 45 and 10 < s <= 70 and 20 <= v <= 90),
]

WEDGE_WIDTH = 30

# (start inclusive, end exclusive, label); the last wedge also catches anything unmatched
HUE_WEDGES: List[Tuple[int, int, HueLabel]] = [
    (index * WEDGE_WIDTH, (index + 1) * WEDGE_WIDTH, label)
    for index, label in enumerate(list(HueLabel)[1:])
]

# (low inclusive, high exclusive, shade); the light band includes value 100
SHADE_BANDS: List[Tuple[int, int, Shade]] = [
    (20, 40, Shade.DARK),
    (40, 55, Shade.MEDIUM),
    (55, 101, Shade.LIGHT),
]

# Value used to paint each shade in debug visualisations
SHADE_DISPLAY_VALUES = {
    Shade.LIGHT: 85,
    Shade.MEDIUM: 50,
    Shade.DARK: 30,
}


@dataclass(frozen=True)
class Classification:
    """Result of classifying one pixel."""
    label: HueLabel
    shade: Shade
    neutral_rule: Optional[str] = None

    @property
    def is_neutral(self) -> bool:
        """True when the pixel belongs in the single neutral bucket."""
        return self.label is HueLabel.NEUTRAL or self.shade is Shade.NEUTRAL


def match_neutral_rule(hue: int, saturation: int, value: int) -> Optional[str]:
    """Return the name of the first neutral rule matching, or None."""
    for rule in NEUTRAL_RULES:
        if rule.matches(hue, saturation, value):
            return rule.name
    return None


def hue_wedge_label(hue: int) -> HueLabel:
    """Map a hue in degrees to its 30° wedge label."""
    for start, end, label in HUE_WEDGES[:-1]:
        if start <= hue < end:
            return label
    return HUE_WEDGES[-1][2]


def shade_for_value(value: int) -> Shade:
    """Map an HSV value (percent) to a shade level."""
    for low, high, shade in SHADE_BANDS:
        if low <= value < high:
            return shade
    return Shade.NEUTRAL


def classify_pixel(sample: PixelSample) -> Classification:
    """
    Classify one HSV sample into a hue label and a shade.

    Total over valid samples: always returns exactly one classification.
    """
    hue, saturation, value = sample

    rule = match_neutral_rule(hue, saturation, value)
    label = HueLabel.NEUTRAL if rule else hue_wedge_label(hue)

    return Classification(label=label, shade=shade_for_value(value), neutral_rule=rule)


def debug_recolor(sample: PixelSample, classification: Classification) -> PixelSample:
    """
    Repaint a sample with the canonical color of its bucket.

    For visualisation only; statistics always use the original sample.
    """
    if classification.is_neutral:
        return PixelSample(0, 0, sample.value)

    wedge_center = (classification.label.position - 1) * WEDGE_WIDTH + WEDGE_WIDTH // 2
    return PixelSample(wedge_center, 100, SHADE_DISPLAY_VALUES[classification.shade])
