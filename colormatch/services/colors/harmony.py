"""
Color Harmony Engine

Decides whether the significant buckets of an outfit form a harmonious
combination using color-wheel relationships (complementary, analogous,
triadic, split-complementary). All angles are hue degrees on the 0-360 circle.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from loguru import logger

from .buckets import ColorBucket

# Rule names reported with each verdict
RULE_SINGLE_COLOR = "single_color"
RULE_NEUTRAL_PAIR = "neutral_pair"
RULE_COMPLEMENTARY = "complementary"
RULE_ANALOGOUS = "analogous"
RULE_ANALOGOUS_THREE = "analogous_three"
RULE_TRIADIC = "triadic"
RULE_SPLIT_COMPLEMENTARY = "split_complementary"
RULE_TOO_MANY_COLORS = "too_many_colors"
RULE_NO_DOMINANT_COLOR = "no_dominant_color"
RULE_NONE = "no_rule"

DEFAULT_NOISE_FLOOR = 5.0


@dataclass
class HarmonyVerdict:
    """Outcome of harmony evaluation."""
    is_match: bool
    rule: str
    buckets: List[ColorBucket] = field(default_factory=list)
    neutral_removed: bool = False


def angle_difference(a: float, b: float) -> float:
    """Shortest angular distance between two hues, in [0, 180]."""
    diff = abs(a - b)
    return min(diff, 360 - diff)


def is_complementary(a: float, b: float) -> bool:
    return 175 <= angle_difference(a, b) <= 185


def is_analogous(a: float, b: float) -> bool:
    """Two-color analogous test. Deliberately permissive: any pair at least 35° apart."""
    return angle_difference(a, b) >= 35


def is_analogous3(a: float, b: float, c: float) -> bool:
    """Three hues whose linear spread (max - min) is at most 65°."""
    hues = (a, b, c)
    return max(hues) - min(hues) <= 65


def is_triadic(a: float, b: float, c: float) -> bool:
    """All three consecutive gaps around the circle fall within [110, 130]."""
    h1, h2, h3 = sorted((a, b, c))
    gaps = (h2 - h1, h3 - h2, 360 - h3 + h1)
    return all(110 <= gap <= 130 for gap in gaps)


def is_split_complementary(a: float, b: float, c: float) -> bool:
    """
    Some hue acts as the base: the other two are each near-complementary to it
    (150-210° away) and within 60° of each other.
    """
    hues = [a, b, c]
    for i, base in enumerate(hues):
        others = hues[:i] + hues[i + 1:]
        near_complementary = all(150 <= angle_difference(base, other) <= 210 for other in others)
        if near_complementary and angle_difference(others[0], others[1]) <= 60:
            return True
    return False


def two_color_rule(a: float, b: float) -> Optional[str]:
    """Name of the two-color rule satisfied by the hues, or None."""
    if is_complementary(a, b):
        return RULE_COMPLEMENTARY
    if is_analogous(a, b):
        return RULE_ANALOGOUS
    return None


def three_color_rule(a: float, b: float, c: float) -> Optional[str]:
    """Name of the three-color rule satisfied by the hues, or None."""
    if is_analogous3(a, b, c):
        return RULE_ANALOGOUS_THREE
    if is_triadic(a, b, c):
        return RULE_TRIADIC
    if is_split_complementary(a, b, c):
        return RULE_SPLIT_COMPLEMENTARY
    return None


def filter_noise(buckets: Sequence[ColorBucket], noise_floor: float = DEFAULT_NOISE_FLOOR) -> List[ColorBucket]:
    """Drop buckets covering ``noise_floor`` percent of the image or less."""
    return [bucket for bucket in buckets if bucket.percentage > noise_floor]


def strip_first_neutral(buckets: Sequence[ColorBucket]) -> List[ColorBucket]:
    """Remove the first neutral bucket, keeping the order of the rest."""
    remaining = list(buckets)
    for index, bucket in enumerate(remaining):
        if bucket.is_neutral:
            del remaining[index]
            break
    return remaining


def _verdict(rule: Optional[str], buckets: List[ColorBucket], neutral_removed: bool = False) -> HarmonyVerdict:
    return HarmonyVerdict(
        is_match=rule is not None,
        rule=rule or RULE_NONE,
        buckets=buckets,
        neutral_removed=neutral_removed,
    )


def evaluate_harmony(buckets: Sequence[ColorBucket], noise_floor: float = DEFAULT_NOISE_FLOOR) -> HarmonyVerdict:
    """
    Decide whether the merged buckets form a matching combination.

    Never raises. Buckets at or below the noise floor are ignored; a neutral
    bucket pairs with anything and is stripped before testing larger sets.

    Args:
        buckets: Merged, percentage-annotated buckets
        noise_floor: Percentage at or below which a bucket is dropped

    Returns:
        HarmonyVerdict with the deciding rule and the significant buckets
    """
    significant = filter_noise(buckets, noise_floor)
    count = len(significant)
    has_neutral = any(bucket.is_neutral for bucket in significant)
    logger.debug(f"Harmony evaluation: {count} significant of {len(buckets)} buckets, neutral={has_neutral}")

    if count == 0:
        return HarmonyVerdict(is_match=False, rule=RULE_NO_DOMINANT_COLOR, buckets=significant)

    if count == 1:
        return HarmonyVerdict(is_match=True, rule=RULE_SINGLE_COLOR, buckets=significant)

    if count == 2:
        if has_neutral:
            return HarmonyVerdict(is_match=True, rule=RULE_NEUTRAL_PAIR, buckets=significant)
        first, second = significant
        return _verdict(two_color_rule(first.mean_hue, second.mean_hue), significant)

    if count == 3:
        if has_neutral:
            first, second = strip_first_neutral(significant)
            return _verdict(two_color_rule(first.mean_hue, second.mean_hue), significant, neutral_removed=True)
        first, second, third = significant
        return _verdict(three_color_rule(first.mean_hue, second.mean_hue, third.mean_hue), significant)

    if count == 4 and has_neutral:
        first, second, third = strip_first_neutral(significant)
        return _verdict(three_color_rule(first.mean_hue, second.mean_hue, third.mean_hue), significant, neutral_removed=True)

    return HarmonyVerdict(is_match=False, rule=RULE_TOO_MANY_COLORS, buckets=significant)
