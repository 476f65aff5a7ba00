"""
Bucket aggregation for classified pixels.

Pixels are accumulated into buckets keyed by (hue label, shade), with every
neutral pixel folded into one neutral bucket. After accumulation the buckets
get their statistics and are reduced by two merge passes (hue, then shade)
that treat the bucket list as circular.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from loguru import logger

from .classification import Classification, HueLabel, Shade
from .conversion import PixelSample

BucketKey = Tuple[HueLabel, Shade]

NEUTRAL_KEY: BucketKey = (HueLabel.NEUTRAL, Shade.NEUTRAL)


@dataclass
class ColorBucket:
    """An aggregated region of pixels sharing a hue wedge and a shade."""
    label: HueLabel
    shade: Shade
    count: int = 0
    percentage: float = 0.0
    mean_hue: float = 0.0
    hue_std_dev: float = 0.0
    mean_value: float = 0.0
    value_std_dev: float = 0.0
    pixels: List[PixelSample] = field(default_factory=list, repr=False)

    @property
    def hue_label(self) -> int:
        return self.label.position

    @property
    def hue_name(self) -> str:
        return self.label.color_name

    @property
    def is_neutral(self) -> bool:
        return self.label is HueLabel.NEUTRAL

    @property
    def key(self) -> BucketKey:
        return self.label, self.shade

    def add(self, sample: PixelSample) -> None:
        self.pixels.append(sample)
        self.count += 1


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def mean_and_std_dev(values: List[int]) -> Tuple[int, float]:
    """
    Mean rounded to the nearest integer and population standard deviation
    around that rounded mean. Linear statistics, also for hue.
    """
    if not values:
        return 0, 0.0

    mean = _round_half_up(sum(values) / len(values))
    variance = sum((x - mean) ** 2 for x in values) / len(values)
    return mean, math.sqrt(variance)


def compute_statistics(buckets: List[ColorBucket], total_pixels: int) -> List[ColorBucket]:
    """
    Annotate buckets with percentage and hue/value statistics.

    Returns a new list sorted ascending by count. An empty image leaves every
    percentage at zero.
    """
    if total_pixels > 0:
        for bucket in buckets:
            bucket.percentage = bucket.count / total_pixels * 100

    ordered = sorted(buckets, key=lambda b: b.count)

    for bucket in ordered:
        bucket.mean_hue, bucket.hue_std_dev = mean_and_std_dev([p.hue for p in bucket.pixels])
        bucket.mean_value, bucket.value_std_dev = mean_and_std_dev([p.value for p in bucket.pixels])

    return ordered


def hue_adjacent(a: ColorBucket, b: ColorBucket) -> bool:
    return abs(a.hue_label % 12 - b.hue_label % 12) == 1


def shade_adjacent(a: ColorBucket, b: ColorBucket) -> bool:
    return abs(a.shade.rank - b.shade.rank) == 1 and a.label == b.label


def _absorb(target: ColorBucket, other: ColorBucket) -> None:
    target.count += other.count
    target.percentage += other.percentage
    target.pixels.extend(other.pixels)
    other.pixels.clear()


def merge_by_hue(buckets: List[ColorBucket], max_std_dev: float = 5.0) -> int:
    """
    Merge hue-adjacent, homogeneous buckets in place.

    Scans consecutive pairs (wrapping from last to first). The first adjacent
    pair whose hue standard deviations are both below ``max_std_dev`` is merged
    into its first bucket and the scan restarts. The whole pass ends on the
    first pair that is not hue-adjacent.

    Returns:
        Number of merges performed
    """
    merges = 0
    while len(buckets) > 1:
        merged = False
        for i in range(len(buckets)):
            j = (i + 1) % len(buckets)
            first, second = buckets[i], buckets[j]

            if not hue_adjacent(first, second):
                return merges

            if first.hue_std_dev < max_std_dev and second.hue_std_dev < max_std_dev:
                _absorb(first, second)
                first.mean_hue = (first.mean_hue + second.mean_hue) / 2
                del buckets[j]
                merges += 1
                merged = True
                break

        if not merged:
            break

    return merges


def merge_by_shade(buckets: List[ColorBucket], max_value_gap: float = 10) -> int:
    """
    Merge buckets of the same hue one shade rank apart with close mean values.

    Same control flow as ``merge_by_hue``: restart after each merge, stop at
    the first pair that is not shade-adjacent.

    Returns:
        Number of merges performed
    """
    merges = 0
    while len(buckets) > 1:
        merged = False
        for i in range(len(buckets)):
            j = (i + 1) % len(buckets)
            first, second = buckets[i], buckets[j]

            if not shade_adjacent(first, second):
                return merges

            if abs(first.mean_value - second.mean_value) < max_value_gap:
                _absorb(first, second)
                first.mean_value = (first.mean_value + second.mean_value) / 2
                del buckets[j]
                merges += 1
                merged = True
                break

        if not merged:
            break

    return merges


class BucketAggregator:
    """Accumulates classified pixels into color buckets."""

    def __init__(self):
        self._buckets: Dict[BucketKey, ColorBucket] = {}
        self.total_pixels = 0

    @property
    def buckets(self) -> List[ColorBucket]:
        return list(self._buckets.values())

    @property
    def neutral_bucket(self) -> Optional[ColorBucket]:
        return self._buckets.get(NEUTRAL_KEY)

    def _bucket_for(self, key: BucketKey) -> ColorBucket:
        bucket = self._buckets.get(key)
        if bucket is None:
            bucket = ColorBucket(label=key[0], shade=key[1])
            self._buckets[key] = bucket
        return bucket

    def add(self, sample: PixelSample, classification: Classification) -> ColorBucket:
        """Assign one classified pixel to its bucket."""
        if classification.is_neutral:
            key = NEUTRAL_KEY
        else:
            key = (classification.label, classification.shade)

        bucket = self._bucket_for(key)
        bucket.add(sample)
        self.total_pixels += 1
        return bucket

    def merge_partial(self, other: "BucketAggregator") -> "BucketAggregator":
        """
        Fold a partial aggregation (e.g. from another slice of the image) into
        this one. Keyed by (hue label, shade), so the result does not depend on
        how the image was partitioned.
        """
        for key, partial in other._buckets.items():
            bucket = self._bucket_for(key)
            bucket.pixels.extend(partial.pixels)
            bucket.count += partial.count
        self.total_pixels += other.total_pixels
        return self

    def finalize(self,
                 hue_merge_max_std_dev: float = 5.0,
                 shade_merge_max_value_gap: float = 10) -> List[ColorBucket]:
        """
        Run statistics and both merge passes.

        Returns:
            The reduced bucket list, in count-ascending order before merging
        """
        buckets = compute_statistics(self.buckets, self.total_pixels)
        logger.debug(f"Statistics computed for {len(buckets)} buckets over {self.total_pixels} pixels")

        hue_merges = merge_by_hue(buckets, hue_merge_max_std_dev)
        shade_merges = merge_by_shade(buckets, shade_merge_max_value_gap)
        logger.debug(f"Merging: {hue_merges} hue merges, {shade_merges} shade merges, {len(buckets)} buckets left")

        return buckets
