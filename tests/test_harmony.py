"""
Unit tests for the Color Harmony Engine.

Tests the angle primitives and the bucket-count decision rules.
"""
import itertools
import random

import pytest

from colormatch.services.colors.buckets import ColorBucket
from colormatch.services.colors.classification import HueLabel, Shade
from colormatch.services.colors.harmony import (
    angle_difference, evaluate_harmony, filter_noise, is_analogous, is_analogous3,
    is_complementary, is_split_complementary, is_triadic, strip_first_neutral
)


def bucket(mean_hue, percentage=30.0, label=HueLabel.RED, shade=Shade.LIGHT):
    return ColorBucket(label=label, shade=shade, count=int(percentage * 10),
                       percentage=percentage, mean_hue=mean_hue, mean_value=70)


def neutral(percentage=30.0):
    return bucket(0, percentage, label=HueLabel.NEUTRAL, shade=Shade.NEUTRAL)


class TestAnglePrimitives:
    """Test hue-circle geometry."""

    def test_angle_difference_wraps(self):
        assert angle_difference(350, 10) == 20
        assert angle_difference(10, 350) == 20
        assert angle_difference(0, 180) == 180
        assert angle_difference(90, 90) == 0

    @pytest.mark.parametrize("a,b,expected", [
        (10, 190, True),
        (0, 175, True),
        (0, 174, False),
        (30, 210, True),
        (0, 90, False),
    ])
    def test_complementary(self, a, b, expected):
        assert is_complementary(a, b) is expected

    def test_complementary_is_symmetric(self):
        rng = random.Random(1)
        for _ in range(500):
            a, b = rng.uniform(0, 360), rng.uniform(0, 360)
            assert is_complementary(a, b) == is_complementary(b, a)

    def test_analogous_threshold(self):
        assert is_analogous(0, 35)
        assert is_analogous(10, 100)
        assert not is_analogous(0, 34)
        assert not is_analogous(355, 20)

    def test_analogous3_uses_linear_spread(self):
        assert is_analogous3(10, 40, 75)
        assert not is_analogous3(10, 40, 76)
        # 350/10/20 are close on the circle but the linear spread is 340
        assert not is_analogous3(350, 10, 20)

    def test_triadic(self):
        assert is_triadic(0, 120, 240)
        assert is_triadic(10, 125, 250)
        assert not is_triadic(0, 90, 240)

    def test_triadic_is_permutation_invariant(self):
        for hues in [(0, 120, 240), (15, 140, 250), (0, 90, 240), (200, 330, 80)]:
            results = {is_triadic(*perm) for perm in itertools.permutations(hues)}
            assert len(results) == 1

    def test_split_complementary(self):
        # base 0, others around its complement 180
        assert is_split_complementary(0, 150, 210)
        assert is_split_complementary(150, 0, 210)
        assert not is_split_complementary(0, 150, 100)
        # 140 is not near-complementary to 0
        assert not is_split_complementary(0, 140, 210)


class TestFiltering:
    """Test noise filtering and neutral stripping."""

    def test_noise_floor_is_exclusive(self):
        buckets = [bucket(0, 5.0), bucket(120, 5.01), bucket(240, 3.0)]
        assert [b.mean_hue for b in filter_noise(buckets)] == [120]

    def test_strip_first_neutral_only(self):
        buckets = [bucket(0), neutral(), bucket(120), neutral()]
        remaining = strip_first_neutral(buckets)
        assert len(remaining) == 3
        assert remaining[0].mean_hue == 0
        assert remaining[2].is_neutral


class TestEvaluateHarmony:
    """Test the bucket-count decision rules."""

    def test_single_bucket_matches(self):
        verdict = evaluate_harmony([bucket(200, 60.0)])
        assert verdict.is_match
        assert verdict.rule == "single_color"

    def test_small_bucket_dropped_before_rules(self):
        verdict = evaluate_harmony([bucket(0, 97.0), bucket(180, 3.0)])
        assert verdict.rule == "single_color"
        assert len(verdict.buckets) == 1

    def test_no_significant_bucket(self):
        verdict = evaluate_harmony([bucket(i * 18, 4.0) for i in range(20)])
        assert not verdict.is_match
        assert verdict.rule == "no_dominant_color"

    def test_neutral_pair_matches(self):
        verdict = evaluate_harmony([bucket(10, 50.0), neutral(50.0)])
        assert verdict.is_match
        assert verdict.rule == "neutral_pair"

    def test_complementary_pair(self):
        verdict = evaluate_harmony([bucket(10, 50.0), bucket(190, 50.0)])
        assert verdict.is_match
        assert verdict.rule == "complementary"

    def test_permissive_analogous_pair(self):
        verdict = evaluate_harmony([bucket(10, 50.0), bucket(100, 50.0)])
        assert verdict.is_match
        assert verdict.rule == "analogous"

    def test_close_pair_does_not_match(self):
        verdict = evaluate_harmony([bucket(10, 50.0), bucket(30, 50.0)])
        assert not verdict.is_match
        assert verdict.rule == "no_rule"

    def test_triadic_three(self):
        verdict = evaluate_harmony([bucket(0), bucket(120), bucket(240)])
        assert verdict.is_match
        assert verdict.rule == "triadic"

    def test_analogous_three(self):
        verdict = evaluate_harmony([bucket(60), bucket(90), bucket(120)])
        assert verdict.rule == "analogous_three"

    def test_split_complementary_three(self):
        verdict = evaluate_harmony([bucket(0), bucket(160), bucket(200)])
        assert verdict.is_match
        assert verdict.rule == "split_complementary"

    def test_unrelated_three(self):
        verdict = evaluate_harmony([bucket(0), bucket(90), bucket(200)])
        assert not verdict.is_match

    def test_three_with_neutral_uses_pair_test(self):
        verdict = evaluate_harmony([bucket(10), neutral(), bucket(20)])
        assert verdict.neutral_removed
        assert not verdict.is_match

        verdict = evaluate_harmony([bucket(10), neutral(), bucket(190)])
        assert verdict.is_match
        assert verdict.rule == "complementary"

    def test_four_with_neutral_uses_three_test(self):
        verdict = evaluate_harmony([bucket(0, 25.0), neutral(25.0), bucket(120, 25.0), bucket(240, 25.0)])
        assert verdict.is_match
        assert verdict.neutral_removed
        assert verdict.rule == "triadic"

    def test_four_without_neutral_never_matches(self):
        verdict = evaluate_harmony([bucket(0, 25.0), bucket(5, 25.0), bucket(10, 25.0), bucket(15, 25.0)])
        assert not verdict.is_match
        assert verdict.rule == "too_many_colors"

    def test_five_buckets_never_match(self):
        buckets = [neutral(20.0)] + [bucket(h, 20.0) for h in (0, 10, 20, 30)]
        verdict = evaluate_harmony(buckets)
        assert not verdict.is_match
