"""
Unit tests for pixel classification rules.
"""
import pytest

from colormatch.services.colors.classification import (
    HUE_WEDGES, NEUTRAL_RULES, Classification, HueLabel, Shade,
    classify_pixel, debug_recolor, hue_wedge_label, match_neutral_rule, shade_for_value
)
from colormatch.services.colors.conversion import PixelSample


class TestNeutralRules:
    """Each neutral rule in isolation, in evaluation order."""

    def test_rule_order(self):
        assert [rule.name for rule in NEUTRAL_RULES] == [
            "achromatic", "dark_desaturated", "warm_desaturated", "tan_brown"
        ]

    @pytest.mark.parametrize("hsv,rule", [
        ((200, 5, 60), "achromatic"),
        ((0, 0, 100), "achromatic"),
        ((200, 12, 15), "dark_desaturated"),
        ((200, 15, 20), "dark_desaturated"),
        ((30, 14, 80), "warm_desaturated"),
        ((45, 15, 95), "warm_desaturated"),
        ((30, 40, 60), "tan_brown"),
        ((0, 70, 20), "tan_brown"),
        ((45, 16, 90), "tan_brown"),
    ])
    def test_matching_rule(self, hsv, rule):
        assert match_neutral_rule(*hsv) == rule

    @pytest.mark.parametrize("hsv", [
        (200, 6, 60),     # just above achromatic, cool hue
        (200, 16, 15),    # too saturated for dark_desaturated
        (46, 14, 80),     # outside the warm hue range
        (30, 71, 60),     # too saturated for tan/brown
        (30, 40, 91),     # too bright for tan/brown
        (30, 40, 19),     # too dark for tan/brown
    ])
    def test_not_neutral(self, hsv):
        assert match_neutral_rule(*hsv) is None


class TestHueWedges:
    """Test the twelve 30° hue wedges."""

    def test_twelve_contiguous_wedges(self):
        assert len(HUE_WEDGES) == 12
        assert HUE_WEDGES[0][0] == 0
        assert HUE_WEDGES[-1][1] == 360
        for (_, end, _), (start, _, _) in zip(HUE_WEDGES, HUE_WEDGES[1:]):
            assert end == start

    @pytest.mark.parametrize("hue,label", [
        (0, HueLabel.RED),
        (29, HueLabel.RED),
        (30, HueLabel.ORANGE),
        (60, HueLabel.YELLOW),
        (90, HueLabel.YELLOW_GREEN),
        (120, HueLabel.GREEN),
        (150, HueLabel.CYAN_GREEN),
        (180, HueLabel.CYAN),
        (210, HueLabel.BLUE),
        (240, HueLabel.INDIGO),
        (270, HueLabel.VIOLET),
        (300, HueLabel.MAGENTA),
        (330, HueLabel.RED_MAGENTA),
        (359, HueLabel.RED_MAGENTA),
    ])
    def test_wedge_lookup(self, hue, label):
        assert hue_wedge_label(hue) is label

    def test_last_wedge_is_catch_all(self):
        assert hue_wedge_label(360) is HueLabel.RED_MAGENTA

    def test_label_positions_and_names(self):
        assert HueLabel.NEUTRAL.position == 0
        assert HueLabel.RED_MAGENTA.position == 12
        assert HueLabel.CYAN_GREEN.color_name == "Cyan-green"
        assert HueLabel.from_position(8) is HueLabel.BLUE
        with pytest.raises(ValueError):
            HueLabel.from_position(13)


class TestShades:
    """Test value-based shade banding."""

    @pytest.mark.parametrize("value,shade", [
        (0, Shade.NEUTRAL),
        (19, Shade.NEUTRAL),
        (20, Shade.DARK),
        (39, Shade.DARK),
        (40, Shade.MEDIUM),
        (54, Shade.MEDIUM),
        (55, Shade.LIGHT),
        (100, Shade.LIGHT),
    ])
    def test_bands(self, value, shade):
        assert shade_for_value(value) is shade

    def test_ranks(self):
        assert [s.rank for s in (Shade.NEUTRAL, Shade.LIGHT, Shade.MEDIUM, Shade.DARK)] == [0, 1, 2, 3]


class TestClassifyPixel:
    """Test full classification precedence."""

    def test_saturated_orange(self):
        result = classify_pixel(PixelSample(30, 80, 60))
        assert result.label is HueLabel.ORANGE
        assert result.shade is Shade.LIGHT
        assert not result.is_neutral

    def test_neutral_rule_wins_over_hue(self):
        result = classify_pixel(PixelSample(30, 40, 60))
        assert result.label is HueLabel.NEUTRAL
        assert result.neutral_rule == "tan_brown"
        assert result.is_neutral

    def test_dark_value_is_neutral_shade_independent_of_hue(self):
        result = classify_pixel(PixelSample(200, 50, 10))
        assert result.label is HueLabel.CYAN
        assert result.shade is Shade.NEUTRAL
        assert result.is_neutral

    def test_bright_warm_tone_escapes_tan_rule(self):
        result = classify_pixel(PixelSample(45, 50, 95))
        assert result.label is HueLabel.ORANGE
        assert result.shade is Shade.LIGHT

    def test_total_and_deterministic(self):
        for h in range(0, 360, 7):
            for s in range(0, 101, 9):
                for v in range(0, 101, 9):
                    first = classify_pixel(PixelSample(h, s, v))
                    assert isinstance(first, Classification)
                    assert first == classify_pixel(PixelSample(h, s, v))


class TestDebugRecolor:
    """Debug repainting never touches the input sample."""

    def test_neutral_becomes_gray(self):
        sample = PixelSample(30, 40, 60)
        painted = debug_recolor(sample, classify_pixel(sample))
        assert painted == PixelSample(0, 0, 60)

    def test_color_becomes_wedge_center(self):
        sample = PixelSample(125, 90, 45)
        painted = debug_recolor(sample, classify_pixel(sample))
        assert painted == PixelSample(135, 100, 50)
        assert sample == PixelSample(125, 90, 45)
