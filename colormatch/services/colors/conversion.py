"""
Color space conversion for pixel analysis.

RGB -> HSV conversion truncates hue (degrees), saturation and value (percent)
to integers. Every downstream statistic is computed on those truncated
integers, so the scalar and the vectorised paths must agree bit for bit.
"""

from typing import List, NamedTuple, Tuple

import numpy as np


class PixelSample(NamedTuple):
    """One pixel in HSV: hue 0-360 degrees, saturation and value 0-100 percent."""
    hue: int
    saturation: int
    value: int


def rgb_to_hsv(r: int, g: int, b: int) -> PixelSample:
    """
    Convert an 8-bit RGB triple to a truncated-integer HSV sample.

    Args:
        r: Red channel [0, 255]
        g: Green channel [0, 255]
        b: Blue channel [0, 255]

    Returns:
        PixelSample with hue in degrees and saturation/value in percent
    """
    rf = r / 255.0
    gf = g / 255.0
    bf = b / 255.0

    c_max = max(rf, gf, bf)
    c_min = min(rf, gf, bf)
    delta = c_max - c_min

    if delta == 0:
        hue = 0.0
    elif c_max == rf:
        hue = 60 * (((gf - bf) / delta) % 6)
    elif c_max == gf:
        hue = 60 * ((bf - rf) / delta + 2)
    else:
        hue = 60 * ((rf - gf) / delta + 4)

    if hue < 0:
        hue += 360

    saturation = 0.0 if c_max == 0 else delta / c_max

    return PixelSample(int(hue), int(saturation * 100), int(c_max * 100))


def hsv_to_rgba(hue: float, saturation: float, value: float) -> Tuple[int, int, int, int]:
    """
    Convert an HSV sample back to 8-bit RGBA (alpha fixed at 255).

    Only used for reconstruction and visualisation. Because the forward
    conversion truncates, the round trip is approximate.

    Args:
        hue: Hue in degrees
        saturation: Saturation in percent [0, 100]
        value: Value in percent [0, 100]
    """
    h = hue % 360
    s = saturation / 100.0
    v = value / 100.0

    c = v * s
    x = c * (1 - abs(((h / 60) % 2) - 1))
    m = v - c

    if h < 60:
        rp, gp, bp = c, x, 0.0
    elif h < 120:
        rp, gp, bp = x, c, 0.0
    elif h < 180:
        rp, gp, bp = 0.0, c, x
    elif h < 240:
        rp, gp, bp = 0.0, x, c
    elif h < 300:
        rp, gp, bp = x, 0.0, c
    else:
        rp, gp, bp = c, 0.0, x

    def to_u8(channel: float) -> int:
        return max(0, min(255, round((channel + m) * 255)))

    return to_u8(rp), to_u8(gp), to_u8(bp), 255


def rgba_buffer_to_hsv(rgba: bytes) -> np.ndarray:
    """
    Vectorised RGB -> HSV over a flat RGBA buffer.

    Mirrors ``rgb_to_hsv`` operation for operation so both paths produce the
    same truncated integers. Alpha is ignored.

    Args:
        rgba: Row-major RGBA bytes, 4 bytes per pixel

    Returns:
        Array of shape (N, 3) int32 holding hue, saturation, value
    """
    pixels = np.frombuffer(rgba, dtype=np.uint8).reshape(-1, 4)
    rgb = pixels[:, :3].astype(np.float64) / 255.0
    rf, gf, bf = rgb[:, 0], rgb[:, 1], rgb[:, 2]

    c_max = rgb.max(axis=1)
    c_min = rgb.min(axis=1)
    delta = c_max - c_min
    safe_delta = np.where(delta == 0, 1.0, delta)

    hue = np.select(
        [delta == 0, c_max == rf, c_max == gf],
        [
            np.zeros_like(c_max),
            60 * np.mod((gf - bf) / safe_delta, 6),
            60 * ((bf - rf) / safe_delta + 2),
        ],
        default=60 * ((rf - gf) / safe_delta + 4),
    )
    hue = np.where(hue < 0, hue + 360, hue)

    safe_max = np.where(c_max == 0, 1.0, c_max)
    saturation = np.where(c_max == 0, 0.0, delta / safe_max)

    hsv = np.stack([hue, saturation * 100, c_max * 100], axis=1)
    return np.trunc(hsv).astype(np.int32)


def convert_rgba_buffer(rgba: bytes) -> List[PixelSample]:
    """Convert a flat RGBA buffer into a list of PixelSamples in pixel order."""
    return [PixelSample(*triple) for triple in rgba_buffer_to_hsv(rgba).tolist()]

