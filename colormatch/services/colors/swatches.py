"""
Diagnostic Image Rendering

Draws the classification map (every pixel repainted with the canonical color
of its bucket) above a strip showing the final buckets, widths proportional
to their coverage.
"""

import base64
import io
from typing import Dict, List, Sequence, Tuple

import numpy as np
from loguru import logger
from PIL import Image, ImageDraw

from .buckets import ColorBucket
from .classification import Classification, debug_recolor
from .conversion import PixelSample, hsv_to_rgba

STRIP_HEIGHT = 24
BORDER_COLOR = (0, 0, 0, 255)


def bucket_display_color(bucket: ColorBucket) -> Tuple[int, int, int, int]:
    """Representative RGBA color of a bucket from its mean hue and value."""
    saturation = 0 if bucket.is_neutral else 80
    return hsv_to_rgba(bucket.mean_hue, saturation, bucket.mean_value)


def render_classification_map(samples: Sequence[PixelSample],
                              classifications: Sequence[Classification],
                              width: int,
                              height: int) -> Image.Image:
    """
    Repaint each pixel with its bucket color.

    Repainted colors come from a small palette (one entry per wedge and shade,
    plus one gray per neutral value), so each pixel is mapped to a palette
    index and the RGBA buffer is gathered with numpy in one step.
    """
    if len(samples) != width * height or len(classifications) != len(samples):
        raise ValueError(f"Expected {width * height} classified samples, got {len(samples)}")

    palette_index: Dict[Tuple[Classification, int], int] = {}
    palette: List[Tuple[int, int, int, int]] = []

    def index_of(sample: PixelSample, classification: Classification) -> int:
        key = (classification, sample.value)
        index = palette_index.get(key)
        if index is None:
            index = palette_index[key] = len(palette)
            palette.append(hsv_to_rgba(*debug_recolor(sample, classification)))
        return index

    indices = np.fromiter(
        (index_of(sample, classification) for sample, classification in zip(samples, classifications)),
        dtype=np.int32,
        count=len(samples),
    )
    if not palette:
        palette.append((0, 0, 0, 0))
    painted = np.asarray(palette, dtype=np.uint8)[indices]

    return Image.frombytes("RGBA", (width, height), painted.tobytes())


def render_bucket_strip(buckets: Sequence[ColorBucket], width: int, height: int = STRIP_HEIGHT) -> Image.Image:
    """Horizontal strip with one chip per bucket, sized by percentage."""
    strip = Image.new("RGBA", (width, height), (255, 255, 255, 255))
    draw = ImageDraw.Draw(strip)

    total = sum(bucket.percentage for bucket in buckets)
    if not buckets or total <= 0:
        return strip

    x = 0.0
    for bucket in buckets:
        chip_width = width * bucket.percentage / total
        x_end = x + chip_width
        draw.rectangle([int(x), 0, max(int(x), int(x_end) - 1), height - 1],
                       fill=bucket_display_color(bucket), outline=BORDER_COLOR)
        x = x_end

    return strip


def render_diagnostic_image(samples: Sequence[PixelSample],
                            classifications: Sequence[Classification],
                            buckets: List[ColorBucket],
                            width: int,
                            height: int) -> str:
    """
    Render the diagnostic image for one analysis.

    Returns:
        Base64-encoded PNG string
    """
    classification_map = render_classification_map(samples, classifications, width, height)
    strip = render_bucket_strip(buckets, width)

    canvas = Image.new("RGBA", (width, height + strip.height), (255, 255, 255, 255))
    canvas.paste(classification_map, (0, 0))
    canvas.paste(strip, (0, height))

    buffer = io.BytesIO()
    canvas.save(buffer, format="PNG")
    b64_string = base64.b64encode(buffer.getvalue()).decode("ascii")
    logger.debug(f"Encoded diagnostic image: {width}x{canvas.height} -> {len(b64_string)} chars")

    return b64_string
