"""
Test configuration and fixtures for ColorMatch tests.
"""
import io
from typing import List, Sequence, Tuple

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from colormatch.main import app
from colormatch.services.orchestrator import AnalysisOrchestrator

RGB = Tuple[int, int, int]


def stripes_rgba(colors: Sequence[RGB], widths: Sequence[int], height: int = 10) -> Tuple[bytes, int, int]:
    """Build an RGBA buffer of vertical stripes, one per color."""
    width = sum(widths)
    img = np.zeros((height, width, 4), dtype=np.uint8)
    img[:, :, 3] = 255
    x = 0
    for color, stripe_width in zip(colors, widths):
        img[:, x:x + stripe_width, :3] = color
        x += stripe_width
    return img.tobytes(), width, height


def png_bytes(colors: Sequence[RGB], widths: Sequence[int], height: int = 10) -> bytes:
    """Encode stripes as a PNG file."""
    rgba, width, height = stripes_rgba(colors, widths, height)
    image = Image.frombytes("RGBA", (width, height), rgba)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def test_client():
    """Create test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture
def orchestrator():
    """Orchestrator without diagnostic rendering."""
    orch = AnalysisOrchestrator(include_diagnostic=False)
    yield orch
    orch.shutdown()
