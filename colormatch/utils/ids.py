"""
ColorMatch Request ID Utilities

Every analysis run carries an id of the form ``cm-<source>-<utc>-<hex8>``:

- ``source`` is ``img`` for an uploaded photo and ``buf`` for a raw RGBA buffer
- ``utc`` is the start time, ``YYYYmmddHHMMSS`` in UTC
- ``hex8`` is random, so runs started in the same second stay distinct

The id is returned in ``AnalysisResult.request_id`` and bound to every log
line of the run.
"""
import re
import uuid
from datetime import datetime, timezone
from typing import Optional

PREFIX = "cm"
SOURCE_IMAGE = "img"
SOURCE_BUFFER = "buf"

REQUEST_ID_PATTERN = rf"^{PREFIX}-({SOURCE_IMAGE}|{SOURCE_BUFFER})-(\d{{14}})-([0-9a-f]{{8}})$"
_REQUEST_ID_RE = re.compile(REQUEST_ID_PATTERN)


def generate_request_id(source: str = SOURCE_IMAGE) -> str:
    """
    Generate the id of one analysis run.

    Args:
        source: ``SOURCE_IMAGE`` or ``SOURCE_BUFFER``
    """
    if source not in (SOURCE_IMAGE, SOURCE_BUFFER):
        raise ValueError(f"Unknown request source: {source}")

    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    return f"{PREFIX}-{source}-{timestamp}-{uuid.uuid4().hex[:8]}"


def request_source(request_id: str) -> Optional[str]:
    """Source of a run (``img`` or ``buf``), or None for ids not issued here."""
    match = _REQUEST_ID_RE.match(request_id)
    return match.group(1) if match else None
