"""
ColorMatch Configuration
Manages environment variables and defaults for the analysis service.
"""
import os
from typing import List

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Configuration class for ColorMatch services."""

    # Upload limits
    MAX_FILE_MB: int = int(os.environ.get("COLORMATCH_MAX_FILE_MB", "10"))
    MAX_EDGE: int = int(os.environ.get("COLORMATCH_MAX_EDGE", "512"))

    # Logging
    LOG_LEVEL: str = os.environ.get("COLORMATCH_LOG_LEVEL", "INFO")
    LOG_JSON: bool = bool(int(os.environ.get("COLORMATCH_LOG_JSON", "0")))

    # Ruleset thresholds (defaults reproduce the fixed ruleset)
    NOISE_FLOOR_PERCENT: float = float(os.environ.get("COLORMATCH_NOISE_FLOOR_PERCENT", "5.0"))
    HUE_MERGE_MAX_STDDEV: float = float(os.environ.get("COLORMATCH_HUE_MERGE_MAX_STDDEV", "5.0"))
    SHADE_MERGE_MAX_VALUE_GAP: float = float(os.environ.get("COLORMATCH_SHADE_MERGE_MAX_VALUE_GAP", "10"))

    # Feature flags
    ENABLE_DIAGNOSTIC_IMAGE: bool = bool(int(os.environ.get("COLORMATCH_ENABLE_DIAGNOSTIC_IMAGE", "1")))

    # Worker threads used to run analyses off the event loop
    ANALYSIS_WORKERS: int = int(os.environ.get("COLORMATCH_ANALYSIS_WORKERS", "2"))

    # Supported image formats
    SUPPORTED_MIME_TYPES: List[str] = ["image/jpeg", "image/png"]
    SUPPORTED_EXTENSIONS = {".jpg", ".jpeg", ".png"}

    @classmethod
    def max_file_bytes(cls) -> int:
        return cls.MAX_FILE_MB * 1024 * 1024


# Global config instance
config = Config()
