"""
ColorMatch API Schemas
Pydantic models for analysis results and service responses.
"""
from typing import List, Optional

from pydantic import BaseModel, Field

from colormatch.services.colors.buckets import ColorBucket


class BucketSummary(BaseModel):
    """Statistics of one significant color bucket."""
    hue_label: int = Field(..., ge=0, le=12, description="Hue wedge position (0 = Neutral)")
    hue_name: str = Field(..., description="Semantic color name, e.g. 'Red' or 'Neutral'")
    shade: str = Field(..., description="Shade level: light, medium, dark or neutral")
    count: int = Field(..., ge=0, description="Number of pixels in the bucket")
    percentage: float = Field(..., ge=0.0, le=100.0, description="Share of all analyzed pixels")
    mean_hue: float = Field(..., description="Linear mean hue in degrees")
    hue_std_dev: float = Field(..., ge=0.0, description="Population standard deviation of hue")
    mean_value: float = Field(..., description="Mean HSV value in percent")
    value_std_dev: float = Field(..., ge=0.0, description="Population standard deviation of value")

    @classmethod
    def from_bucket(cls, bucket: ColorBucket) -> "BucketSummary":
        return cls(
            hue_label=bucket.hue_label,
            hue_name=bucket.hue_name,
            shade=bucket.shade.value,
            count=bucket.count,
            percentage=round(min(bucket.percentage, 100.0), 3),
            mean_hue=bucket.mean_hue,
            hue_std_dev=round(bucket.hue_std_dev, 3),
            mean_value=bucket.mean_value,
            value_std_dev=round(bucket.value_std_dev, 3),
        )


class AnalysisResult(BaseModel):
    """Outcome of one outfit analysis."""
    request_id: str = Field(..., description="Analysis run id, cm-<img|buf>-<UTC YYYYmmddHHMMSS>-<hex8>")
    feedback_message: str = Field(..., description="User-facing feedback")
    is_match: Optional[bool] = Field(
        None,
        description="Whether the colors match; unset when the analysis could not run"
    )
    confidence: int = Field(0, ge=0, le=100, description="Confidence placeholder (currently always 0)")
    rule: Optional[str] = Field(None, description="Harmony rule that decided the verdict")
    buckets: List[BucketSummary] = Field(default_factory=list, description="Significant color buckets")
    total_pixels: int = Field(0, ge=0, description="Number of pixels analyzed")
    error_code: Optional[str] = Field(None, description="Failure code when the analysis did not run")
    diagnostic_png_b64: Optional[str] = Field(
        None,
        description="Base64-encoded PNG of the classification map and bucket strip"
    )
    pixel_buffer: Optional[bytes] = Field(None, exclude=True, repr=False)


class HealthResponse(BaseModel):
    """Health check response."""
    ok: bool = Field(True, description="Service health status")
    version: str = Field(..., description="Service version")
    service: str = Field("colormatch-analysis", description="Service name")


class ErrorResponse(BaseModel):
    """Error response."""
    detail: str = Field(..., description="Error message")
