"""
ColorMatch Analysis Orchestrator
Runs pixel conversion, classification, bucketing and harmony evaluation for
one photo and assembles the AnalysisResult.
"""
import asyncio
import time
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Dict, List, Optional

from colormatch.config import config
from colormatch.schemas import AnalysisResult, BucketSummary
from colormatch.services.colors.buckets import BucketAggregator
from colormatch.services.colors.classification import Classification, classify_pixel
from colormatch.services.colors.conversion import PixelSample, convert_rgba_buffer
from colormatch.services.colors.harmony import HarmonyVerdict, evaluate_harmony
from colormatch.services.colors.swatches import render_diagnostic_image
from colormatch.services.errors import AnalysisError, UpstreamError
from colormatch.services.imaging import SubjectDetector, load_subject_pixels, validate_rgba_buffer
from colormatch.utils.ids import SOURCE_BUFFER, SOURCE_IMAGE, generate_request_id, request_source
from colormatch.utils.logging import get_logger

logger = get_logger()

RULE_DESCRIPTIONS = {
    "single_color": "a single dominant color",
    "neutral_pair": "a neutral pairs with anything",
    "complementary": "complementary colors",
    "analogous": "analogous colors",
    "analogous_three": "analogous colors",
    "triadic": "a triadic combination",
    "split_complementary": "a split-complementary combination",
}


def feedback_for_verdict(verdict: HarmonyVerdict) -> str:
    """User-facing message for a harmony verdict."""
    if verdict.is_match:
        return f"Your colors work together ({RULE_DESCRIPTIONS.get(verdict.rule, verdict.rule)})."

    count = len(verdict.buckets)
    if count == 0:
        return "No dominant colors were found in this outfit."
    if count > 3:
        return f"This outfit has {count} competing colors. Try fewer colors or add a neutral."
    return f"These {count} colors clash."


class AnalysisOrchestrator:
    """Drives the color analysis pipeline for one photo at a time."""

    def __init__(self,
                 noise_floor: Optional[float] = None,
                 hue_merge_max_std_dev: Optional[float] = None,
                 shade_merge_max_value_gap: Optional[float] = None,
                 include_diagnostic: Optional[bool] = None,
                 detector: Optional[SubjectDetector] = None,
                 max_workers: Optional[int] = None):
        self.noise_floor = config.NOISE_FLOOR_PERCENT if noise_floor is None else noise_floor
        self.hue_merge_max_std_dev = (
            config.HUE_MERGE_MAX_STDDEV if hue_merge_max_std_dev is None else hue_merge_max_std_dev
        )
        self.shade_merge_max_value_gap = (
            config.SHADE_MERGE_MAX_VALUE_GAP if shade_merge_max_value_gap is None else shade_merge_max_value_gap
        )
        self.include_diagnostic = (
            config.ENABLE_DIAGNOSTIC_IMAGE if include_diagnostic is None else include_diagnostic
        )
        self.detector = detector
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or config.ANALYSIS_WORKERS,
            thread_name_prefix="colormatch-analysis"
        )
        self._in_flight = 0

    @property
    def is_analyzing(self) -> bool:
        """True while at least one async analysis is running."""
        return self._in_flight > 0

    def result_for_error(self, error: AnalysisError, request_id: Optional[str] = None) -> AnalysisResult:
        """Result for a run that stopped before any bucket was built."""
        request_id = request_id or generate_request_id()
        logger.warning(f"[{request_id}] Analysis stopped", extra={
            'request_id': request_id,
            'error_code': error.code,
            'reason': error.message
        })
        return AnalysisResult(
            request_id=request_id,
            feedback_message=error.message,
            error_code=error.code,
        )

    def analyze(self,
                rgba: bytes,
                width: int,
                height: int,
                worn: bool = False,
                include_diagnostic: Optional[bool] = None,
                request_id: Optional[str] = None) -> AnalysisResult:
        """
        Analyze a flat RGBA buffer and decide whether its colors match.

        ``worn`` only affects upstream cropping; it is accepted here so callers
        can pass the photo context through unchanged.

        Never raises for bad input: invalid buffers produce a result with
        ``is_match`` unset and an ``invalid_input`` error code.
        """
        request_id = request_id or generate_request_id(SOURCE_BUFFER)
        include_diagnostic = self.include_diagnostic if include_diagnostic is None else include_diagnostic

        try:
            validate_rgba_buffer(rgba, width, height)
        except AnalysisError as e:
            return self.result_for_error(e, request_id)

        start_time = time.time()
        logger.debug(f"[{request_id}] Starting analysis", extra={
            'request_id': request_id,
            'width': width,
            'height': height,
            'worn': worn
        })

        samples = convert_rgba_buffer(rgba)

        # Classification depends only on (h, s, v); photos repeat triples heavily.
        memo: Dict[PixelSample, Classification] = {}
        classifications: List[Classification] = []
        aggregator = BucketAggregator()
        for sample in samples:
            classification = memo.get(sample)
            if classification is None:
                classification = memo[sample] = classify_pixel(sample)
            aggregator.add(sample, classification)
            if include_diagnostic:
                classifications.append(classification)

        buckets = aggregator.finalize(self.hue_merge_max_std_dev, self.shade_merge_max_value_gap)
        verdict = evaluate_harmony(buckets, self.noise_floor)

        diagnostic = None
        if include_diagnostic:
            diagnostic = render_diagnostic_image(samples, classifications, verdict.buckets, width, height)

        duration_ms = round((time.time() - start_time) * 1000, 2)
        logger.info(f"[{request_id}] Analysis complete", extra={
            'request_id': request_id,
            'source': request_source(request_id),
            'is_match': verdict.is_match,
            'rule': verdict.rule,
            'buckets': len(buckets),
            'significant_buckets': len(verdict.buckets),
            'duration_ms': duration_ms
        })

        return AnalysisResult(
            request_id=request_id,
            feedback_message=feedback_for_verdict(verdict),
            is_match=verdict.is_match,
            rule=verdict.rule,
            buckets=[BucketSummary.from_bucket(bucket) for bucket in verdict.buckets],
            total_pixels=aggregator.total_pixels,
            diagnostic_png_b64=diagnostic,
            pixel_buffer=rgba,
        )

    def analyze_image(self,
                      file_bytes: bytes,
                      worn: bool = False,
                      include_diagnostic: Optional[bool] = None,
                      request_id: Optional[str] = None) -> AnalysisResult:
        """
        Decode a photo, crop its subject and analyze it.

        Upstream failures (decode, detection, cropping) short-circuit into a
        result carrying only the failure message.
        """
        request_id = request_id or generate_request_id(SOURCE_IMAGE)
        try:
            subject = load_subject_pixels(file_bytes, worn=worn, detector=self.detector)
        except AnalysisError as e:
            return self.result_for_error(e, request_id)
        except Exception as e:
            logger.error(f"[{request_id}] Unexpected upstream failure", extra={
                'request_id': request_id,
                'error': str(e)
            })
            return self.result_for_error(UpstreamError(), request_id)

        return self.analyze(subject.rgba, subject.width, subject.height,
                            worn=worn, include_diagnostic=include_diagnostic, request_id=request_id)

    async def _run_in_worker(self, func, *args, **kwargs) -> AnalysisResult:
        loop = asyncio.get_running_loop()
        self._in_flight += 1
        try:
            return await loop.run_in_executor(self._executor, partial(func, *args, **kwargs))
        finally:
            self._in_flight -= 1

    async def analyze_async(self, rgba: bytes, width: int, height: int, **kwargs) -> AnalysisResult:
        """Run ``analyze`` on a worker thread so the caller's event loop stays responsive."""
        return await self._run_in_worker(self.analyze, rgba, width, height, **kwargs)

    async def analyze_image_async(self, file_bytes: bytes, **kwargs) -> AnalysisResult:
        """Run ``analyze_image`` on a worker thread."""
        return await self._run_in_worker(self.analyze_image, file_bytes, **kwargs)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)
