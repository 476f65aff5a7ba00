"""
ColorMatch Imaging Utilities
Handles upload validation, decoding to RGBA buffers and subject cropping.
"""
import io
from dataclasses import dataclass
from typing import List, Optional, Tuple

from fastapi import HTTPException, UploadFile
from PIL import Image, ImageOps

from colormatch.config import config
from colormatch.services.errors import (
    AnalysisError, CropError, DetectorError, ImageDecodeError,
    InvalidInputError, MultipleSubjectsError, NoSubjectError
)

# (left, top, right, bottom) in pixel coordinates
Box = Tuple[int, int, int, int]


@dataclass
class RGBAImage:
    """A flat, row-major RGBA buffer with its dimensions."""
    rgba: bytes
    width: int
    height: int

    @classmethod
    def from_pil(cls, image: Image.Image) -> "RGBAImage":
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        return cls(rgba=image.tobytes(), width=image.width, height=image.height)


def validate_rgba_buffer(rgba: bytes, width: int, height: int) -> None:
    """
    Reject malformed pixel buffers before any pixel is touched.

    Raises:
        InvalidInputError: zero-area image, length not a multiple of 4,
            or length not matching width * height * 4
    """
    if width <= 0 or height <= 0:
        raise InvalidInputError(f"Image has no pixels ({width}x{height}).")

    if len(rgba) % 4 != 0:
        raise InvalidInputError("Pixel buffer length is not a multiple of 4.")

    if len(rgba) != width * height * 4:
        raise InvalidInputError(
            f"Pixel buffer holds {len(rgba) // 4} pixels, expected {width}x{height}."
        )


def validate_file_upload(file: UploadFile) -> None:
    """
    Validate uploaded file metadata.

    Raises:
        HTTPException: 400 for oversized files, 415 for unsupported formats
    """
    if file.size and file.size > config.max_file_bytes():
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size: {config.MAX_FILE_MB}MB"
        )

    if file.content_type not in config.SUPPORTED_MIME_TYPES:
        raise HTTPException(
            status_code=415,
            detail=f"Unsupported media type. Supported: {', '.join(config.SUPPORTED_MIME_TYPES)}"
        )

    if file.filename and "." in file.filename:
        ext = "." + file.filename.lower().rsplit(".", 1)[-1]
        if ext not in config.SUPPORTED_EXTENSIONS:
            raise HTTPException(
                status_code=415,
                detail=f"Unsupported file extension. Supported: {', '.join(sorted(config.SUPPORTED_EXTENSIONS))}"
            )


def validate_magic_bytes(file_bytes: bytes) -> str:
    """
    Check the file signature of an image.

    Returns:
        Detected MIME type

    Raises:
        ImageDecodeError: file is too small or not a JPEG/PNG
    """
    if len(file_bytes) < 8:
        raise ImageDecodeError("The photo file is empty or truncated.")

    if file_bytes.startswith(b'\xff\xd8\xff'):
        return "image/jpeg"
    elif file_bytes.startswith(b'\x89PNG\r\n\x1a\n'):
        return "image/png"

    raise ImageDecodeError()


def decode_image(file_bytes: bytes, max_edge: Optional[int] = None) -> Image.Image:
    """
    Decode image bytes, apply EXIF orientation and bound the longest edge.

    Args:
        file_bytes: Raw JPEG or PNG bytes
        max_edge: Longest edge after downscaling (defaults to config)

    Returns:
        Upright RGBA PIL image

    Raises:
        ImageDecodeError: bytes are not a decodable image
    """
    validate_magic_bytes(file_bytes)
    max_edge = max_edge or config.MAX_EDGE

    try:
        image = Image.open(io.BytesIO(file_bytes))
        image.load()
    except Exception as e:
        raise ImageDecodeError() from e

    # Photos from phones are stored sideways with an orientation tag
    image = ImageOps.exif_transpose(image)
    image = image.convert("RGBA")

    if max(image.size) > max_edge:
        image.thumbnail((max_edge, max_edge), Image.Resampling.LANCZOS)

    return image


class SubjectDetector:
    """
    Finds the outfit subject(s) in a photo.

    Subclasses return one bounding box per subject found. Body and face
    detection are provided by the host application.
    """

    def detect(self, image: Image.Image, worn: bool) -> List[Box]:
        raise NotImplementedError


class FullFrameDetector(SubjectDetector):
    """Treats the whole frame as the single subject (flat-lay photos, pre-cropped uploads)."""

    def detect(self, image: Image.Image, worn: bool) -> List[Box]:
        return [(0, 0, image.width, image.height)]


def crop_subject(image: Image.Image, detector: SubjectDetector, worn: bool) -> Image.Image:
    """
    Crop the single subject out of the photo.

    Raises:
        DetectorError: the detector itself failed
        NoSubjectError: nothing was found
        MultipleSubjectsError: more than one subject was found
        CropError: the box could not be cropped
    """
    try:
        boxes = detector.detect(image, worn)
    except AnalysisError:
        raise
    except Exception as e:
        raise DetectorError() from e

    if not boxes:
        raise NoSubjectError()
    if len(boxes) > 1:
        raise MultipleSubjectsError()

    left, top, right, bottom = boxes[0]
    left, top = max(0, left), max(0, top)
    right, bottom = min(image.width, right), min(image.height, bottom)
    if right <= left or bottom <= top:
        raise CropError()

    if (left, top, right, bottom) == (0, 0, image.width, image.height):
        return image
    return image.crop((left, top, right, bottom))


def load_subject_pixels(file_bytes: bytes,
                        worn: bool = False,
                        detector: Optional[SubjectDetector] = None,
                        max_edge: Optional[int] = None) -> RGBAImage:
    """Decode a photo and return the RGBA pixels of its single subject."""
    image = decode_image(file_bytes, max_edge)
    subject = crop_subject(image, detector or FullFrameDetector(), worn)
    return RGBAImage.from_pil(subject)
