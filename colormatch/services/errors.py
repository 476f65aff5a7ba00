"""
ColorMatch analysis errors.

Every failure that can stop an analysis carries a stable ``code`` and a
message suitable for showing to the user.
"""


class AnalysisError(Exception):
    """Base class for failures that end an analysis without a verdict."""

    code = "analysis_failed"
    default_message = "Something went wrong while analyzing the photo."

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NoSubjectError(AnalysisError):
    code = "no_subject"
    default_message = "No person or garment found in the photo."


class MultipleSubjectsError(AnalysisError):
    code = "multiple_subjects"
    default_message = "Multiple people found in the photo. Please use a photo with one outfit."


class ImageDecodeError(AnalysisError):
    code = "image_decode_failed"
    default_message = "The photo could not be read. Please try a JPEG or PNG image."


class DetectorError(AnalysisError):
    code = "detector_failed"
    default_message = "Subject detection failed. Please try again."


class CropError(AnalysisError):
    code = "crop_failed"
    default_message = "The outfit could not be cropped from the photo."


class UpstreamError(AnalysisError):
    code = "upstream_failed"
    default_message = "The photo could not be prepared for analysis."


class InvalidInputError(AnalysisError):
    code = "invalid_input"
    default_message = "The image data is invalid."
