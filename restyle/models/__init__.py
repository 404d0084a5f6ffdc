from .conversion import STAGE_MESSAGES, ConversionResult, ConversionState, ProgressEvent, Stage
from .upload import ResizedImage, StagedObject, UploadRequest

__all__ = [
    "ConversionResult",
    "ConversionState",
    "ProgressEvent",
    "ResizedImage",
    "Stage",
    "STAGE_MESSAGES",
    "StagedObject",
    "UploadRequest",
]
