from .errors import (
    CleanupError,
    ImageInterpretationFailed,
    InterpretationFailed,
    PipelineError,
    TranscriptionFailed,
    UploadTooLarge,
    ValidationError,
)
from .lifecycle import LifecycleError, PipelineLifecycle
from .models import (
    DISCLAIMER,
    IMAGE_DISCLAIMER,
    PIPELINE_STATES,
    TERMINAL_STATES,
    AnalysisRequest,
    AnalysisResult,
    AudioAnalysisRequest,
    ImageAnalysisRequest,
    TextAnalysisRequest,
    disclaimer_for,
)
from .pipeline import AnalysisPipeline

__all__ = [
    "DISCLAIMER",
    "IMAGE_DISCLAIMER",
    "PIPELINE_STATES",
    "TERMINAL_STATES",
    "AnalysisPipeline",
    "AnalysisRequest",
    "AnalysisResult",
    "AudioAnalysisRequest",
    "CleanupError",
    "ImageAnalysisRequest",
    "ImageInterpretationFailed",
    "InterpretationFailed",
    "LifecycleError",
    "PipelineError",
    "PipelineLifecycle",
    "TextAnalysisRequest",
    "TranscriptionFailed",
    "UploadTooLarge",
    "ValidationError",
    "disclaimer_for",
]
