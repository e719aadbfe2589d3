from .http_utils import ProviderCallError, provider_error_message
from .interpretation import GeminiInterpretationClient, guess_image_mime_type
from .transcription import WhisperTranscriptionClient

__all__ = [
    "GeminiInterpretationClient",
    "ProviderCallError",
    "WhisperTranscriptionClient",
    "guess_image_mime_type",
    "provider_error_message",
]
