from __future__ import annotations


class PipelineError(Exception):
    status_code = 500
    default_message = "Une erreur interne est survenue."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(PipelineError):
    status_code = 400
    default_message = "Requête invalide."


class UploadTooLarge(PipelineError):
    status_code = 413
    default_message = "Le fichier téléchargé dépasse la taille maximale autorisée."


class TranscriptionFailed(PipelineError):
    default_message = (
        "Échec de la transcription audio via OpenAI Whisper. "
        "Vérifiez votre clé API, le format du fichier audio et les limites d'utilisation."
    )


class InterpretationFailed(PipelineError):
    default_message = (
        "Échec de l'analyse des symptômes via Gemini. Vérifiez votre clé API et la connectivité."
    )


class ImageInterpretationFailed(PipelineError):
    default_message = (
        "Échec de l'analyse d'image via Gemini Vision. "
        "Vérifiez votre clé API, le format/type MIME de l'image et la qualité de l'image."
    )


# Never raised to the caller of an analysis; see storage.temp_files.
class CleanupError(Exception):
    pass
