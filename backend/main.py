from __future__ import annotations

import logging
import socket

import uvicorn
from fastapi import FastAPI, File, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from providers import GeminiInterpretationClient, WhisperTranscriptionClient
from storage import TempFileStore
from symptom_core import (
    AnalysisPipeline,
    AudioAnalysisRequest,
    ImageAnalysisRequest,
    PipelineError,
    TextAnalysisRequest,
    disclaimer_for,
)
from symptom_core.logging_config import configure_logging
from symptom_core.settings import Settings, bootstrap_local_env, load_settings_from_env

bootstrap_local_env()
settings = load_settings_from_env()
configure_logging(level=settings.log_level, json_logs=settings.json_logs)

logger = logging.getLogger("symptom_assist")

NOT_FOUND_MESSAGE = "Route non trouvée. Vérifiez l'URL et la méthode HTTP."
INTERNAL_ERROR_MESSAGE = "Une erreur interne du serveur est survenue."
INVALID_BODY_MESSAGES = {
    "/api/analyze/text": 'Corps de requête invalide. Envoyez un JSON contenant le champ "symptomText".',
    "/api/analyze/audio": 'Requête invalide. Envoyez un formulaire multipart contenant le champ "audioFile".',
    "/api/analyze/image": 'Requête invalide. Envoyez un formulaire multipart contenant le champ "imageFile".',
}
INVALID_REQUEST_MESSAGE = "Requête invalide."


class TextAnalysisBody(BaseModel):
    symptomText: str | None = None


class SymptomAssistApp:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.files = TempFileStore(settings.upload_dir, max_upload_bytes=settings.max_upload_bytes)
        self.files.ensure_directory()
        self.transcriber = WhisperTranscriptionClient(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            model=settings.whisper_model,
            language=settings.transcription_language,
            timeout_seconds=settings.provider_timeout_seconds,
        )
        self.interpreter = GeminiInterpretationClient(
            api_key=settings.gemini_api_key,
            base_url=settings.gemini_base_url,
            text_model=settings.text_model,
            vision_model=settings.vision_model,
            timeout_seconds=settings.provider_timeout_seconds,
        )
        self.pipeline = AnalysisPipeline(
            transcriber=self.transcriber,
            interpreter=self.interpreter,
            files=self.files,
        )


container = SymptomAssistApp(settings)
if settings.missing_secrets():
    logger.warning(
        "Missing provider secrets: %s. Analyses using them will fail until configured.",
        ", ".join(settings.missing_secrets()),
    )

app = FastAPI(title="SymptomAssist Backend")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"status": "error", "message": message})


@app.exception_handler(PipelineError)
async def pipeline_error_handler(request: Request, exc: PipelineError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "error in route %s: %s (cause: %r)",
            request.url.path,
            exc.message,
            exc.__cause__,
            extra={"status_code": exc.status_code},
        )
    return _error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("rejected malformed body on %s: %s", request.url.path, exc.errors())
    return _error_response(400, INVALID_BODY_MESSAGES.get(request.url.path, INVALID_REQUEST_MESSAGE))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code in {404, 405}:
        return _error_response(404, NOT_FOUND_MESSAGE)
    return _error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled server error on %s", request.url.path)
    return _error_response(500, INTERNAL_ERROR_MESSAGE)


@app.get("/", response_class=PlainTextResponse)
def index() -> str:
    return "Bienvenue sur le backend d'assistance médicale IA! Prêt à recevoir vos requêtes."


@app.post("/api/analyze/text")
async def analyze_text(body: TextAnalysisBody | None = None):
    request = TextAnalysisRequest(body.symptomText if body else None)
    result = await container.pipeline.run(request)
    return result.as_envelope(disclaimer_for(result.kind))


@app.post("/api/analyze/audio")
async def analyze_audio(audioFile: UploadFile | None = File(default=None)):
    file_path = None
    if audioFile is not None:
        file_path = await container.files.save_upload(audioFile, field_name="audioFile")
    result = await container.pipeline.run(AudioAnalysisRequest(str(file_path) if file_path else None))
    return result.as_envelope(disclaimer_for(result.kind))


@app.post("/api/analyze/image")
async def analyze_image(imageFile: UploadFile | None = File(default=None)):
    file_path = None
    if imageFile is not None:
        file_path = await container.files.save_upload(imageFile, field_name="imageFile")
    result = await container.pipeline.run(ImageAnalysisRequest(str(file_path) if file_path else None))
    return result.as_envelope(disclaimer_for(result.kind))


def _local_ip() -> str:
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as probe:
            # No packet is sent; connecting a UDP socket only selects the outbound interface.
            probe.connect(("10.255.255.255", 1))
            return probe.getsockname()[0]
    except OSError:
        return "localhost"


def main() -> None:
    ip = _local_ip()
    logger.info("Server starting on http://%s:%d (API under /api)", ip, settings.port)
    logger.info("Uploaded files are stored temporarily in %s", settings.upload_dir)
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
