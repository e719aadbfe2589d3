from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import TYPE_CHECKING, Awaitable, Protocol, TypeVar

from .errors import ValidationError
from .lifecycle import PipelineLifecycle
from .models import (
    COMPLETION_MESSAGES,
    AnalysisRequest,
    AnalysisResult,
    AudioAnalysisRequest,
    ImageAnalysisRequest,
    TextAnalysisRequest,
)

if TYPE_CHECKING:
    from storage.temp_files import TempFileStore, TemporaryFile

logger = logging.getLogger(__name__)

T = TypeVar("T")

MISSING_TEXT_MESSAGE = 'Le champ "symptomText" est requis.'
MISSING_AUDIO_MESSAGE = 'Aucun fichier audio n\'a été téléchargé. Le champ attendu est "audioFile".'
MISSING_IMAGE_MESSAGE = 'Aucun fichier image n\'a été téléchargé. Le champ attendu est "imageFile".'


class Transcriber(Protocol):
    async def transcribe(self, file_path: str | Path) -> str: ...


class Interpreter(Protocol):
    async def interpret_text(self, symptom_text: str) -> str: ...

    async def interpret_image(self, file_path: str | Path) -> str: ...


class AnalysisPipeline:
    """Runs one analysis request per modality.

    Audio: received -> validated -> transcribing -> interpreting -> completed.
    Text and image skip the transcribing state. Any provider fault moves the
    request to ``failed`` and is re-raised unchanged; missing input moves it
    to ``rejected`` before a provider is contacted.
    """

    def __init__(self, *, transcriber: Transcriber, interpreter: Interpreter, files: TempFileStore) -> None:
        self.transcriber = transcriber
        self.interpreter = interpreter
        self.files = files

    async def run(self, request: AnalysisRequest) -> AnalysisResult:
        if isinstance(request, TextAnalysisRequest):
            return await self.analyze_text(request.content)
        if isinstance(request, AudioAnalysisRequest):
            return await self.analyze_audio(request.file_path)
        if isinstance(request, ImageAnalysisRequest):
            return await self.analyze_image(request.file_path)
        raise TypeError(f"Unsupported analysis request: {type(request).__name__}")

    async def analyze_text(self, symptom_text: str | None) -> AnalysisResult:
        lifecycle = self._begin("text")
        if not symptom_text or not symptom_text.strip():
            self._reject(lifecycle, MISSING_TEXT_MESSAGE)
        lifecycle.transition("validated")

        lifecycle.transition("interpreting")
        interpretation = await self._step(lifecycle, self.interpreter.interpret_text(symptom_text))
        return self._complete(lifecycle, interpretation=interpretation)

    async def analyze_audio(self, file_path: str | Path | None) -> AnalysisResult:
        lifecycle = self._begin("audio")
        if not file_path:
            self._reject(lifecycle, MISSING_AUDIO_MESSAGE)

        with self.files.scoped(file_path) as handle:
            self._require_file(lifecycle, handle, MISSING_AUDIO_MESSAGE)
            lifecycle.transition("transcribing")
            transcription = await self._step(lifecycle, self.transcriber.transcribe(handle.path))

        lifecycle.transition("interpreting")
        interpretation = await self._step(lifecycle, self.interpreter.interpret_text(transcription))
        return self._complete(lifecycle, transcription=transcription, interpretation=interpretation)

    async def analyze_image(self, file_path: str | Path | None) -> AnalysisResult:
        lifecycle = self._begin("image")
        if not file_path:
            self._reject(lifecycle, MISSING_IMAGE_MESSAGE)

        with self.files.scoped(file_path) as handle:
            self._require_file(lifecycle, handle, MISSING_IMAGE_MESSAGE)
            lifecycle.transition("interpreting")
            observations = await self._step(lifecycle, self.interpreter.interpret_image(handle.path))
        return self._complete(lifecycle, observations=observations)

    def _begin(self, kind: str) -> PipelineLifecycle:
        lifecycle = PipelineLifecycle(kind, uuid.uuid4().hex)
        logger.info("analysis received", extra={"request_id": lifecycle.request_id, "kind": kind})
        return lifecycle

    def _reject(self, lifecycle: PipelineLifecycle, message: str) -> None:
        lifecycle.transition("rejected")
        logger.info("analysis rejected: %s", message, extra={"request_id": lifecycle.request_id})
        raise ValidationError(message)

    def _require_file(self, lifecycle: PipelineLifecycle, handle: TemporaryFile, message: str) -> None:
        if not handle.exists:
            self._reject(lifecycle, message)
        lifecycle.transition("validated")

    async def _step(self, lifecycle: PipelineLifecycle, call: Awaitable[T]) -> T:
        try:
            return await call
        except Exception as exc:
            lifecycle.transition("failed")
            logger.warning(
                "analysis failed in %s: %s",
                lifecycle.history[-2],
                exc,
                extra={"request_id": lifecycle.request_id, "kind": lifecycle.kind},
            )
            raise

    def _complete(self, lifecycle: PipelineLifecycle, **payload: str) -> AnalysisResult:
        history = lifecycle.transition("completed")
        logger.info("analysis completed", extra={"request_id": lifecycle.request_id, "kind": lifecycle.kind})
        return AnalysisResult(
            status="success",
            kind=lifecycle.kind,
            message=COMPLETION_MESSAGES[lifecycle.kind],
            lifecycle=history,
            **payload,
        )
