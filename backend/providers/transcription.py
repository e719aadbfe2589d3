from __future__ import annotations

import logging
import mimetypes
from pathlib import Path

import httpx
from starlette.concurrency import run_in_threadpool

from symptom_core.errors import TranscriptionFailed

from .http_utils import ProviderCallError, post_json

logger = logging.getLogger(__name__)


class WhisperTranscriptionClient:
    """Speech-to-text through the OpenAI audio transcription endpoint.

    The client never deletes the file it reads; the pipeline releases it.
    """

    provider = "openai_whisper"

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        model: str = "whisper-1",
        language: str = "fr",
        timeout_seconds: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.language = language
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    async def transcribe(self, file_path: str | Path) -> str:
        path = Path(file_path)
        logger.info("[Whisper] transcribing %s", path.name, extra={"provider": self.provider})
        try:
            audio_bytes = await run_in_threadpool(path.read_bytes)
        except OSError as exc:
            logger.error("[Whisper] cannot read audio file %s: %s", path, exc)
            raise TranscriptionFailed() from exc

        if not self.api_key:
            logger.error("[Whisper] OPENAI_API_KEY is not configured")
            raise TranscriptionFailed() from ProviderCallError(self.provider, "API key is not configured")

        mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        try:
            payload = await post_json(
                provider=self.provider,
                url=f"{self.base_url}/audio/transcriptions",
                timeout_seconds=self.timeout_seconds,
                transport=self.transport,
                headers={"Authorization": f"Bearer {self.api_key}"},
                data={"model": self.model, "language": self.language},
                files={"file": (path.name, audio_bytes, mime_type)},
            )
        except ProviderCallError as exc:
            logger.error(
                "[Whisper] transcription failed: %s",
                exc.detail,
                extra={"provider": self.provider, "status_code": exc.status_code},
            )
            raise TranscriptionFailed() from exc

        transcript_text = str(payload.get("text") or "").strip()
        if not transcript_text:
            logger.warning("[Whisper] provider returned an empty transcription for %s", path.name)
        else:
            logger.info("[Whisper] transcription ok: %r", transcript_text[:100])
        return transcript_text
