from __future__ import annotations

import base64
import logging
import mimetypes
from pathlib import Path
from typing import Any

import httpx
from starlette.concurrency import run_in_threadpool

from symptom_core.errors import ImageInterpretationFailed, InterpretationFailed

from .http_utils import ProviderCallError, post_json
from .prompts import VISION_INSTRUCTION, build_text_prompt

logger = logging.getLogger(__name__)

_IMAGE_SIGNATURES: list[tuple[bytes, str]] = [
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"BM", "image/bmp"),
]


def guess_image_mime_type(file_name: str, head: bytes = b"") -> str:
    """MIME type for an uploaded image, from its extension first, then its bytes."""
    guessed = mimetypes.guess_type(file_name)[0]
    if guessed and guessed.startswith("image/"):
        return guessed
    if head[:4] == b"RIFF" and head[8:12] == b"WEBP":
        return "image/webp"
    for signature, mime_type in _IMAGE_SIGNATURES:
        if head.startswith(signature):
            return mime_type
    ext = Path(file_name).suffix.lower().lstrip(".")
    if ext:
        return f"image/{ext}"
    return "application/octet-stream"


def _coerce_gemini_text(response_json: dict[str, Any]) -> str:
    candidates = response_json.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return ""
    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    if not isinstance(content, dict):
        return ""
    parts: list[str] = []
    for item in content.get("parts") or []:
        if isinstance(item, dict):
            text_value = item.get("text")
            if isinstance(text_value, str) and text_value.strip():
                parts.append(text_value.strip())
    return "\n".join(parts).strip()


class GeminiInterpretationClient:
    provider = "gemini"

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        text_model: str = "gemini-1.5-flash",
        vision_model: str = "gemini-1.5-flash",
        timeout_seconds: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.text_model = text_model
        self.vision_model = vision_model
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    async def _generate(self, *, model: str, parts: list[dict[str, Any]]) -> str:
        if not self.api_key:
            raise ProviderCallError(self.provider, "API key is not configured")
        payload = await post_json(
            provider=self.provider,
            url=f"{self.base_url}/models/{model}:generateContent",
            timeout_seconds=self.timeout_seconds,
            transport=self.transport,
            headers={"x-goog-api-key": self.api_key, "Content-Type": "application/json"},
            json={"contents": [{"role": "user", "parts": parts}]},
        )
        text = _coerce_gemini_text(payload)
        if not text:
            feedback = payload.get("promptFeedback")
            raise ProviderCallError(self.provider, f"provider returned empty text (feedback: {feedback})")
        return text

    async def interpret_text(self, symptom_text: str) -> str:
        logger.info("[Gemini-Text] analysing symptoms: %r", symptom_text[:100], extra={"provider": self.provider})
        try:
            advice = await self._generate(
                model=self.text_model,
                parts=[{"text": build_text_prompt(symptom_text)}],
            )
        except ProviderCallError as exc:
            logger.error(
                "[Gemini-Text] call failed: %s",
                exc.detail,
                extra={"provider": self.provider, "status_code": exc.status_code},
            )
            raise InterpretationFailed() from exc
        logger.info("[Gemini-Text] analysis ok")
        return advice

    async def interpret_image(self, file_path: str | Path) -> str:
        path = Path(file_path)
        logger.info("[Gemini-Vision] analysing image %s", path.name, extra={"provider": self.provider})
        try:
            image_bytes = await run_in_threadpool(path.read_bytes)
        except OSError as exc:
            logger.error("[Gemini-Vision] cannot read image file %s: %s", path, exc)
            raise ImageInterpretationFailed() from exc

        mime_type = guess_image_mime_type(path.name, image_bytes[:16])
        parts = [
            {"text": VISION_INSTRUCTION},
            {
                "inline_data": {
                    "mime_type": mime_type,
                    "data": base64.b64encode(image_bytes).decode("ascii"),
                }
            },
        ]
        try:
            observations = await self._generate(model=self.vision_model, parts=parts)
        except ProviderCallError as exc:
            logger.error(
                "[Gemini-Vision] call failed: %s",
                exc.detail,
                extra={"provider": self.provider, "status_code": exc.status_code},
            )
            raise ImageInterpretationFailed() from exc
        logger.info("[Gemini-Vision] analysis ok (%s)", mime_type)
        return observations
