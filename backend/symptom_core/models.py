from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union


TERMINAL_STATES = {"completed", "failed", "rejected"}
PIPELINE_STATES = {
    "received",
    "validated",
    "transcribing",
    "interpreting",
    "completed",
    "failed",
    "rejected",
}

DISCLAIMER = (
    "Cette analyse est fournie à titre informatif et ne remplace pas un diagnostic "
    "ou un conseil médical professionnel. Consultez toujours un professionnel de la santé."
)
IMAGE_DISCLAIMER = (
    "Cette analyse est fournie à titre informatif, décrit uniquement les observations visuelles "
    "et ne remplace pas un diagnostic ou un conseil médical professionnel. "
    "Consultez toujours un professionnel de la santé."
)

COMPLETION_MESSAGES = {
    "text": "Analyse des symptômes par texte terminée.",
    "audio": "Analyse des symptômes par voix terminée.",
    "image": "Analyse des observations visuelles terminée.",
}


@dataclass(frozen=True)
class TextAnalysisRequest:
    content: str | None
    kind: str = field(default="text", init=False)


@dataclass(frozen=True)
class AudioAnalysisRequest:
    file_path: str | None
    kind: str = field(default="audio", init=False)


@dataclass(frozen=True)
class ImageAnalysisRequest:
    file_path: str | None
    kind: str = field(default="image", init=False)


AnalysisRequest = Union[TextAnalysisRequest, AudioAnalysisRequest, ImageAnalysisRequest]


@dataclass
class AnalysisResult:
    status: str
    kind: str
    transcription: str | None = None
    interpretation: str | None = None
    observations: str | None = None
    message: str | None = None
    lifecycle: list[str] = field(default_factory=list)

    def as_envelope(self, disclaimer: str | None = None) -> dict[str, Any]:
        envelope: dict[str, Any] = {"status": self.status}
        if self.message:
            envelope["message"] = self.message
        if self.transcription is not None:
            envelope["transcription"] = self.transcription
        if self.interpretation is not None:
            envelope["interpretation"] = self.interpretation
        if self.observations is not None:
            envelope["observations"] = self.observations
        if disclaimer and self.status == "success":
            envelope["disclaimer"] = disclaimer
        return envelope


def disclaimer_for(kind: str) -> str:
    return IMAGE_DISCLAIMER if kind == "image" else DISCLAIMER
