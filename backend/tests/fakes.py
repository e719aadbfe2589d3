from __future__ import annotations

from pathlib import Path

from symptom_core import ImageInterpretationFailed, InterpretationFailed, TranscriptionFailed


class FakeTranscriber:
    def __init__(self, text: str = "J'ai de la fièvre et je tousse depuis trois jours.", fail: bool = False) -> None:
        self.text = text
        self.fail = fail
        self.calls: list[Path] = []
        self.file_existed_during_call: list[bool] = []

    async def transcribe(self, file_path):
        path = Path(file_path)
        self.calls.append(path)
        self.file_existed_during_call.append(path.exists())
        if self.fail:
            raise TranscriptionFailed() from RuntimeError("provider exploded: secret payload")
        return self.text


class FakeInterpreter:
    def __init__(self, *, fail_text: bool = False, fail_image: bool = False) -> None:
        self.fail_text = fail_text
        self.fail_image = fail_image
        self.text_calls: list[str] = []
        self.image_calls: list[Path] = []
        self.file_existed_during_call: list[bool] = []

    async def interpret_text(self, symptom_text: str) -> str:
        self.text_calls.append(symptom_text)
        if self.fail_text:
            raise InterpretationFailed() from RuntimeError("quota exceeded: secret payload")
        return f"Conseils éducatifs pour: {symptom_text}. Consultez un professionnel de la santé."

    async def interpret_image(self, file_path) -> str:
        path = Path(file_path)
        self.image_calls.append(path)
        self.file_existed_during_call.append(path.exists())
        if self.fail_image:
            raise ImageInterpretationFailed() from RuntimeError("invalid image: secret payload")
        return "Rougeur localisée visible. L'image seule ne permet pas de diagnostic."


def uploaded_files(directory: Path) -> list[Path]:
    if not directory.exists():
        return []
    return sorted(path for path in directory.iterdir() if path.is_file())
