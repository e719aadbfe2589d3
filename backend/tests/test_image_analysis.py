from __future__ import annotations

from fakes import uploaded_files

from symptom_core import IMAGE_DISCLAIMER, ImageInterpretationFailed

JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01fake-jpeg-body"


def _post_image(client, content: bytes = JPEG_BYTES, name: str = "bras.jpg"):
    return client.post(
        "/api/analyze/image",
        files={"imageFile": (name, content, "image/jpeg")},
    )


def test_image_analysis_returns_observations_and_removes_file(client, interpreter, transcriber, upload_dir):
    response = _post_image(client)
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "success"
    assert payload["message"] == "Analyse des observations visuelles terminée."
    assert payload["observations"].strip()
    assert payload["disclaimer"] == IMAGE_DISCLAIMER
    assert "interpretation" not in payload

    assert len(interpreter.image_calls) == 1
    assert interpreter.file_existed_during_call == [True]
    assert interpreter.image_calls[0].name.startswith("imageFile-")
    assert interpreter.image_calls[0].suffix == ".jpg"
    assert transcriber.calls == []
    assert uploaded_files(upload_dir) == []


def test_image_analysis_failure_removes_file(client, interpreter, upload_dir):
    interpreter.fail_image = True
    response = _post_image(client)
    assert response.status_code == 500
    assert response.json() == {"status": "error", "message": ImageInterpretationFailed.default_message}
    assert len(interpreter.image_calls) == 1
    assert uploaded_files(upload_dir) == []


def test_image_analysis_requires_file(client, interpreter):
    response = client.post("/api/analyze/image")
    assert response.status_code == 400
    assert "imageFile" in response.json()["message"]
    assert interpreter.image_calls == []


def test_image_uploaded_under_audio_field_is_not_accepted_for_image(client, interpreter):
    response = client.post(
        "/api/analyze/image",
        files={"audioFile": ("bras.jpg", JPEG_BYTES, "image/jpeg")},
    )
    assert response.status_code == 400
    assert interpreter.image_calls == []
