from __future__ import annotations

from fakes import uploaded_files

from symptom_core import DISCLAIMER, InterpretationFailed


def test_text_analysis_success_returns_interpretation_and_disclaimer(client, interpreter, transcriber, upload_dir):
    response = client.post("/api/analyze/text", json={"symptomText": "fièvre et toux depuis 3 jours"})
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "success"
    assert payload["message"] == "Analyse des symptômes par texte terminée."
    assert payload["interpretation"].strip()
    assert payload["disclaimer"] == DISCLAIMER
    assert "transcription" not in payload
    assert interpreter.text_calls == ["fièvre et toux depuis 3 jours"]
    assert transcriber.calls == []
    assert uploaded_files(upload_dir) == []


def test_text_analysis_requires_symptom_text(client, interpreter):
    response = client.post("/api/analyze/text", json={})
    assert response.status_code == 400
    assert response.json() == {"status": "error", "message": 'Le champ "symptomText" est requis.'}
    assert interpreter.text_calls == []


def test_text_analysis_rejects_blank_symptom_text(client, interpreter):
    response = client.post("/api/analyze/text", json={"symptomText": "   "})
    assert response.status_code == 400
    assert response.json()["status"] == "error"
    assert interpreter.text_calls == []


def test_text_analysis_rejects_missing_body(client, interpreter):
    response = client.post("/api/analyze/text")
    assert response.status_code == 400
    assert interpreter.text_calls == []


def test_text_analysis_rejects_malformed_json(client, interpreter):
    response = client.post(
        "/api/analyze/text",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["status"] == "error"
    assert "symptomText" in response.json()["message"]
    assert interpreter.text_calls == []


def test_repeated_text_requests_are_independent(client, interpreter):
    first = client.post("/api/analyze/text", json={"symptomText": "maux de tête"})
    second = client.post("/api/analyze/text", json={"symptomText": "maux de tête"})
    assert first.status_code == 200
    assert second.status_code == 200
    assert first.json() == second.json()
    assert interpreter.text_calls == ["maux de tête", "maux de tête"]


def test_text_analysis_provider_failure_returns_stable_message(client, interpreter):
    interpreter.fail_text = True
    response = client.post("/api/analyze/text", json={"symptomText": "douleur au genou"})
    assert response.status_code == 500
    payload = response.json()
    assert payload == {"status": "error", "message": InterpretationFailed.default_message}
    assert "secret payload" not in response.text


def test_unknown_route_returns_json_404(client):
    response = client.get("/api/does-not-exist")
    assert response.status_code == 404
    assert response.json()["status"] == "error"
    assert "Route non trouvée" in response.json()["message"]


def test_wrong_method_is_reported_as_unmatched_route(client):
    response = client.get("/api/analyze/text")
    assert response.status_code == 404
    assert response.json()["status"] == "error"


def test_index_route_greets(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "Bienvenue" in response.text


def test_text_routes_through_pipeline_run(client, backend_module, interpreter, monkeypatch):
    pipeline = backend_module.container.pipeline
    seen: list[object] = []
    original_run = pipeline.run

    async def recording_run(request):
        seen.append(request)
        return await original_run(request)

    monkeypatch.setattr(pipeline, "run", recording_run)
    response = client.post("/api/analyze/text", json={"symptomText": "nausées"})
    assert response.status_code == 200
    assert [type(request).__name__ for request in seen] == ["TextAnalysisRequest"]
    assert seen[0].content == "nausées"
