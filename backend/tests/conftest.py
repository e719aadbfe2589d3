from __future__ import annotations

import importlib
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from fakes import FakeInterpreter, FakeTranscriber  # noqa: E402


@pytest.fixture
def upload_dir(tmp_path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture
def backend_module(upload_dir, monkeypatch):
    monkeypatch.setenv("UPLOAD_DIR", str(upload_dir))
    monkeypatch.setenv("OPENAI_API_KEY", "test-openai-key")
    monkeypatch.setenv("GEMINI_API_KEY", "test-gemini-key")
    monkeypatch.setenv("SYMPTOM_LOG_LEVEL", "WARNING")

    if "main" in sys.modules:
        module = importlib.reload(sys.modules["main"])
    else:
        module = importlib.import_module("main")
    return module


@pytest.fixture
def transcriber(backend_module, monkeypatch) -> FakeTranscriber:
    fake = FakeTranscriber()
    monkeypatch.setattr(backend_module.container.pipeline, "transcriber", fake)
    return fake


@pytest.fixture
def interpreter(backend_module, monkeypatch) -> FakeInterpreter:
    fake = FakeInterpreter()
    monkeypatch.setattr(backend_module.container.pipeline, "interpreter", fake)
    return fake


@pytest.fixture
def client(backend_module, transcriber, interpreter):
    with TestClient(backend_module.app) as test_client:
        yield test_client
