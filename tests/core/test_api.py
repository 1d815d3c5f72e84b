"""Tests for the Flask API."""

import io
import json
from pathlib import Path
from unittest.mock import patch

import pytest

from core.api import create_app, upload_path
from core.errors import ConfigError, TranscriptionServiceError
from core.store import InMemoryTranscriptStore
from qc.models import Transcript
from qc.pipeline import WordQCPipeline
from qc.service import TranscriptQCService


@pytest.fixture
def store():
    return InMemoryTranscriptStore()


@pytest.fixture
def gateway(fake_gateway, three_words):
    return fake_gateway(full=three_words, segments=["hello", "word", "foo"])


@pytest.fixture
def client(store, gateway, tmp_path):
    service = TranscriptQCService(
        store,
        gateway_factory=lambda: gateway,
        pipeline_factory=lambda g: WordQCPipeline(g, threshold=80, max_workers=1, temp_dir=tmp_path),
    )
    with patch("core.api.settings") as mock_settings:
        mock_settings.upload_dir = str(tmp_path / "uploads")
        app = create_app(service=service)
        app.config["TESTING"] = True
        yield app.test_client()


def _upload(client, payload: bytes, name: str = "interview.wav"):
    return client.post(
        "/api/file/upload",
        data={"file": (io.BytesIO(payload), name)},
        content_type="multipart/form-data",
    )


class TestUpload:
    def test_success(self, client, store, source_wav, tmp_path):
        response = _upload(client, source_wav.read_bytes())

        assert response.status_code == 200
        body = response.get_json()
        assert body["filename"] == "interview.wav"
        assert [w["word"] for w in body["words"]] == ["hello", "world", "foo"]
        assert [w["qc_word"] for w in body["words"]] == ["hello", "word", "foo"]
        assert all(w["edited"] is False for w in body["words"])
        assert "interview.wav" in store
        assert upload_path("interview.wav").exists()
        assert upload_path("interview.wav").parent == tmp_path / "uploads"

    def test_missing_file(self, client):
        response = client.post("/api/file/upload", data={}, content_type="multipart/form-data")

        assert response.status_code == 400
        assert response.get_json()["error"] == "INVALID_INPUT"

    def test_empty_file(self, client):
        response = _upload(client, b"")

        assert response.status_code == 400

    def test_missing_credential(self, store, tmp_path, source_wav):
        def factory():
            raise ConfigError("OPENAI_API_KEY is missing.")

        with patch("core.api.settings") as mock_settings:
            mock_settings.upload_dir = str(tmp_path / "uploads")
            app = create_app(service=TranscriptQCService(store, gateway_factory=factory))
            response = _upload(app.test_client(), source_wav.read_bytes())

        assert response.status_code == 500
        assert response.get_json()["error"] == "CONFIGURATION_ERROR"

    def test_full_transcription_failure(self, client, gateway, source_wav):
        def fail(_):
            raise TranscriptionServiceError("service unavailable")

        gateway.transcribe_full = fail

        response = _upload(client, source_wav.read_bytes())

        assert response.status_code == 502
        assert response.get_json()["error"] == "STT_FAILED"


class TestTranscriptEndpoints:
    def test_get_json(self, client, store, sample_transcript_dict):
        store.put(Transcript.from_dict(sample_transcript_dict))

        response = client.get("/api/file/get-json/interview.wav")

        assert response.status_code == 200
        assert response.get_json() == sample_transcript_dict

    def test_get_json_not_found(self, client):
        response = client.get("/api/file/get-json/missing.wav")

        assert response.status_code == 404
        assert response.get_json()["error"] == "FILE_NOT_FOUND"

    def test_update_json(self, client, store, sample_transcript_dict):
        store.put(Transcript(filename="interview.wav", duration=1.5))

        response = client.post("/api/file/update-json/interview.wav", json=sample_transcript_dict)

        assert response.status_code == 200
        assert response.get_json() == {"message": "JSON updated successfully"}
        assert store.get("interview.wav").words[1].edited is True

    def test_update_json_not_found(self, client, sample_transcript_dict):
        response = client.post("/api/file/update-json/missing.wav", json=sample_transcript_dict)

        assert response.status_code == 404

    def test_update_json_malformed(self, client, store):
        store.put(Transcript(filename="interview.wav", duration=1.5))

        response = client.post(
            "/api/file/update-json/interview.wav", json={"words": [{"word": "x"}]}
        )

        assert response.status_code == 400

    def test_download(self, client, store, sample_transcript_dict):
        store.put(Transcript.from_dict(sample_transcript_dict))

        response = client.get("/api/file/download/interview.wav")

        assert response.status_code == 200
        assert "attachment" in response.headers["Content-Disposition"]
        body = json.loads(response.get_data(as_text=True))
        assert set(body["words"][0]) == {"word", "start_time", "end_time", "edited", "qc", "qc_word"}
        assert response.get_data(as_text=True).startswith("{\n  ")

    def test_download_round_trips_through_update(self, client, store, sample_transcript_dict):
        store.put(Transcript.from_dict(sample_transcript_dict))
        downloaded = json.loads(client.get("/api/file/download/interview.wav").get_data(as_text=True))

        response = client.post("/api/file/update-json/interview.wav", json=downloaded)

        assert response.status_code == 200
        assert store.get("interview.wav").to_dict() == sample_transcript_dict

    def test_download_not_found(self, client):
        assert client.get("/api/file/download/missing.wav").status_code == 404

    def test_recheck(self, client, store, gateway, source_wav):
        _upload(client, source_wav.read_bytes())
        gateway.segments = ["world"]

        response = client.post("/api/file/recheck/interview.wav/1")

        assert response.status_code == 200
        assert response.get_json() == {"qc": True, "qc_word": "world"}
        assert store.get("interview.wav").words[1].qc_passed is True

    def test_recheck_without_audio(self, client, store, sample_transcript_dict):
        store.put(Transcript.from_dict(sample_transcript_dict))

        assert client.post("/api/file/recheck/interview.wav/0").status_code == 404


def test_health(client):
    response = client.get("/health")

    assert response.get_json() == {"status": "ok"}


def test_unknown_route(client):
    response = client.get("/nope")

    assert response.status_code == 404
    assert response.get_json()["error"] == "NOT_FOUND"


def test_upload_path_is_unique_per_filename():
    with patch("core.api.settings") as mock_settings:
        mock_settings.upload_dir = "uploads"

        assert upload_path("a b.wav") != upload_path("a_b.wav")
        assert upload_path("a b.wav") == upload_path("a b.wav")
        assert upload_path("a b.wav").suffix == ".wav"
        assert upload_path("../../etc/passwd").parent == Path("uploads")
