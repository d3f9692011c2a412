from __future__ import annotations

import time

from fastapi.testclient import TestClient

from learnsphere.domain.interfaces.capability_registry import Availability, CapabilityKind
from learnsphere.infrastructure.container import LearnSphereContainer
from learnsphere.main import app
from tests.support.fake_capabilities import SAMPLE_TEXT, FakeCapabilityRegistry

PREFERENCES = {"grade_level": "5", "interest": "cooking"}


def _install(monkeypatch, registry: FakeCapabilityRegistry) -> LearnSphereContainer:
    container = LearnSphereContainer(capability_registry=registry)
    monkeypatch.setattr(LearnSphereContainer, "get_instance", classmethod(lambda cls: container))
    return container


def test_create_session_returns_completed_session(monkeypatch) -> None:
    registry = FakeCapabilityRegistry()
    _install(monkeypatch, registry)

    with TestClient(app) as client:
        response = client.post("/api/v1/sessions", json={"text": SAMPLE_TEXT, "preferences": PREFERENCES})

        assert response.status_code == 201
        payload = response.json()
        assert payload["session"]["status"] == "completed"
        assert payload["session"]["materials"]["schema_version"] == "1.0.0"
        assert payload["result"]["success"] is True
        assert payload["result"]["stats"]["external_call_count"] == 5
        assert "materials" not in payload["result"]
        assert response.headers["X-Correlation-ID"]

        session_id = payload["session"]["id"]
        listed = client.get("/api/v1/sessions").json()["sessions"]
        assert [item["id"] for item in listed] == [session_id]
        assert listed[0]["grade_level"] == "5"

        fetched = client.get(f"/api/v1/sessions/{session_id}")
        assert fetched.status_code == 200
        assert fetched.json()["session"]["id"] == session_id


def test_invalid_content_returns_422_without_starting_pipeline(monkeypatch) -> None:
    registry = FakeCapabilityRegistry()
    _install(monkeypatch, registry)

    with TestClient(app) as client:
        response = client.post("/api/v1/sessions", json={"text": "Too short.", "preferences": PREFERENCES})

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "CONTENT_VALIDATION_FAILED"
        assert error["details"]["errors"]
        assert error["request_id"]
        assert registry.handles == []
        assert client.get("/api/v1/sessions").json()["sessions"] == []


def test_malformed_request_is_a_contract_breach(monkeypatch) -> None:
    _install(monkeypatch, FakeCapabilityRegistry())

    with TestClient(app) as client:
        response = client.post("/api/v1/sessions", json={"text": SAMPLE_TEXT, "preferences": {"grade_level": "42"}})

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "FRONTEND_CONTRACT_BREACH"


def test_unknown_session_returns_404(monkeypatch) -> None:
    _install(monkeypatch, FakeCapabilityRegistry())

    with TestClient(app) as client:
        missing_get = client.get("/api/v1/sessions/session_missing")
        missing_delete = client.delete("/api/v1/sessions/session_missing")
        missing_regen = client.post("/api/v1/sessions/session_missing/regenerate", json={})

    assert missing_get.status_code == 404
    assert missing_get.json()["error"]["code"] == "SESSION_NOT_FOUND"
    assert missing_delete.status_code == 404
    assert missing_regen.status_code == 404


def test_regenerate_abort_and_delete(monkeypatch) -> None:
    registry = FakeCapabilityRegistry()
    _install(monkeypatch, registry)

    with TestClient(app) as client:
        created = client.post("/api/v1/sessions", json={"text": SAMPLE_TEXT, "preferences": PREFERENCES})
        session_id = created.json()["session"]["id"]

        regenerated = client.post(
            f"/api/v1/sessions/{session_id}/regenerate",
            json={"preferences": {"grade_level": "undergrad", "interest": "technology"}},
        )
        assert regenerated.status_code == 200
        body = regenerated.json()
        assert body["session"]["preferences"]["grade_level"] == "undergrad"
        assert {q["difficulty"] for q in body["session"]["materials"]["quiz"]["questions"]} == {"hard"}

        aborted = client.post(f"/api/v1/sessions/{session_id}/abort")
        assert aborted.json() == {"session_id": session_id, "aborted": False}

        deleted = client.delete(f"/api/v1/sessions/{session_id}")
        assert deleted.json() == {"deleted": True, "session_id": session_id}
        assert client.get(f"/api/v1/sessions/{session_id}").status_code == 404


def test_pipeline_failure_is_reported_in_result(monkeypatch) -> None:
    registry = FakeCapabilityRegistry(availability={CapabilityKind.SEGMENT: Availability.NEEDS_DOWNLOAD})
    _install(monkeypatch, registry)

    with TestClient(app) as client:
        response = client.post("/api/v1/sessions", json={"text": SAMPLE_TEXT, "preferences": PREFERENCES})

    payload = response.json()
    assert response.status_code == 201
    assert payload["session"]["status"] == "error"
    assert payload["result"]["error_kind"] == "capability_not_ready"
    assert payload["result"]["failed_step"] == "audio_script"


def test_validate_content_endpoint(monkeypatch) -> None:
    _install(monkeypatch, FakeCapabilityRegistry())

    with TestClient(app) as client:
        response = client.post("/api/v1/content/validate", json={"text": SAMPLE_TEXT, "grade_level": "3"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["validation"]["is_valid"] is True
    assert payload["statistics"]["sentences"] == 4
    assert payload["grade_suitability"]["suitable"] is True
    assert isinstance(payload["suggestions"], list)


def test_capabilities_endpoint_reports_availability(monkeypatch) -> None:
    registry = FakeCapabilityRegistry(availability={CapabilityKind.REWRITE: Availability.UNAVAILABLE})
    _install(monkeypatch, registry)

    with TestClient(app) as client:
        response = client.get("/api/v1/capabilities")

    payload = response.json()
    assert payload["capabilities"]["rewrite"] == "unavailable"
    assert payload["capabilities"]["summarize"] == "ready"
    assert payload["all_ready"] is False


def test_background_create_returns_processing_session_then_completes(monkeypatch) -> None:
    _install(monkeypatch, FakeCapabilityRegistry())

    with TestClient(app) as client:
        response = client.post(
            "/api/v1/sessions",
            params={"background": "true"},
            json={"text": SAMPLE_TEXT, "preferences": PREFERENCES},
        )

        assert response.status_code == 202
        payload = response.json()
        assert payload["session"]["status"] == "processing"
        assert payload["result"] is None

        session_id = payload["session"]["id"]
        status = None
        for _ in range(200):
            status = client.get(f"/api/v1/sessions/{session_id}").json()["session"]["status"]
            if status != "processing":
                break
            time.sleep(0.01)

        assert status == "completed"


def test_background_run_can_be_aborted_by_session_id(monkeypatch) -> None:
    registry = FakeCapabilityRegistry(delays={CapabilityKind.SUMMARIZE: 5.0})
    _install(monkeypatch, registry)

    with TestClient(app) as client:
        created = client.post(
            "/api/v1/sessions",
            params={"background": "true"},
            json={"text": SAMPLE_TEXT, "preferences": PREFERENCES},
        )
        session_id = created.json()["session"]["id"]
        for _ in range(200):
            if registry.transform_calls:
                break
            time.sleep(0.01)

        aborted = client.post(f"/api/v1/sessions/{session_id}/abort")
        assert aborted.json() == {"session_id": session_id, "aborted": True}

        session = None
        for _ in range(200):
            session = client.get(f"/api/v1/sessions/{session_id}").json()["session"]
            if session["status"] != "processing":
                break
            time.sleep(0.01)

        assert session["status"] == "error"
        assert session["stats"]["external_call_count"] == 1


def test_session_routes_document_the_error_envelope(monkeypatch) -> None:
    _install(monkeypatch, FakeCapabilityRegistry())

    with TestClient(app) as client:
        schema = client.get("/openapi.json").json()

    responses = schema["paths"]["/api/v1/sessions/{session_id}"]["get"]["responses"]
    assert set(responses) >= {"404", "409", "422", "500"}
    assert responses["409"]["content"]["application/json"]["schema"]["$ref"].endswith("/ErrorEnvelope")
    assert "ErrorBody" in schema["components"]["schemas"]
