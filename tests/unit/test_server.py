"""HTTP API tests."""

import inspect

import pytest
from fastapi.testclient import TestClient

from uigen.handlers import INTENT_REQUIRED_ERROR
from uigen.server import create_app

from tests.conftest import BUTTON_CODE, DASHBOARD_CODE, successful_run

CHECKPOINT_BODY = {
    "label": "Login Form",
    "userIntent": "Create a login form",
    "code": BUTTON_CODE,
    "plan": {"layout": {"type": "single", "structure": "form"}, "components": [], "dataFlow": ""},
    "isMarked": True,
}


@pytest.fixture
def client(di_container):
    return TestClient(create_app(di_container))


# ============================================================================
# Generation
# ============================================================================

@pytest.mark.unit
def test_generate_success(client, backend):
    backend.queue(*successful_run())

    response = client.post("/api/generate", json={"userIntent": "Create a dashboard with a data table"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["code"] == DASHBOARD_CODE
    assert body["plan"]["dataFlow"] == "Static sample rows"


@pytest.mark.unit
def test_generate_missing_intent(client):
    response = client.post("/api/generate", json={"currentCode": "x"})

    assert response.status_code == 400
    assert response.json() == {"error": INTENT_REQUIRED_ERROR}


@pytest.mark.unit
def test_generate_invalid_json(client):
    response = client.post(
        "/api/generate", content=b"{not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json() == {"error": INTENT_REQUIRED_ERROR}


@pytest.mark.unit
def test_classify(client, backend):
    backend.queue('{"shouldCreateCheckpoint": true, "reasoning": "New page", "classification": "major"}')

    response = client.post("/api/classify", json={"userIntent": "Build a new settings page"})

    assert response.status_code == 200
    assert response.json()["shouldCheckpoint"] is True


@pytest.mark.unit
def test_classify_requires_intent(client):
    assert client.post("/api/classify", json={}).status_code == 400


# ============================================================================
# Preview
# ============================================================================

@pytest.mark.unit
def test_preview_renders(client):
    response = client.post("/api/preview", json={"code": BUTTON_CODE})

    assert response.status_code == 200
    body = response.json()
    assert body["error"] is None
    assert ">Hi</button>" in body["html"]


@pytest.mark.unit
def test_preview_reports_compile_fault(client):
    response = client.post("/api/preview", json={"code": "function GeneratedUI() { return Nope; }"})

    body = response.json()
    assert body["channel"] == "compile"
    assert body["error"] == "Nope is not defined"


@pytest.mark.unit
def test_preview_runtime_limits_are_render_faults(client):
    code = "function GeneratedUI() { return 'a'.repeat(2000000000); }"

    body = client.post("/api/preview", json={"code": code}).json()

    assert body["channel"] == "render"
    assert body["error"] == "Invalid string length"


@pytest.mark.unit
def test_preview_rejects_non_string_code(client):
    assert client.post("/api/preview", json={"code": 3}).status_code == 400


# ============================================================================
# Checkpoints
# ============================================================================

@pytest.mark.unit
def test_checkpoint_lifecycle(client):
    created = client.post("/api/checkpoints", json=CHECKPOINT_BODY)
    assert created.status_code == 201
    checkpoint_id = created.json()["id"]
    assert checkpoint_id.startswith("ckpt_")

    assert [c["id"] for c in client.get("/api/checkpoints").json()] == [checkpoint_id]
    assert [c["id"] for c in client.get("/api/checkpoints/marked").json()] == [checkpoint_id]

    patched = client.patch(f"/api/checkpoints/{checkpoint_id}", json={"label": "Sign-in", "isMarked": False})
    assert patched.status_code == 200
    assert patched.json()["label"] == "Sign-in"
    assert client.get("/api/checkpoints/marked").json() == []

    iteration = client.post(
        f"/api/checkpoints/{checkpoint_id}/iterations",
        json={"userMessage": "Add a button", "aiResponse": "Done"},
    )
    assert iteration.status_code == 201
    assert iteration.json()["parentCheckpointId"] == checkpoint_id
    assert len(client.get(f"/api/checkpoints/{checkpoint_id}/iterations").json()) == 1

    assert client.delete(f"/api/checkpoints/{checkpoint_id}").status_code == 204
    assert client.get(f"/api/checkpoints/{checkpoint_id}").status_code == 404
    assert client.get(f"/api/checkpoints/{checkpoint_id}/iterations").json() == []


@pytest.mark.unit
def test_checkpoint_patch_ignores_path_named_keys(client):
    checkpoint_id = client.post("/api/checkpoints", json=CHECKPOINT_BODY).json()["id"]

    patched = client.patch(
        f"/api/checkpoints/{checkpoint_id}",
        json={"checkpoint_id": "ckpt_other", "updates": 1, "label": "Renamed"},
    )

    assert patched.status_code == 200
    assert patched.json()["id"] == checkpoint_id
    assert patched.json()["label"] == "Renamed"


@pytest.mark.unit
def test_checkpoint_routes_run_in_threadpool(client):
    routes = [route for route in client.app.routes if getattr(route, "path", "").startswith("/api/checkpoints")]

    assert routes
    assert not any(inspect.iscoroutinefunction(route.endpoint) for route in routes)


@pytest.mark.unit
def test_checkpoint_validation_error(client):
    response = client.post("/api/checkpoints", json={"label": "No code"})

    assert response.status_code == 422


@pytest.mark.unit
def test_checkpoint_not_found(client):
    assert client.get("/api/checkpoints/ckpt_missing").status_code == 404
    assert client.patch("/api/checkpoints/ckpt_missing", json={"label": "x"}).status_code == 404
    assert client.delete("/api/checkpoints/ckpt_missing").status_code == 404
    assert client.post(
        "/api/checkpoints/ckpt_missing/iterations", json={"userMessage": "a", "aiResponse": "b"}
    ).status_code == 404


# ============================================================================
# Operations
# ============================================================================

@pytest.mark.unit
def test_health(client):
    body = client.get("/health").json()

    assert body["status"] == "healthy"
    assert body["provider"] == "groq"


@pytest.mark.unit
def test_metrics(client):
    client.post("/api/preview", json={"code": BUTTON_CODE})

    response = client.get("/metrics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "uigen_http_requests_total" in response.text
