import pytest
from fastapi.testclient import TestClient

from neurospell.api.app import create_app
from neurospell.context import AppContext
from neurospell.eeg.stream import StreamLink
from neurospell.settings import AppSettings


@pytest.fixture()
def api_client(tmp_path):
    async def refuse(url: str):
        raise OSError("connection refused")

    settings = AppSettings(
        model_store_dir=str(tmp_path / "models"),
        tick_seconds=5.0,
        openai_api_key=None,
        stream_autoconnect=False,
        classifier_random_fallback=False,
    )
    context = AppContext(settings, stream=StreamLink("ws://device.test", connector=refuse))
    app = create_app(context=context)
    with TestClient(app) as client:
        yield client, context


def test_health_reports_components(api_client):
    client, _ = api_client
    resp = client.get("/healthz")
    assert resp.status_code == 200
    body = resp.json()
    assert body["ok"] is True
    assert body["stream"] == "disconnected"
    assert body["symbol_model"] is False
    assert body["start_symbol_model"] is False
    assert body["refiner"] == "mock"


def test_recording_lifecycle_over_http(api_client):
    client, context = api_client
    assert client.get("/v1/recording").json()["status"] == "idle"

    resp = client.post("/v1/recording/stop")
    assert resp.status_code == 409

    resp = client.post("/v1/recording/start")
    assert resp.status_code == 200
    assert resp.json()["status"] == "getting_ready"
    assert resp.json()["countdown_seconds"] == context.config.get_ready_seconds

    assert client.post("/v1/recording/start").status_code == 409

    resp = client.post("/v1/recording/reset")
    assert resp.json()["status"] == "idle"


def test_training_holds_the_collector(api_client):
    client, context = api_client
    resp = client.post("/v1/training/start")
    assert resp.status_code == 200
    body = resp.json()
    assert body["phase"] == "training"
    assert body["current_letter"] in context.config.alphabet
    assert body["used_letters"] == [body["current_letter"]]
    assert body["remaining"] == len(context.config.alphabet) - 1

    resp = client.post("/v1/recording/start")
    assert resp.status_code == 409
    assert "training" in resp.json()["detail"]

    assert client.post("/v1/training/reset").json()["phase"] == "initial"
    assert client.post("/v1/recording/start").status_code == 200
    client.post("/v1/recording/reset")


def test_unreachable_device_maps_to_503(api_client):
    client, _ = api_client
    resp = client.post("/v1/stream/connect")
    assert resp.status_code == 503
    state = client.get("/v1/stream").json()
    assert state == {"state": "disconnected", "connected": False, "session_id": None}


def test_start_symbol_watch_toggle(api_client):
    client, _ = api_client
    resp = client.post("/v1/start-symbol/watch")
    assert resp.json() == {"enabled": True, "detector_loaded": False}
    resp = client.delete("/v1/start-symbol/watch")
    assert resp.json()["enabled"] is False


def test_metrics_endpoint_exposes_pipeline_counters(api_client):
    client, _ = api_client
    client.get("/healthz")
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "eeg_samples_received_total" in resp.text
    assert 'neurospell_http_requests_total{route="/healthz",method="GET",status="200"}' in resp.text
    assert 'neurospell_flow_state{flow="recording",state="idle"} 1.0' in resp.text
    assert 'neurospell_flow_state{flow="training",state="training"} 0.0' in resp.text
    assert "neurospell_stream_connected 0.0" in resp.text
