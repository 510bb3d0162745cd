import logging
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from datastore.reading_store import ReadingStore
from services.analyzer import Analyzer
from services.monitor import MonitorService, build_default_monitor


@pytest.fixture
def api_client(tmp_path, monkeypatch) -> Iterator[TestClient]:
    monitors: dict[str, MonitorService] = {}

    def build_test_monitor() -> MonitorService:
        monitor = monitors.get("default")
        if monitor is None:
            store = ReadingStore(persistence_path=tmp_path / "readings.jsonl")
            monitor = MonitorService(store=store, analyzer=Analyzer())
            monitors["default"] = monitor
        return monitor

    build_test_monitor.cache_clear = monitors.clear  # type: ignore[attr-defined]

    monkeypatch.setattr("app.main.build_default_monitor", build_test_monitor)
    monkeypatch.setattr("app.api.build_default_monitor", build_test_monitor)
    monkeypatch.setattr("app.web.build_default_monitor", build_test_monitor)

    app = create_app()
    with TestClient(app) as client:
        yield client


def test_lifespan_clears_monitor_cache(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("READINGS_STORE_PATH", str(tmp_path / "lifespan.jsonl"))
    from datastore.reading_store import build_default_store
    from settings import get_settings

    get_settings.cache_clear()
    build_default_store.cache_clear()
    build_default_monitor.cache_clear()
    app = create_app()

    try:
        with TestClient(app):
            monitor_during = build_default_monitor()

        monitor_after = build_default_monitor()
        assert monitor_after is not monitor_during
    finally:
        build_default_monitor.cache_clear()
        build_default_store.cache_clear()
        get_settings.cache_clear()


def _post(client: TestClient, payload: str):
    return client.post("/api/data", json={"data": payload})


def test_ingest_and_status(api_client: TestClient) -> None:
    response = _post(api_client, "1200,12.5,20,650,22.5,45,150,10")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "success"
    assert body["message"] == "传感器工作正常"
    assert body["data"]["sequence_number"] == 10
    assert body["data"]["is_valid"] is True

    status = api_client.get("/api/status")
    assert status.status_code == 200
    payload = status.json()
    assert payload["sensor_status"] == "正常"
    assert payload["last_sequence"] == 10
    assert payload["last_data"]["pm25"] == 12.5


def test_suspect_reading_message(api_client: TestClient) -> None:
    _post(api_client, "1200,12.5,20,650,22.5,45,150,10")
    response = _post(api_client, "1200,12.5,20,650,22.5,45,150,9")

    assert response.status_code == 200
    assert response.json()["message"] == "传感器可能存在问题"
    assert api_client.get("/api/status").json()["sensor_status"] == "异常"


def test_ingest_format_error_returns_bad_request(api_client: TestClient) -> None:
    response = _post(api_client, "1,2,x,4,5,6,7,8")

    assert response.status_code == 400
    assert "Field 3" in response.json()["detail"]


def test_ingest_requires_data_field(api_client: TestClient) -> None:
    response = api_client.post("/api/data", json={"payload": "1,2,3"})

    assert response.status_code == 422


def test_ingest_store_failure_returns_server_error(api_client: TestClient, tmp_path, caplog) -> None:
    (tmp_path / "readings.jsonl").mkdir()

    with caplog.at_level(logging.ERROR, logger="app.api"):
        response = _post(api_client, "1200,12.5,20,650,22.5,45,150,10")

    assert response.status_code == 500
    assert response.json() == {"detail": "保存数据失败"}
    assert str(tmp_path) not in response.text
    assert any(record.name == "app.api" for record in caplog.records)


def test_status_without_data_returns_not_found(api_client: TestClient) -> None:
    response = api_client.get("/api/status")

    assert response.status_code == 404


def test_history_returns_newest_first(api_client: TestClient) -> None:
    for seq in (1, 2, 3):
        _post(api_client, f"1200,12.5,20,650,22.5,45,150,{seq}")

    response = api_client.get("/api/history", params={"limit": 2})

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 2
    assert [item["sequence_number"] for item in body["data"]] == [3, 2]


def test_stats_payload_shape(api_client: TestClient) -> None:
    _post(api_client, "1200,160,20,650,22.5,45,150,1")

    response = api_client.get("/api/stats", params={"hours": 6})

    assert response.status_code == 200
    body = response.json()
    assert body["hours"] == 6
    assert body["count"] == 1
    assert body["stats"]["pm25"] == {
        "min": 160.0,
        "max": 160.0,
        "avg": 160.0,
        "median": 160.0,
        "std_dev": 0.0,
        "count": 1,
    }
    assert [(a["type"], a["level"]) for a in body["anomalies"]] == [
        ("pm25", "warning"),
        ("pm25", "danger"),
    ]


def test_stats_without_data_is_zero_valued(api_client: TestClient) -> None:
    response = api_client.get("/api/stats")

    assert response.status_code == 200
    body = response.json()
    assert body["hours"] == 24
    assert body["count"] == 0
    assert body["anomalies"] == []


def test_analysis_payload_shape(api_client: TestClient) -> None:
    _post(api_client, "1000,10,20,600,22,50,100,1")
    _post(api_client, "1400,36,30,800,23,55,200,2")

    response = api_client.get("/api/analysis")

    assert response.status_code == 200
    body = response.json()
    assert set(body["correlations"]) == {
        "temp_hcho",
        "humidity_hcho",
        "temp_voc",
        "humidity_voc",
        "pm25_particle",
    }
    assert body["correlations"]["pm25_particle"] == 1.0
    assert body["aqi"]["pm25_aqi"] == 51
    assert body["aqi"]["pm25_level"] == "良"
    assert body["suggestions"] == [
        {"type": "comfort", "icon": "check", "message": "当前温湿度处于舒适区间"}
    ]
    assert body["latest"]["sequence_number"] == 2
    assert sum(bucket["count"] for bucket in body["hourly_trend"]) == 2
    assert set(body["peak_hours"]) == {"pm25", "co2"}


def test_analysis_without_data_returns_not_found(api_client: TestClient) -> None:
    assert api_client.get("/api/analysis").status_code == 404


def test_dashboard_renders(api_client: TestClient) -> None:
    empty = api_client.get("/ui")
    assert empty.status_code == 200
    assert "暂无数据" in empty.text

    _post(api_client, "1000,10,20,600,22,50,100,1")
    page = api_client.get("/ui")
    assert page.status_code == 200
    assert "综合评分" in page.text


def test_health(api_client: TestClient) -> None:
    assert api_client.get("/health").json() == {"status": "ok"}
