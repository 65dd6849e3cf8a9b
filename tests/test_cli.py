from __future__ import annotations

from typing import Any, Dict, List

import httpx
import pytest
import typer
from typer.testing import CliRunner

from cli.app import app
from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from settings import get_settings


class StubClient:
    def __init__(self, config) -> None:
        self.config = config
        self.history_calls: List[float] = []
        self.closed = False

    def get_health(self) -> Dict[str, Any]:
        return {"status": "OK", "timestamp": "2024-01-01T00:00:00.000Z"}

    def get_current(self) -> Dict[str, Any]:
        return {
            "voltage1": "120",
            "voltage2": "121",
            "voltage3": "119",
            "total": 360.0,
            "timestamp": 1700000000000,
        }

    def get_history(self, hours: float) -> List[Dict[str, Any]]:
        self.history_calls.append(hours)
        return [
            {"timestamp": 1, "voltage1": "120", "voltage2": "121", "voltage3": "119"},
            {"timestamp": 2, "voltage1": "122", "voltage2": "121", "voltage3": "118"},
        ]

    def get_stats(self) -> Dict[str, Any]:
        return {
            "averages": {"voltage1": "121.00", "voltage2": "121.00", "voltage3": "118.50"},
            "max": {"voltage1": 122.0, "voltage2": 121.0, "voltage3": 119.0},
            "min": {"voltage1": 120.0, "voltage2": 121.0, "voltage3": 118.0},
            "timestamp": 1700000000000,
        }

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def stub(monkeypatch) -> StubClient:
    instance = StubClient(config=None)

    def factory(config):
        instance.config = config
        return instance

    monkeypatch.setattr("cli.app.ApiClient", factory)
    return instance


def test_current_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["current"])

    assert result.exit_code == 0
    assert "Current Voltages" in result.stdout
    assert "voltage2: 121" in result.stdout
    assert "total: 360.0" in result.stdout
    assert stub.closed is True


def test_history_command_passes_hours(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["--base-url", "http://gateway:9000/", "history", "--hours", "6"])

    assert result.exit_code == 0
    assert stub.history_calls == [6.0]
    assert stub.config.base_url == "http://gateway:9000"
    assert "History (last 6h)" in result.stdout
    assert "2 readings" in result.stdout


def test_stats_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["stats"])

    assert result.exit_code == 0
    assert "averages:" in result.stdout
    assert "voltage3: 118.50" in result.stdout


def test_health_command(runner: CliRunner, stub: StubClient) -> None:
    result = runner.invoke(app, ["health"])

    assert result.exit_code == 0
    assert "status: OK" in result.stdout


def test_serve_refuses_to_start_without_configuration(runner: CliRunner, stub, monkeypatch) -> None:
    for name in ("FIREBASE_PROJECT_ID", "FIREBASE_APP_ID", "FIREBASE_DATABASE_URL", "FIREBASE_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SNAPSHOT_STORE_BACKEND", "firebase")
    started: List[tuple] = []
    monkeypatch.setattr("cli.app.uvicorn.run", lambda *args, **kwargs: started.append((args, kwargs)))
    get_settings.cache_clear()

    try:
        result = runner.invoke(app, ["serve"])
    finally:
        get_settings.cache_clear()

    assert result.exit_code == 1
    assert started == []


def test_serve_runs_uvicorn_with_settings(runner: CliRunner, stub, monkeypatch) -> None:
    monkeypatch.setenv("SNAPSHOT_STORE_BACKEND", "mock")
    monkeypatch.setenv("LOG_LEVEL", "warning")
    monkeypatch.setenv("PORT", "4123")
    started: List[tuple] = []
    monkeypatch.setattr("cli.app.uvicorn.run", lambda *args, **kwargs: started.append((args, kwargs)))
    levels: List[str] = []
    monkeypatch.setattr("cli.app.configure_logging", levels.append)
    get_settings.cache_clear()

    try:
        result = runner.invoke(app, ["serve", "--host", "127.0.0.1"])
    finally:
        get_settings.cache_clear()

    assert result.exit_code == 0
    args, kwargs = started[0]
    assert args == ("app.main:app",)
    assert kwargs["host"] == "127.0.0.1"
    assert kwargs["port"] == 4123
    assert kwargs["log_level"] == "warning"
    assert levels == ["WARNING"]


def test_serve_log_level_option_overrides_environment(runner: CliRunner, stub, monkeypatch) -> None:
    monkeypatch.setenv("SNAPSHOT_STORE_BACKEND", "mock")
    monkeypatch.setenv("LOG_LEVEL", "warning")
    started: List[tuple] = []
    levels: List[str] = []
    monkeypatch.setattr("cli.app.uvicorn.run", lambda *args, **kwargs: started.append((args, kwargs)))
    monkeypatch.setattr("cli.app.configure_logging", levels.append)
    get_settings.cache_clear()

    try:
        result = runner.invoke(app, ["serve", "--log-level", "debug"])
    finally:
        get_settings.cache_clear()

    assert result.exit_code == 0
    assert levels == ["DEBUG"]
    assert started[0][1]["log_level"] == "debug"


def test_load_config_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("API_BASE_URL", "http://example.test/")
    monkeypatch.setenv("CLI_TIMEOUT", "-5")

    config = load_config()

    assert config == CLIConfig(base_url="http://example.test", timeout=30.0)


def test_api_client_reports_error_body(capsys) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"error": "no data found"})

    client = ApiClient(CLIConfig(base_url="http://gateway.test"))
    client._client = httpx.Client(base_url="http://gateway.test", transport=httpx.MockTransport(handler))

    with pytest.raises(typer.Exit):
        client.get_current()

    assert "404: no data found" in capsys.readouterr().err
    client.close()


def test_api_client_sends_hours_parameter() -> None:
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    client = ApiClient(CLIConfig(base_url="http://gateway.test"))
    client._client = httpx.Client(base_url="http://gateway.test", transport=httpx.MockTransport(handler))

    assert client.get_history(12.5) == []
    assert seen[0].url.path == "/api/voltages/history"
    assert seen[0].url.params["hours"] == "12.5"
    client.close()
