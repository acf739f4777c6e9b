from __future__ import annotations

from typing import Any

import pytest

from tasklist import cli


def test_config_command_prints_effective_values(
    capsys: Any, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("SESSION_BACKEND", "redis")
    monkeypatch.setenv("TASKLIST_PORT", "8123")
    cli.main(["config"])
    out = capsys.readouterr().out.splitlines()
    assert "session_backend=redis" in out
    assert "port=8123" in out


def test_serve_applies_flag_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, Any] = {}

    def fake_serve(cfg: Any, *, log_level: str = "info") -> None:
        seen["cfg"] = cfg
        seen["log_level"] = log_level

    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.setattr(cli, "serve", fake_serve)
    cli.main(["serve", "--host", "0.0.0.0", "--port", "9000", "--backend", "memory"])

    assert seen["cfg"].host == "0.0.0.0"
    assert seen["cfg"].port == 9000
    assert seen["cfg"].session_backend == "memory"
    assert seen["log_level"] == "info"


def test_bare_invocation_serves(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[Any] = []
    monkeypatch.setattr(cli, "serve", lambda cfg, *, log_level="info": calls.append(cfg))
    cli.main([])
    assert len(calls) == 1


def test_serve_builds_uvicorn_server(monkeypatch: pytest.MonkeyPatch) -> None:
    import uvicorn

    from tasklist.config import load_config

    ran: list[uvicorn.Config] = []

    class _FakeServer:
        def __init__(self, config: uvicorn.Config) -> None:
            self.config = config

        def run(self) -> None:
            ran.append(self.config)

    monkeypatch.setattr(uvicorn, "Server", _FakeServer)
    cli.serve(load_config({"TASKLIST_HOST": "127.0.0.1", "TASKLIST_PORT": "8555"}))

    assert len(ran) == 1
    assert ran[0].port == 8555
    assert ran[0].host == "127.0.0.1"
