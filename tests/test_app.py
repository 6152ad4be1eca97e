from __future__ import annotations

import json

import app
from services import llm_client
from services.index_service import IndexService


def _config(tmp_path):
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        "analysis:\n  display_days: 3\n  fallback_delay: 0\n"
        "retrieval:\n  api_key_env: EGX_APP_TEST_KEY\n"
        f"logging:\n  path: {tmp_path / 'app.log'}\n",
        encoding="utf-8",
    )
    return cfg


def test_main_without_key_prints_simulated_table(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(llm_client, "load_dotenv", lambda *a, **k: False)
    monkeypatch.delenv("EGX_APP_TEST_KEY", raising=False)
    monkeypatch.setattr("services.logging_setup._CONFIGURED", True)
    monkeypatch.setattr("services.logging_setup._RECENT_HANDLER", object())
    out_path = tmp_path / "out.json"

    code = app.main(
        ["--symbols", "COMI.CA; cib; EFG", "--config", str(_config(tmp_path)), "--export", str(out_path)]
    )

    assert code == 0
    out = capsys.readouterr().out
    assert "シミュレーション" in out
    assert "chart: EGX:COMI [D]" in out
    assert "chart: EGX:HRHO [D]" in out
    data = json.loads(out_path.read_text(encoding="utf-8"))
    assert [row["symbol"] for row in data] == ["COMI", "HRHO"]
    assert all(row["is_simulated"] for row in data)


def test_main_index_uses_static_members_without_key(tmp_path, monkeypatch, capsys):
    IndexService.clear_cache()
    monkeypatch.setattr(llm_client, "load_dotenv", lambda *a, **k: False)
    monkeypatch.delenv("EGX_APP_TEST_KEY", raising=False)
    monkeypatch.setattr("services.logging_setup._CONFIGURED", True)
    monkeypatch.setattr("services.logging_setup._RECENT_HANDLER", object())

    code = app.main(["--index", "EGX70", "--config", str(_config(tmp_path))])

    assert code == 0
    out = capsys.readouterr().out
    assert "MOIL" in out and "ODOD" in out
    IndexService.clear_cache()


def test_main_reports_csv_errors(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(llm_client, "load_dotenv", lambda *a, **k: False)
    monkeypatch.delenv("EGX_APP_TEST_KEY", raising=False)
    monkeypatch.setattr("services.logging_setup._CONFIGURED", True)
    monkeypatch.setattr("services.logging_setup._RECENT_HANDLER", object())

    code = app.main(["--csv", str(tmp_path / "missing.csv"), "--config", str(_config(tmp_path))])

    assert code == 1
    assert "E-CSV-NOTFOUND" in capsys.readouterr().out
