import logging

from services import logging_setup


def test_configure_logging_is_idempotent_and_buffers(tmp_path, monkeypatch):
    monkeypatch.setattr(logging_setup, "_CONFIGURED", False)
    monkeypatch.setattr(logging_setup, "_RECENT_HANDLER", None)
    root = logging.getLogger()
    saved = list(root.handlers)
    cfg = tmp_path / "config.yaml"
    cfg.write_text(f"logging:\n  level: DEBUG\n  path: {tmp_path / 'logs' / 'app.log'}\n", encoding="utf-8")
    try:
        handler = logging_setup.configure_logging(cfg, console=False)
        assert logging_setup.configure_logging(cfg) is handler

        logging.getLogger("services.analyzer").info("hello %s", "egx")

        assert any("hello egx" in line for line in logging_setup.get_recent_log_lines())
        assert (tmp_path / "logs" / "app.log").exists()
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved:
            root.addHandler(h)


def test_recent_log_handler_capacity():
    handler = logging_setup.RecentLogHandler(capacity=2)
    handler.setFormatter(logging.Formatter("%(message)s"))
    for msg in ("a", "b", "c"):
        handler.emit(logging.LogRecord("x", logging.INFO, __file__, 1, msg, None, None))
    assert handler.lines() == ("b", "c")
