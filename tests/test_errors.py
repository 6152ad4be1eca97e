from domain.errors import AppError, TotalRetrievalUnavailable, app_error, ensure_app_error


def test_app_error_string_representation():
    err = AppError("E-TEST", "テストメッセージ", detail="detail", symbol="COMI")
    assert str(err) == "COMI: [E-TEST] テストメッセージ (detail)"
    assert "payload" not in err.for_log()


def test_ensure_app_error_wraps_generic_exception():
    original = ValueError("bad value")
    wrapped = ensure_app_error(original, code="E-LLM-CHUNK", symbol="COMI,EAST")
    assert isinstance(wrapped, AppError)
    assert wrapped.code == "E-LLM-CHUNK"
    assert "bad value" in str(wrapped)
    assert str(wrapped).startswith("COMI,EAST: ")


def test_ensure_app_error_passes_through_app_error():
    err = AppError("E-PASS", "そのまま")
    assert ensure_app_error(err) is err


def test_total_retrieval_unavailable_defaults():
    err = TotalRetrievalUnavailable(detail="no key")
    assert isinstance(err, AppError)
    assert err.code == "E-LLM-UNAVAILABLE"
    assert "GEMINI_API_KEY" in err.guidance
    assert str(err).endswith("(no key)")


def test_app_error_catalog_defaults():
    err = app_error("E-LLM-MALFORMED")
    assert "解析" in err.user_message
    assert err.guidance is not None
    assert "サポート" in err.ui_body()
