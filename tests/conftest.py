import pytest


@pytest.fixture(autouse=True)
def _clean_converter_env(monkeypatch):
    # converter settings are read from the environment when no config is passed
    for name in ("YAMLJSON_INDENT", "YAMLJSON_WIDTH", "YAMLJSON_ALLOW_UNICODE", "YAMLJSON_ENSURE_ASCII"):
        monkeypatch.delenv(name, raising=False)
