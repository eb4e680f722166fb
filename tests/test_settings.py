from datetime import time

from crypto_stats.infrastructure.config.settings import Settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("FORBIDDEN_SYMBOLS", raising=False)
    settings = Settings()
    assert settings.forbidden_symbols == frozenset({"ETH", "SOL", "SHIB"})
    assert settings.SCHEDULE_TIME == time(1, 0)
    assert settings.SCHEDULE_TIMEZONE == "Asia/Nicosia"
    assert settings.INGEST_CHUNK_SIZE == 10000


def test_env_override(monkeypatch):
    monkeypatch.setenv("FORBIDDEN_SYMBOLS", " DOGE , ,XRP")
    monkeypatch.setenv("SCHEDULE_TIME", "03:30")
    settings = Settings()
    assert settings.forbidden_symbols == frozenset({"DOGE", "XRP"})
    assert settings.SCHEDULE_TIME == time(3, 30)


def test_empty_forbidden_list(monkeypatch):
    monkeypatch.setenv("FORBIDDEN_SYMBOLS", "")
    assert Settings().forbidden_symbols == frozenset()
