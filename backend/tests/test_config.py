"""Settings and rate limit parsing."""

from __future__ import annotations

from datetime import timedelta

from pettycash.api.v1.auth import parse_rate
from pettycash.core.config import Settings


def test_settings_read_ledger_and_login_limits_from_env(monkeypatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    monkeypatch.setenv("PETTY_CASH_POLICY_WINDOW_DAYS", "45")
    monkeypatch.setenv("RATE_LIMIT_LOGIN", "5/hour")

    settings = Settings()  # type: ignore[call-arg]

    assert settings.petty_cash_policy_window == timedelta(days=45)
    assert parse_rate(settings.rate_limit_login, fallback=(10, 60)) == (5, 3600)
    assert not hasattr(settings, "rate_limit_default")


def test_parse_rate_falls_back_on_garbage() -> None:
    assert parse_rate("many/minute", fallback=(10, 60)) == (10, 60)
    assert parse_rate("3/fortnight", fallback=(10, 60)) == (3, 60)
