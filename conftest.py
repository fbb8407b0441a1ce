import pytest


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    # the client falls back to these when no configuration is passed
    for key in ('SENTRY_DSN', 'SENTRY_RELEASE', 'SENTRY_ENVIRONMENT'):
        monkeypatch.delenv(key, raising=False)
