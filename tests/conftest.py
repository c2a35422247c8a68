import time

import pytest

# 1_000_000 ms after the epoch.
FROZEN_TIME_MS = 1_000_000


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "ICAGENT_HOST",
        "ICAGENT_DISABLE_NONCE",
        "ICAGENT_INGRESS_EXPIRY_MS",
        "ICAGENT_HTTP_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def frozen_time(monkeypatch):
    monkeypatch.setattr(time, "time_ns", lambda: FROZEN_TIME_MS * 1_000_000)
    return FROZEN_TIME_MS
