from __future__ import annotations

import pytest

from buyictbot.utils.config import DEFAULT_ENTRY_URL, Config

ENV_KEYS = [
    "ENTRY_URL", "DATA_FILE", "HEADLESS", "USER_AGENT", "BROWSER_LOCALE", "BLOCK_RESOURCES",
    "NAVIGATION_TIMEOUT_MS", "IDLE_TIMEOUT_MS", "SETTLE_DELAY_MS", "MAX_PAGES",
    "DETAIL_CONCURRENCY", "INCREMENTAL_WRITE", "NOTIFY_SOUND", "NOTIFY_SOUND_CMD",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults() -> None:
    cfg = Config.load()
    assert cfg.entry_url == DEFAULT_ENTRY_URL
    assert cfg.data_file == "./data/data.json"
    assert cfg.headless is True
    assert cfg.detail_concurrency == 1
    assert cfg.incremental_write is False
    assert cfg.navigation_timeout_ms > 0
    assert cfg.notify_sound_cmd is None


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATA_FILE", '"/tmp/out/snapshot.json"')
    monkeypatch.setenv("HEADLESS", "false")
    monkeypatch.setenv("DETAIL_CONCURRENCY", "3")
    monkeypatch.setenv("INCREMENTAL_WRITE", "yes")
    monkeypatch.setenv("SETTLE_DELAY_MS", "250")
    monkeypatch.setenv("NOTIFY_SOUND_CMD", "paplay /usr/share/sounds/complete.oga")

    cfg = Config.load()

    assert cfg.data_file == "/tmp/out/snapshot.json"
    assert cfg.headless is False
    assert cfg.detail_concurrency == 3
    assert cfg.incremental_write is True
    assert cfg.settle_delay_ms == 250
    assert cfg.notify_sound_cmd == "paplay /usr/share/sounds/complete.oga"


@pytest.mark.parametrize(
    "key,value",
    [
        ("MAX_PAGES", "lots"),
        ("HEADLESS", "maybe"),
        ("NAVIGATION_TIMEOUT_MS", "0"),
        ("DETAIL_CONCURRENCY", "0"),
    ],
)
def test_invalid_values_fail_fast(monkeypatch: pytest.MonkeyPatch, key: str, value: str) -> None:
    monkeypatch.setenv(key, value)
    with pytest.raises(RuntimeError, match=key if key != "NAVIGATION_TIMEOUT_MS" else "timeouts"):
        Config.load()
