"""Tests for scan configuration and relay list loading."""

import pytest

from nostr_exif_scan.config import (
    DEFAULT_MAP_BASE,
    DEFAULT_RELAYS,
    ScanConfig,
    get_relays_path,
    load_relays,
)


# ── ScanConfig ───────────────────────────────────────────────────────

def test_defaults():
    config = ScanConfig()
    assert config.concurrency == 8
    assert config.fetch_timeout == 10.0
    assert config.verbose is False


@pytest.mark.parametrize("concurrency", [1, 32])
def test_concurrency_bounds_accepted(concurrency):
    assert ScanConfig(concurrency=concurrency).concurrency == concurrency


@pytest.mark.parametrize("concurrency", [0, -1, 33])
def test_concurrency_bounds_rejected(concurrency):
    with pytest.raises(ValueError):
        ScanConfig(concurrency=concurrency)


def test_config_is_immutable():
    config = ScanConfig()
    with pytest.raises(AttributeError):
        config.concurrency = 4


def test_from_env(monkeypatch):
    monkeypatch.setenv("NOSTR_EXIF_PERMALINK_BASE", "https://njump.me/")
    monkeypatch.delenv("NOSTR_EXIF_MAP_BASE", raising=False)
    config = ScanConfig.from_env(concurrency=4)
    assert config.permalink_base == "https://njump.me/"
    assert config.map_base == DEFAULT_MAP_BASE
    assert config.concurrency == 4


def test_relays_path_from_env(monkeypatch):
    monkeypatch.setenv("NOSTR_EXIF_RELAYS", "/etc/relays.txt")
    assert get_relays_path() == "/etc/relays.txt"


# ── Relay lists ──────────────────────────────────────────────────────

def test_missing_file_uses_defaults(tmp_path):
    assert load_relays(tmp_path / "nope.txt") == DEFAULT_RELAYS


def test_text_file(tmp_path):
    path = tmp_path / "relays.txt"
    path.write_text("wss://a.test\n\n  wss://b.test  \n# wss://commented.test\n")
    assert load_relays(path) == ["wss://a.test", "wss://b.test"]


def test_empty_text_file_is_respected(tmp_path):
    path = tmp_path / "relays.txt"
    path.write_text("")
    assert load_relays(path) == []


def test_yaml_file(tmp_path):
    path = tmp_path / "relays.yaml"
    path.write_text("relays:\n  - wss://a.test\n  - wss://b.test\n")
    assert load_relays(path) == ["wss://a.test", "wss://b.test"]


def test_yaml_plain_list(tmp_path):
    path = tmp_path / "relays.yml"
    path.write_text("- wss://a.test\n")
    assert load_relays(path) == ["wss://a.test"]
