"""Tests for configuration loading."""

import pytest

from switchbar.core.config import SwitchbarConfig
from switchbar.core.errors import ConfigError


def test_defaults():
    config = SwitchbarConfig()
    assert config.search.boosts.as_dict() == {
        "title": 4.0, "url_base": 3.0, "url_query": 2.0, "url_hash": 1.0,
    }
    assert config.search.fuzzy == 0.1
    assert (config.search.ngram_min, config.search.ngram_max) == (3, 10)
    assert config.pipeline.intermediate_cap == 100
    assert config.pipeline.display_cap == 5
    assert config.history.lookback_days == 28
    assert config.favicons.ttl_days == 365


def test_load_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "search:\n"
        "  boosts:\n"
        "    title: 6\n"
        "pipeline:\n"
        "  display_cap: 8\n"
        "logging:\n"
        "  level: debug\n",
        encoding="utf-8",
    )
    config = SwitchbarConfig.load(path)
    assert config.search.boosts.title == 6.0
    assert config.search.boosts.url_base == 3.0
    assert config.pipeline.display_cap == 8
    assert config.logging.level == "DEBUG"


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")
    assert SwitchbarConfig.load(path) == SwitchbarConfig()


@pytest.mark.parametrize("content", [
    "search:\n  fuzzy: 1.5\n",
    "search:\n  ngram_min: 5\n  ngram_max: 2\n",
    "pipeline:\n  display_cap: -1\n",
    "logging:\n  level: LOUD\n",
    "search: [unclosed\n",
    "- just\n- a list\n",
])
def test_invalid_config(tmp_path, content):
    path = tmp_path / "config.yaml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        SwitchbarConfig.load(path)


def test_missing_explicit_file(tmp_path):
    with pytest.raises(ConfigError):
        SwitchbarConfig.load(tmp_path / "nope.yaml")


def test_default_locations(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    assert SwitchbarConfig.load() == SwitchbarConfig()

    (tmp_path / "switchbar.yaml").write_text("pipeline:\n  display_cap: 3\n", encoding="utf-8")
    assert SwitchbarConfig.load().pipeline.display_cap == 3


def test_save_roundtrip(tmp_path):
    config = SwitchbarConfig()
    config.pipeline.display_cap = 7
    config.favicons.cache_path = tmp_path / "icons.json"
    path = tmp_path / "out" / "config.yaml"
    config.save(path)
    assert SwitchbarConfig.load(path) == config
