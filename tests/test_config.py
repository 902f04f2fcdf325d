import dataclasses
import logging
import os
from unittest.mock import patch

import pytest

from respcache.config import CacheConfig, Settings
from respcache.config.settings import parse_groups


def test_defaults():
    config = CacheConfig()
    assert config.ttl == 3600
    assert dict(config.groups) == {}
    assert config.outdoors == frozenset()
    assert config.content_type == "application/json; charset=utf-8"


def test_config_is_immutable():
    config = CacheConfig(groups={"product": ["category"]}, outdoors=["auth"])

    with pytest.raises(dataclasses.FrozenInstanceError):
        config.ttl = 5
    with pytest.raises(TypeError):
        config.groups["brand"] = ("x",)

    assert config.related_families("product") == ("category",)
    assert config.related_families("brand") == ()
    assert config.is_outdoors("auth")


def test_groups_are_copied_from_caller():
    groups = {"product": ["category"]}
    config = CacheConfig(groups=groups)
    groups["product"].append("brand")
    assert config.related_families("product") == ("category",)


@pytest.mark.parametrize("ttl", [0, -1, True, 1.5])
def test_rejects_invalid_ttl(ttl):
    with pytest.raises(ValueError):
        CacheConfig(ttl=ttl)


def test_log_defaults_to_module_logger(caplog):
    with caplog.at_level(logging.WARNING, logger="respcache.config.cache_config"):
        CacheConfig().log("%s failed: %s", "response_cache.get", "boom")
    assert "response_cache.get failed: boom" in caplog.text


def test_log_uses_custom_sink():
    seen = []
    CacheConfig(logger=lambda fmt, *args: seen.append(fmt % args)).log("%s", "x")
    assert seen == ["x"]


def test_parse_groups():
    assert parse_groups('{"product": ["category", "brand"]}') == {
        "product": ["category", "brand"]
    }
    assert parse_groups("") == {}
    assert parse_groups(None) == {}


@pytest.mark.parametrize("raw", ["not json", '["product"]', '{"product": "category"}'])
def test_parse_groups_rejects_bad_shapes(raw):
    with pytest.raises(ValueError):
        parse_groups(raw)


def test_settings_from_environment():
    env = {
        "RESPCACHE_TTL": "120",
        "RESPCACHE_GROUPS": '{"product": ["category"]}',
        "RESPCACHE_OUTDOORS": "auth, health,",
        "RESPCACHE_REDIS_URL": "redis://localhost:6379/1",
    }
    with patch.dict(os.environ, env):
        Settings.refresh_from_env()
        config = Settings.to_cache_config()
        redis_url = Settings.RESPCACHE_REDIS_URL
    Settings.refresh_from_env()

    assert config.ttl == 120
    assert config.related_families("product") == ("category",)
    assert config.outdoors == frozenset({"auth", "health"})
    assert redis_url == "redis://localhost:6379/1"


def test_settings_defaults_without_environment():
    Settings.refresh_from_env()
    assert Settings.RESPCACHE_REDIS_URL is None
    assert Settings.RESPCACHE_TTL == 3600
    assert Settings.to_cache_config(ttl=7).ttl == 7


def test_group_values_must_not_be_strings():
    with pytest.raises(ValueError):
        CacheConfig(groups={"product": "category"})


def test_outdoors_must_not_be_a_string():
    with pytest.raises(ValueError):
        CacheConfig(outdoors="auth")


def test_refresh_tolerates_malformed_groups(caplog):
    with patch.dict(os.environ, {"RESPCACHE_GROUPS": "not json"}):
        with caplog.at_level(logging.WARNING, logger="respcache.config.settings"):
            Settings.refresh_from_env()
        groups = Settings.RESPCACHE_GROUPS
        with pytest.raises(ValueError):
            Settings.to_cache_config()
        explicit = CacheConfig(ttl=5)
    Settings.refresh_from_env()

    assert groups == {}
    assert "Ignoring invalid RESPCACHE_GROUPS" in caplog.text
    assert explicit.ttl == 5
