"""Environment helpers behind the exporter constants."""

from __future__ import annotations

from ecs_toolset import config as const


def test_env_helpers(monkeypatch) -> None:
    monkeypatch.setenv("X_INT", "7")
    monkeypatch.setenv("X_BAD", "seven")
    monkeypatch.setenv("X_BOOL", "Yes")
    assert const._env_int("X_INT", 1) == 7
    assert const._env_int("X_BAD", 1) == 1
    assert const._env_opt_int("X_BAD") is None
    assert const._env_opt_int("X_UNSET_ANYWHERE") is None
    assert const._env_opt_int("X_INT") == 7
    assert const._env_bool("X_BOOL", False) is True
    assert const._env_str("X_UNSET_ANYWHERE", "d") == "d"


def test_defaults() -> None:
    assert const.PAGE_SIZE >= 1
    assert const.DESCRIBE_CLUSTERS_LIMIT == 100
    assert const.SDK_CONFIG.retries["mode"] == "standard"
