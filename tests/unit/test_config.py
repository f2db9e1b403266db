from __future__ import annotations

import pytest
from pydantic import ValidationError

from metis.config import Settings, get_settings


def test_settings_read_environment() -> None:
    settings = get_settings()
    assert settings.storage_backend == "sqlite"
    assert settings.timezone == "UTC"
    assert settings.database_url.endswith("metis.db")


def test_storage_backend_is_case_insensitive() -> None:
    assert Settings(storage_backend="Memory").storage_backend == "memory"


@pytest.mark.parametrize(
    "overrides",
    [
        {"app_env": "qa"},
        {"timezone": "Mars/Olympus_Mons"},
        {"storage_backend": "redis"},
        {"storage_quota_bytes": -1},
    ],
)
def test_invalid_settings_are_rejected(overrides: dict[str, object]) -> None:
    with pytest.raises(ValidationError):
        Settings(**overrides)


def test_cors_origin_list_splits_and_strips() -> None:
    settings = Settings(cors_origins=" http://a.test , ,http://b.test")
    assert settings.cors_origin_list == ["http://a.test", "http://b.test"]


def test_configure_logging_resolves_levels(monkeypatch: pytest.MonkeyPatch) -> None:
    import logging

    from metis import logging_config

    root = logging.getLogger()
    previous = root.level
    monkeypatch.setattr(logging_config, "_configured_level", logging.INFO)
    try:
        assert logging_config.configure_logging("debug") == logging.DEBUG
        assert root.level == logging.DEBUG
        assert logging_config.configure_logging("not-a-level") == logging.INFO
    finally:
        root.setLevel(previous)
