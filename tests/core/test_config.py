# tests/core/test_config.py

import pytest

from catalyst_core.config import Settings, get_settings, set_settings
from catalyst_core.errors import (
    ConstraintViolation,
    DuplicateFact,
    InvalidPeriod,
    NotFoundError,
    RangeError,
    ReferentialIntegrityError,
    StorageUnavailable,
)
from catalyst_core.main import status_for


@pytest.mark.parametrize(
    "prefix, expected",
    [("", ""), ("/", ""), ("api/v1", "/api/v1"), ("/api/v1/", "/api/v1")],
)
def test_api_root_is_normalized(prefix, expected):
    assert Settings(API_PREFIX=prefix).api_root == expected


def test_cors_origins():
    assert Settings(CORS_ORIGINS="*").cors_origins == ["*"]
    assert Settings(CORS_ORIGINS="https://a.org, https://b.org,").cors_origins == [
        "https://a.org",
        "https://b.org",
    ]


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("CATALYST_DATABASE_URL", "sqlite:///./elsewhere.db")
    monkeypatch.setenv("CATALYST_LOG_FORMAT", "console")
    set_settings(None)
    try:
        settings = get_settings()
        assert settings.DATABASE_URL == "sqlite:///./elsewhere.db"
        assert settings.LOG_FORMAT == "console"
    finally:
        set_settings(None)


@pytest.mark.parametrize(
    "error, status",
    [
        (ConstraintViolation("bad"), 422),
        (InvalidPeriod("bad"), 422),
        (RangeError("bad"), 422),
        (DuplicateFact(1, 2, 3), 409),
        (ReferentialIntegrityError("blocked"), 409),
        (NotFoundError("entity", 1), 404),
        (StorageUnavailable("locked"), 503),
    ],
)
def test_error_status_mapping(error, status):
    assert status_for(error) == status
