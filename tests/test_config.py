"""
Tests for environment-driven configuration.

Copyright (c) 2025 Graziano Labs Corp.
"""

import pytest
from response_error.config import ResponseErrorConfig


def test_defaults(monkeypatch):
    for var in (
        "RESPONSE_ERROR_DEFAULT_STATUS",
        "RESPONSE_ERROR_STRICT_DUPLICATES",
        "RESPONSE_ERROR_DUMP_SOURCE",
        "RESPONSE_ERROR_EXPOSE_INTERNAL",
    ):
        monkeypatch.delenv(var, raising=False)
    config = ResponseErrorConfig.from_env()
    assert config == ResponseErrorConfig()
    assert config.default_status == 500
    assert config.strict_duplicates is False


def test_from_env(monkeypatch):
    monkeypatch.setenv("RESPONSE_ERROR_DEFAULT_STATUS", "503")
    monkeypatch.setenv("RESPONSE_ERROR_STRICT_DUPLICATES", "1")
    monkeypatch.setenv("RESPONSE_ERROR_DUMP_SOURCE", "1")
    monkeypatch.setenv("RESPONSE_ERROR_EXPOSE_INTERNAL", "0")
    config = ResponseErrorConfig.from_env()
    assert config.default_status == 503
    assert config.strict_duplicates is True
    assert config.dump_source is True
    assert config.expose_internal_messages is False


@pytest.mark.parametrize("status", [42, 1000])
def test_validate_rejects_out_of_range(status):
    with pytest.raises(ValueError, match="default_status"):
        ResponseErrorConfig(default_status=status).validate()


def test_summary():
    summary = ResponseErrorConfig(strict_duplicates=True).get_summary()
    assert "Default status: 500" in summary
    assert "Duplicate options: Rejected" in summary
