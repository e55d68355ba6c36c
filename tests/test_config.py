"""Unit tests for environment-driven configuration (rds_cloud.config, api_auth.auth.load_config)."""

from __future__ import annotations

import argparse
import logging

import pytest

import rds_cloud.api_auth.auth as auth_mod
from rds_cloud import config as config_mod


def _log() -> logging.LoggerAdapter:
    return logging.LoggerAdapter(logging.getLogger("test"), {})


def test_default_urls(monkeypatch) -> None:
    monkeypatch.delenv("RDS_API_BASE_URL", raising=False)

    assert config_mod.get_token_url() == "https://api.gla.siemens.com/api/auth/token"
    assert config_mod.get_plants_url() == "https://api.gla.siemens.com/api/sitesfilter/v1/plants"


def test_base_url_override_strips_trailing_slash(monkeypatch) -> None:
    monkeypatch.setenv("RDS_API_BASE_URL", "  http://localhost:8080/  ")

    assert config_mod.get_token_url() == "http://localhost:8080/api/auth/token"
    assert config_mod.get_plants_url() == "http://localhost:8080/api/sitesfilter/v1/plants"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(None, None), ("", None), ("abc", None), ("0", None), ("-3", None), ("12.5", 12.5)],
)
def test_get_timeout_seconds(monkeypatch, raw, expected) -> None:
    if raw is None:
        monkeypatch.delenv("RDS_TIMEOUT_SECONDS", raising=False)
    else:
        monkeypatch.setenv("RDS_TIMEOUT_SECONDS", raw)

    assert config_mod.get_timeout_seconds() == expected


def test_load_config_reads_credentials(monkeypatch) -> None:
    monkeypatch.setenv("RDS_API_KEY", "K1")
    monkeypatch.setenv("RDS_USERNAME", " alice ")
    monkeypatch.setenv("RDS_PASSWORD", "secret")
    monkeypatch.delenv("RDS_TIMEOUT_SECONDS", raising=False)

    cfg = auth_mod.load_config(argparse.Namespace(timeout_seconds=None), log=_log())

    assert cfg == auth_mod.Config(api_key="K1", username="alice", password="secret", timeout_seconds=None)


def test_load_config_cli_timeout_wins(monkeypatch) -> None:
    monkeypatch.setenv("RDS_API_KEY", "K1")
    monkeypatch.setenv("RDS_USERNAME", "alice")
    monkeypatch.setenv("RDS_PASSWORD", "secret")
    monkeypatch.setenv("RDS_TIMEOUT_SECONDS", "30")

    cfg = auth_mod.load_config(argparse.Namespace(timeout_seconds="5"), log=_log())

    assert cfg.timeout_seconds == 5.0


def test_load_config_lists_missing_variables(monkeypatch) -> None:
    monkeypatch.setenv("RDS_API_KEY", "K1")
    monkeypatch.delenv("RDS_USERNAME", raising=False)
    monkeypatch.setenv("RDS_PASSWORD", "   ")

    with pytest.raises(auth_mod.CliError) as excinfo:
        auth_mod.load_config(argparse.Namespace(timeout_seconds=None), log=_log())

    assert "RDS_USERNAME" in str(excinfo.value)
    assert "RDS_PASSWORD" in str(excinfo.value)
    assert "RDS_API_KEY" not in str(excinfo.value)


def test_load_config_does_not_log_secrets(monkeypatch, caplog) -> None:
    monkeypatch.setenv("RDS_API_KEY", "API_KEY_SHOULD_NOT_LEAK")
    monkeypatch.setenv("RDS_USERNAME", "alice@example.com")
    monkeypatch.setenv("RDS_PASSWORD", "PASSWORD_SHOULD_NOT_LEAK")
    caplog.set_level(logging.DEBUG)

    auth_mod.load_config(argparse.Namespace(timeout_seconds=None), log=_log())

    assert "API_KEY_SHOULD_NOT_LEAK" not in caplog.text
    assert "PASSWORD_SHOULD_NOT_LEAK" not in caplog.text
    assert "alice@example.com" not in caplog.text


def test_sanitize_text_scrubs_tokens_and_passwords() -> None:
    text = 'grant_type=password&username=a&password=hunter2 {"access_token": "abc123"} Bearer abc123'

    scrubbed = auth_mod._sanitize_text(text)

    assert "hunter2" not in scrubbed
    assert "abc123" not in scrubbed


def test_sanitize_mapping_masks_secret_fields_only() -> None:
    safe = auth_mod._sanitize_mapping({"api_key": "K1", "Password": "", "authorization": None, "username": "bob"})

    assert safe == {"api_key": "<redacted>", "Password": "<empty>", "authorization": "<none>", "username": "bob"}


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    factory, level = logging.getLogRecordFactory(), root.level
    yield
    logging.setLogRecordFactory(factory)
    root.setLevel(level)


@pytest.mark.parametrize(("name", "expected"), [("debug", logging.DEBUG), ("", logging.INFO), ("bogus", logging.INFO)])
def test_configure_logging_sets_root_level(restore_logging, name, expected) -> None:
    log = auth_mod.configure_logging(run_id="run1", level=name)

    assert isinstance(log, logging.LoggerAdapter)
    assert log.logger.name == "rds_cloud"
    assert logging.getLogger().level == expected


def test_configure_logging_stamps_run_id_on_every_record(restore_logging, caplog) -> None:
    auth_mod.configure_logging(run_id="first", level="INFO")
    auth_mod.configure_logging(run_id="abc123def456", level="INFO")
    caplog.set_level(logging.INFO)

    logging.getLogger("urllib3.connectionpool").info("third-party record")
    auth_mod.default_log("rds_cloud.test").info("own record")

    assert [r.run_id for r in caplog.records] == ["abc123def456", "abc123def456"]
