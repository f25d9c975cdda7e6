from __future__ import annotations

import logging
import os

import pytest

from catalog_sync.config import (
    WEBHOOK_TOPICS,
    ConfigurationError,
    MissingConfigurationError,
    ShopifyCredentials,
    SyncConfig,
    configure_logging,
    flag_env_var,
    get_shopify_config,
    get_shopify_credentials,
    get_sync_config,
    int_env_var,
    optional_env_var,
    require_env_var,
    require_env_vars,
)


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result["EXAMPLE_VAR"] == "value"


def test_require_env_vars_reports_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PRESENT_VAR", "value")
    monkeypatch.delenv("MISSING_B", raising=False)
    monkeypatch.delenv("MISSING_A", raising=False)

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_B", "PRESENT_VAR", "MISSING_A"])

    assert exc.value.names == ("MISSING_A", "MISSING_B")
    assert "MISSING_A, MISSING_B" in str(exc.value)


def test_require_env_var_handles_blank_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "   ")

    with pytest.raises(MissingConfigurationError):
        require_env_var("EXAMPLE_VAR")


def test_require_env_vars_restores_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TEMP_VAR", "123")

    assert os.getenv("TEMP_VAR") == "123"
    result = require_env_var("TEMP_VAR")
    assert result == "123"


def test_optional_env_var_treats_blank_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "  ")

    assert optional_env_var("EXAMPLE_VAR", "fallback") == "fallback"


def test_shopify_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SHOPIFY_API_VERSION", raising=False)
    monkeypatch.delenv("SHOPIFY_WEBHOOK_ADDRESS", raising=False)

    config = get_shopify_config()

    assert config.api_version == "2024-01"
    assert config.webhook_address is None
    assert config.webhook_topics == WEBHOOK_TOPICS


def test_shopify_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SHOPIFY_API_VERSION", "2025-01")
    monkeypatch.setenv("SHOPIFY_WEBHOOK_ADDRESS", "https://catalog.example.com/hooks")

    config = get_shopify_config()

    assert config.api_version == "2025-01"
    assert config.webhook_address == "https://catalog.example.com/hooks"


def test_shopify_credentials_are_required(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SHOPIFY_API_KEY", "key")
    monkeypatch.delenv("SHOPIFY_API_SECRET", raising=False)

    with pytest.raises(MissingConfigurationError) as exc:
        get_shopify_credentials()

    assert "SHOPIFY_API_SECRET" in str(exc.value)

    monkeypatch.setenv("SHOPIFY_API_SECRET", "secret")
    assert get_shopify_credentials() == ShopifyCredentials(api_key="key", api_secret="secret")


def test_sync_config_uppercases_currency(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CATALOG_DEFAULT_CURRENCY", "eur")
    monkeypatch.delenv("CATALOG_SYNC_PAGE_SIZE", raising=False)

    assert get_sync_config() == SyncConfig(default_currency="EUR")


def test_sync_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CATALOG_DEFAULT_CURRENCY", raising=False)
    monkeypatch.delenv("CATALOG_SYNC_PAGE_SIZE", raising=False)

    assert get_sync_config() == SyncConfig(page_size=50, default_currency="USD")


def test_sync_config_reads_page_size(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CATALOG_DEFAULT_CURRENCY", raising=False)
    monkeypatch.setenv("CATALOG_SYNC_PAGE_SIZE", "250")

    assert get_sync_config().page_size == 250


@pytest.mark.parametrize("raw", ["0", "251", "many"])
def test_sync_config_rejects_bad_page_size(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.delenv("CATALOG_DEFAULT_CURRENCY", raising=False)
    monkeypatch.setenv("CATALOG_SYNC_PAGE_SIZE", raw)

    with pytest.raises(ConfigurationError, match="CATALOG_SYNC_PAGE_SIZE"):
        get_sync_config()


def test_sync_config_rejects_bad_currency(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CATALOG_DEFAULT_CURRENCY", "euro")
    monkeypatch.delenv("CATALOG_SYNC_PAGE_SIZE", raising=False)

    with pytest.raises(ConfigurationError, match="CATALOG_DEFAULT_CURRENCY"):
        get_sync_config()


def test_int_env_var_falls_back_to_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_INT", " ")

    assert int_env_var("EXAMPLE_INT", 7, minimum=1, maximum=10) == 7


@pytest.mark.parametrize(("raw", "expected"), [("1", True), ("Yes", True), ("off", False)])
def test_flag_env_var(monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool) -> None:
    monkeypatch.setenv("EXAMPLE_FLAG", raw)

    assert flag_env_var("EXAMPLE_FLAG") is expected


def test_configure_logging_reads_level_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CATALOG_SYNC_LOG_LEVEL", "debug")
    root = logging.getLogger()
    previous_level, previous_handlers = root.level, root.handlers[:]
    try:
        configure_logging(force=True)

        assert root.level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        root.handlers[:] = previous_handlers
        root.setLevel(previous_level)


def test_configure_logging_rejects_unknown_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CATALOG_SYNC_LOG_LEVEL", "chatty")

    with pytest.raises(ConfigurationError):
        configure_logging()
