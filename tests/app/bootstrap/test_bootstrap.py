"""Testes do bootstrap: validação de settings e montagem do container."""

from __future__ import annotations

import logging

import pytest

from app.bootstrap import collect_settings_errors, validate_runtime_settings
from app.bootstrap.dependencies import build_services, create_text_generator
from app.infra.ai.openai_generator import OpenAITextGenerator
from app.infra.stores import MemoryDedupeStore, MemoryExchangeStore, RedisDedupeStore
from config.settings import OpenAISettings
from tests.fakes.fake_services import FakeTextGenerator, FakeTransport

_MANAGED_ENV = (
    "ENVIRONMENT",
    "TWILIO_ACCOUNT_SID",
    "TWILIO_AUTH_TOKEN",
    "TWILIO_WHATSAPP_NUMBER",
    "CALENDLY_SIGNING_KEY",
    "VALIDATE_CALENDLY_SIGNATURE",
    "OPENAI_API_KEY",
    "OPENAI_ENABLED",
    "ADMIN_API_TOKEN",
    "DEDUPE_BACKEND",
    "EXCHANGE_STORE_BACKEND",
    "REDIS_URL",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in _MANAGED_ENV:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def valid_env(clean_env: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    clean_env.setenv("TWILIO_ACCOUNT_SID", "AC123")
    clean_env.setenv("TWILIO_AUTH_TOKEN", "secret")
    clean_env.setenv("TWILIO_WHATSAPP_NUMBER", "+34900000000")
    clean_env.setenv("CALENDLY_SIGNING_KEY", "calendly-key")
    clean_env.setenv("OPENAI_API_KEY", "sk-test")
    return clean_env


def test_collect_settings_errors_prefixes_sources(clean_env: pytest.MonkeyPatch) -> None:
    errors = collect_settings_errors()

    assert any(error.startswith("twilio: ") for error in errors)
    assert any(error.startswith("openai: ") for error in errors)
    assert any(error.startswith("calendly: ") for error in errors)


def test_valid_configuration_has_no_errors(valid_env: pytest.MonkeyPatch) -> None:
    assert collect_settings_errors() == []


def test_development_only_warns(
    clean_env: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    with caplog.at_level(logging.WARNING):
        validate_runtime_settings()

    assert any(record.getMessage() == "settings_validation_failed" for record in caplog.records)


@pytest.mark.parametrize("environment", ["staging", "production"])
def test_strict_environments_fail_fast(clean_env: pytest.MonkeyPatch, environment: str) -> None:
    clean_env.setenv("ENVIRONMENT", environment)

    with pytest.raises(RuntimeError, match=f"Configuração inválida para {environment}"):
        validate_runtime_settings()


def test_production_with_valid_settings_boots(valid_env: pytest.MonkeyPatch) -> None:
    valid_env.setenv("ENVIRONMENT", "production")

    validate_runtime_settings()


def test_text_generator_disabled_without_key() -> None:
    assert create_text_generator(OpenAISettings(api_key="", enabled=True)) is None
    assert create_text_generator(OpenAISettings(api_key="sk", enabled=False)) is None
    assert isinstance(create_text_generator(OpenAISettings(api_key="sk")), OpenAITextGenerator)


@pytest.mark.asyncio
async def test_build_services_with_injected_fakes(clean_env: pytest.MonkeyPatch) -> None:
    services = build_services(
        exchange_store=MemoryExchangeStore(),
        dedupe=MemoryDedupeStore(),
        generator=FakeTextGenerator(),
        transport=FakeTransport(),
    )

    assert services.closeables == ()
    assert services.response_service.enabled is True
    assert services.admin_settings.enabled is False
    assert set(services.maintenance.run_once()) == {
        "conversation_context",
        "response_cache",
        "rate_windows",
    }


@pytest.mark.asyncio
async def test_build_services_from_settings(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("OPENAI_ENABLED", "false")
    clean_env.setenv("DEDUPE_BACKEND", "redis")
    clean_env.setenv("REDIS_URL", "redis://localhost:6379/0")

    services = build_services()

    assert isinstance(services.exchange_store, MemoryExchangeStore)
    assert isinstance(services.dedupe, RedisDedupeStore)
    assert services.response_service.enabled is False
    # cliente HTTP do Twilio + Redis
    assert len(services.closeables) == 2
    await services.aclose()
