"""Testes do loader de perfil do negócio."""

from __future__ import annotations

from pathlib import Path

import pytest

from ai.config.business_profile import load_business_profile


def test_loads_packaged_yaml() -> None:
    profile = load_business_profile()

    assert profile.name == "Centro de Estética Ricardo"
    assert profile.booking_url.startswith("https://")
    assert len(profile.instructions) >= 1


def test_env_overrides_file(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BUSINESS_NAME", "Clínica Sol")
    monkeypatch.setenv("BUSINESS_PHONE", "+34 911 000 000")

    profile = load_business_profile()

    assert profile.name == "Clínica Sol"
    assert profile.phone == "+34 911 000 000"


def test_custom_path(tmp_path: Path) -> None:
    path = tmp_path / "profile.yaml"
    path.write_text(
        'business:\n  name: "Peluquería Luna"\nassistant:\n  instructions:\n    - "Sé breve"\n',
        encoding="utf-8",
    )

    profile = load_business_profile(str(path))

    assert profile.name == "Peluquería Luna"
    assert profile.instructions == ("Sé breve",)
    assert profile.phone == ""


def test_missing_file_uses_fallback(tmp_path: Path) -> None:
    profile = load_business_profile(str(tmp_path / "missing.yaml"))

    assert profile.name == "nuestro negocio"
    assert profile.instructions


@pytest.mark.parametrize("content", ["- apenas\n- uma lista\n", "business: [unclosed\n"])
def test_invalid_yaml_uses_fallback(tmp_path: Path, content: str) -> None:
    path = tmp_path / "broken.yaml"
    path.write_text(content, encoding="utf-8")

    assert load_business_profile(str(path)).name == "nuestro negocio"
