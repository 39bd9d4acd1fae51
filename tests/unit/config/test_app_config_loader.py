"""Tests for app config loading and environment overlays."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from backdrop.core.config.loader import detect_format, load_app_config, load_config
from backdrop.core.config.models import AppConfig, GenerationConfig
from backdrop.core.providers.base import ImageProvider

_ENV_VARS = (
    "BACKDROP_ENABLE_GENERATIVE_BACKGROUNDS",
    "BACKDROP_IMAGE_PROVIDER",
    "BACKDROP_GENERATION_CLIENT_ID",
    "BACKDROP_GENERATION_CLIENT_SECRET",
    "BACKDROP_CRM_CLIENT_ID",
    "BACKDROP_CRM_CLIENT_SECRET",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep any backdrop.yaml in the working directory out of the way.
    monkeypatch.chdir(tmp_path)


class TestLoadConfig:
    def test_detect_format(self) -> None:
        assert detect_format("a.json") == "json"
        assert detect_format("a.YAML") == "yaml"
        with pytest.raises(ValueError):
            detect_format("a.toml")

    def test_empty_yaml_is_empty_dict(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == {}

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid JSON"):
            load_config(path)

    def test_explicit_missing_path(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_app_config(tmp_path / "missing.yaml")


class TestLoadAppConfig:
    def test_defaults_without_file(self) -> None:
        config = load_app_config()
        assert config.generation.enabled is False
        assert config.generation.provider == ImageProvider.NONE
        assert config.novelty_strategy == "allow-list"
        assert config.cache.prompt_prefix_length == 60

    def test_default_file_is_picked_up(self, tmp_path: Path) -> None:
        (tmp_path / "backdrop.yaml").write_text(
            "novelty_strategy: deny-list\nregistry:\n  base_url: https://crm.test\n",
            encoding="utf-8",
        )
        config = load_app_config()
        assert config.novelty_strategy == "deny-list"
        assert config.registry.base_url == "https://crm.test"

    def test_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "app.json"
        path.write_text(
            json.dumps(
                {
                    "generation": {"enabled": True, "provider": " Async ", "max_polls": 5},
                    "unknown_section": {"ignored": True},
                }
            ),
            encoding="utf-8",
        )
        config = load_app_config(path)
        assert config.generation.provider == ImageProvider.ASYNC
        assert config.generation.max_polls == 5

    def test_invalid_novelty_strategy(self, tmp_path: Path) -> None:
        path = tmp_path / "app.yaml"
        path.write_text("novelty_strategy: vibes\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            load_app_config(path)


class TestEnvironmentOverlay:
    def test_flags_and_credentials(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BACKDROP_ENABLE_GENERATIVE_BACKGROUNDS", "true")
        monkeypatch.setenv("BACKDROP_IMAGE_PROVIDER", "DIRECT")
        monkeypatch.setenv("BACKDROP_GENERATION_CLIENT_ID", "gen-id")
        monkeypatch.setenv("BACKDROP_GENERATION_CLIENT_SECRET", "gen-secret")
        monkeypatch.setenv("BACKDROP_CRM_CLIENT_ID", "crm-id")
        monkeypatch.setenv("BACKDROP_CRM_CLIENT_SECRET", "crm-secret")

        config = load_app_config()
        assert config.generation.enabled is True
        assert config.generation.provider == ImageProvider.DIRECT
        assert config.generation.client_id == "gen-id"
        assert config.generation.client_secret == "gen-secret"
        assert config.crm_auth.client_id == "crm-id"
        assert config.crm_auth.client_secret == "crm-secret"

    def test_file_credentials_win(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        path = tmp_path / "app.yaml"
        path.write_text("generation:\n  client_id: from-file\n", encoding="utf-8")
        monkeypatch.setenv("BACKDROP_GENERATION_CLIENT_ID", "from-env")

        assert load_app_config(path).generation.client_id == "from-file"

    def test_flag_can_disable(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        path = tmp_path / "app.yaml"
        path.write_text("generation:\n  enabled: true\n", encoding="utf-8")
        monkeypatch.setenv("BACKDROP_ENABLE_GENERATIVE_BACKGROUNDS", "0")

        assert load_app_config(path).generation.enabled is False

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("imagen", ImageProvider.DIRECT),
            ("Firefly", ImageProvider.ASYNC),
            ("cms-only", ImageProvider.MANAGED_ONLY),
            ("some-new-vendor", ImageProvider.ASYNC),
        ],
    )
    def test_provider_names_never_fail_loading(
        self, monkeypatch: pytest.MonkeyPatch, name: str, expected: ImageProvider
    ) -> None:
        monkeypatch.setenv("BACKDROP_IMAGE_PROVIDER", name)

        config = load_app_config()
        assert config.generation.provider == expected


def test_has_credentials_requires_all_fields() -> None:
    partial = GenerationConfig(base_url="https://gen.test", client_id="id", client_secret="s")
    assert not partial.has_credentials
    full = partial.model_copy(update={"token_url": "https://ims.test/token"})
    assert full.has_credentials


def test_secrets_are_hidden_from_repr() -> None:
    config = AppConfig.model_validate({"crm_auth": {"client_secret": "hunter2"}})
    assert "hunter2" not in repr(config)


def test_unknown_provider_in_file_selects_generation() -> None:
    config = GenerationConfig.model_validate({"provider": "imagen-5"})
    assert config.provider.generates
    assert GenerationConfig.model_validate({"provider": " "}).provider == ImageProvider.NONE
