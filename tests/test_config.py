"""Unit tests for tool settings (absolute_create.config).

Tests cover:
- ScaffoldSettings defaults and validation
- from_env() for every recognised variable
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from absolute_create.config import ScaffoldSettings

pytestmark = pytest.mark.unit

_ENV_VARS = (
    "ABSOLUTE_REGISTRY_URL",
    "ABSOLUTE_REGISTRY_TIMEOUT",
    "ABSOLUTE_MAX_PORT_ATTEMPTS",
    "ABSOLUTE_OUTPUT_DIR",
    "ABSOLUTE_LATEST",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestScaffoldSettingsDefaults:
    def test_defaults(self):
        settings = ScaffoldSettings()
        assert settings.registry_url == "https://registry.npmjs.org"
        assert settings.registry_timeout == 10
        assert settings.max_port_attempts == 100
        assert settings.port_probe_host == "127.0.0.1"
        assert settings.output_dir == Path(".")
        assert settings.latest is False

    def test_rejects_zero_port_attempts(self):
        with pytest.raises(ValidationError):
            ScaffoldSettings(max_port_attempts=0)

    def test_rejects_zero_timeout(self):
        with pytest.raises(ValidationError):
            ScaffoldSettings(registry_timeout=0)


class TestFromEnv:
    def test_no_variables_gives_defaults(self):
        assert ScaffoldSettings.from_env() == ScaffoldSettings()

    def test_reads_every_variable(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        monkeypatch.setenv("ABSOLUTE_REGISTRY_URL", "http://mirror.local")
        monkeypatch.setenv("ABSOLUTE_REGISTRY_TIMEOUT", "3")
        monkeypatch.setenv("ABSOLUTE_MAX_PORT_ATTEMPTS", "7")
        monkeypatch.setenv("ABSOLUTE_OUTPUT_DIR", str(tmp_path))
        monkeypatch.setenv("ABSOLUTE_LATEST", "yes")

        settings = ScaffoldSettings.from_env()

        assert settings.registry_url == "http://mirror.local"
        assert settings.registry_timeout == 3
        assert settings.max_port_attempts == 7
        assert settings.output_dir == tmp_path
        assert settings.latest is True

    @pytest.mark.parametrize("value", ["0", "false", "no", "off"])
    def test_latest_falsy_strings(self, monkeypatch: pytest.MonkeyPatch, value: str):
        monkeypatch.setenv("ABSOLUTE_LATEST", value)
        assert ScaffoldSettings.from_env().latest is False

    def test_latest_is_case_insensitive(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("ABSOLUTE_LATEST", " TRUE ")
        assert ScaffoldSettings.from_env().latest is True
