"""OAuth2 provider configuration for the generated auth utility."""

from __future__ import annotations

import json

from pydantic import BaseModel, ConfigDict, Field

from ..models import Configuration
from .templates import TemplateRenderer

AUTH_CONFIG_PATH = "src/backend/utils/absoluteAuthConfig.ts"


class ProviderDefaults(BaseModel):
    """Default OAuth2 settings for one provider.

    Credential values are TypeScript expressions, not literals.
    """

    model_config = ConfigDict(frozen=True)

    credentials: dict[str, str]
    scope: tuple[str, ...] = ()
    search_params: tuple[tuple[str, str], ...] = ()

    def extras(self) -> list[str]:
        lines: list[str] = []
        if self.scope:
            lines.append(f"scope: {json.dumps(list(self.scope))}")
        if self.search_params:
            lines.append(f"searchParams: {json.dumps([list(p) for p in self.search_params])}")
        return lines


DEFAULT_PROVIDER_CONFIGURATIONS: dict[str, ProviderDefaults] = {
    "google": ProviderDefaults(
        credentials={
            "clientId": "getEnv('GOOGLE_CLIENT_ID')",
            "clientSecret": "getEnv('GOOGLE_CLIENT_SECRET')",
        },
        scope=(
            "openid",
            "https://www.googleapis.com/auth/userinfo.profile",
            "https://www.googleapis.com/auth/userinfo.email",
        ),
        search_params=(("access_type", "offline"),),
    ),
    "github": ProviderDefaults(
        credentials={
            "clientId": "getEnv('GITHUB_CLIENT_ID')",
            "clientSecret": "getEnv('GITHUB_CLIENT_SECRET')",
        },
    ),
}


class AuthConfig(BaseModel):
    """Rendered auth utility plus the providers it configures."""

    text: str
    providers: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


def generate_auth_config(config: Configuration, renderer: TemplateRenderer) -> AuthConfig | None:
    """Render ``absoluteAuthConfig.ts``, or ``None`` when auth is disabled.

    Providers without default settings are skipped with a warning.
    """
    if not config.uses_auth:
        return None

    entries: list[dict[str, object]] = []
    providers: list[str] = []
    warnings: list[str] = []
    for name in config.auth_providers:
        defaults = DEFAULT_PROVIDER_CONFIGURATIONS.get(name)
        if defaults is None:
            warnings.append(
                f'No default OAuth2 configuration is defined for provider "{name}"; '
                f"configure it manually in {AUTH_CONFIG_PATH}"
            )
            continue
        providers.append(name)
        entries.append({"name": name, "credentials": defaults.credentials, "extras": defaults.extras()})

    text = renderer.render("absoluteAuthConfig.ts.j2", {"providers": entries})
    return AuthConfig(text=text, providers=providers, warnings=warnings)
