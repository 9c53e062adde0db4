"""absolute-create tool settings.

Typed settings for the scaffolder itself (registry access, port probing,
output location).  The user's project choices live in
:mod:`absolute_create.models`; these settings only control *how* the tool
runs.  All settings use Pydantic v2 models so they can be validated at
construction time and read from environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

_TRUTHY = {"1", "true", "yes"}


class ScaffoldSettings(BaseModel):
    """Global scaffolder settings.

    Instances are typically created once by the CLI entry point and passed
    to ``ProjectGenerator``.
    """

    registry_url: str = Field(default="https://registry.npmjs.org")
    registry_timeout: int = Field(
        default=10, ge=1, description="Per-request npm registry timeout in seconds"
    )
    max_port_attempts: int = Field(
        default=100, ge=1, description="How many sequential ports to probe before giving up"
    )
    port_probe_host: str = Field(default="127.0.0.1")
    output_dir: Path = Field(default=Path("."))
    latest: bool = Field(
        default=False, description="Resolve the latest published version of every dependency"
    )

    @classmethod
    def from_env(cls) -> "ScaffoldSettings":
        """Build ``ScaffoldSettings`` from environment variables.

        Recognised variables (all optional):
            ABSOLUTE_REGISTRY_URL, ABSOLUTE_REGISTRY_TIMEOUT,
            ABSOLUTE_MAX_PORT_ATTEMPTS, ABSOLUTE_OUTPUT_DIR, ABSOLUTE_LATEST.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("ABSOLUTE_REGISTRY_URL"):
            kwargs["registry_url"] = os.environ["ABSOLUTE_REGISTRY_URL"]
        if os.environ.get("ABSOLUTE_REGISTRY_TIMEOUT"):
            kwargs["registry_timeout"] = int(os.environ["ABSOLUTE_REGISTRY_TIMEOUT"])
        if os.environ.get("ABSOLUTE_MAX_PORT_ATTEMPTS"):
            kwargs["max_port_attempts"] = int(os.environ["ABSOLUTE_MAX_PORT_ATTEMPTS"])
        if os.environ.get("ABSOLUTE_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["ABSOLUTE_OUTPUT_DIR"])
        if os.environ.get("ABSOLUTE_LATEST"):
            kwargs["latest"] = os.environ["ABSOLUTE_LATEST"].strip().lower() in _TRUTHY

        return cls(**kwargs)
