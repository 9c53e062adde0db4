"""Error taxonomy for configuration resolution and project generation."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ValidationIssue(BaseModel):
    """A single problem found while resolving a raw configuration."""

    field: str
    value: Any = None
    message: str
    allowed: tuple[str, ...] = Field(default=())

    def __str__(self) -> str:
        text = f"{self.field}: {self.message}"
        if self.allowed:
            text += f" (allowed: {', '.join(self.allowed)})"
        return text


class ConfigurationError(Exception):
    """Raised by the resolver with every validation issue it collected."""

    def __init__(self, issues: list[ValidationIssue]) -> None:
        self.issues = list(issues)
        super().__init__("; ".join(str(issue) for issue in self.issues))


class UnsupportedCombinationError(Exception):
    """No template is registered for a reachable lookup key."""

    def __init__(self, artifact: str, key: object) -> None:
        self.artifact = artifact
        self.key = key
        super().__init__(f"Unsupported {artifact} configuration: {key}")


class NoAvailablePortError(Exception):
    """Every probed port in the allowed range is already bound."""

    def __init__(self, start: int, attempts: int) -> None:
        self.start = start
        self.attempts = attempts
        super().__init__(
            f"No available port found in range {start}-{start + attempts - 1}"
        )


class ExternalToolError(Exception):
    """A required external tool is missing or failed."""

    def __init__(self, tool: str, guidance: str) -> None:
        self.tool = tool
        self.guidance = guidance
        super().__init__(f"{tool}: {guidance}")
