"""Exception hierarchy shared by the resolver, the orchestrator and the CLI."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from churn.scaffolder.generator import ScaffoldStage


class ChurnError(Exception):
    """Base class for every error the CLI reports before exiting non-zero."""


class ConfigurationError(ChurnError):
    """Raised when user input cannot be turned into a consistent Configuration."""


class UnknownFlagError(ConfigurationError):
    """Raised when argv contains a flag that is not in the flag table."""

    def __init__(self, flag: str) -> None:
        self.flag = flag
        super().__init__(f"Unknown flag: {flag}")


class ScaffoldError(ChurnError):
    """Raised when the scaffold cannot continue (directory or core file writes)."""

    def __init__(self, stage: ScaffoldStage, message: str) -> None:
        self.stage = stage
        super().__init__(f"{stage.label}: {message}")
