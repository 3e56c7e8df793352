"""Error taxonomy shared by the session, resolver, executor and pipeline layers."""

from __future__ import annotations

from typing import Optional


class OrchestratorError(Exception):
    """Base class for failures the orchestrator reports to tool callers."""

    code = "orchestrator_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BrowserEnvironmentError(OrchestratorError):
    """The browser or its session could not be established."""

    code = "environment_error"


class SurfaceNotFoundError(OrchestratorError):
    """The editing surface never mounted, or a resolved surface went stale."""

    code = "surface_not_found"


class ElementNotFoundError(OrchestratorError):
    """A locator never appeared and no fallback chord was available."""

    code = "element_not_found"

    def __init__(self, locator: str, message: Optional[str] = None) -> None:
        super().__init__(message or f"Element not found: {locator}")
        self.locator = locator


class UnsupportedOperationError(OrchestratorError):
    """The requested behaviour is intentionally not automated."""

    code = "unsupported_operation"


class RemoteInteractionError(OrchestratorError):
    """Any other failure surfaced by the browser driver."""

    code = "remote_interaction_error"


class UnknownToolError(OrchestratorError):
    """No operation is published under the requested name."""

    code = "unknown_tool"
