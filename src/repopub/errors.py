"""Exception taxonomy for the publishing core.

Every error carries a stable ``code`` that the service layer copies into
:class:`~repopub.services.result.ServiceError`. Errors are never retried
by the core; they abort the publish after cleanup has run.
"""

from __future__ import annotations

from typing import Any


class PublishError(Exception):
    """Base class for all publishing failures."""

    code = "PUBLISH_FAILED"

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail: dict[str, Any] = detail


class ConfigurationError(PublishError):
    """Invalid repository config or missing descriptor, detected before execution."""

    code = "CONFIGURATION_ERROR"


class LayoutResolutionError(PublishError):
    """No layout is registered under the requested name."""

    code = "LAYOUT_NOT_FOUND"


class DeployExecutionError(PublishError):
    """The install engine failed while placing files."""

    code = "DEPLOY_FAILED"


class MisuseError(PublishError):
    """A deploy operation was used out of order (e.g. executed twice)."""

    code = "MISUSE"
