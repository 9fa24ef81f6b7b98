"""Exceptions raised by the ECS collection pipeline."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from ecs_collectors.services import Service


class ECSExporterError(Exception):
    """Base exception for the exporter."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigError(ECSExporterError):
    """Raised when the configuration file is unreadable or malformed."""


class AuthError(ECSExporterError):
    """Raised when a client or its credentials cannot be obtained for a tenant."""

    def __init__(self, island: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.island = island
        super().__init__(f"auth failed for island '{island}': {message}", details)


class UpstreamError(ECSExporterError):
    """Raised when a remote ECS call fails."""

    def __init__(self, operation: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.operation = operation
        super().__init__(f"{operation} failed: {message}", details)


class UpstreamListError(UpstreamError):
    pass


class UpstreamDescribeError(UpstreamError):
    pass


class PartialBatchError(UpstreamDescribeError):
    """One or more concurrent describe batches failed.

    ``services`` holds what was merged before the failure was seen. It is
    incomplete and must not be published.
    """

    def __init__(
        self,
        operation: str,
        message: str,
        services: "List[Service]",
        failed_batches: int,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.services = services
        self.failed_batches = failed_batches
        super().__init__(operation, message, details)
