"""Custom exceptions for Cloud SQL Scheduler.

Defines the exception hierarchy raised while dispatching start/stop requests.
"""

from __future__ import annotations

from typing import Any


class SchedulerError(Exception):
    """Base exception for all scheduler errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.error_code = error_code

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message


class PayloadDecodeError(SchedulerError, ValueError):
    """Raised when the event payload cannot be decoded into a request."""

    def __init__(self, message: str, payload: bytes | None = None, **kwargs):
        kwargs.setdefault("error_code", "INVALID_PAYLOAD")
        super().__init__(message, **kwargs)
        if payload is not None:
            self.details["payload_size"] = len(payload)


class InvalidActionError(SchedulerError, ValueError):
    """Raised when the requested action is neither start nor stop."""

    def __init__(self, message: str, action: str, **kwargs):
        kwargs.setdefault("error_code", "INVALID_ACTION")
        super().__init__(message, **kwargs)
        self.action = action
        self.details["action"] = action


class ClientConstructionError(SchedulerError):
    """Raised when credentials or the Admin API service cannot be set up."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("error_code", "CLIENT_UNAVAILABLE")
        super().__init__(message, **kwargs)


class InstancePatchError(SchedulerError):
    """Raised when patching one instance fails.

    Instances listed after the failing one are never attempted; ``succeeded``
    holds the ones patched before the failure, in order.
    """

    def __init__(
        self,
        message: str,
        project: str,
        instance: str,
        succeeded: list[str] | None = None,
        **kwargs,
    ):
        kwargs.setdefault("error_code", "PATCH_FAILED")
        super().__init__(message, **kwargs)
        self.project = project
        self.instance = instance
        self.succeeded = list(succeeded or [])
        self.details.update(
            {
                "project": project,
                "instance": instance,
                "succeeded": self.succeeded,
            }
        )


class ConfigurationError(SchedulerError):
    """Raised when configuration is invalid."""

    def __init__(self, message: str, config_key: str | None = None, **kwargs):
        kwargs.setdefault("error_code", "INVALID_CONFIG")
        super().__init__(message, **kwargs)
        self.config_key = config_key
        if config_key:
            self.details["config_key"] = config_key
