"""Request and result types for the start/stop dispatcher."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from .exceptions import InvalidActionError, PayloadDecodeError

INSTANCE_SEPARATOR = ","


class Action(str, Enum):
    START = "start"
    STOP = "stop"


class ActivationPolicy(str, Enum):
    """Cloud SQL ``settings.activationPolicy`` values used by the scheduler."""

    ALWAYS = "ALWAYS"
    NEVER = "NEVER"


ACTION_POLICIES: dict[Action, ActivationPolicy] = {
    Action.START: ActivationPolicy.ALWAYS,
    Action.STOP: ActivationPolicy.NEVER,
}


def policy_for_action(action: str) -> ActivationPolicy:
    """Map a request action onto the activation policy to apply.

    Raises:
        InvalidActionError: If the action is not ``start`` or ``stop``
    """
    try:
        return ACTION_POLICIES[Action(action)]
    except ValueError:
        raise InvalidActionError(
            f"No valid action provided: {action!r}", action=action
        ) from None


class ScheduleRequest(BaseModel):
    """Decoded Pub/Sub payload: which instances to start or stop."""

    model_config = ConfigDict(frozen=True, strict=True, extra="ignore")

    instance: str = ""
    project: str = ""
    action: str = ""

    def instance_names(self) -> list[str]:
        # Empty segments are kept; "a,,c" targets three instances.
        return self.instance.split(INSTANCE_SEPARATOR)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "ScheduleRequest":
        """Build a request from decoded JSON, matching keys case-insensitively.

        Publishers send ``Instance``/``Project``/``Action``; lower-case keys are
        accepted too. A null value leaves the field at its default.
        """
        normalized: dict[str, Any] = {}
        for key, value in data.items():
            name = key.lower()
            if name in cls.model_fields and value is not None:
                normalized[name] = value
        return cls(**normalized)


def _reject_constant(token: str) -> Any:
    # NaN and Infinity are not JSON
    raise ValueError(f"Invalid JSON token {token!r}")


def decode_request(payload: bytes) -> ScheduleRequest:
    """Decode raw message bytes into a ScheduleRequest.

    Raises:
        PayloadDecodeError: If the bytes are not a JSON object of string fields
    """
    try:
        data = json.loads(payload, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as e:
        raise PayloadDecodeError(f"Payload is not valid JSON: {e}", payload=payload) from e

    if not isinstance(data, dict):
        raise PayloadDecodeError(
            f"Payload must be a JSON object, got {type(data).__name__}", payload=payload
        )

    try:
        return ScheduleRequest.from_mapping(data)
    except ValidationError as e:
        raise PayloadDecodeError(f"Payload fields are invalid: {e}", payload=payload) from e


@dataclass
class DispatchResult:
    """Outcome of one successful invocation."""

    project: str
    policy: ActivationPolicy
    responses: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    dry_run: bool = False

    @property
    def instances(self) -> list[str]:
        return [name for name, _ in self.responses]

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": "success",
            "project": self.project,
            "activation_policy": self.policy.value,
            "instances": self.instances,
            "dry_run": self.dry_run,
        }
