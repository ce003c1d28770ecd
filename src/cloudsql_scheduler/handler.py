"""Cloud Functions entry point logic.

Errors are logged and re-raised so the Functions runtime records the
invocation as failed.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from .config import SchedulerConfig
from .dispatcher import ActionDispatcher
from .exceptions import SchedulerError
from .logging_setup import configure_logging
from .models import DispatchResult
from .pubsub import decode_pubsub_data
from .sqladmin import ClientFactory

logger = logging.getLogger(__name__)


def _dispatch(
    read_payload: Callable[[], bytes],
    config: SchedulerConfig | None,
    client_factory: ClientFactory | None,
) -> DispatchResult:
    config = config or SchedulerConfig.from_env()
    configure_logging(config)
    dispatcher = ActionDispatcher(config, client_factory=client_factory)

    try:
        return dispatcher.handle(read_payload())
    except SchedulerError as e:
        logger.error("Invocation failed: %s", e, extra={"details": e.details})
        raise


def handle_payload(
    payload: bytes,
    config: SchedulerConfig | None = None,
    client_factory: ClientFactory | None = None,
) -> DispatchResult:
    """Run the dispatcher on raw message bytes."""
    return _dispatch(lambda: payload, config, client_factory)


def handle_cloud_event(
    cloud_event: Any,
    config: SchedulerConfig | None = None,
    client_factory: ClientFactory | None = None,
) -> dict[str, Any]:
    """Handle a Pub/Sub CloudEvent (``cloud_event.data["message"]["data"]``)."""
    return _dispatch(
        lambda: decode_pubsub_data(cloud_event.data), config, client_factory
    ).to_dict()


def handle_background_event(
    event: Mapping[str, Any],
    context: Any = None,
    *,
    config: SchedulerConfig | None = None,
    client_factory: ClientFactory | None = None,
) -> dict[str, Any]:
    """Handle a legacy background-function Pub/Sub event (``event["data"]``)."""
    return _dispatch(lambda: decode_pubsub_data(event), config, client_factory).to_dict()
