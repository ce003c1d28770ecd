"""Action dispatcher: turns one start/stop request into Admin API patches.

Flow per invocation:

1. decode the payload into a ScheduleRequest
2. map ``action`` to an activation policy (start -> ALWAYS, stop -> NEVER)
3. split ``instance`` on commas
4. patch each instance in order, stopping at the first failure
"""

from __future__ import annotations

import logging

from .config import SchedulerConfig
from .exceptions import InstancePatchError, PayloadDecodeError
from .models import DispatchResult, ScheduleRequest, decode_request, policy_for_action
from .sqladmin import ClientFactory, SqlAdminClient, default_client_factory

logger = logging.getLogger(__name__)


class ActionDispatcher:
    """Applies start/stop requests to Cloud SQL instances.

    The Admin API client is created per invocation through ``client_factory``
    so credentials are only looked up once a request has been validated.
    """

    def __init__(
        self,
        config: SchedulerConfig | None = None,
        client_factory: ClientFactory | None = None,
    ):
        self.config = config or SchedulerConfig()
        self.client_factory = client_factory or default_client_factory

    def decode(self, payload: bytes) -> ScheduleRequest:
        """Decode the payload, honouring ``strict_decode``.

        In lenient mode a bad payload is logged and replaced by an empty
        request, which then fails action validation.
        """
        try:
            return decode_request(payload)
        except PayloadDecodeError as e:
            if self.config.strict_decode:
                raise
            logger.warning("Ignoring undecodable payload: %s", e)
            return ScheduleRequest()

    def handle(self, payload: bytes) -> DispatchResult:
        """Process one raw event payload.

        Raises:
            PayloadDecodeError: Payload is not a valid request (strict mode)
            InvalidActionError: Action is not start or stop
            ClientConstructionError: The Admin API client could not be built
            InstancePatchError: A patch call failed; later instances were skipped
        """
        request = self.decode(payload)
        logger.info(
            "Request received for Cloud SQL instance(s) %s action: %s, project: %s",
            request.instance,
            request.action,
            request.project,
            extra={"action": request.action, "project": request.project},
        )
        return self.dispatch(request)

    def dispatch(self, request: ScheduleRequest) -> DispatchResult:
        """Apply an already decoded request."""
        policy = policy_for_action(request.action)
        project = request.project or self.config.default_project or ""
        instances = request.instance_names()

        client = self.client_factory(self.config)
        result = DispatchResult(project=project, policy=policy, dry_run=self.config.dry_run)

        for instance in instances:
            response = self._patch(client, project, instance, policy.value, result.instances)
            logger.info(
                "Patched %s/%s activationPolicy=%s: %s",
                project,
                instance,
                policy.value,
                response,
                extra={"instance": instance, "activation_policy": policy.value},
            )
            result.responses.append((instance, response))

        return result

    @staticmethod
    def _patch(
        client: SqlAdminClient,
        project: str,
        instance: str,
        policy: str,
        succeeded: list[str],
    ) -> dict:
        try:
            return client.patch_activation_policy(project, instance, policy)
        except Exception as e:
            raise InstancePatchError(
                f"Failed to set activationPolicy={policy} on {project}/{instance}: {e}",
                project=project,
                instance=instance,
                succeeded=succeeded,
            ) from e
