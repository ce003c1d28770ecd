"""Cloud SQL Admin API access.

The dispatcher only needs one capability, patching an instance's activation
policy, so the Google discovery client is wrapped behind a small protocol that
tests can substitute.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Protocol

import google.auth
import google_auth_httplib2
import httplib2
from google.auth.exceptions import GoogleAuthError
from googleapiclient.discovery import build
from googleapiclient.errors import Error as GoogleApiClientError

from .config import SchedulerConfig
from .exceptions import ClientConstructionError

logger = logging.getLogger(__name__)

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"
SQLADMIN_SERVICE = "sqladmin"


class SqlAdminClient(Protocol):
    def patch_activation_policy(self, project: str, instance: str, policy: str) -> dict[str, Any]:
        ...


ClientFactory = Callable[[SchedulerConfig], SqlAdminClient]


def activation_policy_body(policy: str) -> dict[str, Any]:
    """Request body for ``instances.patch`` that only touches the activation policy."""
    return {"settings": {"activationPolicy": policy}}


class GoogleSqlAdminClient:
    """SqlAdminClient backed by a ``googleapiclient`` discovery resource."""

    def __init__(self, service: Any):
        self._service = service

    def patch_activation_policy(self, project: str, instance: str, policy: str) -> dict[str, Any]:
        request = self._service.instances().patch(
            project=project,
            instance=instance,
            body=activation_policy_body(policy),
        )
        return request.execute()


class DryRunSqlAdminClient:
    """Logs the patch it would issue and returns a synthetic operation."""

    def patch_activation_policy(self, project: str, instance: str, policy: str) -> dict[str, Any]:
        logger.info(
            "DRY RUN: patch %s/%s activationPolicy=%s",
            project,
            instance,
            policy,
            extra={"project": project, "instance": instance, "activation_policy": policy},
        )
        return {
            "kind": "sql#operation",
            "operationType": "UPDATE",
            "status": "DRY_RUN",
            "targetProject": project,
            "targetId": instance,
        }


def build_service(config: SchedulerConfig, credentials: Any) -> Any:
    """Build the discovery resource, honouring the configured HTTP timeout."""
    if config.request_timeout_seconds is not None:
        http = google_auth_httplib2.AuthorizedHttp(
            credentials, http=httplib2.Http(timeout=config.request_timeout_seconds)
        )
        return build(SQLADMIN_SERVICE, config.api_version, http=http, cache_discovery=False)
    return build(
        SQLADMIN_SERVICE, config.api_version, credentials=credentials, cache_discovery=False
    )


def default_client_factory(config: SchedulerConfig) -> SqlAdminClient:
    """Create an Admin API client from Application Default Credentials.

    Raises:
        ClientConstructionError: If credentials cannot be found or the
            service cannot be built
    """
    if config.dry_run:
        return DryRunSqlAdminClient()

    try:
        credentials, _ = google.auth.default(scopes=[CLOUD_PLATFORM_SCOPE])
    except GoogleAuthError as e:
        raise ClientConstructionError(f"Could not load default credentials: {e}") from e

    try:
        service = build_service(config, credentials)
    except (GoogleApiClientError, httplib2.HttpLib2Error, OSError) as e:
        raise ClientConstructionError(
            f"Could not build {SQLADMIN_SERVICE} {config.api_version} service: {e}",
            details={"api_version": config.api_version},
        ) from e

    return GoogleSqlAdminClient(service)
