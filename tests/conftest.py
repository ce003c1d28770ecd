"""Pytest configuration and shared fixtures for Cloud SQL Scheduler tests."""

from __future__ import annotations

import json
import logging
import os
from typing import Any

import pytest

from cloudsql_scheduler.config import SchedulerConfig


class RecordingSqlAdmin:
    """Admin client double that records patches and can fail on chosen instances."""

    def __init__(self, fail_on: set[str] | None = None):
        self.calls: list[tuple[str, str, str]] = []
        self.fail_on = fail_on or set()

    def patch_activation_policy(self, project: str, instance: str, policy: str) -> dict[str, Any]:
        self.calls.append((project, instance, policy))
        if instance in self.fail_on:
            raise RuntimeError(f"patch rejected for {instance}")
        return {"kind": "sql#operation", "name": f"op-{instance}", "status": "PENDING"}


@pytest.fixture
def sample_config() -> SchedulerConfig:
    """Sample configuration for testing."""
    return SchedulerConfig(
        environment="dev",
        log_level="DEBUG",
        structured_logging=False,
        strict_decode=True,
        dry_run=False,
    )


@pytest.fixture
def admin_client() -> RecordingSqlAdmin:
    return RecordingSqlAdmin()


@pytest.fixture
def client_factory(admin_client):
    """Factory handing out the shared recording client, counting constructions."""

    def factory(config):
        factory.built += 1
        return admin_client

    factory.built = 0
    return factory


def make_payload(**fields: str) -> bytes:
    return json.dumps(fields).encode("utf-8")


@pytest.fixture(autouse=True)
def clean_environment():
    """Clean up environment variables after each test."""
    yield
    test_env_vars = [
        "DRY_RUN",
        "STRICT_DECODE",
        "STRUCTURED_LOGGING",
        "LOG_LEVEL",
        "GOOGLE_CLOUD_PROJECT",
        "GCP_PROJECT",
    ]
    for var in test_env_vars:
        if var in os.environ:
            del os.environ[var]


@pytest.fixture(autouse=True)
def reset_package_logging():
    """Drop handlers installed by configure_logging so they don't outlive captured streams."""
    yield
    logger = logging.getLogger("cloudsql_scheduler")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
