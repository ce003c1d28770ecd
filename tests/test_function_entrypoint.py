import base64
import logging
import importlib.util
from pathlib import Path
from types import SimpleNamespace

import pytest

from cloudsql_scheduler.config import SchedulerConfig
from cloudsql_scheduler.exceptions import InstancePatchError, InvalidActionError, PayloadDecodeError
from cloudsql_scheduler.handler import handle_background_event, handle_cloud_event

from conftest import RecordingSqlAdmin


# Load the deployed function module directly from file
ROOT = Path(__file__).resolve().parent.parent
main_path = ROOT / "functions" / "scheduler" / "main.py"
spec = importlib.util.spec_from_file_location("scheduler_main", str(main_path))
scheduler_main = importlib.util.module_from_spec(spec)
spec.loader.exec_module(scheduler_main)  # type: ignore


def _encode(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def _cloud_event(raw: bytes):
    return SimpleNamespace(data={"message": {"data": _encode(raw)}, "subscription": "s"})


def test_cloud_event_dispatches(sample_config):
    admin = RecordingSqlAdmin()

    result = handle_cloud_event(
        _cloud_event(b'{"Instance":"db1,db2","Project":"proj1","Action":"stop"}'),
        config=sample_config,
        client_factory=lambda cfg: admin,
    )

    assert result["status"] == "success"
    assert admin.calls == [("proj1", "db1", "NEVER"), ("proj1", "db2", "NEVER")]


def test_background_event_dispatches(sample_config):
    admin = RecordingSqlAdmin()
    event = {"data": _encode(b'{"Instance":"db1","Project":"p","Action":"start"}')}

    result = handle_background_event(event, None, config=sample_config, client_factory=lambda cfg: admin)

    assert result["instances"] == ["db1"]
    assert admin.calls == [("p", "db1", "ALWAYS")]


def test_errors_are_raised_to_the_runtime(sample_config):
    admin = RecordingSqlAdmin(fail_on={"db2"})

    with pytest.raises(InstancePatchError):
        handle_cloud_event(
            _cloud_event(b'{"Instance":"db1,db2,db3","Project":"p","Action":"stop"}'),
            config=sample_config,
            client_factory=lambda cfg: admin,
        )

    assert [c[1] for c in admin.calls] == ["db1", "db2"]


def test_deployed_function_uses_environment_config(monkeypatch):
    monkeypatch.setenv("DRY_RUN", "true")
    monkeypatch.setenv("STRUCTURED_LOGGING", "true")

    result = scheduler_main.process_pubsub(
        _cloud_event(b'{"Instance":"db1","Project":"p","Action":"start"}')
    )

    assert result == {
        "status": "success",
        "project": "p",
        "activation_policy": "ALWAYS",
        "instances": ["db1"],
        "dry_run": True,
    }


def test_deployed_function_rejects_invalid_action(monkeypatch):
    monkeypatch.setenv("DRY_RUN", "true")

    with pytest.raises(InvalidActionError):
        scheduler_main.process_pubsub_background(
            {"data": _encode(b'{"Instance":"db1","Project":"p","Action":"reboot"}')}, None
        )


def test_empty_message_fails_decoding_in_strict_mode():
    config = SchedulerConfig(structured_logging=False)

    with pytest.raises(ValueError):
        handle_background_event({}, None, config=config, client_factory=lambda cfg: RecordingSqlAdmin())


def test_malformed_envelope_is_logged_before_raising(sample_config, caplog):
    admin = RecordingSqlAdmin()

    with caplog.at_level(logging.ERROR, logger="cloudsql_scheduler"):
        with pytest.raises(PayloadDecodeError):
            handle_background_event(
                {"data": "not base64!!"}, None, config=sample_config, client_factory=lambda cfg: admin
            )

    assert any("Invocation failed" in r.getMessage() for r in caplog.records)
    assert admin.calls == []
