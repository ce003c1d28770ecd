import base64

import pytest

from cloudsql_scheduler.exceptions import PayloadDecodeError
from cloudsql_scheduler.pubsub import decode_pubsub_data

RAW = b'{"Instance":"db1","Project":"p","Action":"start"}'
ENCODED = base64.b64encode(RAW).decode("ascii")


def test_cloud_event_shape():
    envelope = {"message": {"data": ENCODED, "messageId": "1"}, "subscription": "projects/p/subscriptions/s"}

    assert decode_pubsub_data(envelope) == RAW


def test_background_event_shape():
    assert decode_pubsub_data({"data": ENCODED, "attributes": {}}) == RAW


def test_missing_data_is_empty():
    assert decode_pubsub_data({"message": {"attributes": {"k": "v"}}}) == b""
    assert decode_pubsub_data({}) == b""
    assert decode_pubsub_data(None) == b""


def test_invalid_base64_raises():
    with pytest.raises(PayloadDecodeError, match="base64"):
        decode_pubsub_data({"data": "not base64!!"})


def test_non_ascii_data_raises():
    with pytest.raises(PayloadDecodeError):
        decode_pubsub_data({"data": "dGVzdA==é"})


def test_malformed_message_raises():
    with pytest.raises(PayloadDecodeError):
        decode_pubsub_data({"message": "oops"})
    with pytest.raises(PayloadDecodeError):
        decode_pubsub_data(["data"])
