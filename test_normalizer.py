#!/usr/bin/env python3
"""正規化のテスト"""
import pytest

from ceph_s3.errors import MalformedPayloadError
from ceph_s3.models.upload import BytesPayload, PartialRequest, TextPayload, UploadRequest
from ceph_s3.core.normalizer import RequestNormalizer


@pytest.fixture
def normalizer():
    return RequestNormalizer()


def test_text_payloads_get_sequential_keys(normalizer):
    requests = normalizer.normalize(["a", "b", "c"], key_prefix="job1:")

    assert [r.key for r in requests] == ["job1:1", "job1:2", "job1:3"]
    assert [r.payload for r in requests] == [b"a", b"b", b"c"]


def test_single_payload_is_a_batch_of_one(normalizer):
    requests = normalizer.normalize(b"\x00\x01", {"content-type": "application/octet-stream"})

    assert requests == [
        UploadRequest(payload=b"\x00\x01", key="1", headers={"content-type": "application/octet-stream"})
    ]


def test_text_is_utf8_encoded(normalizer):
    [request] = normalizer.normalize("żółw")

    assert request.payload == "żółw".encode("utf-8")


def test_variants(normalizer):
    requests = normalizer.normalize([
        BytesPayload(b"raw"),
        TextPayload("text"),
        PartialRequest(payload="partial", key="explicit"),
        bytearray(b"array"),
    ], key_prefix="p/")

    assert [(r.key, r.payload) for r in requests] == [
        ("p/1", b"raw"),
        ("p/2", b"text"),
        ("explicit", b"partial"),
        ("p/3", b"array"),
    ]


def test_legacy_dict_shape(normalizer):
    [request] = normalizer.normalize(
        [{"buffer": "<html/>", "filename": "dump.html", "headers": {"content-type": "text/html"}}],
        {"content-type": "text/plain", "x-amz-meta-job": "7"},
    )

    assert request.key == "dump.html"
    assert request.payload == b"<html/>"
    assert request.headers == {"content-type": "text/html", "x-amz-meta-job": "7"}


def test_empty_key_gets_auto_index(normalizer):
    requests = normalizer.normalize([
        PartialRequest(payload=b"x", key=""),
        PartialRequest(payload=b"y", key="named"),
        PartialRequest(payload=b"z"),
    ], key_prefix="j:")

    assert [r.key for r in requests] == ["j:1", "named", "j:2"]


def test_default_headers_are_not_shared(normalizer):
    defaults = {"content-type": "text/plain"}

    first, second = normalizer.normalize(["a", "b"], defaults)
    first.headers["x-amz-meta-a"] = "1"

    assert second.headers == defaults
    assert defaults == {"content-type": "text/plain"}


def test_idempotent_on_well_formed_requests(normalizer):
    requests = [
        UploadRequest(payload=b"one", key="k1", headers={"content-type": "text/plain"}),
        UploadRequest(payload=b"two", key="k2", headers={}),
    ]

    normalized = normalizer.normalize(requests, {"cache-control": "no-cache"}, "ignored:")

    assert normalized == [
        UploadRequest(payload=b"one", key="k1",
                      headers={"cache-control": "no-cache", "content-type": "text/plain"}),
        UploadRequest(payload=b"two", key="k2", headers={"cache-control": "no-cache"}),
    ]
    assert normalizer.normalize(normalized) == normalized


@pytest.mark.parametrize("payloads", [
    [b"ok", {"payload": 42}],
    [PartialRequest(payload=None)],
    [object()],
    [None],
    [{"filename": "no-buffer"}],
])
def test_malformed_payload_aborts_batch(normalizer, payloads):
    with pytest.raises(MalformedPayloadError):
        normalizer.normalize(payloads)


def test_duplicate_keys_are_rejected(normalizer):
    with pytest.raises(MalformedPayloadError, match="Duplicate key"):
        normalizer.normalize([PartialRequest(payload="x", key="job:1"), "y"], key_prefix="job:")


def test_non_string_header_is_rejected(normalizer):
    with pytest.raises(MalformedPayloadError):
        normalizer.normalize([PartialRequest(payload="x", headers={"x-amz-meta-n": 1})])


@pytest.mark.parametrize("headers", [[("content-type", "text/plain")], "content-type: text/plain"])
def test_headers_must_be_a_mapping(normalizer, headers):
    with pytest.raises(MalformedPayloadError, match="mapping"):
        normalizer.normalize([{"payload": "x", "headers": headers}])

    with pytest.raises(MalformedPayloadError, match="mapping"):
        normalizer.normalize(["x"], headers)
