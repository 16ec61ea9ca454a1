"""
Unit Tests for RequestSigner

Tests canonicalisation, signing, verification and the replay window.
"""

import base64

import pytest

from trustgate.core.config.constants import HEADER_REQUEST_ID, HEADER_REQUEST_SIGNATURE
from trustgate.core.exceptions import SignatureInvalidError
from trustgate.security.request_signer import RequestSigner, canonicalize, generate_request_id

PAYLOAD = {"model": "gpt-4o", "temperature": 0.7, "messages": [{"role": "user", "content": "hi"}]}
API_KEY = "sk-test-openai"


@pytest.fixture
def signer(settings, clock):
    return RequestSigner(settings, clock=clock)


@pytest.mark.unit
class TestCanonicalize:
    def test_keys_sorted(self):
        assert canonicalize({"b": 1, "a": 2}) == "a=2&b=1"

    def test_nested_values_serialised_with_sorted_keys(self):
        assert canonicalize({"x": {"b": 1, "a": [1, 2]}}) == 'x={"a":[1,2],"b":1}'

    def test_scalars(self):
        assert canonicalize({"flag": True, "off": False, "none": None}) == "flag=true&none=&off=false"

    def test_insertion_order_irrelevant(self):
        reordered = dict(reversed(list(PAYLOAD.items())))
        assert canonicalize(reordered) == canonicalize(PAYLOAD)


@pytest.mark.unit
class TestSignVerify:
    def test_signature_format(self, signer, clock):
        signature = signer.sign("openai", PAYLOAD, API_KEY)

        timestamp, digest = base64.b64decode(signature).decode().split(":")
        assert int(timestamp) == int(clock())
        assert len(digest) == 64

    def test_valid_signature(self, signer):
        signature = signer.sign("openai", PAYLOAD, API_KEY)
        assert signer.verify("openai", PAYLOAD, signature, API_KEY) is True

    def test_deterministic_for_fixed_timestamp(self, signer):
        assert signer.sign("openai", PAYLOAD, API_KEY, timestamp=100) == signer.sign(
            "openai", PAYLOAD, API_KEY, timestamp=100
        )

    @pytest.mark.parametrize(
        "service, payload, api_key",
        [
            ("google", PAYLOAD, API_KEY),
            ("openai", {**PAYLOAD, "temperature": 0.9}, API_KEY),
            ("openai", PAYLOAD, "sk-other"),
        ],
    )
    def test_tampering_detected(self, signer, service, payload, api_key):
        signature = signer.sign("openai", PAYLOAD, API_KEY)
        assert signer.verify(service, payload, signature, api_key) is False

    def test_expired_signature_rejected(self, signer, clock):
        signature = signer.sign("openai", PAYLOAD, API_KEY)
        clock.advance(301)

        assert signer.verify("openai", PAYLOAD, signature, API_KEY) is False

    def test_signature_at_window_edge_accepted(self, signer, clock):
        signature = signer.sign("openai", PAYLOAD, API_KEY)
        clock.advance(300)

        assert signer.verify("openai", PAYLOAD, signature, API_KEY) is True

    def test_future_signature_rejected(self, signer, clock):
        signature = signer.sign("openai", PAYLOAD, API_KEY, timestamp=int(clock()) + 301)
        assert signer.verify("openai", PAYLOAD, signature, API_KEY) is False

    @pytest.mark.parametrize(
        "signature",
        ["", "not base64!", base64.b64encode(b"no-colon").decode(), base64.b64encode(b"abc:def").decode()],
    )
    def test_garbage_rejected(self, signer, signature):
        assert signer.verify("openai", PAYLOAD, signature, API_KEY) is False

    def test_require_valid_raises(self, signer):
        with pytest.raises(SignatureInvalidError):
            signer.require_valid("openai", PAYLOAD, "garbage", API_KEY)


@pytest.mark.unit
class TestRequestMetadata:
    def test_request_id_shape(self):
        request_id = generate_request_id()
        assert len(request_id) == 32
        int(request_id, 16)

    def test_request_ids_unique(self):
        assert generate_request_id() != generate_request_id()

    def test_metadata(self, signer, clock):
        metadata = signer.create_request_metadata("openai")

        assert metadata["service"] == "openai"
        assert metadata["timestamp"] == int(clock())
        assert len(metadata["request_id"]) == 32

    def test_signature_headers_verify(self, signer):
        headers = signer.signature_headers("openai", PAYLOAD, API_KEY)

        assert len(headers[HEADER_REQUEST_ID]) == 32
        assert signer.verify("openai", PAYLOAD, headers[HEADER_REQUEST_SIGNATURE], API_KEY)
