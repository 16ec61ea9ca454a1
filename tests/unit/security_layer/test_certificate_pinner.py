"""
Unit Tests for CertificatePinner

Tests fingerprint normalisation, allow-list checks and TLS hardening.
"""

import hashlib
import ssl
from unittest.mock import MagicMock

import httpx
import pytest

from tests.test_fixtures.settings_factory import make_settings
from trustgate.core.exceptions import CertificateMismatchError
from trustgate.security.certificate_pinner import (
    CertificatePinner,
    fingerprint_of,
    normalize_fingerprint,
)

CERT = b"0\x82\x01\nfake-der-certificate"
CERT_FINGERPRINT = hashlib.sha256(CERT).hexdigest()


def colon_notation(hex_digest: str) -> str:
    return ":".join(hex_digest[i:i + 2] for i in range(0, len(hex_digest), 2)).upper()


@pytest.fixture
def pinner(settings):
    return CertificatePinner(settings, pins={"api.openai.com": [colon_notation(CERT_FINGERPRINT)], "chat-ai.academiccloud.de": []})


@pytest.mark.unit
class TestFingerprints:
    def test_normalize(self):
        assert normalize_fingerprint("AB:cd:01") == "abcd01"

    def test_fingerprint_of(self):
        assert fingerprint_of(CERT) == CERT_FINGERPRINT

    def test_pins_normalised_and_host_case_insensitive(self, pinner):
        assert pinner.pins_for("API.OPENAI.COM") == [CERT_FINGERPRINT]


@pytest.mark.unit
class TestVerifyCertificate:
    def test_matching_certificate(self, pinner):
        assert pinner.verify_certificate("api.openai.com", CERT) is True

    def test_mismatch_raises(self, pinner):
        with pytest.raises(CertificateMismatchError) as exc_info:
            pinner.verify_certificate("api.openai.com", b"attacker-cert")

        assert "man-in-the-middle" in exc_info.value.message
        assert exc_info.value.details["presented"] == fingerprint_of(b"attacker-cert")

    def test_missing_certificate_for_pinned_host(self, pinner):
        with pytest.raises(CertificateMismatchError) as exc_info:
            pinner.verify_certificate("api.openai.com", None)

        assert "no certificate info available" in exc_info.value.message

    def test_host_with_empty_list_is_not_pinned(self, pinner):
        assert pinner.is_pinned("chat-ai.academiccloud.de") is False
        assert pinner.verify_certificate("chat-ai.academiccloud.de", b"anything") is True

    def test_unknown_host_is_not_pinned(self, pinner):
        assert pinner.verify_certificate("example.org", None) is True

    def test_pins_from_settings(self):
        settings = make_settings(CERTIFICATE_PINS={"api.openai.com": [CERT_FINGERPRINT]})

        assert CertificatePinner(settings).is_pinned("api.openai.com") is True


@pytest.mark.unit
class TestTransport:
    def test_configure_transport_hardens_context(self, pinner):
        ctx = pinner.configure_transport("api.openai.com")

        assert ctx.check_hostname is True
        assert ctx.verify_mode == ssl.CERT_REQUIRED
        assert ctx.minimum_version >= ssl.TLSVersion.TLSv1_2

    def test_tls13_minimum(self):
        pinner = CertificatePinner(make_settings(TLS_MINIMUM_VERSION="TLSv1.3"))

        assert pinner.configure_transport("api.openai.com").minimum_version == ssl.TLSVersion.TLSv1_3

    async def test_build_client(self, pinner):
        async with pinner.build_client("api.openai.com", timeout=12.0) as client:
            assert isinstance(client, httpx.AsyncClient)
            assert client.timeout.read == 12.0

    def test_peer_certificate_from_network_stream(self):
        ssl_object = MagicMock()
        ssl_object.getpeercert.return_value = CERT
        stream = MagicMock()
        stream.get_extra_info.return_value = ssl_object
        response = httpx.Response(200, extensions={"network_stream": stream})

        assert CertificatePinner.peer_certificate(response) == CERT
        stream.get_extra_info.assert_called_once_with("ssl_object")
        ssl_object.getpeercert.assert_called_once_with(binary_form=True)

    def test_peer_certificate_without_tls(self):
        assert CertificatePinner.peer_certificate(httpx.Response(200)) is None

    def test_current_fingerprint_network_error(self, pinner, monkeypatch):
        def refuse(*args, **kwargs):
            raise OSError("connection refused")

        monkeypatch.setattr("trustgate.security.certificate_pinner.socket.create_connection", refuse)

        assert pinner.current_fingerprint("api.openai.com") is None
