"""
Certificate Pinner

Transport hardening for the outbound call to a remote AI service.

Two layers:
1. Baseline TLS, always on: certificate chain and hostname verification,
   no protocol below TLS_MINIMUM_VERSION (TLS 1.2 by default).
2. Pinning, opt-in per host: the SHA-256 fingerprint of the presented leaf
   certificate must be on the host's allow-list in CERTIFICATE_PINS.

A host that is absent from CERTIFICATE_PINS, or listed with no fingerprints,
relies on layer 1 alone.

Fingerprints are accepted in any common notation ("AB:CD:..." or "abcd...")
and compared as lowercase hex without separators.
"""

import hashlib
import hmac
import socket
import ssl

import httpx

from trustgate.core.config.constants import Stage
from trustgate.core.config.settings import Settings, get_settings
from trustgate.core.exceptions import CertificateMismatchError
from trustgate.core.logging.logger import get_logger

logger = get_logger(__name__)

_TLS_VERSIONS = {
    "TLSv1.2": ssl.TLSVersion.TLSv1_2,
    "TLSv1.3": ssl.TLSVersion.TLSv1_3,
}


def normalize_fingerprint(fingerprint: str) -> str:
    return "".join(ch for ch in fingerprint.lower() if ch in "0123456789abcdef")


def fingerprint_of(der_certificate: bytes) -> str:
    """SHA-256 fingerprint of a DER certificate, lowercase hex."""
    return hashlib.sha256(der_certificate).hexdigest()


class CertificatePinner:
    """
    Usage:
        pinner = CertificatePinner()
        async with pinner.build_client("api.openai.com", timeout=30.0) as client:
            async with client.stream("POST", url, json=payload) as response:
                pinner.verify_certificate("api.openai.com", pinner.peer_certificate(response))
    """

    def __init__(self, settings: Settings | None = None, pins: dict[str, list[str]] | None = None):
        self.settings = settings or get_settings()
        pinning = self.settings.pinning
        source = pins if pins is not None else pinning.CERTIFICATE_PINS
        self._pins = {
            host.lower(): [normalize_fingerprint(fp) for fp in fingerprints if fp]
            for host, fingerprints in source.items()
        }
        self._minimum_version = _TLS_VERSIONS[pinning.TLS_MINIMUM_VERSION]

    def pins_for(self, host: str) -> list[str]:
        return list(self._pins.get(host.lower(), []))

    def is_pinned(self, host: str) -> bool:
        return bool(self.pins_for(host))

    def configure_transport(self, host: str, context: ssl.SSLContext | None = None) -> ssl.SSLContext:
        """
        Harden a TLS context for connections to host.

        STAGE-5.1: Transport hardening
        """
        ctx = context or ssl.create_default_context()
        ctx.check_hostname = True
        ctx.verify_mode = ssl.CERT_REQUIRED
        if ctx.minimum_version < self._minimum_version:
            ctx.minimum_version = self._minimum_version

        logger.debug(
            "Transport configured",
            stage=Stage.TRANSPORT_PINNING.value,
            host=host,
            minimum_version=ctx.minimum_version.name,
            pinned=self.is_pinned(host),
        )
        return ctx

    def build_client(self, host: str, timeout: float) -> httpx.AsyncClient:
        """An AsyncClient whose TLS context was hardened for host."""
        return httpx.AsyncClient(verify=self.configure_transport(host), timeout=timeout)

    @staticmethod
    def peer_certificate(response: httpx.Response) -> bytes | None:
        """
        DER leaf certificate of the live connection behind response.

        Must be called while the response stream is still open. Returns None
        when the transport exposes no TLS object (plain HTTP, mock transports).
        """
        stream = response.extensions.get("network_stream")
        if stream is None:
            return None
        ssl_object = stream.get_extra_info("ssl_object")
        if ssl_object is None:
            return None
        return ssl_object.getpeercert(binary_form=True)

    def verify_certificate(self, host: str, der_certificate: bytes | None) -> bool:
        """
        Check the presented leaf certificate against host's allow-list.

        STAGE-5.2: Certificate pinning

        Raises:
            CertificateMismatchError: Pins configured and the certificate is
                missing or not on the list
        """
        pins = self.pins_for(host)
        if not pins:
            return True

        if not der_certificate:
            logger.error("No certificate available for pinned host", stage=Stage.TRANSPORT_PINNING.value, host=host)
            raise CertificateMismatchError(
                f"Certificate verification failed: no certificate info available for {host}",
                details={"host": host},
            )

        presented = fingerprint_of(der_certificate)
        for pin in pins:
            if hmac.compare_digest(pin, presented):
                return True

        logger.error(
            "Certificate fingerprint mismatch",
            stage=Stage.TRANSPORT_PINNING.value,
            host=host,
            presented=presented,
        )
        raise CertificateMismatchError(
            f"Certificate pinning failed for {host}: fingerprint mismatch. "
            "This may indicate a man-in-the-middle attack.",
            details={"host": host, "expected": pins, "presented": presented},
        )

    def current_fingerprint(self, host: str, port: int = 443, timeout: float = 30.0) -> str | None:
        """
        Fetch the live leaf fingerprint of host, for rotating the allow-list.

        Returns None on any network or TLS error.
        """
        ctx = self.configure_transport(host)
        try:
            with socket.create_connection((host, port), timeout=timeout) as sock:
                with ctx.wrap_socket(sock, server_hostname=host) as tls:
                    der = tls.getpeercert(binary_form=True)
        except OSError as e:
            logger.warning("Fingerprint fetch failed", host=host, port=port, error=str(e))
            return None

        return fingerprint_of(der) if der else None
