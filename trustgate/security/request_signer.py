"""
Request Signer

Tamper-evident, replay-resistant signatures for outbound requests.

Signature format:
    base64(timestamp ":" hex(HMAC-SHA256(SHA256(api_key), timestamp ":" service ":" canonical)))

Canonical payload:
    keys sorted, ``key=value`` pairs joined with ``&``; dict and list values are
    serialised as JSON with sorted keys, booleans as true/false, None as empty.

Verification recomputes the HMAC, compares in constant time and rejects any
signature whose timestamp is more than SIGNATURE_MAX_AGE_SECONDS away from now
(in either direction).
"""

import base64
import binascii
import hashlib
import hmac
import secrets
import time
from collections.abc import Callable, Mapping
from typing import Any

import orjson

from trustgate.core.config.constants import (
    HEADER_REQUEST_ID,
    HEADER_REQUEST_SIGNATURE,
    REQUEST_ID_BYTES,
    Stage,
)
from trustgate.core.config.settings import Settings, get_settings
from trustgate.core.exceptions import SignatureInvalidError
from trustgate.core.logging.logger import get_logger

logger = get_logger(__name__)


def _canonical_value(value: Any) -> str:
    if isinstance(value, (dict, list, tuple)):
        return orjson.dumps(value, option=orjson.OPT_SORT_KEYS).decode()
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def canonicalize(payload: Mapping[str, Any]) -> str:
    """Deterministic string form of a payload."""
    return "&".join(f"{key}={_canonical_value(payload[key])}" for key in sorted(payload))


def _hmac_hex(timestamp: int, service: str, payload: Mapping[str, Any], api_key: str) -> str:
    signing_key = hashlib.sha256(api_key.encode("utf-8")).digest()
    message = f"{timestamp}:{service}:{canonicalize(payload)}".encode("utf-8")
    return hmac.new(signing_key, message, hashlib.sha256).hexdigest()


def generate_request_id() -> str:
    """32 hex characters from 16 random bytes."""
    return secrets.token_hex(REQUEST_ID_BYTES)


class RequestSigner:
    """
    HMAC request signer.

    Usage:
        signer = RequestSigner()
        signature = signer.sign("openai", payload, api_key)
        assert signer.verify("openai", payload, signature, api_key)
    """

    def __init__(self, settings: Settings | None = None, clock: Callable[[], float] = time.time):
        self.settings = settings or get_settings()
        self._clock = clock
        self.max_age = self.settings.signing.SIGNATURE_MAX_AGE_SECONDS

    def _now(self) -> int:
        return int(self._clock())

    def sign(
        self,
        service: str,
        payload: Mapping[str, Any],
        api_key: str,
        timestamp: int | None = None,
    ) -> str:
        ts = self._now() if timestamp is None else int(timestamp)
        signature = _hmac_hex(ts, service, payload, api_key)
        return base64.b64encode(f"{ts}:{signature}".encode("ascii")).decode("ascii")

    def verify(
        self,
        service: str,
        payload: Mapping[str, Any],
        signature: str,
        api_key: str,
        now: int | None = None,
    ) -> bool:
        """True if signature is authentic and inside the replay window."""
        try:
            decoded = base64.b64decode(signature, validate=True).decode("ascii")
            ts_text, received = decoded.split(":", 1)
            timestamp = int(ts_text)
        except (binascii.Error, ValueError):
            return False

        current = self._now() if now is None else int(now)
        if abs(current - timestamp) > self.max_age:
            logger.debug("Signature outside replay window", stage=Stage.REQUEST_SIGNING.value, service=service)
            return False

        expected = _hmac_hex(timestamp, service, payload, api_key)
        return hmac.compare_digest(expected, received)

    def require_valid(
        self,
        service: str,
        payload: Mapping[str, Any],
        signature: str,
        api_key: str,
        now: int | None = None,
    ) -> None:
        """
        Raises:
            SignatureInvalidError: If verify() is False
        """
        if not self.verify(service, payload, signature, api_key, now=now):
            logger.warning("Request signature rejected", stage=Stage.REQUEST_SIGNING.value, service=service)
            raise SignatureInvalidError(
                "Request signature is invalid or has expired.",
                details={"service": service, "max_age_seconds": self.max_age},
            )

    def create_request_metadata(self, service: str) -> dict[str, Any]:
        return {
            "request_id": generate_request_id(),
            "timestamp": self._now(),
            "service": service,
        }

    def signature_headers(
        self, service: str, payload: Mapping[str, Any], api_key: str
    ) -> dict[str, str]:
        """Headers decorating the outbound request: signature and a fresh request id."""
        metadata = self.create_request_metadata(service)
        return {
            HEADER_REQUEST_SIGNATURE: self.sign(
                service, payload, api_key, timestamp=metadata["timestamp"]
            ),
            HEADER_REQUEST_ID: metadata["request_id"],
        }
