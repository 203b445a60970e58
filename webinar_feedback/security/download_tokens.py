"""Self-contained signed download links.

A token is ``base64("<submission_id>:<issued_at_ms>:<hex hmac-sha256>")`` where the
HMAC covers ``"<submission_id>:<issued_at_ms>"``. Nothing is stored when a token is
minted; the signature doubles as the key for per-token download counting.
"""
import base64
import binascii
import hashlib
import hmac
from dataclasses import dataclass
from typing import Optional

from webinar_feedback.core.clock import epoch_millis, utcnow
from webinar_feedback.core.settings import settings
from webinar_feedback.services.errors import InvalidSignature, MalformedToken


@dataclass(frozen=True)
class DownloadClaims:
    submission_id: str
    issued_at_ms: int
    signature: str


def _sign(payload: str, secret: Optional[str] = None) -> str:
    key = (secret or settings.download_token_secret).encode("utf-8")
    return hmac.new(key, payload.encode("utf-8"), hashlib.sha256).hexdigest()


def mint_download_token(submission_id, issued_at_ms: Optional[int] = None, secret: Optional[str] = None) -> str:
    if issued_at_ms is None:
        issued_at_ms = epoch_millis(utcnow())
    payload = f"{submission_id}:{issued_at_ms}"
    raw = f"{payload}:{_sign(payload, secret)}"
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def parse_download_token(token: str, secret: Optional[str] = None) -> DownloadClaims:
    """Decode a token and verify its signature. Expiry is left to the caller."""
    try:
        # "+" arrives as a space when the link was not URL-encoded
        decoded = base64.b64decode(token.replace(" ", "+"), validate=True).decode("utf-8")
    except (binascii.Error, ValueError):
        raise MalformedToken()

    # the payload itself contains a colon, so anchor on the last one
    payload, sep, signature = decoded.rpartition(":")
    if not sep:
        raise MalformedToken()

    submission_id, _, timestamp = payload.partition(":")
    if not submission_id or not timestamp or not signature:
        raise MalformedToken("Invalid token structure")

    if not hmac.compare_digest(signature.encode("utf-8"), _sign(payload, secret).encode("utf-8")):
        raise InvalidSignature()

    try:
        issued_at_ms = int(timestamp)
    except ValueError:
        raise MalformedToken("Invalid token structure")

    return DownloadClaims(submission_id=submission_id, issued_at_ms=issued_at_ms, signature=signature)
