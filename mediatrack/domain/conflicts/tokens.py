"""
Unsubscribe Token Codec

Stateless, signed, expiring tokens that opt a single task out of conflict alerts.
Format: base64url("<task_id>:<expires_at_ms>:<hmac_sha256_hex>") without padding.
The HMAC covers exactly "<task_id>:<expires_at_ms>". Nothing is stored server side:
a token stays valid until it expires.
"""

import base64
import binascii
import hashlib
import hmac
import logging
import time
from dataclasses import dataclass
from typing import Optional

from ...config import UNSUBSCRIBE_SECRET, UNSUBSCRIBE_TOKEN_TTL_DAYS
from ...shared.exceptions import TokenExpired, TokenInvalid

logger = logging.getLogger(__name__)

DEFAULT_TTL_MS = UNSUBSCRIBE_TOKEN_TTL_DAYS * 24 * 60 * 60 * 1000

REASON_INVALID = "invalid"
REASON_EXPIRED = "expired"


@dataclass(frozen=True)
class TokenVerification:
    valid: bool
    task_id: Optional[str] = None
    reason: Optional[str] = None


def _now_ms() -> int:
    return int(time.time() * 1000)


def _sign(secret: str, payload: str) -> str:
    return hmac.new(secret.encode(), payload.encode(), hashlib.sha256).hexdigest()


def _b64encode(raw: str) -> str:
    return base64.urlsafe_b64encode(raw.encode()).decode().rstrip("=")


def _b64decode(token: str) -> str:
    padded = token + "=" * (-len(token) % 4)
    raw = base64.urlsafe_b64decode(padded.encode()).decode("utf-8")
    # Reject non-canonical encodings (non-zero trailing bits, stray characters)
    if _b64encode(raw) != token:
        raise ValueError("Non-canonical base64url")
    return raw


class UnsubscribeTokenCodec:
    """Issue and verify unsubscribe tokens with a shared secret"""

    def __init__(self, secret: Optional[str] = UNSUBSCRIBE_SECRET):
        self.secret = secret

    def issue(self, task_id: str, ttl_ms: int = DEFAULT_TTL_MS, now_ms: Optional[int] = None) -> Optional[str]:
        """Return a token valid for ``ttl_ms``, or None when no secret is configured"""
        if not self.secret:
            return None
        now_ms = _now_ms() if now_ms is None else now_ms
        payload = f"{task_id}:{now_ms + ttl_ms}"
        return _b64encode(f"{payload}:{_sign(self.secret, payload)}")

    def decode(self, token: str, now_ms: Optional[int] = None) -> str:
        """Return the task id or raise TokenInvalid / TokenExpired"""
        if not self.secret or not token:
            raise TokenInvalid("Missing secret or token")

        try:
            raw = _b64decode(token)
        except (binascii.Error, UnicodeDecodeError, ValueError) as e:
            raise TokenInvalid("Token is not valid base64url") from e

        # <task_id>:<expires_at_ms>:<signature>, split from the right so task ids may contain colons
        rest, sep2, signature = raw.rpartition(":")
        task_id, sep, expires_str = rest.rpartition(":")
        if not sep or not sep2 or not task_id or not signature:
            raise TokenInvalid("Malformed token payload")

        expected = _sign(self.secret, f"{task_id}:{expires_str}")
        if not hmac.compare_digest(expected.encode(), signature.encode()):
            raise TokenInvalid("Signature mismatch")

        try:
            expires_at_ms = int(expires_str)
        except ValueError as e:
            raise TokenInvalid("Malformed expiry") from e

        now_ms = _now_ms() if now_ms is None else now_ms
        if not expires_at_ms or now_ms > expires_at_ms:
            raise TokenExpired(f"Token for task {task_id} expired")

        return task_id

    def verify(self, token: str, now_ms: Optional[int] = None) -> TokenVerification:
        """Structured verification result; never raises"""
        try:
            task_id = self.decode(token, now_ms=now_ms)
        except TokenExpired as e:
            logger.info(f"Unsubscribe token rejected: {e}")
            return TokenVerification(valid=False, reason=REASON_EXPIRED)
        except TokenInvalid as e:
            logger.warning(f"⚠️ Unsubscribe token rejected: {e}")
            return TokenVerification(valid=False, reason=REASON_INVALID)
        return TokenVerification(valid=True, task_id=task_id)
