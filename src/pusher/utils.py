"""
Shared helpers: identifiers, timestamps, masking, input sanitizing and the
rate-limit window arithmetic.
"""
import re
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, Optional

SEND_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
SEND_KEY_MIN_LENGTH = 32
MAX_INPUT_LENGTH = 10000


def generate_send_key() -> str:
    """Generate a URL-safe SendKey (32 chars from 24 random bytes)"""
    return secrets.token_urlsafe(24)


def generate_id() -> str:
    """Generate a 32-char hex identifier"""
    return secrets.token_hex(16)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def isoformat(value: datetime) -> str:
    """ISO-8601 with millisecond precision and a Z suffix"""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC"""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def now() -> str:
    """Current UTC time as an ISO string"""
    return isoformat(utcnow())


def is_valid_send_key(send_key: Optional[str]) -> bool:
    """SendKeys are at least 32 URL-safe base64 characters"""
    if not send_key or len(send_key) < SEND_KEY_MIN_LENGTH:
        return False
    return bool(SEND_KEY_PATTERN.match(send_key))


def mask_credential(value: str) -> str:
    """
    Mask a sensitive value for display.

    Up to 8 characters are fully masked; longer values keep the first and
    last 4 characters.
    """
    if len(value) <= 8:
        return "*" * len(value)
    return value[:4] + "*" * (len(value) - 8) + value[-4:]


def mask_credentials(credentials: Dict[str, str], sensitive_fields: Iterable[str]) -> Dict[str, str]:
    """Return a copy of credentials with every non-empty sensitive field masked"""
    masked = dict(credentials)
    for name in sensitive_fields:
        if masked.get(name):
            masked[name] = mask_credential(masked[name])
    return masked


def sanitize_input(value: Optional[str]) -> str:
    """Strip angle brackets, trim whitespace and cap the length"""
    if not value:
        return ""
    return re.sub(r"[<>]", "", value).strip()[:MAX_INPUT_LENGTH]


@dataclass
class RateLimitResult:
    """Outcome of a rate-limit check"""
    allowed: bool
    remaining: int
    reset_at: str

    def headers(self, limit: int) -> Dict[str, str]:
        return {
            "X-RateLimit-Limit": str(limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": self.reset_at,
        }


def check_rate_limit(
    count: int,
    reset_at: str,
    limit: int,
    window_seconds: int = 60,
    current: Optional[datetime] = None,
) -> RateLimitResult:
    """
    Decide whether one more request fits in the account's window.

    An expired window restarts at `current`; otherwise the request is
    admitted while count < limit. Pure: the caller persists the new state.
    """
    current = current or utcnow()
    window_end = parse_datetime(reset_at)

    if current >= window_end:
        return RateLimitResult(
            allowed=True,
            remaining=limit - 1,
            reset_at=isoformat(current + timedelta(seconds=window_seconds)),
        )

    if count < limit:
        return RateLimitResult(allowed=True, remaining=limit - count - 1, reset_at=reset_at)

    return RateLimitResult(allowed=False, remaining=0, reset_at=reset_at)
