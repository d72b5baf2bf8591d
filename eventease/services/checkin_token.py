"""Signed, time-bound check-in tokens.

A token is an HS256 JWT carrying a fixed, versioned set of claims that bind
it to one registration. Verification is stateless: a valid, unexpired token
can be presented any number of times, and replay is stopped by the
attendance ledger rather than here.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
import jwt
import pytz
from jwt.utils import base64url_decode, base64url_encode
from eventease.utils.dates import as_utc

TOKEN_VERSION = 1
ALGORITHM = "HS256"
DEFAULT_TTL = timedelta(hours=24)

_CLAIM_KEYS = {"v", "rid", "eid", "uid", "iat", "exp"}


class CheckInTokenError(Exception):
    pass


class InvalidSignatureError(CheckInTokenError):
    """The token was tampered with, signed with another secret, or is malformed."""


class TokenExpiredError(CheckInTokenError):
    pass


@dataclass(frozen=True)
class CheckInClaims:
    registration_id: int
    event_id: int
    user_id: int
    # Second resolution, timezone-aware (UTC)
    issued_at: datetime

    @classmethod
    def issued_now(cls, registration_id: int, event_id: int, user_id: int) -> "CheckInClaims":
        return cls(
            registration_id=registration_id,
            event_id=event_id,
            user_id=user_id,
            issued_at=datetime.now(pytz.UTC).replace(microsecond=0),
        )


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class CheckInTokenSigner:
    def __init__(self, secret: str, ttl: timedelta = DEFAULT_TTL):
        if not secret:
            raise ValueError("A signing secret is required for check-in tokens")
        if ttl <= timedelta(0):
            raise ValueError("Check-in token TTL must be positive")
        self._secret = secret
        self.ttl = ttl

    def issue(self, claims: CheckInClaims, ttl: Optional[timedelta] = None) -> str:
        ttl = ttl if ttl is not None else self.ttl
        if ttl <= timedelta(0):
            raise ValueError("Check-in token TTL must be positive")

        issued_at = int(as_utc(claims.issued_at).timestamp())
        payload = {
            "v": TOKEN_VERSION,
            "rid": claims.registration_id,
            "eid": claims.event_id,
            "uid": claims.user_id,
            "iat": issued_at,
            "exp": issued_at + int(ttl.total_seconds()),
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def expires_at(self, claims: CheckInClaims, ttl: Optional[timedelta] = None) -> datetime:
        ttl = ttl if ttl is not None else self.ttl
        return as_utc(claims.issued_at).replace(microsecond=0) + timedelta(
            seconds=int(ttl.total_seconds())
        )

    def verify(self, token: str) -> CheckInClaims:
        if not isinstance(token, str) or not token:
            raise InvalidSignatureError("Check-in token must be a non-empty string")

        self._check_canonical(token)

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError("Check-in token has expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidSignatureError(f"Check-in token rejected: {e}") from e

        return self._claims_from_payload(payload)

    @staticmethod
    def _check_canonical(token: str):
        # base64url decoding ignores stray characters and unused trailing bits,
        # so a tampered segment can still decode to the signed bytes
        segments = token.split(".")
        if len(segments) != 3:
            raise InvalidSignatureError("Check-in token must have three segments")
        for segment in segments:
            raw = segment.encode("ascii", errors="replace")
            try:
                canonical = base64url_encode(base64url_decode(raw))
            except (ValueError, TypeError) as e:
                raise InvalidSignatureError("Check-in token is not valid base64url") from e
            if canonical != raw:
                raise InvalidSignatureError("Check-in token is not canonically encoded")

    @staticmethod
    def _claims_from_payload(payload: dict) -> CheckInClaims:
        if set(payload) != _CLAIM_KEYS:
            raise InvalidSignatureError("Check-in token carries unexpected claims")
        if payload["v"] != TOKEN_VERSION:
            raise InvalidSignatureError(f"Unsupported check-in token version {payload['v']!r}")
        if not all(_is_int(payload[key]) for key in ("rid", "eid", "uid", "iat")):
            raise InvalidSignatureError("Check-in token claims must be integers")

        return CheckInClaims(
            registration_id=payload["rid"],
            event_id=payload["eid"],
            user_id=payload["uid"],
            issued_at=datetime.fromtimestamp(payload["iat"], tz=pytz.UTC),
        )
