"""Session gate: access-code exchange for signed, expiring JWTs."""

import hmac
import logging
import secrets
import time
from datetime import datetime, timedelta, timezone

import jwt
from jwt import ExpiredSignatureError, InvalidTokenError

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"


class SessionGate:
    """
    Issues, verifies and revokes session tokens.

    Tokens are HS256 JWTs carrying ``iat``, ``exp`` and a random ``jti``.
    Verification is stateless apart from the revocation set, which is keyed
    by ``jti`` and pruned once entries would have expired anyway.
    """

    def __init__(self, access_code: str, secret: str, max_age_seconds: int):
        self._access_code = access_code.strip().lower()
        self._secret = secret
        self.max_age_seconds = max_age_seconds
        # jti -> exp (unix seconds)
        self._revoked: dict[str, float] = {}

    def issue(self, code: str) -> str | None:
        """
        Exchange an access code for a token.

        Returns:
            Token string, or None if the code is rejected
        """
        if not self._access_code:
            logger.warning("Access code not configured; rejecting login")
            return None

        if not hmac.compare_digest(
            code.strip().lower().encode("utf-8"), self._access_code.encode("utf-8")
        ):
            logger.info("Rejected invalid access code")
            return None

        now = datetime.now(timezone.utc)
        payload = {
            "jti": secrets.token_hex(16),
            "iat": now,
            "exp": now + timedelta(seconds=self.max_age_seconds),
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def _decode(self, token: str) -> dict:
        return jwt.decode(
            token,
            self._secret,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["exp", "iat", "jti"]},
        )

    def verify(self, token: str | None) -> bool:
        """Check signature, expiry and revocation."""
        if not token:
            return False

        try:
            claims = self._decode(token)
        except ExpiredSignatureError:
            logger.debug("Session token expired")
            return False
        except InvalidTokenError:
            return False

        return claims["jti"] not in self._revoked

    def revoke(self, token: str | None) -> None:
        """Invalidate a token until it would have expired."""
        if not token:
            return

        try:
            claims = self._decode(token)
        except InvalidTokenError:
            return

        self._prune()
        self._revoked[claims["jti"]] = float(claims["exp"])

    def _prune(self) -> None:
        now = time.time()
        self._revoked = {jti: exp for jti, exp in self._revoked.items() if exp > now}
