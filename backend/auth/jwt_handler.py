from datetime import datetime, timedelta, timezone

import jwt

from backend.core.config import JwtSettings

BEARER_SCHEME = "Bearer"
REQUIRED_CLAIMS = ["sub", "exp"]


def create_access_token(
    subject: str,
    role: str,
    user_id: int,
    settings: JwtSettings,
    expires_minutes: int | None = None,
) -> str:
    expire_minutes = expires_minutes or settings.expires_minutes
    now = datetime.now(timezone.utc)
    payload = {
        "sub": subject,
        "role": role,
        "uid": user_id,
        "iat": now,
        "exp": now + timedelta(minutes=expire_minutes),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str, settings: JwtSettings) -> dict:
    """Verify signature and expiry; raises ``jwt.InvalidTokenError`` on any failure."""
    return jwt.decode(
        token,
        settings.secret_key,
        algorithms=[settings.algorithm],
        options={"require": REQUIRED_CLAIMS},
    )


def strip_bearer(raw: str | None) -> str | None:
    if raw is None:
        return None
    value = raw.strip()
    scheme, _, rest = value.partition(" ")
    if scheme == BEARER_SCHEME:
        value = rest.strip()
    return value or None
