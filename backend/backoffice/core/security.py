from datetime import datetime, timedelta, timezone

import jwt

from backoffice.core.config import Settings, settings as default_settings


def create_access_token(sub: str, role: str = "advisor", cfg: Settings | None = None) -> str:
    cfg = cfg or default_settings
    now = datetime.now(timezone.utc)
    payload = {
        "sub": sub,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=cfg.jwt_expires_min)).timestamp()),
    }
    return jwt.encode(payload, cfg.jwt_secret, algorithm=cfg.jwt_alg)


def decode_token(token: str, cfg: Settings | None = None) -> dict:
    cfg = cfg or default_settings
    return jwt.decode(token, cfg.jwt_secret, algorithms=[cfg.jwt_alg])
