import datetime as dt
from typing import Any, Dict, Optional, Tuple

import jwt

from webinar_feedback.core.settings import settings


def _utc_now() -> dt.datetime:
    return dt.datetime.now(tz=dt.timezone.utc)


def create_admin_session_token(subject: str = "admin", expires_minutes: Optional[int] = None) -> Tuple[str, dt.datetime]:
    minutes = expires_minutes if expires_minutes is not None else settings.admin_session_expires_minutes
    expires = _utc_now() + dt.timedelta(minutes=minutes)
    payload: Dict[str, Any] = {
        "sub": subject,
        "type": "admin",
        "exp": expires,
        "iat": _utc_now(),
    }
    token = jwt.encode(payload, settings.admin_session_secret, algorithm=settings.jwt_algorithm)
    return token, expires


def decode_admin_session_token(token: str) -> Dict[str, Any]:
    return jwt.decode(token, settings.admin_session_secret, algorithms=[settings.jwt_algorithm])
