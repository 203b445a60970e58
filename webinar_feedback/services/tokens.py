import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from webinar_feedback.core.clock import utcnow
from webinar_feedback.core.settings import settings
from webinar_feedback.models.rate_limit import RateLimitToken
from webinar_feedback.services.errors import StorageError


logger = logging.getLogger(__name__)


def issue_token(db: Session, ip: str, now: Optional[datetime] = None) -> RateLimitToken:
    """Create a single-use issuance token bound to the requester's IP."""
    now = now or utcnow()
    record = RateLimitToken(
        token=secrets.token_urlsafe(32),
        ip_address=ip,
        expires_at=now + timedelta(seconds=settings.issuance_token_ttl_seconds),
        used=False,
    )
    try:
        db.add(record)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to store issuance token for %s", ip)
        raise StorageError("Failed to generate token")
    db.refresh(record)
    return record
