import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from webinar_feedback.core.clock import epoch_millis, utcnow
from webinar_feedback.core.settings import settings
from webinar_feedback.models.rate_limit import DownloadLog
from webinar_feedback.security.download_tokens import parse_download_token
from webinar_feedback.services.errors import (
    DownloadLinkExpired,
    DownloadRateLimited,
    FeedbackError,
    NotFound,
    StorageError,
)


logger = logging.getLogger(__name__)

_IP_WINDOW = timedelta(hours=1)


def authorize_download(db: Session, token: str, ip: str, now: Optional[datetime] = None) -> Path:
    """Check a download token against expiry and both quotas, record the download
    and return the deliverable path (NotFound when the file is missing)."""
    now = now or utcnow()
    try:
        claims = parse_download_token(token)

        if epoch_millis(now) - claims.issued_at_ms > settings.download_token_ttl_seconds * 1000:
            raise DownloadLinkExpired()

        ip_count = (
            db.query(func.count(DownloadLog.id))
            .filter(DownloadLog.ip_address == ip, DownloadLog.downloaded_at >= now - _IP_WINDOW)
            .scalar()
        )
        if ip_count >= settings.download_ip_limit_per_hour:
            raise DownloadRateLimited("ip")

        token_count = (
            db.query(func.count(DownloadLog.id))
            .filter(DownloadLog.token_signature == claims.signature)
            .scalar()
        )
        if token_count >= settings.download_token_limit:
            raise DownloadRateLimited("token")

        db.add(DownloadLog(ip_address=ip, token_signature=claims.signature, downloaded_at=now))
        db.commit()
    except FeedbackError as exc:
        db.rollback()
        logger.info("Download from %s rejected: %s", ip, exc.message)
        raise
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to record download from %s", ip)
        raise StorageError()

    logger.info("Authorized download of submission %s for %s", claims.submission_id, ip)
    file_path = Path(settings.download_file_path)
    if not file_path.is_file():
        logger.error("Deliverable not found: %s", file_path)
        raise NotFound("File not found on server")
    return file_path
