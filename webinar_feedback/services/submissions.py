import logging
import math
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import or_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from webinar_feedback.core.clock import to_aware_utc, utcnow
from webinar_feedback.core.settings import settings
from webinar_feedback.models.feedback import FeedbackSubmission
from webinar_feedback.models.rate_limit import RateLimitToken, SubmissionLog
from webinar_feedback.schemas.feedback import FeedbackForm
from webinar_feedback.services.errors import (
    CooldownActive,
    FeedbackError,
    InvalidToken,
    StorageError,
    TokenAlreadyUsed,
    TokenExpired,
    ValidationError,
)


logger = logging.getLogger(__name__)


def validate_form(form_data: Dict[str, Any]) -> FeedbackForm:
    try:
        return FeedbackForm.model_validate(form_data)
    except PydanticValidationError as exc:
        details = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in exc.errors()
        ]
        raise ValidationError("Invalid form data", details=details)


def cooldown_remaining(db: Session, ip: str, now: datetime) -> int:
    """Seconds the IP still has to wait, or 0 when it may submit."""
    window = timedelta(seconds=settings.submission_cooldown_seconds)
    last = (
        db.query(SubmissionLog.submitted_at)
        .filter(SubmissionLog.ip_address == ip, SubmissionLog.submitted_at >= now - window)
        .order_by(SubmissionLog.submitted_at.desc())
        .first()
    )
    if last is None:
        return 0
    elapsed = now - to_aware_utc(last[0])
    return max(1, math.ceil((window - elapsed).total_seconds()))


def admit_submission(
    db: Session,
    token: str,
    ip: str,
    form_data: Dict[str, Any],
    now: Optional[datetime] = None,
) -> FeedbackSubmission:
    """Run a submission through token and cooldown checks, then persist it.

    Consuming the token, inserting the feedback row and writing the cooldown log
    entry happen in one transaction, so a rejected form or a failed insert
    leaves the token usable.
    """
    now = now or utcnow()
    try:
        record: Optional[RateLimitToken] = db.query(RateLimitToken).filter(RateLimitToken.token == token).first()
        if not record:
            raise InvalidToken()
        if record.used:
            raise TokenAlreadyUsed()
        if now > to_aware_utc(record.expires_at):
            raise TokenExpired()

        remaining = cooldown_remaining(db, ip, now)
        if remaining:
            raise CooldownActive(remaining)

        # Conditional update: only one concurrent request can flip the flag
        result = db.execute(
            update(RateLimitToken)
            .where(RateLimitToken.token == token, RateLimitToken.used.is_(False))
            .values(used=True)
        )
        if result.rowcount == 0:
            raise TokenAlreadyUsed()

        form = validate_form(form_data)
        submission = FeedbackSubmission(**form.model_dump())
        db.add(submission)
        db.flush()

        db.add(SubmissionLog(ip_address=ip, submitted_at=now))
        db.commit()
    except FeedbackError as exc:
        db.rollback()
        logger.info("Submission from %s rejected: %s", ip, exc.message)
        raise
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to store submission from %s", ip)
        raise StorageError("Failed to submit feedback")

    db.refresh(submission)
    logger.info("Accepted submission %s from %s", submission.id, ip)
    return submission


def list_submissions(
    db: Session,
    search: Optional[str] = None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> Tuple[List[FeedbackSubmission], int]:
    query = db.query(FeedbackSubmission)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(
            or_(
                FeedbackSubmission.full_name.ilike(pattern),
                FeedbackSubmission.company_name.ilike(pattern),
                FeedbackSubmission.email.ilike(pattern),
                FeedbackSubmission.comments.ilike(pattern),
            )
        )
    total = query.count()
    query = query.order_by(FeedbackSubmission.created_at.desc(), FeedbackSubmission.id.desc()).offset(offset)
    if limit is not None:
        query = query.limit(limit)
    return query.all(), total
