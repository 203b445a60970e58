import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse
from sqlalchemy.orm import Session

from webinar_feedback.core.clock import to_aware_utc
from webinar_feedback.core.settings import settings
from webinar_feedback.db.session import get_db
from webinar_feedback.schemas.feedback import IssuedTokenOut, SubmitFeedbackRequest, SubmitFeedbackResponse
from webinar_feedback.security.deps import get_client_ip
from webinar_feedback.security.download_tokens import mint_download_token
from webinar_feedback.services.downloads import authorize_download
from webinar_feedback.services.errors import FeedbackError
from webinar_feedback.services.submissions import admit_submission
from webinar_feedback.services.tokens import issue_token


logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/get-feedback-token", response_model=IssuedTokenOut)
def get_feedback_token(request: Request, db: Session = Depends(get_db)):
    try:
        record = issue_token(db, get_client_ip(request))
    except FeedbackError:
        return JSONResponse({"error": "Failed to generate token"}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return IssuedTokenOut(token=record.token, expires_at=to_aware_utc(record.expires_at))


@router.post("/submit-feedback", response_model=SubmitFeedbackResponse)
def submit_feedback(payload: SubmitFeedbackRequest, request: Request, db: Session = Depends(get_db)):
    if not payload.token or payload.form_data is None:
        return JSONResponse({"error": "Missing token or form data"}, status_code=status.HTTP_400_BAD_REQUEST)

    try:
        submission = admit_submission(db, payload.token, get_client_ip(request), payload.form_data)
    except FeedbackError as exc:
        if exc.status_code >= 500:
            return JSONResponse({"error": "Failed to submit feedback"}, status_code=exc.status_code)
        return JSONResponse(exc.to_body(), status_code=exc.status_code)

    return SubmitFeedbackResponse(downloadToken=mint_download_token(submission.id))


@router.get("/download-presentation")
def download_presentation(request: Request, token: Optional[str] = None, db: Session = Depends(get_db)):
    if not token:
        return PlainTextResponse("Missing download token", status_code=status.HTTP_400_BAD_REQUEST)

    try:
        file_path = authorize_download(db, token, get_client_ip(request))
    except FeedbackError as exc:
        if exc.status_code >= 500:
            return PlainTextResponse("Internal Server Error", status_code=exc.status_code)
        return PlainTextResponse(exc.message, status_code=exc.status_code)
    except Exception:
        logger.exception("Unexpected error serving download")
        return PlainTextResponse("Internal Server Error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return FileResponse(
        file_path,
        media_type=settings.download_media_type,
        filename=settings.download_filename,
    )
