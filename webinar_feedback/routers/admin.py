import csv
import logging
from io import StringIO
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse, StreamingResponse
from sqlalchemy.orm import Session

from webinar_feedback.core.clock import to_aware_utc, utcnow
from webinar_feedback.db.session import get_db
from webinar_feedback.schemas.admin import AdminLoginRequest, AdminLoginResponse
from webinar_feedback.schemas.feedback import FeedbackSubmissionOut, SubmissionListOut
from webinar_feedback.security.deps import require_admin
from webinar_feedback.security.jwt_tokens import create_admin_session_token
from webinar_feedback.security.passwords import verify_admin_password
from webinar_feedback.services.submissions import list_submissions


logger = logging.getLogger(__name__)

router = APIRouter()

CSV_HEADERS = [
    "Date",
    "Full Name",
    "Company",
    "Sector",
    "Position",
    "Email",
    "Phone",
    "Overall Satisfaction",
    "Material Usefulness",
    "Recommend to Colleagues",
    "Comments",
    "1-on-1 Session",
    "Privacy Consent",
    "Marketing Consent",
]


def _yes_no(value: Optional[bool]) -> str:
    if value is None:
        return ""
    return "Yes" if value else "No"


@router.post("/login", response_model=AdminLoginResponse)
def admin_login(payload: AdminLoginRequest):
    if not verify_admin_password(payload.password):
        logger.info("Rejected admin login attempt")
        return JSONResponse({"error": "Invalid password"}, status_code=status.HTTP_401_UNAUTHORIZED)
    token, expires_at = create_admin_session_token()
    return AdminLoginResponse(token=token, expires_at=expires_at)


@router.get("/submissions", response_model=SubmissionListOut)
def admin_list_submissions(
    _: dict = Depends(require_admin),
    db: Session = Depends(get_db),
    search: Optional[str] = None,
    limit: int = Query(default=500, ge=1, le=5000),
    offset: int = Query(default=0, ge=0),
) -> SubmissionListOut:
    rows, total = list_submissions(db, search=search, limit=limit, offset=offset)
    return SubmissionListOut(submissions=[FeedbackSubmissionOut.model_validate(r) for r in rows], total=total)


@router.get("/submissions/export")
def admin_export_submissions(
    _: dict = Depends(require_admin),
    db: Session = Depends(get_db),
    search: Optional[str] = None,
):
    output = StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL)
    writer.writerow(CSV_HEADERS)

    rows, _total = list_submissions(db, search=search)
    for r in rows:
        writer.writerow(
            [
                to_aware_utc(r.created_at).isoformat(),
                r.full_name,
                r.company_name,
                r.sector or "",
                r.position or "",
                r.email,
                r.phone_number or "",
                r.satisfaction_overall or "",
                r.material_usefulness or "",
                r.recommend_colleagues or "",
                r.comments or "",
                _yes_no(r.one_on_one_session),
                _yes_no(r.privacy_consent),
                _yes_no(r.marketing_consent),
            ]
        )

    output.seek(0)
    filename = f"feedback_submissions_{utcnow().date().isoformat()}.csv"
    return StreamingResponse(
        output,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
