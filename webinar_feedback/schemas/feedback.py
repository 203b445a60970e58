from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


SatisfactionLevel = Literal["Very Satisfied", "Satisfied", "Neutral", "Dissatisfied", "Very Dissatisfied"]
YesNo = Literal["Yes", "No"]

_OPTIONAL_FIELDS = (
    "sector",
    "position",
    "phone_number",
    "satisfaction_overall",
    "material_usefulness",
    "recommend_colleagues",
    "comments",
    "one_on_one_session",
    "privacy_consent",
    "marketing_consent",
)


class FeedbackForm(BaseModel):
    full_name: str = Field(min_length=1, max_length=200)
    company_name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    sector: Optional[str] = Field(default=None, max_length=100)
    position: Optional[str] = Field(default=None, max_length=100)
    phone_number: Optional[str] = Field(default=None, max_length=30)
    satisfaction_overall: Optional[SatisfactionLevel] = None
    material_usefulness: Optional[SatisfactionLevel] = None
    recommend_colleagues: Optional[YesNo] = None
    comments: Optional[str] = Field(default=None, max_length=5000)
    one_on_one_session: Optional[bool] = None
    privacy_consent: Optional[bool] = None
    marketing_consent: Optional[bool] = None

    class Config:
        str_strip_whitespace = True
        extra = "ignore"

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator(*_OPTIONAL_FIELDS, mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class SubmitFeedbackRequest(BaseModel):
    # Both optional so that a missing value maps to 400 instead of 422
    token: Optional[str] = None
    form_data: Optional[Dict[str, Any]] = Field(default=None, alias="formData")


class SubmitFeedbackResponse(BaseModel):
    success: bool = True
    message: str = "Feedback submitted successfully"
    downloadToken: Optional[str] = None


class IssuedTokenOut(BaseModel):
    token: str
    expires_at: datetime


class FeedbackSubmissionOut(BaseModel):
    id: int
    full_name: str
    company_name: str
    sector: Optional[str]
    position: Optional[str]
    email: str
    phone_number: Optional[str]
    satisfaction_overall: Optional[str]
    material_usefulness: Optional[str]
    recommend_colleagues: Optional[str]
    comments: Optional[str]
    one_on_one_session: Optional[bool]
    privacy_consent: Optional[bool]
    marketing_consent: Optional[bool]
    created_at: datetime

    class Config:
        from_attributes = True


class SubmissionListOut(BaseModel):
    submissions: List[FeedbackSubmissionOut]
    total: int
