from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text, func

from webinar_feedback.db.session import Base


class FeedbackSubmission(Base):
    __tablename__ = "feedback_submissions"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(200), nullable=False)
    company_name = Column(String(200), nullable=False)
    sector = Column(String(100), nullable=True)
    position = Column(String(100), nullable=True)
    email = Column(String(255), nullable=False, index=True)
    phone_number = Column(String(30), nullable=True)
    satisfaction_overall = Column(String(30), nullable=True)
    material_usefulness = Column(String(30), nullable=True)
    recommend_colleagues = Column(String(10), nullable=True)
    comments = Column(Text, nullable=True)
    one_on_one_session = Column(Boolean, nullable=True)
    privacy_consent = Column(Boolean, nullable=True)
    marketing_consent = Column(Boolean, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
