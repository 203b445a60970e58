from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, func

from webinar_feedback.db.session import Base


class RateLimitToken(Base):
    """Single-use issuance token handed to the form before it can submit."""

    __tablename__ = "rate_limit_tokens"

    token = Column(String(64), primary_key=True)
    ip_address = Column(String(45), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    used = Column(Boolean, nullable=False, default=False, server_default="0")


class SubmissionLog(Base):
    __tablename__ = "submission_logs"
    __table_args__ = (Index("ix_submission_logs_ip_submitted_at", "ip_address", "submitted_at"),)

    id = Column(Integer, primary_key=True)
    ip_address = Column(String(45), nullable=False)
    submitted_at = Column(DateTime(timezone=True), nullable=False)


class DownloadLog(Base):
    __tablename__ = "download_logs"
    __table_args__ = (Index("ix_download_logs_ip_downloaded_at", "ip_address", "downloaded_at"),)

    id = Column(Integer, primary_key=True)
    ip_address = Column(String(45), nullable=False)
    # hex HMAC of the download token; counts redemptions per token
    token_signature = Column(String(64), nullable=False, index=True)
    downloaded_at = Column(DateTime(timezone=True), nullable=False)
