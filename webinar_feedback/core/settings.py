from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True, case_sensitive=False)

    # App
    app_name: str = "Webinar Feedback API"
    debug: bool = False
    log_level: str = "INFO"
    # The form is embedded on third-party pages
    cors_origins: List[str] = ["*"]

    # Database
    database_url: str = "sqlite:///./feedback.db"

    # Security (no defaults: startup fails when unset)
    download_token_secret: str
    admin_session_secret: str
    admin_password: Optional[str] = None
    admin_password_hash: Optional[str] = None
    jwt_algorithm: str = "HS256"
    admin_session_expires_minutes: int = 480

    # Anti-abuse
    issuance_token_ttl_seconds: int = 300
    submission_cooldown_seconds: int = 60
    download_token_ttl_seconds: int = 3600
    download_ip_limit_per_hour: int = 10
    download_token_limit: int = 5

    # Deliverable
    download_file_path: str = "secure_docs/webinar_slides.pptx"
    download_filename: str = "Webinar_Slides.pptx"
    download_media_type: str = "application/vnd.openxmlformats-officedocument.presentationml.presentation"


settings = Settings()
