import logging
from pathlib import Path

from fastapi import FastAPI

from webinar_feedback.core.settings import settings
from webinar_feedback.db.session import Base, engine
from webinar_feedback.models import feedback, rate_limit  # noqa: F401  (register tables)


logger = logging.getLogger(__name__)


def register_startup(app: FastAPI) -> None:
    @app.on_event("startup")
    def _create_tables() -> None:
        Base.metadata.create_all(bind=engine)

    @app.on_event("startup")
    def _check_deliverable() -> None:
        if not Path(settings.download_file_path).is_file():
            logger.warning("Download deliverable missing at %s", settings.download_file_path)
