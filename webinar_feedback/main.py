import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from webinar_feedback.core.settings import settings
from webinar_feedback.routers.admin import router as admin_router
from webinar_feedback.routers.feedback import router as feedback_router
from webinar_feedback.startup import register_startup

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, debug=settings.debug)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["authorization", "content-type"],
)

register_startup(app)

app.include_router(feedback_router, prefix="/api", tags=["feedback"])
app.include_router(admin_router, prefix="/api/admin", tags=["admin"])

_BAD_REQUEST_MESSAGES = {
    "/api/submit-feedback": "Missing token or form data",
    "/api/admin/login": "Missing password",
}


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Malformed request on %s: %s", request.url.path, exc.errors())
    message = _BAD_REQUEST_MESSAGES.get(request.url.path, "Invalid request")
    return JSONResponse({"error": message}, status_code=status.HTTP_400_BAD_REQUEST)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse({"error": "Internal Server Error"}, status_code=500)


@app.get("/health")
def health_check():
    return {"status": "ok"}
