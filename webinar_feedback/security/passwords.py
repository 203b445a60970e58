import secrets

from passlib.context import CryptContext

from webinar_feedback.core.settings import settings


_password_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(plain_password: str) -> str:
    return _password_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return _password_context.verify(plain_password, hashed_password)


def verify_admin_password(candidate: str) -> bool:
    """Check a login attempt against the configured hash, or the plain value if no hash is set."""
    if settings.admin_password_hash:
        return verify_password(candidate, settings.admin_password_hash)
    if settings.admin_password:
        return secrets.compare_digest(candidate.encode("utf-8"), settings.admin_password.encode("utf-8"))
    return False
