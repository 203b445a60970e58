from datetime import timedelta
from pathlib import Path

import pytest

from webinar_feedback.core.clock import epoch_millis, utcnow
from webinar_feedback.core.settings import settings
from webinar_feedback.models.rate_limit import DownloadLog
from webinar_feedback.security.download_tokens import mint_download_token, parse_download_token
from webinar_feedback.services.downloads import authorize_download
from webinar_feedback.services.errors import (
    DownloadLinkExpired,
    DownloadRateLimited,
    InvalidSignature,
    MalformedToken,
    NotFound,
)


IP = "198.51.100.20"

pytestmark = pytest.mark.usefixtures("deliverable")


def test_fresh_token_is_authorized_and_logged(db):
    now = utcnow()
    token = mint_download_token(1, issued_at_ms=epoch_millis(now))

    path = authorize_download(db, token, IP, now=now)

    assert path == Path(settings.download_file_path)
    logs = db.query(DownloadLog).all()
    assert len(logs) == 1
    assert logs[0].ip_address == IP
    assert logs[0].token_signature == parse_download_token(token).signature


def test_token_past_one_hour_is_expired(db):
    now = utcnow()
    token = mint_download_token(1, issued_at_ms=epoch_millis(now) - 3_600_001)
    with pytest.raises(DownloadLinkExpired):
        authorize_download(db, token, IP, now=now)
    assert db.query(DownloadLog).count() == 0


def test_token_at_exactly_one_hour_is_still_valid(db):
    now = utcnow()
    token = mint_download_token(1, issued_at_ms=epoch_millis(now) - 3_600_000)
    authorize_download(db, token, IP, now=now)


def test_bad_signature_wins_over_expiry(db):
    now = utcnow()
    token = mint_download_token(1, issued_at_ms=epoch_millis(now) - 10 * 3_600_000, secret="wrong")
    with pytest.raises(InvalidSignature):
        authorize_download(db, token, IP, now=now)


def test_malformed_token_is_structural_error(db):
    with pytest.raises(MalformedToken):
        authorize_download(db, "%%%", IP)


def test_token_quota_caps_redemptions_at_five(db):
    now = utcnow()
    token = mint_download_token(1, issued_at_ms=epoch_millis(now))
    for _ in range(5):
        authorize_download(db, token, IP, now=now)

    with pytest.raises(DownloadRateLimited) as ei:
        authorize_download(db, token, IP, now=now)
    assert ei.value.scope == "token"
    assert ei.value.status_code == 429
    assert db.query(DownloadLog).count() == 5


def test_token_quota_applies_across_ips(db):
    now = utcnow()
    token = mint_download_token(1, issued_at_ms=epoch_millis(now))
    for i in range(5):
        authorize_download(db, token, f"192.0.2.{i}", now=now)
    with pytest.raises(DownloadRateLimited) as ei:
        authorize_download(db, token, "192.0.2.99", now=now)
    assert ei.value.scope == "token"


def test_ip_quota_caps_downloads_per_hour_at_ten(db):
    now = utcnow()
    ms = epoch_millis(now)
    for submission_id in (1, 2):
        token = mint_download_token(submission_id, issued_at_ms=ms)
        for _ in range(5):
            authorize_download(db, token, IP, now=now)

    fresh = mint_download_token(3, issued_at_ms=ms)
    with pytest.raises(DownloadRateLimited) as ei:
        authorize_download(db, fresh, IP, now=now)
    assert ei.value.scope == "ip"

    # another IP is unaffected
    authorize_download(db, fresh, "203.0.113.50", now=now)


def test_ip_quota_window_slides(db):
    start = utcnow()
    ms = epoch_millis(start)
    for submission_id in (1, 2):
        token = mint_download_token(submission_id, issued_at_ms=ms)
        for _ in range(5):
            authorize_download(db, token, IP, now=start)

    later = start + timedelta(hours=1, seconds=1)
    fresh = mint_download_token(3, issued_at_ms=epoch_millis(later))
    authorize_download(db, fresh, IP, now=later)


def test_missing_deliverable_is_not_found(db, monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "download_file_path", str(tmp_path / "gone.pptx"))
    now = utcnow()
    token = mint_download_token(1, issued_at_ms=epoch_millis(now))
    with pytest.raises(NotFound) as ei:
        authorize_download(db, token, IP, now=now)
    assert ei.value.status_code == 404
    assert ei.value.message == "File not found on server"
