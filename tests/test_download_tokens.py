import base64

import pytest

from webinar_feedback.security.download_tokens import mint_download_token, parse_download_token
from webinar_feedback.services.errors import InvalidSignature, MalformedToken


def _decode(token: str) -> str:
    return base64.b64decode(token).decode("utf-8")


def _encode(raw: str) -> str:
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def test_minted_token_layout_and_parse():
    token = mint_download_token(42, issued_at_ms=1_700_000_000_000)
    submission_id, issued_at, signature = _decode(token).split(":")
    assert submission_id == "42"
    assert issued_at == "1700000000000"
    assert len(signature) == 64

    claims = parse_download_token(token)
    assert claims.submission_id == "42"
    assert claims.issued_at_ms == 1_700_000_000_000
    assert claims.signature == signature


def test_flipped_signature_character_is_rejected():
    raw = _decode(mint_download_token(7, issued_at_ms=1_700_000_000_000))
    payload, signature = raw.rsplit(":", 1)
    for index in (0, len(signature) // 2, len(signature) - 1):
        flipped = "0" if signature[index] != "0" else "1"
        tampered = signature[:index] + flipped + signature[index + 1:]
        with pytest.raises(InvalidSignature):
            parse_download_token(_encode(f"{payload}:{tampered}"))


def test_changed_payload_is_rejected():
    raw = _decode(mint_download_token(7, issued_at_ms=1_700_000_000_000))
    _, _, signature = raw.split(":")
    with pytest.raises(InvalidSignature):
        parse_download_token(_encode(f"8:1700000000000:{signature}"))


def test_token_signed_with_other_secret_is_rejected():
    token = mint_download_token(7, secret="someone-else")
    with pytest.raises(InvalidSignature):
        parse_download_token(token)


@pytest.mark.parametrize(
    "token",
    [
        "not base64 at all!!",
        _encode("no-separator-here"),
        _encode(":1700000000000:abc"),
        _encode("12:abc"),
        base64.b64encode(b"\xff\xfe:\xfa").decode("ascii"),
    ],
)
def test_structurally_invalid_tokens_are_malformed(token):
    with pytest.raises(MalformedToken):
        parse_download_token(token)


def test_plus_sign_survives_unencoded_query_string():
    token = mint_download_token(1, issued_at_ms=1_700_000_000_123)
    assert parse_download_token(token.replace("+", " ")).submission_id == "1"
