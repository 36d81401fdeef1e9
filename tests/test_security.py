import jwt
import pytest

from utils.exceptions import InvalidTokenError, TokenExpiredError, UnauthorizedError
from utils.security import (
    AccessTokenCodec,
    generate_refresh_token,
    hash_password,
    parse_expires_in,
    password_needs_rehash,
    verify_password,
)

SECRET = "unit-test-secret-that-is-long-enough"
CLAIMS = {"user_id": "u-1", "email": "a@x.com", "role": "user"}


def test_hash_is_salted_and_verifies():
    first = hash_password("Abcd1234")
    second = hash_password("Abcd1234")

    assert first != "Abcd1234"
    assert first != second
    assert verify_password("Abcd1234", first)
    assert verify_password("Abcd1234", second)


def test_verify_rejects_wrong_password_and_garbage_digest():
    digest = hash_password("Abcd1234")

    assert verify_password("abcd1234", digest) is False
    assert verify_password("Abcd1234", "not-a-digest") is False


def test_fresh_hash_does_not_need_rehash():
    assert password_needs_rehash(hash_password("Abcd1234")) is False


def test_refresh_token_values_are_unique():
    assert len({generate_refresh_token() for _ in range(50)}) == 50


@pytest.mark.parametrize(
    ("value", "seconds"),
    [
        ("15m", 900),
        ("1h", 3600),
        ("7d", 604800),
        ("30s", 30),
        ("2w", 3600),
        ("h1", 3600),
        ("", 3600),
        (None, 3600),
    ],
)
def test_parse_expires_in(value, seconds):
    assert parse_expires_in(value) == seconds


def test_codec_round_trips_identity_claims():
    codec = AccessTokenCodec(SECRET)

    claims = codec.verify(codec.issue(CLAIMS, 60))

    assert claims == CLAIMS


def test_codec_expired_token_is_distinguishable():
    codec = AccessTokenCodec(SECRET)
    token = codec.issue(CLAIMS, -10)

    with pytest.raises(TokenExpiredError) as excinfo:
        codec.verify(token)

    assert not isinstance(excinfo.value, InvalidTokenError)
    assert isinstance(excinfo.value, UnauthorizedError)
    assert excinfo.value.code == "TOKEN_EXPIRED"


def test_codec_rejects_token_signed_with_other_secret():
    token = AccessTokenCodec("another-secret-that-is-long-enough!").issue(CLAIMS, 60)

    with pytest.raises(InvalidTokenError) as excinfo:
        AccessTokenCodec(SECRET).verify(token)

    assert excinfo.value.code == "INVALID_TOKEN"


def test_codec_rejects_garbage_and_wrong_type():
    codec = AccessTokenCodec(SECRET)
    with pytest.raises(InvalidTokenError):
        codec.verify("not-a-jwt")

    refresh_like = jwt.encode(
        {"sub": "u-1", "type": "refresh", "iss": codec.issuer, "exp": 9999999999},
        SECRET,
        algorithm="HS256",
    )
    with pytest.raises(InvalidTokenError):
        codec.verify(refresh_like)


def test_codec_requires_secret():
    with pytest.raises(ValueError):
        AccessTokenCodec("")
