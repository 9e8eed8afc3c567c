# password hashing and token unit tests (no database)
import jwt
import pytest

from todo_api.auth import InvalidTokenError, decode_token, hash_password, make_token, verify_password

SECRET = "unit-test-secret-0123456789abcdef0123456789"


def test_password_hash_and_verify():
    pw = "S3cure!"
    hashed = hash_password(pw, iters=1000)
    assert hashed.startswith("pbkdf2_sha256$1000$")
    assert verify_password(pw, hashed)
    assert not verify_password("wrong", hashed)


def test_password_hash_is_salted():
    assert hash_password("same", iters=1000) != hash_password("same", iters=1000)


@pytest.mark.parametrize("bad", ["", "plaintext", "md5$1$a$b", "pbkdf2_sha256$x$a$b"])
def test_verify_password_rejects_malformed_hash(bad):
    assert not verify_password("pw", bad)


def test_token_carries_identity_without_expiry():
    token = make_token(42, "a@example.com", SECRET)
    payload = jwt.decode(token, SECRET, algorithms=["HS256"])
    assert payload == {"userId": "42", "email": "a@example.com"}

    claims = decode_token(token, SECRET)
    assert claims.user_id == "42"
    assert claims.email == "a@example.com"


def test_token_signed_with_other_secret_is_rejected():
    token = make_token(1, "a@example.com", "another-secret-0123456789abcdef0123456789")
    with pytest.raises(InvalidTokenError):
        decode_token(token, SECRET)


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
def test_malformed_token_is_rejected(token):
    with pytest.raises(InvalidTokenError):
        decode_token(token, SECRET)


def test_token_without_identity_claims_is_rejected():
    token = jwt.encode({"email": "a@example.com"}, SECRET, algorithm="HS256")
    with pytest.raises(InvalidTokenError):
        decode_token(token, SECRET)
