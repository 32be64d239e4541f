import threading
import time

import pytest
from jose import jwt
from starlette.requests import Request

from taskboard.core import auth
from taskboard.core.auth import (
    Identity,
    TokenService,
    check_password,
    extract_token,
    get_password_hash,
    hash_password,
    verify_password,
)

ALICE = Identity(id=7, username="alice")


def _request(headers=None, cookie=None) -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    if cookie:
        raw.append((b"cookie", cookie.encode()))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw})


def _tamper(token: str) -> str:
    head, sig = token.rsplit(".", 1)
    i = len(sig) // 2
    flipped = "A" if sig[i] != "A" else "B"
    return f"{head}.{sig[:i]}{flipped}{sig[i + 1:]}"


def test_hash_is_salted_and_not_plaintext():
    first = get_password_hash("secret123")
    second = get_password_hash("secret123")
    assert first != "secret123"
    assert first != second
    assert first.startswith("$2b$10$")


@pytest.mark.parametrize("password,wrong", [("secret123", "secret124"), ("p", "P"), ("pässwörd", "passwort")])
def test_check_password(password, wrong):
    hashed = get_password_hash(password)
    assert check_password(password, hashed) is True
    assert check_password(wrong, hashed) is False


def test_check_password_with_garbage_hash_is_false():
    assert check_password("secret123", "not-a-hash") is False


@pytest.mark.asyncio
async def test_async_hash_and_verify():
    hashed = await hash_password("secret123")
    assert await verify_password("secret123", hashed)
    assert not await verify_password("nope", hashed)


@pytest.mark.asyncio
async def test_verify_returns_issued_identity():
    tokens = TokenService("k")
    assert await tokens.verify_token(tokens.create_access_token(ALICE)) == ALICE


@pytest.mark.asyncio
async def test_tampered_signature_is_invalid():
    tokens = TokenService("k")
    token = tokens.create_access_token(ALICE)
    assert await tokens.verify_token(_tamper(token)) is None


@pytest.mark.asyncio
async def test_expired_token_is_invalid():
    tokens = TokenService("k")
    assert await tokens.verify_token(tokens.create_access_token(ALICE, ttl=-10)) is None


@pytest.mark.asyncio
async def test_token_signed_with_other_secret_is_invalid():
    token = TokenService("other").create_access_token(ALICE)
    assert await TokenService("k").verify_token(token) is None


@pytest.mark.asyncio
@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
async def test_malformed_token_is_invalid(token):
    assert await TokenService("k").verify_token(token) is None


def test_token_service_requires_secret():
    with pytest.raises(ValueError):
        TokenService("")


def test_extract_token_sources():
    assert extract_token(_request({"Authorization": "Bearer abc"})) == "abc"
    assert extract_token(_request({"Authorization": "abc"})) == "abc"
    assert extract_token(_request(cookie="token=xyz")) == "xyz"
    assert extract_token(_request({"Authorization": "Bearer abc"}, cookie="token=xyz")) == "abc"
    assert extract_token(_request({"Authorization": "Bearer "})) is None
    assert extract_token(_request()) is None


def test_other_auth_scheme_falls_back_to_cookie():
    assert extract_token(_request({"Authorization": "Basic dXNlcjpwdw=="}, cookie="token=xyz")) == "xyz"
    assert extract_token(_request({"Authorization": "Basic dXNlcjpwdw=="})) is None


def test_passwords_past_bcrypt_limit_never_match():
    hashed = get_password_hash("a" * 72)
    assert check_password("a" * 72, hashed)
    assert not check_password("a" * 72 + "Y", hashed)
    with pytest.raises(ValueError):
        get_password_hash("a" * 72 + "X")


@pytest.mark.asyncio
async def test_token_without_expiry_is_invalid():
    token = jwt.encode({"id": 7, "username": "alice", "iat": int(time.time())}, "k", algorithm="HS256")
    assert await TokenService("k").verify_token(token) is None


@pytest.mark.asyncio
async def test_hashing_runs_off_the_event_loop(monkeypatch):
    loop_thread = threading.get_ident()
    seen = []
    real_hash, real_check = auth.get_password_hash, auth.check_password

    def hash_on_worker(password):
        seen.append(threading.get_ident())
        return real_hash(password)

    def check_on_worker(password, hashed):
        seen.append(threading.get_ident())
        return real_check(password, hashed)

    monkeypatch.setattr(auth, "get_password_hash", hash_on_worker)
    monkeypatch.setattr(auth, "check_password", check_on_worker)

    hashed = await hash_password("secret123")
    assert await verify_password("secret123", hashed)
    assert len(seen) == 2
    assert loop_thread not in seen
