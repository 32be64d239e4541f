import logging
import time
from typing import Any, Dict, Optional

from fastapi import Request
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel, ValidationError as ClaimsError
from starlette.concurrency import run_in_threadpool

from taskboard.core.config import SESSION_COOKIE
from taskboard.core.errors import AuthenticationError, InvalidToken

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_SECONDS = 3600
BCRYPT_ROUNDS = 10
# bcrypt ignores everything past this many bytes
MAX_PASSWORD_BYTES = 72

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=BCRYPT_ROUNDS,
    bcrypt__truncate_error=True,
)


class Identity(BaseModel):
    id: int
    username: str


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def password_too_long(password: str) -> bool:
    return len(password.encode("utf-8")) > MAX_PASSWORD_BYTES


def check_password(password: str, hashed: str) -> bool:
    if password_too_long(password):
        return False
    try:
        return pwd_context.verify(password, hashed)
    except ValueError:
        # unknown or malformed hash
        return False


async def hash_password(password: str) -> str:
    return await run_in_threadpool(get_password_hash, password)


async def verify_password(password: str, hashed: str) -> bool:
    return await run_in_threadpool(check_password, password, hashed)


class TokenService:
    """Issues and checks the signed bearer tokens handed out at login."""

    def __init__(self, secret_key: str, ttl: int = ACCESS_TOKEN_EXPIRE_SECONDS, algorithm: str = ALGORITHM):
        if not secret_key:
            raise ValueError("secret_key is required")
        self.secret_key = secret_key
        self.ttl = ttl
        self.algorithm = algorithm

    def create_access_token(self, identity: Identity, ttl: Optional[int] = None) -> str:
        now = int(time.time())
        to_encode: Dict[str, Any] = {
            "id": identity.id,
            "username": identity.username,
            "iat": now,
            "exp": now + (self.ttl if ttl is None else ttl),
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    async def verify_token(self, token: str) -> Optional[Identity]:
        """Return the identity in ``token``, or None if it is malformed, forged or expired."""
        try:
            claims = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require_exp": True},
            )
            return Identity(id=claims["id"], username=claims["username"])
        except (JWTError, KeyError, ClaimsError):
            return None


def extract_token(request: Request) -> Optional[str]:
    """Bearer header first, then a raw token header, then the session cookie.

    A header carrying some other scheme (``Basic ...`` from a proxy) is
    not ours, so the cookie still gets a chance.
    """
    authorization = (request.headers.get("authorization") or "").strip()
    if authorization:
        scheme, _, value = authorization.partition(" ")
        if scheme.lower() == "bearer":
            return value.strip() or None
        if not value:
            return authorization
    return request.cookies.get(SESSION_COOKIE) or None


async def get_current_user(request: Request) -> Identity:
    token = extract_token(request)
    if not token:
        raise AuthenticationError()
    tokens: TokenService = request.app.state.tokens
    identity = await tokens.verify_token(token)
    if identity is None:
        logger.info("Rejected token on %s %s", request.method, request.url.path)
        raise InvalidToken()
    request.state.user = identity
    return identity
