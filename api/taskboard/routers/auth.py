import logging

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.engine import Engine

from taskboard.core.auth import (
    MAX_PASSWORD_BYTES,
    Identity,
    TokenService,
    get_current_user,
    hash_password,
    password_too_long,
    verify_password,
)
from taskboard.core.config import SESSION_COOKIE
from taskboard.core.database import get_engine, ping, run_in_connection
from taskboard.core.errors import NotFound, ValidationError
from taskboard.crud import users as crud

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

INVALID_CREDENTIALS = "Invalid username or password"


class Credentials(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)

    @field_validator("password")
    @classmethod
    def fits_bcrypt(cls, v: str) -> str:
        if password_too_long(v):
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return v


def _issue(request: Request, response: Response, identity: Identity) -> dict:
    settings = request.app.state.settings
    tokens: TokenService = request.app.state.tokens
    token = tokens.create_access_token(identity)
    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=tokens.ttl,
        httponly=True,
        secure=settings.secure_cookies,
        samesite="lax",
    )
    return {"token": token}


@router.get("/", response_class=PlainTextResponse)
def root():
    return "API is running!"


@router.get("/health")
async def health(engine: Engine = Depends(get_engine)):
    await run_in_connection(engine, ping)
    return {"ok": True}


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(b: Credentials, request: Request, response: Response, engine: Engine = Depends(get_engine)):
    hashed = await hash_password(b.password)
    user = await crud.create_user(engine, b.username, hashed)
    logger.info("Registered user %s (id=%s)", user["username"], user["user_id"])
    return _issue(request, response, Identity(id=user["user_id"], username=user["username"]))


@router.post("/login")
async def login(b: Credentials, request: Request, response: Response, engine: Engine = Depends(get_engine)):
    try:
        user = await crud.find_user_by_username(engine, b.username)
    except NotFound:
        logger.info("Login failed: unknown user")
        raise ValidationError(INVALID_CREDENTIALS)
    if not await verify_password(b.password, user["password"]):
        logger.info("Login failed for user id=%s", user["user_id"])
        raise ValidationError(INVALID_CREDENTIALS)
    return _issue(request, response, Identity(id=user["user_id"], username=user["username"]))


@router.post("/logout")
def logout(response: Response):
    response.delete_cookie(SESSION_COOKIE)
    return {"message": "Logged out successfully"}


@router.get("/protected")
def protected(user: Identity = Depends(get_current_user)):
    return {"message": "Access granted", "user": user.model_dump()}
