from typing import Any, Dict, List

from sqlalchemy import insert, select
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError

from taskboard.core.database import run_in_connection
from taskboard.core.errors import Conflict, NotFound
from taskboard.models.models import User


def _insert_user(conn: Connection, username: str, hashed_password: str) -> Dict[str, Any]:
    stmt = (
        insert(User.__table__)
        .values(username=username, password=hashed_password)
        .returning(User.user_id, User.username)
    )
    try:
        row = conn.execute(stmt).mappings().one()
    except IntegrityError:
        raise Conflict("Username already exists")
    return dict(row)


def _select_user(conn: Connection, username: str) -> Dict[str, Any]:
    stmt = select(User.user_id, User.username, User.password).where(User.username == username)
    row = conn.execute(stmt).mappings().first()
    if not row:
        raise NotFound("User not found")
    return dict(row)


def _select_users(conn: Connection) -> List[Dict[str, Any]]:
    rows = conn.execute(select(User.user_id, User.username).order_by(User.user_id)).mappings().all()
    return [dict(r) for r in rows]


async def create_user(engine: Engine, username: str, hashed_password: str) -> Dict[str, Any]:
    return await run_in_connection(engine, _insert_user, username, hashed_password)


async def find_user_by_username(engine: Engine, username: str) -> Dict[str, Any]:
    return await run_in_connection(engine, _select_user, username)


async def list_users(engine: Engine) -> List[Dict[str, Any]]:
    return await run_in_connection(engine, _select_users)
