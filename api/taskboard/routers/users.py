from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.engine import Engine

from taskboard.core.auth import get_current_user
from taskboard.core.database import get_engine
from taskboard.crud import users as crud

router = APIRouter(prefix="/users", tags=["users"])


class UserOut(BaseModel):
    user_id: int
    username: str


@router.get("", response_model=List[UserOut], dependencies=[Depends(get_current_user)])
async def list_users(engine: Engine = Depends(get_engine)):
    return await crud.list_users(engine)
