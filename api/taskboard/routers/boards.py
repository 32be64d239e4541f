from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import AliasChoices, BaseModel, Field
from sqlalchemy.engine import Engine

from taskboard.core.auth import Identity, get_current_user
from taskboard.core.database import get_engine
from taskboard.crud import boards as crud

router = APIRouter(prefix="/api", tags=["boards"], dependencies=[Depends(get_current_user)])


class ColumnIn(BaseModel):
    board_id: int
    column_name: str = Field(min_length=1)
    position: int = Field(default=0, ge=0)


class ColumnOut(ColumnIn):
    column_id: int


class ColumnSummary(BaseModel):
    column_id: int
    column_name: str
    position: int


class BoardOut(BaseModel):
    board_id: int
    board_name: str
    columns: List[ColumnSummary] = []


class TaskIn(BaseModel):
    column_id: int
    task_title: str = Field(min_length=1, validation_alias=AliasChoices("task_title", "title"))
    description: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[date] = None


class TaskOut(BaseModel):
    task_id: int
    user_id: int
    column_id: int
    task_title: str
    description: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[date] = None


@router.get("/boards", response_model=List[BoardOut])
async def list_boards(engine: Engine = Depends(get_engine)):
    return await crud.list_boards_with_columns(engine)


@router.get("/columns/{board_id}", response_model=List[ColumnOut])
async def list_columns(board_id: int, engine: Engine = Depends(get_engine)):
    return await crud.list_columns(engine, board_id)


@router.get("/tasks/{column_id}", response_model=List[TaskOut])
async def list_tasks(column_id: int, engine: Engine = Depends(get_engine)):
    return await crud.list_tasks(engine, column_id)


@router.post("/columns", response_model=ColumnOut, status_code=status.HTTP_201_CREATED)
async def create_column(body: ColumnIn, engine: Engine = Depends(get_engine)):
    return await crud.create_column(engine, body.board_id, body.column_name, body.position)


@router.post("/tasks", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
async def create_task(
    body: TaskIn,
    engine: Engine = Depends(get_engine),
    user: Identity = Depends(get_current_user),
):
    return await crud.create_task(
        engine,
        user,
        body.column_id,
        body.task_title,
        description=body.description,
        priority=body.priority,
        due_date=body.due_date,
    )
