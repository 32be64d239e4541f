from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import insert, select
from sqlalchemy.engine import Connection, Engine

from taskboard.core.auth import Identity
from taskboard.core.database import run_in_connection
from taskboard.models.models import Board, BoardColumn, Task

boards = Board.__table__
columns = BoardColumn.__table__
tasks = Task.__table__


def _insert_board(conn: Connection, board_name: str) -> Dict[str, Any]:
    row = conn.execute(insert(boards).values(board_name=board_name).returning(boards)).mappings().one()
    return dict(row)


def _select_boards_with_columns(conn: Connection) -> List[Dict[str, Any]]:
    stmt = (
        select(boards.c.board_id, boards.c.board_name, columns.c.column_id, columns.c.column_name, columns.c.position)
        .select_from(boards.outerjoin(columns, columns.c.board_id == boards.c.board_id))
        .order_by(boards.c.board_id, columns.c.position, columns.c.column_id)
    )
    result: List[Dict[str, Any]] = []
    by_id: Dict[int, Dict[str, Any]] = {}
    for r in conn.execute(stmt).mappings():
        board = by_id.get(r["board_id"])
        if board is None:
            board = {"board_id": r["board_id"], "board_name": r["board_name"], "columns": []}
            by_id[r["board_id"]] = board
            result.append(board)
        if r["column_id"] is not None:
            board["columns"].append(
                {"column_id": r["column_id"], "column_name": r["column_name"], "position": r["position"]}
            )
    return result


def _select_columns(conn: Connection, board_id: int) -> List[Dict[str, Any]]:
    stmt = select(columns).where(columns.c.board_id == board_id).order_by(columns.c.position, columns.c.column_id)
    return [dict(r) for r in conn.execute(stmt).mappings()]


def _select_tasks(conn: Connection, column_id: int) -> List[Dict[str, Any]]:
    stmt = select(tasks).where(tasks.c.column_id == column_id).order_by(tasks.c.task_id)
    return [dict(r) for r in conn.execute(stmt).mappings()]


def _insert_column(conn: Connection, board_id: int, column_name: str, position: int) -> Dict[str, Any]:
    stmt = insert(columns).values(board_id=board_id, column_name=column_name, position=position).returning(columns)
    return dict(conn.execute(stmt).mappings().one())


def _insert_task(conn: Connection, values: Dict[str, Any]) -> Dict[str, Any]:
    return dict(conn.execute(insert(tasks).values(**values).returning(tasks)).mappings().one())


async def create_board(engine: Engine, board_name: str) -> Dict[str, Any]:
    return await run_in_connection(engine, _insert_board, board_name)


async def list_boards_with_columns(engine: Engine) -> List[Dict[str, Any]]:
    """Every board with its columns nested, in one LEFT JOIN.

    Boards come back by ascending id; columns by position, then id. A board
    with no columns gets an empty list.
    """
    return await run_in_connection(engine, _select_boards_with_columns)


async def list_columns(engine: Engine, board_id: int) -> List[Dict[str, Any]]:
    return await run_in_connection(engine, _select_columns, board_id)


async def list_tasks(engine: Engine, column_id: int) -> List[Dict[str, Any]]:
    return await run_in_connection(engine, _select_tasks, column_id)


async def create_column(engine: Engine, board_id: int, column_name: str, position: int) -> Dict[str, Any]:
    return await run_in_connection(engine, _insert_column, board_id, column_name, position)


async def create_task(
    engine: Engine,
    creator: Identity,
    column_id: int,
    task_title: str,
    description: Optional[str] = None,
    priority: Optional[str] = None,
    due_date: Optional[date] = None,
) -> Dict[str, Any]:
    # the creator is the verified caller, never a client-supplied user_id
    values = {
        "user_id": creator.id,
        "column_id": column_id,
        "task_title": task_title,
        "description": description,
        "priority": priority,
        "due_date": due_date,
    }
    return await run_in_connection(engine, _insert_task, values)
