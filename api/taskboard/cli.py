import argparse
import asyncio
import logging
import sys

from taskboard.core.config import ConfigError, Settings, get_settings
from taskboard.core.database import init_db, make_engine
from taskboard.crud import boards as crud

logger = logging.getLogger("taskboard")

DEMO_COLUMNS = ["To Do", "In Progress", "Done"]


def setup_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def seed_demo(engine, board_name: str = "Demo board") -> dict:
    existing = [b for b in await crud.list_boards_with_columns(engine) if b["board_name"] == board_name]
    if existing:
        return existing[0]
    board = await crud.create_board(engine, board_name)
    board["columns"] = [
        await crud.create_column(engine, board["board_id"], name, position)
        for position, name in enumerate(DEMO_COLUMNS)
    ]
    return board


def serve(settings: Settings) -> None:
    import uvicorn

    from taskboard.main import create_app

    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_level=settings.log_level.lower())


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(prog="taskboard")
    ap.add_argument("cmd", choices=["serve", "init-db", "seed-demo", "list-boards"])
    ap.add_argument("--board-name", default="Demo board")
    a = ap.parse_args(argv)

    try:
        settings = get_settings()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    setup_logging(settings)

    if a.cmd == "serve":
        serve(settings)
        return 0

    engine = make_engine(settings.db_url)
    try:
        init_db(engine)
        if a.cmd == "init-db":
            logger.info("Schema ready")
        elif a.cmd == "seed-demo":
            board = asyncio.run(seed_demo(engine, a.board_name))
            logger.info("Demo board ready: [%s] %s", board["board_id"], board["board_name"])
        else:
            for b in asyncio.run(crud.list_boards_with_columns(engine)):
                cols = ", ".join(c["column_name"] for c in b["columns"]) or "-"
                print(f"[{b['board_id']}] {b['board_name']}: {cols}")
    finally:
        engine.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(main())
