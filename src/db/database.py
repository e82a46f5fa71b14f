# manages connection to db, provides helper methods internal to db package
import asyncio
import os
from contextlib import asynccontextmanager
from sqlite3 import Row

import aiosqlite

from utils.logger import get_logger

_logger = get_logger(__name__)

DB_PATH = "data/retailpulse.sqlite"
DB_INIT_SCRIPTS = [
    os.path.join(os.path.dirname(os.path.abspath(__file__)), "schema.sql"),
]

_initialized: set = set()
_init_lock = asyncio.Lock()


async def _init_db(conn: aiosqlite.Connection) -> None:
    for script in DB_INIT_SCRIPTS:
        if not os.path.exists(script) or os.path.getsize(script) == 0:
            continue
        _logger.info(f"Initializing database with script {os.path.basename(script)}...")
        with open(script, "r") as f:
            await conn.executescript(f.read())
    await conn.commit()


async def _table_exists(conn: aiosqlite.Connection, table_name: str) -> bool:
    cur = await conn.execute(
        """
        SELECT name
        FROM sqlite_master
        WHERE type = 'table'
          AND name = ?;
        """,
        (table_name,),
    )
    row = await cur.fetchone()
    await cur.close()
    return row is not None


@asynccontextmanager
async def connect(db_path: str | None = None) -> aiosqlite.Connection:
    """Async context manager yielding an aiosqlite connection.

    Ensures the schema exists on first use of each database file.
    """
    path = db_path or DB_PATH
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    conn = await aiosqlite.connect(path)
    conn.row_factory = Row

    if path not in _initialized:
        async with _init_lock:
            if path not in _initialized:
                if not await _table_exists(conn, "transactions"):
                    _logger.info(f"Initializing database at {path}...")
                    await _init_db(conn)
                _initialized.add(path)
    try:
        yield conn
    finally:
        await conn.close()
