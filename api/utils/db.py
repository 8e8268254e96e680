import os
import sqlite3

from core.config import BIBLE_DB_PATH


def get_db(db_path: str = None):
    """
    Return a sqlite3 connection to the verse DB.

    Connections are not shared between threads; open one per unit of work
    and close it when done.
    """
    db_path = db_path or BIBLE_DB_PATH
    if db_path != ":memory:":
        os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn
