# database/core.py
import sqlite3
import config

DB_FILE = config.DATABASE_PATH


class RepositoryError(Exception):
    """Any failure reading from or writing to the tag store."""


TAG_COLUMNS = (
    'id',
    'title',
    'uri',
    'css',
    'description',
    'status',
    'icon_path',
    'reference_cnt',
    'random_double',
)


def get_db_connection():
    """Create a database connection with settings tuned for many readers."""
    # Wait for locks instead of failing immediately
    conn = sqlite3.connect(DB_FILE, check_same_thread=False, timeout=config.DB_BUSY_TIMEOUT)

    # WAL mode so request handlers can read while a loader writes
    conn.execute("PRAGMA journal_mode = WAL")

    # Faster synchronization (safe with WAL mode)
    conn.execute("PRAGMA synchronous = NORMAL")

    # Negative value means KB
    cache_size_kb = -1 * config.DB_CACHE_SIZE_MB * 1024
    conn.execute(f"PRAGMA cache_size = {cache_size_kb}")

    conn.row_factory = sqlite3.Row
    return conn


def get_db_connection_direct():
    """
    Create a connection in autocommit mode (isolation_level=None).

    Transactions on this connection are only opened by an explicit BEGIN,
    which is what database.transaction_helpers.Transaction relies on.
    """
    conn = get_db_connection()
    conn.isolation_level = None
    return conn


def initialize_database():
    """Create the database and tables if they don't exist."""
    with get_db_connection() as conn:
        cur = conn.cursor()

        cur.execute("""
        CREATE TABLE IF NOT EXISTS tags (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            title TEXT NOT NULL,
            uri TEXT NOT NULL DEFAULT '',
            css TEXT NOT NULL DEFAULT '',
            description TEXT NOT NULL DEFAULT '',
            status INTEGER NOT NULL DEFAULT 0,
            icon_path TEXT NOT NULL DEFAULT '',
            reference_cnt INTEGER NOT NULL DEFAULT 0,
            random_double REAL NOT NULL DEFAULT 0
        )
        """)

        # Older databases predate the sampling key and the URI slug
        columns_to_add = {
            'uri': "TEXT NOT NULL DEFAULT ''",
            'css': "TEXT NOT NULL DEFAULT ''",
            'random_double': 'REAL NOT NULL DEFAULT 0',
        }

        cur.execute("PRAGMA table_info(tags);")
        existing_columns = [row['name'] for row in cur.fetchall()]

        for col, col_type in columns_to_add.items():
            if col not in existing_columns:
                print(f"Adding column '{col}' to 'tags' table...")
                cur.execute(f"ALTER TABLE tags ADD COLUMN {col} {col_type}")

        cur.execute("CREATE INDEX IF NOT EXISTS idx_tags_status ON tags(status)")
        cur.execute("CREATE INDEX IF NOT EXISTS idx_tags_reference_cnt ON tags(reference_cnt)")
        cur.execute("CREATE INDEX IF NOT EXISTS idx_tags_random_double ON tags(random_double)")
        cur.execute("CREATE INDEX IF NOT EXISTS idx_tags_title_nocase ON tags(title COLLATE NOCASE)")

        conn.commit()
