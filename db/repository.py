import sqlite3
import os
from datetime import datetime
from utils.logger import logger
from config import DATABASE_FILE, SCHEMA_SQL, ALLOWLIST_PREFIX

USER_CREDENTIALS_ID = 'Credentials'

class Repository:
    def __init__(self, db_path=DATABASE_FILE):
        os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
        self.db_path = db_path
        self._initialize_db()

    def _initialize_db(self):
        conn = None
        try:
            conn = sqlite3.connect(self.db_path)
            cursor = conn.cursor()
            with open(SCHEMA_SQL, 'r') as f:
                schema_sql = f.read()

            # Split the schema into individual statements
            statements = [s.strip() for s in schema_sql.split(';') if s.strip()]

            for statement in statements:
                try:
                    cursor.execute(statement + ';')
                except sqlite3.OperationalError as e:
                    # Ignore "index already exists" errors
                    if "already exists" in str(e):
                        logger.debug(f"Skipping existing database object: {e}")
                    else:
                        raise

            conn.commit()
            logger.debug(f"Database initialized at {self.db_path}")
        except sqlite3.Error as e:
            logger.error(f"Error initializing database: {e}")
            raise
        finally:
            if conn:
                conn.close()

    def _execute_query(self, query, params=(), fetch_one=False, fetch_all=False):
        conn = None
        try:
            conn = sqlite3.connect(self.db_path)
            cursor = conn.cursor()
            cursor.execute(query, params)
            conn.commit()
            if fetch_one:
                return cursor.fetchone()
            if fetch_all:
                return cursor.fetchall()
            return None
        except sqlite3.Error as e:
            logger.error(f"Database query error: {e} - Query: {query} - Params: {params}")
            raise
        finally:
            if conn:
                conn.close()

    def get_setting(self, key):
        result = self._execute_query("SELECT value FROM settings WHERE key = ?", (key,), fetch_one=True)
        return result[0] if result else None

    def set_setting(self, key, value):
        now = datetime.now().isoformat()
        self._execute_query("""
            INSERT INTO settings (key, value, updated_at) VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
        """, (key, value, now))
        logger.debug(f"Stored setting {key}")

    def delete_setting(self, key):
        self._execute_query("DELETE FROM settings WHERE key = ?", (key,))

    def list_settings(self, prefix=''):
        """
        Returns {key: value} for every setting whose key starts with `prefix`.
        """
        rows = self._execute_query(
            "SELECT key, value FROM settings WHERE substr(key, 1, ?) = ? ORDER BY key",
            (len(prefix), prefix),
            fetch_all=True
        )
        return {key: value for key, value in rows}

    def get_allowlist(self):
        """
        Maps sender id -> handle from `whitelist/<handle>` settings whose value is the sender id.
        """
        allowlist = {}
        for key, sender_id in self.list_settings(ALLOWLIST_PREFIX).items():
            handle = key[len(ALLOWLIST_PREFIX):]
            if not handle or not sender_id:
                logger.warn(f"Ignoring malformed allow-list entry {key!r}")
                continue
            allowlist[sender_id.strip()] = handle
        return allowlist

    def get_user_credentials(self):
        """
        Returns the stored delegated access token as a dict, or None.
        """
        result = self._execute_query(
            "SELECT token, token_secret, screen_name, updated_at FROM credentials WHERE id = ?",
            (USER_CREDENTIALS_ID,),
            fetch_one=True
        )
        if not result:
            return None
        return {
            "token": result[0],
            "token_secret": result[1],
            "screen_name": result[2],
            "updated_at": result[3]
        }

    def save_user_credentials(self, token, token_secret, screen_name=None):
        now = datetime.now().isoformat()
        self._execute_query("""
            INSERT INTO credentials (id, token, token_secret, screen_name, updated_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                token = excluded.token,
                token_secret = excluded.token_secret,
                screen_name = excluded.screen_name,
                updated_at = excluded.updated_at
        """, (USER_CREDENTIALS_ID, token, token_secret, screen_name, now))
        logger.log(f"Stored user credentials for @{screen_name or 'unknown'}")

# Initialize a global repository instance
repository = Repository()
