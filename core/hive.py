"""Hierarchical key/value storage modeled on the Windows registry.

Design:
 - Keys are backslash-separated paths relative to HKEY_LOCAL_MACHINE.
 - Values are named DWORDs, listed in creation order.
 - WinRegistryHive talks to the real registry (64-bit view).
 - SqliteHive keeps the same tree in a SQLite file for development and tests;
   each call opens a short-lived connection and commits once.
"""
from __future__ import annotations

import contextlib
import logging
import os
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Iterator, Mapping

from core import config
from core.errors import StoreUnavailableError

LOG = logging.getLogger(__name__)


def normalize_path(path: str | None) -> str:
    """Collapse separators so "A\\\\B\\\\" and "A\\B" name the same key."""
    if not path:
        return ""
    return "\\".join(part for part in path.split("\\") if part)


def join_path(*parts: str | None) -> str:
    return normalize_path("\\".join(part for part in parts if part))


class Hive:
    """Interface shared by the registry and SQLite backends."""

    def create_key(self, path: str) -> None:
        raise NotImplementedError

    def key_exists(self, path: str) -> bool:
        raise NotImplementedError

    def list_subkeys(self, path: str) -> list[str]:
        raise NotImplementedError

    def list_values(self, path: str) -> list[tuple[str, int]]:
        raise NotImplementedError

    def get_value(self, path: str, name: str) -> int | None:
        raise NotImplementedError

    def set_values(self, path: str, values: Mapping[str, int]) -> None:
        raise NotImplementedError

    def delete_value(self, path: str, name: str) -> bool:
        raise NotImplementedError

    def delete_tree(self, path: str) -> None:
        raise NotImplementedError

    def set_value(self, path: str, name: str, data: int) -> None:
        self.set_values(path, {name: data})


def _db_path() -> Path:
    """Resolve SQLite DB path from environment or default."""
    return Path(os.environ.get("APP_DB_PATH", Path("Data") / "app.db"))


def _now() -> str:
    return datetime.utcnow().isoformat()


class SqliteHive(Hive):
    def __init__(self, db_path: str | Path | None = None):
        self.db_path = Path(db_path) if db_path else _db_path()
        self._initialized = False

    @contextlib.contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        """Yield a short-lived connection; any SQLite failure becomes StoreUnavailableError."""
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path, timeout=10, check_same_thread=False)
        except (OSError, sqlite3.Error) as exc:
            raise StoreUnavailableError(f"Cannot open settings database {self.db_path}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA foreign_keys=ON")
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            raise StoreUnavailableError(f"Settings database error: {exc}") from exc
        finally:
            conn.close()

    def _init_db(self) -> None:
        if self._initialized:
            return
        with self.connect() as conn:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS hive_keys (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    path TEXT UNIQUE NOT NULL,
                    parent TEXT NOT NULL,
                    name TEXT NOT NULL,
                    created_at TEXT NOT NULL
                );
                CREATE TABLE IF NOT EXISTS hive_values (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    key_id INTEGER NOT NULL,
                    name TEXT NOT NULL,
                    data INTEGER NOT NULL,
                    UNIQUE(key_id, name),
                    FOREIGN KEY(key_id) REFERENCES hive_keys(id) ON DELETE CASCADE
                );
                """
            )
        self._initialized = True

    @staticmethod
    def _key_id(conn: sqlite3.Connection, path: str) -> int | None:
        row = conn.execute("SELECT id FROM hive_keys WHERE path = ?", (path,)).fetchone()
        return row["id"] if row else None

    def _ensure_key(self, conn: sqlite3.Connection, path: str) -> int | None:
        """Create the key and any missing ancestors; return its id."""
        parent = ""
        key_id = None
        for part in path.split("\\") if path else []:
            current = join_path(parent, part)
            conn.execute(
                "INSERT OR IGNORE INTO hive_keys (path, parent, name, created_at) VALUES (?, ?, ?, ?)",
                (current, parent, part, _now()),
            )
            key_id = self._key_id(conn, current)
            parent = current
        return key_id

    def create_key(self, path):
        self._init_db()
        with self.connect() as conn:
            self._ensure_key(conn, normalize_path(path))

    def key_exists(self, path):
        path = normalize_path(path)
        if not path:
            return True
        self._init_db()
        with self.connect() as conn:
            return self._key_id(conn, path) is not None

    def list_subkeys(self, path):
        self._init_db()
        with self.connect() as conn:
            rows = conn.execute(
                "SELECT name FROM hive_keys WHERE parent = ? ORDER BY id",
                (normalize_path(path),),
            ).fetchall()
        return [row["name"] for row in rows]

    def list_values(self, path):
        self._init_db()
        with self.connect() as conn:
            rows = conn.execute(
                """
                SELECT v.name, v.data FROM hive_values v
                JOIN hive_keys k ON k.id = v.key_id
                WHERE k.path = ?
                ORDER BY v.id
                """,
                (normalize_path(path),),
            ).fetchall()
        return [(row["name"], int(row["data"])) for row in rows]

    def get_value(self, path, name):
        self._init_db()
        with self.connect() as conn:
            row = conn.execute(
                """
                SELECT v.data FROM hive_values v
                JOIN hive_keys k ON k.id = v.key_id
                WHERE k.path = ? AND v.name = ?
                """,
                (normalize_path(path), name),
            ).fetchone()
        return int(row["data"]) if row else None

    def set_values(self, path, values):
        path = normalize_path(path)
        if not path:
            raise StoreUnavailableError("Values cannot be stored on the hive root.")
        self._init_db()
        with self.connect() as conn:
            key_id = self._ensure_key(conn, path)
            for name, data in values.items():
                conn.execute(
                    """
                    INSERT INTO hive_values (key_id, name, data) VALUES (?, ?, ?)
                    ON CONFLICT(key_id, name) DO UPDATE SET data = excluded.data
                    """,
                    (key_id, name, int(data)),
                )

    def delete_value(self, path, name):
        self._init_db()
        with self.connect() as conn:
            key_id = self._key_id(conn, normalize_path(path))
            if key_id is None:
                return False
            cursor = conn.execute(
                "DELETE FROM hive_values WHERE key_id = ? AND name = ?",
                (key_id, name),
            )
            return cursor.rowcount > 0

    def delete_tree(self, path):
        path = normalize_path(path)
        if not path:
            raise StoreUnavailableError("Refusing to delete the hive root.")
        self._init_db()
        prefix = path + "\\"
        with self.connect() as conn:
            conn.execute(
                "DELETE FROM hive_keys WHERE path = ? OR substr(path, 1, ?) = ?",
                (path, len(prefix), prefix),
            )


class WinRegistryHive(Hive):
    """HKEY_LOCAL_MACHINE through winreg. Writes need an elevated process."""

    def __init__(self):
        import winreg

        self._winreg = winreg
        self._root = winreg.HKEY_LOCAL_MACHINE
        self._view = winreg.KEY_WOW64_64KEY

    def _open(self, path: str, write: bool = False):
        winreg = self._winreg
        if write:
            return winreg.CreateKeyEx(self._root, path, 0, winreg.KEY_ALL_ACCESS | self._view)
        return winreg.OpenKeyEx(self._root, path, 0, winreg.KEY_READ | self._view)

    @staticmethod
    def _unavailable(action: str, path: str, exc: OSError) -> StoreUnavailableError:
        return StoreUnavailableError(f"Registry {action} failed for HKLM\\{path}: {exc}")

    def create_key(self, path):
        path = normalize_path(path)
        try:
            with self._open(path, write=True):
                pass
        except OSError as exc:
            raise self._unavailable("create", path, exc) from exc

    def key_exists(self, path):
        path = normalize_path(path)
        try:
            with self._open(path):
                return True
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise self._unavailable("open", path, exc) from exc

    def list_subkeys(self, path):
        path = normalize_path(path)
        try:
            with self._open(path) as key:
                count = self._winreg.QueryInfoKey(key)[0]
                return [self._winreg.EnumKey(key, index) for index in range(count)]
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise self._unavailable("enumerate", path, exc) from exc

    def list_values(self, path):
        path = normalize_path(path)
        out: list[tuple[str, int]] = []
        try:
            with self._open(path) as key:
                count = self._winreg.QueryInfoKey(key)[1]
                for index in range(count):
                    name, data, _kind = self._winreg.EnumValue(key, index)
                    out.append((name, _as_int(data) or 0))
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise self._unavailable("enumerate", path, exc) from exc
        return out

    def get_value(self, path, name):
        path = normalize_path(path)
        try:
            with self._open(path) as key:
                data, _kind = self._winreg.QueryValueEx(key, name)
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise self._unavailable("read", path, exc) from exc
        return _as_int(data)

    def set_values(self, path, values):
        path = normalize_path(path)
        winreg = self._winreg
        try:
            key = self._open(path, write=True)
        except OSError as exc:
            raise self._unavailable("create", path, exc) from exc
        with key:
            previous: dict[str, object] = {}
            try:
                for name, data in values.items():
                    try:
                        previous[name] = winreg.QueryValueEx(key, name)
                    except FileNotFoundError:
                        previous[name] = None
                    winreg.SetValueEx(key, name, 0, winreg.REG_DWORD, int(data))
            except OSError as exc:
                self._restore(key, previous)
                raise self._unavailable("write", path, exc) from exc

    def _restore(self, key, previous: dict[str, object]) -> None:
        """Put back values overwritten by a failed multi-value write."""
        winreg = self._winreg
        for name, old in previous.items():
            try:
                if old is None:
                    winreg.DeleteValue(key, name)
                else:
                    data, kind = old
                    winreg.SetValueEx(key, name, 0, kind, data)
            except OSError:
                LOG.error("Could not restore registry value %r", name, exc_info=True)

    def delete_value(self, path, name):
        path = normalize_path(path)
        try:
            with self._open(path, write=True) as key:
                self._winreg.DeleteValue(key, name)
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise self._unavailable("delete", path, exc) from exc
        return True

    def delete_tree(self, path):
        path = normalize_path(path)
        if not path:
            raise StoreUnavailableError("Refusing to delete the hive root.")
        try:
            self._delete_tree(path)
        except FileNotFoundError:
            return
        except OSError as exc:
            raise self._unavailable("delete", path, exc) from exc

    def _delete_tree(self, path: str) -> None:
        # DeleteKeyEx only removes keys without subkeys.
        for child in self.list_subkeys(path):
            self._delete_tree(join_path(path, child))
        self._winreg.DeleteKeyEx(self._root, path, self._view, 0)


def _as_int(data) -> int | None:
    try:
        return int(data)
    except (TypeError, ValueError):
        return None


def open_hive() -> Hive:
    """Return the backend selected by NIS_CONFIG_HIVE or the platform."""
    backend = config.hive_backend()
    if backend == "winreg":
        LOG.info("Using the Windows registry for settings")
        return WinRegistryHive()
    hive = SqliteHive()
    LOG.info("Using SQLite settings database at %s", hive.db_path)
    return hive
