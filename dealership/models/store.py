import logging
import os
import pickle
import threading
import uuid
from pathlib import Path

from dealership.models.query import Query
from dealership.utils.constants import Table

logger = logging.getLogger(__name__)

# ---- Paths ----
BASE_DIR = Path(__file__).resolve().parents[2]
DEFAULT_DATA_PATH = BASE_DIR / "data.pkl"
DEFAULT_UPLOAD_DIR = BASE_DIR / "uploads"

TABLES = (
    Table.VEHICLES,
    Table.SERVICES,
    Table.USERS,
    Table.FAVORITES,
    Table.CONTACT,
    Table.NEWSLETTER,
    Table.TEST_DRIVES,
    Table.FINANCING,
)

# Auth records are keyed by UUID like a hosted auth service; every other table
# uses an auto-increment integer.
UUID_TABLES = {Table.USERS}


class Store:
    """
    In-process stand-in for the hosted data service.

    Tables are dicts of ``id -> record``. Every write is persisted to a pickle
    file with an atomic replace; blobs are written under ``upload_dir`` and
    served from ``url_prefix``.
    """
    _inst = None
    _inst_lock = threading.Lock()

    def __init__(self, path: str | os.PathLike | None = None,
                 upload_dir: str | os.PathLike | None = None,
                 url_prefix: str = "/uploads"):
        self.path = str(path or DEFAULT_DATA_PATH)
        self.upload_dir = Path(upload_dir or DEFAULT_UPLOAD_DIR)
        self.url_prefix = url_prefix.rstrip("/")
        self.tables: dict[str, dict] = {name: {} for name in TABLES}
        self.counters: dict[str, int] = {name: 0 for name in TABLES}
        self._rw = threading.RLock()

        logger.info("[Store] Using file: %s", self.path)
        self._load()

    # ---------- Singleton ----------
    @classmethod
    def instance(cls, path: str | os.PathLike | None = None, **kwargs):
        """Return the global singleton instance of Store."""
        with cls._inst_lock:
            if cls._inst is None:
                cls._inst = Store(path or DEFAULT_DATA_PATH, **kwargs)
        return cls._inst

    # ---------- Persistence ----------
    def _load(self):
        """Load data from the pickle file, or start empty if unavailable or invalid."""
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, "rb") as f:
                data = pickle.load(f)
        except (OSError, pickle.UnpicklingError, EOFError) as e:
            logger.warning("[Store] Load failed (%s); starting empty.", e)
            return

        if isinstance(data, dict) and "tables" in data:
            for name, rows in (data.get("tables") or {}).items():
                self.tables[name] = rows or {}
            self.counters.update(data.get("counters") or {})
            logger.info("[Store] Loaded: %s",
                        ", ".join(f"{k}={len(v)}" for k, v in self.tables.items()))
        else:
            # Incompatible data format: back up the old file and start empty
            bak = self.path + ".bak"
            os.replace(self.path, bak)
            logger.warning("[Store] Incompatible store (%s); backed up to %s. Starting empty.",
                           type(data).__name__, bak)

    def _dump(self):
        """Write the in-memory data to the pickle file safely (atomic replace)."""
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        tmp = self.path + ".tmp"
        payload = {"tables": self.tables, "counters": self.counters}
        with open(tmp, "wb") as f:
            pickle.dump(payload, f, protocol=pickle.HIGHEST_PROTOCOL)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, self.path)

    def save(self):
        """Thread-safe save method."""
        with self._rw:
            logger.debug("[Store] Saving to %s ...", self.path)
            self._dump()

    def clear(self):
        """Drop every row (used by reset_data.py and tests)."""
        with self._rw:
            for name in self.tables:
                self.tables[name] = {}
                self.counters[name] = 0
            self._dump()

    def _table(self, name: str) -> dict:
        if name not in self.tables:
            raise KeyError(f"Unknown table '{name}'")
        return self.tables[name]

    def _next_id(self, table: str):
        if table in UUID_TABLES:
            return str(uuid.uuid4())
        self.counters[table] = self.counters.get(table, 0) + 1
        return self.counters[table]

    # ---------- Rows ----------
    def select(self, query: Query) -> list[dict]:
        """Run a select; returned rows are copies."""
        with self._rw:
            return query.run(self._table(query.table).values())

    def get(self, table: str, row_id) -> dict | None:
        with self._rw:
            row = self._table(table).get(row_id)
            return dict(row) if row is not None else None

    def insert(self, table: str, record: dict) -> dict:
        """Insert a record and return it with its assigned ``id``."""
        with self._rw:
            rows = self._table(table)
            row = dict(record)
            if row.get("id") is None:
                row["id"] = self._next_id(table)
            rows[row["id"]] = row
            self._dump()
            return dict(row)

    def update(self, table: str, row_id, changes: dict) -> dict | None:
        """Apply ``changes`` to one row; None when the row does not exist."""
        with self._rw:
            rows = self._table(table)
            if row_id not in rows:
                return None
            rows[row_id].update({k: v for k, v in changes.items() if k != "id"})
            self._dump()
            return dict(rows[row_id])

    def delete(self, table: str, row_id) -> bool:
        with self._rw:
            rows = self._table(table)
            if row_id in rows:
                del rows[row_id]
                self._dump()
                return True
            return False

    def delete_where(self, table: str, **conditions) -> int:
        """Delete every row matching the equality conditions; return the count."""
        with self._rw:
            rows = self._table(table)
            q = Query(table).where(**conditions)
            doomed = [rid for rid, r in rows.items() if q.matches(r)]
            for rid in doomed:
                del rows[rid]
            if doomed:
                self._dump()
            return len(doomed)

    # ---------- Blobs ----------
    def upload(self, bucket: str, path: str, data: bytes, content_type: str | None = None) -> str:
        """Store a blob (overwriting) and return its public URL."""
        target = (self.upload_dir / bucket / path).resolve()
        if not str(target).startswith(str((self.upload_dir / bucket).resolve())):
            raise ValueError(f"Invalid upload path '{path}'")
        target.parent.mkdir(parents=True, exist_ok=True)
        with self._rw:
            target.write_bytes(data)
        logger.info("[Store] Uploaded %s/%s (%d bytes)", bucket, path, len(data))
        return f"{self.url_prefix}/{bucket}/{path}"
