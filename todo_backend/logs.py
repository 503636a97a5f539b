import json, time, datetime as dt
from typing import Optional

from .repository.executor import QueryExecutor
from .services.utils import uniqid

DDL = [
    """
CREATE TABLE IF NOT EXISTS operation_log (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  ts TEXT NOT NULL,
  user TEXT NOT NULL,
  action TEXT NOT NULL,
  entity_type TEXT,
  entity_id TEXT,
  request_id TEXT,
  payload_json TEXT,
  after_json TEXT,
  result TEXT,
  err_msg TEXT,
  latency_ms INTEGER
)
""",
    "CREATE INDEX IF NOT EXISTS idx_log_ts ON operation_log(ts)",
    "CREATE INDEX IF NOT EXISTS idx_log_action ON operation_log(action)",
]


def ensure_log_schema(db: QueryExecutor):
    for stmt in DDL:
        db.update(stmt)


class OperationLogContext:
    """One audit row per mutating request; written once via write()."""

    def __init__(self, action: str, db: QueryExecutor, user: str = "owner"):
        self.action = action
        self.db = db
        self.user = user
        self.request_id = uniqid()
        self.start = time.perf_counter()
        self.after = None
        self.payload = None
        self.entity_type = None
        self.entity_id = None

    def set_entity(self, etype: str, eid):
        self.entity_type = etype
        self.entity_id = None if eid is None else str(eid)

    def set_after(self, obj): self.after = obj
    def set_payload(self, obj): self.payload = obj

    def write(self, result: str = "OK", err: Optional[str] = None):
        elapsed_ms = int((time.perf_counter() - self.start) * 1000)
        rec = {
            "ts": dt.datetime.now(dt.timezone.utc).isoformat(),
            "user": self.user,
            "action": self.action,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "request_id": self.request_id,
            "after_json": json.dumps(self.after, ensure_ascii=False) if self.after is not None else None,
            "payload_json": json.dumps(self.payload, ensure_ascii=False) if self.payload is not None else None,
            "result": result,
            "err_msg": err,
            "latency_ms": elapsed_ms,
        }
        return self.db.insert("operation_log", rec)


def search_operation_logs(db: QueryExecutor, q: str | None, action: str | None, ts_from: str | None, ts_to: str | None, page: int, size: int):
    where = []
    params = {}
    if q:
        where.append("(payload_json LIKE :q OR after_json LIKE :q)")
        params["q"] = f"%{q}%"
    if action:
        where.append("action = :action")
        params["action"] = action
    if ts_from:
        where.append("ts >= :from")
        params["from"] = ts_from
    if ts_to:
        where.append("ts <= :to")
        params["to"] = ts_to
    wh = " WHERE " + " AND ".join(where) if where else ""
    sql = f"SELECT * FROM operation_log{wh} ORDER BY ts DESC, id DESC LIMIT :limit OFFSET :offset"
    count_sql = f"SELECT COUNT(1) AS cnt FROM operation_log{wh}"
    total = db.select_one(count_sql, params)["cnt"]
    rows = db.select_many(sql, {**params, "limit": size, "offset": (page - 1) * size})
    return total, rows or []
