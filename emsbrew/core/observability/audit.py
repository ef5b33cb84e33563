import json
import logging
import logging.handlers
import time
from pathlib import Path
from typing import Any, Dict, Optional


# 10MB per file, 5 backups
_MAX_BYTES = 10 * 1024 * 1024
_BACKUP_COUNT = 5

_handler_cache: Dict[str, logging.Handler] = {}


def _now_ms() -> int:
    return int(time.time() * 1000)


def _get_rotating_handler(audit_path: Path) -> logging.Handler:
    key = str(audit_path.resolve())
    if key not in _handler_cache:
        audit_path.parent.mkdir(parents=True, exist_ok=True)
        h = logging.handlers.RotatingFileHandler(
            str(audit_path),
            maxBytes=_MAX_BYTES,
            backupCount=_BACKUP_COUNT,
            encoding="utf-8",
        )
        h.setFormatter(logging.Formatter("%(message)s"))
        _handler_cache[key] = h
    return _handler_cache[key]


def close_audit_handlers() -> None:
    for h in _handler_cache.values():
        h.close()
    _handler_cache.clear()


def audit_event(
    event_type: str,
    *,
    formula: str,
    version_tag: str,
    plan_id: Optional[str],
    state: Optional[str],
    audit_path: Path,
    extra: Optional[Dict[str, Any]] = None,
) -> None:
    record: Dict[str, Any] = {
        "ts_ms": _now_ms(),
        "type": event_type,
        "formula": formula,
        "version_tag": version_tag,
        "plan_id": plan_id,
        "state": state,
    }
    if extra:
        record["extra"] = extra

    line = json.dumps(record, separators=(",", ":"), ensure_ascii=False)

    handler = _get_rotating_handler(audit_path)
    log_record = logging.LogRecord(
        name="emsbrew.audit",
        level=logging.INFO,
        pathname="",
        lineno=0,
        msg=line,
        args=(),
        exc_info=None,
    )
    handler.emit(log_record)
    handler.flush()
