"""
Key-value record store.

Each key holds UTF-8 JSON text, mirroring browser local storage: collections are
JSON arrays written back whole, the session key holds a single serialized user.
Callers own their read-modify-write sequences; there is no locking here.
"""
import json
import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from .models.storage_entry import StorageEntry
from .utils.error_handlers import StorageCorruptionError

logger = logging.getLogger(__name__)

USERS_KEY = "hr_nexus_users"
CANDIDATES_KEY = "hr_nexus_candidates"
CV_KEY = "hr_nexus_cvs"
ACTIVITY_KEY = "hr_nexus_activity"
CURRENT_USER_KEY = "current_user"


def get_item(db: Session, key: str) -> str | None:
    # Select the column rather than the entity so a long-lived session never serves a stale value.
    return db.execute(select(StorageEntry.value).where(StorageEntry.key == key)).scalar_one_or_none()


def set_item(db: Session, key: str, value: str) -> None:
    entry = db.get(StorageEntry, key)
    if entry is None:
        db.add(StorageEntry(key=key, value=value))
    else:
        entry.value = value
    db.commit()


def remove_item(db: Session, key: str) -> None:
    entry = db.get(StorageEntry, key)
    if entry is not None:
        db.delete(entry)
        db.commit()


def load_json(db: Session, key: str) -> Any | None:
    raw = get_item(db, key)
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error("Unparseable JSON under key=%s: %s", key, e)
        raise StorageCorruptionError(key, f"invalid JSON ({e.msg})") from e


def read_collection(db: Session, key: str) -> list[dict[str, Any]]:
    """Whole collection under `key`; empty on first use."""
    data = load_json(db, key)
    if data is None:
        return []
    if not isinstance(data, list):
        logger.error("Collection key=%s holds %s, expected a JSON array", key, type(data).__name__)
        raise StorageCorruptionError(key, "expected a JSON array")
    return data


def write_collection(db: Session, key: str, records: list[dict[str, Any]]) -> None:
    """Replace the whole collection in one commit."""
    set_item(db, key, json.dumps(list(records), ensure_ascii=False))
