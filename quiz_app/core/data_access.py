# core/data_access.py

import json
import logging
import os
import re
import tempfile
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, MutableMapping, Optional

from quiz_app.core.models import QuestionProgress, UserRecord, ModuleProgress, question_id

logger = logging.getLogger(__name__)


CLIENT_ID_PARAM = "cid"
_CLIENT_ID_RE = re.compile(r"^[A-Za-z0-9_-]{8,64}$")


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ============================================================
# PER-BROWSER KEYS
# ============================================================

def client_id_from(params: MutableMapping[str, str], name: str = CLIENT_ID_PARAM) -> str:
    """
    Read the browser's id from the query params, or mint one and write it
    back so the next reload carries it. Ids that are not plain tokens are
    replaced, since they end up in a file name.
    """
    client_id = params.get(name)
    if not client_id or not _CLIENT_ID_RE.match(client_id):
        client_id = uuid.uuid4().hex
        params[name] = client_id
        logger.info("New browser session %s", client_id)
    return client_id


def client_storage_key(storage_key: str, client_id: str) -> str:
    return f"{storage_key}_{client_id}"


# ============================================================
# KEY-VALUE BACKENDS
# ============================================================

class KeyValueStore:
    """String key -> string value storage, the local-storage contract."""

    def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_item(self, key: str, value: str):
        raise NotImplementedError

    def remove_item(self, key: str):
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    def __init__(self, items: Optional[Dict[str, str]] = None):
        self.items = dict(items or {})

    def get_item(self, key):
        return self.items.get(key)

    def set_item(self, key, value):
        self.items[key] = value

    def remove_item(self, key):
        self.items.pop(key, None)


class JsonFileStore(KeyValueStore):
    """One ``<key>.json`` file per key inside ``directory``."""

    def __init__(self, directory: str):
        self.directory = directory

    def path_for(self, key: str) -> str:
        return os.path.join(self.directory, f"{key}.json")

    def get_item(self, key):
        path = self.path_for(key)
        if not os.path.exists(path):
            return None
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    def set_item(self, key, value):
        os.makedirs(self.directory, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp, self.path_for(key))
        except BaseException:
            if os.path.exists(tmp):
                os.remove(tmp)
            raise

    def remove_item(self, key):
        path = self.path_for(key)
        if os.path.exists(path):
            os.remove(path)


# ============================================================
# USER DATA
# ============================================================

class UserDataStore:
    """
    Owns the single UserRecord of an app session and keeps it in sync
    with the key-value store. Username and outcome changes are written
    through; the autosave task writes whatever else is still unsaved
    (placeholder top-up). A store with nothing unsaved never writes, so an
    older session on the same key cannot put back stale progress.
    """

    def __init__(self, kv: KeyValueStore, storage_key: str, module_ids: Iterable[str],
                 now: Callable[[], str] = utc_now_iso):
        self.kv = kv
        self.storage_key = storage_key
        self.module_ids = list(module_ids)
        self.now = now
        self.record = UserRecord.fresh(self.module_ids)
        self.dirty = False

    # ------------------------------
    # LOAD / SAVE / CLEAR
    # ------------------------------

    def load(self) -> bool:
        """Replace the in-memory record with the stored one, if it is usable."""
        saved = self.kv.get_item(self.storage_key)
        if not saved:
            return False

        try:
            parsed = json.loads(saved)
        except ValueError as e:
            logger.warning("Stored user data under %r is not valid JSON: %s", self.storage_key, e)
            return False

        if not isinstance(parsed, dict):
            logger.warning("Stored user data under %r is not an object", self.storage_key)
            return False
        if not parsed.get("username") or not isinstance(parsed.get("progress"), dict):
            logger.info("Stored user data under %r has no username/progress, ignoring", self.storage_key)
            return False

        try:
            record = UserRecord.from_dict(parsed)
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning("Could not read stored progress for %r: %s", self.storage_key, e)
            return False

        record.ensure_modules(self.module_ids)
        self.record = record
        self.dirty = False
        logger.info("Loaded user data for %s", record.username)
        return True

    def save(self):
        self.record.last_session = self.now()
        self.kv.set_item(self.storage_key, json.dumps(self.record.to_dict(), ensure_ascii=False))
        self.dirty = False

    def autosave(self) -> bool:
        if not self.dirty:
            return False
        self.save()
        return True

    def clear(self):
        self.record = UserRecord.fresh(self.module_ids)
        self.dirty = False
        self.kv.remove_item(self.storage_key)
        logger.info("User data cleared")

    # ------------------------------
    # USERNAME
    # ------------------------------

    def set_username(self, username: str):
        self.record.username = username
        self.save()

    def get_username(self) -> str:
        return self.record.username

    # ------------------------------
    # QUESTION PROGRESS
    # ------------------------------

    def get_module_progress(self, module_id: str) -> ModuleProgress:
        return self.record.progress.get(module_id, {})

    def ensure_question_progress(self, module_id: str, count: int):
        """Create placeholders for questions 0..count-1 that have none yet."""
        entries = self.record.progress.setdefault(module_id, {})
        for index in range(count):
            qid = question_id(module_id, index)
            if qid not in entries:
                entries[qid] = QuestionProgress()
                self.dirty = True

    def update_question_progress(self, module_id: str, index: int, is_correct: bool) -> QuestionProgress:
        entries = self.record.progress.setdefault(module_id, {})
        progress = entries.setdefault(question_id(module_id, index), QuestionProgress())
        progress.record(is_correct, self.now())
        self.save()
        return progress
