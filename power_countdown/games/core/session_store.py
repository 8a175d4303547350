# power_countdown/games/core/session_store.py
from __future__ import annotations
from collections import OrderedDict
from typing import Callable, Generic, Optional, TypeVar
import logging
import threading
import uuid

logger = logging.getLogger(__name__)

T = TypeVar("T")

SESSION_COOKIE = "session_id"


def get_or_create_session_id(req) -> str:
    """
    Stable per-user (and optionally per-tab) session key:
      cookie 'session_id' (if present) else a new uuid4,
      optionally suffixed with ':<client_id>' (arg/body/header) to isolate tabs.
    """
    base = req.cookies.get(SESSION_COOKIE) or str(uuid.uuid4())

    client = req.args.get("client_id")
    if not client and req.is_json:
        j = req.get_json(silent=True) or {}
        if isinstance(j, dict):
            client = j.get("client_id")
    if not client:
        client = req.headers.get("X-Client-Session")

    if client:
        return f"{base}:{str(client)[:64]}"
    return base


def base_session_id(session_id: str) -> str:
    return session_id.split(":", 1)[0]


class SessionRegistry(Generic[T]):
    """
    In-memory per-process store: session_id -> per-player object.
    Nothing is persisted; a restart forgets every game. Holds at most
    `max_size` players, evicting the least recently used one.
    """

    def __init__(self, factory: Callable[[str], T], max_size: int = 1000):
        self._factory = factory
        self._max_size = max(1, int(max_size))
        self._items: "OrderedDict[str, T]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, session_id: str) -> T:
        with self._lock:
            item = self._items.get(session_id)
            if item is None:
                item = self._factory(session_id)
                self._items[session_id] = item
                while len(self._items) > self._max_size:
                    evicted, _ = self._items.popitem(last=False)
                    logger.info("evicted idle session %s", evicted)
            else:
                self._items.move_to_end(session_id)
            return item

    def peek(self, session_id: str) -> Optional[T]:
        """Existing player or None; never creates one."""
        with self._lock:
            item = self._items.get(session_id)
            if item is not None:
                self._items.move_to_end(session_id)
            return item

    def drop(self, session_id: str) -> Optional[T]:
        with self._lock:
            return self._items.pop(session_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
