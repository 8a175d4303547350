# power_countdown/games/core/store_registry.py
from __future__ import annotations
from typing import Callable, TypeVar
from flask import current_app

T = TypeVar("T")


def get_store(key: str, factory: Callable[[], T]) -> T:
    """One shared object per app (puzzle source, session registry), kept in app.extensions."""
    ext = getattr(current_app, "extensions", None)
    if ext is None:
        current_app.extensions = {}
        ext = current_app.extensions
    store: T | None = ext.get(key)
    if store is None:
        store = factory()
        ext[key] = store
    return store
