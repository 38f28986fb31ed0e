from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import sessionmaker

from .db import SessionLocal
from .models import StorageItemModel


class LocalStorage:
    """String key/value storage backed by the ``storage_items`` table.

    Every call opens its own session, so a failed write never leaves a
    half-applied transaction behind for the next call.
    """

    def __init__(self, session_factory: sessionmaker = SessionLocal) -> None:
        self._session_factory = session_factory

    def get_item(self, key: str) -> Optional[str]:
        with self._session_factory() as session:
            item = session.get(StorageItemModel, key)
            return item.value if item else None

    def set_item(self, key: str, value: str) -> None:
        with self._session_factory() as session:
            item = session.get(StorageItemModel, key)
            if item is None:
                session.add(StorageItemModel(key=key, value=value))
            else:
                item.value = value
            session.commit()
