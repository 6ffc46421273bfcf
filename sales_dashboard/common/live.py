"""
Live snapshot state fed by Firestore real-time listeners.

One ``LiveSnapshots`` instance owns the transactions, returns and history lists
and the exchange rate. Every listener callback swaps in a new immutable
``DashboardSnapshot``; readers only ever see complete snapshots.
"""
import logging
import threading
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional, Tuple

from fastapi import Request

from sales_dashboard.common.config import DEFAULT_EXCHANGE_RATE
from sales_dashboard.common.firebase import (
    HISTORY_COLLECTION, RETURNS_COLLECTION, SETTINGS_COLLECTION, TRANSACTIONS_COLLECTION,
    collection_path, get_firestore_client
)
from sales_dashboard.settings.services import extract_exchange_rate

logger = logging.getLogger(__name__)

LIVE_COLLECTIONS = (
    TRANSACTIONS_COLLECTION,
    RETURNS_COLLECTION,
    HISTORY_COLLECTION,
    SETTINGS_COLLECTION,
)


@dataclass(frozen=True)
class DashboardSnapshot:
    """Everything the dashboard reads, as of the last listener update."""
    transactions: Tuple[Dict[str, Any], ...] = ()
    returns: Tuple[Dict[str, Any], ...] = ()
    history: Tuple[Dict[str, Any], ...] = ()
    exchange_rate: float = DEFAULT_EXCHANGE_RATE


class LiveSnapshots:
    """
    Subscribes to the dashboard collections and keeps the latest snapshot.

    Use as a context manager so every listener is released on teardown::

        with LiveSnapshots(db, app_id="business-manager") as live:
            live.current().transactions
    """

    def __init__(self, db=None, app_id: Optional[str] = None,
                 default_exchange_rate: float = DEFAULT_EXCHANGE_RATE):
        self._db = db
        self._app_id = app_id
        self._snapshot = DashboardSnapshot(exchange_rate=default_exchange_rate)
        self._lock = threading.Lock()
        self._watches: List[Tuple[str, Any]] = []

    def current(self) -> DashboardSnapshot:
        return self._snapshot

    @property
    def active(self) -> bool:
        return bool(self._watches)

    def start(self) -> 'LiveSnapshots':
        """Attach one listener per collection."""
        db = self._db or get_firestore_client()
        for name in LIVE_COLLECTIONS:
            collection_ref = db.collection(collection_path(name, self._app_id))
            watch = collection_ref.on_snapshot(self._listener(name))
            self._watches.append((name, watch))
            logger.info("Subscribed to %s", name)
        return self

    def close(self) -> None:
        """Detach every listener. Safe to call more than once."""
        while self._watches:
            name, watch = self._watches.pop()
            try:
                watch.unsubscribe()
                logger.info("Unsubscribed from %s", name)
            except Exception as e:
                logger.error("Failed to unsubscribe from %s: %s", name, e)

    def __enter__(self) -> 'LiveSnapshots':
        try:
            return self.start()
        except Exception:
            self.close()
            raise

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.close()
        return False

    def _listener(self, name: str):
        def on_snapshot(documents, changes, read_time):
            # Runs on a Firestore watch thread; a failure keeps the last good list
            try:
                records = [{"id": doc.id, **(doc.to_dict() or {})} for doc in documents]
                self.load(name, records)
            except Exception as e:
                logger.error("%s snapshot error: %s", name, e)
        return on_snapshot

    def load(self, name: str, records: Iterable[Dict[str, Any]]) -> DashboardSnapshot:
        """
        Replace one collection's contents with ``records``.

        Args:
            name: One of the live collection names
            records: Plain record dictionaries (with ``id``)

        Returns:
            The new snapshot
        """
        if name not in LIVE_COLLECTIONS:
            raise ValueError(f"Unknown collection: {name}")

        records = tuple(records)
        with self._lock:
            current = self._snapshot
            if name == SETTINGS_COLLECTION:
                updated = replace(current, exchange_rate=extract_exchange_rate(records, current.exchange_rate))
            else:
                updated = replace(current, **{name: records})
            self._snapshot = updated

        logger.debug("%s snapshot: %d documents", name, len(records))
        return updated


def get_live_snapshots(request: Request) -> LiveSnapshots:
    """Dependency returning the application's live snapshot state."""
    return request.app.state.live
