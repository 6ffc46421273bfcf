"""
This module contains pytest fixtures and configuration for testing.
"""
import copy
import sys
import uuid
from collections import defaultdict
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import patch

import pytest
import pytz
from fastapi.testclient import TestClient
from firebase_admin import firestore

# Add the project's root directory to the system path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

# Import the main app
from main import app
from sales_dashboard.common.live import LiveSnapshots, get_live_snapshots

PRAGUE = pytz.timezone("Europe/Prague")


class FakeDocumentSnapshot:
    """Read-only view of a stored document."""

    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data) if self._data is not None else None


class FakeDocumentReference:
    """Document reference supporting set (with merge), update and get."""

    def __init__(self, db, path, doc_id):
        self._db = db
        self._path = path
        self.id = doc_id

    @property
    def _documents(self):
        return self._db.documents[self._path]

    def set(self, data, merge=False):
        current = self._documents.get(self.id, {}) if merge else {}
        self._documents[self.id] = self._db.apply(dict(current), data)

    def update(self, data):
        if self.id not in self._documents:
            raise KeyError(f"No document to update: {self._path}/{self.id}")
        self._documents[self.id] = self._db.apply(dict(self._documents[self.id]), data)

    def get(self):
        return FakeDocumentSnapshot(self.id, self._documents.get(self.id))


class FakeCollectionReference:
    def __init__(self, db, path):
        self._db = db
        self._path = path

    def document(self, doc_id=None):
        return FakeDocumentReference(self._db, self._path, doc_id or uuid.uuid4().hex)

    def add(self, data):
        doc_ref = self.document()
        doc_ref.set(data)
        return datetime.now(timezone.utc), doc_ref

    def stream(self):
        for doc_id, data in list(self._db.documents[self._path].items()):
            yield FakeDocumentSnapshot(doc_id, copy.deepcopy(data))


class FakeFirestore:
    """
    Minimal in-memory Firestore client.

    Honours ``SERVER_TIMESTAMP`` and ``DELETE_FIELD`` the way the real service does.
    """

    def __init__(self):
        self.documents = defaultdict(dict)

    def collection(self, path):
        return FakeCollectionReference(self, path)

    def apply(self, current, changes):
        for key, value in changes.items():
            if value is firestore.firestore.DELETE_FIELD:
                current.pop(key, None)
            elif value is firestore.firestore.SERVER_TIMESTAMP:
                current[key] = datetime.now(timezone.utc)
            else:
                current[key] = value
        return current


@pytest.fixture
def tz():
    return PRAGUE


@pytest.fixture
def fake_firestore():
    """
    Replace the Firestore client with an in-memory fake.
    """
    db = FakeFirestore()
    with patch('firebase_admin.firestore.client') as mock:
        mock.return_value = db
        yield db


@pytest.fixture
def live():
    """
    Live snapshot state without Firestore listeners; tests load data directly.
    """
    return LiveSnapshots(default_exchange_rate=6.0)


@pytest.fixture
def client(live):
    """
    Create a test client whose routes read from the ``live`` fixture.
    """
    app.dependency_overrides[get_live_snapshots] = lambda: live
    yield TestClient(app)
    app.dependency_overrides.clear()
