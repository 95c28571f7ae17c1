"""
Shared fixtures.

MongoDB is replaced by a small in-memory stand-in for the Motor collection
API used by the services (find_one, find/sort/skip/limit/to_list,
count_documents, insert_one, replace_one, distinct).
"""

import os
import re
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

# Fast bcrypt for the API tests, which hash through the configured settings
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_FORMAT", "console")

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from formation_api.core.security import TokenService
from formation_api.services.formation_service import FormationService
from formation_api.services.user_store import UserStore

TEST_SECRET = "dGVzdC1zZWNyZXQta2V5LWZvci11bml0LXRlc3RzLW9ubHktMDEyMzQ1Njc4OQ=="


def _matches(doc, mongo_filter):
    for key, condition in mongo_filter.items():
        if key == "$and":
            if not all(_matches(doc, clause) for clause in condition):
                return False
            continue

        value = doc.get(key)
        if isinstance(condition, dict) and any(k.startswith("$") for k in condition):
            for op, arg in condition.items():
                if op == "$gt":
                    if value is None or not value > arg:
                        return False
                elif op == "$regex":
                    flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
                    if not isinstance(value, str) or not re.search(arg, value, flags):
                        return False
                elif op == "$options":
                    continue
                else:
                    raise NotImplementedError(op)
        elif value != condition:
            return False
    return True


class FakeCursor:
    def __init__(self, docs):
        self._docs = docs
        self._skip = 0
        self._limit = 0

    def sort(self, spec):
        # Stable sort, last key first
        for field, direction in reversed(spec):
            self._docs.sort(
                key=lambda d: (d.get(field) is None, d.get(field)),
                reverse=direction < 0,
            )
        return self

    def skip(self, n):
        self._skip = n
        return self

    def limit(self, n):
        self._limit = n
        return self

    def _window(self):
        docs = self._docs[self._skip:]
        if self._limit:
            docs = docs[: self._limit]
        return docs

    async def to_list(self, length=None):
        docs = self._window()
        return docs[:length] if length else docs

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for doc in self._window():
            yield doc


class FakeCollection:
    def __init__(self, docs=None, unique_fields=()):
        self.docs = []
        self.unique_fields = unique_fields
        self.indexes = []
        for doc in docs or []:
            self._insert(dict(doc))

    def _insert(self, doc):
        for field in self.unique_fields:
            if any(existing.get(field) == doc.get(field) for existing in self.docs):
                raise DuplicateKeyError(f"E11000 duplicate key error: {field}")
        doc.setdefault("_id", ObjectId())
        self.docs.append(doc)
        return doc["_id"]

    async def find_one(self, mongo_filter):
        for doc in self.docs:
            if _matches(doc, mongo_filter):
                return dict(doc)
        return None

    def find(self, mongo_filter=None):
        return FakeCursor([dict(d) for d in self.docs if _matches(d, mongo_filter or {})])

    async def count_documents(self, mongo_filter, limit=None):
        count = sum(1 for d in self.docs if _matches(d, mongo_filter))
        return min(count, limit) if limit else count

    async def insert_one(self, doc):
        inserted_id = self._insert(dict(doc))
        doc["_id"] = inserted_id
        return SimpleNamespace(inserted_id=inserted_id)

    async def replace_one(self, mongo_filter, replacement, upsert=False):
        for i, doc in enumerate(self.docs):
            if _matches(doc, mongo_filter):
                new_doc = dict(replacement)
                new_doc["_id"] = doc["_id"]
                self.docs[i] = new_doc
                return SimpleNamespace(matched_count=1, upserted_id=None)
        if upsert:
            upserted_id = self._insert(dict(replacement))
            return SimpleNamespace(matched_count=0, upserted_id=upserted_id)
        return SimpleNamespace(matched_count=0, upserted_id=None)

    async def distinct(self, field):
        values = []
        for doc in self.docs:
            value = doc.get(field)
            if value is not None and value not in values:
                values.append(value)
        return values

    async def create_index(self, keys, **kwargs):
        self.indexes.append((keys, kwargs))


class FakeDatabase:
    def __init__(self):
        self.collections = {"users": FakeCollection(unique_fields=("email",))}

    def __getitem__(self, name):
        return self.collections.setdefault(name, FakeCollection())

    async def command(self, name):
        return {"ok": 1.0}


class MutableClock:
    """Injectable clock for token expiry tests."""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


SAMPLE_FORMATIONS = [
    {
        "establishmentName": "Lycée Henri IV",
        "establishmentStatus": "Public",
        "region": "Île-de-France",
        "department": "Paris",
        "program": "CPGE",
        "candidateCount": 5000,
        "admittedBacGeneral": 120,
        "admittedBacTechno": 0,
        "admittedBacPro": 0,
        "hasDetailedInfo": True,
        "alternanceAvailable": "Non",
    },
    {
        "establishmentName": "Lycée Louis-le-Grand",
        "establishmentStatus": "Public",
        "region": "Île-de-France",
        "department": "Paris",
        "program": "CPGE",
        "candidateCount": 6000,
        "admittedBacGeneral": 150,
        "admittedBacTechno": 0,
        "admittedBacPro": 0,
        "hasDetailedInfo": True,
        "alternanceAvailable": "Non",
    },
    {
        "establishmentName": "Lycée Saint-Louis",
        "establishmentStatus": "Public",
        "region": "Île-de-France",
        "department": "Paris",
        "program": "CPGE",
        "candidateCount": 2500,
        "admittedBacGeneral": 0,
        "admittedBacTechno": 45,
        "admittedBacPro": 0,
        "hasDetailedInfo": False,
        "alternanceAvailable": "Non",
    },
    {
        "establishmentName": "IUT Lyon 1",
        "establishmentStatus": "Public",
        "region": "Auvergne-Rhône-Alpes",
        "department": "Rhône",
        "program": "BUT",
        "candidateCount": 3000,
        "admittedBacGeneral": 80,
        "admittedBacTechno": 40,
        "admittedBacPro": 5,
        "hasDetailedInfo": False,
        "alternanceAvailable": "Oui",
    },
    {
        "establishmentName": "École de Commerce de Nanterre",
        "establishmentStatus": "Privé sous contrat",
        "region": "Île-de-France",
        "department": "Hauts-de-Seine",
        "program": "BTS",
        "candidateCount": 800,
        "admittedBacGeneral": 10,
        "admittedBacTechno": 20,
        "admittedBacPro": 30,
        "hasDetailedInfo": False,
        "alternanceAvailable": "Oui",
    },
    {
        "establishmentName": "Institut Privé de Toulouse",
        "establishmentStatus": "Privé hors contrat",
        "region": "Occitanie",
        "department": "Haute-Garonne",
        "program": "BTS",
        "candidateCount": 400,
        "admittedBacGeneral": 5,
        "admittedBacTechno": 15,
        "admittedBacPro": 25,
        "hasDetailedInfo": True,
        "alternanceAvailable": "Oui",
    },
]


@pytest.fixture
def clock():
    return MutableClock(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def token_service(clock):
    return TokenService(TEST_SECRET, timedelta(minutes=30), clock=clock)


@pytest.fixture
def users_collection():
    return FakeCollection(unique_fields=("email",))


@pytest.fixture
def user_store(users_collection):
    return UserStore(users_collection)


@pytest.fixture
def formations_collection():
    return FakeCollection(SAMPLE_FORMATIONS)


@pytest.fixture
def formation_service(formations_collection):
    return FormationService(formations_collection)


@pytest.fixture
def fake_db():
    db = FakeDatabase()
    db.collections["formations"] = FakeCollection(SAMPLE_FORMATIONS)
    return db


@pytest.fixture
def collection_factory():
    return FakeCollection
