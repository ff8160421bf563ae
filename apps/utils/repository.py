"""
Persistence collaborators.

Services talk to a ``DocumentRepository`` instead of reaching for
``Document.objects`` directly, so the same code path runs against MongoDB
(``MongoRepository``) or against the process-local ``InMemoryRepository``.
The backend is chosen by the ``PERSISTENCE_BACKEND`` setting; the in-memory
backend is the degraded mode used when no database is available, and the
backend the test-suite runs on.
"""
from __future__ import annotations

import copy
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional, Type

import mongoengine as me
from bson import ObjectId
from bson.errors import InvalidId
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from mongoengine.connection import ConnectionFailure
from pymongo.errors import PyMongoError

from config.mongodb import ensure_mongodb_connection

from .exceptions import InvalidRequest, PersistenceUnavailable

BACKEND_MONGO = "mongo"
BACKEND_MEMORY = "memory"

def parse_object_id(value) -> Optional[ObjectId]:
    if isinstance(value, ObjectId):
        return value
    if value is None:
        return None
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None

@contextmanager
def translate_errors() -> Iterator[None]:
    try:
        yield
    except me.ValidationError as exc:
        raise InvalidRequest(str(exc)) from exc
    except (ConnectionFailure, PyMongoError) as exc:
        raise PersistenceUnavailable() from exc

def _matches(document: me.Document, criteria: Dict[str, Any]) -> bool:
    for key, expected in criteria.items():
        name, _, operator = key.partition("__")
        actual = document.id if name in ("id", "pk") else getattr(document, name, None)
        if operator == "":
            if actual != expected:
                return False
        elif operator == "ne":
            if actual == expected:
                return False
        elif operator == "in":
            if actual not in expected:
                return False
        else:
            raise ValueError(f"Unsupported lookup: {key}")
    return True

def _sort_key(field: str):
    def key(document):
        value = getattr(document, field, None)
        return (value is None, value)
    return key

class DocumentRepository:

    def __init__(self, document: Type[me.Document]) -> None:
        self.document = document

    def get(self, pk) -> Optional[me.Document]:
        raise NotImplementedError

    def filter(self, order_by: str | None = None, **criteria) -> List[me.Document]:
        raise NotImplementedError

    def first(self, **criteria) -> Optional[me.Document]:
        matches = self.filter(**criteria)
        return matches[0] if matches else None

    def exists(self, **criteria) -> bool:
        return self.first(**criteria) is not None

    def add(self, document: me.Document) -> me.Document:
        raise NotImplementedError

    def save(self, document: me.Document) -> me.Document:
        raise NotImplementedError

    def delete(self, document: me.Document) -> None:
        raise NotImplementedError

    def update(self, document: me.Document, changes: Dict[str, Any]) -> me.Document:
        """Set ``changes`` on the stored record in place, leaving other fields and ``version`` alone."""
        raise NotImplementedError

    def compare_and_set(self, document: me.Document, expected: Dict[str, Any], changes: Dict[str, Any]) -> bool:
        """
        Apply ``changes`` only if the stored record still matches ``expected``.

        Documents that carry a ``version`` field get it incremented as part of
        the same write. On success ``document`` is refreshed from storage.
        """
        raise NotImplementedError

class MongoRepository(DocumentRepository):

    def _objects(self, **criteria):
        ensure_mongodb_connection()
        return self.document.objects(**criteria)

    def get(self, pk):
        object_id = parse_object_id(pk)
        if object_id is None:
            return None
        with translate_errors():
            return self._objects(id=object_id).first()

    def filter(self, order_by=None, **criteria):
        with translate_errors():
            queryset = self._objects(**criteria)
            if order_by:
                queryset = queryset.order_by(order_by)
            return list(queryset)

    def add(self, document):
        with translate_errors():
            ensure_mongodb_connection()
            document.save(force_insert=True)
        return document

    def save(self, document):
        with translate_errors():
            ensure_mongodb_connection()
            document.save()
        return document

    def delete(self, document):
        with translate_errors():
            ensure_mongodb_connection()
            document.delete()

    def update(self, document, changes):
        updates = {f"set__{field}": value for field, value in changes.items()}
        if "updated_at" in self.document._fields:
            updates["set__updated_at"] = datetime.utcnow()
        with translate_errors():
            self._objects(id=document.id).update_one(**updates)
            document.reload()
        return document

    def compare_and_set(self, document, expected, changes):
        updates = {f"set__{field}": value for field, value in changes.items()}
        if "updated_at" in self.document._fields:
            updates["set__updated_at"] = datetime.utcnow()
        if "version" in self.document._fields:
            updates["inc__version"] = 1
        with translate_errors():
            updated = self._objects(id=document.id, **expected).update_one(**updates)
            if updated:
                document.reload()
        return bool(updated)

class InMemoryStore:

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.collections: Dict[str, Dict[ObjectId, Any]] = {}

    def collection(self, document: Type[me.Document]) -> Dict[ObjectId, Any]:
        return self.collections.setdefault(document.__name__, {})

    def clear(self) -> None:
        with self.lock:
            self.collections.clear()

memory_store = InMemoryStore()

def reset_memory_stores() -> None:
    memory_store.clear()

class InMemoryRepository(DocumentRepository):

    def __init__(self, document, store: InMemoryStore | None = None) -> None:
        super().__init__(document)
        self.store = store or memory_store

    @property
    def rows(self) -> Dict[ObjectId, Any]:
        return self.store.collection(self.document)

    def _load(self, son) -> me.Document:
        return self.document._from_son(copy.deepcopy(son))

    def _store(self, document) -> None:
        with translate_errors():
            document.validate()
        self._check_unique(document)
        self.rows[document.id] = document.to_mongo()

    def _check_unique(self, document) -> None:
        for name, field in self.document._fields.items():
            if not getattr(field, "unique", False):
                continue
            value = getattr(document, name, None)
            if value is None:
                continue
            for pk, son in self.rows.items():
                if pk != document.id and son.get(field.db_field) == field.to_mongo(value):
                    raise me.NotUniqueError(f"Duplicate value for {name}: {value}")

    def _touch(self, document) -> None:
        if "updated_at" in self.document._fields:
            document.updated_at = datetime.utcnow()

    def get(self, pk):
        object_id = parse_object_id(pk)
        if object_id is None:
            return None
        with self.store.lock:
            son = self.rows.get(object_id)
            return self._load(son) if son is not None else None

    def filter(self, order_by=None, **criteria):
        with self.store.lock:
            documents = [self._load(son) for son in self.rows.values()]
        matches = [document for document in documents if _matches(document, criteria)]
        if order_by:
            field = order_by.lstrip("-")
            matches.sort(key=_sort_key(field), reverse=order_by.startswith("-"))
        return matches

    def add(self, document):
        with self.store.lock:
            if document.id is None:
                document.id = ObjectId()
            self._touch(document)
            self._store(document)
        return document

    def save(self, document):
        if document.id is None:
            return self.add(document)
        with self.store.lock:
            self._touch(document)
            self._store(document)
        return document

    def delete(self, document):
        with self.store.lock:
            self.rows.pop(document.id, None)

    def _refresh(self, document) -> None:
        refreshed = self._load(self.rows[document.id])
        for name in self.document._fields:
            setattr(document, name, getattr(refreshed, name))

    def update(self, document, changes):
        with self.store.lock:
            son = self.rows.get(document.id)
            if son is None:
                return document
            current = self._load(son)
            for field, value in changes.items():
                setattr(current, field, value)
            self._touch(current)
            self._store(current)
            self._refresh(document)
        return document

    def compare_and_set(self, document, expected, changes):
        with self.store.lock:
            son = self.rows.get(document.id)
            if son is None:
                return False
            current = self._load(son)
            if not _matches(current, expected):
                return False
            for field, value in changes.items():
                setattr(current, field, value)
            if "version" in self.document._fields:
                current.version = (current.version or 0) + 1
            self._touch(current)
            self._store(current)
            self._refresh(document)
        return True

def get_repository(
    document: Type[me.Document],
    mongo_class: Type[MongoRepository] = MongoRepository,
    memory_class: Type[InMemoryRepository] = InMemoryRepository,
) -> DocumentRepository:
    backend = getattr(settings, "PERSISTENCE_BACKEND", BACKEND_MONGO)
    if backend == BACKEND_MEMORY:
        return memory_class(document)
    if backend == BACKEND_MONGO:
        return mongo_class(document)
    raise ImproperlyConfigured(f"Unknown PERSISTENCE_BACKEND: {backend!r}")
