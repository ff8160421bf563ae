"""
Default-flag swap for measurement sets.

At most one set per owner carries ``is_default``. Flipping it on one record
and off on the siblings has to be a single unit of work, so each backend
provides ``set_default`` on top of the generic repository operations.
"""
from __future__ import annotations

from datetime import datetime

from mongoengine.connection import get_connection

from apps.utils.repository import (
    InMemoryRepository,
    MongoRepository,
    get_repository,
    translate_errors,
)
from config.mongodb import ensure_mongodb_connection

from .mongo_models import MeasurementSet

class MongoMeasurementRepository(MongoRepository):

    def set_default(self, measurement: MeasurementSet) -> MeasurementSet:
        # Multi-document transactions need a replica set or sharded cluster.
        with translate_errors():
            ensure_mongodb_connection()
            collection = self.document._get_collection()
            now = datetime.utcnow()
            with get_connection().start_session() as session:
                def swap(txn_session):
                    collection.update_many(
                        {"user_id": measurement.user_id, "_id": {"$ne": measurement.id}, "is_default": True},
                        {"$set": {"is_default": False, "updated_at": now}},
                        session=txn_session,
                    )
                    collection.update_one(
                        {"_id": measurement.id},
                        {"$set": {"is_default": True, "updated_at": now}},
                        session=txn_session,
                    )

                session.with_transaction(swap)
            measurement.reload()
        return measurement

class InMemoryMeasurementRepository(InMemoryRepository):

    def set_default(self, measurement: MeasurementSet) -> MeasurementSet:
        with self.store.lock:
            for sibling in self.filter(user_id=measurement.user_id, is_default=True):
                if sibling.id != measurement.id:
                    sibling.is_default = False
                    self.save(sibling)
            measurement.is_default = True
            self.save(measurement)
        return measurement

def measurement_repository():
    return get_repository(
        MeasurementSet,
        mongo_class=MongoMeasurementRepository,
        memory_class=InMemoryMeasurementRepository,
    )
