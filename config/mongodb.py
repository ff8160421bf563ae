from __future__ import annotations

import logging

import certifi
import mongoengine
from django.conf import settings
from mongoengine import connection

logger = logging.getLogger(__name__)

def connect_mongodb() -> None:
    mongo_uri = getattr(settings, "MONGO_URI", "mongodb://localhost:27017/stitchline")
    db_name = getattr(settings, "MONGODB_DB_NAME", "stitchline")

    connect_kwargs = {
        "db": db_name,
        "host": mongo_uri,
        "alias": "default",
    }
    if mongo_uri.startswith("mongodb+srv://") or "tls=true" in mongo_uri.lower():
        connect_kwargs["tlsCAFile"] = certifi.where()

    try:
        mongoengine.connect(**connect_kwargs)
        logger.info("Connected to MongoDB: %s", db_name)
    except Exception as e:
        logger.error("MongoDB connection error: %s", e)
        raise

def ensure_mongodb_connection() -> None:
    try:
        connection.get_connection()
    except connection.ConnectionFailure:
        connect_mongodb()
