# Connections/db_mongo.py
import os
from contextlib import contextmanager
from typing import Optional

from pymongo import MongoClient

MONGO_DB_DEFAULT = "sentinel"


def get_client(mongo_uri: Optional[str] = None) -> MongoClient:
    """
    Open a client and ping the server so unreachable hosts or bad credentials
    fail here rather than halfway through the bootstrap.
    """
    mongo_uri = (mongo_uri or os.getenv("MONGO_URI") or "").strip()
    if not mongo_uri:
        raise RuntimeError("MONGO_URI is not set")

    timeout_ms = int(os.getenv("MONGO_TIMEOUT_MS", "5000"))
    client = MongoClient(mongo_uri, serverSelectionTimeoutMS=timeout_ms)
    try:
        client.admin.command("ping")
    except Exception as e:
        client.close()
        raise RuntimeError(f"MongoDB ping failed: {e}") from e
    return client


@contextmanager
def get_db(mongo_uri: Optional[str] = None, db_name: Optional[str] = None):
    client = get_client(mongo_uri)
    try:
        yield client[db_name or os.getenv("MONGO_DB", MONGO_DB_DEFAULT)]
    finally:
        client.close()
